import itertools

import pytest

from gping.colors import Color, Colors, parse_color


def test_named_colors():
    assert parse_color("red") == Color(name="red")
    assert parse_color("Light-Red") == Color(name="lightred")
    assert parse_color("dark_gray") == Color(name="darkgray")


def test_name_aliases():
    assert parse_color("grey") == parse_color("gray")
    assert parse_color("bright-blue") == parse_color("light-blue")


def test_hex_color():
    assert parse_color("#ff0080") == Color(rgb=(255, 0, 128))


def test_index_color():
    assert parse_color("42") == Color(index=42)


@pytest.mark.parametrize("bad", ["nope", "#12345", "#gg0000", "256", ""])
def test_invalid_colors(bad):
    with pytest.raises(ValueError):
        parse_color(bad)


def test_given_then_automatic():
    colors = list(itertools.islice(Colors(["red", "#000000"]), 4))
    assert colors[:2] == [Color(name="red"), Color(rgb=(0, 0, 0))]
    assert colors[2:] == [Color(index=2), Color(index=3)]


def test_automatic_skips_used_indices():
    colors = list(itertools.islice(Colors(["2"]), 3))
    assert colors == [Color(index=2), Color(index=3), Color(index=4)]


def test_automatic_colors_are_distinct():
    colors = list(itertools.islice(Colors([]), 50))
    assert len(set(colors)) == len(colors)


def test_colors_run_out():
    colors = list(Colors([]))
    assert colors[0] == Color(index=2)
    assert colors[-1] == Color(index=255)


def test_invalid_color_code_message():
    colors = Colors(["red", "nope"])
    assert next(colors) == Color(name="red")
    with pytest.raises(ValueError, match="Invalid color code: `nope`"):
        next(colors)