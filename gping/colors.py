"""Terminal colours for graph entries, given by name or picked automatically."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator

_NAMED = frozenset(
    {
        "reset",
        "black",
        "red",
        "green",
        "yellow",
        "blue",
        "magenta",
        "cyan",
        "gray",
        "darkgray",
        "lightred",
        "lightgreen",
        "lightyellow",
        "lightblue",
        "lightmagenta",
        "lightcyan",
        "white",
    }
)

_REPLACEMENTS = (
    ("bright", "light"),
    ("grey", "gray"),
    ("silver", "gray"),
    ("lightblack", "darkgray"),
    ("lightwhite", "white"),
    ("lightgray", "white"),
)

_HEX_RE = re.compile(r"#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})")
_INDEX_RE = re.compile(r"\+?[0-9]+")

_FIRST_AUTO_INDEX = 2
_MAX_INDEX = 255


@dataclass(frozen=True)
class Color:
    """A named colour, a 256-colour palette index, or an RGB triple."""

    name: str | None = None
    index: int | None = None
    rgb: tuple[int, int, int] | None = None


def parse_color(name: str) -> Color:
    """Parse a colour name, palette index or ``#RRGGBB`` code."""
    normalized = name.lower()
    for char in " -_":
        normalized = normalized.replace(char, "")
    for old, new in _REPLACEMENTS:
        normalized = normalized.replace(old, new)
    if normalized in _NAMED:
        return Color(name=normalized)

    if _INDEX_RE.fullmatch(name) and int(name) <= _MAX_INDEX:
        return Color(index=int(name))

    match = _HEX_RE.fullmatch(name)
    if match:
        red, green, blue = (int(part, 16) for part in match.groups())
        return Color(rgb=(red, green, blue))

    raise ValueError(f"Failed to parse Colors: {name!r}")


class Colors(Iterator[Color]):
    """Yields the requested colours in order, then unused palette colours."""

    def __init__(self, color_names: Iterable[str]):
        self._names = iter(color_names)
        self._used: list[Color] = []
        self._indices = iter(range(_FIRST_AUTO_INDEX, _MAX_INDEX + 1))

    def __iter__(self) -> Colors:
        return self

    def __next__(self) -> Color:
        for name in self._names:
            try:
                color = parse_color(name)
            except ValueError as exc:
                raise ValueError(f"Invalid color code: `{name}`") from exc
            self._remember(color)
            return color

        for index in self._indices:
            color = Color(index=index)
            if color not in self._used:
                self._used.append(color)
                return color
        raise StopIteration

    def _remember(self, color: Color) -> None:
        if color not in self._used:
            self._used.append(color)