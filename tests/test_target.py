import ipaddress

from gping.pinger.target import IPVersion, Target


def test_any_with_ipv4_literal():
    target = Target.new_any("127.0.0.1")
    assert target.ip == ipaddress.IPv4Address("127.0.0.1")
    assert target.domain is None
    assert target.is_ipv6() is False
    assert str(target) == "127.0.0.1"


def test_any_with_ipv6_literal():
    target = Target.new_any("::1")
    assert target.ip == ipaddress.IPv6Address("::1")
    assert target.is_ipv6() is True
    assert str(target) == "::1"


def test_any_with_hostname():
    target = Target.new_any("example.com")
    assert target.ip is None
    assert target.domain == "example.com"
    assert target.version is IPVersion.ANY
    assert target.is_ipv6() is False
    assert str(target) == "example.com"


def test_ipv4_constructor_rejects_ipv6_literal_as_ip():
    target = Target.new_ipv4("::1")
    assert target.ip is None
    assert target.version is IPVersion.V4
    assert target.is_ipv6() is False
    assert str(target) == "::1"


def test_ipv6_constructor_with_hostname():
    target = Target.new_ipv6("example.com")
    assert target.version is IPVersion.V6
    assert target.is_ipv6() is True


def test_ipv6_constructor_with_ipv4_literal_is_hostname():
    target = Target.new_ipv6("10.0.0.1")
    assert target.ip is None
    assert target.domain == "10.0.0.1"
    assert target.is_ipv6() is True


def test_ipv4_constructor_with_ipv4_literal():
    target = Target.new_ipv4("10.0.0.1")
    assert target.ip == ipaddress.IPv4Address("10.0.0.1")
    assert target.is_ipv6() is False


def test_non_string_values_are_stringified():
    target = Target.new_any(5)
    assert target.ip is None
    assert target.domain == "5"


def test_scoped_ipv6_is_treated_as_hostname():
    target = Target.new_any("fe80::1%eth0")
    assert target.ip is None
    assert str(target) == "fe80::1%eth0"


def test_ipv6_display_is_compressed():
    assert str(Target.new_any("2001:db8:0:0:0:0:0:1")) == "2001:db8::1"


def test_display_round_trips_through_constructor():
    for value in ["192.168.1.10", "::1", "example.com"]:
        assert str(Target.new_any(str(Target.new_any(value)))) == value