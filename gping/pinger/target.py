"""Ping targets: either a literal IP address or a hostname with an address family."""

from __future__ import annotations

import enum
import ipaddress
from dataclasses import dataclass
from typing import Callable, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class IPVersion(enum.Enum):
    """Address family a hostname should be resolved to."""

    V4 = "v4"
    V6 = "v6"
    ANY = "any"


def _parse_ip(value: str, parser: Callable[[str], IPAddress]) -> IPAddress | None:
    # Scoped IPv6 literals ("fe80::1%eth0") are treated as hostnames.
    if "%" in value:
        return None
    try:
        return parser(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Target:
    """Something to ping: an IP address, or a domain plus the wanted IP version."""

    ip: IPAddress | None = None
    domain: str | None = None
    version: IPVersion = IPVersion.ANY

    @classmethod
    def new_any(cls, value: object) -> Target:
        """Build a target from any IP literal, else a hostname of any family."""
        text = str(value)
        ip = _parse_ip(text, ipaddress.ip_address)
        if ip is not None:
            return cls(ip=ip)
        return cls(domain=text, version=IPVersion.ANY)

    @classmethod
    def new_ipv4(cls, value: object) -> Target:
        """Build a target from an IPv4 literal, else an IPv4 hostname."""
        text = str(value)
        ip = _parse_ip(text, ipaddress.IPv4Address)
        if ip is not None:
            return cls(ip=ip)
        return cls(domain=text, version=IPVersion.V4)

    @classmethod
    def new_ipv6(cls, value: object) -> Target:
        """Build a target from an IPv6 literal, else an IPv6 hostname."""
        text = str(value)
        ip = _parse_ip(text, ipaddress.IPv6Address)
        if ip is not None:
            return cls(ip=ip)
        return cls(domain=text, version=IPVersion.V6)

    @property
    def is_ip(self) -> bool:
        return self.ip is not None

    def is_ipv6(self) -> bool:
        """Whether this target should be pinged over IPv6."""
        if self.ip is not None:
            return self.ip.version == 6
        return self.version is IPVersion.V6

    def __str__(self) -> str:
        if self.ip is not None:
            return str(self.ip)
        return self.domain or ""