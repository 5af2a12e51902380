"""Pinger for the BSD family's ping."""

from __future__ import annotations

import re

from gping.pinger.core import Pinger, PingResult, Timeout, extract_regex

RE = re.compile(r"time=(?:(?P<ms>[0-9]+).(?P<ns>[0-9]+)\s+ms)")


def parse_bsd(line: str) -> PingResult | None:
    """Parse one line of BSD-style ping output."""
    if line.startswith("PING "):
        return None
    if line.startswith("Request timeout"):
        return Timeout(line)
    return extract_regex(RE, line)


class BSDPinger(Pinger):
    """FreeBSD, DragonFly, OpenBSD and NetBSD ping."""

    def parse(self, line: str) -> PingResult | None:
        return parse_bsd(line)

    def ping_args(self) -> tuple[str, list[str]]:
        options = self.options
        args = [self._interval_flag()]
        if options.interface is not None:
            args += ["-I", options.interface]
        if options.raw_arguments is not None:
            args.extend(options.raw_arguments)
        args.append(str(options.target))
        return "ping", args