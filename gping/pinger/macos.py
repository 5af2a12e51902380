"""Pinger for the macOS ping."""

from __future__ import annotations

import re

from gping.pinger.bsd import parse_bsd
from gping.pinger.core import Pinger, PingResult

RE = re.compile(r"time=(?:(?P<ms>[0-9]+).(?P<ns>[0-9]+)\s+ms)")


class MacOSPinger(Pinger):
    """macOS ping, which shares its output format with the BSDs."""

    def parse(self, line: str) -> PingResult | None:
        return parse_bsd(line)

    def ping_args(self) -> tuple[str, list[str]]:
        options = self.options
        cmd = "ping6" if options.target.is_ipv6() else "ping"
        args = [self._interval_flag(), str(options.target)]
        if options.interface is not None:
            args += ["-b", options.interface]
        if options.raw_arguments is not None:
            args.extend(options.raw_arguments)
        return cmd, args