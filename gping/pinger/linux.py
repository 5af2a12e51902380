"""Pinger for Linux, covering both iputils and BusyBox ping."""

from __future__ import annotations

import enum
import re

from gping.pinger.core import (
    NotSupportedError,
    Pinger,
    PingOptions,
    PingResult,
    SpawnError,
    Timeout,
    UnknownPingError,
    extract_regex,
    run_ping,
)

UBUNTU_RE = re.compile(r"time=(?P<ms>\d+)(?:\.(?P<ns>\d+))? *ms", re.IGNORECASE | re.ASCII)


class PingFlavour(enum.Enum):
    """Which ping implementation is installed."""

    BUSYBOX = "busybox"  # Alpine, Android
    IPTOOLS = "iputils"  # Debian, Ubuntu and friends


class LinuxPinger(Pinger):
    """Linux ping, either iputils or BusyBox."""

    def __init__(self, options: PingOptions, flavour: PingFlavour = PingFlavour.IPTOOLS):
        super().__init__(options)
        self.flavour = flavour

    def __repr__(self) -> str:
        return f"LinuxPinger({self.options!r}, {self.flavour})"

    @classmethod
    def detect_platform_ping(cls, options: PingOptions) -> LinuxPinger:
        """Run ``ping -V`` and pick the flavour from what it prints."""
        child = run_ping("ping", ["-V"])
        try:
            stdout, stderr = child.communicate()
        except OSError as exc:
            raise SpawnError(exc) from exc
        stdout = stdout or ""
        stderr = stderr or ""

        if "BusyBox" in stderr:
            return cls(options, PingFlavour.BUSYBOX)
        if "iputils" in stdout:
            return cls(options, PingFlavour.IPTOOLS)
        if "inetutils" in stdout:
            raise NotSupportedError("Please use iputils ping, not inetutils.")
        raise UnknownPingError(
            stderr=stderr.splitlines()[:2],
            stdout=stdout.splitlines()[:2],
        )

    @classmethod
    def from_options(cls, options: PingOptions) -> LinuxPinger:
        return cls.detect_platform_ping(options)

    def parse(self, line: str) -> PingResult | None:
        if line.startswith("64 bytes from"):
            return extract_regex(UBUNTU_RE, line)
        if line.startswith("no answer yet"):
            return Timeout(line)
        return None

    def ping_args(self) -> tuple[str, list[str]]:
        options = self.options
        cmd = "ping6" if options.target.is_ipv6() else "ping"
        if self.flavour is PingFlavour.BUSYBOX:
            # BusyBox has no timeout notifications, so no -O here.
            args = [str(options.target), self._interval_flag()]
            if options.raw_arguments is not None:
                args.extend(options.raw_arguments)
            return cmd, args

        # -O makes iputils report "no answer yet" for lost packets.
        args = ["-O", self._interval_flag()]
        if options.interface is not None:
            args += ["-I", options.interface]
        if options.raw_arguments is not None:
            args.extend(options.raw_arguments)
        args.append(str(options.target))
        return cmd, args