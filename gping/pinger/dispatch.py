"""Choose the right pinger for this platform and start it."""

from __future__ import annotations

import os
import sys
from typing import Iterator

from gping.pinger.bsd import BSDPinger
from gping.pinger.core import NotSupportedError, Pinger, PingOptions, PingResult
from gping.pinger.fake import FakePinger
from gping.pinger.linux import LinuxPinger
from gping.pinger.macos import MacOSPinger

_BSD_PLATFORMS = ("freebsd", "dragonfly", "openbsd", "netbsd")


def get_pinger(options: PingOptions) -> Pinger:
    """Return a pinger suited to the running platform.

    Setting ``PINGER_FAKE_PING=1`` selects a pinger that makes up replies.
    """
    if os.environ.get("PINGER_FAKE_PING") == "1":
        return FakePinger.from_options(options)

    platform = sys.platform
    if platform == "win32":
        raise NotSupportedError("Pinging is not supported on Windows.")
    if platform.startswith(_BSD_PLATFORMS):
        return BSDPinger.from_options(options)
    if platform == "darwin":
        return MacOSPinger.from_options(options)
    return LinuxPinger.from_options(options)


def ping(options: PingOptions) -> Iterator[PingResult]:
    """Start pinging a hostname or IP address and iterate over the results."""
    return get_pinger(options).start()