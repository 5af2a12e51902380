"""Ping options, ping results, creation errors and the base pinger."""

from __future__ import annotations

import abc
import dataclasses
import json
import os
import re
import signal
import subprocess
from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from gping.pinger.target import Target

_NANOS_PER_SECOND = 1_000_000_000


def format_duration(seconds: float) -> str:
    """Render a duration the way ping times are displayed, e.g. ``12.345ms``."""
    if seconds < 0:
        raise ValueError(f"duration cannot be negative: {seconds}")
    nanos = round(seconds * _NANOS_PER_SECOND)
    secs, sub = divmod(nanos, _NANOS_PER_SECOND)
    if secs > 0:
        whole, frac, width, unit = secs, sub, 9, "s"
    elif sub >= 1_000_000:
        whole, frac = divmod(sub, 1_000_000)
        width, unit = 6, "ms"
    elif sub >= 1_000:
        whole, frac = divmod(sub, 1_000)
        width, unit = 3, "µs"
    else:
        whole, frac, width, unit = sub, 0, 0, "ns"
    digits = str(frac).rjust(width, "0").rstrip("0") if frac else ""
    return f"{whole}.{digits}{unit}" if digits else f"{whole}{unit}"


def _describe_status(returncode: int) -> str:
    if returncode >= 0:
        return f"exit status: {returncode}"
    signum = -returncode
    try:
        name = signal.Signals(signum).name
    except ValueError:
        return f"signal: {signum}"
    return f"signal: {signum} ({name})"


def _debug_list(items: Iterable[str]) -> str:
    return "[" + ", ".join(json.dumps(item, ensure_ascii=False) for item in items) + "]"


@dataclass(frozen=True)
class PingOptions:
    """What to ping and how often; ``interval`` is in seconds."""

    target: Target
    interval: float
    interface: str | None = None
    raw_arguments: tuple[str, ...] | None = None

    @classmethod
    def from_target(cls, target: Target, interval: float, interface: str | None = None) -> PingOptions:
        return cls(target=target, interval=interval, interface=interface)

    @classmethod
    def new(cls, target: object, interval: float, interface: str | None = None) -> PingOptions:
        return cls.from_target(Target.new_any(target), interval, interface)

    @classmethod
    def new_ipv4(cls, target: object, interval: float, interface: str | None = None) -> PingOptions:
        return cls.from_target(Target.new_ipv4(target), interval, interface)

    @classmethod
    def new_ipv6(cls, target: object, interval: float, interface: str | None = None) -> PingOptions:
        return cls.from_target(Target.new_ipv6(target), interval, interface)

    def with_raw_arguments(self, raw_arguments: Iterable[object]) -> PingOptions:
        """Return a copy that passes these extra arguments to ping."""
        return dataclasses.replace(self, raw_arguments=tuple(str(item) for item in raw_arguments))


@dataclass(frozen=True)
class Pong:
    """A reply; ``duration`` is the round trip in seconds."""

    duration: float
    line: str

    def __str__(self) -> str:
        return format_duration(self.duration)


@dataclass(frozen=True)
class Timeout:
    line: str

    def __str__(self) -> str:
        return "Timeout"


@dataclass(frozen=True)
class Unknown:
    line: str

    def __str__(self) -> str:
        return "Unknown"


@dataclass(frozen=True)
class PingExited:
    """The ping process ended with this return code and standard error."""

    returncode: int
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def __str__(self) -> str:
        return f"Exited({_describe_status(self.returncode)}, {self.stderr})"


PingResult = Union[Pong, Timeout, Unknown, PingExited]


class PingCreationError(Exception):
    """Ping could not be started."""


class UnknownPingError(PingCreationError):
    def __init__(self, stderr: Iterable[str], stdout: Iterable[str]):
        self.stderr = list(stderr)
        self.stdout = list(stdout)
        super().__init__(
            f"Could not detect ping. Stderr: {_debug_list(self.stderr)}\n"
            f"Stdout: {_debug_list(self.stdout)}"
        )


class SpawnError(PingCreationError):
    def __init__(self, error: OSError):
        self.error = error
        super().__init__(f"Error spawning ping: {error}")


class NotSupportedError(PingCreationError):
    def __init__(self, alternative: str):
        self.alternative = alternative
        super().__init__(f"Installed ping is not supported: {alternative}")


class HostnameError(PingCreationError):
    def __init__(self, hostname: str):
        self.hostname = hostname
        super().__init__(f"Invalid or unresolvable hostname {hostname}")


def run_ping(cmd: str, args: Iterable[str]) -> subprocess.Popen:
    """Start ``cmd`` with piped output and a C locale so its output parses predictably."""
    env = {**os.environ, "LANG": "C", "LC_ALL": "C"}
    try:
        return subprocess.Popen(
            [cmd, *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=env,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        raise SpawnError(exc) from exc


def extract_regex(regex: re.Pattern[str], line: str) -> Pong | None:
    """Pull a round trip time out of ``line`` using the ``ms`` and ``ns`` groups."""
    match = regex.search(line)
    if match is None:
        return None
    try:
        ms = int(match.group("ms"))
    except ValueError:
        return None
    nanos = 0
    fraction = match.groupdict().get("ns")
    if fraction is not None:
        fraction = fraction[:6]
        try:
            nanos = int(fraction) * 10 ** (6 - len(fraction))
        except ValueError:
            return None
    return Pong((ms * 1_000_000 + nanos) / _NANOS_PER_SECOND, line)


def _strip_newline(line: str) -> str:
    return line.removesuffix("\n").removesuffix("\r")


class Pinger(abc.ABC):
    """Runs a ping command and turns its output lines into results."""

    def __init__(self, options: PingOptions):
        self.options = options

    @classmethod
    def from_options(cls, options: PingOptions) -> Pinger:
        return cls(options)

    @abc.abstractmethod
    def parse(self, line: str) -> PingResult | None:
        """Turn one output line into a result, or None if it carries none."""

    @abc.abstractmethod
    def ping_args(self) -> tuple[str, list[str]]:
        """Return the command and its arguments."""

    def start(self) -> Iterator[PingResult]:
        """Spawn ping now and return an iterator over its results.

        The last item is a ``PingExited`` once the process ends.
        """
        cmd, args = self.ping_args()
        child = run_ping(cmd, args)
        return self._stream(child)

    def _stream(self, child: subprocess.Popen) -> Iterator[PingResult]:
        with child:
            try:
                for raw in child.stdout:
                    result = self.parse(_strip_newline(raw))
                    if result is not None:
                        yield result
                stderr = child.stderr.read()
                child.wait()
                yield PingExited(child.returncode, stderr)
            finally:
                if child.poll() is None:
                    child.kill()

    def _interval_flag(self) -> str:
        millis = round(self.options.interval * 1_000_000) // 1_000
        return f"-i{millis / 1000:.1f}"