"""Round trip times of one host over a rolling time window."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from gping.colors import Color
from gping.pinger.core import format_duration

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_U64_MAX = 2**64 - 1

DOT_MARKER = "•"
BRAILLE_MARKER = "⠿"


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.astimezone()


def _timestamp(moment: datetime) -> float:
    """Seconds since the epoch, truncated to whole milliseconds."""
    return ((_aware(moment) - _EPOCH) // timedelta(milliseconds=1)) / 1000


def _as_u64(value: float) -> int:
    """Convert a float to an unsigned integer, saturating at the ends."""
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _U64_MAX:
        return _U64_MAX
    return int(value)


def _micros_label(prefix: str, micros: float) -> str:
    return f"{prefix} {format_duration(_as_u64(micros) / 1_000_000)}"


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _p95_position(count: int) -> int:
    position = _f32(_f32(0.95) * _f32(float(count)))
    return math.floor(position + 0.5)


@dataclass
class PlotData:
    """Samples for one graph entry: (timestamp in seconds, round trip in microseconds).

    Timeouts are stored as NaN round trips.
    """

    display: str
    buffer: int
    style: Color | None = None
    simple_graphics: bool = False
    data: list[tuple[float, float]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.buffer < 0:
            raise ValueError(f"Error converting {self.buffer} to seconds")

    @property
    def marker(self) -> str:
        """The character used to draw points."""
        return DOT_MARKER if self.simple_graphics else BRAILLE_MARKER

    def update(self, item: float | None, now: datetime | None = None) -> None:
        """Record a round trip in seconds, or None for a timeout, and drop old points."""
        moment = _aware(now) if now is not None else datetime.now().astimezone()
        stamp = _timestamp(moment)
        if item is None:
            self.data.append((stamp, math.nan))
        else:
            micros = round(item * 1_000_000_000) // 1_000
            self.data.append((stamp, float(micros)))

        earliest = _timestamp(moment - timedelta(seconds=self.buffer))
        stale = [idx for idx, (timestamp, _) in enumerate(self.data) if timestamp < earliest]
        if stale:
            del self.data[: stale[-1]]

    def header_stats(self) -> list[str]:
        """The header cells: name, then last, min, max, avg, jitter, p95 and timeouts."""
        items = sorted(value for _, value in self.data if not math.isnan(value))
        if not items:
            return [self.display]

        lowest, highest = items[0], items[-1]
        average = sum(items) / len(items)
        if len(items) > 1:
            jitter = sum(abs(b - a) for a, b in zip(items, items[1:])) / (len(items) - 1)
        else:
            jitter = math.nan

        position = _p95_position(len(items))
        p95 = items[position] if position < len(items) else 0.0

        timeouts = sum(1 for _, value in self.data if math.isnan(value))
        last = self.data[-1][1] if self.data else 0.0

        return [
            self.display,
            _micros_label("last", last),
            _micros_label("min", lowest),
            _micros_label("max", highest),
            _micros_label("avg", average),
            _micros_label("jtr", jitter),
            _micros_label("p95", p95),
            f"t/o {timeouts}",
        ]