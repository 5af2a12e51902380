"""A histogram of recent round trip times, in milliseconds."""

from __future__ import annotations

import bisect
from collections import deque

# How many buckets past the mode the x axis reaches; effectively a zoom level.
OVERFLOW_SIZE = 15

_U64_MAX = 2**64 - 1
_PADDING = 1
_BAR = "█"


def _default_buckets() -> list[int]:
    return [*range(1, 50), *range(50, 250, 5), *range(250, 1000, 100)]


class HistogramState:
    """Counts samples into millisecond buckets over a rolling window.

    A ``window_size`` of None keeps every sample.
    """

    def __init__(self, window_size: int | None = 500):
        self.window_size = window_size
        self.samples: deque[int] = deque(maxlen=window_size)
        self.bin_buckets = _default_buckets()
        self.bin_counts = [0] * len(self.bin_buckets)
        self.max_count = 0
        self.max_bin = 0
        self.overflow_bin = self.bin_buckets[-1]
        self._plot_data: list[tuple[float, float]] = []

    def _bin_index(self, value: int) -> int:
        index = bisect.bisect_left(self.bin_buckets, value)
        return min(index, len(self.bin_buckets) - 1)

    def add_sample(self, sample: float | None) -> None:
        """Add a round trip in seconds, or None for a timeout."""
        if sample is None:
            millis = _U64_MAX
        else:
            if sample < 0:
                raise ValueError(f"sample cannot be negative: {sample}")
            millis = min(round(sample * 1_000_000_000) // 1_000_000, _U64_MAX)
        self.samples.append(millis)
        self._update()

    def _update(self) -> None:
        counts = [0] * len(self.bin_buckets)
        for sample in self.samples:
            counts[self._bin_index(sample)] += 1
        self.bin_counts = counts

        last = len(self.bin_buckets) - 1
        self.max_count = max(counts, default=0)
        max_bin_idx = counts.index(self.max_count) if counts else last
        overflow_idx = last if max_bin_idx + OVERFLOW_SIZE >= last else max_bin_idx + OVERFLOW_SIZE

        self.max_bin = self.bin_buckets[max_bin_idx]
        self.overflow_bin = self.bin_buckets[overflow_idx]

        overflow = sum(counts[overflow_idx:])
        plot = [(float(bucket), float(count)) for bucket, count in zip(self.bin_buckets, counts)]
        # Everything past the visible range is added to the last visible bin.
        if overflow > 0:
            bucket, count = plot[overflow_idx]
            plot[overflow_idx] = (bucket, count + overflow)
        self._plot_data = plot

    def plot_data(self) -> list[tuple[float, float]]:
        """The (bucket, count) points to draw."""
        return list(self._plot_data)

    def stats_text(self) -> str:
        return (
            f"Samples: {len(self.samples)} Mode: {self.max_bin} ms "
            f"Overflow >= {self.overflow_bin} ms"
        )

    def render_histogram(self, width: int, height: int) -> list[str]:
        """Draw the histogram in a titled box of ``width`` by ``height`` cells."""
        if width < 2 or height < 2:
            raise ValueError("histogram area must be at least 2x2")
        inner_w, inner_h = width - 2, height - 2
        canvas = [[" "] * inner_w for _ in range(inner_h)]

        # The first inner row holds the stats; the chart fills the rest.
        chart_h = inner_h - 1
        chart_w = inner_w - 2 * _PADDING
        if chart_h > 0 and chart_w > 0 and self.max_count > 0:
            for x, count in self._plot_data:
                if count <= 0 or x > self.overflow_bin:
                    continue
                column = _PADDING + min(chart_w - 1, int(x / self.overflow_bin * (chart_w - 1)))
                bar = min(chart_h, max(1, round(count / self.max_count * chart_h)))
                for offset in range(bar):
                    canvas[inner_h - 1 - offset][column] = _BAR

        if inner_h > 0:
            stats = self.stats_text()[:inner_w]
            canvas[0][: len(stats)] = list(stats)

        top = "┌" + "Histogram"[:inner_w].ljust(inner_w, "─") + "┐"
        bottom = "└" + "─" * inner_w + "┘"
        return [top, *("│" + "".join(row) + "│" for row in canvas), bottom]