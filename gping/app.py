"""Application state: per-host plots, the histogram, axes and a text rendering."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Sequence

from gping.histogram import HistogramState
from gping.pinger.core import format_duration
from gping.plot_data import PlotData

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_U64_MAX = 2**64 - 1
_NUM_Y_LABELS = 7
_HEADER_PERCENTAGES = (30, 10, 10, 10, 10, 10, 10, 10)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.astimezone()


def _timestamp(moment: datetime) -> float:
    return ((_aware(moment) - _EPOCH) // timedelta(milliseconds=1)) / 1000


def _as_u64(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _U64_MAX:
        return _U64_MAX
    return int(value)


def _format_time(moment: datetime) -> str:
    text = moment.strftime("%H:%M:%S")
    micros = moment.microsecond
    if micros == 0:
        return text
    if micros % 1000 == 0:
        return f"{text}.{micros // 1000:03d}"
    return f"{text}.{micros:06d}"


def _fit(text: str, width: int) -> str:
    return text[:width].ljust(width)


class App:
    """Everything the screen shows, updated as ping results arrive."""

    def __init__(self, data: list[PlotData], buffer: int, started: datetime | None = None):
        if buffer < 0:
            raise ValueError(f"buffer cannot be negative: {buffer}")
        self.data = data
        self.display_interval = timedelta(seconds=buffer)
        self.histogram = HistogramState()
        self.started = _aware(started) if started is not None else datetime.now().astimezone()

    def update(self, host_idx: int, item: float | None) -> None:
        """Record a round trip in seconds (None for a timeout) for one host."""
        self.data[host_idx].update(item)
        self.histogram.add_sample(item)

    def y_axis_bounds(self) -> tuple[float, float]:
        """Lowest and highest round trip in microseconds, widened by 10% each way."""
        values = [v for plot in self.data for _, v in plot.data if not math.isnan(v)]
        if values:
            lowest, highest = min(values), max(values)
        else:
            lowest, highest = math.inf, 0.0
        return lowest - lowest * 10 / 100, highest + highest * 10 / 100

    def x_axis_bounds(self, now: datetime | None = None) -> tuple[float, float]:
        """The time window shown, in seconds since the epoch."""
        moment = _aware(now) if now is not None else datetime.now().astimezone()
        if moment - self.started < self.display_interval:
            return (
                _timestamp(self.started),
                _timestamp(self.started + self.display_interval),
            )
        return _timestamp(moment - self.display_interval), _timestamp(moment)

    def x_axis_labels(self, bounds: Sequence[float]) -> list[str]:
        """Local times at the start, middle and end of the x axis."""
        try:
            lower = datetime.fromtimestamp(int(bounds[0]), tz=timezone.utc).astimezone()
            upper = datetime.fromtimestamp(int(bounds[1]), tz=timezone.utc).astimezone()
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError(f"Error parsing x-axis bounds {tuple(bounds)}") from exc
        midpoint = lower + (upper - lower) / 2
        return [_format_time(lower), _format_time(midpoint), _format_time(upper)]

    def y_axis_labels(self, bounds: Sequence[float]) -> list[str]:
        """Seven evenly spaced round trip labels from the y-axis bounds."""
        lowest, highest = bounds[0], bounds[1]
        increment = _as_u64((highest - lowest) / _NUM_Y_LABELS)
        start = _as_u64(lowest)
        return [
            format_duration((start + increment * i) / 1_000_000) for i in range(_NUM_Y_LABELS)
        ]

    def render(
        self, width: int, height: int, vertical_margin: int = 1, horizontal_margin: int = 0
    ) -> list[str]:
        """Draw the whole screen as ``height`` lines of ``width`` characters."""
        if width < 0 or height < 0:
            raise ValueError("screen size cannot be negative")
        if vertical_margin < 0 or horizontal_margin < 0:
            raise ValueError("margins cannot be negative")

        left_w = width * 75 // 100
        hist_w = width - left_w
        left = self._render_left(left_w, height, vertical_margin, horizontal_margin)
        if hist_w >= 2 and height >= 2:
            right = self.histogram.render_histogram(hist_w, height)
        else:
            right = [" " * hist_w] * height
        return [_fit(l, left_w) + _fit(r, hist_w) for l, r in zip(left, right)]

    def _render_left(self, width: int, height: int, vmargin: int, hmargin: int) -> list[str]:
        inner_w = max(0, width - 2 * hmargin)
        inner_h = max(0, height - 2 * vmargin)
        headers = [self._header_line(plot.header_stats(), inner_w) for plot in self.data]
        headers = headers[:inner_h]
        chart = self._chart_lines(inner_w, inner_h - len(headers))
        pad = " " * min(hmargin, width)
        inner = [pad + _fit(row, inner_w) + pad for row in headers + chart]
        top = min(vmargin, height)
        rows = [""] * top + inner
        rows += [""] * (height - len(rows))
        return [_fit(row, width) for row in rows[:height]]

    @staticmethod
    def _header_line(stats: list[str], width: int) -> str:
        widths = [width * pct // 100 for pct in _HEADER_PERCENTAGES]
        cells = (_fit(text, w) for text, w in zip(stats, widths))
        return _fit("".join(cells), width)

    def _chart_lines(self, width: int, height: int) -> list[str]:
        if height <= 0:
            return []
        y0, y1 = self.y_axis_bounds()
        x0, x1 = self.x_axis_bounds()
        y_labels = self.y_axis_labels((y0, y1))
        x_labels = self.x_axis_labels((x0, x1))

        label_w = max(len(label) for label in y_labels)
        plot_w = max(0, width - label_w - 1)
        plot_h = height - 1
        grid = [[" "] * plot_w for _ in range(plot_h)]

        drawable = (
            plot_w > 0
            and plot_h > 0
            and all(math.isfinite(v) for v in (x0, x1, y0, y1))
            and x1 > x0
            and y1 > y0
        )
        if drawable:
            for plot in self.data:
                for stamp, value in plot.data:
                    if math.isnan(value) or not (x0 <= stamp <= x1 and y0 <= value <= y1):
                        continue
                    column = int((stamp - x0) / (x1 - x0) * (plot_w - 1))
                    row = plot_h - 1 - int((value - y0) / (y1 - y0) * (plot_h - 1))
                    grid[row][column] = plot.marker

        label_rows: dict[int, str] = {}
        for i, label in enumerate(y_labels):
            if plot_h <= 0:
                break
            offset = round(i * (plot_h - 1) / (len(y_labels) - 1)) if plot_h > 1 else 0
            label_rows[plot_h - 1 - offset] = label

        lines = [
            label_rows.get(row, "").rjust(label_w) + "│" + "".join(cells)
            for row, cells in enumerate(grid)
        ]
        lines.append(self._x_label_line(x_labels, label_w + 1, plot_w))
        return [_fit(line, width) for line in lines]

    @staticmethod
    def _x_label_line(labels: list[str], indent: int, plot_w: int) -> str:
        cells = [" "] * plot_w
        lower, middle, upper = labels
        placements = (
            (0, lower),
            (max(0, (plot_w - len(middle)) // 2), middle),
            (max(0, plot_w - len(upper)), upper),
        )
        for start, text in placements:
            for offset, char in enumerate(text):
                if start + offset < plot_w:
                    cells[start + offset] = char
        return " " * indent + "".join(cells)