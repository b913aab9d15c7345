"""Headless chart layout for captured traces.

Maps a time axis and a set of traces onto pixel coordinates and produces a
`ChartScene` of drawing primitives. Pixel y grows upward from the bottom edge
of the viewport; the painter flips it when drawing into an image.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, Sequence, Tuple

import numpy as np

from shared.models import Trace, Viewport

Color = Tuple[int, int, int, int]

# red, green, blue, magenta, yellow, white
PALETTE: Tuple[Color, ...] = (
    (255, 0, 0, 255),
    (0, 255, 0, 255),
    (0, 0, 255, 255),
    (255, 0, 255, 255),
    (255, 255, 0, 255),
    (255, 255, 255, 255),
)
BACKGROUND: Color = (255, 255, 255, 255)
AXIS_COLOR: Color = (0, 0, 0, 255)

Y_DOMAIN = (-10.24, 10.24)
LOW_MARGIN_PX = 32.0  # room for tick labels
HIGH_MARGIN_PX = 16.0
TRACE_WIDTH = 3.0
TICK_LENGTH_PX = 6.0
TICK_OFFSET_PX = -2.5
X_TICK_DIVISIONS = 5
Y_TICK_STEP = 2.0
LABEL_X_FRACTION = 0.1
LABEL_Y_TOP = 8.0
LABEL_Y_STEP = 0.7


def trace_color(index: int) -> Color:
    """Palette colour for the trace at `index`; colours repeat after six traces."""
    return PALETTE[index % len(PALETTE)]


def format_x_tick(value: float) -> str:
    return f"{value:.2e}"


def format_y_tick(value: float) -> str:
    return f"{value:.1f}"


@dataclass(frozen=True)
class LinearScale:
    domain: Tuple[float, float]
    range: Tuple[float, float]

    def map(self, values) -> np.ndarray:
        d0, d1 = self.domain
        r0, r1 = self.range
        span = d1 - d0
        arr = np.asarray(values, dtype=np.float64)
        if span == 0:
            return np.full_like(arr, r0)
        return r0 + (arr - d0) * ((r1 - r0) / span)


@dataclass(frozen=True)
class CoordinateSystem:
    x: LinearScale
    y: LinearScale

    def to_pixels(self, xs, ys) -> Tuple[np.ndarray, np.ndarray]:
        return self.x.map(xs), self.y.map(ys)


def axis_ticks(lo: float, hi: float, step: float) -> np.ndarray:
    """Every multiple of `step` within [lo, hi], inclusive of both ends."""
    if step <= 0 or not math.isfinite(step) or hi < lo:
        return np.zeros(0, dtype=np.float64)
    eps = 1e-9
    first = math.ceil(lo / step - eps)
    last = math.floor(hi / step + eps)
    if last < first:
        return np.zeros(0, dtype=np.float64)
    return np.arange(first, last + 1, dtype=np.float64) * step


@dataclass(frozen=True)
class Polyline:
    xs: np.ndarray
    ys: np.ndarray
    color: Color
    width: float = TRACE_WIDTH


@dataclass(frozen=True)
class TextLabel:
    text: str
    x: float
    y: float
    color: Color


@dataclass(frozen=True)
class AxisTick:
    value: float
    position: float  # pixel coordinate along the axis
    label: str


@dataclass(frozen=True)
class Axis:
    orientation: Literal["x", "y"]
    start: Tuple[float, float]
    end: Tuple[float, float]
    step: float
    ticks: Tuple[AxisTick, ...]
    tick_length: float = TICK_LENGTH_PX
    tick_offset: float = TICK_OFFSET_PX
    label_side: int = 1

    @property
    def normal(self) -> Tuple[float, float]:
        """Unit vector pointing out of the plot area into the label margin."""
        return (0.0, -1.0) if self.orientation == "x" else (-1.0, 0.0)


@dataclass(frozen=True)
class ChartScene:
    viewport: Viewport
    coords: CoordinateSystem
    max_time: float
    lines: Tuple[Polyline, ...]
    labels: Tuple[TextLabel, ...]
    x_axis: Axis
    y_axis: Axis
    background: Color = field(default=BACKGROUND)


def build_coordinates(max_time: float, viewport: Viewport) -> CoordinateSystem:
    return CoordinateSystem(
        LinearScale((0.0, max_time), (LOW_MARGIN_PX, viewport.width - HIGH_MARGIN_PX)),
        LinearScale(Y_DOMAIN, (LOW_MARGIN_PX, viewport.height - HIGH_MARGIN_PX)),
    )


def _build_axis(
    orientation: Literal["x", "y"],
    coords: CoordinateSystem,
    step: float,
    formatter,
    label_side: int,
) -> Axis:
    scale = coords.x if orientation == "x" else coords.y
    lo, hi = scale.domain
    values = axis_ticks(lo, hi, step)
    positions = scale.map(values)
    ticks = tuple(
        AxisTick(float(v), float(p), formatter(float(v))) for v, p in zip(values, positions)
    )
    # Axes sit on the low edge of the plot area.
    x0 = float(coords.x.range[0])
    y0 = float(coords.y.range[0])
    if orientation == "x":
        start, end = (x0, y0), (float(coords.x.range[1]), y0)
    else:
        start, end = (x0, y0), (x0, float(coords.y.range[1]))
    return Axis(orientation, start, end, step, ticks, label_side=label_side)


def layout_chart(times, traces: Sequence[Trace], viewport: Viewport) -> ChartScene:
    """Lay out traces and both axes for `viewport`."""
    times = np.asarray(times, dtype=np.float64)
    max_time = float(times.max()) if times.size else 0.0
    if not math.isfinite(max_time) or max_time <= 0:
        max_time = 1.0
    coords = build_coordinates(max_time, viewport)

    lines = []
    labels = []
    for i, trace in enumerate(traces):
        color = trace_color(i)
        xs, ys = coords.to_pixels(times, trace.samples)
        lines.append(Polyline(xs, ys, color))
        lx, ly = coords.to_pixels(max_time * LABEL_X_FRACTION, LABEL_Y_TOP - i * LABEL_Y_STEP)
        labels.append(TextLabel(trace.label, float(lx), float(ly), color))

    x_axis = _build_axis("x", coords, max_time / X_TICK_DIVISIONS, format_x_tick, label_side=1)
    y_axis = _build_axis("y", coords, Y_TICK_STEP, format_y_tick, label_side=1)
    return ChartScene(
        viewport=viewport,
        coords=coords,
        max_time=max_time,
        lines=tuple(lines),
        labels=tuple(labels),
        x_axis=x_axis,
        y_axis=y_axis,
    )


__all__ = [
    "Axis",
    "AxisTick",
    "ChartScene",
    "CoordinateSystem",
    "LinearScale",
    "PALETTE",
    "Polyline",
    "TextLabel",
    "axis_ticks",
    "build_coordinates",
    "format_x_tick",
    "format_y_tick",
    "layout_chart",
    "trace_color",
]
