"""Line-chart rendering for telemetry series."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..telemetry.records import Sample
from .surface import Point, Surface, is_drawable

__all__ = [
    "ANOMALY_COLOR",
    "DEFAULT_MARGIN",
    "GRID_COLOR",
    "LABEL_COLOR",
    "THRESHOLD_COLOR",
    "SeriesScale",
    "render_series",
]


DEFAULT_MARGIN = 40.0
GRID_COLOR = "#374151"
THRESHOLD_COLOR = "#ef4444"
ANOMALY_COLOR = "#ef4444"
LABEL_COLOR = "#9ca3af"
CAPTION_COLOR = "#ffffff"

VERTICAL_DIVISIONS = 10
HORIZONTAL_DIVISIONS = 5
THRESHOLD_DASH = (5.0, 5.0)
ANOMALY_RADIUS = 4.0


def _is_finite_sample(sample: Sample) -> bool:
    try:
        return math.isfinite(float(sample.value)) and math.isfinite(float(sample.timestamp))
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class SeriesScale:
    """Linear time→x and value→y mapping inside a fixed margin."""

    width: float
    height: float
    margin: float
    min_value: float
    value_span: float
    min_time: float
    time_span: float

    @classmethod
    def fit(
        cls,
        samples: Sequence[Sample],
        width: float,
        height: float,
        *,
        margin: float = DEFAULT_MARGIN,
    ) -> "SeriesScale":
        values = [float(sample.value) for sample in samples]
        times = [float(sample.timestamp) for sample in samples]
        min_value, max_value = min(values), max(values)
        min_time, max_time = min(times), max(times)
        return cls(
            width=float(width),
            height=float(height),
            margin=float(margin),
            min_value=min_value,
            value_span=(max_value - min_value) or 1.0,
            min_time=min_time,
            time_span=(max_time - min_time) or 1.0,
        )

    @property
    def plot_width(self) -> float:
        return self.width - 2.0 * self.margin

    @property
    def plot_height(self) -> float:
        return self.height - 2.0 * self.margin

    def x_for(self, timestamp: float) -> float:
        return self.margin + ((float(timestamp) - self.min_time) / self.time_span) * self.plot_width

    def y_for(self, value: float) -> float:
        return self.height - self.margin - ((float(value) - self.min_value) / self.value_span) * self.plot_height

    def point_for(self, sample: Sample) -> Point:
        return self.x_for(sample.timestamp), self.y_for(sample.value)

    def map_points(self, samples: Iterable[Sample]) -> list[Point]:
        return [self.point_for(sample) for sample in samples]

    def axis_labels(self) -> list[tuple[float, float]]:
        """Return ``(value, y)`` pairs for the evenly spaced y-axis ticks."""

        labels = []
        for step in range(HORIZONTAL_DIVISIONS + 1):
            value = self.min_value + step * self.value_span / HORIZONTAL_DIVISIONS
            y = self.height - self.margin - step * self.plot_height / HORIZONTAL_DIVISIONS
            labels.append((value, y))
        return labels


def _draw_grid(surface: Surface, scale: SeriesScale) -> None:
    top = scale.margin
    bottom = scale.height - scale.margin
    left = scale.margin
    right = scale.width - scale.margin
    for step in range(VERTICAL_DIVISIONS + 1):
        x = left + step * scale.plot_width / VERTICAL_DIVISIONS
        surface.line((x, top), (x, bottom), color=GRID_COLOR, width=1.0)
    for step in range(HORIZONTAL_DIVISIONS + 1):
        y = top + step * scale.plot_height / HORIZONTAL_DIVISIONS
        surface.line((left, y), (right, y), color=GRID_COLOR, width=1.0)


def render_series(
    surface: Surface,
    series: Iterable[Sample],
    label: str,
    color: str,
    threshold: float | None = None,
    *,
    margin: float = DEFAULT_MARGIN,
) -> SeriesScale | None:
    """Draw ``series`` as a line chart on ``surface``.

    The surface is cleared and redrawn in full. Fewer than two finite
    samples, or a surface without a drawable plot area, leaves the surface
    untouched and returns ``None``; otherwise the scale used is returned.
    """

    if not is_drawable(surface):
        return None
    if surface.width <= 2.0 * margin or surface.height <= 2.0 * margin:
        return None
    samples = [sample for sample in series if _is_finite_sample(sample)]
    if len(samples) < 2:
        return None

    scale = SeriesScale.fit(samples, surface.width, surface.height, margin=margin)
    surface.clear()
    _draw_grid(surface, scale)

    if threshold is not None and math.isfinite(threshold):
        y = scale.y_for(threshold)
        surface.line(
            (scale.margin, y),
            (scale.width - scale.margin, y),
            color=THRESHOLD_COLOR,
            width=2.0,
            dash=THRESHOLD_DASH,
        )

    surface.polyline(scale.map_points(samples), color=color, width=2.0)

    for sample in samples:
        if sample.anomaly:
            surface.circle(scale.point_for(sample), ANOMALY_RADIUS, fill=ANOMALY_COLOR)

    for value, y in scale.axis_labels():
        surface.text(
            (scale.margin - 10.0, y + 4.0),
            f"{value:.1f}",
            color=LABEL_COLOR,
            size=12.0,
            align="right",
        )

    if label:
        surface.text((scale.margin, scale.margin / 2.0), label, color=CAPTION_COLOR, size=14.0)
    return scale
