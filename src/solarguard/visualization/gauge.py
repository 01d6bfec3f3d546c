"""Annular gauge for the CME precursor likelihood score."""

from __future__ import annotations

import math

from .surface import Surface, is_drawable

__all__ = [
    "ACCENT_COLOR",
    "DEFAULT_GAUGE_THRESHOLD",
    "WARNING_COLOR",
    "gauge_color",
    "render_gauge",
]


DEFAULT_GAUGE_THRESHOLD = 0.8
BACKGROUND_COLOR = "#1e293b"
BORDER_COLOR = "#475569"
WARNING_COLOR = "#ef4444"
ACCENT_COLOR = "#f97316"
TEXT_COLOR = "#ffffff"

RADIUS_RATIO = 0.3
ARC_INSET = 10.0
ARC_WIDTH = 20.0
TICK_INNER_INSET = 30.0
TICK_OUTER_OFFSET = 5.0
TICK_WIDTH = 3.0
START_ANGLE = -math.pi / 2.0


def gauge_color(value: float, threshold: float | None = None) -> str:
    limit = DEFAULT_GAUGE_THRESHOLD if threshold is None else threshold
    return WARNING_COLOR if value > limit else ACCENT_COLOR


def render_gauge(surface: Surface, value: float, threshold: float | None = None) -> None:
    """Draw ``value`` (expected in ``[0, 1]``) as a clockwise arc from the top.

    Values are not validated: anything above 1 simply sweeps past a full
    turn. Non-finite values leave the surface untouched.
    """

    if not is_drawable(surface):
        return
    try:
        value = float(value)
    except (TypeError, ValueError):
        return
    if not math.isfinite(value):
        return

    center = (surface.width / 2.0, surface.height / 2.0)
    radius = min(surface.width, surface.height) * RADIUS_RATIO

    surface.clear()
    surface.circle(center, radius, fill=BACKGROUND_COLOR, stroke=BORDER_COLOR, width=2.0)

    end_angle = START_ANGLE + value * 2.0 * math.pi
    surface.arc(
        center,
        radius - ARC_INSET,
        START_ANGLE,
        end_angle,
        color=gauge_color(value, threshold),
        width=ARC_WIDTH,
    )

    if threshold is not None and math.isfinite(threshold):
        angle = START_ANGLE + threshold * 2.0 * math.pi
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        inner = radius - TICK_INNER_INSET
        outer = radius + TICK_OUTER_OFFSET
        surface.line(
            (center[0] + inner * cos_a, center[1] + inner * sin_a),
            (center[0] + outer * cos_a, center[1] + outer * sin_a),
            color=WARNING_COLOR,
            width=TICK_WIDTH,
        )

    surface.text(
        (center[0], center[1] + 8.0),
        f"{value:.3f}",
        color=TEXT_COLOR,
        size=24.0,
        align="center",
    )
