"""Visualisation helpers for SolarGuard."""

from solarguard.visualization.gauge import gauge_color, render_gauge
from solarguard.visualization.raster import RasterSurface
from solarguard.visualization.series import SeriesScale, render_series
from solarguard.visualization.sparkline import (
    DEFAULT_SPARKLINE_BLOCKS,
    render_sparkline,
    series_sparkline,
)
from solarguard.visualization.surface import DrawCall, RecordingSurface, Surface
from solarguard.visualization.svg import SvgSurface

__all__ = [
    "DEFAULT_SPARKLINE_BLOCKS",
    "DrawCall",
    "RasterSurface",
    "RecordingSurface",
    "SeriesScale",
    "Surface",
    "SvgSurface",
    "gauge_color",
    "render_gauge",
    "render_series",
    "render_sparkline",
    "series_sparkline",
]
