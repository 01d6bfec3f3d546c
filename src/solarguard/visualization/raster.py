"""Pixel raster surface backed by a numpy RGB buffer."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .surface import Point

__all__ = ["RasterSurface", "parse_color"]


def parse_color(color: str) -> tuple[int, int, int]:
    """Parse ``#rgb`` / ``#rrggbb`` colours into an RGB triple."""

    text = str(color).strip().lstrip("#")
    if len(text) == 3:
        text = "".join(char * 2 for char in text)
    if len(text) != 6:
        raise ValueError(f"Unsupported colour: {color!r}")
    return tuple(int(text[index : index + 2], 16) for index in (0, 2, 4))  # type: ignore[return-value]


class RasterSurface:
    """Rasterise lines, disks and arcs into ``pixels`` (``height × width × 3``).

    Text has no glyph rasteriser; labels are collected in :attr:`annotations`.
    """

    def __init__(self, width: int = 640, height: int = 320, *, background: str = "#0f172a") -> None:
        self._width = max(int(width), 0)
        self._height = max(int(height), 0)
        self._background = parse_color(background)
        self.pixels = np.zeros((self._height, self._width, 3), dtype=np.uint8)
        self.annotations: list[tuple[Point, str, str, float, str]] = []
        self.clear()

    @property
    def width(self) -> float:
        return float(self._width)

    @property
    def height(self) -> float:
        return float(self._height)

    @property
    def _max_samples(self) -> int:
        return 4 * (self._width + self._height) + 2

    def clear(self) -> None:
        self.pixels[...] = self._background
        self.annotations.clear()

    def _stamp(self, xs: np.ndarray, ys: np.ndarray, color: str, width: float) -> None:
        rgb = parse_color(color)
        radius = max(int(round(float(width) / 2.0 - 0.5)), 0)
        xs = np.rint(xs).astype(np.int64)
        ys = np.rint(ys).astype(np.int64)
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                px = xs + dx
                py = ys + dy
                inside = (px >= 0) & (px < self._width) & (py >= 0) & (py < self._height)
                self.pixels[py[inside], px[inside]] = rgb

    def line(self, start: Point, end: Point, *, color: str, width: float = 1.0, dash: Sequence[float] | None = None) -> None:
        x0, y0 = (float(v) for v in start)
        x1, y1 = (float(v) for v in end)
        if not all(math.isfinite(v) for v in (x0, y0, x1, y1)):
            return
        length = math.hypot(x1 - x0, y1 - y0)
        count = min(int(math.ceil(max(abs(x1 - x0), abs(y1 - y0)))) + 1, self._max_samples)
        xs = np.linspace(x0, x1, count)
        ys = np.linspace(y0, y1, count)
        if dash:
            on = float(dash[0])
            period = on + float(dash[1] if len(dash) > 1 else dash[0])
            if period > 0.0:
                travelled = np.linspace(0.0, length, count)
                keep = np.mod(travelled, period) < on
                xs, ys = xs[keep], ys[keep]
        self._stamp(xs, ys, color, width)

    def polyline(self, points: Sequence[Point], *, color: str, width: float = 1.0) -> None:
        for start, end in zip(points, points[1:]):
            self.line(start, end, color=color, width=width)

    def circle(self, center: Point, radius: float, *, fill: str | None = None, stroke: str | None = None, width: float = 1.0) -> None:
        if self._width == 0 or self._height == 0:
            return
        cx, cy = (float(v) for v in center)
        ys, xs = np.ogrid[: self._height, : self._width]
        distance = np.sqrt((xs - cx) ** 2 + (ys - cy) ** 2)
        if fill:
            self.pixels[distance <= radius] = parse_color(fill)
        if stroke:
            self.pixels[np.abs(distance - radius) <= max(float(width), 1.0) / 2.0] = parse_color(stroke)

    def arc(self, center: Point, radius: float, start: float, end: float, *, color: str, width: float = 1.0) -> None:
        sweep = end - start
        if sweep == 0.0 or radius <= 0.0 or not math.isfinite(sweep):
            return
        count = min(int(math.ceil(abs(sweep) * radius)) + 2, self._max_samples)
        angles = np.linspace(start, end, count)
        cx, cy = (float(v) for v in center)
        self._stamp(cx + radius * np.cos(angles), cy + radius * np.sin(angles), color, width)

    def text(self, position: Point, content: str, *, color: str, size: float = 12.0, align: str = "left") -> None:
        self.annotations.append((tuple(position), str(content), color, float(size), align))

    def to_ppm(self) -> bytes:
        """Return the pixel buffer as a binary PPM (``P6``) image."""

        header = f"P6\n{self._width} {self._height}\n255\n".encode("ascii")
        return header + np.ascontiguousarray(self.pixels).tobytes()
