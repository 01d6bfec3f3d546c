"""SVG serialisation of renderer output."""

from __future__ import annotations

import math
from html import escape
from typing import Sequence

from .surface import Point

__all__ = ["SvgSurface"]


_TEXT_ANCHORS = {"left": "start", "center": "middle", "right": "end"}
_FULL_TURN = 2.0 * math.pi


def _fmt(value: float) -> str:
    text = f"{float(value):.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


class SvgSurface:
    """Surface that accumulates SVG elements."""

    def __init__(self, width: float = 640.0, height: float = 320.0, *, background: str | None = None) -> None:
        self._width = float(width)
        self._height = float(height)
        self.background = background
        self._elements: list[str] = []

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def elements(self) -> tuple[str, ...]:
        return tuple(self._elements)

    def clear(self) -> None:
        self._elements.clear()

    def line(self, start: Point, end: Point, *, color: str, width: float = 1.0, dash: Sequence[float] | None = None) -> None:
        dash_attr = f' stroke-dasharray="{",".join(_fmt(d) for d in dash)}"' if dash else ""
        self._elements.append(
            f'<line x1="{_fmt(start[0])}" y1="{_fmt(start[1])}" x2="{_fmt(end[0])}" y2="{_fmt(end[1])}" '
            f'stroke="{escape(color)}" stroke-width="{_fmt(width)}"{dash_attr} />'
        )

    def polyline(self, points: Sequence[Point], *, color: str, width: float = 1.0) -> None:
        if not points:
            return
        coords = " ".join(f"{_fmt(x)},{_fmt(y)}" for x, y in points)
        self._elements.append(
            f'<polyline points="{coords}" fill="none" stroke="{escape(color)}" '
            f'stroke-width="{_fmt(width)}" stroke-linejoin="round" />'
        )

    def circle(self, center: Point, radius: float, *, fill: str | None = None, stroke: str | None = None, width: float = 1.0) -> None:
        stroke_attr = f' stroke="{escape(stroke)}" stroke-width="{_fmt(width)}"' if stroke else ""
        self._elements.append(
            f'<circle cx="{_fmt(center[0])}" cy="{_fmt(center[1])}" r="{_fmt(radius)}" '
            f'fill="{escape(fill) if fill else "none"}"{stroke_attr} />'
        )

    def arc(self, center: Point, radius: float, start: float, end: float, *, color: str, width: float = 1.0) -> None:
        sweep = end - start
        if sweep == 0.0 or radius <= 0.0:
            return
        if abs(sweep) >= _FULL_TURN:
            self.circle(center, radius, stroke=color, width=width)
            return
        cx, cy = center
        x0 = cx + radius * math.cos(start)
        y0 = cy + radius * math.sin(start)
        x1 = cx + radius * math.cos(end)
        y1 = cy + radius * math.sin(end)
        large = 1 if abs(sweep) > math.pi else 0
        clockwise = 1 if sweep > 0 else 0
        self._elements.append(
            f'<path d="M {_fmt(x0)} {_fmt(y0)} A {_fmt(radius)} {_fmt(radius)} 0 {large} {clockwise} '
            f'{_fmt(x1)} {_fmt(y1)}" fill="none" stroke="{escape(color)}" stroke-width="{_fmt(width)}" />'
        )

    def text(self, position: Point, content: str, *, color: str, size: float = 12.0, align: str = "left") -> None:
        anchor = _TEXT_ANCHORS.get(align, "start")
        self._elements.append(
            f'<text x="{_fmt(position[0])}" y="{_fmt(position[1])}" fill="{escape(color)}" '
            f'font-family="system-ui, sans-serif" font-size="{_fmt(size)}" text-anchor="{anchor}">'
            f"{escape(str(content))}</text>"
        )

    def to_svg(self) -> str:
        width = _fmt(self._width)
        height = _fmt(self._height)
        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
            f'viewBox="0 0 {width} {height}">'
        ]
        if self.background:
            parts.append(f'<rect width="100%" height="100%" fill="{escape(self.background)}" />')
        parts.extend(self._elements)
        parts.append("</svg>")
        return "\n".join(parts)
