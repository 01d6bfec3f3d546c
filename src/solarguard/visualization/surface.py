"""Canvas-like drawing surfaces used by the renderers.

Renderers only talk to the small :class:`Surface` protocol. Angles are in
radians and follow the screen convention: ``y`` grows downwards, so a
positive sweep runs clockwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

__all__ = ["DrawCall", "Point", "RecordingSurface", "Surface", "is_drawable"]


Point = tuple[float, float]


@runtime_checkable
class Surface(Protocol):
    """Minimal immediate-mode drawing API."""

    @property
    def width(self) -> float:  # pragma: no cover - interface only
        ...

    @property
    def height(self) -> float:  # pragma: no cover - interface only
        ...

    def clear(self) -> None:  # pragma: no cover - interface only
        ...

    def line(
        self,
        start: Point,
        end: Point,
        *,
        color: str,
        width: float = 1.0,
        dash: Sequence[float] | None = None,
    ) -> None:  # pragma: no cover - interface only
        ...

    def polyline(self, points: Sequence[Point], *, color: str, width: float = 1.0) -> None:  # pragma: no cover
        ...

    def circle(
        self,
        center: Point,
        radius: float,
        *,
        fill: str | None = None,
        stroke: str | None = None,
        width: float = 1.0,
    ) -> None:  # pragma: no cover - interface only
        ...

    def arc(
        self,
        center: Point,
        radius: float,
        start: float,
        end: float,
        *,
        color: str,
        width: float = 1.0,
    ) -> None:  # pragma: no cover - interface only
        ...

    def text(
        self,
        position: Point,
        content: str,
        *,
        color: str,
        size: float = 12.0,
        align: str = "left",
    ) -> None:  # pragma: no cover - interface only
        ...


def is_drawable(surface: Surface | None) -> bool:
    """Return ``True`` when ``surface`` has a positive drawing area."""

    if surface is None:
        return False
    try:
        return float(surface.width) > 0.0 and float(surface.height) > 0.0
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class DrawCall:
    op: str
    args: tuple[Any, ...]
    options: Mapping[str, Any] = field(default_factory=dict)


class RecordingSurface:
    """Surface that stores every call instead of producing pixels."""

    def __init__(self, width: float = 640.0, height: float = 320.0) -> None:
        self._width = float(width)
        self._height = float(height)
        self.calls: list[DrawCall] = []

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    def __len__(self) -> int:
        return len(self.calls)

    def calls_of(self, op: str) -> list[DrawCall]:
        return [call for call in self.calls if call.op == op]

    def _record(self, op: str, *args: Any, **options: Any) -> None:
        self.calls.append(DrawCall(op, args, options))

    def clear(self) -> None:
        self._record("clear")

    def line(self, start, end, *, color, width=1.0, dash=None) -> None:
        self._record(
            "line",
            tuple(start),
            tuple(end),
            color=color,
            width=width,
            dash=tuple(dash) if dash else None,
        )

    def polyline(self, points, *, color, width=1.0) -> None:
        self._record("polyline", tuple(tuple(point) for point in points), color=color, width=width)

    def circle(self, center, radius, *, fill=None, stroke=None, width=1.0) -> None:
        self._record("circle", tuple(center), radius, fill=fill, stroke=stroke, width=width)

    def arc(self, center, radius, start, end, *, color, width=1.0) -> None:
        self._record("arc", tuple(center), radius, start, end, color=color, width=width)

    def text(self, position, content, *, color, size=12.0, align="left") -> None:
        self._record("text", tuple(position), content, color=color, size=size, align=align)
