"""Telemetry record definitions shared by the generator, alerts and renderers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

__all__ = [
    "EVENT_WARNING_SCORE",
    "AlertPhase",
    "AlertState",
    "Event",
    "EventStatus",
    "Sample",
    "Signal",
]


EVENT_WARNING_SCORE = 0.8


class Signal(str, Enum):
    """Telemetry channels produced by the generator."""

    FLUX = "flux"
    SPEED = "speed"
    HE_RATIO = "he_ratio"
    LIKELIHOOD = "likelihood"

    @classmethod
    def parse(cls, value: "str | Signal") -> "Signal":
        if isinstance(value, Signal):
            return value
        key = str(value).strip().lower().replace("-", "_")
        aliases = {"heratio": "he_ratio", "ratio": "he_ratio", "score": "likelihood"}
        key = aliases.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown telemetry signal: {value!r}") from None


@dataclass(frozen=True)
class Sample:
    """Single telemetry sample.

    ``timestamp`` is expressed in epoch milliseconds. ``anomaly`` is resolved
    once by the generator and never recomputed downstream.
    """

    timestamp: int
    value: float
    anomaly: bool = False


class EventStatus(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"

    @classmethod
    def from_score(cls, score: float) -> "EventStatus":
        return cls.WARNING if score > EVENT_WARNING_SCORE else cls.NORMAL


@dataclass(frozen=True)
class Event:
    """Simulated CME event row; ``status`` is fixed when the event is built."""

    id: str
    timestamp: datetime
    flux_spike: float
    speed: float
    score: float
    status: EventStatus

    @property
    def is_warning(self) -> bool:
        return self.status is EventStatus.WARNING


class AlertPhase(str, Enum):
    QUIET = "quiet"
    ALERTING = "alerting"


@dataclass(frozen=True)
class AlertState:
    """Alert flag plus the timestamp of the most recent trigger."""

    active: bool = False
    last_trigger: int | None = None

    @property
    def phase(self) -> AlertPhase:
        return AlertPhase.ALERTING if self.active else AlertPhase.QUIET
