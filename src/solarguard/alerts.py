"""Hysteresis alerting driven by the CME precursor likelihood score.

The alert raises when the score exceeds ``threshold`` and clears only once it
drops below ``threshold * CLEAR_RATIO``. Scores inside the dead band leave
the state untouched, so a score hovering near the threshold does not toggle
the banner on every update.
"""

from __future__ import annotations

import logging
from typing import Optional

from .telemetry.records import AlertState, Sample
from .telemetry.series import Series

__all__ = [
    "CLEAR_RATIO",
    "DEFAULT_THRESHOLD",
    "AlertEvaluator",
    "evaluate_alert",
    "initial_alert_state",
]


logger = logging.getLogger(__name__)


DEFAULT_THRESHOLD = 0.8
CLEAR_RATIO = 0.8


def evaluate_alert(sample: Sample, threshold: float, state: AlertState) -> AlertState:
    """Return the alert state that follows ``state`` after observing ``sample``."""

    score = sample.value
    if score > threshold:
        return AlertState(active=True, last_trigger=sample.timestamp)
    if state.active and score < threshold * CLEAR_RATIO:
        return AlertState(active=False, last_trigger=state.last_trigger)
    return state


def initial_alert_state(history: Series, threshold: float) -> AlertState:
    """Evaluate the last backfilled sample from a quiet start."""

    latest = history.latest
    if latest is None:
        return AlertState()
    return evaluate_alert(latest, threshold, AlertState())


class AlertEvaluator:
    """Track the alert state across updates and log transitions."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, state: Optional[AlertState] = None) -> None:
        self.threshold = float(threshold)
        self.state = state if state is not None else AlertState()

    def prime(self, history: Series) -> AlertState:
        self.state = AlertState()
        return self.update(history.latest) if history.latest is not None else self.state

    def update(self, sample: Sample) -> AlertState:
        previous = self.state
        current = evaluate_alert(sample, self.threshold, previous)
        if current.active and not previous.active:
            logger.warning(
                "CME precursor likelihood above threshold.",
                extra={
                    "event": "alert.raised",
                    "score": sample.value,
                    "threshold": self.threshold,
                    "timestamp": sample.timestamp,
                },
            )
        elif previous.active and not current.active:
            logger.info(
                "CME precursor alert cleared.",
                extra={
                    "event": "alert.cleared",
                    "score": sample.value,
                    "threshold": self.threshold,
                    "timestamp": sample.timestamp,
                },
            )
        self.state = current
        return current
