"""Exporter registry for SolarGuard outputs.

Every exporter maps a results payload to text. The payload is a mapping with
``series`` (signal → :class:`~solarguard.telemetry.series.Series`),
``events``, ``alert``, ``threshold``, ``current_likelihood`` and
``generated_at`` entries; exporters ignore keys they do not use.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Protocol

from ..io import events_frame, series_frame
from ..session import DashboardSession
from ..telemetry.generator import wall_clock_ms
from ..telemetry.series import Series
from .report_html import format_utc, html_exporter


class Exporter(Protocol):
    """Exporter callable protocol."""

    def __call__(self, results: Dict[str, Any]) -> str:  # pragma: no cover - interface only
        ...


def _normalise(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Series):
        return {
            "capacity": value.capacity,
            "samples": [_normalise(sample) for sample in value],
        }
    if is_dataclass(value) and not isinstance(value, type):
        return {key: _normalise(item) for key, item in asdict(value).items()}
    if isinstance(value, (list, tuple)):
        return [_normalise(item) for item in value]
    if isinstance(value, Mapping):
        return {str(_normalise(key)): _normalise(item) for key, item in value.items()}
    return value


def json_exporter(results: Dict[str, Any]) -> str:
    payload = _normalise(results)
    return json.dumps(payload, indent=2, sort_keys=True)


def csv_exporter(results: Dict[str, Any]) -> str:
    """Current series view as CSV, one row per timestamp."""

    include_anomalies = bool(results.get("include_anomalies", True))
    frame = series_frame(results.get("series") or {}, include_anomalies=include_anomalies)
    if not results.get("include_timestamps", True):
        return frame.to_csv(index=False)
    return frame.to_csv()


def events_csv_exporter(results: Dict[str, Any]) -> str:
    """CME event log as CSV."""

    return events_frame(results.get("events") or ()).to_csv(index=False)


def build_results(session: DashboardSession, *, smoothed: bool = True) -> Dict[str, Any]:
    """Assemble the exporter payload from the session's current state."""

    state = session.state if session.state is not None else session.start()
    series = session.visible_series(state) if smoothed else dict(state.series)
    return {
        "series": series,
        "events": session.filter_events(state.events),
        "alert": state.alert,
        "threshold": session.threshold,
        "current_likelihood": state.current_likelihood,
        "generated_at": wall_clock_ms(),
    }


exporters_registry: Dict[str, Exporter] = {
    "json": json_exporter,
    "csv": csv_exporter,
    "events-csv": events_csv_exporter,
    "html": html_exporter,
}

__all__ = [
    "Exporter",
    "build_results",
    "csv_exporter",
    "events_csv_exporter",
    "exporters_registry",
    "format_utc",
    "html_exporter",
    "json_exporter",
]
