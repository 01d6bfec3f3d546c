"""Tabular views of series and events backed by :mod:`pandas`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Mapping

import pandas as pd

from .telemetry.records import Event, Signal
from .telemetry.series import Series

__all__ = ["events_frame", "series_frame", "write_frame"]


logger = logging.getLogger(__name__)

_PARQUET_DEPENDENCY_MESSAGE = (
    "Writing Parquet requires a pandas Parquet engine "
    "(install 'pyarrow' or 'fastparquet')."
)

EVENT_COLUMNS = ("id", "timestamp", "flux_spike", "speed", "score", "status")


def series_frame(
    series_map: Mapping[Signal | str, Series],
    *,
    include_anomalies: bool = True,
) -> pd.DataFrame:
    """Join series on their timestamps into a UTC-indexed frame.

    Each signal contributes a value column and, optionally, a boolean
    ``<signal>_anomaly`` column. Timestamps absent from a series are left
    as missing values.
    """

    columns: dict[str, pd.Series] = {}
    for key, series in series_map.items():
        name = Signal.parse(key).value
        index = pd.to_datetime(list(series.timestamps), unit="ms", utc=True)
        columns[name] = pd.Series(list(series.values), index=index, dtype=float)
        if include_anomalies:
            columns[f"{name}_anomaly"] = pd.Series(
                [sample.anomaly for sample in series], index=index, dtype="boolean"
            )
    if not columns:
        return pd.DataFrame(index=pd.DatetimeIndex([], tz="UTC", name="timestamp"))
    frame = pd.concat(columns, axis=1).sort_index()
    frame.index.name = "timestamp"
    return frame


def events_frame(events: Iterable[Event]) -> pd.DataFrame:
    rows = [
        {
            "id": event.id,
            "timestamp": pd.Timestamp(event.timestamp),
            "flux_spike": event.flux_spike,
            "speed": event.speed,
            "score": event.score,
            "status": event.status.value,
        }
        for event in events
    ]
    return pd.DataFrame(rows, columns=list(EVENT_COLUMNS))


def write_frame(frame: pd.DataFrame, path: Path | str) -> Path:
    """Write ``frame`` as CSV or Parquet depending on the suffix of ``path``."""

    destination = Path(path).expanduser()
    suffix = destination.suffix.lower()
    destination.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        frame.to_csv(destination)
    elif suffix in {".parquet", ".pq"}:
        try:
            frame.to_parquet(destination)
        except ImportError as exc:
            raise RuntimeError(_PARQUET_DEPENDENCY_MESSAGE) from exc
    else:
        raise ValueError(f"Unsupported export format: {destination.suffix or destination.name!r}")
    logger.info(
        "Frame exported.",
        extra={"event": "export.written", "path": str(destination), "rows": len(frame)},
    )
    return destination
