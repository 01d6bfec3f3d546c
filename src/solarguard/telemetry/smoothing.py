"""Display-only smoothing applied to series before rendering."""

from __future__ import annotations

import numpy as np

from .series import Series

__all__ = ["MAX_SMOOTHING_WINDOW", "moving_average", "smooth_series"]


MAX_SMOOTHING_WINDOW = 100


def moving_average(values, window: int) -> np.ndarray:
    """Trailing mean over the last ``min(window, i + 1)`` values for each index."""

    data = np.asarray(values, dtype=float)
    if data.size == 0:
        return data
    window = max(1, min(int(window), data.size))
    cumulative = np.cumsum(np.insert(data, 0, 0.0))
    indices = np.arange(1, data.size + 1)
    starts = np.maximum(indices - window, 0)
    return (cumulative[indices] - cumulative[starts]) / (indices - starts)


def smooth_series(series: Series, window: int) -> Series:
    """Return ``series`` with smoothed values; timestamps and anomaly flags are kept."""

    if window <= 1 or len(series) < 2:
        return series
    smoothed = moving_average(series.values, window)
    return series.with_values(smoothed.tolist())
