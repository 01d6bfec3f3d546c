"""Terminal sparklines for the live monitor."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from ..telemetry.series import Series

DEFAULT_SPARKLINE_BLOCKS: Sequence[str] = "▁▂▃▄▅▆▇█"

__all__ = ["DEFAULT_SPARKLINE_BLOCKS", "render_sparkline", "series_sparkline"]


def render_sparkline(
    values: Iterable[float],
    *,
    width: int | None = None,
    blocks: Sequence[str] = DEFAULT_SPARKLINE_BLOCKS,
) -> str:
    """Render ``values`` as a Unicode block-character sparkline.

    Parameters
    ----------
    values:
        Numeric values to render; non-finite entries are dropped.
    width:
        Optional maximum number of samples, keeping the most recent ones.
    blocks:
        Characters representing increasing magnitudes.
    """

    data = np.asarray(list(values), dtype=float)
    data = data[np.isfinite(data)]
    if width is not None:
        if width <= 0:
            return ""
        data = data[-int(width) :]
    palette = tuple(blocks)
    if data.size == 0 or not palette:
        return ""

    minimum = float(data.min())
    span = float(data.max()) - minimum
    buckets = len(palette) - 1
    if span <= 0.0 or buckets <= 0:
        return palette[0] * int(data.size)

    indices = np.clip(np.rint((data - minimum) / span * buckets), 0, buckets).astype(int)
    return "".join(palette[index] for index in indices)


def series_sparkline(series: Series, *, width: int | None = None, marker: str | None = "!") -> str:
    """Sparkline of ``series`` with anomalous samples replaced by ``marker``."""

    line = render_sparkline(series.values, width=width)
    if not marker or not line:
        return line
    flags = [sample.anomaly for sample in series][-len(line) :]
    return "".join(marker if flagged else char for char, flagged in zip(line, flags))
