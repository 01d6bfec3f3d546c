"""Bounded, immutable telemetry series.

A :class:`Series` keeps samples in arrival order and never grows beyond its
``capacity``: appending to a full series evicts the oldest entries first.
Every mutation returns a new value so that readers (renderers, exporters)
always observe a consistent snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence

from .records import Sample

__all__ = ["DEFAULT_SERIES_CAPACITY", "Series"]


DEFAULT_SERIES_CAPACITY = 100


@dataclass(frozen=True)
class Series:
    """Ordered samples bounded to ``capacity`` entries (FIFO eviction)."""

    samples: tuple[Sample, ...] = ()
    capacity: int = DEFAULT_SERIES_CAPACITY

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("Series requires a positive capacity")
        samples = tuple(self.samples)
        if len(samples) > self.capacity:
            samples = samples[-self.capacity :]
        object.__setattr__(self, "samples", samples)

    @classmethod
    def from_samples(
        cls, samples: Iterable[Sample], *, capacity: int = DEFAULT_SERIES_CAPACITY
    ) -> "Series":
        return cls(tuple(samples), capacity)

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    def __getitem__(self, index: int) -> Sample:
        return self.samples[index]

    def __bool__(self) -> bool:
        return bool(self.samples)

    @property
    def values(self) -> tuple[float, ...]:
        return tuple(sample.value for sample in self.samples)

    @property
    def timestamps(self) -> tuple[int, ...]:
        return tuple(sample.timestamp for sample in self.samples)

    @property
    def latest(self) -> Optional[Sample]:
        return self.samples[-1] if self.samples else None

    @property
    def anomalies(self) -> tuple[Sample, ...]:
        return tuple(sample for sample in self.samples if sample.anomaly)

    def append(self, sample: Sample) -> "Series":
        """Return a new series with ``sample`` appended and the oldest evicted."""

        return self.extend((sample,))

    def extend(self, samples: Sequence[Sample] | Iterable[Sample]) -> "Series":
        combined = self.samples + tuple(samples)
        return Series(combined[-self.capacity :], self.capacity)

    def with_values(self, values: Sequence[float]) -> "Series":
        """Return a copy whose sample values are replaced by ``values``."""

        if len(values) != len(self.samples):
            raise ValueError("values must match the number of samples")
        replaced = tuple(
            Sample(sample.timestamp, float(value), sample.anomaly)
            for sample, value in zip(self.samples, values)
        )
        return Series(replaced, self.capacity)
