"""Synthetic space-weather telemetry generator.

Every signal follows the same closed form::

    value = clamp(baseline + amplitude * sin(phase * angular_step) + noise + spike)

where ``noise`` is uniform and centred on zero and ``spike`` fires with a
fixed per-signal probability. ``phase`` is the simulated sample index: the
history uses ``i`` while realtime samples use the fractional index of the
wall-clock instant relative to :attr:`GeneratorClock.base_time`, so the live
stream continues the curve drawn by the backfill.

Randomness flows through a :class:`RandomSource` (anything exposing
``random()``) so that tests can inject seeded or scripted sources.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Mapping, Optional, Protocol

import numpy as np

from .profiles import SignalProfile, default_profiles
from .records import Event, EventStatus, Sample, Signal
from .series import DEFAULT_SERIES_CAPACITY, Series

__all__ = [
    "DEFAULT_STEP_MS",
    "EVENT_STEP_MULTIPLIER",
    "GeneratorClock",
    "RandomSource",
    "RealtimeUpdate",
    "TelemetryGenerator",
    "compute_sample",
    "default_random_source",
    "generate_events",
    "generate_history",
    "generate_realtime_sample",
    "wall_clock_ms",
]


DEFAULT_STEP_MS = 5 * 60 * 1000
EVENT_STEP_MULTIPLIER = 10

_EVENT_FLUX_MIN = 800.0
_EVENT_FLUX_SPAN = 1500.0
_EVENT_SPEED_MIN = 350.0
_EVENT_SPEED_SPAN = 400.0


class RandomSource(Protocol):
    """Uniform ``[0, 1)`` source; :class:`numpy.random.Generator` qualifies."""

    def random(self) -> float:  # pragma: no cover - interface only
        ...


def default_random_source(seed: int | None = None) -> RandomSource:
    return np.random.default_rng(seed)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class GeneratorClock:
    """Session time base: fixed origin and simulated step between indices."""

    base_time: int
    step: int = DEFAULT_STEP_MS

    def __post_init__(self) -> None:
        if self.step <= 0:
            raise ValueError("GeneratorClock step must be positive")

    @classmethod
    def now(cls, *, step: int = DEFAULT_STEP_MS) -> "GeneratorClock":
        return cls(wall_clock_ms(), step)

    @classmethod
    def backfilled(
        cls, end: int, count: int, *, step: int = DEFAULT_STEP_MS
    ) -> "GeneratorClock":
        """Return a clock whose ``count``-long history ends exactly at ``end``."""

        return cls(int(end) - max(count - 1, 0) * step, step)

    def timestamp_at(self, index: int) -> int:
        return self.base_time + index * self.step

    def phase_at(self, timestamp: int) -> float:
        return (timestamp - self.base_time) / self.step


def compute_sample(
    profile: SignalProfile, phase: float, timestamp: int, rng: RandomSource
) -> Sample:
    """Draw one sample of ``profile`` at ``phase``.

    Draw order is fixed: noise, spike trigger and, only when the spike
    fires, its magnitude.
    """

    noise = (float(rng.random()) - 0.5) * profile.noise
    spike = 0.0
    if float(rng.random()) > 1.0 - profile.spike_probability:
        spike = profile.spike_min + float(rng.random()) * profile.spike_span
    raw = (
        profile.baseline
        + math.sin(phase * profile.angular_step) * profile.amplitude
        + noise
        + spike
    )
    value = profile.clamp(raw)
    return Sample(
        timestamp=int(timestamp),
        value=value,
        anomaly=profile.anomaly.flags(value=value, spike=spike),
    )


def _resolve_profile(
    signal: Signal | str, profiles: Optional[Mapping[Signal, SignalProfile]]
) -> SignalProfile:
    table = profiles if profiles is not None else default_profiles()
    return table[Signal.parse(signal)]


def generate_history(
    signal: Signal | str,
    count: int,
    clock: GeneratorClock,
    rng: RandomSource,
    *,
    capacity: int | None = None,
    profiles: Optional[Mapping[Signal, SignalProfile]] = None,
) -> Series:
    """Return ``count`` samples spaced by ``clock.step`` from ``clock.base_time``.

    ``count <= 0`` yields an empty series.
    """

    profile = _resolve_profile(signal, profiles)
    count = max(int(count), 0)
    samples = [
        compute_sample(profile, float(index), clock.timestamp_at(index), rng)
        for index in range(count)
    ]
    resolved_capacity = capacity if capacity is not None else max(count, DEFAULT_SERIES_CAPACITY)
    return Series.from_samples(samples, capacity=resolved_capacity)


@dataclass(frozen=True)
class RealtimeUpdate:
    """One realtime sample per signal, all sharing the same timestamp."""

    flux: Sample
    speed: Sample
    he_ratio: Sample
    likelihood: Sample

    def __getitem__(self, signal: Signal | str) -> Sample:
        return getattr(self, Signal.parse(signal).value)

    def __iter__(self) -> Iterator[Signal]:
        return iter(Signal)

    def items(self) -> Iterator[tuple[Signal, Sample]]:
        for signal in Signal:
            yield signal, self[signal]


def generate_realtime_sample(
    clock: GeneratorClock,
    rng: RandomSource,
    *,
    now: int | None = None,
    profiles: Optional[Mapping[Signal, SignalProfile]] = None,
) -> RealtimeUpdate:
    """Sample every signal at wall-clock ``now`` on the simulated phase axis."""

    timestamp = wall_clock_ms() if now is None else int(now)
    phase = clock.phase_at(timestamp)
    samples = {
        signal.value: compute_sample(_resolve_profile(signal, profiles), phase, timestamp, rng)
        for signal in Signal
    }
    return RealtimeUpdate(**samples)


def generate_events(count: int, clock: GeneratorClock, rng: RandomSource) -> tuple[Event, ...]:
    """Build ``count`` CME events spaced ten simulated steps apart."""

    events: list[Event] = []
    spacing = clock.step * EVENT_STEP_MULTIPLIER
    for index in range(max(int(count), 0)):
        millis = clock.base_time + index * spacing
        timestamp = datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc)
        flux_spike = _EVENT_FLUX_MIN + float(rng.random()) * _EVENT_FLUX_SPAN
        speed = _EVENT_SPEED_MIN + float(rng.random()) * _EVENT_SPEED_SPAN
        score = float(rng.random())
        events.append(
            Event(
                id=f"CME-{timestamp.year}-{index + 1:03d}",
                timestamp=timestamp,
                flux_spike=flux_spike,
                speed=speed,
                score=score,
                status=EventStatus.from_score(score),
            )
        )
    return tuple(events)


class TelemetryGenerator:
    """Facade bundling a clock, a random source and signal profiles."""

    def __init__(
        self,
        clock: GeneratorClock | None = None,
        rng: RandomSource | None = None,
        *,
        profiles: Optional[Mapping[Signal, SignalProfile]] = None,
    ) -> None:
        self.clock = clock if clock is not None else GeneratorClock.now()
        self.rng = rng if rng is not None else default_random_source()
        self.profiles = profiles if profiles is not None else default_profiles()

    def generate_history(self, signal: Signal | str, count: int, *, capacity: int | None = None) -> Series:
        return generate_history(
            signal, count, self.clock, self.rng, capacity=capacity, profiles=self.profiles
        )

    def generate_events(self, count: int) -> tuple[Event, ...]:
        return generate_events(count, self.clock, self.rng)

    def realtime_sample(self, now: int | None = None) -> RealtimeUpdate:
        return generate_realtime_sample(self.clock, self.rng, now=now, profiles=self.profiles)
