"""Dashboard session: owns the retained series, events and alert state.

The session is the only stateful piece around the pure telemetry core. It
backfills history on :meth:`DashboardSession.start`, pulls one realtime
sample per signal on every :meth:`DashboardSession.tick`, and replaces its
:class:`DashboardState` with a new value each time rather than mutating it.
:meth:`DashboardSession.run` drives ticks from two cooperative asyncio
loops, one for data updates and one for the displayed clock.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from .alerts import AlertEvaluator
from .configuration import DashboardConfig
from .telemetry.generator import (
    DEFAULT_STEP_MS,
    GeneratorClock,
    RandomSource,
    default_random_source,
    generate_events,
    generate_history,
    generate_realtime_sample,
    wall_clock_ms,
)
from .telemetry.profiles import SignalProfile
from .telemetry.records import AlertState, Event, EventStatus, Signal
from .telemetry.series import Series
from .telemetry.smoothing import smooth_series

__all__ = ["DashboardSession", "DashboardState"]


logger = logging.getLogger(__name__)


UpdateCallback = Callable[["DashboardState"], Any]
ClockCallback = Callable[[int], Any]


@dataclass(frozen=True)
class DashboardState:
    """Snapshot of everything the dashboard displays."""

    series: Mapping[Signal, Series]
    events: tuple[Event, ...]
    alert: AlertState
    current_likelihood: float
    clock_time: int
    ticks: int = 0

    def __getitem__(self, signal: Signal | str) -> Series:
        return self.series[Signal.parse(signal)]


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class DashboardSession:
    """Controller wiring the generator, the evaluator and the display filters."""

    def __init__(
        self,
        config: DashboardConfig | None = None,
        *,
        rng: RandomSource | None = None,
        step: int = DEFAULT_STEP_MS,
        profiles: Optional[Mapping[Signal, SignalProfile]] = None,
    ) -> None:
        self.config = config if config is not None else DashboardConfig()
        self.rng = rng if rng is not None else default_random_source(self.config.seed)
        self.step = int(step)
        self.profiles = profiles
        self.clock: GeneratorClock | None = None
        self.state: DashboardState | None = None
        self._evaluator = AlertEvaluator(self.config.threshold)
        self._stop_event: asyncio.Event | None = None

    @property
    def threshold(self) -> float:
        return self.config.threshold

    def start(self, now: int | None = None) -> DashboardState:
        """Backfill history ending at ``now`` and build the event log."""

        config = self.config
        started = wall_clock_ms() if now is None else int(now)
        clock = GeneratorClock.backfilled(started, config.history_size, step=self.step)
        series = {
            signal: generate_history(
                signal,
                config.history_size,
                clock,
                self.rng,
                capacity=config.capacity,
                profiles=self.profiles,
            )
            for signal in Signal
        }
        events = generate_events(config.event_count, clock, self.rng)
        likelihood = series[Signal.LIKELIHOOD]
        alert = self._evaluator.prime(likelihood)
        latest = likelihood.latest

        self.clock = clock
        self.state = DashboardState(
            series=MappingProxyType(series),
            events=events,
            alert=alert,
            current_likelihood=latest.value if latest is not None else 0.0,
            clock_time=started,
        )
        logger.info(
            "Dashboard session started.",
            extra={
                "event": "session.started",
                "history_size": config.history_size,
                "event_count": len(events),
                "base_time": clock.base_time,
                "alert_active": alert.active,
            },
        )
        return self.state

    def tick(self, now: int | None = None) -> DashboardState:
        """Append one realtime sample per signal and re-evaluate the alert."""

        if self.state is None or self.clock is None:
            self.start(now)
        assert self.state is not None and self.clock is not None
        state = self.state
        requested = wall_clock_ms() if now is None else int(now)
        timestamp = max(requested, state.clock_time)

        update = generate_realtime_sample(
            self.clock, self.rng, now=timestamp, profiles=self.profiles
        )
        series = {signal: state.series[signal].append(sample) for signal, sample in update.items()}
        alert = self._evaluator.update(update.likelihood)

        self.state = replace(
            state,
            series=MappingProxyType(series),
            alert=alert,
            current_likelihood=update.likelihood.value,
            clock_time=timestamp,
            ticks=state.ticks + 1,
        )
        logger.debug(
            "Dashboard tick.",
            extra={
                "event": "session.tick",
                "tick": self.state.ticks,
                "likelihood": update.likelihood.value,
                "alert_active": alert.active,
            },
        )
        return self.state

    def set_threshold(self, threshold: float) -> None:
        """Change the alert threshold; only future evaluations see it."""

        self.config = self.config.with_threshold(threshold)
        self._evaluator.threshold = self.config.threshold

    def visible_series(self, state: DashboardState | None = None) -> dict[Signal, Series]:
        """Return displayed series after visibility flags and smoothing."""

        state = state if state is not None else self.state
        if state is None:
            return {}
        window = self.config.smoothing_window
        return {
            signal: smooth_series(series, window)
            for signal, series in state.series.items()
            if self.config.is_visible(signal)
        }

    def filter_events(self, events: tuple[Event, ...] | None = None) -> tuple[Event, ...]:
        """Apply the configured date range (inclusive) and status filter."""

        if events is None:
            events = self.state.events if self.state is not None else ()
        selected = list(events)
        date_range = self.config.date_range
        if date_range is not None:
            start, end = date_range
            selected = [event for event in selected if start <= event.timestamp <= end]
        kind = self.config.event_filter
        if kind != "all":
            wanted = EventStatus(kind)
            selected = [event for event in selected if event.status is wanted]
        return tuple(selected)

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

    async def run(
        self,
        ticks: int | None = None,
        *,
        on_update: UpdateCallback | None = None,
        on_clock: ClockCallback | None = None,
    ) -> DashboardState:
        """Drive periodic updates until ``ticks`` updates ran or :meth:`stop`."""

        if self.state is None:
            self.start()
        stop_event = asyncio.Event()
        self._stop_event = stop_event
        config = self.config

        async def data_loop() -> None:
            completed = 0
            while ticks is None or completed < ticks:
                await asyncio.sleep(config.tick_interval)
                state = self.tick()
                completed += 1
                if on_update is not None:
                    await _maybe_await(on_update(state))

        async def clock_loop() -> None:
            while True:
                await asyncio.sleep(config.clock_interval)
                if on_clock is not None:
                    await _maybe_await(on_clock(wall_clock_ms()))

        data_task = asyncio.create_task(data_loop())
        clock_task = asyncio.create_task(clock_loop())
        stop_task = asyncio.create_task(stop_event.wait())
        try:
            done, _ = await asyncio.wait(
                {data_task, stop_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (data_task, clock_task, stop_task):
                task.cancel()
            await asyncio.gather(data_task, clock_task, stop_task, return_exceptions=True)
            self._stop_event = None
        if data_task in done and not data_task.cancelled():
            data_task.result()
        logger.info(
            "Dashboard session stopped.",
            extra={"event": "session.stopped", "ticks": self.state.ticks if self.state else 0},
        )
        assert self.state is not None
        return self.state
