from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from solarguard.configuration import ConfigurationError, DashboardConfig
from solarguard.session import DashboardSession
from solarguard.telemetry.records import EventStatus, Signal

from tests.helpers import BASE_TIME, STEP, ConstantRandom


def _session(**overrides) -> DashboardSession:
    options = {"history_size": 10, "capacity": 10, "event_count": 4, "seed": 7}
    options.update(overrides)
    return DashboardSession(DashboardConfig(**options), step=STEP)


def test_start_backfills_history_ending_at_start() -> None:
    session = _session()

    state = session.start(now=BASE_TIME)

    assert set(state.series) == set(Signal)
    for series in state.series.values():
        assert len(series) == 10
        assert series.timestamps[-1] == BASE_TIME
        assert series.timestamps[0] == BASE_TIME - 9 * STEP
    assert len(state.events) == 4
    assert state.clock_time == BASE_TIME
    assert state.ticks == 0
    assert state.current_likelihood == state[Signal.LIKELIHOOD].latest.value


def test_start_logs_structured_event(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="solarguard.session")

    _session().start(now=BASE_TIME)

    (record,) = [r for r in caplog.records if getattr(r, "event", None) == "session.started"]
    assert record.history_size == 10
    assert record.event_count == 4


def test_tick_appends_and_evicts() -> None:
    session = _session()
    started = session.start(now=BASE_TIME)

    state = session.tick(now=BASE_TIME + 2000)

    flux = state[Signal.FLUX]
    assert len(flux) == 10
    assert flux.timestamps[-1] == BASE_TIME + 2000
    assert flux.timestamps[0] == started[Signal.FLUX].timestamps[1]
    assert state.ticks == 1
    assert state.clock_time == BASE_TIME + 2000
    assert started.ticks == 0


def test_tick_never_moves_backwards_in_time() -> None:
    session = _session()
    session.start(now=BASE_TIME)

    state = session.tick(now=BASE_TIME - 5000)

    assert state.clock_time == BASE_TIME
    assert all(list(series.timestamps) == sorted(series.timestamps) for series in state.series.values())


def test_tick_without_start_starts_session() -> None:
    session = _session()

    state = session.tick(now=BASE_TIME)

    assert state.ticks == 1
    assert len(state[Signal.SPEED]) == 10


def test_threshold_change_affects_next_tick_only() -> None:
    session = DashboardSession(
        DashboardConfig(history_size=5, event_count=0), rng=ConstantRandom(0.5), step=STEP
    )
    state = session.start(now=BASE_TIME)
    assert state.alert.active is False

    session.set_threshold(0.0)

    assert session.state.alert.active is False
    assert session.tick(now=BASE_TIME + 1000).alert.active is True
    assert session.threshold == 0.0


def test_threshold_outside_unit_interval_is_rejected() -> None:
    session = _session()

    with pytest.raises(ConfigurationError):
        session.set_threshold(1.5)
    assert session.threshold == 0.8


def test_visible_series_applies_flags_and_smoothing() -> None:
    session = _session(visible={"speed": False}, smoothing_window=3)
    state = session.start(now=BASE_TIME)

    visible = session.visible_series(state)

    assert Signal.SPEED not in visible
    assert Signal.LIKELIHOOD in visible
    raw = state[Signal.FLUX].values
    assert visible[Signal.FLUX].values[2] == pytest.approx(sum(raw[:3]) / 3)
    assert visible[Signal.FLUX].timestamps == state[Signal.FLUX].timestamps


def test_filter_events_by_date_range_and_status() -> None:
    session = DashboardSession(
        DashboardConfig(history_size=1, event_count=3), rng=ConstantRandom(0.9), step=STEP
    )
    state = session.start(now=BASE_TIME)
    first, second, _ = state.events

    ranged = DashboardSession(
        DashboardConfig(date_range=(first.timestamp, second.timestamp)), step=STEP
    )
    assert ranged.filter_events(state.events) == (first, second)

    normal_only = DashboardSession(DashboardConfig(event_filter="normal"), step=STEP)
    assert normal_only.filter_events(state.events) == ()

    warning_only = DashboardSession(DashboardConfig(event_filter="warning"), step=STEP)
    assert all(event.status is EventStatus.WARNING for event in warning_only.filter_events(state.events))
    assert len(warning_only.filter_events(state.events)) == 3


def test_filter_events_without_matches_is_empty() -> None:
    start = datetime(1990, 1, 1, tzinfo=timezone.utc)
    session = _session(date_range=(start, start))
    state = session.start(now=BASE_TIME)

    assert session.filter_events(state.events) == ()


def test_run_performs_requested_ticks() -> None:
    session = _session(tick_interval=0.01, clock_interval=0.005)
    session.start(now=BASE_TIME)
    updates: list[int] = []
    clocks: list[int] = []

    final = asyncio.run(
        session.run(3, on_update=lambda state: updates.append(state.ticks), on_clock=clocks.append)
    )

    assert updates == [1, 2, 3]
    assert final.ticks == 3
    assert clocks


def test_run_accepts_coroutine_callbacks() -> None:
    session = _session(tick_interval=0.01)
    seen: list[int] = []

    async def on_update(state) -> None:
        seen.append(state.ticks)

    asyncio.run(session.run(2, on_update=on_update))

    assert seen == [1, 2]


def test_stop_ends_run_loop() -> None:
    session = _session(tick_interval=0.01)

    def on_update(state) -> None:
        session.stop()

    final = asyncio.run(session.run(on_update=on_update))

    assert final.ticks == 1


def test_run_propagates_callback_errors() -> None:
    session = _session(tick_interval=0.01)

    def on_update(state) -> None:
        raise RuntimeError("display failed")

    with pytest.raises(RuntimeError, match="display failed"):
        asyncio.run(session.run(5, on_update=on_update))
