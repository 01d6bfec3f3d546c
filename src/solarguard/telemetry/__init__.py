"""Synthetic telemetry records, series and generator."""

from solarguard.telemetry.generator import (
    DEFAULT_STEP_MS,
    GeneratorClock,
    RandomSource,
    RealtimeUpdate,
    TelemetryGenerator,
    compute_sample,
    default_random_source,
    generate_events,
    generate_history,
    generate_realtime_sample,
)
from solarguard.telemetry.profiles import SignalProfile, default_profiles, get_profile
from solarguard.telemetry.records import (
    AlertPhase,
    AlertState,
    Event,
    EventStatus,
    Sample,
    Signal,
)
from solarguard.telemetry.series import DEFAULT_SERIES_CAPACITY, Series
from solarguard.telemetry.smoothing import moving_average, smooth_series

__all__ = [
    "AlertPhase",
    "AlertState",
    "DEFAULT_SERIES_CAPACITY",
    "DEFAULT_STEP_MS",
    "Event",
    "EventStatus",
    "GeneratorClock",
    "RandomSource",
    "RealtimeUpdate",
    "Sample",
    "Series",
    "Signal",
    "SignalProfile",
    "TelemetryGenerator",
    "compute_sample",
    "default_profiles",
    "default_random_source",
    "generate_events",
    "generate_history",
    "generate_realtime_sample",
    "get_profile",
    "moving_average",
    "smooth_series",
]
