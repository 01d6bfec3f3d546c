"""Top-level package for SolarGuard.

SolarGuard simulates space-weather telemetry (proton flux, solar wind
speed, He++/H+ ratio and a CME precursor likelihood score), raises
threshold alerts with hysteresis and renders the readings as series charts
and a likelihood gauge.
"""

from ._version import __version__
from .alerts import AlertEvaluator, evaluate_alert
from .configuration import ConfigurationError, DashboardConfig, load_dashboard_config
from .exporters import exporters_registry
from .session import DashboardSession, DashboardState
from .telemetry import (
    AlertState,
    Event,
    EventStatus,
    GeneratorClock,
    Sample,
    Series,
    Signal,
    TelemetryGenerator,
    generate_events,
    generate_history,
    generate_realtime_sample,
)
from .visualization import RecordingSurface, SvgSurface, render_gauge, render_series

__all__ = [
    "__version__",
    "AlertEvaluator",
    "AlertState",
    "ConfigurationError",
    "DashboardConfig",
    "DashboardSession",
    "DashboardState",
    "Event",
    "EventStatus",
    "GeneratorClock",
    "RecordingSurface",
    "Sample",
    "Series",
    "Signal",
    "SvgSurface",
    "TelemetryGenerator",
    "evaluate_alert",
    "exporters_registry",
    "generate_events",
    "generate_history",
    "generate_realtime_sample",
    "load_dashboard_config",
    "render_gauge",
    "render_series",
]
