"""Command handlers for the SolarGuard CLI."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Mapping

from ..exporters import build_results, html_exporter
from ..exporters.report_html import format_utc
from ..io import series_frame, write_frame
from ..session import DashboardSession, DashboardState
from ..telemetry.generator import TelemetryGenerator, default_random_source
from ..telemetry.profiles import get_profile
from ..telemetry.records import Signal
from ..telemetry.smoothing import smooth_series
from ..visualization.gauge import render_gauge
from ..visualization.raster import RasterSurface
from ..visualization.series import render_series
from ..visualization.sparkline import series_sparkline
from ..visualization.svg import SvgSurface
from .common import dashboard_config, render_payload, write_output
from .errors import CliError

__all__ = [
    "format_monitor_frame",
    "_handle_events",
    "_handle_export",
    "_handle_history",
    "_handle_monitor",
    "_handle_render",
    "_handle_report",
]


logger = logging.getLogger(__name__)

RENDER_FORMATS: tuple[str, ...] = ("svg", "ppm")
SPARKLINE_WIDTH = 60


def _generator(seed: int | None) -> TelemetryGenerator:
    return TelemetryGenerator(rng=default_random_source(seed))


def _handle_history(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    settings = dashboard_config(config, seed=namespace.seed, smoothing_window=namespace.smoothing)
    signal: Signal = namespace.signal
    generator = _generator(settings.seed)
    series = generator.generate_history(signal, namespace.count)
    if namespace.smoothing is not None:
        series = smooth_series(series, settings.smoothing_window)
    return render_payload({"series": {signal: series}}, namespace.export)


def _handle_events(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    settings = dashboard_config(config, seed=namespace.seed, event_filter=namespace.status)
    session = DashboardSession(settings)
    events = session.filter_events(_generator(settings.seed).generate_events(namespace.count))
    return render_payload({"events": events, "threshold": settings.threshold}, namespace.export)


def _resolve_render_format(namespace: argparse.Namespace) -> str:
    if namespace.format:
        return namespace.format
    suffix = Path(namespace.output).suffix.lower().lstrip(".")
    return suffix if suffix in RENDER_FORMATS else "svg"


def _handle_render(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    settings = dashboard_config(config, seed=namespace.seed, threshold=namespace.threshold)
    if namespace.width <= 0 or namespace.height <= 0:
        raise CliError(
            "Render dimensions must be positive.",
            category="usage",
            context={"width": namespace.width, "height": namespace.height},
        )
    signal: Signal = Signal.LIKELIHOOD if namespace.gauge else namespace.signal
    generator = _generator(settings.seed)
    history = generator.generate_history(signal, settings.history_size, capacity=settings.capacity)

    output_format = _resolve_render_format(namespace)
    if output_format == "ppm":
        surface: SvgSurface | RasterSurface = RasterSurface(namespace.width, namespace.height)
    else:
        surface = SvgSurface(namespace.width, namespace.height, background="#1e293b")

    if namespace.gauge:
        latest = history.latest
        render_gauge(surface, latest.value if latest is not None else 0.0, settings.threshold)
        subject = "likelihood gauge"
    else:
        profile = get_profile(signal)
        threshold = (
            settings.threshold if signal is Signal.LIKELIHOOD else profile.display_threshold
        )
        series = smooth_series(history, settings.smoothing_window)
        render_series(surface, series, profile.title, profile.color, threshold)
        subject = f"{signal.value} series"

    content = surface.to_ppm() if isinstance(surface, RasterSurface) else surface.to_svg()
    destination = write_output(namespace.output, content)
    logger.info(
        "Render written.",
        extra={"event": "render.written", "path": str(destination), "format": output_format},
    )
    return f"Rendered {subject} to {destination}"


def format_monitor_frame(state: DashboardState, session: DashboardSession) -> str:
    """Text frame for one monitor update: clock, banner and sparklines."""

    alert = state.alert
    if alert.active:
        banner = f"ALERT: CME precursor detected | last trigger {format_utc(alert.last_trigger)}"
    else:
        banner = "Status: nominal"
    lines = [
        f"[{format_utc(state.clock_time)}] tick {state.ticks} | likelihood {state.current_likelihood:.3f}"
        f" | threshold {session.threshold:.2f} | {banner}"
    ]
    for signal, series in session.visible_series(state).items():
        latest = series.latest
        value = f"{latest.value:.3f}" if latest is not None else "-"
        sparkline = series_sparkline(series, width=SPARKLINE_WIDTH)
        lines.append(f"  {signal.value:<10} {sparkline} {value}")
    return "\n".join(lines)


def _handle_monitor(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    settings = dashboard_config(
        config,
        seed=namespace.seed,
        threshold=namespace.threshold,
        tick_interval=namespace.interval,
        clock_interval=namespace.clock_interval,
    )
    session = DashboardSession(settings)
    session.start()

    def on_update(state: DashboardState) -> None:
        sys.stdout.write(format_monitor_frame(state, session) + "\n")
        sys.stdout.flush()

    def on_clock(now: int) -> None:
        sys.stdout.write(f"[{format_utc(now)}]\n")
        sys.stdout.flush()

    try:
        final = asyncio.run(
            session.run(namespace.ticks, on_update=on_update, on_clock=on_clock)
        )
    except KeyboardInterrupt:
        session.stop()
        return "Monitor interrupted."
    return f"Monitor stopped after {final.ticks} ticks (alert {final.alert.phase.value})."


def _handle_report(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    settings = dashboard_config(config, seed=namespace.seed, threshold=namespace.threshold)
    session = DashboardSession(settings)
    session.start()
    document = html_exporter(build_results(session))
    destination = write_output(namespace.output, document)
    logger.info(
        "Report written.",
        extra={"event": "report.written", "path": str(destination)},
    )
    return f"Report written to {destination}"


def _handle_export(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    settings = dashboard_config(config, seed=namespace.seed)
    session = DashboardSession(settings)
    state = session.start()
    series = session.visible_series(state) if namespace.smoothed else dict(state.series)
    frame = series_frame(series)
    try:
        destination = write_frame(frame, namespace.output)
    except ValueError as exc:
        raise CliError(str(exc), category="usage", context={"path": namespace.output}) from exc
    except RuntimeError as exc:
        raise CliError(str(exc), category="runtime", context={"path": namespace.output}) from exc
    except OSError as exc:
        raise CliError(
            f"Unable to write {namespace.output}: {exc.strerror or exc}",
            category="io",
            context={"path": namespace.output},
        ) from exc
    return f"Exported {len(frame)} rows to {destination}"
