"""Argument parsing helpers for the SolarGuard CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from ..configuration import EVENT_FILTERS
from .common import (
    add_export_argument,
    add_seed_argument,
    parse_signal,
    validated_export,
)
from .workflows import (
    RENDER_FORMATS,
    _handle_events,
    _handle_export,
    _handle_history,
    _handle_monitor,
    _handle_render,
    _handle_report,
)

__all__ = ["build_parser"]


SERIES_EXPORTS: tuple[str, ...] = ("csv", "json")
EVENT_EXPORTS: tuple[str, ...] = ("events-csv", "json")


def _section(config: Mapping[str, Any], name: str) -> dict[str, Any]:
    raw = config.get(name, {})
    return dict(raw) if isinstance(raw, Mapping) else {}


def _int_default(config: Mapping[str, Any], key: str, fallback: int) -> int:
    try:
        return int(config.get(key, fallback))
    except (TypeError, ValueError):
        return fallback


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg = _section(config, "logging")
    cli_cfg = _section(config, "cli")

    parser = argparse.ArgumentParser(
        prog="solarguard",
        description="SolarGuard – simulated space-weather telemetry and CME alerts",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding a [tool.solarguard] table.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    history_parser = subparsers.add_parser(
        "history",
        help="Generate a synthetic history for one signal.",
    )
    history_parser.add_argument(
        "--signal",
        type=parse_signal,
        required=True,
        help="Signal to generate (flux, speed, he_ratio or likelihood).",
    )
    history_parser.add_argument(
        "--count",
        type=int,
        default=_int_default(config, "history_size", 100),
        help="Number of samples (default: configured history_size).",
    )
    history_parser.add_argument(
        "--smoothing",
        type=int,
        default=None,
        help="Apply a trailing moving average of this window to the values.",
    )
    add_seed_argument(history_parser)
    add_export_argument(
        history_parser,
        default=validated_export(cli_cfg.get("history_export"), fallback="csv", allowed=SERIES_EXPORTS),
        choices=SERIES_EXPORTS,
        help_text="Exporter used to render the series (default: csv).",
    )
    history_parser.set_defaults(handler=_handle_history)

    events_parser = subparsers.add_parser(
        "events",
        help="Generate the CME event log.",
    )
    events_parser.add_argument(
        "--count",
        type=int,
        default=_int_default(config, "event_count", 20),
        help="Number of events (default: configured event_count).",
    )
    events_parser.add_argument(
        "--status",
        choices=EVENT_FILTERS,
        default=None,
        help="Only keep events with this status (default: configured event_filter).",
    )
    add_seed_argument(events_parser)
    add_export_argument(
        events_parser,
        default=validated_export(cli_cfg.get("events_export"), fallback="events-csv", allowed=EVENT_EXPORTS),
        choices=EVENT_EXPORTS,
        help_text="Exporter used to render the events (default: events-csv).",
    )
    events_parser.set_defaults(handler=_handle_events)

    render_parser = subparsers.add_parser(
        "render",
        help="Render a series chart or the likelihood gauge to SVG or PPM.",
    )
    render_parser.add_argument(
        "--signal",
        type=parse_signal,
        default=parse_signal("flux"),
        help="Signal to chart (default: flux).",
    )
    render_parser.add_argument(
        "--gauge",
        action="store_true",
        help="Render the likelihood gauge instead of a series chart.",
    )
    render_parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Destination file.",
    )
    render_parser.add_argument(
        "--format",
        choices=RENDER_FORMATS,
        default=None,
        help="Output format (default: inferred from the output suffix, else svg).",
    )
    render_parser.add_argument("--width", type=int, default=640, help="Canvas width in pixels.")
    render_parser.add_argument("--height", type=int, default=320, help="Canvas height in pixels.")
    render_parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Alert threshold override for the likelihood chart and gauge.",
    )
    add_seed_argument(render_parser)
    render_parser.set_defaults(handler=_handle_render)

    monitor_parser = subparsers.add_parser(
        "monitor",
        help="Run the live dashboard loop in the terminal.",
    )
    monitor_parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Stop after this many updates (default: run until interrupted).",
    )
    monitor_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between updates (default: configured tick_interval).",
    )
    monitor_parser.add_argument(
        "--clock-interval",
        dest="clock_interval",
        type=float,
        default=None,
        help="Seconds between clock lines (default: configured clock_interval).",
    )
    monitor_parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Alert threshold override.",
    )
    add_seed_argument(monitor_parser)
    monitor_parser.set_defaults(handler=_handle_monitor)

    report_parser = subparsers.add_parser(
        "report",
        help="Write the HTML dashboard report.",
    )
    report_parser.add_argument("--output", type=Path, required=True, help="Destination HTML file.")
    report_parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Alert threshold override.",
    )
    add_seed_argument(report_parser)
    report_parser.set_defaults(handler=_handle_report)

    export_parser = subparsers.add_parser(
        "export",
        help="Export the current series view as CSV or Parquet.",
    )
    export_parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Destination file (.csv, .parquet or .pq).",
    )
    export_parser.add_argument(
        "--raw",
        dest="smoothed",
        action="store_false",
        help="Export raw values instead of the smoothed display view.",
    )
    add_seed_argument(export_parser)
    export_parser.set_defaults(handler=_handle_export)

    return parser
