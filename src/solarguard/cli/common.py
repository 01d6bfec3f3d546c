"""Shared helpers for SolarGuard command modules."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Sequence

from ..configuration import ConfigurationError, DashboardConfig
from ..exporters import exporters_registry
from ..telemetry.records import Signal
from .errors import CliError

__all__ = [
    "add_export_argument",
    "add_seed_argument",
    "dashboard_config",
    "parse_signal",
    "render_payload",
    "validated_export",
    "write_output",
]


def validated_export(value: Any, *, fallback: str, allowed: Sequence[str] | None = None) -> str:
    choices = tuple(allowed) if allowed is not None else tuple(exporters_registry)
    if isinstance(value, str) and value in choices:
        return value
    return fallback


def add_export_argument(
    parser: argparse.ArgumentParser,
    *,
    default: str,
    choices: Sequence[str] | None = None,
    help_text: str,
) -> None:
    parser.add_argument(
        "--export",
        dest="export",
        choices=tuple(choices) if choices is not None else tuple(exporters_registry),
        default=default,
        help=help_text,
    )


def add_seed_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random source (default: configured seed or entropy).",
    )


def parse_signal(value: str) -> Signal:
    """argparse ``type`` accepting signal names and aliases."""

    try:
        return Signal.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def dashboard_config(
    config: Mapping[str, Any],
    **overrides: Any,
) -> DashboardConfig:
    """Validate the ``[tool.solarguard]`` table with command line overrides.

    ``None`` overrides are ignored so unset flags fall back to the file.
    """

    payload = {key: value for key, value in config.items() if not key.startswith("_")}
    payload.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return DashboardConfig.from_mapping(payload)
    except ConfigurationError as exc:
        raise CliError(
            f"Invalid configuration: {exc}",
            category="usage",
            context={"config_path": config.get("_config_path")},
        ) from exc


def render_payload(payload: Mapping[str, Any], exporter_name: str) -> str:
    exporter = exporters_registry[exporter_name]
    return exporter(dict(payload))


def write_output(destination: Path, content: str | bytes) -> Path:
    """Write ``content`` to ``destination`` creating parent directories."""

    path = Path(destination).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CliError(
            f"Unable to write {path}: {exc.strerror or exc}",
            category="io",
            context={"path": path},
        ) from exc
    return path
