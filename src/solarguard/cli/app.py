"""Command line application entry point for SolarGuard."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from ..configuration import load_dashboard_config
from ..logging.config import setup_logging
from .errors import CliError, log_cli_error
from .parser import build_parser

__all__ = ["main", "run_cli"]


CommandHandler = Callable[[argparse.Namespace, Mapping[str, Any]], str]


def _preliminary_parser() -> argparse.ArgumentParser:
    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding a [tool.solarguard] table.",
    )
    config_parser.add_argument("--log-level", dest="log_level", default=None)
    config_parser.add_argument("--log-output", dest="log_output", default=None)
    config_parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=None,
    )
    return config_parser


def _load_config(path: Optional[Path]) -> dict[str, Any]:
    if path is not None and not Path(path).expanduser().exists():
        raise CliError(
            f"Configuration file {path} does not exist.",
            category="not_found",
            context={"config_path": path},
        )
    try:
        return load_dashboard_config(path)
    except tomllib.TOMLDecodeError as exc:
        raise CliError(
            f"Unable to parse configuration: {exc}",
            category="usage",
            context={"config_path": path},
        ) from exc
    except OSError as exc:
        raise CliError(
            f"Unable to read configuration: {exc.strerror or exc}",
            category="io",
            context={"config_path": path},
        ) from exc


def _emit(message: str) -> None:
    if message:
        sys.stdout.write(message)
        if not message.endswith("\n"):
            sys.stdout.write("\n")


def _fail(exc: CliError) -> SystemExit:
    if not exc.logged:
        log_cli_error(exc.payload, exc_info=exc)
        exc.logged = True
    _emit(exc.payload.message)
    return SystemExit(exc.status_code)


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the SolarGuard command line interface."""

    preliminary, remaining = _preliminary_parser().parse_known_args(args)
    try:
        config = _load_config(preliminary.config_path)
    except CliError as exc:
        setup_logging({})
        raise _fail(exc) from exc

    logging_config = dict(config.get("logging", {}) or {})
    if preliminary.log_level is not None:
        logging_config["level"] = preliminary.log_level
    if preliminary.log_output is not None:
        logging_config["output"] = preliminary.log_output
    if preliminary.log_format is not None:
        logging_config["format"] = preliminary.log_format
    logging_config.setdefault("level", "info")
    logging_config.setdefault("output", "stderr")
    logging_config.setdefault("format", "json")
    config["logging"] = logging_config
    try:
        setup_logging(config)
    except ValueError as exc:
        setup_logging({})
        raise _fail(
            CliError(str(exc), category="usage", context={"level": logging_config["level"]})
        ) from exc

    parser = build_parser(config)
    namespace = parser.parse_args(list(remaining), namespace=preliminary)
    namespace.config = config
    namespace.config_path = preliminary.config_path or config.get("_config_path")

    handler: CommandHandler | None = getattr(namespace, "handler", None)
    try:
        if handler is None:
            raise CliError(
                f"Unknown command '{getattr(namespace, 'command', None)}'.",
                category="usage",
                context={"command": getattr(namespace, "command", None)},
            )
        result = handler(namespace, config=config)
    except CliError as exc:
        raise _fail(exc) from exc
    _emit(result)
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
