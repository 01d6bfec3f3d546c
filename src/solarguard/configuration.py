"""Helpers to load and validate dashboard configuration.

Settings live in the ``[tool.solarguard]`` table of a ``pyproject.toml``.
The file is located through an explicit path, the ``SOLARGUARD_CONFIG``
environment variable, or the current working directory, in that order.
"""

from __future__ import annotations

import os
from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

from .telemetry.records import Signal
from .telemetry.smoothing import MAX_SMOOTHING_WINDOW

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigurationError",
    "DashboardConfig",
    "EVENT_FILTERS",
    "load_dashboard_config",
    "load_project_config",
]


CONFIG_ENV_VAR = "SOLARGUARD_CONFIG"
_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "solarguard"

EVENT_FILTERS = ("all", "warning", "normal")
TOGGLEABLE_SIGNALS = (Signal.FLUX, Signal.SPEED, Signal.HE_RATIO)


class ConfigurationError(ValueError):
    """Raised when configuration values fall outside their accepted domain."""


def _as_dict(payload: ABCMapping[str, Any]) -> dict[str, Any]:
    """Recursively coerce TOML mappings into regular dictionaries."""

    result: dict[str, Any] = {}
    for key, value in payload.items():
        key_str = str(key)
        if isinstance(value, ABCMapping):
            result[key_str] = _as_dict(value)
        elif isinstance(value, list):
            result[key_str] = [
                _as_dict(item) if isinstance(item, ABCMapping) else item for item in value
            ]
        else:
            result[key_str] = value
    return result


def _resolve_pyproject_path(candidate: Path) -> Path | None:
    candidate = candidate.expanduser()
    if candidate.name == _PROJECT_FILENAME or candidate.suffix == ".toml":
        return candidate
    if candidate.suffix:
        return None
    return candidate / _PROJECT_FILENAME


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.solarguard]`` section from ``path``.

    ``path`` may point at a ``pyproject.toml`` (or any ``.toml`` file) or at
    the directory containing one. ``None`` is returned when there is no such
    section.
    """

    pyproject_path = _resolve_pyproject_path(Path(path))
    if pyproject_path is None:
        return None
    pyproject_path = pyproject_path.resolve(strict=False)
    if not pyproject_path.is_file():
        return None
    with pyproject_path.open("rb") as handle:
        payload = tomllib.load(handle)

    tool_section = payload.get("tool")
    if not isinstance(tool_section, ABCMapping):
        return None
    section = tool_section.get(_TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None
    return _as_dict(section), pyproject_path


def load_dashboard_config(path: Path | None = None) -> dict[str, Any]:
    """Return the first ``[tool.solarguard]`` table found, or an empty dict.

    The loaded mapping records its origin under ``_config_path``.
    """

    candidates: list[Path] = []
    if path is not None:
        candidates.append(Path(path))
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        candidates.append(Path(env_config))
    candidates.append(Path.cwd())

    for candidate in candidates:
        loaded = load_project_config(candidate)
        if loaded is None:
            continue
        config, source = loaded
        config["_config_path"] = str(source)
        return config
    return {}


def _parse_datetime(value: Any, *, name: str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            raise ConfigurationError(f"{name} must be an ISO-8601 timestamp, got {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date_range(value: Any) -> tuple[datetime, datetime] | None:
    if value is None:
        return None
    if isinstance(value, ABCMapping):
        start_raw, end_raw = value.get("from"), value.get("to")
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        start_raw, end_raw = value
    else:
        raise ConfigurationError("date_range must provide 'from' and 'to'")
    start = _parse_datetime(start_raw, name="date_range.from")
    end = _parse_datetime(end_raw, name="date_range.to")
    if end < start:
        raise ConfigurationError("date_range.to must not precede date_range.from")
    return start, end


def _default_visibility() -> Mapping[Signal, bool]:
    return MappingProxyType({signal: True for signal in TOGGLEABLE_SIGNALS})


@dataclass(frozen=True)
class DashboardConfig:
    """Validated dashboard settings shared by the session and the CLI."""

    threshold: float = 0.8
    smoothing_window: int = 10
    history_size: int = 100
    capacity: int = 100
    event_count: int = 20
    tick_interval: float = 2.0
    clock_interval: float = 1.0
    visible: Mapping[Signal, bool] = field(default_factory=_default_visibility)
    date_range: tuple[datetime, datetime] | None = None
    event_filter: str = "all"
    seed: int | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.threshold) <= 1.0:
            raise ConfigurationError(f"threshold must lie in [0, 1], got {self.threshold!r}")
        if not 1 <= int(self.smoothing_window) <= MAX_SMOOTHING_WINDOW:
            raise ConfigurationError(
                f"smoothing_window must lie in [1, {MAX_SMOOTHING_WINDOW}], got {self.smoothing_window!r}"
            )
        if int(self.capacity) <= 0:
            raise ConfigurationError("capacity must be positive")
        if int(self.history_size) < 0 or int(self.event_count) < 0:
            raise ConfigurationError("history_size and event_count must not be negative")
        if float(self.tick_interval) <= 0.0 or float(self.clock_interval) <= 0.0:
            raise ConfigurationError("tick_interval and clock_interval must be positive")
        if self.event_filter not in EVENT_FILTERS:
            raise ConfigurationError(f"event_filter must be one of {EVENT_FILTERS}")
        visible = dict(_default_visibility())
        for key, flag in dict(self.visible).items():
            try:
                signal = Signal.parse(key)
            except ValueError as exc:
                raise ConfigurationError(str(exc)) from None
            visible[signal] = bool(flag)
        object.__setattr__(self, "visible", MappingProxyType(visible))
        object.__setattr__(self, "threshold", float(self.threshold))

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> "DashboardConfig":
        data = dict(payload or {})
        kwargs: dict[str, Any] = {}
        try:
            for name, cast in (
                ("threshold", float),
                ("smoothing_window", int),
                ("history_size", int),
                ("capacity", int),
                ("event_count", int),
                ("tick_interval", float),
                ("clock_interval", float),
            ):
                if data.get(name) is not None:
                    kwargs[name] = cast(data[name])
            if data.get("seed") is not None:
                kwargs["seed"] = int(data["seed"])
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid dashboard setting: {exc}") from exc
        visible = data.get("visible")
        if isinstance(visible, ABCMapping):
            kwargs["visible"] = dict(visible)
        elif visible is not None:
            raise ConfigurationError("visible must be a table of signal flags")
        if "date_range" in data:
            kwargs["date_range"] = _parse_date_range(data["date_range"])
        if data.get("event_filter") is not None:
            kwargs["event_filter"] = str(data["event_filter"]).strip().lower()
        return cls(**kwargs)

    def with_threshold(self, threshold: float) -> "DashboardConfig":
        return replace(self, threshold=float(threshold))

    def is_visible(self, signal: Signal | str) -> bool:
        resolved = Signal.parse(signal)
        if resolved is Signal.LIKELIHOOD:
            return True
        return bool(self.visible.get(resolved, True))
