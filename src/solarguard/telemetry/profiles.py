"""Per-signal generator constants loaded from the bundled YAML table."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from .records import Signal

__all__ = [
    "AnomalyRule",
    "SignalProfile",
    "default_profiles",
    "get_profile",
    "load_signal_profiles",
]


_PROFILES_RESOURCE_PACKAGE = "solarguard.resources"
_PROFILES_RESOURCE_NAME = "signals.yaml"
_ANOMALY_SOURCES = ("spike", "value")


@dataclass(frozen=True)
class AnomalyRule:
    """Strict upper bound applied either to the spike term or the final value."""

    source: str
    above: float

    def flags(self, *, value: float, spike: float) -> bool:
        observed = spike if self.source == "spike" else value
        return observed > self.above


@dataclass(frozen=True)
class SignalProfile:
    signal: Signal
    title: str
    axis_label: str
    color: str
    display_threshold: float | None
    baseline: float
    amplitude: float
    angular_step: float
    noise: float
    spike_probability: float
    spike_min: float
    spike_span: float
    floor: float
    ceiling: float | None
    anomaly: AnomalyRule

    def clamp(self, value: float) -> float:
        value = max(self.floor, value)
        if self.ceiling is not None:
            value = min(self.ceiling, value)
        return value


def load_signal_profiles(path: str | Path | None = None) -> Mapping[Signal, SignalProfile]:
    """Load signal profiles from ``path`` or from the packaged defaults."""

    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(candidate)
        payload = candidate.read_text(encoding="utf-8")
        source = str(candidate)
    else:
        resource = resources.files(_PROFILES_RESOURCE_PACKAGE).joinpath(
            _PROFILES_RESOURCE_NAME
        )
        payload = resource.read_text(encoding="utf-8")
        source = str(resource)
    return _profiles_from_text(payload, source=source)


@lru_cache(maxsize=1)
def default_profiles() -> Mapping[Signal, SignalProfile]:
    return load_signal_profiles()


def get_profile(signal: Signal | str) -> SignalProfile:
    return default_profiles()[Signal.parse(signal)]


def _profiles_from_text(payload: str, *, source: str) -> Mapping[Signal, SignalProfile]:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:  # pragma: no cover - defensive guard
        raise ValueError(f"Invalid YAML in signal profiles: {source}") from exc

    if not isinstance(data, MappingABC) or not isinstance(data.get("signals"), MappingABC):
        raise TypeError(f"Signal profiles in {source!s} must define a 'signals' mapping")

    profiles: dict[Signal, SignalProfile] = {}
    for key, entry in data["signals"].items():
        signal = Signal.parse(key)
        if not isinstance(entry, MappingABC):
            raise TypeError(f"Profile for {signal.value!r} in {source!s} must be a mapping")
        profiles[signal] = _build_profile(signal, entry, source=source)

    missing = [signal.value for signal in Signal if signal not in profiles]
    if missing:
        raise ValueError(f"Signal profiles in {source!s} are missing: {', '.join(missing)}")
    return MappingProxyType(profiles)


def _build_profile(signal: Signal, entry: Mapping[str, Any], *, source: str) -> SignalProfile:
    rule_raw = entry.get("anomaly")
    if not isinstance(rule_raw, MappingABC):
        raise TypeError(f"Profile {signal.value!r} in {source!s} lacks an anomaly rule")
    rule_source = str(rule_raw.get("source", "value"))
    if rule_source not in _ANOMALY_SOURCES:
        raise ValueError(
            f"Anomaly source for {signal.value!r} must be one of {_ANOMALY_SOURCES}"
        )

    def optional(name: str) -> float | None:
        value = entry.get(name)
        return None if value is None else float(value)

    return SignalProfile(
        signal=signal,
        title=str(entry.get("title", signal.value)),
        axis_label=str(entry.get("axis_label", signal.value)),
        color=str(entry.get("color", "#f97316")),
        display_threshold=optional("display_threshold"),
        baseline=float(entry["baseline"]),
        amplitude=float(entry["amplitude"]),
        angular_step=float(entry["angular_step"]),
        noise=float(entry["noise"]),
        spike_probability=float(entry["spike_probability"]),
        spike_min=float(entry.get("spike_min", 0.0)),
        spike_span=float(entry["spike_span"]),
        floor=float(entry.get("floor", 0.0)),
        ceiling=optional("ceiling"),
        anomaly=AnomalyRule(rule_source, float(rule_raw["above"])),
    )
