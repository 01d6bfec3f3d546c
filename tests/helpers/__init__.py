"""Convenience re-exports for test helpers."""

from __future__ import annotations

from .cli import run_cli_in_tmp
from .telemetry import (
    BASE_TIME,
    STEP,
    ConstantRandom,
    ScriptedRandom,
    build_sample,
    build_series,
)

__all__ = [
    "BASE_TIME",
    "STEP",
    "ConstantRandom",
    "ScriptedRandom",
    "build_sample",
    "build_series",
    "run_cli_in_tmp",
]
