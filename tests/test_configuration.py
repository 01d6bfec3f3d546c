from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from solarguard.configuration import (
    CONFIG_ENV_VAR,
    ConfigurationError,
    DashboardConfig,
    load_dashboard_config,
    load_project_config,
)
from solarguard.telemetry.records import Signal

from tests.conftest import write_pyproject


def test_defaults() -> None:
    config = DashboardConfig()

    assert config.threshold == 0.8
    assert config.smoothing_window == 10
    assert config.history_size == 100
    assert config.event_count == 20
    assert config.tick_interval == 2.0
    assert config.clock_interval == 1.0
    assert config.event_filter == "all"
    assert all(config.is_visible(signal) for signal in Signal)


def test_from_mapping_parses_values() -> None:
    config = DashboardConfig.from_mapping(
        {
            "threshold": "0.65",
            "smoothing_window": 5,
            "seed": 3,
            "visible": {"heRatio": False},
            "date_range": {"from": "2024-01-01", "to": "2024-01-31T12:00:00+00:00"},
            "event_filter": " Warning ",
        }
    )

    assert config.threshold == 0.65
    assert config.smoothing_window == 5
    assert config.seed == 3
    assert config.is_visible("he_ratio") is False
    assert config.is_visible(Signal.FLUX) is True
    assert config.date_range == (
        datetime(2024, 1, 1, tzinfo=timezone.utc),
        datetime(2024, 1, 31, 12, tzinfo=timezone.utc),
    )
    assert config.event_filter == "warning"


def test_likelihood_cannot_be_hidden() -> None:
    config = DashboardConfig(visible={"likelihood": False})

    assert config.is_visible(Signal.LIKELIHOOD) is True


@pytest.mark.parametrize(
    "payload",
    [
        {"threshold": 1.5},
        {"threshold": -0.1},
        {"threshold": "high"},
        {"smoothing_window": 0},
        {"smoothing_window": 101},
        {"tick_interval": 0},
        {"event_filter": "critical"},
        {"visible": {"density": True}},
        {"visible": ["flux"]},
        {"date_range": {"from": "yesterday", "to": "2024-01-01"}},
        {"date_range": {"from": "2024-02-01", "to": "2024-01-01"}},
        {"capacity": 0},
    ],
)
def test_invalid_values_raise_configuration_error(payload: dict) -> None:
    with pytest.raises(ConfigurationError):
        DashboardConfig.from_mapping(payload)


def test_configuration_error_is_value_error() -> None:
    assert issubclass(ConfigurationError, ValueError)


def test_with_threshold_returns_new_config() -> None:
    config = DashboardConfig()

    updated = config.with_threshold(0.5)

    assert updated.threshold == 0.5
    assert config.threshold == 0.8


def test_load_project_config_reads_tool_section(tmp_path: Path) -> None:
    write_pyproject(
        tmp_path,
        """
        [tool.solarguard]
        threshold = 0.7

        [tool.solarguard.logging]
        level = "debug"
        """,
    )

    loaded = load_project_config(tmp_path)

    assert loaded is not None
    config, source = loaded
    assert config == {"threshold": 0.7, "logging": {"level": "debug"}}
    assert source == (tmp_path / "pyproject.toml").resolve()


def test_load_project_config_without_section(tmp_path: Path) -> None:
    write_pyproject(tmp_path, "[project]\nname = 'other'\n")

    assert load_project_config(tmp_path) is None
    assert load_project_config(tmp_path / "missing.toml") is None


def test_load_dashboard_config_precedence(
    tmp_path: Path, isolated_cwd: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    assert load_dashboard_config() == {}

    env_dir = tmp_path / "env"
    env_dir.mkdir()
    write_pyproject(env_dir, "[tool.solarguard]\nthreshold = 0.6\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(env_dir / "pyproject.toml"))
    assert load_dashboard_config()["threshold"] == 0.6

    explicit_dir = tmp_path / "explicit"
    explicit_dir.mkdir()
    explicit = write_pyproject(explicit_dir, "[tool.solarguard]\nthreshold = 0.5\n")
    loaded = load_dashboard_config(explicit)
    assert loaded["threshold"] == 0.5
    assert loaded["_config_path"] == str(explicit.resolve())
