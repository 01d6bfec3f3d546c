from __future__ import annotations

import json
import logging
import re
from pathlib import Path

import pytest

from solarguard.cli import CliError, run_cli
from solarguard.cli.errors import build_error_payload, log_cli_error
from solarguard.cli.parser import build_parser
from solarguard.configuration import DashboardConfig
from solarguard.telemetry.generator import TelemetryGenerator, default_random_source
from solarguard.telemetry.records import Signal
from tests.conftest import write_pyproject
from tests.helpers import run_cli_in_tmp


def test_history_csv_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = run_cli_in_tmp(
        ["history", "--signal", "speed", "--count", "5", "--seed", "1"],
        tmp_path=tmp_path,
        monkeypatch=monkeypatch,
    )

    lines = output.splitlines()
    assert lines[0] == "timestamp,speed,speed_anomaly"
    assert len(lines) == 6


def test_history_is_reproducible_with_seed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    args = ["history", "--signal", "flux", "--count", "8", "--seed", "42", "--export", "json"]

    first = json.loads(run_cli_in_tmp(args, tmp_path=tmp_path, monkeypatch=monkeypatch))
    second = json.loads(run_cli_in_tmp(args, tmp_path=tmp_path, monkeypatch=monkeypatch))

    first_values = [sample["value"] for sample in first["series"]["flux"]["samples"]]
    second_values = [sample["value"] for sample in second["series"]["flux"]["samples"]]
    assert first_values == second_values
    assert len(first_values) == 8


def test_events_status_filter(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = run_cli_in_tmp(
        ["events", "--count", "30", "--seed", "5", "--status", "warning", "--export", "json"],
        tmp_path=tmp_path,
        monkeypatch=monkeypatch,
    )

    payload = json.loads(output)
    assert all(event["status"] == "warning" for event in payload["events"])
    assert all(event["score"] > 0.8 for event in payload["events"])


def test_render_series_svg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "out" / "flux.svg"

    message = run_cli_in_tmp(
        ["render", "--signal", "flux", "--output", str(target), "--seed", "3"],
        tmp_path=tmp_path,
        monkeypatch=monkeypatch,
    )

    document = target.read_text(encoding="utf-8")
    assert document.startswith("<svg")
    assert "<polyline" in document
    assert "Proton Flux vs Time" in document
    assert message == f"Rendered flux series to {target}"


def test_render_gauge_ppm(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "gauge.ppm"

    run_cli_in_tmp(
        ["render", "--gauge", "--output", str(target), "--width", "120", "--height", "90"],
        tmp_path=tmp_path,
        monkeypatch=monkeypatch,
    )

    assert target.read_bytes().startswith(b"P6\n120 90\n255\n")


def test_render_gauge_shows_raw_latest_likelihood(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    target = tmp_path / "gauge.svg"

    run_cli_in_tmp(
        ["render", "--gauge", "--output", str(target), "--seed", "0"],
        tmp_path=tmp_path,
        monkeypatch=monkeypatch,
    )

    defaults = DashboardConfig()
    raw = TelemetryGenerator(rng=default_random_source(0)).generate_history(
        Signal.LIKELIHOOD, defaults.history_size, capacity=defaults.capacity
    )
    (shown,) = re.findall(r'font-size="24"[^>]*>([^<]+)</text>', target.read_text(encoding="utf-8"))
    assert shown == f"{raw.latest.value:.3f}"


def test_render_rejects_non_positive_dimensions(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli_in_tmp(
            ["render", "--output", str(tmp_path / "x.svg"), "--width", "0"],
            tmp_path=tmp_path,
            monkeypatch=monkeypatch,
        )

    assert excinfo.value.code == 2


def test_report_writes_html(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "report.html"

    message = run_cli_in_tmp(
        ["report", "--output", str(target), "--seed", "9"],
        tmp_path=tmp_path,
        monkeypatch=monkeypatch,
    )

    document = target.read_text(encoding="utf-8")
    assert "SolarGuard | CME Monitoring Dashboard" in document
    assert document.count("<svg") == 4
    assert message.startswith("Report written to")


def test_export_csv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "view.csv"

    message = run_cli_in_tmp(
        ["export", "--output", str(target), "--seed", "2", "--raw"],
        tmp_path=tmp_path,
        monkeypatch=monkeypatch,
    )

    lines = target.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("timestamp,flux,flux_anomaly")
    assert len(lines) == 101
    assert message == f"Exported 100 rows to {target}"


def test_export_rejects_unknown_suffix(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli_in_tmp(
            ["export", "--output", str(tmp_path / "view.txt")],
            tmp_path=tmp_path,
            monkeypatch=monkeypatch,
        )

    assert excinfo.value.code == 2
    assert "Unsupported export format" in capsys.readouterr().out


def test_monitor_runs_requested_ticks(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    message = run_cli_in_tmp(
        [
            "monitor",
            "--ticks",
            "2",
            "--interval",
            "0.05",
            "--clock-interval",
            "0.01",
            "--threshold",
            "0",
            "--seed",
            "4",
        ],
        tmp_path=tmp_path,
        monkeypatch=monkeypatch,
    )

    out = capsys.readouterr().out
    utc = r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} UTC"
    assert re.search(rf"^\[{utc}\] tick 1 \| likelihood", out, re.MULTILINE)
    assert re.search(rf"^\[{utc}\] tick 2 \|", out, re.MULTILINE)
    assert re.search(rf"^\[{utc}\]$", out, re.MULTILINE)
    assert re.search(rf"ALERT: CME precursor detected \| last trigger {utc}", out)
    assert message.startswith("Monitor stopped after 2 ticks")


def test_invalid_smoothing_is_a_usage_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli_in_tmp(
            ["history", "--signal", "flux", "--smoothing", "0"],
            tmp_path=tmp_path,
            monkeypatch=monkeypatch,
        )

    assert excinfo.value.code == 2


def test_missing_config_file_is_not_found(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli_in_tmp(
            ["--config", str(tmp_path / "absent.toml"), "events"],
            tmp_path=tmp_path,
            monkeypatch=monkeypatch,
        )

    assert excinfo.value.code == 4


def test_config_file_supplies_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = write_pyproject(
        tmp_path,
        """
        [tool.solarguard]
        event_count = 3
        seed = 1

        [tool.solarguard.logging]
        level = "error"
        """,
    )

    output = run_cli_in_tmp(
        ["--config", str(config_path), "events"], tmp_path=tmp_path, monkeypatch=monkeypatch
    )

    assert len(output.splitlines()) == 4


def test_invalid_threshold_in_config_is_usage_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    write_pyproject(tmp_path, "[tool.solarguard]\nthreshold = 2.0\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SOLARGUARD_CONFIG", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        run_cli(["--log-level", "critical", "report", "--output", str(tmp_path / "r.html")])

    assert excinfo.value.code == 2


def test_parser_accepts_signal_aliases() -> None:
    namespace = build_parser({}).parse_args(["history", "--signal", "heRatio"])

    assert namespace.signal is Signal.HE_RATIO


def test_parser_rejects_unknown_signal() -> None:
    with pytest.raises(SystemExit):
        build_parser({}).parse_args(["history", "--signal", "density"])


def test_cli_error_payload_and_logging(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="solarguard.cli")

    error = CliError("boom", category="io", context={"path": Path("x")})

    assert error.status_code == 3
    assert error.logged is False
    assert error.payload.message == "boom"
    assert error.context == {"path": "x"}
    log_cli_error(error.payload)
    (record,) = caplog.records
    assert record.event == "cli.error"
    assert record.status_code == 3


def test_unknown_category_defaults_to_runtime_status() -> None:
    payload = build_error_payload("oops", category="exotic")

    assert payload.status_code == 1
    log_cli_error(payload)
