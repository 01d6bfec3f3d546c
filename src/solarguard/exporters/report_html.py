from __future__ import annotations

from datetime import datetime, timezone
from html import escape
import math
from typing import Any, Iterable, Mapping, Sequence

from ..telemetry.profiles import default_profiles
from ..telemetry.records import AlertState, Event, Signal
from ..telemetry.series import Series
from ..visualization.gauge import render_gauge
from ..visualization.series import render_series
from ..visualization.svg import SvgSurface

PANEL_WIDTH = 560
PANEL_HEIGHT = 256
PANEL_BACKGROUND = "#1e293b"
WARNING_SCORE = 0.8
WARNING_SPEED = 500.0


def _format_float(value: Any, *, decimals: int = 3) -> str:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return "-"
    if not math.isfinite(numeric):
        return "-"
    template = f"{{:.{decimals}f}}"
    return template.format(numeric)


def format_utc(value: datetime | int | None) -> str:
    if value is None:
        return "-"
    if isinstance(value, int):
        value = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S") + " UTC"


def _render_table(headers: Sequence[str], rows: Iterable[Sequence[tuple[str, str]]]) -> str:
    rendered_rows = list(rows)
    if not rendered_rows:
        return "<p class=\"empty\">No events in the selected range.</p>"
    head_cells = "".join(f"<th>{escape(str(cell))}</th>" for cell in headers)
    body_parts = []
    for row in rendered_rows:
        cells = "".join(
            f"<td class=\"{css}\">{escape(text)}</td>" if css else f"<td>{escape(text)}</td>"
            for text, css in row
        )
        body_parts.append(f"<tr>{cells}</tr>")
    return f"<table><thead><tr>{head_cells}</tr></thead><tbody>{''.join(body_parts)}</tbody></table>"


def _render_alert_banner(alert: AlertState | None) -> str:
    if alert is not None and alert.active:
        return (
            "<div class=\"banner warning\">CME precursor alert active"
            f" &middot; last trigger {escape(format_utc(alert.last_trigger))}</div>"
        )
    return "<div class=\"banner normal\">All systems nominal</div>"


def _render_series_panels(series_map: Mapping[Signal, Series]) -> str:
    profiles = default_profiles()
    panels = []
    for signal, series in series_map.items():
        signal = Signal.parse(signal)
        if signal is Signal.LIKELIHOOD:
            continue
        profile = profiles[signal]
        surface = SvgSurface(PANEL_WIDTH, PANEL_HEIGHT, background=PANEL_BACKGROUND)
        render_series(surface, series, profile.title, profile.color, profile.display_threshold)
        panels.append(
            f"<figure>{surface.to_svg()}<figcaption>{escape(profile.axis_label)}</figcaption></figure>"
        )
    return "".join(panels)


def _render_gauge_panel(value: float, threshold: float | None) -> str:
    profile = default_profiles()[Signal.LIKELIHOOD]
    surface = SvgSurface(PANEL_WIDTH, PANEL_HEIGHT, background=PANEL_BACKGROUND)
    render_gauge(surface, value, threshold)
    return (
        f"<figure>{surface.to_svg()}<figcaption>{escape(profile.title)} &middot; "
        f"{escape(profile.axis_label)}</figcaption></figure>"
    )


def _render_events(events: Sequence[Event]) -> str:
    rows = []
    for event in events:
        rows.append(
            (
                (event.id, ""),
                (format_utc(event.timestamp), "mono"),
                (_format_float(event.flux_spike, decimals=2), ""),
                (_format_float(event.speed, decimals=0), "hot" if event.speed > WARNING_SPEED else ""),
                (_format_float(event.score), "hot" if event.score > WARNING_SCORE else ""),
                (event.status.value.capitalize(), event.status.value),
            )
        )
    return _render_table(("ID", "Time", "Flux Spike", "Speed (km/s)", "Score", "Status"), rows)


def _render_insights(threshold: float | None, likelihood: float | None) -> str:
    return (
        "<dl>"
        f"<dt>Current threshold</dt><dd>{_format_float(threshold, decimals=2)}</dd>"
        f"<dt>Last updated score</dt><dd>{_format_float(likelihood)}</dd>"
        "</dl>"
    )


def html_exporter(results: Mapping[str, Any]) -> str:
    series_map = results.get("series") or {}
    events = tuple(results.get("events") or ())
    alert = results.get("alert")
    threshold = results.get("threshold")
    likelihood = results.get("current_likelihood")
    if likelihood is None:
        latest = series_map.get(Signal.LIKELIHOOD).latest if Signal.LIKELIHOOD in series_map else None
        likelihood = latest.value if latest is not None else 0.0
    generated = format_utc(results.get("generated_at"))
    title = "SolarGuard | CME Monitoring Dashboard"

    head = (
        "<!DOCTYPE html><html lang=\"en\"><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title>"
        "<style>body{font-family:system-ui, sans-serif;color:#e2e8f0;background:#0f172a;margin:0;padding:0;}"
        "main{max-width:1200px;margin:0 auto;padding:32px;}h1,h2{color:#fff;}"
        ".grid{display:grid;grid-template-columns:repeat(auto-fit,minmax(560px,1fr));gap:24px;}"
        "figure{margin:0;background:#1e293b;border:1px solid #334155;border-radius:8px;padding:12px;}"
        "figcaption{color:#94a3b8;font-size:14px;margin-top:8px;}"
        ".banner{padding:12px 16px;border-radius:6px;margin:16px 0;font-weight:600;}"
        ".banner.warning{background:#7f1d1d;color:#fecaca;}.banner.normal{background:#14532d;color:#bbf7d0;}"
        "table{border-collapse:collapse;width:100%;margin:16px 0;font-size:14px;}"
        "th,td{border-bottom:1px solid #334155;padding:8px;text-align:left;}thead{background:#334155;}"
        "td.mono{font-family:ui-monospace,monospace;font-size:12px;}td.hot,td.warning{color:#f87171;}"
        "td.normal{color:#4ade80;}dl{display:grid;grid-template-columns:max-content 1fr;gap:4px 16px;}"
        "dl dt{font-weight:600;}</style></head>"
    )
    body_parts = [
        f"<main><h1>{escape(title)}</h1><p>Generated {escape(generated)}</p>",
        _render_alert_banner(alert),
        "<section class=\"grid\">",
        _render_series_panels(series_map),
        _render_gauge_panel(float(likelihood), threshold),
        "</section>",
        f"<section><h2>CME Events</h2>{_render_events(events)}</section>",
        f"<section><h2>Model Insights</h2>{_render_insights(threshold, likelihood)}</section>",
        "</main>",
    ]
    return head + "<body>" + "".join(body_parts) + "</body></html>"


__all__ = ["format_utc", "html_exporter"]
