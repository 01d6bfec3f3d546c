"""Example that renders every dashboard panel to SVG files."""

from __future__ import annotations

import sys
from pathlib import Path

from solarguard.session import DashboardSession
from solarguard.telemetry.profiles import get_profile
from solarguard.telemetry.records import Signal
from solarguard.visualization import SvgSurface, render_gauge, render_series


def main(destination: Path) -> None:
    destination.mkdir(parents=True, exist_ok=True)
    session = DashboardSession()
    state = session.start()

    for signal, series in session.visible_series(state).items():
        if signal is Signal.LIKELIHOOD:
            continue
        profile = get_profile(signal)
        surface = SvgSurface(640, 320, background="#1e293b")
        render_series(surface, series, profile.title, profile.color, profile.display_threshold)
        (destination / f"{signal.value}.svg").write_text(surface.to_svg(), encoding="utf-8")

    gauge = SvgSurface(320, 320, background="#1e293b")
    render_gauge(gauge, state.current_likelihood, session.threshold)
    (destination / "likelihood.svg").write_text(gauge.to_svg(), encoding="utf-8")
    print(f"Panels written to {destination}")


if __name__ == "__main__":
    main(Path(sys.argv[1]) if len(sys.argv) > 1 else Path("dashboard"))
