"""Example that exports a simulated dashboard view to CSV."""

from __future__ import annotations

from solarguard.configuration import DashboardConfig
from solarguard.exporters import build_results, csv_exporter
from solarguard.session import DashboardSession


def main() -> None:
    session = DashboardSession(DashboardConfig(history_size=12, event_count=0, seed=2024))
    session.start()
    for _ in range(3):
        session.tick()
    csv_output = csv_exporter(build_results(session))
    print(csv_output)


if __name__ == "__main__":
    main()
