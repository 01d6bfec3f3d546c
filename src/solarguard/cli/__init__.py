"""Command line utilities for SolarGuard."""

from solarguard.cli.app import main, run_cli
from solarguard.cli.errors import CliError

__all__ = ["CliError", "main", "run_cli"]
