"""Logging utilities for SolarGuard."""

from solarguard.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
