"""Bundled resources distributed with SolarGuard."""
