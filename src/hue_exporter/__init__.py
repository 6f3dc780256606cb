"""Prometheus exporter for Hue sensors, current weather and index quotes."""

__version__ = "0.3.0"
