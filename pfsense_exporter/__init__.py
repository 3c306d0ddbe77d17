"""Prometheus exporter for the pfSense REST API."""

__version__ = "0.1.0"
