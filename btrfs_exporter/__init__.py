"""Prometheus exporter for btrfs device error counters."""

__version__ = "0.1.0"
