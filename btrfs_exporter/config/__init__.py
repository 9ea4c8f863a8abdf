"""Exporter configuration."""
