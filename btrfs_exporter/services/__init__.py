"""Metric publishing and HTTP serving."""
