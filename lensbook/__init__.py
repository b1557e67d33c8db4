"""Photographer scheduling and conflict-detection engine."""

__version__ = "0.1.0"
