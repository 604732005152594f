"""Tribute Tracker - practice tracking for tribute band musicians."""

__version__ = "0.1.0"
