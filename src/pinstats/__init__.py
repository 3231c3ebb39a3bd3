"""Percentile-based pinball league statistics for lineup decisions."""

__version__ = "0.1.0"
