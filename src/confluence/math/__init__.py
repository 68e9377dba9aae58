"""Mathematical utilities for signal analysis."""

from .statistics import TWO_PI, Statistics, clamp, ramp, wrap_phase

__all__ = [
    "Statistics",
    "TWO_PI",
    "clamp",
    "ramp",
    "wrap_phase",
]
