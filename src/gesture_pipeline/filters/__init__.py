"""
Smoothing filters for landmark signals.
"""

from .smoothing import (
    ExponentialMovingAverageFilter,
    MovingAverageFilter,
    OneEuroFilter,
    SmoothingFilter,
)

__all__ = [
    "SmoothingFilter",
    "MovingAverageFilter",
    "ExponentialMovingAverageFilter",
    "OneEuroFilter",
]
