"""
Core modules for gesture recognition.
"""

from .clock import ManualClock, MonotonicClock
from .engine import GestureEngine
from .events import EventBus, GestureEvent
from .landmarks import HandData, HandHistory, LandmarkPoint

__all__ = [
    "GestureEngine",
    "EventBus",
    "GestureEvent",
    "HandData",
    "HandHistory",
    "LandmarkPoint",
    "ManualClock",
    "MonotonicClock",
]
