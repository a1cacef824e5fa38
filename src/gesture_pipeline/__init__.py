"""
Hand Gesture Recognition Pipeline

Turns a stream of hand landmarks into discrete gesture events: swipes,
pinch drag/volume, forward pushes and held static poses.
"""

__version__ = "1.0.0"

from .core import EventBus, GestureEngine, GestureEvent, HandData, ManualClock
from .detectors import (
    BaseGestureDetector,
    DetectorFactory,
    PinchDetector,
    PushDetector,
    StaticGestureDetector,
    SwipeDetector,
)
from .exceptions import DetectionError, GesturePipelineError
from .utils import ConfigManager, Logger, PerformanceMonitor

__all__ = [
    "GestureEngine",
    "EventBus",
    "GestureEvent",
    "HandData",
    "ManualClock",
    "BaseGestureDetector",
    "DetectorFactory",
    "SwipeDetector",
    "PinchDetector",
    "PushDetector",
    "StaticGestureDetector",
    "ConfigManager",
    "Logger",
    "PerformanceMonitor",
    "DetectionError",
    "GesturePipelineError",
]
