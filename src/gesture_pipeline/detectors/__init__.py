"""
Gesture detectors.
"""

from .base import BaseGestureDetector
from .factory import DetectorFactory
from .pinch import PinchDetector
from .push import PushDetector
from .static import StaticGestureDetector
from .swipe import SwipeDetector

__all__ = [
    "BaseGestureDetector",
    "DetectorFactory",
    "PinchDetector",
    "PushDetector",
    "StaticGestureDetector",
    "SwipeDetector",
]
