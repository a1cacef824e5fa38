"""
Factory for creating gesture detectors from configuration.
"""

from collections import OrderedDict
from typing import Any, Dict, Mapping, Optional, Type

from ..core.clock import Clock
from ..utils.config import GESTURE_CLASSES, validate_config
from ..utils.logger import Logger
from .base import BaseGestureDetector
from .pinch import PinchDetector
from .push import PushDetector
from .static import StaticGestureDetector
from .swipe import SwipeDetector


class DetectorFactory:
    """Factory class for creating gesture detectors."""

    _detector_registry: Dict[str, Type[BaseGestureDetector]] = {
        'swipe': SwipeDetector,
        'pinch': PinchDetector,
        'push': PushDetector,
        'static': StaticGestureDetector,
    }

    @classmethod
    def create_detector(
        cls,
        detector_type: str,
        config: Optional[Mapping[str, Any]] = None,
        clock: Optional[Clock] = None,
        logger: Optional[Logger] = None
    ) -> BaseGestureDetector:
        """
        Create a detector instance.

        Args:
            detector_type: Registered detector name
            config: Settings for this gesture class
            clock: Millisecond clock shared with the engine
            logger: Logger instance

        Returns:
            Detector instance

        Raises:
            ValueError: If detector type is not supported
        """
        if detector_type not in cls._detector_registry:
            available = list(cls._detector_registry.keys())
            raise ValueError(f"Unknown detector type: {detector_type}. Available: {available}")

        detector_class = cls._detector_registry[detector_type]
        return detector_class(dict(config or {}), clock=clock, logger=logger)

    @classmethod
    def create_all(
        cls,
        config: Optional[Mapping[str, Any]] = None,
        clock: Optional[Clock] = None,
        logger: Optional[Logger] = None
    ) -> "OrderedDict[str, BaseGestureDetector]":
        """
        Create the standard detectors in their canonical order.

        Args:
            config: Full gesture configuration keyed by gesture class
            clock: Millisecond clock
            logger: Logger instance

        Returns:
            Ordered mapping of detector name to detector
        """
        validated = validate_config(config, logger)
        return OrderedDict(
            (name, cls.create_detector(name, validated[name], clock=clock, logger=logger))
            for name in GESTURE_CLASSES
        )

    @classmethod
    def register_detector(cls, name: str, detector_class: Type[BaseGestureDetector]) -> None:
        """
        Register a new detector type.

        Raises:
            ValueError: If the class does not inherit from BaseGestureDetector
        """
        if not isinstance(detector_class, type) or not issubclass(detector_class, BaseGestureDetector):
            raise ValueError("Detector class must inherit from BaseGestureDetector")

        cls._detector_registry[name] = detector_class

    @classmethod
    def get_available_detectors(cls) -> list:
        """Get list of available detector types."""
        return list(cls._detector_registry.keys())
