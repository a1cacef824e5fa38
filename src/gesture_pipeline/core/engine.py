"""
Gesture engine coordinating all detectors for the incoming hand stream.
"""

import time
from collections import Counter, OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Protocol, Union

from ..exceptions import DetectionError
from ..utils.config import DEFAULT_GESTURE_CONFIG
from ..utils.logger import Logger
from ..utils.monitoring import PerformanceMonitor
from .clock import Clock
from .events import GENERIC_EVENT, GestureEvent
from .landmarks import DEFAULT_HISTORY_SIZE, HandData, HandHistory, HistoryEntry

if TYPE_CHECKING:
    from ..detectors.base import BaseGestureDetector


class EventSink(Protocol):
    """Anything that can publish a named event."""

    def emit(self, event_name: str, data: Dict[str, Any]) -> None:
        ...


@dataclass
class EngineStats:
    """Container for engine statistics."""
    frames_processed: int = 0
    events_emitted: int = 0
    invalid_frames: int = 0


class GestureEngine:
    """Runs every enabled detector on each hand frame and publishes the results."""

    def __init__(
        self,
        event_bus: EventSink,
        max_history_size: int = DEFAULT_HISTORY_SIZE,
        max_processing_times: int = DEFAULT_GESTURE_CONFIG["engine"]["max_processing_times"],
        logger: Optional[Logger] = None
    ):
        """
        Initialize the gesture engine.

        Args:
            event_bus: Sink receiving ``emit(event_name, payload)`` calls
            max_history_size: Frames of history kept per hand index
            max_processing_times: Frames kept for processing-time statistics
            logger: Logger instance
        """
        self.event_bus = event_bus
        self.logger = logger or Logger("gesture_engine")

        self.detectors: "OrderedDict[str, BaseGestureDetector]" = OrderedDict()

        self.max_history_size = max_history_size
        self.hand_history: Dict[int, HandHistory] = {}

        self.monitor = PerformanceMonitor(window_size=max_processing_times)
        self.stats = EngineStats()
        self.detector_errors: Counter = Counter()
        self.emit_errors: Counter = Counter()

    @classmethod
    def from_config(
        cls,
        event_bus: EventSink,
        config: Optional[Mapping[str, Any]] = None,
        clock: Optional[Clock] = None,
        logger: Optional[Logger] = None
    ) -> "GestureEngine":
        """
        Build an engine with the four standard detectors registered.

        Args:
            event_bus: Event sink
            config: Gesture configuration (validated, defaults fill the gaps)
            clock: Millisecond clock shared by all detectors
            logger: Logger instance

        Returns:
            Configured GestureEngine
        """
        # Imported here: the detectors package depends on core
        from ..detectors.factory import DetectorFactory
        from ..utils.config import validate_config

        validated = validate_config(config, logger)
        engine_config = validated["engine"]
        engine = cls(
            event_bus,
            max_history_size=engine_config["max_history_size"],
            max_processing_times=engine_config["max_processing_times"],
            logger=logger,
        )

        for name, detector in DetectorFactory.create_all(validated, clock=clock, logger=logger).items():
            engine.register_detector(name, detector)

        return engine

    def register_detector(self, name: str, detector: "BaseGestureDetector") -> None:
        """Register a detector; re-registering a name replaces it in place."""
        self.detectors[name] = detector
        self.logger.debug(f"Registered detector '{name}'")

    def unregister_detector(self, name: str) -> None:
        self.detectors.pop(name, None)

    def process_frame(self, hand_data: Union[HandData, Mapping[str, Any]]) -> List[GestureEvent]:
        """
        Process one hand of one frame with every enabled detector.

        Args:
            hand_data: HandData or a frame-source dictionary

        Returns:
            Gesture events emitted for this frame
        """
        start_time = time.perf_counter()
        emitted: List[GestureEvent] = []

        try:
            if not isinstance(hand_data, HandData):
                hand_data = HandData.from_dict(hand_data)
        except (KeyError, TypeError, ValueError) as e:
            self.stats.invalid_frames += 1
            self.logger.warning(f"Dropping malformed hand data: {e}")
            self._record_time(start_time)
            return emitted

        history = self.hand_history.get(hand_data.hand_index)
        if history is None:
            history = HandHistory(max_size=self.max_history_size)
            self.hand_history[hand_data.hand_index] = history

        previous = history.last
        previous_landmarks = previous.landmarks if previous else None
        previous_timestamp = previous.timestamp if previous else hand_data.timestamp
        delta_time = (hand_data.timestamp - previous_timestamp) / 1000.0

        history.append(hand_data.landmarks, hand_data.timestamp)

        for name, detector in list(self.detectors.items()):
            if not detector.is_enabled():
                continue

            try:
                result = detector.detect(
                    hand_data.landmarks,
                    previous_landmarks,
                    delta_time,
                    hand_data.handedness,
                    hand_index=hand_data.hand_index,
                )
            except Exception as e:
                self.detector_errors[name] += 1
                self.logger.exception(str(DetectionError(name, e)))
                continue

            if result is None:
                continue

            try:
                self.emit_gesture_event(name, result)
            except Exception as e:
                self.emit_errors[name] += 1
                self.logger.exception(f"Failed to publish '{result.event_name}' from '{name}': {e}")
                continue

            emitted.append(result)

        self.stats.frames_processed += 1
        self._record_time(start_time)
        return emitted

    def _record_time(self, start_time: float) -> None:
        self.monitor.record_processing_time((time.perf_counter() - start_time) * 1000.0)

    def emit_gesture_event(self, detector_name: str, result: GestureEvent) -> None:
        """
        Publish a detection as its namespaced event and as ``gesture:detected``.

        Args:
            detector_name: Name the detector is registered under
            result: Detection result
        """
        payload = result.to_dict()
        event_name = result.event_name

        self.event_bus.emit(event_name, payload)
        self.event_bus.emit(GENERIC_EVENT, {"detector": detector_name, **payload})

        self.stats.events_emitted += 1
        self.logger.log_gesture_event(event_name, payload)

    def enable_detector(self, name: str) -> None:
        detector = self.detectors.get(name)
        if detector:
            detector.enable()

    def disable_detector(self, name: str) -> None:
        detector = self.detectors.get(name)
        if detector:
            detector.disable()

    def enable_all(self) -> None:
        for detector in self.detectors.values():
            detector.enable()

    def disable_all(self) -> None:
        for detector in self.detectors.values():
            detector.disable()

    def reset_detector(self, name: str) -> None:
        detector = self.detectors.get(name)
        if detector:
            detector.reset()

    def reset_all(self) -> None:
        """Reset every detector and forget all hand history."""
        for detector in self.detectors.values():
            detector.reset()
        self.hand_history.clear()

    def clear_hand(self, hand_index: int) -> None:
        """Forget a hand that is no longer tracked."""
        self.hand_history.pop(hand_index, None)
        for detector in self.detectors.values():
            detector.reset(hand_index)

    def get_history(self, hand_index: int) -> List[HistoryEntry]:
        history = self.hand_history.get(hand_index)
        return history.to_list() if history else []

    def get_average_processing_time(self) -> float:
        """Average processing time in milliseconds."""
        return self.monitor.get_average_processing_time()

    def get_max_processing_time(self) -> float:
        """Max processing time in milliseconds."""
        return self.monitor.get_max_processing_time()

    def get_detector_names(self) -> List[str]:
        return list(self.detectors.keys())

    def has_detector(self, name: str) -> bool:
        return name in self.detectors

    def get_detector(self, name: str) -> Optional["BaseGestureDetector"]:
        return self.detectors.get(name)

    def get_diagnostics(self) -> Dict[str, Any]:
        """Counters and timing statistics for the engine."""
        return {
            'frames_processed': self.stats.frames_processed,
            'events_emitted': self.stats.events_emitted,
            'invalid_frames': self.stats.invalid_frames,
            'detector_errors': dict(self.detector_errors),
            'emit_errors': dict(self.emit_errors),
            'tracked_hands': sorted(self.hand_history.keys()),
            'avg_processing_time_ms': self.get_average_processing_time(),
            'max_processing_time_ms': self.get_max_processing_time(),
            'enabled_detectors': [n for n, d in self.detectors.items() if d.is_enabled()],
        }
