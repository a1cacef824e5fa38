"""
Base class for gesture detectors.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from ..core.clock import Clock, MonotonicClock
from ..core.events import GestureEvent
from ..utils.config import to_snake_case, validate_gesture_settings
from ..utils.logger import Logger

IDLE = "idle"


@dataclass
class DetectorState:
    """Mutable per-hand state shared by all detectors."""
    phase: str = IDLE
    last_detection_time: Optional[float] = None


class BaseGestureDetector(ABC):
    """
    Base class for all gesture detectors.

    Subclasses implement ``detect`` and ``_create_state``. Mutable state is
    kept per hand index so that two tracked hands never share a debounce
    timer or state-machine phase.
    """

    gesture_type: str = ""
    # Config keys whose change invalidates the smoothing filters held in state
    smoothing_keys = ("smoothing_window", "smoothing_alpha")

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        clock: Optional[Clock] = None,
        logger: Optional[Logger] = None
    ):
        """
        Initialize the detector.

        Args:
            config: Gesture class settings; missing or invalid values fall back to defaults
            clock: Callable returning the current time in milliseconds
            logger: Logger instance
        """
        self.logger = logger or Logger(f"{self.gesture_type or 'gesture'}_detector")
        self.config = validate_gesture_settings(self.gesture_type, config, self.logger)
        self.clock = clock or MonotonicClock()
        self._states: Dict[int, DetectorState] = {}

    @abstractmethod
    def detect(
        self,
        landmarks: Optional[Sequence[Any]],
        previous_landmarks: Optional[Sequence[Any]],
        delta_time: float,
        handedness: str = "Unknown",
        hand_index: int = 0
    ) -> Optional[GestureEvent]:
        """
        Detect a gesture from one hand's landmarks.

        Args:
            landmarks: Current frame landmarks
            previous_landmarks: Previous frame landmarks of the same hand
            delta_time: Time since the previous frame in seconds
            handedness: 'Left', 'Right' or 'Unknown'
            hand_index: Tracked hand the frame belongs to

        Returns:
            GestureEvent or None
        """

    @abstractmethod
    def _create_state(self) -> DetectorState:
        """Fresh state for a newly seen hand index."""

    def _state_for(self, hand_index: int) -> DetectorState:
        state = self._states.get(hand_index)
        if state is None:
            state = self._create_state()
            self._states[hand_index] = state
        return state

    @property
    def debounce_ms(self) -> float:
        return self.config.get("debounce_ms", 0)

    def now(self) -> float:
        return self.clock()

    def can_detect(self, hand_index: int = 0) -> bool:
        """True if the debounce period since the last emission has passed."""
        last = self._state_for(hand_index).last_detection_time
        return last is None or (self.now() - last) >= self.debounce_ms

    def mark_detection(self, hand_index: int = 0) -> None:
        self._state_for(hand_index).last_detection_time = self.now()

    def reset(self, hand_index: Optional[int] = None) -> None:
        """Reset state for one hand, or for all hands when ``hand_index`` is None."""
        if hand_index is None:
            self._states.clear()
        else:
            self._states.pop(hand_index, None)

    def get_state(self, hand_index: int = 0) -> str:
        state = self._states.get(hand_index)
        return state.phase if state else IDLE

    def tracked_hands(self):
        return sorted(self._states)

    def is_enabled(self) -> bool:
        return self.config.get("enabled", True) is not False

    def enable(self) -> None:
        self.config["enabled"] = True

    def disable(self) -> None:
        self.config["enabled"] = False
        self.reset()

    def update_config(self, **changes: Any) -> None:
        """Shallow-merge new settings into the active configuration."""
        changes = {to_snake_case(key): value for key, value in changes.items()}
        merged = {**self.config, **changes}
        self.config = validate_gesture_settings(self.gesture_type, merged, self.logger)

        if any(key in changes for key in self.smoothing_keys):
            self.reset()
        if changes.get("enabled") is False:
            self.reset()

    def get_config(self) -> Dict[str, Any]:
        return dict(self.config)

    def _event(self, handedness: str, hand_index: int, **fields: Any) -> GestureEvent:
        return GestureEvent(
            type=self.gesture_type,
            handedness=handedness,
            hand_index=hand_index,
            timestamp=self.now(),
            **fields
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(enabled={self.is_enabled()}, config={self.config})"
