"""
Swipe gesture detector.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np

from ..core.events import GestureEvent
from ..core.geometry import calculate_velocity, has_full_hand
from ..filters.smoothing import MovingAverageFilter
from .base import BaseGestureDetector, DetectorState


@dataclass
class SwipeState(DetectorState):
    velocity_filter: Optional[MovingAverageFilter] = field(default=None, repr=False)


class SwipeDetector(BaseGestureDetector):
    """
    Detects fast wrist motion along the dominant axis.

    Each swipe is an independent threshold crossing of the smoothed wrist
    velocity, gated only by the debounce period.
    """

    gesture_type = "swipe"

    def _create_state(self) -> SwipeState:
        return SwipeState(
            velocity_filter=MovingAverageFilter(self.config["smoothing_window"], shape=(2,))
        )

    def detect(
        self,
        landmarks: Optional[Sequence[Any]],
        previous_landmarks: Optional[Sequence[Any]],
        delta_time: float,
        handedness: str = "Unknown",
        hand_index: int = 0
    ) -> Optional[GestureEvent]:
        if not self.is_enabled() or delta_time <= 0:
            return None
        if not has_full_hand(landmarks) or not has_full_hand(previous_landmarks):
            return None

        velocity = calculate_velocity(landmarks, previous_landmarks, delta_time)

        state = self._state_for(hand_index)
        state.velocity_filter.add_sample((velocity.x, velocity.y))
        smoothed = state.velocity_filter.get_smoothed()
        magnitude = float(np.linalg.norm(smoothed))

        if magnitude < self.config["velocity_threshold"]:
            return None

        if not self.can_detect(hand_index):
            return None

        direction = self.determine_direction(smoothed[0], smoothed[1])
        self.mark_detection(hand_index)

        return self._event(handedness, hand_index, direction=direction, velocity=magnitude)

    @staticmethod
    def determine_direction(vx: float, vy: float) -> str:
        """Direction of the dominant axis; image y grows downwards."""
        if abs(vx) > abs(vy):
            return "right" if vx > 0 else "left"
        return "down" if vy > 0 else "up"
