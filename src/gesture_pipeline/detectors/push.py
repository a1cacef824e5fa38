"""
Push-forward gesture detector.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Optional, Sequence, Tuple

from ..core.events import GestureEvent
from ..core.geometry import get_bounding_box, has_full_hand
from ..filters.smoothing import MovingAverageFilter
from .base import BaseGestureDetector, DetectorState

DEPTH_HISTORY_SIZE = 10


@dataclass
class PushState(DetectorState):
    depth_filter: Optional[MovingAverageFilter] = field(default=None, repr=False)
    # (smoothed area, clock time in ms)
    depth_history: Deque[Tuple[float, float]] = field(
        default_factory=lambda: deque(maxlen=DEPTH_HISTORY_SIZE), repr=False
    )


class PushDetector(BaseGestureDetector):
    """
    Detects the hand moving towards the camera.

    The bounding-box area of the hand is used as a depth proxy: a larger
    area means the hand is closer.
    """

    gesture_type = "push"

    def _create_state(self) -> PushState:
        return PushState(depth_filter=MovingAverageFilter(self.config["smoothing_window"]))

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

        current_area = get_bounding_box(landmarks).area

        state = self._state_for(hand_index)
        state.depth_filter.add_sample(current_area)
        state.depth_history.append((float(state.depth_filter.get_smoothed()), self.now()))

        if len(state.depth_history) < 2:
            return None

        oldest_depth, oldest_time = state.depth_history[0]
        newest_depth, newest_time = state.depth_history[-1]

        depth_change = newest_depth - oldest_depth
        time_span = (newest_time - oldest_time) / 1000.0
        if time_span <= 0:
            return None

        depth_velocity = depth_change / time_span
        normalized_change = depth_change / current_area if current_area > 0 else 0.0

        if (normalized_change > self.config["depth_threshold"]
                and depth_velocity > self.config["velocity_threshold"]):
            if not self.can_detect(hand_index):
                return None

            self.mark_detection(hand_index)
            # Start over so the tail of this motion cannot trigger again
            state.depth_history.clear()

            return self._event(
                handedness,
                hand_index,
                direction="forward",
                depth=normalized_change,
                velocity=depth_velocity,
            )

        return None
