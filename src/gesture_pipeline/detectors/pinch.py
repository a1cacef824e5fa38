"""
Pinch gesture detector.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple

from ..core.events import GestureEvent
from ..core.geometry import LANDMARK_INDICES, calculate_distance, has_full_hand
from ..filters.smoothing import ExponentialMovingAverageFilter
from .base import IDLE, BaseGestureDetector, DetectorState

ACTIVE = "active"

# Minimum index-tip displacement per frame reported as a drag
DRAG_EPSILON = 0.005


@dataclass
class PinchState(DetectorState):
    distance_filter: Optional[ExponentialMovingAverageFilter] = field(default=None, repr=False)
    last_position: Optional[Tuple[float, float]] = None


class PinchDetector(BaseGestureDetector):
    """
    Thumb/index pinch state machine with hysteresis.

    ``idle -> active`` when the smoothed tip distance drops below
    ``distance_threshold`` and ``active -> idle`` once it rises above
    ``release_threshold``. While active, index-tip motion is reported as
    drag (``move``) or horizontal ``volume`` events.
    """

    gesture_type = "pinch"

    def _create_state(self) -> PinchState:
        return PinchState(
            distance_filter=ExponentialMovingAverageFilter(self.config["smoothing_alpha"])
        )

    def detect(
        self,
        landmarks: Optional[Sequence[Any]],
        previous_landmarks: Optional[Sequence[Any]],
        delta_time: float,
        handedness: str = "Unknown",
        hand_index: int = 0
    ) -> Optional[GestureEvent]:
        if not self.is_enabled() or not has_full_hand(landmarks):
            return None

        thumb_tip = landmarks[LANDMARK_INDICES['thumb_tip']]
        index_tip = landmarks[LANDMARK_INDICES['index_tip']]

        state = self._state_for(hand_index)
        state.distance_filter.add_sample(calculate_distance(thumb_tip, index_tip))
        distance = float(state.distance_filter.get_smoothed())

        return self.update_pinch_state(
            state, distance, (index_tip.x, index_tip.y), handedness, hand_index
        )

    def update_pinch_state(
        self,
        state: PinchState,
        distance: float,
        position: Tuple[float, float],
        handedness: str,
        hand_index: int
    ) -> Optional[GestureEvent]:
        """
        Advance the state machine with a smoothed distance.

        Args:
            state: State of the hand being processed
            distance: Smoothed thumb-index distance
            position: Current index fingertip (x, y)
            handedness: Hand side
            hand_index: Tracked hand index

        Returns:
            At most one of start/end/move/volume
        """
        if state.phase == IDLE:
            if distance < self.config["distance_threshold"] and self.can_detect(hand_index):
                state.phase = ACTIVE
                state.last_position = position
                self.mark_detection(hand_index)
                return self._event(
                    handedness, hand_index, event="start", distance=distance, position=position
                )
            return None

        if distance > self.config["release_threshold"]:
            state.phase = IDLE
            state.last_position = None
            return self._event(
                handedness, hand_index, event="end", distance=distance, position=position
            )

        if state.last_position is None:
            state.last_position = position
            return None

        dx = position[0] - state.last_position[0]
        dy = position[1] - state.last_position[1]
        movement_magnitude = math.hypot(dx, dy)
        state.last_position = position

        if movement_magnitude > DRAG_EPSILON:
            return self._event(
                handedness,
                hand_index,
                event="move",
                distance=distance,
                position=position,
                movement=(dx, dy),
                movement_magnitude=movement_magnitude,
            )

        if abs(dx) > self.config["volume_threshold"] and abs(dx) > abs(dy):
            return self._event(
                handedness,
                hand_index,
                event="volume",
                distance=distance,
                position=position,
                direction="right" if dx > 0 else "left",
                magnitude=abs(dx),
            )

        return None
