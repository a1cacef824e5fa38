"""
Static pose detector (OK, Peace, Open Palm).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.events import GestureEvent
from ..core.geometry import (
    LANDMARK_INDICES,
    are_fingers_spread,
    calculate_distance,
    get_finger_states,
    has_full_hand,
)
from .base import IDLE, BaseGestureDetector, DetectorState

HOLDING = "holding"

OK_CIRCLE_DISTANCE = 0.06
PEACE_MIN_SEPARATION = 0.05

OK_CONFIDENCE = 0.9
PEACE_CONFIDENCE = 0.85
OPEN_PALM_CONFIDENCE = 0.9


@dataclass
class StaticState(DetectorState):
    current_gesture: Optional[str] = None
    gesture_start_time: Optional[float] = None
    gesture_confidence: float = 0.0


def classify_pose(landmarks: Sequence[Any]) -> Tuple[Optional[str], float]:
    """
    Classify a hand pose.

    Predicates are tried in priority order OK, Peace, Open Palm and the
    first match wins.

    Returns:
        (gesture name, confidence), or (None, 0.0) when nothing matches
    """
    if not has_full_hand(landmarks):
        return None, 0.0

    fingers = get_finger_states(landmarks)
    for name, detector in (
        ("ok", _is_ok),
        ("peace", _is_peace),
        ("openpalm", _is_open_palm),
    ):
        confidence = detector(landmarks, fingers)
        if confidence > 0:
            return name, confidence

    return None, 0.0


def _is_ok(landmarks: Sequence[Any], fingers: Dict[str, bool]) -> float:
    # Thumb and index tips touch, the other three fingers stay up
    circle = calculate_distance(
        landmarks[LANDMARK_INDICES['thumb_tip']], landmarks[LANDMARK_INDICES['index_tip']]
    ) < OK_CIRCLE_DISTANCE
    others_extended = fingers['middle'] and fingers['ring'] and fingers['pinky']
    return OK_CONFIDENCE if circle and others_extended else 0.0


def _is_peace(landmarks: Sequence[Any], fingers: Dict[str, bool]) -> float:
    two_up = fingers['index'] and fingers['middle']
    others_closed = not fingers['thumb'] and not fingers['ring'] and not fingers['pinky']
    separated = calculate_distance(
        landmarks[LANDMARK_INDICES['index_tip']], landmarks[LANDMARK_INDICES['middle_tip']]
    ) > PEACE_MIN_SEPARATION
    return PEACE_CONFIDENCE if two_up and others_closed and separated else 0.0


def _is_open_palm(landmarks: Sequence[Any], fingers: Dict[str, bool]) -> float:
    if all(fingers.values()) and are_fingers_spread(landmarks):
        return OPEN_PALM_CONFIDENCE
    return 0.0


class StaticGestureDetector(BaseGestureDetector):
    """
    Reports a pose once it has been held for ``hold_duration`` ms.

    A sustained pose fires once per hold window; any change of pose, or a
    frame without a confident pose, restarts the hold timer.
    """

    gesture_type = "static"

    def _create_state(self) -> StaticState:
        return StaticState()

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

        gesture, confidence = classify_pose(landmarks)
        return self.check_gesture_stability(gesture, confidence, handedness, hand_index)

    def check_gesture_stability(
        self,
        gesture: Optional[str],
        confidence: float,
        handedness: str,
        hand_index: int = 0
    ) -> Optional[GestureEvent]:
        """
        Advance the hold timer for one classified frame.

        Args:
            gesture: Classified pose or None
            confidence: Pose confidence
            handedness: Hand side
            hand_index: Tracked hand index

        Returns:
            GestureEvent when the pose has been held long enough
        """
        state = self._state_for(hand_index)
        now = self.now()

        if not gesture or confidence < self.config["confidence_threshold"]:
            self._clear_tracking(state)
            return None

        if gesture != state.current_gesture:
            state.current_gesture = gesture
            state.gesture_start_time = now
            state.gesture_confidence = confidence
            state.phase = HOLDING
            return None

        hold_time = now - state.gesture_start_time
        if hold_time < self.config["hold_duration"]:
            return None

        if not self.can_detect(hand_index):
            return None

        self.mark_detection(hand_index)
        self._clear_tracking(state)

        return self._event(
            handedness,
            hand_index,
            gesture=gesture,
            confidence=confidence,
            hold_time=hold_time,
        )

    @staticmethod
    def _clear_tracking(state: StaticState) -> None:
        state.current_gesture = None
        state.gesture_start_time = None
        state.gesture_confidence = 0.0
        state.phase = IDLE
