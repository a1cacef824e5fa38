"""
Geometric feature extraction from hand landmarks.

All functions are stateless and defensive: missing or short input yields a
neutral value instead of an exception.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .landmarks import NUM_LANDMARKS, LandmarkPoint, to_landmark_point

# MediaPipe hand landmark indices
LANDMARK_INDICES = {
    'wrist': 0,
    'thumb_cmc': 1,
    'thumb_mcp': 2,
    'thumb_ip': 3,
    'thumb_tip': 4,
    'index_mcp': 5,
    'index_pip': 6,
    'index_dip': 7,
    'index_tip': 8,
    'middle_mcp': 9,
    'middle_pip': 10,
    'middle_dip': 11,
    'middle_tip': 12,
    'ring_mcp': 13,
    'ring_pip': 14,
    'ring_dip': 15,
    'ring_tip': 16,
    'pinky_mcp': 17,
    'pinky_pip': 18,
    'pinky_dip': 19,
    'pinky_tip': 20,
}

FINGER_NAMES = ('thumb', 'index', 'middle', 'ring', 'pinky')

# (tip, reference joint) per finger; the thumb has no PIP so its IP joint is used
FINGER_JOINTS = {
    'thumb': (LANDMARK_INDICES['thumb_tip'], LANDMARK_INDICES['thumb_ip']),
    'index': (LANDMARK_INDICES['index_tip'], LANDMARK_INDICES['index_pip']),
    'middle': (LANDMARK_INDICES['middle_tip'], LANDMARK_INDICES['middle_pip']),
    'ring': (LANDMARK_INDICES['ring_tip'], LANDMARK_INDICES['ring_pip']),
    'pinky': (LANDMARK_INDICES['pinky_tip'], LANDMARK_INDICES['pinky_pip']),
}

EXTENSION_MARGIN = 1.1
SPREAD_THRESHOLD = 0.1


@dataclass(frozen=True)
class Velocity:
    """Planar velocity in normalized units per second."""
    x: float = 0.0
    y: float = 0.0
    magnitude: float = 0.0


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box of a landmark set."""
    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    area: float = 0.0


def has_full_hand(landmarks: Optional[Sequence[Any]]) -> bool:
    """True if ``landmarks`` holds a complete 21-point hand."""
    return bool(landmarks) and len(landmarks) >= NUM_LANDMARKS


def normalize_landmarks(raw_landmarks: Optional[Sequence[Any]]) -> List[LandmarkPoint]:
    """
    Convert raw landmarks into LandmarkPoint objects.

    Args:
        raw_landmarks: Points as mappings, sequences or attribute objects

    Returns:
        List of LandmarkPoint (empty for missing input)
    """
    if not raw_landmarks:
        return []
    return [to_landmark_point(lm) for lm in raw_landmarks]


def _xy(point: Any) -> np.ndarray:
    return np.array([point.x, point.y], dtype=float)


def calculate_distance(point1: Any, point2: Any, use_3d: bool = False) -> float:
    """
    Euclidean distance between two landmarks.

    Args:
        point1: First point (x, y, z attributes)
        point2: Second point
        use_3d: Include the z coordinate

    Returns:
        Distance, or 0.0 if either point is missing
    """
    if point1 is None or point2 is None:
        return 0.0

    if use_3d:
        z1 = getattr(point1, 'z', None)
        z2 = getattr(point2, 'z', None)
        if z1 is not None and z2 is not None:
            p1 = np.array([point1.x, point1.y, z1], dtype=float)
            p2 = np.array([point2.x, point2.y, z2], dtype=float)
            return float(np.linalg.norm(p2 - p1))

    return float(np.linalg.norm(_xy(point2) - _xy(point1)))


def calculate_velocity(
    current_landmarks: Optional[Sequence[Any]],
    previous_landmarks: Optional[Sequence[Any]],
    delta_time: float
) -> Velocity:
    """
    Wrist velocity between two frames.

    Args:
        current_landmarks: Current frame landmarks
        previous_landmarks: Previous frame landmarks
        delta_time: Time between the frames in seconds

    Returns:
        Velocity (zero vector when the input is insufficient)
    """
    if not current_landmarks or not previous_landmarks or delta_time <= 0:
        return Velocity()

    wrist = LANDMARK_INDICES['wrist']
    current = current_landmarks[wrist]
    previous = previous_landmarks[wrist]
    if current is None or previous is None:
        return Velocity()

    v = (_xy(current) - _xy(previous)) / delta_time
    return Velocity(x=float(v[0]), y=float(v[1]), magnitude=float(np.linalg.norm(v)))


def get_bounding_box(landmarks: Optional[Sequence[Any]]) -> BoundingBox:
    """Bounding box and area of a landmark set."""
    if not landmarks:
        return BoundingBox()

    points = np.array([[lm.x, lm.y] for lm in landmarks], dtype=float)
    min_x, min_y = points.min(axis=0)
    max_x, max_y = points.max(axis=0)
    width = max_x - min_x
    height = max_y - min_y

    return BoundingBox(
        min_x=float(min_x),
        min_y=float(min_y),
        max_x=float(max_x),
        max_y=float(max_y),
        width=float(width),
        height=float(height),
        area=float(width * height),
    )


def is_finger_extended(landmarks: Sequence[Any], finger: str) -> bool:
    """
    Check whether a finger is extended.

    A finger counts as extended when its tip is more than 10% farther from
    the wrist than its reference joint.
    """
    if not has_full_hand(landmarks):
        return False

    tip_idx, joint_idx = FINGER_JOINTS[finger]
    wrist = landmarks[LANDMARK_INDICES['wrist']]
    tip_dist = calculate_distance(wrist, landmarks[tip_idx])
    joint_dist = calculate_distance(wrist, landmarks[joint_idx])

    return tip_dist > joint_dist * EXTENSION_MARGIN


def get_finger_states(landmarks: Optional[Sequence[Any]]) -> Dict[str, bool]:
    """Extended/bent state of all five fingers."""
    if not has_full_hand(landmarks):
        return {name: False for name in FINGER_NAMES}

    return {name: is_finger_extended(landmarks, name) for name in FINGER_NAMES}


def get_center_point(landmarks: Optional[Sequence[Any]]) -> LandmarkPoint:
    """Centroid (mean x, y) of all landmarks."""
    if not landmarks:
        return LandmarkPoint(0.0, 0.0)

    points = np.array([[lm.x, lm.y] for lm in landmarks], dtype=float)
    center = points.mean(axis=0)
    return LandmarkPoint(float(center[0]), float(center[1]))


def calculate_angle(point1: Any, vertex: Any, point3: Any) -> float:
    """
    Angle at ``vertex`` formed by ``point1`` and ``point3``.

    Returns:
        Angle in degrees, 0.0 for degenerate input
    """
    if point1 is None or vertex is None or point3 is None:
        return 0.0

    v1 = _xy(point1) - _xy(vertex)
    v2 = _xy(point3) - _xy(vertex)
    mag1 = np.linalg.norm(v1)
    mag2 = np.linalg.norm(v2)

    if mag1 == 0 or mag2 == 0:
        return 0.0

    cos_angle = np.clip(np.dot(v1, v2) / (mag1 * mag2), -1.0, 1.0)
    return float(np.degrees(np.arccos(cos_angle)))


def are_fingers_spread(
    landmarks: Optional[Sequence[Any]],
    threshold: float = SPREAD_THRESHOLD
) -> bool:
    """True if the mean gap between adjacent fingertips exceeds ``threshold``."""
    if not has_full_hand(landmarks):
        return False

    tips = [
        landmarks[LANDMARK_INDICES['index_tip']],
        landmarks[LANDMARK_INDICES['middle_tip']],
        landmarks[LANDMARK_INDICES['ring_tip']],
        landmarks[LANDMARK_INDICES['pinky_tip']],
    ]
    gaps = [calculate_distance(a, b) for a, b in zip(tips, tips[1:])]

    return float(np.mean(gaps)) > threshold
