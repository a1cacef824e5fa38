"""
Shared fixtures: synthetic hands and a controllable clock.
"""

import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gesture_pipeline.core.clock import ManualClock
from gesture_pipeline.core.landmarks import LandmarkPoint, landmarks_to_dicts

ALL_FINGERS = ("thumb", "index", "middle", "ring", "pinky")

WRIST = (0.5, 0.8)
NARROW_X = {"index": 0.44, "middle": 0.50, "ring": 0.56, "pinky": 0.62}
WIDE_X = {"index": 0.35, "middle": 0.47, "ring": 0.59, "pinky": 0.71}


def make_hand(
    extended: Iterable[str] = ALL_FINGERS,
    spread: bool = False,
    offset: Tuple[float, float] = (0.0, 0.0),
    scale: float = 1.0,
    thumb_to_index: Optional[float] = None,
) -> List[LandmarkPoint]:
    """
    Build 21 landmarks in MediaPipe order.

    Args:
        extended: Fingers to extend; the rest are curled towards the palm
        spread: Fan the fingertips wide apart (open palm)
        offset: Translation applied to every point
        scale: Scale about (0.5, 0.6); area grows with scale squared
        thumb_to_index: Place the thumb tip this far to the right of the index tip
    """
    extended = set(extended)
    xs = WIDE_X if spread else NARROW_X
    points: List[Tuple[float, float]] = [WRIST]

    # Thumb: CMC, MCP, IP, TIP
    points += [(0.42, 0.75), (0.36, 0.70), (0.32, 0.65)]
    points.append((0.28, 0.60) if "thumb" in extended else (0.40, 0.68))

    for finger in ("index", "middle", "ring", "pinky"):
        x = xs[finger]
        if finger in extended:
            points += [(x, 0.60), (x, 0.50), (x, 0.45), (x, 0.40)]
        else:
            points += [(x, 0.60), (x, 0.50), (x, 0.55), (x, 0.60)]

    if thumb_to_index is not None:
        index_tip = points[8]
        points[4] = (index_tip[0] + thumb_to_index, index_tip[1])

    cx, cy = 0.5, 0.6
    return [
        LandmarkPoint(
            x=cx + (x - cx) * scale + offset[0],
            y=cy + (y - cy) * scale + offset[1],
            z=0.0,
        )
        for x, y in points
    ]


def hand_dict(
    landmarks: List[LandmarkPoint],
    timestamp: float,
    hand_index: int = 0,
    handedness: str = "Right",
) -> Dict:
    """Frame-source dictionary for one hand."""
    return {
        "hand_index": hand_index,
        "landmarks": landmarks_to_dicts(landmarks),
        "handedness": handedness,
        "confidence": 0.95,
        "timestamp": timestamp,
    }


class RecordingSink:
    """Event sink that keeps every emitted event."""

    def __init__(self):
        self.events: List[Tuple[str, Dict]] = []

    def emit(self, event_name: str, data: Dict) -> None:
        self.events.append((event_name, data))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def open_palm():
    return make_hand(spread=True)


@pytest.fixture
def fist():
    return make_hand(extended=())
