"""
Hand landmark containers and per-hand history.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Mapping, Optional, Sequence, Tuple

NUM_LANDMARKS = 21
DEFAULT_HISTORY_SIZE = 30

HANDEDNESS_VALUES = ("Left", "Right", "Unknown")


@dataclass(frozen=True)
class LandmarkPoint:
    """Single normalized hand landmark."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


def to_landmark_point(raw: Any) -> LandmarkPoint:
    """
    Convert a raw landmark to a LandmarkPoint.

    Accepts LandmarkPoint instances, mappings with ``x``/``y``/``z`` keys,
    (x, y[, z[, visibility]]) sequences and objects exposing ``x``/``y``/``z``
    attributes (e.g. MediaPipe ``NormalizedLandmark``).

    Raises:
        ValueError: If the value cannot be interpreted as a point
    """
    if isinstance(raw, LandmarkPoint):
        return raw

    if isinstance(raw, Mapping):
        visibility = raw.get("visibility")
        return LandmarkPoint(
            x=float(raw["x"]),
            y=float(raw["y"]),
            z=float(raw.get("z", 0.0) or 0.0),
            visibility=1.0 if visibility is None else float(visibility),
        )

    if isinstance(raw, (list, tuple)):
        if len(raw) < 2:
            raise ValueError(f"Landmark sequence needs at least 2 values, got {len(raw)}")
        z = float(raw[2]) if len(raw) > 2 else 0.0
        visibility = float(raw[3]) if len(raw) > 3 else 1.0
        return LandmarkPoint(float(raw[0]), float(raw[1]), z, visibility)

    if hasattr(raw, "x") and hasattr(raw, "y"):
        visibility = getattr(raw, "visibility", None)
        return LandmarkPoint(
            x=float(raw.x),
            y=float(raw.y),
            z=float(getattr(raw, "z", 0.0) or 0.0),
            visibility=1.0 if visibility is None else float(visibility),
        )

    raise ValueError(f"Unsupported landmark value: {raw!r}")


def normalize_handedness(value: Optional[str]) -> str:
    """Map any handedness label onto Left/Right/Unknown."""
    if not value:
        return "Unknown"
    label = str(value).strip().capitalize()
    return label if label in HANDEDNESS_VALUES else "Unknown"


@dataclass(frozen=True)
class HandData:
    """Container for one tracked hand in one processed frame."""
    hand_index: int
    landmarks: Tuple[LandmarkPoint, ...]
    handedness: str = "Unknown"
    confidence: float = 1.0
    timestamp: float = 0.0
    world_landmarks: Optional[Tuple[LandmarkPoint, ...]] = None

    @property
    def is_complete(self) -> bool:
        """True when the frame carries a full set of 21 landmarks."""
        return len(self.landmarks) >= NUM_LANDMARKS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HandData":
        """
        Build a HandData object from a frame-source dictionary.

        Args:
            data: Mapping with ``hand_index`` (or ``index``), ``landmarks``,
                optional ``world_landmarks``, ``handedness``, ``confidence``
                and ``timestamp`` (milliseconds)

        Returns:
            HandData object

        Raises:
            TypeError: If ``data`` is not a mapping
            ValueError: If a landmark cannot be parsed
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Hand data must be a mapping, got {type(data).__name__}")

        hand_index = data.get("hand_index", data.get("index", 0))
        landmarks = tuple(to_landmark_point(lm) for lm in (data.get("landmarks") or []))

        world = data.get("world_landmarks", data.get("worldLandmarks"))
        world_landmarks = tuple(to_landmark_point(lm) for lm in world) if world else None

        confidence = data.get("confidence", 1.0)
        confidence = 1.0 if confidence is None else min(max(float(confidence), 0.0), 1.0)

        return cls(
            hand_index=int(hand_index or 0),
            landmarks=landmarks,
            handedness=normalize_handedness(data.get("handedness")),
            confidence=confidence,
            timestamp=float(data.get("timestamp", 0.0) or 0.0),
            world_landmarks=world_landmarks,
        )


@dataclass(frozen=True)
class HistoryEntry:
    """Landmarks of one past frame together with its timestamp."""
    landmarks: Tuple[LandmarkPoint, ...]
    timestamp: float


@dataclass
class HandHistory:
    """Bounded history of recent frames for a single hand index."""
    max_size: int = DEFAULT_HISTORY_SIZE
    entries: Deque[HistoryEntry] = field(default_factory=deque)

    def __post_init__(self) -> None:
        self.entries = deque(self.entries, maxlen=self.max_size)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def last(self) -> Optional[HistoryEntry]:
        return self.entries[-1] if self.entries else None

    def append(self, landmarks: Sequence[LandmarkPoint], timestamp: float) -> None:
        self.entries.append(HistoryEntry(tuple(landmarks), timestamp))

    def clear(self) -> None:
        self.entries.clear()

    def to_list(self) -> List[HistoryEntry]:
        return list(self.entries)


def landmarks_to_dicts(landmarks: Sequence[LandmarkPoint]) -> List[Dict[str, float]]:
    """Serialize landmarks back into the frame-source dictionary shape."""
    return [
        {"x": lm.x, "y": lm.y, "z": lm.z, "visibility": lm.visibility}
        for lm in landmarks
    ]
