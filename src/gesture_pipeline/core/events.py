"""
Gesture event records and an in-process event bus.
"""

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..utils.logger import Logger

GENERIC_EVENT = "gesture:detected"

Listener = Callable[[Dict[str, Any]], None]


@dataclass(frozen=True)
class GestureEvent:
    """Immutable result of a single detection."""
    type: str
    handedness: str
    timestamp: float
    hand_index: int = 0
    direction: Optional[str] = None
    event: Optional[str] = None
    gesture: Optional[str] = None
    velocity: Optional[float] = None
    distance: Optional[float] = None
    depth: Optional[float] = None
    confidence: Optional[float] = None
    hold_time: Optional[float] = None
    magnitude: Optional[float] = None
    movement_magnitude: Optional[float] = None
    position: Optional[Tuple[float, float]] = None
    movement: Optional[Tuple[float, float]] = None

    @property
    def event_name(self) -> str:
        """Namespaced event name, e.g. ``gesture:swipe:left``."""
        if self.type in ("swipe", "push"):
            qualifier = self.direction
        elif self.type == "pinch":
            qualifier = self.event
        elif self.type == "static":
            qualifier = self.gesture
        else:
            qualifier = None

        if qualifier:
            return f"gesture:{self.type}:{qualifier}"
        return f"gesture:{self.type}"

    def to_dict(self) -> Dict[str, Any]:
        """Payload dictionary without unset measurements."""
        return {key: value for key, value in asdict(self).items() if value is not None}


class EventBus:
    """Minimal synchronous publish/subscribe bus."""

    def __init__(self, logger: Optional[Logger] = None):
        self._listeners: Dict[str, List[Listener]] = {}
        self.logger = logger or Logger("event_bus")

    def on(self, event_name: str, callback: Listener) -> Callable[[], None]:
        """
        Subscribe to an event.

        Args:
            event_name: Name of the event
            callback: Callable receiving the event payload

        Returns:
            Function that removes the subscription

        Raises:
            ValueError: If the name is empty or the callback is not callable
        """
        if not isinstance(event_name, str) or not event_name:
            raise ValueError("Event name must be a non-empty string")
        if not callable(callback):
            raise ValueError("Callback must be callable")

        self._listeners.setdefault(event_name, []).append(callback)
        return lambda: self.off(event_name, callback)

    def off(self, event_name: str, callback: Listener) -> None:
        callbacks = self._listeners.get(event_name)
        if not callbacks:
            return

        if callback in callbacks:
            callbacks.remove(callback)
        if not callbacks:
            del self._listeners[event_name]

    def once(self, event_name: str, callback: Listener) -> Callable[[], None]:
        """Subscribe for a single delivery."""
        def wrapper(data: Dict[str, Any]) -> None:
            self.off(event_name, wrapper)
            callback(data)

        return self.on(event_name, wrapper)

    def emit(self, event_name: str, data: Dict[str, Any]) -> None:
        # Copy so listeners may unsubscribe while being notified
        for callback in list(self._listeners.get(event_name, [])):
            try:
                callback(data)
            except Exception as e:
                self.logger.exception(f"Error in event listener for '{event_name}': {e}")

    def clear(self, event_name: Optional[str] = None) -> None:
        if event_name:
            self._listeners.pop(event_name, None)
        else:
            self._listeners.clear()

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, []))

    def event_names(self) -> List[str]:
        return list(self._listeners.keys())
