"""
Millisecond clocks used for debouncing and hold timing.
"""

import time
from typing import Callable

Clock = Callable[[], float]


class MonotonicClock:
    """Wall clock in milliseconds based on ``time.perf_counter``."""

    def __call__(self) -> float:
        return time.perf_counter() * 1000.0


class ManualClock:
    """Clock advanced explicitly by the caller (replays and tests)."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = float(start_ms)

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> float:
        """Move the clock forward and return the new time."""
        self.now_ms += ms
        return self.now_ms

    def set(self, ms: float) -> None:
        self.now_ms = float(ms)
