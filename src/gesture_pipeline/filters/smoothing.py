"""
Smoothing filters for streaming landmark signals.

Every filter works on a fixed sample shape chosen at construction:
``shape=()`` for scalars, ``shape=(2,)`` for planar vectors.
"""

import math
from abc import ABC, abstractmethod
from collections import deque
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike


class SmoothingFilter(ABC):
    """Base class for all smoothing filters."""

    def __init__(self, shape: Tuple[int, ...] = ()):
        self.shape = tuple(shape)

    def _coerce(self, value: ArrayLike) -> np.ndarray:
        sample = np.asarray(value, dtype=float)
        if sample.shape != self.shape:
            raise ValueError(
                f"{self.__class__.__name__} expects samples of shape {self.shape}, "
                f"got {sample.shape}"
            )
        return sample

    def _zero(self) -> np.ndarray:
        return np.zeros(self.shape, dtype=float)

    @abstractmethod
    def add_sample(self, value: ArrayLike, timestamp: Optional[float] = None) -> None:
        """Incorporate a new sample."""

    @abstractmethod
    def get_smoothed(self) -> np.ndarray:
        """Current filtered value, zeros when no sample has been added."""

    @abstractmethod
    def reset(self) -> None:
        """Drop all accumulated state."""


class MovingAverageFilter(SmoothingFilter):
    """Arithmetic mean of the last ``window_size`` samples."""

    def __init__(self, window_size: int = 5, shape: Tuple[int, ...] = ()):
        super().__init__(shape)
        self.window_size = max(1, int(window_size))
        self.samples = deque(maxlen=self.window_size)

    def add_sample(self, value: ArrayLike, timestamp: Optional[float] = None) -> None:
        self.samples.append(self._coerce(value))

    def get_smoothed(self) -> np.ndarray:
        if not self.samples:
            return self._zero()
        return np.mean(np.stack(self.samples), axis=0)

    def reset(self) -> None:
        self.samples.clear()

    def get_sample_count(self) -> int:
        return len(self.samples)


class ExponentialMovingAverageFilter(SmoothingFilter):
    """Exponentially weighted average; recent samples weigh ``alpha``."""

    def __init__(self, alpha: float = 0.3, shape: Tuple[int, ...] = ()):
        super().__init__(shape)
        self.alpha = self._clamp(alpha)
        self.smoothed_value: Optional[np.ndarray] = None

    @staticmethod
    def _clamp(alpha: float) -> float:
        return min(max(float(alpha), 0.0), 1.0)

    def add_sample(self, value: ArrayLike, timestamp: Optional[float] = None) -> None:
        sample = self._coerce(value)
        if self.smoothed_value is None:
            self.smoothed_value = sample
            return

        self.smoothed_value = self.alpha * sample + (1.0 - self.alpha) * self.smoothed_value

    def get_smoothed(self) -> np.ndarray:
        if self.smoothed_value is None:
            return self._zero()
        return self.smoothed_value

    def reset(self) -> None:
        self.smoothed_value = None

    def set_alpha(self, alpha: float) -> None:
        self.alpha = self._clamp(alpha)

    def get_alpha(self) -> float:
        return self.alpha


class OneEuroFilter(SmoothingFilter):
    """
    Velocity-adaptive one-pole low-pass filter (the "1 Euro" filter).

    The cutoff frequency rises with the estimated signal speed, so fast
    motion is followed with little lag while slow motion is smoothed hard
    to suppress jitter.

    Args:
        min_cutoff: Cutoff frequency (Hz) at zero speed
        beta: Cutoff increase per unit of speed
        d_cutoff: Cutoff frequency used to smooth the speed estimate
        shape: Sample shape
    """

    def __init__(
        self,
        min_cutoff: float = 1.0,
        beta: float = 0.007,
        d_cutoff: float = 1.0,
        shape: Tuple[int, ...] = ()
    ):
        super().__init__(shape)
        self.min_cutoff = min_cutoff
        self.beta = beta
        self.d_cutoff = d_cutoff

        self.x: Optional[np.ndarray] = None
        self.dx = self._zero()
        self.last_time: Optional[float] = None

    @staticmethod
    def smoothing_factor(cutoff: np.ndarray, dt: float) -> np.ndarray:
        """Exponential smoothing factor for a cutoff frequency and time step."""
        tau = 1.0 / (2.0 * math.pi * cutoff)
        return 1.0 / (1.0 + tau / dt)

    def add_sample(self, value: ArrayLike, timestamp: Optional[float] = None) -> None:
        """
        Add a sample.

        Args:
            value: Raw value
            timestamp: Sample time in seconds (required)

        Raises:
            ValueError: If no timestamp is given
        """
        if timestamp is None:
            raise ValueError("OneEuroFilter requires a timestamp for every sample")

        sample = self._coerce(value)
        if self.x is None:
            self.x = sample
            self.last_time = timestamp
            return

        dt = timestamp - self.last_time
        if dt <= 0:
            return

        # Smoothed derivative
        edx = (sample - self.x) / dt
        alpha_dx = self.smoothing_factor(self.d_cutoff, dt)
        self.dx = alpha_dx * edx + (1.0 - alpha_dx) * self.dx

        cutoff = self.min_cutoff + self.beta * np.abs(self.dx)
        alpha_x = self.smoothing_factor(cutoff, dt)
        self.x = alpha_x * sample + (1.0 - alpha_x) * self.x

        self.last_time = timestamp

    def get_smoothed(self) -> np.ndarray:
        if self.x is None:
            return self._zero()
        return self.x

    def reset(self) -> None:
        self.x = None
        self.dx = self._zero()
        self.last_time = None
