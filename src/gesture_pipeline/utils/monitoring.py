"""
Performance monitoring utilities.
"""

import time
from collections import deque
from typing import Any, Dict, List, Optional

import numpy as np
import psutil

DEFAULT_WINDOW_SIZE = 60


class PerformanceMonitor:
    """Sliding-window tracker of per-frame processing time."""

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE):
        """
        Initialize the performance monitor.

        Args:
            window_size: Number of most recent frames kept for statistics
        """
        self.window_size = window_size
        self.processing_times = deque(maxlen=window_size)

        self.frame_count = 0
        self.start_time = time.time()

    def record_processing_time(self, duration_ms: float) -> None:
        """Add the processing duration of one frame in milliseconds."""
        self.processing_times.append(float(duration_ms))
        self.frame_count += 1

    def get_average_processing_time(self) -> float:
        """Mean processing time over the window, 0.0 when empty."""
        if not self.processing_times:
            return 0.0
        return float(np.mean(self.processing_times))

    def get_max_processing_time(self) -> float:
        """Largest processing time in the window, 0.0 when empty."""
        if not self.processing_times:
            return 0.0
        return float(np.max(self.processing_times))

    def get_system_usage(self) -> Dict[str, Optional[float]]:
        """Current process CPU and memory usage."""
        try:
            process = psutil.Process()
            return {
                'cpu_percent': psutil.cpu_percent(interval=None),
                'memory_mb': process.memory_info().rss / 1024 / 1024,
            }
        except psutil.Error:
            return {'cpu_percent': None, 'memory_mb': None}

    def get_performance_summary(self) -> Dict[str, Any]:
        """Get comprehensive performance summary."""
        times = list(self.processing_times)
        return {
            'processing': {
                'avg_time_ms': self.get_average_processing_time(),
                'max_time_ms': self.get_max_processing_time(),
                'min_time_ms': float(np.min(times)) if times else 0.0,
                'std_time_ms': float(np.std(times)) if times else 0.0,
            },
            'system': self.get_system_usage(),
            'statistics': {
                'total_frames': self.frame_count,
                'monitoring_duration': time.time() - self.start_time,
                'window_size': self.window_size
            }
        }

    def reset_metrics(self) -> None:
        """Reset all performance metrics."""
        self.processing_times.clear()
        self.frame_count = 0
        self.start_time = time.time()

    def is_performance_acceptable(self, frame_budget_ms: float = 33.3) -> bool:
        """
        Check if recent processing fits within a frame budget.

        Args:
            frame_budget_ms: Time available per frame (33.3ms at 30 FPS)

        Returns:
            True if the average over the last 10 frames fits the budget
        """
        if not self.processing_times:
            return True  # Not enough data

        recent = list(self.processing_times)[-10:]
        return float(np.mean(recent)) <= frame_budget_ms

    def get_performance_warnings(self, frame_budget_ms: float = 33.3) -> List[str]:
        """Get performance warnings based on current metrics."""
        warnings = []

        if not self.processing_times:
            return warnings

        recent = list(self.processing_times)[-10:]
        if np.mean(recent) > frame_budget_ms:
            warnings.append(f"Slow processing: {np.mean(recent):.2f}ms per frame")

        peak = self.get_max_processing_time()
        if peak > 2 * frame_budget_ms:
            warnings.append(f"Processing spike: {peak:.2f}ms")

        times = list(self.processing_times)[-20:]
        if len(times) > 5:
            time_std = np.std(times)
            if time_std > frame_budget_ms / 2:
                warnings.append(f"Inconsistent processing times: std={time_std:.2f}ms")

        return warnings
