"""
Utility modules for the gesture recognition pipeline.
"""

from .config import ConfigManager, validate_config
from .logger import Logger
from .monitoring import PerformanceMonitor

__all__ = [
    "ConfigManager",
    "Logger",
    "PerformanceMonitor",
    "validate_config",
]
