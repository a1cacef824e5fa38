"""
Configuration management utilities.
"""

import copy
import re
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from omegaconf import DictConfig, OmegaConf

from .logger import Logger

PACKAGE_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
DEFAULT_CONFIG_FILE = PACKAGE_CONFIG_DIR / "gestures.yaml"

GESTURE_CLASSES = ("swipe", "pinch", "push", "static")

DEFAULT_GESTURE_CONFIG: Dict[str, Dict[str, Any]] = {
    "swipe": {
        "enabled": True,
        "velocity_threshold": 0.5,    # normalized units/sec
        "smoothing_window": 5,        # frames in the velocity moving average
        "debounce_ms": 300,
    },
    "pinch": {
        "enabled": True,
        "distance_threshold": 0.05,   # distance that activates a pinch
        "release_threshold": 0.08,    # distance that releases it
        "smoothing_alpha": 0.3,       # EMA factor (0-1)
        "debounce_ms": 100,
        "volume_threshold": 0.02,     # horizontal movement for volume events
    },
    "push": {
        "enabled": True,
        "depth_threshold": 0.15,      # relative bounding-box area change
        "velocity_threshold": 0.3,    # area units/sec
        "smoothing_window": 3,
        "debounce_ms": 500,
    },
    "static": {
        "enabled": True,
        "hold_duration": 500,         # ms a pose must be held
        "confidence_threshold": 0.7,
        "debounce_ms": 1000,
    },
    "engine": {
        "max_history_size": 30,
        "max_processing_times": 60,
    },
}

# Keys validated as non-negative numbers, replaced by the default otherwise
_NON_NEGATIVE_KEYS = (
    "debounce_ms",
    "velocity_threshold",
    "distance_threshold",
    "release_threshold",
    "volume_threshold",
    "depth_threshold",
    "hold_duration",
)
# Keys clamped into [0, 1]
_UNIT_INTERVAL_KEYS = ("smoothing_alpha", "confidence_threshold")
# Keys that must be positive integers
_POSITIVE_INT_KEYS = ("smoothing_window", "max_history_size", "max_processing_times")

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

_logger: Optional[Logger] = None


def _get_logger() -> Logger:
    global _logger
    if _logger is None:
        _logger = Logger("gesture_config")
    return _logger


def to_snake_case(key: str) -> str:
    """Convert ``debounceMs`` style keys to ``debounce_ms``."""
    return _CAMEL_RE.sub("_", key).lower()


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _to_plain_dict(config: Union[Mapping[str, Any], DictConfig, None]) -> Dict[str, Any]:
    if config is None:
        return {}
    if isinstance(config, DictConfig):
        return OmegaConf.to_container(config, resolve=True)
    return dict(config)


def validate_gesture_settings(
    gesture_class: str,
    settings: Union[Mapping[str, Any], DictConfig, None],
    logger: Optional[Logger] = None
) -> Dict[str, Any]:
    """
    Validate one gesture class block, substituting defaults for bad values.

    Args:
        gesture_class: Block name (swipe, pinch, push, static or engine)
        settings: Block values, merged shallowly over the defaults
        logger: Logger for warnings about substituted values

    Returns:
        Validated plain dictionary
    """
    logger = logger or _get_logger()
    defaults = DEFAULT_GESTURE_CONFIG.get(gesture_class, {})
    merged = copy.deepcopy(defaults)
    merged.update({to_snake_case(str(k)): v for k, v in _to_plain_dict(settings).items()})

    def substitute(key: str, value: Any, reason: str) -> None:
        default = defaults.get(key)
        logger.warning(
            f"Invalid {gesture_class}.{key}={value!r} ({reason}); using {default!r}"
        )
        if default is None:
            merged.pop(key, None)
        else:
            merged[key] = default

    if "enabled" in merged and not isinstance(merged["enabled"], bool):
        substitute("enabled", merged["enabled"], "not a boolean")

    for key in _NON_NEGATIVE_KEYS:
        if key in merged:
            value = merged[key]
            if not _is_number(value):
                substitute(key, value, "not a number")
            elif value < 0:
                substitute(key, value, "negative")

    for key in _UNIT_INTERVAL_KEYS:
        if key in merged:
            value = merged[key]
            if not _is_number(value):
                substitute(key, value, "not a number")
            elif not 0.0 <= value <= 1.0:
                clamped = min(max(float(value), 0.0), 1.0)
                logger.warning(
                    f"{gesture_class}.{key}={value!r} outside [0, 1]; clamped to {clamped}"
                )
                merged[key] = clamped

    for key in _POSITIVE_INT_KEYS:
        if key in merged:
            value = merged[key]
            if not _is_number(value) or int(value) < 1:
                substitute(key, value, "must be a positive integer")
            else:
                merged[key] = int(value)

    if gesture_class == "pinch":
        distance = merged.get("distance_threshold")
        release = merged.get("release_threshold")
        if distance is not None and release is not None and release <= distance:
            logger.warning(
                f"pinch.release_threshold={release!r} must exceed "
                f"distance_threshold={distance!r}; using defaults for both"
            )
            merged["distance_threshold"] = defaults["distance_threshold"]
            merged["release_threshold"] = defaults["release_threshold"]

    return merged


def validate_config(
    user_config: Union[Mapping[str, Any], DictConfig, None] = None,
    logger: Optional[Logger] = None
) -> Dict[str, Dict[str, Any]]:
    """
    Merge a user configuration over the defaults and validate it.

    Each gesture class block is merged shallowly; unknown blocks are ignored.

    Args:
        user_config: Partial configuration keyed by gesture class
        logger: Logger for warnings

    Returns:
        Complete validated configuration
    """
    logger = logger or _get_logger()
    user = {to_snake_case(str(k)): v for k, v in _to_plain_dict(user_config).items()}

    for name in user:
        if name not in DEFAULT_GESTURE_CONFIG:
            logger.warning(f"Ignoring unknown configuration block '{name}'")

    return {
        name: validate_gesture_settings(name, user.get(name), logger)
        for name in DEFAULT_GESTURE_CONFIG
    }


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_dir: Union[str, Path] = PACKAGE_CONFIG_DIR):
        """
        Initialize the configuration manager.

        Args:
            config_dir: Directory containing configuration files
        """
        self.config_dir = Path(config_dir)
        self._configs: Dict[str, DictConfig] = {}

    @staticmethod
    def _read_yaml(config_path: Path) -> DictConfig:
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in {config_path}: {e}")

        return OmegaConf.create(config)

    def load_config(self, config_name: str) -> DictConfig:
        """
        Load a configuration file.

        Args:
            config_name: Name of the configuration file (without .yaml extension)

        Returns:
            Configuration object

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            yaml.YAMLError: If configuration file is invalid
        """
        config = self._read_yaml(self.config_dir / f"{config_name}.yaml")
        self._configs[config_name] = config
        return config

    def get_config(self, config_name: str) -> DictConfig:
        """
        Get a previously loaded configuration.

        Raises:
            KeyError: If configuration hasn't been loaded
        """
        if config_name not in self._configs:
            raise KeyError(f"Configuration '{config_name}' not loaded. Call load_config() first.")

        return self._configs[config_name]

    def save_config(self, config: Union[Mapping[str, Any], DictConfig], config_name: str) -> Path:
        """
        Save a configuration to file.

        Args:
            config: Configuration dictionary
            config_name: Name for the configuration file

        Returns:
            Path of the written file
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        config_path = self.config_dir / f"{config_name}.yaml"

        with open(config_path, 'w') as f:
            yaml.safe_dump(_to_plain_dict(config), f, default_flow_style=False, indent=2)

        return config_path

    def merge_configs(self, base_config: str, override_config: str) -> DictConfig:
        """
        Merge two loaded configurations with override taking precedence.
        """
        base = self.get_config(base_config)
        override = self.get_config(override_config)
        return OmegaConf.merge(base, override)

    def get_default_config(self) -> Dict[str, Dict[str, Any]]:
        """Copy of the built-in gesture configuration."""
        return copy.deepcopy(DEFAULT_GESTURE_CONFIG)

    def load_gesture_config(
        self,
        path: Optional[Union[str, Path]] = None,
        logger: Optional[Logger] = None
    ) -> Dict[str, Dict[str, Any]]:
        """
        Load the gesture configuration.

        The packaged ``gestures.yaml`` is the base; a user file, if given, is
        merged over it and the result validated.

        Args:
            path: Optional YAML file with overrides
            logger: Logger for validation warnings

        Returns:
            Validated gesture configuration

        Raises:
            FileNotFoundError: If ``path`` doesn't exist
            yaml.YAMLError: If ``path`` is not valid YAML
        """
        if DEFAULT_CONFIG_FILE.exists():
            config = self._read_yaml(DEFAULT_CONFIG_FILE)
        else:
            config = OmegaConf.create(self.get_default_config())

        if path is not None:
            config = OmegaConf.merge(config, self._read_yaml(Path(path)))

        return validate_config(config, logger)
