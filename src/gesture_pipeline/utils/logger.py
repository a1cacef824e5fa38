"""
Logging utilities for the gesture recognition pipeline.

``Logger`` wraps a stdlib logger and attaches up to three outputs: the
console, a plain-text log file and a JSON-lines file. Keyword arguments
passed to the level methods travel as ``extra`` fields and show up as keys
in the JSON output.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_RECORD_KEYS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Formats a record as one JSON object, extra fields included."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key not in _RESERVED_RECORD_KEYS and key not in entry:
                entry[key] = value

        return json.dumps(entry, default=str)


class JsonFileHandler(logging.FileHandler):
    """Appends one JSON object per record to a file kept open by the handler."""

    def __init__(self, filename: str):
        super().__init__(filename, mode='a', encoding='utf-8')
        self.filename = filename
        self.setFormatter(JsonFormatter())


class Logger:
    """Logging facade for pipeline components."""

    def __init__(
        self,
        name: str = "gesture_pipeline",
        log_dir: str = "logs",
        level: str = "INFO",
        console_output: bool = True,
        file_output: bool = False,
        json_output: bool = False
    ):
        """
        Initialize the logger.

        Args:
            name: Logger name
            log_dir: Directory for log files (created only when a file output is enabled)
            level: Logging level name, case-insensitive
            console_output: Write to stdout
            file_output: Write a plain-text log file
            json_output: Write a JSON-lines log file
        """
        self.name = name
        self.log_dir = Path(log_dir)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        # Re-creating a Logger with the same name replaces its outputs
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if console_output:
            self._add_handler(
                logging.StreamHandler(sys.stdout),
                logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'),
            )

        self.json_handler: Optional[JsonFileHandler] = None
        if file_output or json_output:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            stem = self.log_dir / f"{name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

            if file_output:
                self._add_handler(
                    logging.FileHandler(f"{stem}.log"),
                    logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'),
                )
            if json_output:
                self.json_handler = JsonFileHandler(f"{stem}.json")
                self.logger.addHandler(self.json_handler)

    def _add_handler(self, handler: logging.Handler, formatter: logging.Formatter) -> None:
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

    def debug(self, message: str, **fields: Any) -> None:
        self.logger.debug(message, extra=fields)

    def info(self, message: str, **fields: Any) -> None:
        self.logger.info(message, extra=fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.logger.warning(message, extra=fields)

    def error(self, message: str, **fields: Any) -> None:
        self.logger.error(message, extra=fields)

    def exception(self, message: str, **fields: Any) -> None:
        """Log at error level with the traceback of the exception being handled."""
        self.logger.exception(message, extra=fields)

    def critical(self, message: str, **fields: Any) -> None:
        self.logger.critical(message, extra=fields)

    def log_metric(self, metric_name: str, value: float, step: Optional[int] = None) -> None:
        """Log a named numeric measurement."""
        self.info(
            f"METRIC: {metric_name} = {value}",
            metric_name=metric_name,
            value=value,
            step=step,
            metric_time=datetime.now().isoformat(),
        )

    def log_config(self, config: Dict[str, Any]) -> None:
        self.info("Configuration loaded", config=config)

    def log_gesture_event(self, event_name: str, payload: Dict[str, Any]) -> None:
        """Log an emitted gesture event at debug level."""
        self.debug(f"Gesture event: {event_name}", event_name=event_name, payload=payload)

    def log_processing_stats(
        self,
        frames: int,
        events: int,
        avg_time_ms: float,
        max_time_ms: float
    ) -> None:
        """Log frame processing statistics."""
        self.info(
            f"Processing stats: frames={frames}, events={events}, "
            f"avg_time={avg_time_ms:.3f}ms, max_time={max_time_ms:.3f}ms",
            frames=frames,
            events=events,
        )
