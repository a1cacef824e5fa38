#!/usr/bin/env python3
"""
Replay a recorded landmark stream through the gesture engine.

The recording is a JSON-lines file. Each line is either one hand
(``{"hand_index": 0, "landmarks": [...], "handedness": "Right",
"timestamp": 1234.5}``) or a frame holding several hands
(``{"timestamp": 1234.5, "hands": [...]}``).
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, TextIO

from ..core.clock import ManualClock
from ..core.engine import GestureEngine
from ..core.events import GENERIC_EVENT, EventBus
from ..utils.config import ConfigManager
from ..utils.logger import Logger


def iter_hand_records(stream: TextIO, logger: Logger) -> Iterator[Dict[str, Any]]:
    """
    Yield hand dictionaries from a JSON-lines stream.

    Blank lines are skipped; lines that are not valid JSON are logged and
    skipped.
    """
    for line_number, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue

        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping line {line_number}: {e}")
            continue

        if isinstance(record, dict) and "hands" in record:
            for hand in record.get("hands") or []:
                hand = dict(hand)
                hand.setdefault("timestamp", record.get("timestamp", 0.0))
                yield hand
        elif isinstance(record, dict):
            yield record
        else:
            logger.warning(f"Skipping line {line_number}: expected an object")


def replay(
    stream: TextIO,
    engine: GestureEngine,
    clock: ManualClock,
    logger: Logger
) -> List[Dict[str, Any]]:
    """
    Feed every hand record to the engine.

    The clock follows the recorded timestamps so that debouncing and hold
    timing behave as they did during capture.

    Returns:
        Payloads of all ``gesture:detected`` events in emission order
    """
    detected: List[Dict[str, Any]] = []
    unsubscribe = engine.event_bus.on(GENERIC_EVENT, detected.append)

    try:
        for hand in iter_hand_records(stream, logger):
            try:
                timestamp = float(hand.get("timestamp", clock.now_ms))
            except (TypeError, ValueError):
                timestamp = clock.now_ms
            clock.set(max(clock.now_ms, timestamp))
            engine.process_frame(hand)
    finally:
        unsubscribe()

    return detected


def main(argv: Optional[List[str]] = None) -> int:
    """Main function for landmark replay."""
    parser = argparse.ArgumentParser(description="Replay recorded hand landmarks through the gesture engine")
    parser.add_argument(
        "recording",
        type=str,
        help="JSON-lines file with hand data ('-' for stdin)"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="YAML file with gesture threshold overrides"
    )
    parser.add_argument(
        "--disable",
        action="append",
        default=[],
        metavar="DETECTOR",
        help="Disable a detector (may be repeated)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level"
    )

    args = parser.parse_args(argv)

    logger = Logger("replay", level=args.log_level)

    try:
        config = ConfigManager().load_gesture_config(args.config, logger=logger)
        logger.log_config(config)

        bus = EventBus(logger=logger)
        clock = ManualClock()
        engine = GestureEngine.from_config(bus, config, clock=clock, logger=logger)

        for name in args.disable:
            if not engine.has_detector(name):
                logger.error(f"Unknown detector: {name}")
                return 1
            engine.disable_detector(name)

        def print_event(payload: Dict[str, Any]) -> None:
            print(json.dumps(payload, default=str))

        bus.on(GENERIC_EVENT, print_event)

        if args.recording == "-":
            detected = replay(sys.stdin, engine, clock, logger)
        else:
            path = Path(args.recording)
            if not path.exists():
                logger.error(f"Recording not found: {path}")
                return 1
            with open(path, 'r') as f:
                detected = replay(f, engine, clock, logger)

        diagnostics = engine.get_diagnostics()
        logger.log_processing_stats(
            diagnostics['frames_processed'],
            len(detected),
            diagnostics['avg_processing_time_ms'],
            diagnostics['max_processing_time_ms'],
        )
        if diagnostics['detector_errors']:
            logger.warning(f"Detector errors: {diagnostics['detector_errors']}")

        return 0

    except KeyboardInterrupt:
        logger.info("Replay interrupted by user")
        return 0
    except Exception as e:
        logger.error(f"Replay failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
