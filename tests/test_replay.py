"""
Tests for the landmark replay script.
"""

import io
import json

from conftest import hand_dict, make_hand

from gesture_pipeline.core.clock import ManualClock
from gesture_pipeline.core.engine import GestureEngine
from gesture_pipeline.core.events import EventBus
from gesture_pipeline.scripts.replay_landmarks import iter_hand_records, main, replay
from gesture_pipeline.utils.logger import Logger


def swipe_lines():
    return [
        json.dumps(hand_dict(make_hand(offset=(-0.2, 0.0)), timestamp=0.0)),
        "",
        "not json",
        json.dumps({"timestamp": 100.0, "hands": [hand_dict(make_hand(), timestamp=100.0)]}),
    ]


def quiet_logger():
    return Logger("replay_test", console_output=False)


def test_iter_hand_records_skips_bad_lines():
    stream = io.StringIO("\n".join(swipe_lines() + ["[1, 2]"]))
    records = list(iter_hand_records(stream, quiet_logger()))
    assert [r["timestamp"] for r in records] == [0.0, 100.0]


def test_frame_timestamp_fills_hands():
    line = json.dumps({"timestamp": 42.0, "hands": [{"landmarks": []}, {"landmarks": [], "timestamp": 7.0}]})
    records = list(iter_hand_records(io.StringIO(line), quiet_logger()))
    assert [r["timestamp"] for r in records] == [42.0, 7.0]


def test_replay_follows_recorded_time():
    clock = ManualClock()
    logger = quiet_logger()
    engine = GestureEngine.from_config(EventBus(logger=logger), clock=clock, logger=logger)

    detected = replay(io.StringIO("\n".join(swipe_lines())), engine, clock, logger)

    assert clock() == 100.0
    assert len(detected) == 1
    assert detected[0]["detector"] == "swipe"
    assert detected[0]["direction"] == "right"
    assert detected[0]["timestamp"] == 100.0


def test_main(tmp_path, capsys):
    recording = tmp_path / "swipe.jsonl"
    recording.write_text("\n".join(swipe_lines()) + "\n")

    assert main([str(recording), "--log-level", "ERROR"]) == 0

    printed = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
    assert [event["direction"] for event in printed] == ["right"]


def test_main_with_disabled_detector(tmp_path, capsys):
    recording = tmp_path / "swipe.jsonl"
    recording.write_text("\n".join(swipe_lines()) + "\n")

    assert main([str(recording), "--disable", "swipe", "--log-level", "ERROR"]) == 0
    assert '"detector": "swipe"' not in capsys.readouterr().out


def test_main_errors(tmp_path):
    assert main([str(tmp_path / "missing.jsonl"), "--log-level", "ERROR"]) == 1

    recording = tmp_path / "empty.jsonl"
    recording.write_text("")
    assert main([str(recording), "--disable", "wave", "--log-level", "ERROR"]) == 1
