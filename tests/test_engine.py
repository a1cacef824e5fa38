"""
Tests for the gesture engine.
"""

import pytest

from conftest import hand_dict, make_hand

from gesture_pipeline.core.engine import GestureEngine
from gesture_pipeline.core.events import GENERIC_EVENT, EventBus, GestureEvent
from gesture_pipeline.core.landmarks import HandData
from gesture_pipeline.detectors.base import BaseGestureDetector, DetectorState
from gesture_pipeline.detectors.pinch import PinchDetector
from gesture_pipeline.detectors.swipe import SwipeDetector


class SpyDetector(BaseGestureDetector):
    """Records every call and optionally returns a fixed event."""

    gesture_type = "spy"

    def __init__(self, result=None, **kwargs):
        super().__init__(**kwargs)
        self.calls = []
        self.result = result

    def _create_state(self):
        return DetectorState()

    def detect(self, landmarks, previous_landmarks, delta_time, handedness="Unknown", hand_index=0):
        self.calls.append((landmarks, previous_landmarks, delta_time, handedness, hand_index))
        return self.result


class BrokenDetector(SpyDetector):

    def detect(self, *args, **kwargs):
        raise RuntimeError("boom")


@pytest.fixture
def engine(sink):
    return GestureEngine(sink)


def test_history_is_bounded(engine):
    hand = make_hand()
    for i in range(40):
        engine.process_frame(hand_dict(hand, timestamp=i * 33.0))

    history = engine.get_history(0)
    assert len(history) == 30
    assert [entry.timestamp for entry in history] == [i * 33.0 for i in range(10, 40)]


def test_history_size_is_configurable(sink):
    engine = GestureEngine(sink, max_history_size=5)
    for i in range(8):
        engine.process_frame(hand_dict(make_hand(), timestamp=float(i)))
    assert len(engine.get_history(0)) == 5


def test_delta_time_and_previous_landmarks(engine):
    spy = SpyDetector()
    engine.register_detector("spy", spy)
    first = make_hand()
    second = make_hand(offset=(0.01, 0.0))

    engine.process_frame(hand_dict(first, timestamp=1000.0, handedness="left"))
    engine.process_frame(hand_dict(second, timestamp=1050.0, handedness="left"))

    landmarks, previous, delta_time, handedness, hand_index = spy.calls[0]
    assert previous is None
    assert delta_time == 0.0
    assert handedness == "Left"

    landmarks, previous, delta_time, _, _ = spy.calls[1]
    assert delta_time == pytest.approx(0.05)
    assert list(previous) == first
    assert list(landmarks) == second


def test_history_is_per_hand(engine):
    spy = SpyDetector()
    engine.register_detector("spy", spy)

    engine.process_frame(hand_dict(make_hand(), timestamp=0.0, hand_index=0))
    engine.process_frame(hand_dict(make_hand(), timestamp=20.0, hand_index=1))
    engine.process_frame(hand_dict(make_hand(), timestamp=33.0, hand_index=0))

    assert [call[4] for call in spy.calls] == [0, 1, 0]
    assert spy.calls[1][1] is None
    assert spy.calls[2][2] == pytest.approx(0.033)


def test_failing_detector_is_isolated(engine, sink):
    event = GestureEvent(type="swipe", handedness="Right", timestamp=0.0, direction="up")
    spy = SpyDetector(result=event)
    engine.register_detector("broken", BrokenDetector())
    engine.register_detector("spy", spy)

    emitted = engine.process_frame(hand_dict(make_hand(), timestamp=0.0))

    assert emitted == [event]
    assert len(spy.calls) == 1
    assert engine.detector_errors["broken"] == 1
    assert engine.get_diagnostics()["detector_errors"] == {"broken": 1}
    assert sink.names == ["gesture:swipe:up", GENERIC_EVENT]


def test_emits_namespaced_and_generic_events(engine, sink):
    event = GestureEvent(type="pinch", handedness="Left", timestamp=5.0, event="start", distance=0.03)
    engine.register_detector("pinch", SpyDetector(result=event))

    engine.process_frame(hand_dict(make_hand(), timestamp=0.0))

    (name, payload), (generic_name, generic_payload) = sink.events
    assert name == "gesture:pinch:start"
    assert payload["event"] == "start"
    assert "velocity" not in payload
    assert generic_name == GENERIC_EVENT
    assert generic_payload["detector"] == "pinch"
    assert generic_payload["distance"] == 0.03


def test_detectors_run_in_registration_order(engine):
    order = []

    class Tagged(SpyDetector):
        def detect(self, *args, **kwargs):
            order.append(self.tag)

    for tag in ("b", "a", "c"):
        detector = Tagged()
        detector.tag = tag
        engine.register_detector(tag, detector)

    engine.process_frame(hand_dict(make_hand(), timestamp=0.0))
    assert order == ["b", "a", "c"]


def test_disabled_detector_is_skipped(engine):
    spy = SpyDetector()
    engine.register_detector("spy", spy)
    engine.disable_detector("spy")

    engine.process_frame(hand_dict(make_hand(), timestamp=0.0))
    assert spy.calls == []
    assert engine.get_diagnostics()["enabled_detectors"] == []

    engine.enable_all()
    engine.process_frame(hand_dict(make_hand(), timestamp=10.0))
    assert len(spy.calls) == 1


def test_unknown_names_are_ignored(engine):
    engine.enable_detector("missing")
    engine.disable_detector("missing")
    engine.reset_detector("missing")
    engine.unregister_detector("missing")
    assert engine.get_detector("missing") is None


def test_reset_all_clears_history_and_state(engine, clock):
    pinch = PinchDetector({"smoothing_alpha": 1.0}, clock=clock)
    engine.register_detector("pinch", pinch)

    engine.process_frame(hand_dict(make_hand(thumb_to_index=0.02), timestamp=0.0))
    assert pinch.get_state() == "active"

    engine.reset_all()
    assert pinch.get_state() == "idle"
    assert engine.get_history(0) == []


def test_clear_hand(engine, clock):
    pinch = PinchDetector({"smoothing_alpha": 1.0}, clock=clock)
    engine.register_detector("pinch", pinch)
    for index in (0, 1):
        engine.process_frame(hand_dict(make_hand(thumb_to_index=0.02), timestamp=0.0, hand_index=index))

    engine.clear_hand(0)

    assert engine.get_history(0) == []
    assert len(engine.get_history(1)) == 1
    assert pinch.get_state(0) == "idle"
    assert pinch.get_state(1) == "active"


def test_accepts_hand_data(engine):
    spy = SpyDetector()
    engine.register_detector("spy", spy)
    hand = HandData(hand_index=2, landmarks=tuple(make_hand()), handedness="Right", timestamp=0.0)

    engine.process_frame(hand)
    assert spy.calls[0][4] == 2


@pytest.mark.parametrize("bad", [
    None,
    42,
    "frame",
    {"landmarks": [{"y": 0.5}]},
    {"landmarks": ["nope"]},
    {"landmarks": [], "confidence": "high"},
])
def test_malformed_frames_are_dropped(engine, bad):
    spy = SpyDetector()
    engine.register_detector("spy", spy)

    assert engine.process_frame(bad) == []
    assert spy.calls == []
    assert engine.get_diagnostics()["invalid_frames"] == 1
    assert engine.get_diagnostics()["frames_processed"] == 0


def test_incomplete_hand_reaches_detectors_safely(clock, sink):
    engine = GestureEngine.from_config(sink, clock=clock)
    assert engine.process_frame(hand_dict(make_hand()[:10], timestamp=0.0)) == []
    assert engine.detector_errors == {}


def test_from_config(clock):
    bus = EventBus()
    engine = GestureEngine.from_config(
        bus,
        {"swipe": {"velocityThreshold": 1.5}, "static": {"enabled": False}, "engine": {"max_history_size": 10}},
        clock=clock,
    )

    assert engine.get_detector_names() == ["swipe", "pinch", "push", "static"]
    assert isinstance(engine.get_detector("swipe"), SwipeDetector)
    assert engine.get_detector("swipe").get_config()["velocity_threshold"] == 1.5
    assert not engine.get_detector("static").is_enabled()
    assert engine.max_history_size == 10


def test_swipe_end_to_end(clock):
    bus = EventBus()
    received = []
    bus.on("gesture:swipe:right", received.append)
    bus.on(GENERIC_EVENT, received.append)
    engine = GestureEngine.from_config(bus, clock=clock)

    clock.set(0)
    engine.process_frame(hand_dict(make_hand(offset=(-0.2, 0.0)), timestamp=0.0))
    clock.set(100)
    engine.process_frame(hand_dict(make_hand(), timestamp=100.0))

    assert len(received) == 2
    assert received[0]["direction"] == "right"
    assert received[1]["detector"] == "swipe"
    assert engine.get_diagnostics()["events_emitted"] == 1


def test_diagnostics(engine):
    engine.register_detector("spy", SpyDetector())
    for i in range(3):
        engine.process_frame(hand_dict(make_hand(), timestamp=i * 10.0, hand_index=i % 2))

    diagnostics = engine.get_diagnostics()
    assert diagnostics["frames_processed"] == 3
    assert diagnostics["tracked_hands"] == [0, 1]
    assert diagnostics["enabled_detectors"] == ["spy"]
    assert diagnostics["avg_processing_time_ms"] >= 0.0
    assert diagnostics["max_processing_time_ms"] >= diagnostics["avg_processing_time_ms"]


def test_processing_time_window(sink):
    engine = GestureEngine(sink, max_processing_times=60)
    for i in range(70):
        engine.process_frame(hand_dict(make_hand(), timestamp=float(i)))
    assert len(engine.monitor.processing_times) == 60


class FailingSink:

    def emit(self, event_name, data):
        raise RuntimeError("sink down")


def test_failing_sink_does_not_stop_the_frame():
    engine = GestureEngine(FailingSink())
    event = GestureEvent(type="swipe", handedness="Right", timestamp=0.0, direction="left")
    first = SpyDetector(result=event)
    second = SpyDetector()
    engine.register_detector("a", first)
    engine.register_detector("b", second)

    emitted = engine.process_frame(hand_dict(make_hand(), timestamp=0.0))

    assert emitted == []
    assert len(second.calls) == 1
    diagnostics = engine.get_diagnostics()
    assert diagnostics["frames_processed"] == 1
    assert diagnostics["emit_errors"] == {"a": 1}
    assert diagnostics["events_emitted"] == 0
    assert len(engine.monitor.processing_times) == 1
