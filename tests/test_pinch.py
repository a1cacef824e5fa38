"""
Tests for the pinch detector.
"""

import pytest

from conftest import make_hand

from gesture_pipeline.detectors.base import IDLE
from gesture_pipeline.detectors.pinch import ACTIVE, PinchDetector


def pinch_hand(distance, offset=(0.0, 0.0)):
    return make_hand(thumb_to_index=distance, offset=offset)


@pytest.fixture
def detector(clock):
    # alpha 1.0 disables smoothing so each sample is used as-is
    return PinchDetector({"smoothing_alpha": 1.0}, clock=clock)


def feed(detector, distances, hand_index=0):
    return [
        detector.detect(pinch_hand(d), None, 0.033, "Left", hand_index=hand_index)
        for d in distances
    ]


def test_hysteresis(detector):
    events = feed(detector, [0.10, 0.04, 0.06, 0.04, 0.09])

    assert events[0] is None
    assert events[1].event == "start"
    assert events[1].distance == pytest.approx(0.04)
    assert events[1].event_name == "gesture:pinch:start"
    assert events[2] is None
    assert events[3] is None
    assert events[4].event == "end"
    assert detector.get_state() == IDLE


def test_between_thresholds_does_not_start(detector):
    assert feed(detector, [0.06, 0.07, 0.06]) == [None, None, None]
    assert detector.get_state() == IDLE


def test_state_is_active_while_pinched(detector):
    feed(detector, [0.03])
    assert detector.get_state() == ACTIVE


def test_move_while_active(detector):
    detector.detect(pinch_hand(0.03), None, 0.033)
    event = detector.detect(pinch_hand(0.03, offset=(0.0, 0.02)), None, 0.033)

    assert event.event == "move"
    assert event.movement == pytest.approx((0.0, 0.02))
    assert event.movement_magnitude == pytest.approx(0.02)


def test_small_motion_is_not_a_move(detector):
    detector.detect(pinch_hand(0.03), None, 0.033)
    assert detector.detect(pinch_hand(0.03, offset=(0.002, 0.0)), None, 0.033) is None


def test_volume_below_drag_epsilon(clock):
    detector = PinchDetector({"smoothing_alpha": 1.0, "volume_threshold": 0.003}, clock=clock)
    detector.detect(pinch_hand(0.03), None, 0.033)

    event = detector.detect(pinch_hand(0.03, offset=(-0.004, 0.0)), None, 0.033)

    assert event.event == "volume"
    assert event.direction == "left"
    assert event.magnitude == pytest.approx(0.004)


def test_start_is_debounced(detector, clock):
    feed(detector, [0.03, 0.10])
    assert feed(detector, [0.03]) == [None]

    clock.advance(100)
    assert feed(detector, [0.03])[0].event == "start"


def test_release_is_not_debounced(detector):
    events = feed(detector, [0.03, 0.10])
    assert [e.event for e in events] == ["start", "end"]


def test_smoothing_delays_start(clock):
    detector = PinchDetector({"smoothing_alpha": 0.3}, clock=clock)
    events = feed(detector, [0.10, 0.02])
    # 0.3 * 0.02 + 0.7 * 0.10 = 0.076
    assert events == [None, None]


def test_hands_are_independent(detector):
    feed(detector, [0.03], hand_index=0)
    assert detector.get_state(0) == ACTIVE
    assert detector.get_state(1) == IDLE

    assert feed(detector, [0.03], hand_index=1)[0].event == "start"


def test_incomplete_hand(detector):
    assert detector.detect(pinch_hand(0.03)[:5], None, 0.033) is None
    assert detector.detect(None, None, 0.033) is None


def test_disable_resets_state(detector):
    feed(detector, [0.03])
    detector.disable()
    assert detector.get_state() == IDLE
    assert feed(detector, [0.03]) == [None]


def test_release_threshold_must_exceed_distance_threshold():
    detector = PinchDetector({"distance_threshold": 0.09, "release_threshold": 0.08})
    config = detector.get_config()
    assert config["distance_threshold"] == 0.05
    assert config["release_threshold"] == 0.08
