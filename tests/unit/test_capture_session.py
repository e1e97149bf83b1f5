# tests/unit/test_capture_session.py
from data_collection.capture_session import (
    DEFAULT_MAX_DURATION_MS,
    DEFAULT_MAX_EVENTS,
    REASON_DURATION_LIMIT,
    REASON_EVENT_LIMIT,
    CaptureLimits,
    CaptureSession,
)


def test_limits_fall_back_to_defaults():
    limits = CaptureLimits.resolve(0, -3)
    assert limits.max_duration_ms == DEFAULT_MAX_DURATION_MS == 120_000
    assert limits.max_events == DEFAULT_MAX_EVENTS == 2200
    assert CaptureLimits.resolve(500, 10) == CaptureLimits(500.0, 10)
    assert CaptureLimits.resolve("fast", True) == CaptureLimits()


def test_events_are_timestamped_relative_to_start(clock):
    clock.set_ms(5000)
    session = CaptureSession("take-1", "Take 1", clock=clock)
    clock.advance(0)
    assert session.capture("touchpad:update", {"parameter": "hue", "normalized": 0.1}) is None
    clock.advance(40)
    assert session.capture("hardware:midi-value", {"parameter": "hue", "value": 12}) is None
    clock.advance(60)

    recording = session.finalize()
    assert [e.time for e in recording.events] == [0, 40]
    assert recording.duration == 100
    assert recording.sources == ["touchpad:update", "hardware:midi-value"]
    assert (recording.id, recording.name) == ("take-1", "Take 1")


def test_payload_is_copied_at_capture(clock):
    session = CaptureSession("take-1", "Take 1", clock=clock)
    payload = {"parameter": "hue", "normalized": 0.2}
    session.capture("touchpad:update", payload)
    payload["normalized"] = 0.9
    assert session.finalize().events[0].payload["normalized"] == 0.2


def test_duration_cap_pins_a_boundary_event(clock):
    session = CaptureSession("take-1", "Take 1", clock=clock)
    session.capture("touchpad:update", {"normalized": 0.5})
    clock.set_ms(120_500)

    assert session.capture("touchpad:update", {"normalized": 0.6}) == REASON_DURATION_LIMIT
    recording = session.finalize()
    assert recording.duration == 120_000
    assert recording.events[-1].time == 120_000
    assert all(e.time <= recording.duration for e in recording.events)


def test_finalize_never_exceeds_duration_cap(clock):
    session = CaptureSession("take-1", "Take 1", limits=CaptureLimits(1000.0, 50), clock=clock)
    session.capture("touchpad:update", {})
    clock.set_ms(5000)
    assert session.finalize().duration == 1000


def test_event_cap_reports_reason(clock):
    session = CaptureSession("take-1", "Take 1", limits=CaptureLimits(10_000.0, 3), clock=clock)
    reasons = []
    for _ in range(3):
        clock.advance(10)
        reasons.append(session.capture("hardware:midi-value", {"value": 1}))
    assert reasons == [None, None, REASON_EVENT_LIMIT]
    assert session.finalize().event_count == 3


def test_bad_type_is_recorded_as_custom(clock):
    session = CaptureSession("take-1", "Take 1", clock=clock)
    session.capture("", "not a dict")
    recording = session.finalize()
    assert recording.events[0].type == "custom"
    assert recording.events[0].payload == {}


def test_empty_session_finalizes_empty(clock):
    session = CaptureSession("take-1", "Take 1", clock=clock)
    clock.advance(30)
    recording = session.finalize()
    assert recording.events == []
    assert recording.duration == 30
