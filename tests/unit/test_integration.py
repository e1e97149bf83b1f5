# tests/unit/test_integration.py
from core.integration import BusIntegration, ShowContext
from sdk import events as topics


def test_default_capture_topics_include_audio(engine, bus):
    assert engine.integration.capture_events == [topics.TOUCHPAD_UPDATE, topics.MIDI_VALUE, topics.AUDIO_FLOURISH]
    assert bus.listener_count(topics.TOUCHPAD_UPDATE) == 1


def test_bind_is_idempotent(engine, bus):
    engine.integration.bind()
    assert bus.listener_count(topics.SHOW_START) == 1
    engine.integration.unbind()
    assert not engine.integration.bound
    engine.integration.unbind()


def test_custom_capture_topics(make_engine, bus):
    engine = make_engine()
    engine.integration.unbind()

    integration = BusIntegration(engine, bus, ["osc:fader", "", 3])
    integration.bind()
    assert integration.capture_events == ["osc:fader", topics.AUDIO_FLOURISH]

    engine.start_recording()
    bus.emit("osc:fader", {"parameter": "hue", "normalized": 0.4})
    bus.emit(topics.TOUCHPAD_UPDATE, {"parameter": "hue", "normalized": 0.9})
    take = engine.stop_recording()
    assert [e.type for e in take.events] == ["osc:fader"]
    integration.unbind()


def test_unreadable_show_metadata_still_marks_running(engine, bus):
    bus.emit(topics.SHOW_START, {"tempo": "fast"})
    assert engine.show.running
    assert engine.show.tempo is None


def test_show_context_describe():
    assert ShowContext().describe() == ""
    assert ShowContext(tempo=90.4).describe() == "(90 BPM)"
