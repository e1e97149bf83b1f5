# tests/unit/test_api.py
import pytest
from fastapi.testclient import TestClient

from apps.ui_api.main import app, get_engine
from core.bus import EventBus
from core.engine import GestureEngine
from plugins.parameters.static.impl import StaticParameterRegistry
from plugins.stores.memory.impl import MemoryStore
from sdk import events as topics


@pytest.fixture
def api_engine():
    engine = GestureEngine(
        bus=EventBus(),
        store=MemoryStore(),
        parameters=StaticParameterRegistry({"hue": {"min": 0, "max": 360}}),
    )
    yield engine
    engine.destroy()


@pytest.fixture
def client(api_engine):
    app.dependency_overrides[get_engine] = lambda: api_engine
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _record(client, events=2):
    started = client.post("/gestures/record/start")
    assert started.status_code == 200
    for i in range(events):
        client.post("/gestures/capture", json={"type": "touchpad:update", "payload": {"parameter": "hue", "normalized": i / 2}})
    stopped = client.post("/gestures/record/stop")
    assert stopped.status_code == 200
    return stopped.json()["recording"]


def test_empty_library(client):
    body = client.get("/gestures").json()
    assert body["gestures"] == []
    assert body["state"] == "idle"
    assert body["selectedId"] is None
    assert client.get("/gestures/export").status_code == 404


def test_record_capture_and_fetch(client):
    recording = _record(client)
    assert recording["name"] == "Take 1"
    assert len(recording["events"]) == 2

    listed = client.get("/gestures").json()
    assert [g["id"] for g in listed["gestures"]] == [recording["id"]]
    assert listed["gestures"][0]["eventCount"] == 2
    assert listed["status"] == "Saved Take 1"

    fetched = client.get(f"/gestures/{recording['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["events"] == recording["events"]
    assert client.get("/gestures/take-missing").status_code == 404


def test_record_start_twice_conflicts(client):
    assert client.post("/gestures/record/start").status_code == 200
    assert client.post("/gestures/record/start").status_code == 409
    discarded = client.post("/gestures/record/stop", json={"discard": True})
    assert discarded.json()["recording"] is None
    assert client.post("/gestures/record/stop").status_code == 409


def test_capture_outside_recording_is_ignored(client):
    body = client.post("/gestures/capture", json={"type": "touchpad:update", "payload": {}}).json()
    assert body["eventCount"] == 0
    assert client.post("/gestures/capture", json={"type": ""}).status_code == 422


def test_capture_refuses_non_capture_topics(client, api_engine):
    client.post("/gestures/record/start")
    for topic in (topics.SHOW_CUE_TRIGGER, topics.LIBRARY_LIST, "osc:fader"):
        response = client.post("/gestures/capture", json={"type": topic, "payload": {}})
        assert response.status_code == 400
    assert api_engine.capture_session.event_count == 0
    assert api_engine.is_recording


def test_rename_duplicate_delete_clear(client):
    recording = _record(client)
    rid = recording["id"]

    renamed = client.patch(f"/gestures/{rid}", json={"name": " Swirl "})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Swirl"
    assert client.patch(f"/gestures/{rid}", json={"name": "Swirl"}).status_code == 200
    assert client.patch(f"/gestures/{rid}", json={"name": "  "}).status_code == 400
    assert client.patch("/gestures/nope", json={"name": "X"}).status_code == 404

    copy = client.post(f"/gestures/{rid}/duplicate")
    assert copy.status_code == 201
    assert copy.json()["name"] == "Swirl (copy)"

    assert client.delete(f"/gestures/{rid}").json()["deleted"] == rid
    assert client.delete(f"/gestures/{rid}").status_code == 404
    assert client.delete("/gestures").json()["cleared"] is True
    assert client.get("/gestures").json()["gestures"] == []


def test_export_import_round_trip(client):
    _record(client)
    document = client.get("/gestures/export").json()
    assert len(document["gestures"]) == 1

    client.delete("/gestures")
    imported = client.post("/gestures/import", json=document)
    assert imported.status_code == 200
    assert imported.json()["imported"] == 1
    assert client.post("/gestures/import", json={"foo": 1}).status_code == 400


def test_play_and_stop(client, api_engine):
    recording = _record(client)
    assert client.post("/gestures/take-missing/play").status_code == 404

    playing = client.post(f"/gestures/{recording['id']}/play")
    assert playing.status_code == 200
    assert playing.json()["state"] == "playing"

    stopped = client.post("/gestures/playback/stop").json()
    assert stopped["state"] == "idle"
    assert api_engine.status_message in ("Playback stopped", "Playback finished")


def test_bus_websocket_relays_notifications(client):
    with client.websocket_connect("/ws/bus") as ws:
        first = ws.receive_json()
        assert first["topic"] == topics.LIBRARY_LIST
        assert first["payload"] == {"gestures": []}

        client.post("/gestures/record/start")
        message = ws.receive_json()
        assert message["topic"] == topics.RECORDING_START
        assert message["payload"]["name"] == "Take 1"


def test_listing_shows_beats_once_tempo_is_known(client, api_engine):
    _record(client)
    item = client.get("/gestures").json()["gestures"][0]
    assert item["beats"] is None
    assert "2 events" in item["label"]

    api_engine.bus.emit(topics.SHOW_START, {"tempo": 120, "beatsPerBar": 4})
    body = client.get("/gestures").json()
    assert body["show"] == "(120 BPM • 4 beats/bar • Show running)"
