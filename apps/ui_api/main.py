from __future__ import annotations
from fastapi import Body, Depends, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
import asyncio

from core.engine import GestureEngine
from core.formatting import describe_sources, format_beats, format_duration
from sdk import events as topics
from sdk.config import AppConfig
from sdk.logging import get_logger
from sdk.runtime import build_engine

logger = get_logger("api")

app = FastAPI(title="GestureDeck API")

# topics relayed to websocket clients
BUS_TOPICS = (
    topics.RECORDING_START,
    topics.RECORDING_STOP,
    topics.PLAYBACK_START,
    topics.PLAYBACK_EVENT,
    topics.PLAYBACK_STOP,
    topics.PLAYBACK_COMPLETE,
    topics.LIBRARY_LIST,
)

_engine: Optional[GestureEngine] = None

def get_engine() -> GestureEngine:
    """Process-wide engine, built from the environment on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine(AppConfig())
        logger.info("Gesture engine ready with %d gestures", len(_engine.recordings))
    return _engine

def not_found(recording_id: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "not found", "id": recording_id})

class RenameRequest(BaseModel):
    name: str

class StopRequest(BaseModel):
    discard: bool = False

class CaptureRequest(BaseModel):
    type: str = Field(min_length=1)
    payload: Dict[str, Any] = Field(default_factory=dict)

def engine_status(engine: GestureEngine) -> Dict[str, Any]:
    return {"state": engine.state.value, "status": engine.status_message, "selectedId": engine.selected_id}

# Routes are async so every engine call and timer callback runs on the event loop thread.

@app.get("/gestures")
async def list_gestures(engine: GestureEngine = Depends(get_engine)):
    tempo = engine.show.tempo
    gestures = []
    for s in engine.summaries():
        item = s.model_dump(by_alias=True)
        # display labels; beats only while the sequencer announced a tempo
        item["label"] = f"{format_duration(s.duration)} • {s.event_count} events • {describe_sources(s.sources)}"
        item["beats"] = format_beats(s.duration, tempo)
        gestures.append(item)
    return {"gestures": gestures, "show": engine.show.describe(), **engine_status(engine)}

@app.get("/gestures/export")
async def export_gestures(engine: GestureEngine = Depends(get_engine)):
    document = engine.export_document()
    if document is None:
        return JSONResponse(status_code=404, content={"error": "library is empty"})
    return document

@app.post("/gestures/import")
async def import_gestures(document: Any = Body(...), engine: GestureEngine = Depends(get_engine)):
    if not engine.import_document(document):
        return JSONResponse(status_code=400, content={"error": engine.status_message})
    return {"imported": len(engine.recordings), **engine_status(engine)}

@app.post("/gestures/record/start")
async def start_recording(engine: GestureEngine = Depends(get_engine)):
    if not engine.start_recording():
        return JSONResponse(status_code=409, content={"error": "already recording"})
    session = engine.capture_session
    return {"id": session.id, "name": session.name, **engine_status(engine)}

@app.post("/gestures/record/stop")
async def stop_recording(body: Optional[StopRequest] = None, engine: GestureEngine = Depends(get_engine)):
    if not engine.is_recording:
        return JSONResponse(status_code=409, content={"error": "not recording"})
    recording = engine.stop_recording(discard=bool(body and body.discard))
    return {"recording": recording.to_dict() if recording else None, **engine_status(engine)}

@app.post("/gestures/capture")
async def capture(body: CaptureRequest, engine: GestureEngine = Depends(get_engine)):
    """Publish one control event on the bus, as a touch pad or MIDI source would."""
    if body.type not in engine.integration.capture_events:
        return JSONResponse(status_code=400, content={"error": "not a capture topic", "type": body.type})
    engine.bus.emit(body.type, body.payload)
    session = engine.capture_session
    return {"eventCount": session.event_count if session else 0, **engine_status(engine)}

@app.post("/gestures/playback/stop")
async def stop_playback(engine: GestureEngine = Depends(get_engine)):
    return {"stopped": engine.stop_playback(), **engine_status(engine)}

@app.get("/gestures/{recording_id}")
async def get_gesture(recording_id: str, engine: GestureEngine = Depends(get_engine)):
    recording = engine.library.get(recording_id)
    if recording is None:
        return not_found(recording_id)
    return recording.to_dict()

@app.post("/gestures/{recording_id}/play")
async def play_gesture(recording_id: str, engine: GestureEngine = Depends(get_engine)):
    if recording_id not in engine.library:
        return not_found(recording_id)
    if not engine.play(recording_id):
        return JSONResponse(status_code=409, content={"error": "nothing to play"})
    return engine_status(engine)

@app.patch("/gestures/{recording_id}")
async def rename_gesture(recording_id: str, body: RenameRequest, engine: GestureEngine = Depends(get_engine)):
    if recording_id not in engine.library:
        return not_found(recording_id)
    if not engine.rename(recording_id, body.name) and engine.library.get(recording_id).name != body.name.strip():
        return JSONResponse(status_code=400, content={"error": "invalid name"})
    return engine.library.get(recording_id).summary().model_dump(by_alias=True)

@app.post("/gestures/{recording_id}/duplicate", status_code=201)
async def duplicate_gesture(recording_id: str, engine: GestureEngine = Depends(get_engine)):
    copy = engine.duplicate(recording_id)
    if copy is None:
        return not_found(recording_id)
    return copy.summary().model_dump(by_alias=True)

@app.delete("/gestures/{recording_id}")
async def delete_gesture(recording_id: str, engine: GestureEngine = Depends(get_engine)):
    removed = engine.delete(recording_id)
    if removed is None:
        return not_found(recording_id)
    return {"deleted": removed.id, **engine_status(engine)}

@app.delete("/gestures")
async def clear_gestures(engine: GestureEngine = Depends(get_engine)):
    return {"cleared": engine.clear(), **engine_status(engine)}

@app.websocket("/ws/bus")
async def ws_bus(ws: WebSocket, engine: GestureEngine = Depends(get_engine)):
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribers = [
        engine.bus.on(topic, lambda payload, topic=topic: queue.put_nowait({"topic": topic, "payload": payload}))
        for topic in BUS_TOPICS
    ]
    await ws.accept()
    logger.debug("Bus websocket client connected")
    await ws.send_json({
        "topic": topics.LIBRARY_LIST,
        "payload": {"gestures": [s.model_dump(by_alias=True) for s in engine.summaries()]},
    })

    async def pump():
        while True:
            await ws.send_json(await queue.get())

    sender = asyncio.create_task(pump())
    try:
        # client messages are ignored; receiving surfaces the disconnect
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        logger.debug("Bus websocket client disconnected")
    finally:
        sender.cancel()
        for unsubscribe in unsubscribers:
            unsubscribe()
