
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

# published
RECORDING_START = "gestures:recording-start"
RECORDING_STOP = "gestures:recording-stop"
PLAYBACK_START = "gestures:playback-start"
PLAYBACK_EVENT = "gestures:playback-event"
PLAYBACK_STOP = "gestures:playback-stop"
PLAYBACK_COMPLETE = "gestures:playback-complete"
LIBRARY_LIST = "gestures:list"

# consumed
TOUCHPAD_UPDATE = "touchpad:update"
MIDI_VALUE = "hardware:midi-value"
AUDIO_FLOURISH = "audio:flourish"
SHOW_START = "show:start"
SHOW_STOP = "show:stop"
SHOW_CUE_TRIGGER = "show:cue-trigger"

DEFAULT_CAPTURE_EVENTS = (TOUCHPAD_UPDATE, MIDI_VALUE)

class TakeRef(BaseModel):
    """Payload of recording-start/stop and playback-start."""
    id: str
    name: str
class PlaybackRef(BaseModel):
    """Payload of playback-stop and playback-complete."""
    id: str
class PlaybackEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    recording_id: str = Field(alias="recordingId")
    name: str
    event: Dict[str, Any]
class LibraryList(BaseModel):
    gestures: List[Dict[str, Any]] = Field(default_factory=list)
class ShowStart(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    tempo: Optional[float] = None
    beats_per_bar: Optional[float] = Field(default=None, alias="beatsPerBar")
class Cue(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    gesture_id: Optional[str] = Field(default=None, alias="gestureId")

def payload(model: BaseModel) -> Dict[str, Any]:
    """Wire dict for a bus payload model."""
    return model.model_dump(by_alias=True)
