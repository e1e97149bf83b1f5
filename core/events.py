"""Core gesture models shared across the project."""

from __future__ import annotations

import copy
import time
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def now_ts_ms() -> int:
    """Return the current wall-clock timestamp in milliseconds."""

    return int(time.time() * 1000)


class EngineState(str, Enum):
    """The single state of a gesture engine."""

    IDLE = "idle"
    RECORDING = "recording"
    PLAYING = "playing"


class GestureEvent(BaseModel):
    """One captured control input, relative to capture start."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    time: float = Field(default=0.0, ge=0)
    type: str = "custom"
    payload: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("payload", mode="before")
    @classmethod
    def _copy_payload(cls, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        return copy.deepcopy(value)

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.time, "type": self.type, "payload": copy.deepcopy(self.payload)}


class RecordingSummary(BaseModel):
    """Lightweight listing entry published on ``gestures:list``."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    duration: float
    event_count: int = Field(alias="eventCount")
    sources: List[str] = Field(default_factory=list)


class Recording(BaseModel):
    """A named, time-bounded take of captured events."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    duration: float = Field(default=0.0, ge=0)
    events: List[GestureEvent] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ts_ms, alias="createdAt")
    updated_at: int = Field(default_factory=now_ts_ms, alias="updatedAt")
    sources: List[str] = Field(default_factory=list)

    @property
    def event_count(self) -> int:
        return len(self.events)

    def summary(self) -> RecordingSummary:
        return RecordingSummary(
            id=self.id,
            name=self.name,
            duration=self.duration,
            event_count=self.event_count,
            sources=list(self.sources),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the persisted/exported JSON shape."""

        return {
            "id": self.id,
            "name": self.name,
            "duration": self.duration,
            "events": [event.to_dict() for event in self.events],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "sources": list(self.sources),
        }


class LibraryState(BaseModel):
    """Persisted library snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    recordings: List[Recording] = Field(default_factory=list)
    selected_id: Optional[str] = Field(default=None, alias="selectedId")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recordings": [record.to_dict() for record in self.recordings],
            "selectedId": self.selected_id,
        }


__all__ = [
    "EngineState",
    "GestureEvent",
    "LibraryState",
    "Recording",
    "RecordingSummary",
    "now_ts_ms",
]
