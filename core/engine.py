"""The gesture engine: one state machine over capture, library and playback."""

from __future__ import annotations

import logging
from pathlib import Path
from time import monotonic_ns
from typing import Any, Callable, Dict, List, Optional, Union

from core.events import EngineState, LibraryState, Recording, RecordingSummary
from core.integration import BusIntegration, ShowContext
from core.ports import Bus, KeyValueStore, NullBus, ParameterRegistry, TimerService
from core.timing import AsyncioTimerService, Clock
from data_collection.capture_session import CaptureLimits, CaptureSession
from library.recording_library import RecordingLibrary
from playback.scheduler import PlaybackScheduler, PlaybackSession
from sdk import events as topics
from sdk.config import GestureConfig
from sdk.ids import new_take_id

logger = logging.getLogger(__name__)

READY = "Ready"


class GestureEngine:
    """Record, store and replay control gestures.

    The engine is always in exactly one :class:`EngineState`.  Starting a
    capture stops any playback and starting a playback discards any
    in-progress capture, so the two sessions never coexist.

    Usage::

        engine = GestureEngine(bus=bus, store=store, parameters=registry)
        engine.start_recording()
        bus.emit("touchpad:update", {"parameter": "rot4dXW", "normalized": 0.4})
        take = engine.stop_recording()
        engine.play(take.id)
    """

    def __init__(
        self,
        *,
        bus: Optional[Bus] = None,
        store: Optional[KeyValueStore] = None,
        parameters: Optional[ParameterRegistry] = None,
        timers: Optional[TimerService] = None,
        config: Optional[GestureConfig] = None,
        clock: Clock = monotonic_ns,
        id_factory: Callable[[], str] = new_take_id,
        on_status_change: Optional[Callable[[str], None]] = None,
        bind: bool = True,
    ) -> None:
        self.config = config or GestureConfig()
        self.bus: Bus = bus or NullBus()
        self.clock = clock
        self.id_factory = id_factory
        self.on_status_change = on_status_change
        self.limits = CaptureLimits.resolve(self.config.max_duration_ms, self.config.max_events)

        self.state = EngineState.IDLE
        self.status_message = READY
        self.show = ShowContext()
        self._capture: Optional[CaptureSession] = None

        self.library = RecordingLibrary(
            store,
            storage_key=self.config.storage_key,
            bus=self.bus,
            id_factory=id_factory,
            name_prefix=self.config.auto_name_prefix,
        )
        self.playback = PlaybackScheduler(
            timers or AsyncioTimerService(),
            bus=self.bus,
            parameters=parameters,
            clock=clock,
            completion_padding_ms=self.config.completion_padding_ms,
            on_finished=self._on_playback_finished,
        )
        self.integration = BusIntegration(self, self.bus, self.config.capture_events)
        if bind:
            self.integration.bind()
        self.library.publish_summaries()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def is_recording(self) -> bool:
        return self.state is EngineState.RECORDING

    @property
    def is_playing(self) -> bool:
        return self.state is EngineState.PLAYING

    @property
    def capture_session(self) -> Optional[CaptureSession]:
        return self._capture

    @property
    def recordings(self) -> List[Recording]:
        return self.library.recordings

    @property
    def selected_id(self) -> Optional[str]:
        return self.library.selected_id

    def set_status(self, message: Optional[str] = None) -> None:
        self.status_message = message or (READY if self.state is EngineState.IDLE else self.status_message)
        if message and self.on_status_change:
            self.on_status_change(message)

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------
    def start_recording(self) -> bool:
        if self.state is EngineState.RECORDING:
            logger.debug("Recording already active; start refused")
            return False
        if self.state is EngineState.PLAYING:
            self.playback.stop()

        name = self.library.next_name()
        self._capture = CaptureSession(self.id_factory(), name, limits=self.limits, clock=self.clock)
        self.state = EngineState.RECORDING
        logger.info("Recording %s (%s)", name, self._capture.id)
        self.set_status(f"Recording {name}")
        self.bus.emit(topics.RECORDING_START, topics.payload(topics.TakeRef(id=self._capture.id, name=name)))
        return True

    def capture_event(self, event_type: str, payload: Any = None) -> bool:
        """Buffer one bus event; a no-op unless recording."""

        session = self._capture
        if self.state is not EngineState.RECORDING or session is None:
            return False
        reason = session.capture(event_type, payload)
        if reason:
            self.stop_recording(reason=reason)
        return True

    def stop_recording(self, *, reason: str = "", discard: bool = False) -> Optional[Recording]:
        """Finalize the capture; returns the saved take, if any."""

        session = self._capture
        if self.state is not EngineState.RECORDING or session is None:
            return None
        self._capture = None
        self.state = EngineState.IDLE
        recording = session.finalize()

        if discard or not recording.events:
            message = "Recording discarded" if discard else "Recording cancelled"
            logger.info("%s: %s", message, session.name)
            self.set_status(message)
            return None

        self.library.add(recording)
        logger.info(
            "Saved %s: %d events over %.0f ms%s",
            recording.name,
            recording.event_count,
            recording.duration,
            f" ({reason})" if reason else "",
        )
        self.set_status(f"Recording saved ({reason})" if reason else f"Saved {recording.name}")
        self.bus.emit(topics.RECORDING_STOP, topics.payload(topics.TakeRef(id=recording.id, name=recording.name)))
        return recording

    def toggle_recording(self) -> bool:
        if self.is_recording:
            self.stop_recording()
            return False
        return self.start_recording()

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------
    def play(self, recording_id: Optional[str]) -> bool:
        recording = self.library.get(recording_id)
        if recording is None or not recording.events:
            logger.debug("Playback of %r refused", recording_id)
            return False
        self.playback.stop()
        if self.is_recording:
            self.stop_recording(discard=True)

        self.state = EngineState.PLAYING
        self.set_status(f"Playing {recording.name}")
        if not self.playback.play(recording):  # pragma: no cover - validated above
            self.state = EngineState.IDLE
            return False
        return True

    def stop_playback(self) -> bool:
        return self.playback.stop()

    def toggle_playback(self) -> bool:
        if self.is_playing:
            self.stop_playback()
            return False
        return self.play(self.library.selected_id)

    def stop(self) -> None:
        """Stop whatever is active: save the capture or halt playback."""

        if self.is_recording:
            self.stop_recording()
        elif self.is_playing:
            self.stop_playback()

    def handle_cue_trigger(self, gesture_id: Optional[str]) -> bool:
        """Play the take a cue references; unknown ids are ignored."""

        if not gesture_id:
            return False
        if gesture_id not in self.library:
            logger.debug("Cue references unknown gesture %r", gesture_id)
            return False
        return self.play(gesture_id)

    def _on_playback_finished(self, session: PlaybackSession, completed: bool) -> None:
        if self.state is EngineState.PLAYING:
            self.state = EngineState.IDLE
        self.set_status("Playback finished" if completed else "Playback stopped")

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------
    def summaries(self) -> List[RecordingSummary]:
        return self.library.summaries()

    def select(self, recording_id: str) -> bool:
        if not self.library.select(recording_id):
            return False
        self.set_status(f"Selected {self.library.selected.name}")
        return True

    def rename(self, recording_id: str, name: str) -> bool:
        if not self.library.rename(recording_id, name):
            return False
        self.set_status(f"Renamed to {self.library.get(recording_id).name}")
        return True

    def duplicate(self, recording_id: str) -> Optional[Recording]:
        source = self.library.get(recording_id)
        copy = self.library.duplicate(recording_id)
        if copy is not None:
            self.set_status(f"Duplicated {source.name}")
        return copy

    def delete(self, recording_id: str) -> Optional[Recording]:
        if self.playback.active_id == recording_id:
            self.playback.stop()
        removed = self.library.delete(recording_id)
        if removed is not None:
            self.set_status(f"Deleted {removed.name}")
        return removed

    def clear(self) -> bool:
        if not self.library.clear():
            return False
        self.playback.stop()
        self.set_status("Cleared gesture library")
        return True

    def export_document(self) -> Optional[Dict[str, Any]]:
        return self.library.export_document()

    def export_to_path(self, path: Union[str, Path]) -> Optional[Path]:
        return self.library.export_to_path(path)

    def import_document(self, document: Any) -> bool:
        ok = self.library.import_document(document)
        self.set_status("Imported gestures" if ok else "Failed to import gestures")
        return ok

    def import_text(self, text: Union[str, bytes]) -> bool:
        ok = self.library.import_text(text)
        self.set_status("Imported gestures" if ok else "Failed to import gestures")
        return ok

    def import_path(self, path: Union[str, Path]) -> bool:
        ok = self.library.import_path(path)
        self.set_status("Imported gestures" if ok else "Failed to import gestures")
        return ok

    def get_state(self) -> LibraryState:
        return self.library.get_state()

    def apply_state(self, state: Any) -> None:
        self.playback.stop()
        self.stop_recording(discard=True)
        self.library.apply_state(state)
        self.set_status("Gestures loaded")

    def destroy(self) -> None:
        self.playback.stop()
        self.stop_recording(discard=True)
        self.integration.unbind()


__all__ = ["GestureEngine", "READY"]
