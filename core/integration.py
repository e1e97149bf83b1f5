"""Bus wiring between a gesture engine and the rest of the show."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

from pydantic import ValidationError

from core.ports import Bus, Unsubscribe
from sdk import events as topics

if TYPE_CHECKING:  # pragma: no cover
    from core.engine import GestureEngine

logger = logging.getLogger(__name__)


@dataclass
class ShowContext:
    """Tempo and transport state announced by the cue sequencer."""

    tempo: Optional[float] = None
    beats_per_bar: Optional[float] = None
    running: bool = False

    def describe(self) -> str:
        if not self.tempo:
            return ""
        parts = [f"{round(self.tempo)} BPM"]
        if self.beats_per_bar:
            parts.append(f"{self.beats_per_bar:g} beats/bar")
        if self.running:
            parts.append("Show running")
        return f"({' • '.join(parts)})"


class BusIntegration:
    """Subscribe an engine to capture sources and sequencer lifecycle topics."""

    def __init__(self, engine: "GestureEngine", bus: Bus, capture_events: Iterable[str] = ()) -> None:
        self.engine = engine
        self.bus = bus
        events = [name for name in capture_events if isinstance(name, str) and name]
        self.capture_events: List[str] = events or list(topics.DEFAULT_CAPTURE_EVENTS)
        if topics.AUDIO_FLOURISH not in self.capture_events:
            self.capture_events.append(topics.AUDIO_FLOURISH)
        self._subscriptions: List[Unsubscribe] = []

    @property
    def bound(self) -> bool:
        return bool(self._subscriptions)

    def bind(self) -> None:
        if self._subscriptions:
            return
        for topic in self.capture_events:
            self._subscriptions.append(self.bus.on(topic, partial(self._on_capture, topic)))
        self._subscriptions.append(self.bus.on(topics.SHOW_START, self._on_show_start))
        self._subscriptions.append(self.bus.on(topics.SHOW_STOP, self._on_show_stop))
        self._subscriptions.append(self.bus.on(topics.SHOW_CUE_TRIGGER, self._on_cue_trigger))
        logger.debug("Bound gesture engine to %s", ", ".join(self.capture_events))

    def unbind(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for unsubscribe in subscriptions:
            try:
                unsubscribe()
            except Exception:
                logger.debug("Ignoring failed bus unsubscribe", exc_info=True)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    def _on_capture(self, topic: str, payload: Any) -> None:
        self.engine.capture_event(topic, payload)

    def _on_show_start(self, meta: Any) -> None:
        show = self.engine.show
        try:
            parsed = topics.ShowStart.model_validate(meta if isinstance(meta, dict) else {})
        except ValidationError:
            logger.debug("Ignoring unreadable show:start metadata %r", meta)
            parsed = topics.ShowStart()
        if parsed.tempo is not None:
            show.tempo = parsed.tempo
        if parsed.beats_per_bar is not None:
            show.beats_per_bar = parsed.beats_per_bar
        show.running = True

    def _on_show_stop(self, _payload: Any = None) -> None:
        self.engine.show.running = False

    def _on_cue_trigger(self, message: Any) -> None:
        cue = message.get("cue") if isinstance(message, dict) else None
        if not isinstance(cue, dict):
            return
        try:
            gesture_id = topics.Cue.model_validate(cue).gesture_id
        except ValidationError:
            return
        self.engine.handle_cue_trigger(gesture_id)


__all__ = ["BusIntegration", "ShowContext"]
