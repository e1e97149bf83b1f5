"""Timed replay of a recorded take.

Each distinct event offset gets one deferred action measured from a common
origin, plus a completion action padded past the take's duration.  Events
sharing an offset are grouped into a single action and applied in capture
order, so same-time ordering never depends on the timer queue.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from itertools import groupby
from time import monotonic_ns
from typing import Callable, List, Optional, Tuple

from core.events import GestureEvent, Recording
from core.ports import Bus, NullBus, NullParameterRegistry, ParameterRegistry, TimerHandle, TimerService
from core.timing import Clock, SessionTimer
from playback.resolver import resolve_value
from sdk import events as topics

logger = logging.getLogger(__name__)

PLAYBACK_SOURCE = "gesture"
DEFAULT_COMPLETION_PADDING_MS = 16.0


@dataclass
class PlaybackSession:
    """Bookkeeping for the take currently being replayed."""

    recording_id: str
    name: str
    timer: SessionTimer
    handles: List[TimerHandle] = field(default_factory=list)
    active: bool = True
    fired_events: int = 0


class PlaybackScheduler:
    """Replay one take at a time on an injected timer service.

    ``on_finished(session, completed)`` is invoked before the stop/complete
    notification goes out so owners can settle their own state first.
    """

    def __init__(
        self,
        timers: TimerService,
        *,
        bus: Optional[Bus] = None,
        parameters: Optional[ParameterRegistry] = None,
        clock: Clock = monotonic_ns,
        completion_padding_ms: float = DEFAULT_COMPLETION_PADDING_MS,
        on_finished: Optional[Callable[[PlaybackSession, bool], None]] = None,
    ) -> None:
        self.timers = timers
        self.bus: Bus = bus or NullBus()
        self.parameters: ParameterRegistry = parameters or NullParameterRegistry()
        self.clock = clock
        self.completion_padding_ms = completion_padding_ms
        self.on_finished = on_finished
        self._session: Optional[PlaybackSession] = None

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    @property
    def is_playing(self) -> bool:
        return self._session is not None

    @property
    def active_id(self) -> Optional[str]:
        return self._session.recording_id if self._session else None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def play(self, recording: Optional[Recording]) -> bool:
        """Start replaying ``recording``; refused for missing or empty takes."""

        if recording is None or not recording.events:
            logger.debug("Playback refused: %s", "missing take" if recording is None else "empty take")
            return False

        self.stop()

        timer = SessionTimer(clock=self.clock)
        session = PlaybackSession(recording_id=recording.id, name=recording.name, timer=timer)
        self._session = session
        timer.start()

        for offset, group in groupby(recording.events, key=lambda event: event.time):
            action = partial(self._fire, session, recording, tuple(group))
            session.handles.append(self.timers.call_later(max(0.0, offset), action))

        padding = self.completion_padding_ms
        finish_at = max(padding, recording.duration + padding)
        session.handles.append(self.timers.call_later(finish_at, partial(self._complete, session)))

        logger.info("Playing %s (%d events, %.0f ms)", recording.name, recording.event_count, recording.duration)
        self.bus.emit(topics.PLAYBACK_START, topics.payload(topics.TakeRef(id=recording.id, name=recording.name)))
        return True

    def stop(self) -> bool:
        """Cancel every pending action of the active playback."""

        session = self._session
        if session is None:
            return False
        self._end(session)
        for handle in session.handles:
            handle.cancel()
        session.handles.clear()
        logger.info("Playback of %s stopped after %d events", session.name, session.fired_events)
        if self.on_finished:
            self.on_finished(session, False)
        self.bus.emit(topics.PLAYBACK_STOP, topics.payload(topics.PlaybackRef(id=session.recording_id)))
        return True

    def _end(self, session: PlaybackSession) -> None:
        session.active = False
        if session.timer.running:
            session.timer.stop()
        if self._session is session:
            self._session = None

    # ------------------------------------------------------------------
    # Deferred actions
    # ------------------------------------------------------------------
    def _fire(self, session: PlaybackSession, recording: Recording, events: Tuple[GestureEvent, ...]) -> None:
        for event in events:
            # a playback-event listener may stop playback mid-group
            if not session.active:
                return
            self.apply_event(recording, event)
            session.fired_events += 1

    def _complete(self, session: PlaybackSession) -> None:
        if not session.active:
            return
        self._end(session)
        session.handles.clear()
        logger.info("Playback of %s finished in %.1f ms", session.name, session.timer.elapsed_ms)
        if self.on_finished:
            self.on_finished(session, True)
        self.bus.emit(topics.PLAYBACK_COMPLETE, topics.payload(topics.PlaybackRef(id=session.recording_id)))

    def apply_event(self, recording: Recording, event: GestureEvent) -> Optional[float]:
        """Write the event's resolved value and publish it as a playback event."""

        payload = event.to_dict()["payload"]
        parameter_id = payload.get("parameter")
        value = None
        if isinstance(parameter_id, str) and parameter_id:
            definition = self.parameters.get_parameter_definition(parameter_id)
            value = resolve_value(payload, definition)
            if value is not None:
                try:
                    self.parameters.set_parameter(parameter_id, value, PLAYBACK_SOURCE)
                except Exception:
                    logger.exception("Parameter write for %r failed during playback", parameter_id)
        else:
            value = resolve_value(payload, None)

        self.bus.emit(
            topics.PLAYBACK_EVENT,
            topics.payload(
                topics.PlaybackEvent(
                    recording_id=recording.id,
                    name=recording.name,
                    event={"type": event.type, "time": event.time, "payload": payload},
                )
            ),
        )
        return value


__all__ = ["DEFAULT_COMPLETION_PADDING_MS", "PLAYBACK_SOURCE", "PlaybackScheduler", "PlaybackSession"]
