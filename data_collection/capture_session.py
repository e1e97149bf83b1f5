"""Capture buffer for one in-progress take."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import monotonic_ns
from typing import Any, Dict, List, Optional

from core.events import GestureEvent, Recording, now_ts_ms
from core.sanitizer import is_number, sanitize_events
from core.timing import Clock, SessionTimer

logger = logging.getLogger(__name__)

DEFAULT_MAX_DURATION_MS = 120_000.0
DEFAULT_MAX_EVENTS = 2200

REASON_DURATION_LIMIT = "duration limit reached"
REASON_EVENT_LIMIT = "event limit reached"


@dataclass(frozen=True)
class CaptureLimits:
    """Caps bounding a capture session that nobody remembers to stop."""

    max_duration_ms: float = DEFAULT_MAX_DURATION_MS
    max_events: int = DEFAULT_MAX_EVENTS

    @classmethod
    def resolve(cls, max_duration_ms: Any = None, max_events: Any = None) -> "CaptureLimits":
        """Build limits, replacing missing or non-positive values by defaults."""

        duration = float(max_duration_ms) if is_number(max_duration_ms) and max_duration_ms > 0 else DEFAULT_MAX_DURATION_MS
        count = int(max_events) if is_number(max_events) and max_events > 0 else DEFAULT_MAX_EVENTS
        return cls(max_duration_ms=duration, max_events=count)


class CaptureSession:
    """Accumulate timestamped events between record start and stop.

    The session owns its buffer until :meth:`finalize` hands a
    :class:`Recording` over to the library.
    """

    def __init__(
        self,
        session_id: str,
        name: str,
        *,
        limits: Optional[CaptureLimits] = None,
        clock: Clock = monotonic_ns,
    ) -> None:
        self.id = session_id
        self.name = name
        self.limits = limits or CaptureLimits()
        self.created_at = now_ts_ms()
        self.events: List[GestureEvent] = []
        self.duration = 0.0
        self._sources: Dict[str, None] = {}

        self.timer = SessionTimer(clock=clock)
        self.timer.start()

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def sources(self) -> List[str]:
        return list(self._sources)

    @property
    def elapsed_ms(self) -> float:
        return self.timer.elapsed_ms

    def capture(self, event_type: str, payload: Any = None) -> Optional[str]:
        """Append one event.

        Returns the auto-finalize reason when a cap has been reached, ``None``
        otherwise.  Past the duration cap a single boundary event is kept,
        clamped to the cap.
        """

        payload = payload if isinstance(payload, dict) else {}
        elapsed = self.timer.elapsed_ms
        max_duration = self.limits.max_duration_ms

        if elapsed > max_duration:
            self._append(max_duration, event_type, payload)
            self.duration = max_duration
            logger.info("Capture %s hit the %.0f ms duration cap", self.id, max_duration)
            return REASON_DURATION_LIMIT

        self._append(elapsed, event_type, payload)
        self.duration = elapsed

        if len(self.events) >= self.limits.max_events:
            logger.info("Capture %s hit the %d event cap", self.id, self.limits.max_events)
            return REASON_EVENT_LIMIT
        return None

    def _append(self, time_ms: float, event_type: str, payload: Dict[str, Any]) -> None:
        if not isinstance(event_type, str) or not event_type:
            event_type = "custom"
        self.events.append(GestureEvent(time=time_ms, type=event_type, payload=payload))
        self._sources.setdefault(event_type, None)

    def finalize(self) -> Recording:
        """Close the buffer and build the take."""

        elapsed = min(self.timer.elapsed_ms, self.limits.max_duration_ms)
        if self.timer.running:
            self.timer.stop()

        events = sanitize_events(self.events)
        duration = max(self.duration, elapsed)
        if len(events) > self.limits.max_events:
            events = events[: self.limits.max_events]
            duration = events[-1].time
        if events:
            duration = max(duration, events[-1].time)

        now = now_ts_ms()
        return Recording(
            id=self.id,
            name=self.name,
            duration=duration,
            events=events,
            created_at=self.created_at,
            updated_at=now,
            sources=self.sources,
        )


__all__ = [
    "CaptureLimits",
    "CaptureSession",
    "DEFAULT_MAX_DURATION_MS",
    "DEFAULT_MAX_EVENTS",
    "REASON_DURATION_LIMIT",
    "REASON_EVENT_LIMIT",
]
