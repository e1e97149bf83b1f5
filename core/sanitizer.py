"""Defensive normalisation of captured, persisted and imported gesture data.

Nothing in here raises on bad input.  Malformed events are dropped, missing
fields fall back to defaults and a corrupt library degrades to whatever
entries could be salvaged.
"""

from __future__ import annotations

import copy
import logging
import math
import numbers
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from core.events import GestureEvent, Recording, now_ts_ms

logger = logging.getLogger(__name__)

DEFAULT_EVENT_TYPE = "custom"
DEFAULT_NAME_PREFIX = "Take"


def is_number(value: Any) -> bool:
    """``True`` for finite real numbers, excluding booleans."""

    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def sanitize_event(event: Any) -> Optional[GestureEvent]:
    if isinstance(event, GestureEvent):
        return event
    if not isinstance(event, dict):
        return None

    raw_time = event.get("time")
    time_ms = float(raw_time) if is_number(raw_time) and raw_time >= 0 else 0.0
    event_type = event.get("type") if isinstance(event.get("type"), str) else DEFAULT_EVENT_TYPE
    payload = event.get("payload")
    payload = copy.deepcopy(payload) if isinstance(payload, dict) else {}

    # legacy takes stored the normalized value beside the payload
    normalized = event.get("normalized")
    if is_number(normalized) and not is_number(payload.get("normalized")):
        payload["normalized"] = normalized

    return GestureEvent(time=time_ms, type=event_type, payload=payload)


def sanitize_events(events: Any) -> List[GestureEvent]:
    """Sanitize ``events`` and sort them by time.

    The sort is stable so events sharing an offset keep their capture order.
    """

    if not isinstance(events, (list, tuple)):
        return []
    cleaned = [item for item in (sanitize_event(event) for event in events) if item is not None]
    cleaned.sort(key=lambda item: item.time)
    return cleaned


def _dedupe(values: Iterable[Any]) -> List[str]:
    seen: Dict[str, None] = {}
    for value in values:
        if isinstance(value, str) and value:
            seen.setdefault(value, None)
    return list(seen)


def normalize_recording(
    record: Any,
    index: int = 0,
    *,
    id_factory: Callable[[], str],
    name_prefix: str = DEFAULT_NAME_PREFIX,
) -> Optional[Recording]:
    """Coerce one persisted/imported entry into a :class:`Recording`.

    Returns ``None`` when ``record`` is not a mapping at all.
    """

    if isinstance(record, Recording):
        record = record.to_dict()
    if not isinstance(record, dict):
        return None

    record_id = record.get("id") if isinstance(record.get("id"), str) and record.get("id") else id_factory()
    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        name = f"{name_prefix} {index + 1}"

    events = sanitize_events(record.get("events"))
    last_time = events[-1].time if events else 0.0
    duration = record.get("duration")
    duration = float(duration) if is_number(duration) and duration > 0 else last_time
    duration = max(duration, last_time)

    created_at = record.get("createdAt")
    created_at = int(created_at) if is_number(created_at) else now_ts_ms()
    updated_at = record.get("updatedAt")
    updated_at = int(updated_at) if is_number(updated_at) else created_at

    sources = record.get("sources")
    if isinstance(sources, (list, tuple)):
        sources = _dedupe(sources)
    else:
        sources = _dedupe(event.type for event in events)

    try:
        return Recording(
            id=record_id,
            name=name,
            duration=duration,
            events=events,
            created_at=created_at,
            updated_at=updated_at,
            sources=sources,
        )
    except ValidationError as exc:  # pragma: no cover - inputs are pre-coerced
        logger.warning("Dropping unreadable recording %r: %s", record_id, exc)
        return None


def extract_recording_list(document: Any) -> List[Any]:
    """Return the raw recordings list from an import/persisted document.

    Accepts ``{"gestures": [...]}``, ``{"recordings": [...]}`` or a bare list.
    """

    if isinstance(document, list):
        return document
    if isinstance(document, dict):
        for key in ("gestures", "recordings"):
            if isinstance(document.get(key), list):
                return document[key]
    return []


def normalize_recordings(
    entries: Iterable[Any],
    *,
    id_factory: Callable[[], str],
    name_prefix: str = DEFAULT_NAME_PREFIX,
) -> List[Recording]:
    recordings: List[Recording] = []
    seen_ids: set[str] = set()
    for index, entry in enumerate(entries):
        recording = normalize_recording(entry, index, id_factory=id_factory, name_prefix=name_prefix)
        if recording is None:
            continue
        if recording.id in seen_ids:
            recording = recording.model_copy(update={"id": id_factory()})
        seen_ids.add(recording.id)
        recordings.append(recording)
    return recordings


def normalize_library_state(
    raw: Any,
    *,
    id_factory: Callable[[], str],
    name_prefix: str = DEFAULT_NAME_PREFIX,
) -> Tuple[List[Recording], Optional[str]]:
    """Turn a persisted library payload into ``(recordings, selected_id)``.

    A ``selectedId`` that no longer references an entry re-resolves to the
    front entry (or ``None`` for an empty library).
    """

    recordings = normalize_recordings(
        extract_recording_list(raw), id_factory=id_factory, name_prefix=name_prefix
    )
    selected = raw.get("selectedId") if isinstance(raw, dict) else None
    ids = {recording.id for recording in recordings}
    if not isinstance(selected, str) or selected not in ids:
        selected = recordings[0].id if recordings else None
    return recordings, selected


__all__ = [
    "extract_recording_list",
    "is_number",
    "normalize_library_state",
    "normalize_recording",
    "normalize_recordings",
    "sanitize_event",
    "sanitize_events",
]
