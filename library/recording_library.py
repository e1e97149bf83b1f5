"""Named takes, their selection, persistence and import/export."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from core.events import GestureEvent, LibraryState, Recording, RecordingSummary, now_ts_ms
from core.ports import Bus, KeyValueStore, NullBus
from core.sanitizer import (
    extract_recording_list,
    normalize_library_state,
    normalize_recordings,
)
from sdk import events as topics
from sdk.ids import new_take_id

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "vib34d-gesture-library.json"
COPY_SUFFIX = " (copy)"


class RecordingLibrary:
    """Exclusive owner of the recorded takes.

    Entries are kept in an id-indexed dict in insertion order (oldest first);
    the public order is newest first.  Every mutation persists the full state
    and republishes the summary list on the bus.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        *,
        storage_key: str = "vib34d-gesture-library",
        bus: Optional[Bus] = None,
        id_factory: Callable[[], str] = new_take_id,
        name_prefix: str = "Take",
        autoload: bool = True,
    ) -> None:
        self.store = store
        self.storage_key = storage_key
        self.bus: Bus = bus or NullBus()
        self.id_factory = id_factory
        self.name_prefix = name_prefix

        self._entries: Dict[str, Recording] = {}
        self.selected_id: Optional[str] = None

        if autoload:
            self.load()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, recording_id: object) -> bool:
        return recording_id in self._entries

    def __iter__(self) -> Iterator[Recording]:
        return reversed(list(self._entries.values()))

    @property
    def recordings(self) -> List[Recording]:
        return list(self)

    @property
    def front(self) -> Optional[Recording]:
        if not self._entries:
            return None
        return self._entries[next(reversed(self._entries))]

    @property
    def selected(self) -> Optional[Recording]:
        return self._entries.get(self.selected_id) if self.selected_id else None

    def get(self, recording_id: Optional[str]) -> Optional[Recording]:
        if not recording_id:
            return None
        return self._entries.get(recording_id)

    def summaries(self) -> List[RecordingSummary]:
        return [recording.summary() for recording in self]

    def next_name(self) -> str:
        return f"{self.name_prefix} {len(self._entries) + 1}"

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add(self, recording: Recording) -> Recording:
        """Insert a finalized take at the front and select it."""

        self._entries.pop(recording.id, None)
        self._entries[recording.id] = recording
        self.selected_id = recording.id
        self._commit()
        return recording

    def select(self, recording_id: Optional[str]) -> bool:
        if recording_id not in self._entries:
            return False
        self.selected_id = recording_id
        self._commit()
        return True

    def rename(self, recording_id: str, name: Any) -> bool:
        recording = self.get(recording_id)
        if recording is None or not isinstance(name, str) or not name.strip():
            return False
        name = name.strip()
        if name == recording.name:
            return False
        self._entries[recording_id] = recording.model_copy(update={"name": name, "updated_at": now_ts_ms()})
        self._commit()
        return True

    def duplicate(self, recording_id: str) -> Optional[Recording]:
        source = self.get(recording_id)
        if source is None:
            return None
        now = now_ts_ms()
        copy = Recording(
            id=self.id_factory(),
            name=f"{source.name}{COPY_SUFFIX}",
            duration=source.duration,
            events=[GestureEvent(time=e.time, type=e.type, payload=e.payload) for e in source.events],
            created_at=now,
            updated_at=now,
            sources=list(source.sources),
        )
        return self.add(copy)

    def delete(self, recording_id: str) -> Optional[Recording]:
        removed = self._entries.pop(recording_id, None)
        if removed is None:
            return None
        if self.selected_id == recording_id:
            front = self.front
            self.selected_id = front.id if front else None
        self._commit()
        return removed

    def clear(self) -> bool:
        if not self._entries:
            return False
        self._entries.clear()
        self.selected_id = None
        self._commit()
        return True

    def replace(self, recordings: List[Recording], selected_id: Optional[str] = None) -> None:
        """Swap the whole library; ``recordings`` is newest first."""

        self._entries = {recording.id: recording for recording in reversed(recordings)}
        if selected_id not in self._entries:
            front = self.front
            selected_id = front.id if front else None
        self.selected_id = selected_id
        self._commit()

    # ------------------------------------------------------------------
    # State snapshots
    # ------------------------------------------------------------------
    def get_state(self) -> LibraryState:
        return LibraryState(recordings=self.recordings, selected_id=self.selected_id)

    def apply_state(self, state: Any) -> None:
        if isinstance(state, LibraryState):
            state = state.to_dict()
        recordings, selected = normalize_library_state(
            state, id_factory=self.id_factory, name_prefix=self.name_prefix
        )
        self.replace(recordings, selected)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------
    @property
    def can_export(self) -> bool:
        return bool(self._entries)

    def export_document(self) -> Optional[Dict[str, Any]]:
        """Return ``{"gestures": [...]}``, or ``None`` for an empty library."""

        if not self._entries:
            return None
        return {"gestures": [recording.to_dict() for recording in self]}

    def export_to_path(self, path: Union[str, Path]) -> Optional[Path]:
        document = self.export_document()
        if document is None:
            return None
        path = Path(path)
        if path.is_dir():
            path = path / EXPORT_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(document, fh, indent=2)
        logger.info("Exported %d gestures to %s", len(self._entries), path)
        return path

    def import_document(self, document: Any) -> bool:
        """Replace the library with the entries of ``document``.

        Accepts ``{"gestures": [...]}``, ``{"recordings": [...]}`` or a bare
        list.  Anything else is refused and leaves the library untouched.
        """

        if not isinstance(document, list) and not (
            isinstance(document, dict)
            and any(isinstance(document.get(key), list) for key in ("gestures", "recordings"))
        ):
            logger.warning("Refusing gesture import: no recordings list in document")
            return False
        recordings = normalize_recordings(
            extract_recording_list(document), id_factory=self.id_factory, name_prefix=self.name_prefix
        )
        self.replace(recordings)
        logger.info("Imported %d gestures", len(recordings))
        return True

    def import_text(self, text: Union[str, bytes]) -> bool:
        try:
            document = json.loads(text)
        except ValueError as exc:
            logger.warning("Failed to import gestures: %s", exc)
            return False
        return self.import_document(document)

    def import_path(self, path: Union[str, Path]) -> bool:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to read gesture import %s: %s", path, exc)
            return False
        return self.import_text(text)

    # ------------------------------------------------------------------
    # Persistence & notifications
    # ------------------------------------------------------------------
    def load(self) -> None:
        self._entries = {}
        self.selected_id = None
        if self.store is None:
            return
        try:
            raw = self.store.get(self.storage_key)
        except OSError as exc:
            logger.warning("Failed to read gesture library: %s", exc)
            return
        if not raw:
            return
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            logger.warning("Discarding corrupt gesture library: %s", exc)
            return
        recordings, selected = normalize_library_state(
            parsed, id_factory=self.id_factory, name_prefix=self.name_prefix
        )
        self._entries = {recording.id: recording for recording in reversed(recordings)}
        self.selected_id = selected
        logger.debug("Loaded %d gestures from %r", len(recordings), self.storage_key)

    def persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.set(self.storage_key, json.dumps(self.get_state().to_dict()))
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to persist gesture library: %s", exc)

    def publish_summaries(self) -> None:
        listing = topics.LibraryList(
            gestures=[summary.model_dump(by_alias=True) for summary in self.summaries()]
        )
        self.bus.emit(topics.LIBRARY_LIST, topics.payload(listing))

    def _commit(self) -> None:
        self.persist()
        self.publish_summaries()


__all__ = ["COPY_SUFFIX", "EXPORT_FILENAME", "RecordingLibrary"]
