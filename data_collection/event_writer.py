from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import IO, Any, Dict, Iterator, Union
from threading import Lock

logger = logging.getLogger(__name__)


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


class JsonlWriter:
    """
    Minimal JSONL writer with periodic flush, used for playback event logs.
    Not thread-safe across processes, but thread-safe within a process.
    """
    def __init__(self, out_path: Union[str, Path], flush_every: int = 50):
        out_path = Path(out_path)
        ensure_dir(out_path.parent)
        self._f: IO[str] = out_path.open("a", encoding="utf-8")
        self._n = 0
        self._flush_every = flush_every
        self._lock = Lock()

    @property
    def count(self) -> int:
        return self._n

    def write(self, obj: Any) -> None:
        line = json.dumps(obj, ensure_ascii=False)
        with self._lock:
            self._f.write(line + "\n")
            self._n += 1
            if self._n % self._flush_every == 0:
                self._f.flush()

    def close(self) -> None:
        with self._lock:
            if self._f.closed:
                return
            try:
                self._f.flush()
            finally:
                self._f.close()

    def __enter__(self) -> "JsonlWriter":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def iter_jsonl(path: Union[str, Path]) -> Iterator[Dict[str, Any]]:
    """Yield the JSON objects of a JSONL file; blank and unreadable lines are skipped."""
    with Path(path).open("r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, 1):
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except ValueError:
                logger.warning("Skipping unreadable line %d of %s", lineno, path)
                continue
            if isinstance(obj, dict):
                yield obj
