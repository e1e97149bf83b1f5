
from __future__ import annotations
from pathlib import Path
from typing import Dict, Optional, Union
class MemoryStore:
    """Volatile key-value store; state lives as long as the process.

    ``path`` is accepted so the store can stand in for file-backed plugins.
    """
    def __init__(self, path: Union[str, Path, None] = None, initial: Optional[Dict[str, str]] = None):
        self.path = path; self.data: Dict[str, str] = dict(initial or {})
    def get(self, key: str) -> Optional[str]: return self.data.get(key)
    def set(self, key: str, value: str) -> None: self.data[key] = value
    def delete(self, key: str) -> None: self.data.pop(key, None)
