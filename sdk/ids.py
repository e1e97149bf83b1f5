from __future__ import annotations
import ulid
TAKE_PREFIX = "take"
def new_ulid() -> str: return str(ulid.new())
def new_take_id(prefix: str = TAKE_PREFIX) -> str: return f"{prefix}-{new_ulid().lower()}"
