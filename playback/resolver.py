"""Turn a replayed payload into a concrete parameter value."""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from core.ports import ParameterDefinition
from core.sanitizer import is_number


def resolve_value(payload: Mapping[str, Any], definition: Optional[ParameterDefinition]) -> Optional[float]:
    """Resolve ``payload`` against the target parameter's definition.

    An absolute ``value`` wins.  A ``normalized`` fraction is clamped to
    ``[0, 1]`` and mapped through ``[min, max]``, rounded for integer
    parameters; without a definition the raw fraction is returned.  Anything
    else resolves to ``None``.
    """

    value = payload.get("value")
    if is_number(value):
        return value

    normalized = payload.get("normalized")
    if not is_number(normalized):
        return None
    if definition is None:
        return normalized

    clamped = max(0.0, min(1.0, float(normalized)))
    mapped = definition.min + (definition.max - definition.min) * clamped
    if definition.type == "int":
        return math.floor(mapped + 0.5)
    return mapped


__all__ = ["resolve_value"]
