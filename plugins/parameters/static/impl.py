
from __future__ import annotations
import json, logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from pydantic import ValidationError
from core.ports import ParameterDefinition

logger = logging.getLogger(__name__)

class StaticParameterRegistry:
    """Parameter registry over a fixed table of definitions.

    Writes are clamped to the parameter's range and kept in ``values``;
    ``writes`` keeps ``(parameter, value, source)`` for inspection.
    """
    def __init__(self, definitions: Optional[Dict[str, Any]] = None):
        self.definitions: Dict[str, ParameterDefinition] = {}
        self.values: Dict[str, float] = {}
        self.writes: List[Tuple[str, float, str]] = []
        for name, definition in (definitions or {}).items():
            self.define(name, definition)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "StaticParameterRegistry":
        return cls(json.loads(Path(path).read_text(encoding="utf-8")))

    def define(self, name: str, definition: Any) -> None:
        try:
            self.definitions[name] = definition if isinstance(definition, ParameterDefinition) else ParameterDefinition.model_validate(definition)
        except ValidationError as exc:
            logger.warning("Skipping parameter %r: %s", name, exc)

    def get_parameter_definition(self, parameter_id: str) -> Optional[ParameterDefinition]:
        return self.definitions.get(parameter_id)

    def set_parameter(self, parameter_id: str, value: float, source: str = "manual") -> bool:
        definition = self.definitions.get(parameter_id)
        if definition is None:
            logger.debug("Unknown parameter %r", parameter_id)
            return False
        clamped = max(definition.min, min(definition.max, value))
        if definition.type == "int":
            clamped = int(round(clamped))
        self.values[parameter_id] = clamped
        self.writes.append((parameter_id, clamped, source))
        return True
