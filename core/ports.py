"""Interfaces to the collaborators a gesture engine is wired to.

Every collaborator is injected.  Optional ones are resolved once, at
construction, to a null implementation so call sites never probe for them.
"""

from __future__ import annotations

from typing import Any, Callable, Literal, Optional, Protocol

from pydantic import BaseModel, ConfigDict

Listener = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class Bus(Protocol):
    """Publish/subscribe channel shared with producers and listeners."""

    def on(self, topic: str, listener: Listener) -> Unsubscribe: ...

    def emit(self, topic: str, payload: Any = None) -> None: ...


class KeyValueStore(Protocol):
    """Durable string store; one key per engine instance."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class ParameterDefinition(BaseModel):
    """Registered range of a target parameter."""

    model_config = ConfigDict(extra="ignore")

    min: float = 0.0
    max: float = 1.0
    type: Literal["float", "int"] = "float"


class ParameterRegistry(Protocol):
    def get_parameter_definition(self, parameter_id: str) -> Optional[ParameterDefinition]: ...

    def set_parameter(self, parameter_id: str, value: float, source: str) -> Any: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerService(Protocol):
    """One-shot deferred actions on the engine's event loop."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


class NullParameterRegistry:
    """Registry used when the engine has no parameter collaborator."""

    def get_parameter_definition(self, parameter_id: str) -> Optional[ParameterDefinition]:
        return None

    def set_parameter(self, parameter_id: str, value: float, source: str) -> bool:
        return False


class NullBus:
    """Bus used when nothing listens to the engine."""

    def on(self, topic: str, listener: Listener) -> Unsubscribe:
        return lambda: None

    def emit(self, topic: str, payload: Any = None) -> None:
        return None


__all__ = [
    "Bus",
    "KeyValueStore",
    "Listener",
    "NullBus",
    "NullParameterRegistry",
    "ParameterDefinition",
    "ParameterRegistry",
    "TimerHandle",
    "TimerService",
    "Unsubscribe",
]
