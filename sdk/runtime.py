
from __future__ import annotations
from pathlib import Path
from typing import Any, Optional, Union

from .config import SDK_CONFIG, AppConfig, GestureConfig
from .registry import REGISTRY, Registry
from core.bus import EventBus
from core.engine import GestureEngine
from core.ports import Bus, KeyValueStore, ParameterRegistry, TimerService

def make_store(config: AppConfig = SDK_CONFIG, *, registry: Registry = REGISTRY, path: Union[str, Path, None] = None, key: str = "store") -> KeyValueStore:
    registry.defaults(config.plugins)
    return registry.create(key, path or config.paths.store_file)

def make_parameters(definitions: Union[str, Path, dict, None] = None, *, config: AppConfig = SDK_CONFIG, registry: Registry = REGISTRY) -> ParameterRegistry:
    registry.defaults(config.plugins)
    cls = registry.resolve("parameters")
    if isinstance(definitions, (str, Path)):
        return cls.from_path(definitions)
    return cls(definitions or {})

def build_engine(
    config: Optional[AppConfig] = None,
    *,
    bus: Optional[Bus] = None,
    store: Optional[KeyValueStore] = None,
    parameters: Optional[ParameterRegistry] = None,
    timers: Optional[TimerService] = None,
    gestures: Optional[GestureConfig] = None,
    **engine_kwargs: Any,
) -> GestureEngine:
    """Wire a :class:`GestureEngine` from configuration and plugins.

    Anything passed explicitly wins over what the plugin map would build.
    """
    config = config or SDK_CONFIG
    config.paths.ensure()
    return GestureEngine(
        bus=bus or EventBus(),
        store=store if store is not None else make_store(config),
        parameters=parameters if parameters is not None else make_parameters(config=config),
        timers=timers,
        config=gestures or config.gestures,
        **engine_kwargs,
    )
