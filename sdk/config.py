
from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from pathlib import Path
from typing import Any, List
import os

from .events import DEFAULT_CAPTURE_EVENTS

ENV_PREFIX = "GESTUREDECK_"

class Paths(BaseModel):
    data_root: Path = Field(default_factory=lambda: Path(os.getenv('GESTUREDECK_DATA_ROOT', 'data')))
    logs_root: Path = Field(default_factory=lambda: Path(os.getenv('GESTUREDECK_LOGS_ROOT', 'logs')))

    @property
    def store_file(self) -> Path:
        return self.data_root / "gesturedeck-store.json"

    @property
    def exports_root(self) -> Path:
        return self.data_root / "exports"

    def ensure(self) -> None:
        self.data_root.mkdir(parents=True, exist_ok=True)
        self.exports_root.mkdir(parents=True, exist_ok=True)
        self.logs_root.mkdir(parents=True, exist_ok=True)

class GestureConfig(BaseModel):
    """Recorder settings; caps <= 0 fall back to the built-in defaults."""
    capture_events: List[str] = Field(default_factory=lambda: list(DEFAULT_CAPTURE_EVENTS))
    max_duration_ms: float = 120_000
    max_events: int = 2200
    auto_name_prefix: str = "Take"
    storage_key: str = "vib34d-gesture-library"
    completion_padding_ms: float = 16.0

    @field_validator("capture_events", mode="before")
    @classmethod
    def _split_events(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [part.strip() for part in value.split(",")]
        if isinstance(value, (list, tuple)):
            value = [v for v in value if isinstance(v, str) and v]
            return value or list(DEFAULT_CAPTURE_EVENTS)
        return value

    @classmethod
    def from_env(cls, **overrides: Any) -> "GestureConfig":
        values: dict = {}
        for field_name, env in (
            ("max_duration_ms", "MAX_DURATION_MS"),
            ("max_events", "MAX_EVENTS"),
            ("storage_key", "STORAGE_KEY"),
            ("capture_events", "CAPTURE_EVENTS"),
            ("auto_name_prefix", "NAME_PREFIX"),
        ):
            raw = os.getenv(ENV_PREFIX + env)
            if raw:
                values[field_name] = raw
        values.update(overrides)
        return cls(**values)

class AppConfig(BaseModel):
    paths: Paths = Field(default_factory=Paths)
    gestures: GestureConfig = Field(default_factory=GestureConfig.from_env)
    log_level: str = Field(default_factory=lambda: os.getenv('GESTUREDECK_LOG_LEVEL', 'INFO'))
    plugins: dict = Field(default_factory=lambda: {
        "store": "plugins.stores.json_file.impl:JsonFileStore",
        "store.memory": "plugins.stores.memory.impl:MemoryStore",
        "parameters": "plugins.parameters.static.impl:StaticParameterRegistry",
    })

SDK_CONFIG = AppConfig()
