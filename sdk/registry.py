
from __future__ import annotations
from importlib import import_module
from typing import Any, Mapping

class PluginError(LookupError):
    """A plugin target could not be imported or resolved."""

class Registry:
    """Map plugin keys (``"store"``, ``"parameters"``) to ``module:attr`` targets."""
    def __init__(self, plugins: Mapping[str, str] | None = None):
        self._map: dict[str, str] = dict(plugins or {})
    def register(self, key: str, target: str) -> None:
        self._map[key] = target
    def update(self, plugins: Mapping[str, str]) -> None:
        self._map.update(plugins)
    def defaults(self, plugins: Mapping[str, str]) -> None:
        for key, target in plugins.items():
            self._map.setdefault(key, target)
    def target(self, key: str) -> str:
        return self._map.get(key, key)
    def resolve(self, key: str) -> Any:
        target = self.target(key)
        mod_path, _, obj = target.partition(":")
        try:
            mod = import_module(mod_path)
            return getattr(mod, obj) if obj else mod
        except (ImportError, AttributeError) as exc:
            raise PluginError(f"Cannot load plugin {key!r} from {target!r}") from exc
    def create(self, key: str, *args, **kwargs):
        return self.resolve(key)(*args, **kwargs)

REGISTRY = Registry()
