"""In-process publish/subscribe bus."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from core.ports import Listener, Unsubscribe

logger = logging.getLogger(__name__)


class EventBus:
    """Synchronous topic bus.

    Listeners run in subscription order on the caller's thread.  A failing
    listener is logged and skipped so the remaining listeners still receive
    the notification.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}
        self._stats = {"published": 0, "listener_errors": 0}

    def on(self, topic: str, listener: Listener) -> Unsubscribe:
        if not callable(listener):
            return lambda: None
        listeners = self._listeners.setdefault(topic, [])
        if listener not in listeners:
            listeners.append(listener)
        return lambda: self.off(topic, listener)

    def off(self, topic: str, listener: Listener) -> None:
        listeners = self._listeners.get(topic)
        if not listeners:
            return
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            del self._listeners[topic]

    def emit(self, topic: str, payload: Any = None) -> None:
        self._stats["published"] += 1
        # snapshot: listeners may unsubscribe while being notified
        for listener in list(self._listeners.get(topic, ())):
            try:
                listener(payload)
            except Exception:
                self._stats["listener_errors"] += 1
                logger.exception("Bus listener for %r failed", topic)

    def listener_count(self, topic: str) -> int:
        return len(self._listeners.get(topic, ()))

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)


__all__ = ["EventBus"]
