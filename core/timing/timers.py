"""Timer services backing playback scheduling."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class AsyncioTimerService:
    """Schedule one-shot callbacks on an asyncio event loop.

    The loop is resolved lazily so the service can be built before the loop
    starts; once resolved it is reused for every call.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        if delay_ms < 0:
            raise ValueError(f"Timer delay cannot be negative: {delay_ms}")
        logger.debug("Scheduling callback in %.1f ms", delay_ms)
        return self.loop.call_later(delay_ms / 1000.0, callback)


__all__ = ["AsyncioTimerService"]
