
from dataclasses import dataclass, field
from time import monotonic_ns
from typing import Callable

NS_PER_MS = 1_000_000

Clock = Callable[[], int]


@dataclass
class SessionTimer:
    """Elapsed-time tracker for a capture or playback session.

    ``clock`` returns monotonic nanoseconds; tests swap in a manual clock.
    """

    clock: Clock = monotonic_ns
    started_ns: int = 0
    stopped_ns: int = 0
    running: bool = False
    started: bool = False
    laps_ms: list[float] = field(default_factory=list)
    _last: int = 0

    def start(self):
        now = self.clock()
        self.started_ns = now
        self._last = now
        self.stopped_ns = 0
        self.laps_ms.clear()
        self.running = True
        self.started = True

    def lap(self) -> float:
        assert self.running
        now = self.clock()
        d = (now - self._last) / NS_PER_MS
        self.laps_ms.append(d)
        self._last = now
        return d

    def stop(self) -> float:
        assert self.running
        self.stopped_ns = self.clock()
        self.running = False
        return self.elapsed_ms

    @property
    def elapsed_ms(self) -> float:
        end = self.clock() if self.running else self.stopped_ns
        return 0.0 if not self.started else (end - self.started_ns) / NS_PER_MS
