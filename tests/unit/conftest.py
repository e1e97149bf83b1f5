# tests/unit/conftest.py
import heapq
import itertools

import pytest

from core.bus import EventBus
from core.engine import GestureEngine
from core.timing import NS_PER_MS
from plugins.parameters.static.impl import StaticParameterRegistry
from plugins.stores.memory.impl import MemoryStore
from sdk.config import GestureConfig


class ManualClock:
    """Monotonic nanosecond clock that only moves when told to."""

    def __init__(self):
        self.ns = 0

    def __call__(self):
        return self.ns

    @property
    def ms(self):
        return self.ns / NS_PER_MS

    def set_ms(self, ms):
        self.ns = int(ms * NS_PER_MS)

    def advance(self, ms):
        self.set_ms(self.ms + ms)


class ManualHandle:
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualTimers:
    """Timer service driven by ``advance(ms)``; due callbacks run in (time, scheduling) order."""

    def __init__(self, clock):
        self.clock = clock
        self._queue = []
        self._seq = itertools.count()
        self.delays = []

    def call_later(self, delay_ms, callback):
        if delay_ms < 0:
            raise ValueError("negative delay")
        handle = ManualHandle()
        self.delays.append(delay_ms)
        heapq.heappush(self._queue, (self.clock.ms + delay_ms, next(self._seq), handle, callback))
        return handle

    @property
    def pending(self):
        return sum(1 for _when, _seq, handle, _cb in self._queue if not handle.cancelled)

    def advance(self, ms):
        target = self.clock.ms + ms
        while self._queue and self._queue[0][0] <= target:
            when, _seq, handle, callback = heapq.heappop(self._queue)
            self.clock.set_ms(when)
            if not handle.cancelled:
                callback()
        self.clock.set_ms(target)

    def run_all(self):
        while self._queue:
            self.advance(max(0.0, self._queue[0][0] - self.clock.ms))


class BusSpy(EventBus):
    """Event bus that remembers everything published on it."""

    def __init__(self):
        super().__init__()
        self.emitted = []

    def emit(self, topic, payload=None):
        self.emitted.append((topic, payload))
        super().emit(topic, payload)

    def of(self, topic):
        return [payload for name, payload in self.emitted if name == topic]

    def topics(self):
        return [name for name, _payload in self.emitted]


PARAMETERS = {
    "rot4dXW": {"min": 0, "max": 10},
    "gridDensity": {"min": 0, "max": 9, "type": "int"},
    "hue": {"min": 0, "max": 360},
}


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def timers(clock):
    return ManualTimers(clock)


@pytest.fixture
def bus():
    return BusSpy()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def parameters():
    return StaticParameterRegistry(PARAMETERS)


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"take-{next(counter)}"


@pytest.fixture
def make_engine(bus, store, parameters, timers, clock, id_factory):
    def _make(**kwargs):
        options = dict(
            bus=bus,
            store=store,
            parameters=parameters,
            timers=timers,
            clock=clock,
            id_factory=id_factory,
            config=GestureConfig(),
        )
        options.update(kwargs)
        return GestureEngine(**options)
    return _make


@pytest.fixture
def engine(make_engine):
    eng = make_engine()
    yield eng
    eng.destroy()


def record_take(engine, clock, events):
    """Record ``events`` ((time_ms, type, payload) tuples) and return the saved take."""
    assert engine.start_recording()
    start = clock.ms
    for time_ms, event_type, payload in events:
        clock.set_ms(start + time_ms)
        engine.bus.emit(event_type, payload)
    return engine.stop_recording()
