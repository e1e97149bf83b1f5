# tests/unit/test_bus.py
import logging

from core.bus import EventBus


def test_listeners_receive_in_subscription_order():
    bus = EventBus()
    seen = []
    bus.on("t", lambda p: seen.append(("a", p)))
    bus.on("t", lambda p: seen.append(("b", p)))
    bus.emit("t", 1)
    assert seen == [("a", 1), ("b", 1)]


def test_unsubscribe_and_off():
    bus = EventBus()
    seen = []
    listener = seen.append
    unsubscribe = bus.on("t", listener)
    assert bus.listener_count("t") == 1
    unsubscribe()
    bus.emit("t", 1)
    assert seen == []
    bus.off("t", listener)
    bus.off("unknown", listener)


def test_failing_listener_is_logged_and_skipped(caplog):
    bus = EventBus()
    seen = []

    def broken(_payload):
        raise RuntimeError("listener bug")

    bus.on("t", broken)
    bus.on("t", seen.append)
    with caplog.at_level(logging.ERROR, logger="core.bus"):
        bus.emit("t", "x")

    assert seen == ["x"]
    assert bus.stats == {"published": 1, "listener_errors": 1}
    assert "listener bug" in caplog.text


def test_listener_may_unsubscribe_during_emit():
    bus = EventBus()
    seen = []
    holder = {}

    def once(payload):
        seen.append(payload)
        holder["unsubscribe"]()

    holder["unsubscribe"] = bus.on("t", once)
    bus.emit("t", 1)
    bus.emit("t", 2)
    assert seen == [1]


def test_non_callable_listener_is_ignored():
    bus = EventBus()
    unsubscribe = bus.on("t", "not callable")
    assert bus.listener_count("t") == 0
    unsubscribe()
