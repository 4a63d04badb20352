"""ValueUpdated encoding, the listener bus and the bounded event log."""
from __future__ import annotations

import logging

import pytest

from guarded_store import EventBus, EventLog, StoreError, ValueUpdated


def test_value_updated_args_and_receipt():
    ev = ValueUpdated(old_value=1, new_value=2, updater=b"\xab\xcd")
    assert ev.name == b"ValueUpdated"
    assert ev.args() == {"old_value": 1, "new_value": 2, "updater": b"\xab\xcd"}
    assert ev.to_receipt() == {
        "name": "0x" + b"ValueUpdated".hex(),
        "args": [
            {"k": "old_value", "t": "i", "v": 1},
            {"k": "new_value", "t": "i", "v": 2},
            {"k": "updater", "t": "b", "v": "0xabcd"},
        ],
    }


def test_bus_delivers_in_registration_order():
    bus = EventBus()
    order = []
    bus.subscribe(lambda ev: order.append("a"))
    bus.subscribe(lambda ev: order.append("b"))
    assert bus.publish(ValueUpdated(0, 1, b"\x01")) == 2
    assert order == ["a", "b"]


def test_bus_counts_only_successful_deliveries(caplog):
    bus = EventBus()

    def bad(_ev):
        raise ValueError("nope")

    bus.subscribe(bad)
    bus.subscribe(lambda ev: None)
    with caplog.at_level(logging.WARNING, logger="guarded_store.events"):
        assert bus.publish(ValueUpdated(0, 1, b"\x01")) == 1
    assert caplog.records[-1].exc_info is not None


def test_bus_rejects_non_callable():
    with pytest.raises(TypeError):
        EventBus().subscribe("not-callable")  # type: ignore[arg-type]


def test_bus_listener_cap():
    bus = EventBus(max_listeners=1)
    bus.subscribe(lambda ev: None)
    with pytest.raises(StoreError) as excinfo:
        bus.subscribe(lambda ev: None)
    assert excinfo.value.code == "STORE:TOO_MANY_LISTENERS"


def test_unsubscribe_unknown_listener_is_noop():
    bus = EventBus()
    bus.unsubscribe(print)
    assert bus.listeners() == 0


def test_event_log_order_bound_and_total():
    log = EventLog(maxlen=2)
    for v in range(1, 4):
        log.append(ValueUpdated(v - 1, v, b"\x01"))
    assert len(log) == 2
    assert log.total == 3
    assert [e.new_value for e in log.snapshot()] == [2, 3]
    assert [r["args"][1]["v"] for r in log.for_receipt()] == [2, 3]


def test_same_callable_subscribed_twice_has_independent_handles():
    bus = EventBus()
    calls = []
    first = bus.subscribe(calls.append)
    second = bus.subscribe(calls.append)
    assert first.id != second.id

    second.unsubscribe()
    assert first.active
    assert not second.active
    assert bus.publish(ValueUpdated(0, 1, b"\x01")) == 1
    assert len(calls) == 1

    first.unsubscribe()
    assert not first.active
    assert bus.listeners() == 0


def test_unsubscribe_by_callable_removes_oldest_registration():
    bus = EventBus()
    cb = lambda ev: None  # noqa: E731
    first = bus.subscribe(cb)
    second = bus.subscribe(cb)
    bus.unsubscribe(cb)
    assert not first.active
    assert second.active
