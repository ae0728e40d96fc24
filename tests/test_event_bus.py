"""
Tests for the publish/subscribe event bus.
"""

import logging
import threading

import pytest

from monopoly_core import EventBus, InvalidArgumentError
from monopoly_core.events import MoneyTransferred, PlayerAdded, TurnChanged


def test_handlers_called_in_registration_order(event_bus):
    calls = []
    event_bus.subscribe(PlayerAdded, lambda e: calls.append(("first", e.name)))
    event_bus.subscribe(PlayerAdded, lambda e: calls.append(("second", e.name)))

    event_bus.publish(PlayerAdded("player_0", "Alice"))

    assert calls == [("first", "Alice"), ("second", "Alice")]


def test_only_matching_type_is_delivered(event_bus):
    received = []
    event_bus.subscribe(TurnChanged, received.append)

    event_bus.publish(PlayerAdded("player_0", "Alice"))
    event_bus.publish(TurnChanged("player_0", 1))

    assert received == [TurnChanged("player_0", 1)]


def test_publish_without_subscribers_is_noop(event_bus):
    event_bus.publish(PlayerAdded("player_0", "Alice"))
    assert event_bus.subscriber_count(PlayerAdded) == 0


def test_unknown_event_type_rejected(event_bus):
    with pytest.raises(InvalidArgumentError):
        event_bus.subscribe(dict, lambda e: None)
    with pytest.raises(InvalidArgumentError):
        event_bus.publish(None)


def test_non_callable_handler_rejected(event_bus):
    with pytest.raises(InvalidArgumentError):
        event_bus.subscribe(PlayerAdded, None)
    with pytest.raises(InvalidArgumentError):
        event_bus.subscribe(PlayerAdded, "not a function")


def test_unsubscribe_by_handle_and_by_callable(event_bus):
    received = []
    handler = received.append
    sub = event_bus.subscribe(PlayerAdded, handler)
    event_bus.subscribe(PlayerAdded, handler)

    assert event_bus.unsubscribe(PlayerAdded, sub)
    assert event_bus.subscriber_count(PlayerAdded) == 1
    assert event_bus.unsubscribe(PlayerAdded, handler)
    assert not event_bus.unsubscribe(PlayerAdded, handler)

    event_bus.publish(PlayerAdded("player_0", "Alice"))
    assert received == []


def test_failing_handler_does_not_stop_others(event_bus, caplog):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    event_bus.subscribe(PlayerAdded, broken)
    event_bus.subscribe(PlayerAdded, received.append)

    with caplog.at_level(logging.ERROR, logger="monopoly_core.events"):
        event_bus.publish(PlayerAdded("player_0", "Alice"))

    assert len(received) == 1
    assert "failed for PlayerAdded" in caplog.text


def test_subscribe_during_dispatch_applies_to_next_publish(event_bus):
    late = []

    def subscribe_more(event):
        event_bus.subscribe(PlayerAdded, late.append)

    sub = event_bus.subscribe(PlayerAdded, subscribe_more)
    event_bus.publish(PlayerAdded("player_0", "Alice"))
    assert late == []

    event_bus.unsubscribe(PlayerAdded, sub)
    event_bus.publish(PlayerAdded("player_1", "Bob"))
    assert [e.name for e in late] == ["Bob"]


def test_unsubscribe_during_dispatch_keeps_current_delivery(event_bus):
    received = []
    second = received.append

    def remove_second(event):
        event_bus.unsubscribe(PlayerAdded, second)

    event_bus.subscribe(PlayerAdded, remove_second)
    event_bus.subscribe(PlayerAdded, second)

    event_bus.publish(PlayerAdded("player_0", "Alice"))
    event_bus.publish(PlayerAdded("player_1", "Bob"))

    assert [e.name for e in received] == ["Alice"]


def test_handler_may_publish(event_bus):
    transfers = []

    def on_added(event):
        event_bus.publish(MoneyTransferred(None, event.player_id, 1500, "Starting money"))

    event_bus.subscribe(PlayerAdded, on_added)
    event_bus.subscribe(MoneyTransferred, transfers.append)

    event_bus.publish(PlayerAdded("player_0", "Alice"))

    assert transfers == [MoneyTransferred(None, "player_0", 1500, "Starting money")]


def test_concurrent_subscribe_and_publish():
    bus = EventBus()
    counts = []
    lock = threading.Lock()

    def handler(event):
        with lock:
            counts.append(event.turn_number)

    def subscriber():
        for _ in range(50):
            sub = bus.subscribe(TurnChanged, handler)
            bus.unsubscribe(TurnChanged, sub)

    def publisher():
        for i in range(200):
            bus.publish(TurnChanged("player_0", i))

    threads = [threading.Thread(target=subscriber) for _ in range(4)]
    threads += [threading.Thread(target=publisher) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert bus.subscriber_count(TurnChanged) == 0
    assert all(0 <= n < 200 for n in counts)


def test_events_from_one_thread_arrive_in_order():
    bus = EventBus()
    received = []
    bus.subscribe(TurnChanged, lambda e: received.append(e.turn_number))

    t = threading.Thread(target=lambda: [bus.publish(TurnChanged("player_0", i)) for i in range(100)])
    t.start()
    t.join()

    assert received == list(range(100))


def test_clear_removes_everything(event_bus):
    event_bus.subscribe(PlayerAdded, lambda e: None)
    event_bus.subscribe(TurnChanged, lambda e: None)
    event_bus.clear()
    assert event_bus.subscriber_count(PlayerAdded) == 0
    assert event_bus.subscriber_count(TurnChanged) == 0
