"""Event Bus - ordered, isolated, in-process dispatch.

Invariants:
    - Subscribers run in registration order with the same payload object
    - A failing subscriber is counted and logged; later subscribers still run
    - publish() never raises
    - Async subscribers are scheduled, not awaited; drain() waits for them
    - No replay for late subscribers
"""

import asyncio
import logging

import pytest

from bookstore.core.domain_types import EventName
from bookstore.services.event_bus import EventBus


def test_publish_without_subscribers_is_a_no_op():
    result = EventBus().publish("nothing", {"x": 1})
    assert result.subscribers_notified == 0
    assert result.subscribers_failed == 0


def test_subscribers_run_in_registration_order_with_same_payload():
    bus = EventBus()
    seen = []
    bus.subscribe("evt", lambda p: seen.append(("first", p)))
    bus.subscribe("evt", lambda p: seen.append(("second", p)))
    payload = {"id": "o1"}

    result = bus.publish("evt", payload)

    assert [name for name, _ in seen] == ["first", "second"]
    assert all(p is payload for _, p in seen)
    assert result.subscribers_notified == 2


def test_failing_subscriber_is_isolated(caplog):
    bus = EventBus()
    seen = []

    def broken(_payload):
        raise ValueError("subscriber exploded")

    bus.subscribe("evt", broken)
    bus.subscribe("evt", seen.append)

    with caplog.at_level(logging.ERROR, logger="bookstore.services.event_bus"):
        result = bus.publish("evt", "payload")

    assert seen == ["payload"]
    assert result.subscribers_failed == 1
    assert result.failures[0]["error_type"] == "ValueError"
    assert "subscriber exploded" in caplog.text


def test_enum_and_string_names_share_subscribers():
    bus = EventBus()
    seen = []
    bus.subscribe(EventName.ORDER_PLACED, seen.append)

    bus.publish("orderPlaced", 1)
    bus.publish(EventName.ORDER_PLACED, 2)

    assert seen == [1, 2]
    assert bus.subscriber_count("orderPlaced") == 1


def test_late_subscriber_sees_no_replay():
    bus = EventBus()
    bus.publish("evt", "early")
    seen = []
    bus.subscribe("evt", seen.append)
    assert seen == []


def test_non_callable_subscriber_rejected():
    with pytest.raises(TypeError):
        EventBus().subscribe("evt", "not callable")


def test_async_subscriber_without_loop_counts_as_failure():
    bus = EventBus()

    async def handler(_payload):
        return None

    bus.subscribe("evt", handler)
    result = bus.publish("evt", {})
    assert result.subscribers_failed == 1


async def test_async_subscriber_is_scheduled_then_drained():
    bus = EventBus()
    seen = []

    async def handler(payload):
        await asyncio.sleep(0)
        seen.append(payload)

    bus.subscribe("evt", handler)
    result = bus.publish("evt", "p")

    assert result.subscribers_notified == 1
    assert seen == []
    await bus.drain()
    assert seen == ["p"]


async def test_async_subscriber_failure_is_logged_not_raised(caplog):
    bus = EventBus()

    async def handler(_payload):
        raise RuntimeError("async boom")

    bus.subscribe("evt", handler)
    with caplog.at_level(logging.ERROR, logger="bookstore.services.event_bus"):
        bus.publish("evt", None)
        await bus.drain()

    assert "async boom" in caplog.text


async def test_drain_cancels_stragglers():
    bus = EventBus()

    async def slow(_payload):
        await asyncio.sleep(10)

    bus.subscribe("evt", slow)
    bus.publish("evt", None)
    await bus.drain(timeout_seconds=0.01)
    await asyncio.sleep(0)
    await bus.drain()
