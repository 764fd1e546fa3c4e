# tests/infra/test_event_bus.py
"""
Tests for the RabbitMQ event bus.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from eato.infra.event_bus import DomainEvent, EventBus, EventTypes


class TestDomainEvent:
    def test_defaults(self) -> None:
        event = DomainEvent(event_type=EventTypes.BOOKING_CREATED)
        assert event.event_id
        assert event.timestamp.endswith("Z")
        assert event.payload == {}

    def test_json_round_trip(self) -> None:
        event = DomainEvent(event_type=EventTypes.BOOKING_ACCEPTED, payload={"booking_id": "b-1"})

        restored = DomainEvent.from_json(event.to_json())

        assert restored.event_id == event.event_id
        assert restored.event_type == "booking.accepted"
        assert restored.payload == {"booking_id": "b-1"}

    def test_from_json_tolerates_missing_fields(self) -> None:
        restored = DomainEvent.from_json(json.dumps({"event_type": "truck.update_posted"}))
        assert restored.event_id
        assert restored.payload == {}


@pytest.fixture
def bus() -> EventBus:
    bus = EventBus()
    bus._connection = None
    bus._channel = None
    bus._exchange = None
    bus._handlers = {}
    bus._queues = {}
    yield bus
    bus._connection = None
    bus._channel = None
    bus._exchange = None
    bus._handlers = {}
    bus._queues = {}


def _connected(bus: EventBus) -> None:
    connection = MagicMock()
    connection.is_closed = False
    bus._connection = connection
    bus._channel = AsyncMock()
    bus._exchange = AsyncMock()


class TestEventBus:
    @pytest.mark.asyncio
    async def test_publish_without_connection_does_not_raise(self, bus: EventBus) -> None:
        await bus.publish(DomainEvent(event_type=EventTypes.BOOKING_CREATED))
        assert bus.is_connected is False

    @pytest.mark.asyncio
    async def test_publish_uses_event_type_as_routing_key(self, bus: EventBus) -> None:
        _connected(bus)

        await bus.publish(DomainEvent(event_type=EventTypes.BOOKING_DECLINED, payload={"booking_id": "b-2"}))

        bus._exchange.publish.assert_awaited_once()
        message = bus._exchange.publish.call_args[0][0]
        assert bus._exchange.publish.call_args[1]["routing_key"] == "booking.declined"
        assert json.loads(message.body)["payload"] == {"booking_id": "b-2"}

    @pytest.mark.asyncio
    async def test_publish_swallows_broker_errors(self, bus: EventBus) -> None:
        _connected(bus)
        bus._exchange.publish.side_effect = RuntimeError("channel closed")

        await bus.publish(DomainEvent(event_type=EventTypes.BOOKING_CREATED))

    @pytest.mark.asyncio
    async def test_subscribe_declares_and_binds_queue(self, bus: EventBus) -> None:
        _connected(bus)
        queue = AsyncMock()
        bus._channel.declare_queue.return_value = queue
        handler = AsyncMock()

        await bus.subscribe(EventTypes.BOOKING_CREATED, handler, queue_name="eato.test.booking_created")

        bus._channel.declare_queue.assert_awaited_once_with("eato.test.booking_created", durable=True)
        queue.bind.assert_awaited_once_with(bus._exchange, routing_key="booking.created")
        queue.consume.assert_awaited_once()
        assert bus._handlers["booking.created"] == [handler]

    @pytest.mark.asyncio
    async def test_consumer_isolates_handler_failures(self, bus: EventBus) -> None:
        failing = AsyncMock(side_effect=RuntimeError("boom"))
        succeeding = AsyncMock()
        bus._handlers["booking.created"] = [failing, succeeding]

        message = MagicMock()
        message.body = DomainEvent(event_type="booking.created", payload={"booking_id": "b-1"}).to_json().encode()
        process = MagicMock()
        process.__aenter__ = AsyncMock(return_value=None)
        process.__aexit__ = AsyncMock(return_value=False)
        message.process.return_value = process

        await bus._make_consumer("booking.created")(message)

        failing.assert_awaited_once()
        succeeding.assert_awaited_once()
        assert succeeding.call_args[0][0].payload == {"booking_id": "b-1"}
