# tests/services/test_booking_flow.py
"""
End-to-end booking flow over in-memory repositories:
request -> accept -> deposit intent -> provider webhook -> paid.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Optional
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from eato.services.bookings.service import BookingService
from eato.services.payments.service import PaymentService
from eato.shared.errors import ValidationFailed
from eato.shared.models.booking_dto import BookingDTO, CreateBookingRequest, UpdateBookingStatusRequest
from eato.shared.models.enums import BookingStatus, PaymentStatus

OWNER_ID = "user-owner"
ORGANIZER_ID = "user-organizer"


class InMemoryBookings:
    def __init__(self) -> None:
        self.rows: dict[str, BookingDTO] = {}

    def _save(self, booking: BookingDTO, **changes) -> BookingDTO:
        updated = booking.model_copy(update={**changes, "updated_at": datetime.now(timezone.utc)})
        self.rows[updated.id] = updated
        return updated

    async def get_booking_by_id(self, booking_id: str) -> Optional[BookingDTO]:
        return self.rows.get(booking_id)

    async def get_active_booking(self, truck_id: str, event_id: str) -> Optional[BookingDTO]:
        for row in self.rows.values():
            if row.truck_id == truck_id and row.event_id == event_id and row.status in ("pending", "accepted"):
                return row
        return None

    async def create_booking(self, truck_id, event_id, message, proposed_price) -> BookingDTO:
        now = datetime.now(timezone.utc)
        booking = BookingDTO(
            id=str(uuid4()), truck_id=truck_id, event_id=event_id, message=message,
            proposed_price=proposed_price, created_at=now, updated_at=now,
        )
        self.rows[booking.id] = booking
        return booking

    async def update_status(self, booking_id, new_status, expected_status, organizer_notes=None):
        row = self.rows.get(booking_id)
        if row is None or row.status != expected_status:
            return None
        changes = {"status": BookingStatus(new_status)}
        if organizer_notes is not None:
            changes["organizer_notes"] = organizer_notes
        return self._save(row, **changes)

    async def set_payment_intent(self, booking_id, payment_intent_id, deposit_amount):
        row = self.rows.get(booking_id)
        if row is None or row.payment_status == PaymentStatus.PAID:
            return None
        return self._save(
            row,
            payment_intent_id=payment_intent_id,
            deposit_amount=deposit_amount,
            payment_status=PaymentStatus.PENDING,
        )

    async def mark_payment(self, booking_id, payment_intent_id, payment_status):
        row = self.rows.get(booking_id)
        if row is None or row.payment_intent_id != payment_intent_id or row.payment_status == PaymentStatus.PAID:
            return None
        return self._save(row, payment_status=PaymentStatus(payment_status))


class InMemoryLedger:
    def __init__(self) -> None:
        self.keys: set[tuple[str, str]] = set()

    async def is_event_processed(self, source: str, event_id: str) -> bool:
        return (source, event_id) in self.keys

    async def mark_event_processed(self, source: str, event_id: str, ttl: int) -> bool:
        self.keys.add((source, event_id))
        return True


@pytest.fixture
def bookings_repo():
    return InMemoryBookings()


@pytest.fixture
def trucks(truck):
    trucks = AsyncMock()
    trucks.get_truck_by_id.return_value = truck
    trucks.is_blocked_on.side_effect = lambda truck_id, day: day == date(2026, 12, 25)
    return trucks


@pytest.fixture
def events(event):
    events = AsyncMock()
    events.get_event_by_id.return_value = event
    return events


@pytest.fixture
def billing():
    billing = AsyncMock()
    billing.create_payment_intent.return_value = {
        "id": "pi_flow", "client_secret": "pi_flow_secret", "amount": 12500, "status": "requires_payment_method",
    }
    billing.parse_webhook.side_effect = lambda payload, *args, **kwargs: json.loads(payload)
    return billing


@pytest.fixture
def booking_service(bookings_repo, trucks, events, mock_event_bus):
    return BookingService(bookings_repo, trucks, events, mock_event_bus)


@pytest.fixture
def payment_service(bookings_repo, events, billing):
    return PaymentService(bookings_repo, events, billing, InMemoryLedger())


def _succeeded(event_id: str, booking_id: str, intent_id: str = "pi_flow") -> bytes:
    return json.dumps({
        "id": event_id,
        "type": "payment_intent.succeeded",
        "data": {"object": {"id": intent_id, "metadata": {"booking_id": booking_id}}},
    }).encode()


@pytest.mark.asyncio
async def test_request_accept_and_pay_deposit(booking_service, payment_service, bookings_repo, mock_event_bus):
    booking = await booking_service.create_booking(
        OWNER_ID,
        CreateBookingRequest(truck_id="truck-1", event_id="event-1", message="Tacos!", proposed_price="$500"),
    )
    assert booking.status == BookingStatus.PENDING

    # Deposit is only payable once accepted
    with pytest.raises(ValidationFailed):
        await payment_service.create_payment_intent(ORGANIZER_ID, booking.id)

    accepted = await booking_service.set_status(
        booking.id, ORGANIZER_ID, UpdateBookingStatusRequest(status="accepted")
    )
    assert accepted.status == BookingStatus.ACCEPTED

    intent = await payment_service.create_payment_intent(ORGANIZER_ID, booking.id)
    assert intent.amount == 12500
    assert (await bookings_repo.get_booking_by_id(booking.id)).payment_status == PaymentStatus.PENDING

    ack = await payment_service.handle_webhook(_succeeded("evt_paid", booking.id), "sig")
    assert ack.duplicate is False

    stored = await bookings_repo.get_booking_by_id(booking.id)
    assert stored.payment_status == PaymentStatus.PAID
    assert stored.status == BookingStatus.ACCEPTED
    assert stored.deposit_amount == 12500

    replay = await payment_service.handle_webhook(_succeeded("evt_paid", booking.id), "sig")
    assert replay.duplicate is True

    with pytest.raises(ValidationFailed):
        await payment_service.create_payment_intent(ORGANIZER_ID, booking.id)

    published = [c.args[0].event_type for c in mock_event_bus.publish.call_args_list]
    assert published == ["booking.created", "booking.accepted"]


@pytest.mark.asyncio
async def test_declined_booking_frees_the_pair(booking_service):
    request = CreateBookingRequest(truck_id="truck-1", event_id="event-1")
    first = await booking_service.create_booking(ORGANIZER_ID, request)

    with pytest.raises(ValidationFailed):
        await booking_service.create_booking(OWNER_ID, request)

    await booking_service.set_status(first.id, ORGANIZER_ID, UpdateBookingStatusRequest(status="declined"))

    second = await booking_service.create_booking(OWNER_ID, request)
    assert second.id != first.id


@pytest.mark.asyncio
async def test_blocked_date_refuses_booking(booking_service, events, make_event):
    events.get_event_by_id.return_value = make_event(date=datetime(2026, 12, 25, 18, 0, tzinfo=timezone.utc))

    with pytest.raises(ValidationFailed):
        await booking_service.create_booking(OWNER_ID, CreateBookingRequest(truck_id="truck-1", event_id="event-1"))
