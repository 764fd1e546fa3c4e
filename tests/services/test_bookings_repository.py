# tests/services/test_bookings_repository.py
import pytest
from datetime import datetime, timezone

from eato.services.bookings.repository import BookingRepository
from eato.shared.models.enums import BookingStatus, PaymentStatus

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def _row(**overrides):
    row = {
        "id": "booking-1",
        "truck_id": "truck-1",
        "event_id": "event-1",
        "status": "pending",
        "message": None,
        "proposed_price": "$500",
        "organizer_notes": None,
        "payment_status": "unpaid",
        "payment_intent_id": None,
        "deposit_amount": None,
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def _sql(mock_db) -> str:
    return " ".join(mock_db.fetchrow.call_args.args[0].split())


@pytest.fixture
def repo(mock_db):
    return BookingRepository(mock_db)


@pytest.mark.asyncio
async def test_get_booking_not_found(repo, mock_db):
    assert await repo.get_booking_by_id("missing") is None


@pytest.mark.asyncio
async def test_active_booking_only_considers_open_statuses(repo, mock_db):
    await repo.get_active_booking("truck-1", "event-1")

    assert "status IN ('pending', 'accepted')" in _sql(mock_db)
    assert mock_db.fetchrow.call_args.args[1:] == ("truck-1", "event-1")


@pytest.mark.asyncio
async def test_create_booking_starts_pending(repo, mock_db):
    mock_db.fetchrow.return_value = _row()

    booking = await repo.create_booking("truck-1", "event-1", "Tacos!", "$500")

    assert booking.status == BookingStatus.PENDING
    assert "VALUES ($1, $2, 'pending', $3, $4)" in _sql(mock_db)
    assert mock_db.fetchrow.call_args.args[1:] == ("truck-1", "event-1", "Tacos!", "$500")


@pytest.mark.asyncio
async def test_update_status_compares_previous_status(repo, mock_db):
    mock_db.fetchrow.return_value = _row(status="accepted", organizer_notes="See you there")

    booking = await repo.update_status("booking-1", "accepted", "pending", "See you there")

    assert booking.status == BookingStatus.ACCEPTED
    assert "WHERE id = $1 AND status = $3" in _sql(mock_db)
    assert mock_db.fetchrow.call_args.args[1:] == ("booking-1", "accepted", "pending", "See you there")


@pytest.mark.asyncio
async def test_update_status_lost_compare_returns_none(repo, mock_db):
    mock_db.fetchrow.return_value = None

    assert await repo.update_status("booking-1", "declined", "pending") is None


@pytest.mark.asyncio
async def test_set_payment_intent_skips_paid_bookings(repo, mock_db):
    mock_db.fetchrow.return_value = _row(
        status="accepted", payment_status="pending", payment_intent_id="pi_1", deposit_amount=12500
    )

    booking = await repo.set_payment_intent("booking-1", "pi_1", 12500)

    assert booking.payment_status == PaymentStatus.PENDING
    sql = _sql(mock_db)
    assert "payment_status = 'pending'" in sql
    assert "WHERE id = $1 AND payment_status <> 'paid'" in sql
    assert mock_db.fetchrow.call_args.args[1:] == ("booking-1", "pi_1", 12500)


@pytest.mark.asyncio
async def test_set_payment_intent_on_paid_booking_returns_none(repo, mock_db):
    mock_db.fetchrow.return_value = None

    assert await repo.set_payment_intent("booking-1", "pi_2", 12500) is None


@pytest.mark.asyncio
async def test_mark_payment_keeps_paid_sticky(repo, mock_db):
    mock_db.fetchrow.return_value = None

    result = await repo.mark_payment("booking-1", "pi_1", "unpaid")

    assert result is None
    sql = _sql(mock_db)
    assert "AND payment_intent_id = $2" in sql
    assert "AND (payment_status <> 'paid' OR $3::varchar = 'paid')" in sql
    assert mock_db.fetchrow.call_args.args[1:] == ("booking-1", "pi_1", "unpaid")


@pytest.mark.asyncio
async def test_mark_payment_paid(repo, mock_db):
    mock_db.fetchrow.return_value = _row(
        status="accepted", payment_status="paid", payment_intent_id="pi_1", deposit_amount=12500
    )

    booking = await repo.mark_payment("booking-1", "pi_1", "paid")

    assert booking.payment_status == PaymentStatus.PAID
    assert booking.status == BookingStatus.ACCEPTED


@pytest.mark.asyncio
async def test_list_for_owner_joins_trucks(repo, mock_db):
    mock_db.fetch.return_value = [_row(), _row(id="booking-2")]

    bookings = await repo.list_for_owner("user-owner")

    assert [b.id for b in bookings] == ["booking-1", "booking-2"]
    sql = " ".join(mock_db.fetch.call_args.args[0].split())
    assert "JOIN trucks t ON t.id = b.truck_id WHERE t.owner_id = $1" in sql
