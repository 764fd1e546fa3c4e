from typing import Optional

from eato.infra.database import DatabaseManager
from eato.shared.models.booking_dto import BookingDTO

BOOKING_COLUMNS = """
    id, truck_id, event_id, status, message, proposed_price, organizer_notes,
    payment_status, payment_intent_id, deposit_amount, created_at, updated_at
"""

QUALIFIED_BOOKING_COLUMNS = """
    b.id, b.truck_id, b.event_id, b.status, b.message, b.proposed_price, b.organizer_notes,
    b.payment_status, b.payment_intent_id, b.deposit_amount, b.created_at, b.updated_at
"""


class BookingRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_booking_by_id(self, booking_id: str) -> Optional[BookingDTO]:
        query = f"SELECT {BOOKING_COLUMNS} FROM bookings WHERE id = $1"
        record = await self.db.fetchrow(query, booking_id)
        if record:
            return BookingDTO(**dict(record))
        return None

    async def get_active_booking(self, truck_id: str, event_id: str) -> Optional[BookingDTO]:
        query = f"""
            SELECT {BOOKING_COLUMNS} FROM bookings
            WHERE truck_id = $1 AND event_id = $2 AND status IN ('pending', 'accepted')
            ORDER BY created_at DESC
            LIMIT 1
        """
        record = await self.db.fetchrow(query, truck_id, event_id)
        if record:
            return BookingDTO(**dict(record))
        return None

    async def create_booking(
        self,
        truck_id: str,
        event_id: str,
        message: Optional[str],
        proposed_price: Optional[str],
    ) -> BookingDTO:
        query = f"""
            INSERT INTO bookings (truck_id, event_id, status, message, proposed_price)
            VALUES ($1, $2, 'pending', $3, $4)
            RETURNING {BOOKING_COLUMNS}
        """
        record = await self.db.fetchrow(query, truck_id, event_id, message, proposed_price)
        return BookingDTO(**dict(record))

    async def update_status(
        self,
        booking_id: str,
        new_status: str,
        expected_status: str,
        organizer_notes: Optional[str] = None,
    ) -> Optional[BookingDTO]:
        """
        Compare-and-set on the previous status.
        Returns None when another writer changed the status first.
        """
        query = f"""
            UPDATE bookings
            SET status = $2,
                organizer_notes = COALESCE($4, organizer_notes),
                updated_at = NOW()
            WHERE id = $1 AND status = $3
            RETURNING {BOOKING_COLUMNS}
        """
        record = await self.db.fetchrow(query, booking_id, new_status, expected_status, organizer_notes)
        if record:
            return BookingDTO(**dict(record))
        return None

    async def list_for_owner(self, owner_id: str) -> list[BookingDTO]:
        query = f"""
            SELECT {QUALIFIED_BOOKING_COLUMNS}
            FROM bookings b
            JOIN trucks t ON t.id = b.truck_id
            WHERE t.owner_id = $1
            ORDER BY b.created_at DESC
        """
        records = await self.db.fetch(query, owner_id)
        return [BookingDTO(**dict(r)) for r in records]

    async def list_for_organizer(self, organizer_id: str) -> list[BookingDTO]:
        query = f"""
            SELECT {QUALIFIED_BOOKING_COLUMNS}
            FROM bookings b
            JOIN events e ON e.id = b.event_id
            WHERE e.organizer_id = $1
            ORDER BY b.created_at DESC
        """
        records = await self.db.fetch(query, organizer_id)
        return [BookingDTO(**dict(r)) for r in records]

    # =========================================================================
    # PAYMENT FIELDS
    # =========================================================================

    async def set_payment_intent(
        self, booking_id: str, payment_intent_id: str, deposit_amount: int
    ) -> Optional[BookingDTO]:
        """Records a new deposit intent; a paid booking is never touched."""
        query = f"""
            UPDATE bookings
            SET payment_intent_id = $2,
                deposit_amount = $3,
                payment_status = 'pending',
                updated_at = NOW()
            WHERE id = $1 AND payment_status <> 'paid'
            RETURNING {BOOKING_COLUMNS}
        """
        record = await self.db.fetchrow(query, booking_id, payment_intent_id, deposit_amount)
        if record:
            return BookingDTO(**dict(record))
        return None

    async def mark_payment(
        self, booking_id: str, payment_intent_id: str, payment_status: str
    ) -> Optional[BookingDTO]:
        """
        Applies a provider-reported payment status for the booking's
        current intent. A paid booking only stays paid.
        """
        query = f"""
            UPDATE bookings
            SET payment_status = $3::varchar, updated_at = NOW()
            WHERE id = $1
              AND payment_intent_id = $2
              AND (payment_status <> 'paid' OR $3::varchar = 'paid')
            RETURNING {BOOKING_COLUMNS}
        """
        record = await self.db.fetchrow(query, booking_id, payment_intent_id, payment_status)
        if record:
            return BookingDTO(**dict(record))
        return None
