import asyncio
from typing import Optional

import asyncpg

from eato.common.logger import log_error, log_info
from eato.common.constants import TypeMsg
from eato.infra.event_bus import DomainEvent, EventBus, EventTypes
from eato.services.bookings.repository import BookingRepository
from eato.services.bookings.state_machine import BookingStateMachine
from eato.services.events.repository import EventRepository
from eato.services.trucks.repository import TruckRepository
from eato.shared.errors import Forbidden, NotFound, ValidationFailed
from eato.shared.models.booking_dto import (
    BookingDetailsDTO,
    BookingDTO,
    CreateBookingRequest,
    UpdateBookingStatusRequest,
)
from eato.shared.models.enums import BookingStatus
from eato.shared.models.event_dto import EventDTO
from eato.shared.models.truck_dto import TruckDTO

STATUS_EVENTS = {
    BookingStatus.ACCEPTED: EventTypes.BOOKING_ACCEPTED,
    BookingStatus.DECLINED: EventTypes.BOOKING_DECLINED,
    BookingStatus.COMPLETED: EventTypes.BOOKING_COMPLETED,
}


class BookingService:
    """
    Booking lifecycle: pending -> accepted/declined, accepted -> completed.

    Email notifications are not sent here; domain events are published
    and the notification worker picks them up.
    """

    def __init__(
        self,
        repository: BookingRepository,
        trucks: TruckRepository,
        events: EventRepository,
        event_bus: EventBus,
    ):
        self.repository = repository
        self.trucks = trucks
        self.events = events
        self.event_bus = event_bus

    async def _load_parties(self, truck_id: str, event_id: str) -> tuple[TruckDTO, EventDTO]:
        truck, event = await asyncio.gather(
            self.trucks.get_truck_by_id(truck_id),
            self.events.get_event_by_id(event_id),
        )
        if not truck:
            raise NotFound.entity("Truck")
        if not event:
            raise NotFound.entity("Event")
        return truck, event

    async def _ensure_available(self, truck: TruckDTO, event: EventDTO) -> None:
        if await self.trucks.is_blocked_on(truck.id, event.date.date()):
            raise ValidationFailed(
                f"{truck.name} is unavailable on {event.date.date().isoformat()}"
            )

    async def _publish(self, event_type: str, booking: BookingDTO) -> None:
        try:
            await self.event_bus.publish(
                DomainEvent(event_type=event_type, payload={"booking_id": booking.id})
            )
        except Exception as e:
            await log_error(
                f"Failed to queue notification {event_type} for booking {booking.id}: {e}",
                exc_info=True,
            )

    # =========================================================================
    # CREATE
    # =========================================================================

    async def create_booking(self, user_id: str, request: CreateBookingRequest) -> BookingDTO:
        truck, event = await self._load_parties(request.truck_id, request.event_id)

        if user_id not in (truck.owner_id, event.organizer_id):
            raise Forbidden("You must own the truck or organize the event to create this booking")

        if await self.repository.get_active_booking(truck.id, event.id):
            raise ValidationFailed("An open booking for this truck and event already exists")

        await self._ensure_available(truck, event)

        try:
            booking = await self.repository.create_booking(
                truck.id, event.id, request.message, request.proposed_price
            )
        except asyncpg.UniqueViolationError:
            raise ValidationFailed("An open booking for this truck and event already exists")

        await log_info(
            f"Booking {booking.id} created: truck {truck.id} -> event {event.id}",
            type_msg=TypeMsg.INFO,
        )
        await self._publish(EventTypes.BOOKING_CREATED, booking)
        return booking

    async def open_accepted_booking(
        self, truck: TruckDTO, event: EventDTO, message: Optional[str] = None
    ) -> BookingDTO:
        """
        Opens an accepted booking for an accepted invite or application.
        An open booking for the pair is reused; a new one is created
        pending and moved to accepted through the state machine.
        """
        booking = await self.repository.get_active_booking(truck.id, event.id)
        if booking is None:
            await self._ensure_available(truck, event)
            try:
                booking = await self.repository.create_booking(truck.id, event.id, message, None)
            except asyncpg.UniqueViolationError:
                booking = await self.repository.get_active_booking(truck.id, event.id)
                if booking is None:
                    raise ValidationFailed("Booking state changed, please retry")

        if booking.status == BookingStatus.ACCEPTED:
            return booking
        return await self._transition(booking, BookingStatus.ACCEPTED)

    # =========================================================================
    # STATUS
    # =========================================================================

    async def set_status(
        self, booking_id: str, user_id: str, request: UpdateBookingStatusRequest
    ) -> BookingDTO:
        booking = await self.repository.get_booking_by_id(booking_id)
        if not booking:
            raise NotFound.entity("Booking")

        truck, event = await self._load_parties(booking.truck_id, booking.event_id)
        new_status = request.status

        if new_status == BookingStatus.COMPLETED:
            if user_id not in (truck.owner_id, event.organizer_id):
                raise Forbidden("Only the organizer or the truck owner can complete a booking")
        elif user_id != event.organizer_id:
            raise Forbidden("Only the event organizer can accept or decline a booking")

        if new_status == booking.status:
            return booking

        return await self._transition(booking, new_status, request.organizer_notes)

    async def _transition(
        self,
        booking: BookingDTO,
        new_status: BookingStatus,
        organizer_notes: Optional[str] = None,
    ) -> BookingDTO:
        if not BookingStateMachine.can_transition(booking.status, new_status):
            raise ValidationFailed(f"Invalid transition from {booking.status} to {new_status}")

        updated = await self.repository.update_status(
            booking.id, new_status.value, booking.status.value, organizer_notes
        )
        if updated is None:
            raise ValidationFailed("Booking status was changed by another request, please reload")

        await log_info(
            f"Booking {booking.id}: {booking.status} -> {new_status}",
            type_msg=TypeMsg.INFO,
        )
        event_type = STATUS_EVENTS.get(new_status)
        if event_type:
            await self._publish(event_type, updated)
        return updated

    # =========================================================================
    # READ
    # =========================================================================

    async def get_booking(self, booking_id: str, user_id: str) -> BookingDetailsDTO:
        booking = await self.repository.get_booking_by_id(booking_id)
        if not booking:
            raise NotFound.entity("Booking")
        truck, event = await self._load_parties(booking.truck_id, booking.event_id)
        if user_id not in (truck.owner_id, event.organizer_id):
            raise Forbidden("You are not a participant of this booking")
        return BookingDetailsDTO(**booking.model_dump(), truck=truck, event=event)

    async def list_truck_bookings(self, owner_id: str) -> list[BookingDetailsDTO]:
        return await self._with_details(await self.repository.list_for_owner(owner_id))

    async def list_event_bookings(self, organizer_id: str) -> list[BookingDetailsDTO]:
        return await self._with_details(await self.repository.list_for_organizer(organizer_id))

    async def _with_details(self, bookings: list[BookingDTO]) -> list[BookingDetailsDTO]:
        trucks, events = await asyncio.gather(
            self.trucks.get_trucks_by_ids(list({b.truck_id for b in bookings})),
            self.events.get_events_by_ids(list({b.event_id for b in bookings})),
        )
        trucks_by_id = {t.id: t for t in trucks}
        events_by_id = {e.id: e for e in events}
        return [
            BookingDetailsDTO(
                **b.model_dump(),
                truck=trucks_by_id.get(b.truck_id),
                event=events_by_id.get(b.event_id),
            )
            for b in bookings
        ]
