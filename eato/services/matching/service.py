import asyncio

from eato.common.logger import log_info
from eato.common.constants import TypeMsg
from eato.services.bookings.service import BookingService
from eato.services.events.repository import EventRepository
from eato.services.matching.repository import MatchingRepository
from eato.services.trucks.repository import TruckRepository
from eato.shared.errors import EatoError, Forbidden, NotFound, ValidationFailed
from eato.shared.models.enums import ApplicationStatus, InviteStatus
from eato.shared.models.event_dto import EventDTO
from eato.shared.models.matching_dto import (
    ApplicationDTO,
    CreateApplicationRequest,
    CreateInviteRequest,
    InviteDTO,
    RespondApplicationRequest,
    RespondInviteRequest,
)
from eato.shared.models.truck_dto import TruckDTO


class MatchingService:
    """
    Invites and applications are thin matching records.
    Accepting either one opens an accepted Booking.
    """

    def __init__(
        self,
        repository: MatchingRepository,
        trucks: TruckRepository,
        events: EventRepository,
        bookings: BookingService,
    ):
        self.repository = repository
        self.trucks = trucks
        self.events = events
        self.bookings = bookings

    async def _load_pair(self, truck_id: str, event_id: str) -> tuple[TruckDTO, EventDTO]:
        truck, event = await asyncio.gather(
            self.trucks.get_truck_by_id(truck_id),
            self.events.get_event_by_id(event_id),
        )
        if not event:
            raise NotFound.entity("Event")
        if not truck:
            raise NotFound.entity("Truck")
        return truck, event

    # =========================================================================
    # INVITES
    # =========================================================================

    async def create_invite(self, user_id: str, request: CreateInviteRequest) -> InviteDTO:
        truck, event = await self._load_pair(request.truck_id, request.event_id)
        if event.organizer_id != user_id:
            raise Forbidden("Only the event organizer can invite trucks")
        if await self.repository.has_pending_invite(event.id, truck.id):
            raise ValidationFailed("This truck already has a pending invite for this event")

        invite = await self.repository.create_invite(event.id, truck.id)
        await log_info(f"Invite {invite.id}: event {event.id} -> truck {truck.id}", type_msg=TypeMsg.INFO)
        return invite

    async def list_invites(self, user_id: str) -> list[InviteDTO]:
        return await self.repository.list_invites_for_user(user_id)

    async def respond_invite(self, invite_id: str, user_id: str, request: RespondInviteRequest) -> InviteDTO:
        invite = await self.repository.get_invite(invite_id)
        if not invite:
            raise NotFound.entity("Invite")
        truck, event = await self._load_pair(invite.truck_id, invite.event_id)
        if truck.owner_id != user_id:
            raise Forbidden("Only the truck owner can respond to this invite")
        if invite.status != InviteStatus.PENDING:
            raise ValidationFailed(f"Invite is already {invite.status}")

        updated = await self.repository.update_invite_status(
            invite_id, request.status, InviteStatus.PENDING.value
        )
        if updated is None:
            raise ValidationFailed("Invite was answered by another request, please reload")

        if request.status == InviteStatus.ACCEPTED.value:
            try:
                booking = await self.bookings.open_accepted_booking(truck, event)
            except EatoError:
                # Reopen the invite so it can be answered again
                await self.repository.update_invite_status(
                    invite_id, InviteStatus.PENDING.value, request.status
                )
                raise
            updated.booking_id = booking.id
        await log_info(f"Invite {invite_id} {request.status}", type_msg=TypeMsg.INFO)
        return updated

    # =========================================================================
    # APPLICATIONS
    # =========================================================================

    async def create_application(self, user_id: str, request: CreateApplicationRequest) -> ApplicationDTO:
        truck, event = await self._load_pair(request.truck_id, request.event_id)
        if truck.owner_id != user_id:
            raise Forbidden("Only the truck owner can apply with this truck")
        if await self.repository.has_open_application(event.id, truck.id):
            raise ValidationFailed("This truck has already applied to this event")

        application = await self.repository.create_application(event.id, truck.id, request.note)
        await log_info(
            f"Application {application.id}: truck {truck.id} -> event {event.id}",
            type_msg=TypeMsg.INFO,
        )
        return application

    async def list_applications(self, user_id: str) -> list[ApplicationDTO]:
        return await self.repository.list_applications_for_user(user_id)

    async def respond_application(
        self, application_id: str, user_id: str, request: RespondApplicationRequest
    ) -> ApplicationDTO:
        application = await self.repository.get_application(application_id)
        if not application:
            raise NotFound.entity("Application")
        truck, event = await self._load_pair(application.truck_id, application.event_id)
        if event.organizer_id != user_id:
            raise Forbidden("Only the event organizer can respond to this application")
        if application.status != ApplicationStatus.APPLIED:
            raise ValidationFailed(f"Application is already {application.status}")

        updated = await self.repository.update_application_status(
            application_id, request.status, ApplicationStatus.APPLIED.value
        )
        if updated is None:
            raise ValidationFailed("Application was answered by another request, please reload")

        if request.status == ApplicationStatus.ACCEPTED.value:
            try:
                booking = await self.bookings.open_accepted_booking(truck, event, application.note)
            except EatoError:
                await self.repository.update_application_status(
                    application_id, ApplicationStatus.APPLIED.value, request.status
                )
                raise
            updated.booking_id = booking.id
        await log_info(f"Application {application_id} {request.status}", type_msg=TypeMsg.INFO)
        return updated
