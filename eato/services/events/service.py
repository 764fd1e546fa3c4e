import asyncpg

from eato.common.logger import log_info
from eato.common.constants import TypeMsg
from eato.services.events.repository import EventRepository
from eato.shared.errors import Forbidden, NotFound, ValidationFailed
from eato.shared.models.event_dto import CreateEventRequest, EventDTO, UpdateEventRequest


class EventService:
    def __init__(self, repository: EventRepository):
        self.repository = repository

    async def list_events(self) -> list[EventDTO]:
        return await self.repository.list_active()

    async def list_my_events(self, organizer_id: str) -> list[EventDTO]:
        return await self.repository.list_by_organizer(organizer_id)

    async def get_event(self, event_id: str) -> EventDTO:
        event = await self.repository.get_event_by_id(event_id)
        if not event:
            raise NotFound.entity("Event")
        return event

    async def get_organized_event(self, event_id: str, user_id: str) -> EventDTO:
        """404 when the event is absent, 403 when someone else organizes it."""
        event = await self.get_event(event_id)
        if event.organizer_id != user_id:
            raise Forbidden("You are not the organizer of this event")
        return event

    async def create_event(self, organizer_id: str, request: CreateEventRequest) -> EventDTO:
        event = await self.repository.create_event(organizer_id, request.model_dump())
        await log_info(f"Event {event.id} created by {organizer_id}", type_msg=TypeMsg.INFO)
        return event

    async def update_event(self, event_id: str, user_id: str, request: UpdateEventRequest) -> EventDTO:
        await self.get_organized_event(event_id, user_id)
        updated = await self.repository.update_event(event_id, request.model_dump(exclude_unset=True))
        if not updated:
            raise NotFound.entity("Event")
        return updated

    async def delete_event(self, event_id: str, user_id: str) -> None:
        await self.get_organized_event(event_id, user_id)
        try:
            await self.repository.delete_event(event_id)
        except asyncpg.ForeignKeyViolationError:
            raise ValidationFailed(
                "This event has bookings and cannot be deleted. Deactivate it instead"
            )
        await log_info(f"Event {event_id} deleted by {user_id}", type_msg=TypeMsg.INFO)
