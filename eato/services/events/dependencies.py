from eato.infra.database import DatabaseManager
from eato.services.events.repository import EventRepository
from eato.services.events.service import EventService


def get_event_repository() -> EventRepository:
    return EventRepository(DatabaseManager())


def get_event_service() -> EventService:
    return EventService(get_event_repository())
