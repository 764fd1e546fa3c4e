from eato.infra.database import DatabaseManager
from eato.services.bookings.dependencies import get_booking_service
from eato.services.events.dependencies import get_event_repository
from eato.services.matching.repository import MatchingRepository
from eato.services.matching.service import MatchingService
from eato.services.trucks.dependencies import get_truck_repository


def get_matching_repository() -> MatchingRepository:
    return MatchingRepository(DatabaseManager())


def get_matching_service() -> MatchingService:
    return MatchingService(
        get_matching_repository(),
        get_truck_repository(),
        get_event_repository(),
        get_booking_service(),
    )
