from eato.infra.database import DatabaseManager
from eato.infra.event_bus import get_event_bus
from eato.services.bookings.repository import BookingRepository
from eato.services.bookings.service import BookingService
from eato.services.events.dependencies import get_event_repository
from eato.services.trucks.dependencies import get_truck_repository


def get_booking_repository() -> BookingRepository:
    return BookingRepository(DatabaseManager())


def get_booking_service() -> BookingService:
    return BookingService(
        get_booking_repository(),
        get_truck_repository(),
        get_event_repository(),
        get_event_bus(),
    )
