from eato.infra.database import DatabaseManager
from eato.infra.mailer import get_mailer
from eato.services.bookings.repository import BookingRepository
from eato.services.engagement.repository import EngagementRepository
from eato.services.events.repository import EventRepository
from eato.services.notifications.service import NotificationService
from eato.services.posts.repository import PostRepository
from eato.services.trucks.repository import TruckRepository
from eato.services.users.repository import UserRepository


def get_notification_service() -> NotificationService:
    db = DatabaseManager()
    return NotificationService(
        bookings=BookingRepository(db),
        trucks=TruckRepository(db),
        events=EventRepository(db),
        users=UserRepository(db),
        engagement=EngagementRepository(db),
        posts=PostRepository(db),
        mailer=get_mailer(),
    )
