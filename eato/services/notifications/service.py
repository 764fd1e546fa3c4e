import asyncio
from typing import Optional

from eato.common.logger import log_info, log_warning
from eato.common.constants import TypeMsg
from eato.infra.mailer import Mailer
from eato.services.bookings.repository import BookingRepository
from eato.services.engagement.repository import EngagementRepository
from eato.services.events.repository import EventRepository
from eato.services.notifications import templates
from eato.services.notifications.templates import BookingContext, Email
from eato.services.posts.repository import PostRepository
from eato.services.trucks.repository import TruckRepository
from eato.services.users.repository import UserRepository


class NotificationService:
    """
    Formats and sends booking emails.
    Send failures are logged by the mailer and never raised.
    """

    def __init__(
        self,
        bookings: BookingRepository,
        trucks: TruckRepository,
        events: EventRepository,
        users: UserRepository,
        engagement: EngagementRepository,
        posts: PostRepository,
        mailer: Mailer,
    ):
        self.bookings = bookings
        self.trucks = trucks
        self.events = events
        self.users = users
        self.engagement = engagement
        self.posts = posts
        self.mailer = mailer

    async def build_context(self, booking_id: str) -> Optional[BookingContext]:
        """Loads booking, truck, event and both users. Truck and event load in parallel."""
        booking = await self.bookings.get_booking_by_id(booking_id)
        if not booking:
            await log_warning(f"Notification for unknown booking {booking_id} skipped")
            return None

        truck, event = await asyncio.gather(
            self.trucks.get_truck_by_id(booking.truck_id),
            self.events.get_event_by_id(booking.event_id),
        )
        if not truck or not event:
            await log_warning(f"Booking {booking_id} lost its truck or event, notification skipped")
            return None

        owner, organizer = await asyncio.gather(
            self.users.get_user_by_id(truck.owner_id),
            self.users.get_user_by_id(event.organizer_id),
        )
        return BookingContext(
            booking=booking,
            truck=truck,
            event=event,
            truck_owner=owner,
            organizer=organizer,
        )

    async def _send_all(self, emails: list[Email]) -> int:
        results = await asyncio.gather(*(self.mailer.send(e.to, e.subject, e.html) for e in emails))
        return sum(1 for sent in results if sent)

    async def send_new_booking(self, booking_id: str) -> int:
        ctx = await self.build_context(booking_id)
        if not ctx:
            return 0
        sent = await self._send_all(templates.new_booking_emails(ctx))
        await log_info(f"New booking emails for {booking_id}: {sent} sent", type_msg=TypeMsg.INFO)
        return sent

    async def send_booking_accepted(self, booking_id: str) -> int:
        ctx = await self.build_context(booking_id)
        if not ctx:
            return 0
        sent = await self._send_all(templates.booking_accepted_emails(ctx))
        await log_info(f"Booking accepted emails for {booking_id}: {sent} sent", type_msg=TypeMsg.INFO)
        return sent

    async def send_booking_declined(self, booking_id: str) -> int:
        ctx = await self.build_context(booking_id)
        if not ctx:
            return 0
        sent = await self._send_all(templates.booking_declined_emails(ctx))
        await log_info(f"Booking declined emails for {booking_id}: {sent} sent", type_msg=TypeMsg.INFO)
        return sent

    async def notify_followers_of_update(self, update_id: str) -> int:
        update = await self.posts.get_update(update_id)
        if not update:
            await log_warning(f"Follower alert for unknown update {update_id} skipped")
            return 0

        truck = await self.trucks.get_truck_by_id(update.truck_id)
        if not truck:
            return 0

        follower_ids = await self.engagement.list_alert_follower_ids(truck.id)
        if not follower_ids:
            return 0

        followers = await self.users.get_users_by_ids(follower_ids)
        emails = [
            templates.truck_update_email(user, truck, update.title, update.content)
            for user in followers
        ]
        sent = await self._send_all(emails)
        await log_info(
            f"Update {update_id} of truck {truck.id}: {sent}/{len(emails)} follower alerts sent",
            type_msg=TypeMsg.INFO,
        )
        return sent
