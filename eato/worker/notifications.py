# eato/worker/notifications.py
"""
Email notification worker.
"""

from __future__ import annotations

from typing import List, Optional

from eato.infra.event_bus import DomainEvent, EventBus, EventTypes
from eato.services.notifications.dependencies import get_notification_service
from eato.services.notifications.service import NotificationService
from eato.worker.base import BaseWorker
from eato.common.logger import log_warning


class BookingNotificationWorker(BaseWorker):
    """
    Sends booking emails for lifecycle events and follower alerts
    for truck updates.
    """

    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        service: Optional[NotificationService] = None,
    ) -> None:
        super().__init__(event_bus)
        self.service = service or get_notification_service()

    @property
    def name(self) -> str:
        return "notifications"

    @property
    def subscriptions(self) -> List[str]:
        return [
            EventTypes.BOOKING_CREATED,
            EventTypes.BOOKING_ACCEPTED,
            EventTypes.BOOKING_DECLINED,
            EventTypes.TRUCK_UPDATE_POSTED,
        ]

    async def handle_event(self, event: DomainEvent) -> None:
        if event.event_type == EventTypes.TRUCK_UPDATE_POSTED:
            update_id = event.payload.get("update_id")
            if update_id:
                await self.service.notify_followers_of_update(update_id)
            return

        handlers = {
            EventTypes.BOOKING_CREATED: self.service.send_new_booking,
            EventTypes.BOOKING_ACCEPTED: self.service.send_booking_accepted,
            EventTypes.BOOKING_DECLINED: self.service.send_booking_declined,
        }
        handler = handlers.get(event.event_type)
        if handler is None:
            return

        booking_id = event.payload.get("booking_id")
        if not booking_id:
            await log_warning(f"{event.event_type} without booking_id", extra={"event_id": event.event_id})
            return
        await handler(booking_id)
