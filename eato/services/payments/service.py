from typing import Any, Optional

from eato.common.logger import log_info, log_warning
from eato.common.constants import TypeMsg
from eato.config import settings
from eato.infra.billing import BillingGateway
from eato.infra.redis_client import RedisClient
from eato.services.bookings.repository import BookingRepository
from eato.services.events.repository import EventRepository
from eato.services.payments.deposit import compute_deposit_amount
from eato.shared.errors import Forbidden, IntegrationError, NotFound, ValidationFailed
from eato.shared.models.booking_dto import BookingDTO, PaymentIntentResponse, WebhookAck
from eato.shared.models.enums import BookingStatus, PaymentStatus

LEDGER_SOURCE = "payments"

# Intent states that can still be confirmed by the client
REUSABLE_INTENT_STATES = (
    "requires_payment_method",
    "requires_confirmation",
    "requires_action",
    "processing",
)


class PaymentService:
    """
    Booking deposits.

    The amount is always computed here from the stored proposed price.
    Only the provider webhook may mark a deposit as paid.
    """

    def __init__(
        self,
        bookings: BookingRepository,
        events: EventRepository,
        billing: BillingGateway,
        redis: RedisClient,
    ):
        self.bookings = bookings
        self.events = events
        self.billing = billing
        self.redis = redis

    async def create_payment_intent(self, user_id: str, booking_id: str) -> PaymentIntentResponse:
        booking = await self.bookings.get_booking_by_id(booking_id)
        if not booking:
            raise NotFound.entity("Booking")

        event = await self.events.get_event_by_id(booking.event_id)
        if not event:
            raise NotFound.entity("Event")
        if event.organizer_id != user_id:
            raise Forbidden("Only the event organizer can pay the deposit")

        if booking.status != BookingStatus.ACCEPTED:
            raise ValidationFailed("A deposit can only be paid for an accepted booking")
        if booking.payment_status == PaymentStatus.PAID:
            raise ValidationFailed("The deposit for this booking is already paid")

        amount = compute_deposit_amount(
            booking.proposed_price,
            settings.deposit.DEPOSIT_PERCENT,
            settings.deposit.DEFAULT_DEPOSIT,
        )

        existing = await self._reusable_intent(booking, amount)
        if existing:
            return existing

        # One key per superseded intent
        idempotency_key = f"booking-{booking.id}-deposit-{amount}"
        if booking.payment_intent_id:
            idempotency_key += f"-after-{booking.payment_intent_id}"

        intent = await self.billing.create_payment_intent(
            amount,
            metadata={"booking_id": booking.id, "event_id": booking.event_id, "truck_id": booking.truck_id},
            idempotency_key=idempotency_key,
        )

        updated = await self.bookings.set_payment_intent(booking.id, intent["id"], amount)
        if updated is None:
            raise ValidationFailed("The deposit for this booking is already paid")

        await log_info(
            f"Payment intent {intent['id']} created for booking {booking.id}: {amount}",
            type_msg=TypeMsg.INFO,
        )
        return PaymentIntentResponse(
            client_secret=intent["client_secret"],
            amount=amount,
            payment_intent_id=intent["id"],
        )

    async def _reusable_intent(self, booking: BookingDTO, amount: int) -> Optional[PaymentIntentResponse]:
        """The booking's open intent, when it is still payable for the same amount."""
        if (
            not booking.payment_intent_id
            or booking.payment_status != PaymentStatus.PENDING
            or booking.deposit_amount != amount
        ):
            return None
        try:
            intent = await self.billing.retrieve_payment_intent(booking.payment_intent_id)
        except IntegrationError:
            await log_warning(f"Could not reload intent {booking.payment_intent_id}, creating a new one")
            return None
        if intent["status"] not in REUSABLE_INTENT_STATES:
            return None
        return PaymentIntentResponse(
            client_secret=intent["client_secret"],
            amount=amount,
            payment_intent_id=intent["id"],
        )

    # =========================================================================
    # WEBHOOK
    # =========================================================================

    async def handle_webhook(self, payload: bytes, signature: Optional[str]) -> WebhookAck:
        event = await self.billing.parse_webhook(
            payload,
            signature,
            settings.stripe.STRIPE_WEBHOOK_SECRET,
            allow_unverified=settings.system.is_development,
        )
        event_id = event.get("id")
        event_type = event["type"]

        if event_id and await self.redis.is_event_processed(LEDGER_SOURCE, event_id):
            await log_info(f"Duplicate payment webhook {event_id} ignored", type_msg=TypeMsg.DEBUG)
            return WebhookAck(duplicate=True)

        intent = (event.get("data") or {}).get("object") or {}

        if event_type == "payment_intent.succeeded":
            await self._apply_intent_result(intent, PaymentStatus.PAID)
        elif event_type == "payment_intent.payment_failed":
            await self._apply_intent_result(intent, PaymentStatus.UNPAID)
        else:
            await log_info(f"Unhandled payment webhook type: {event_type}", type_msg=TypeMsg.DEBUG)

        if event_id:
            await self.redis.mark_event_processed(
                LEDGER_SOURCE, event_id, settings.redis_ttl.WEBHOOK_EVENT_TTL
            )
        return WebhookAck()

    async def _apply_intent_result(self, intent: dict[str, Any], result: PaymentStatus) -> None:
        intent_id = intent.get("id")
        booking_id = (intent.get("metadata") or {}).get("booking_id")
        if not booking_id or not intent_id:
            await log_warning("Payment intent webhook without booking metadata", extra={"intent_id": intent_id})
            return

        booking = await self.bookings.get_booking_by_id(booking_id)
        if not booking:
            await log_warning(f"Payment webhook for unknown booking {booking_id}", extra={"intent_id": intent_id})
            return

        if booking.payment_intent_id != intent_id:
            await log_info(
                f"Ignoring {result} for stale intent {intent_id} of booking {booking_id}",
                type_msg=TypeMsg.WARNING,
            )
            return

        if booking.payment_status == PaymentStatus.PAID:
            if result != PaymentStatus.PAID:
                await log_info(f"Booking {booking_id} already paid, failure ignored", type_msg=TypeMsg.WARNING)
            return

        updated = await self.bookings.mark_payment(booking_id, intent_id, result.value)
        if updated:
            await log_info(f"Booking {booking_id} payment is now {updated.payment_status}", type_msg=TypeMsg.INFO)
