from datetime import datetime, timezone
from typing import Any, Optional

from eato.common.logger import log_error, log_info, log_warning
from eato.common.constants import TypeMsg
from eato.config import settings
from eato.infra.billing import BillingGateway
from eato.infra.redis_client import RedisClient
from eato.services.subscriptions.repository import SubscriptionRepository
from eato.shared.errors import IntegrationError, ValidationFailed
from eato.shared.models.booking_dto import WebhookAck
from eato.shared.models.enums import SubscriptionStatus, SubscriptionTier, UserRole
from eato.shared.models.subscription_dto import CheckoutSessionResponse, SubscriptionDTO
from eato.shared.models.user_dto import UserDTO

LEDGER_SOURCE = "subscriptions"

# Stripe subscription statuses that have no local counterpart
PROVIDER_STATUS_MAP = {
    "unpaid": SubscriptionStatus.PAST_DUE,
    "incomplete_expired": SubscriptionStatus.CANCELED,
    "paused": SubscriptionStatus.CANCELED,
}


def map_provider_status(raw: Optional[str]) -> SubscriptionStatus:
    if raw in PROVIDER_STATUS_MAP:
        return PROVIDER_STATUS_MAP[raw]
    try:
        return SubscriptionStatus(raw)
    except ValueError:
        return SubscriptionStatus.NONE


def _period_end(obj: dict[str, Any]) -> Optional[datetime]:
    ts = obj.get("current_period_end")
    if ts is None:
        # Newer API versions carry the period on the subscription items
        items = (obj.get("items") or {}).get("data") or []
        if items:
            ts = items[0].get("current_period_end")
    if ts is None:
        return None
    return datetime.fromtimestamp(int(ts), tz=timezone.utc)


class SubscriptionService:
    """
    Per-user plan state.

    Tier and status are only written by provider webhooks and by the
    explicit free-tier activation; never from client input.
    """

    def __init__(
        self,
        repository: SubscriptionRepository,
        billing: BillingGateway,
        redis: RedisClient,
    ):
        self.repository = repository
        self.billing = billing
        self.redis = redis

    async def get_status(self, user_id: str) -> SubscriptionDTO:
        subscription = await self.repository.get_by_user(user_id)
        if subscription:
            return subscription
        return SubscriptionDTO(user_id=user_id)

    async def effective_tier(self, user_id: str) -> SubscriptionTier:
        """The stored tier while the plan is live, free otherwise."""
        subscription = await self.repository.get_by_user(user_id)
        if subscription and subscription.is_active:
            return subscription.tier
        return SubscriptionTier.FREE

    async def create_checkout_session(
        self, user: UserDTO, tier: SubscriptionTier
    ) -> CheckoutSessionResponse:
        if tier == SubscriptionTier.FREE:
            raise ValidationFailed("The free tier does not need checkout, activate it directly")

        role = str(user.user_role or UserRole.USER)
        price_id = settings.stripe.price_id_for(role, tier.value)
        if not price_id:
            await log_error(f"No Stripe price configured for role '{role}' and tier '{tier}'")
            raise IntegrationError(f"No price configured for role '{role}' and tier '{tier}'")

        existing = await self.repository.get_by_user(user.id)
        base_url = settings.domain.PUBLIC_BASE_URL.rstrip("/")
        session = await self.billing.create_subscription_checkout(
            price_id=price_id,
            success_url=f"{base_url}/subscription?status=success&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/subscription?status=canceled",
            metadata={"user_id": user.id, "tier": tier.value, "role": role},
            client_reference_id=user.id,
            customer_id=existing.stripe_customer_id if existing else None,
            customer_email=user.email,
        )

        await log_info(
            f"Checkout session {session['id']} created for user {user.id} ({role}/{tier})",
            type_msg=TypeMsg.INFO,
        )
        return CheckoutSessionResponse(url=session["url"], session_id=session["id"])

    async def activate_free(self, user_id: str) -> SubscriptionDTO:
        """Idempotent. Refuses to replace a live paid plan."""
        current = await self.repository.get_by_user(user_id)
        if current and current.is_active:
            if current.tier == SubscriptionTier.FREE:
                return current
            raise ValidationFailed(
                f"You have an active {current.tier} subscription; cancel it before switching to free"
            )

        subscription = await self.repository.upsert_free(user_id)
        await log_info(f"Free tier activated for user {user_id}", type_msg=TypeMsg.INFO)
        return subscription

    # =========================================================================
    # WEBHOOK
    # =========================================================================

    async def handle_webhook(self, payload: bytes, signature: Optional[str]) -> WebhookAck:
        event = await self.billing.parse_webhook(
            payload,
            signature,
            settings.stripe.STRIPE_SUBSCRIPTION_WEBHOOK_SECRET,
            allow_unverified=settings.system.is_development,
        )
        event_id = event.get("id")
        event_type = event["type"]

        if event_id and await self.redis.is_event_processed(LEDGER_SOURCE, event_id):
            await log_info(f"Duplicate subscription webhook {event_id} ignored", type_msg=TypeMsg.DEBUG)
            return WebhookAck(duplicate=True)

        obj = (event.get("data") or {}).get("object") or {}

        if event_type == "checkout.session.completed":
            await self._on_checkout_completed(obj)
        elif event_type == "customer.subscription.updated":
            await self._on_subscription_changed(obj, map_provider_status(obj.get("status")))
        elif event_type == "customer.subscription.deleted":
            await self._on_subscription_changed(obj, SubscriptionStatus.CANCELED)
        else:
            await log_info(f"Unhandled subscription webhook type: {event_type}", type_msg=TypeMsg.DEBUG)

        if event_id:
            await self.redis.mark_event_processed(
                LEDGER_SOURCE, event_id, settings.redis_ttl.WEBHOOK_EVENT_TTL
            )
        return WebhookAck()

    async def _on_checkout_completed(self, session: dict[str, Any]) -> None:
        metadata = session.get("metadata") or {}
        user_id = metadata.get("user_id") or session.get("client_reference_id")
        raw_tier = metadata.get("tier")

        try:
            tier = SubscriptionTier(raw_tier)
        except ValueError:
            tier = None
        if not user_id or tier is None or tier == SubscriptionTier.FREE:
            await log_warning(
                "Checkout session without usable user_id/tier metadata",
                extra={"session_id": session.get("id"), "tier": raw_tier},
            )
            return

        subscription = await self.repository.activate_paid(
            user_id,
            tier.value,
            stripe_customer_id=session.get("customer"),
            stripe_subscription_id=session.get("subscription"),
        )
        await log_info(
            f"Subscription activated for user {user_id}: {subscription.tier}",
            type_msg=TypeMsg.INFO,
        )

    async def _on_subscription_changed(
        self, provider_sub: dict[str, Any], status: SubscriptionStatus
    ) -> None:
        subscription_id = provider_sub.get("id")
        if not subscription_id:
            await log_warning("Subscription webhook without subscription id")
            return

        # Tier is kept on cancel; effective_tier drops to free by status
        updated = await self.repository.sync_provider_state(
            subscription_id, status.value, _period_end(provider_sub)
        )
        if updated is None:
            await log_warning(
                f"Subscription webhook for unknown subscription {subscription_id}",
                extra={"status": status.value},
            )
            return
        await log_info(
            f"Subscription {subscription_id} of user {updated.user_id} is now {status}",
            type_msg=TypeMsg.INFO,
        )
