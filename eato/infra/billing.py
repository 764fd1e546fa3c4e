# eato/infra/billing.py
"""
Stripe gateway.
The stripe SDK is blocking, so every call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import stripe

from eato.common.logger import log_error, log_warning
from eato.shared.errors import IntegrationError, ValidationFailed


class BillingGateway:
    """
    Thin async wrapper over the Stripe API.
    Returns plain dicts so callers never depend on SDK objects.
    """

    def __init__(self, secret_key: str, currency: str = "usd") -> None:
        self._secret_key = secret_key
        self.currency = currency

    def _require_key(self) -> None:
        if not self._secret_key:
            raise IntegrationError("Billing is not configured: STRIPE_SECRET_KEY is missing")

    async def _call(self, func, **params: Any) -> Any:
        self._require_key()
        try:
            return await asyncio.to_thread(func, api_key=self._secret_key, **params)
        except stripe.StripeError as e:
            await log_error(
                f"Stripe request failed: {e}",
                extra={"stripe_code": getattr(e, "code", None)},
            )
            raise IntegrationError(f"Billing provider error: {e.user_message or 'request failed'}") from e

    # =========================================================================
    # PAYMENT INTENTS
    # =========================================================================

    async def create_payment_intent(
        self,
        amount: int,
        metadata: dict[str, str],
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        """
        Creates a PaymentIntent for amount minor units.

        Returns:
            {"id", "client_secret", "amount", "status"}
        """
        params: dict[str, Any] = {
            "amount": amount,
            "currency": self.currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key

        intent = await self._call(stripe.PaymentIntent.create, **params)
        return {
            "id": intent["id"],
            "client_secret": intent["client_secret"],
            "amount": intent["amount"],
            "status": intent["status"],
        }

    async def retrieve_payment_intent(self, intent_id: str) -> dict[str, Any]:
        intent = await self._call(stripe.PaymentIntent.retrieve, id=intent_id)
        return {
            "id": intent["id"],
            "client_secret": intent["client_secret"],
            "amount": intent["amount"],
            "status": intent["status"],
        }

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    async def create_subscription_checkout(
        self,
        *,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        client_reference_id: str,
        customer_id: str | None = None,
        customer_email: str | None = None,
    ) -> dict[str, Any]:
        """
        Creates a hosted Checkout Session in subscription mode.

        Returns:
            {"id", "url"}
        """
        params: dict[str, Any] = {
            "mode": "subscription",
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "client_reference_id": client_reference_id,
            "metadata": metadata,
            "subscription_data": {"metadata": metadata},
        }
        if customer_id:
            params["customer"] = customer_id
        elif customer_email:
            params["customer_email"] = customer_email

        session = await self._call(stripe.checkout.Session.create, **params)
        return {"id": session["id"], "url": session["url"]}

    # =========================================================================
    # WEBHOOKS
    # =========================================================================

    @staticmethod
    async def parse_webhook(
        payload: bytes,
        signature: str | None,
        secret: str,
        allow_unverified: bool = False,
    ) -> dict[str, Any]:
        """
        Verifies and parses a webhook body.

        Without a secret the body is parsed unverified, but only when
        allow_unverified is set (development). Otherwise it is refused.

        Raises:
            ValidationFailed: bad signature or malformed body
            IntegrationError: no secret outside development
        """
        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationFailed("Webhook body is not valid UTF-8") from e

        if secret:
            if not signature:
                raise ValidationFailed("Missing Stripe-Signature header")
            try:
                stripe.WebhookSignature.verify_header(body, signature, secret)
            except stripe.SignatureVerificationError as e:
                await log_warning(f"Webhook signature verification failed: {e}")
                raise ValidationFailed("Invalid webhook signature") from e
        elif allow_unverified:
            await log_warning("Webhook secret not configured, parsing unverified payload (development only)")
        else:
            raise IntegrationError("Webhook secret is not configured")

        try:
            event = json.loads(body)
        except json.JSONDecodeError as e:
            raise ValidationFailed("Webhook body is not valid JSON") from e

        if not isinstance(event, dict) or "type" not in event:
            raise ValidationFailed("Webhook body is not a Stripe event")
        return event


_billing: BillingGateway | None = None


def get_billing() -> BillingGateway:
    """Returns the process-wide BillingGateway built from settings."""
    global _billing
    if _billing is None:
        from eato.config import settings
        _billing = BillingGateway(
            secret_key=settings.stripe.STRIPE_SECRET_KEY,
            currency=settings.stripe.CURRENCY,
        )
    return _billing
