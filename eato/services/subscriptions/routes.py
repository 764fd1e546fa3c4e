from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from eato.services.auth.dependencies import get_current_user
from eato.services.subscriptions.dependencies import get_subscription_service
from eato.services.subscriptions.service import SubscriptionService
from eato.shared.models.booking_dto import WebhookAck
from eato.shared.models.subscription_dto import (
    CheckoutRequest,
    CheckoutSessionResponse,
    SubscriptionDTO,
)
from eato.shared.models.user_dto import UserDTO

router = APIRouter(prefix="/subscription", tags=["Subscriptions"])


@router.get("/status", response_model=SubscriptionDTO)
async def get_subscription_status(
    user: UserDTO = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.get_status(user.id)


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    request: CheckoutRequest,
    user: UserDTO = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.create_checkout_session(user, request.tier)


@router.post("/activate-free", response_model=SubscriptionDTO)
async def activate_free_tier(
    user: UserDTO = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.activate_free(user.id)


@router.post("/webhook", response_model=WebhookAck)
async def subscription_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Provider callback; the raw body is needed for signature checks."""
    payload = await request.body()
    return await service.handle_webhook(payload, stripe_signature)
