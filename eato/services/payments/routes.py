from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from eato.services.auth.dependencies import get_current_user
from eato.services.payments.dependencies import get_payment_service
from eato.services.payments.service import PaymentService
from eato.shared.models.booking_dto import (
    CreatePaymentIntentRequest,
    PaymentIntentResponse,
    WebhookAck,
)
from eato.shared.models.user_dto import UserDTO

router = APIRouter(tags=["Payments"])


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    request: CreatePaymentIntentRequest,
    user: UserDTO = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.create_payment_intent(user.id, request.booking_id)


@router.post("/stripe-webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    service: PaymentService = Depends(get_payment_service),
):
    payload = await request.body()
    return await service.handle_webhook(payload, stripe_signature)
