from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from eato.shared.models.enums import SubscriptionStatus, SubscriptionTier


class SubscriptionDTO(BaseModel):
    id: Optional[str] = None
    user_id: str
    tier: SubscriptionTier = SubscriptionTier.FREE
    status: SubscriptionStatus = SubscriptionStatus.NONE
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    current_period_end: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def is_active(self) -> bool:
        return self.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING)


class CheckoutRequest(BaseModel):
    tier: SubscriptionTier


class CheckoutSessionResponse(BaseModel):
    url: str
    session_id: str
