from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from eato.shared.models.enums import BookingStatus, PaymentStatus
from eato.shared.models.event_dto import EventDTO
from eato.shared.models.truck_dto import TruckDTO


class BookingDTO(BaseModel):
    id: str
    truck_id: str
    event_id: str
    status: BookingStatus = BookingStatus.PENDING
    message: Optional[str] = None
    proposed_price: Optional[str] = None
    organizer_notes: Optional[str] = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_intent_id: Optional[str] = None
    deposit_amount: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookingDetailsDTO(BookingDTO):
    """Booking with its truck and event attached."""
    truck: Optional[TruckDTO] = None
    event: Optional[EventDTO] = None


class CreateBookingRequest(BaseModel):
    truck_id: str = Field(min_length=1)
    event_id: str = Field(min_length=1)
    message: Optional[str] = Field(default=None, max_length=5000)
    proposed_price: Optional[str] = Field(default=None, max_length=200)


class UpdateBookingStatusRequest(BaseModel):
    status: BookingStatus
    organizer_notes: Optional[str] = Field(default=None, max_length=5000)


class CreatePaymentIntentRequest(BaseModel):
    booking_id: str = Field(min_length=1)


class PaymentIntentResponse(BaseModel):
    client_secret: str
    amount: int
    payment_intent_id: str


class WebhookAck(BaseModel):
    received: Literal[True] = True
    duplicate: bool = False
