"""
Shared DTOs and pydantic models.
"""

from eato.shared.models.enums import (
    UserRole,
    BookingStatus,
    PaymentStatus,
    SubscriptionTier,
    SubscriptionStatus,
    InviteStatus,
    ApplicationStatus,
)
from eato.shared.models.user_dto import UserDTO, Identity
from eato.shared.models.truck_dto import TruckDTO, UnavailabilityDTO
from eato.shared.models.event_dto import EventDTO
from eato.shared.models.booking_dto import BookingDTO, BookingDetailsDTO
from eato.shared.models.subscription_dto import SubscriptionDTO
from eato.shared.models.common import ErrorResponse, HealthStatus

__all__ = [
    "UserRole",
    "BookingStatus",
    "PaymentStatus",
    "SubscriptionTier",
    "SubscriptionStatus",
    "InviteStatus",
    "ApplicationStatus",
    "UserDTO",
    "Identity",
    "TruckDTO",
    "UnavailabilityDTO",
    "EventDTO",
    "BookingDTO",
    "BookingDetailsDTO",
    "SubscriptionDTO",
    "ErrorResponse",
    "HealthStatus",
]
