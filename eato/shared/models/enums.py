from enum import Enum


class UserRole(str, Enum):
    """User roles."""
    TRUCK_OWNER = "truck_owner"
    EVENT_ORGANIZER = "event_organizer"
    USER = "user"

    def __str__(self) -> str:
        return self.value


class BookingStatus(str, Enum):
    """Booking lifecycle states."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


class PaymentStatus(str, Enum):
    """Deposit payment states of a booking."""
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"

    def __str__(self) -> str:
        return self.value


class SubscriptionTier(str, Enum):
    """Subscription plan levels."""
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"

    def __str__(self) -> str:
        return self.value


class SubscriptionStatus(str, Enum):
    """Subscription states mirrored from the billing provider."""
    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"
    INCOMPLETE = "incomplete"
    TRIALING = "trialing"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


class InviteStatus(str, Enum):
    """Organizer-initiated invite states."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

    def __str__(self) -> str:
        return self.value


class ApplicationStatus(str, Enum):
    """Truck-initiated application states."""
    APPLIED = "applied"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value
