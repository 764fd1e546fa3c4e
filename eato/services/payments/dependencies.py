from eato.infra.billing import get_billing
from eato.infra.redis_client import get_redis
from eato.services.bookings.dependencies import get_booking_repository
from eato.services.events.dependencies import get_event_repository
from eato.services.payments.service import PaymentService


def get_payment_service() -> PaymentService:
    return PaymentService(
        get_booking_repository(),
        get_event_repository(),
        get_billing(),
        get_redis(),
    )
