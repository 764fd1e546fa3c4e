from eato.infra.billing import get_billing
from eato.infra.database import DatabaseManager
from eato.infra.redis_client import get_redis
from eato.services.subscriptions.repository import SubscriptionRepository
from eato.services.subscriptions.service import SubscriptionService


def get_subscription_repository() -> SubscriptionRepository:
    return SubscriptionRepository(DatabaseManager())


def get_subscription_service() -> SubscriptionService:
    return SubscriptionService(get_subscription_repository(), get_billing(), get_redis())
