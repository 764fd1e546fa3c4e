# eato/infra/__init__.py
"""
Infrastructure layer.
PostgreSQL, Redis, RabbitMQ, Stripe and Resend clients.
"""

from eato.infra.database import DatabaseManager, get_db
from eato.infra.redis_client import RedisClient, get_redis
from eato.infra.event_bus import EventBus, get_event_bus
from eato.infra.billing import BillingGateway, get_billing
from eato.infra.mailer import Mailer, get_mailer

__all__ = [
    "DatabaseManager",
    "get_db",
    "RedisClient",
    "get_redis",
    "EventBus",
    "get_event_bus",
    "BillingGateway",
    "get_billing",
    "Mailer",
    "get_mailer",
]
