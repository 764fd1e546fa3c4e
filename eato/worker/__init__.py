# eato/worker/__init__.py
"""
Background workers consuming domain events from RabbitMQ.
"""

from eato.worker.base import BaseWorker
from eato.worker.notifications import BookingNotificationWorker

__all__ = ["BaseWorker", "BookingNotificationWorker"]
