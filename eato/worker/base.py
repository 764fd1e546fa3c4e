# eato/worker/base.py
"""
Base class for event-bus workers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from eato.infra.event_bus import DomainEvent, EventBus, get_event_bus
from eato.common.logger import log_error, log_info
from eato.common.constants import TypeMsg


class BaseWorker(ABC):
    """
    Subscribes to a set of event types and handles each event.
    A failing handler is logged; the message is still acknowledged.
    """

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self.event_bus = event_bus or get_event_bus()
        self._running = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Worker name used in logs."""

    @property
    @abstractmethod
    def subscriptions(self) -> List[str]:
        """Event types to subscribe to."""

    @abstractmethod
    async def handle_event(self, event: DomainEvent) -> None:
        """Handles a single event."""

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return

        self._running = True
        await log_info(f"Worker {self.name} starting...", type_msg=TypeMsg.INFO)

        for event_type in self.subscriptions:
            await self.event_bus.subscribe(
                event_type=event_type,
                handler=self._on_event,
                queue_name=f"eato.{self.name}.{event_type.replace('.', '_')}",
            )
            await log_info(f"Worker {self.name} subscribed to {event_type}", type_msg=TypeMsg.DEBUG)

        await log_info(f"Worker {self.name} started", type_msg=TypeMsg.INFO)

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        await log_info(f"Worker {self.name} stopped", type_msg=TypeMsg.INFO)

    async def _on_event(self, event: DomainEvent) -> None:
        if not self._running:
            return

        try:
            await log_info(
                f"Worker {self.name} received {event.event_type}",
                type_msg=TypeMsg.DEBUG,
            )
            await self.handle_event(event)
        except Exception as e:
            await log_error(
                f"Worker {self.name} failed on {event.event_type}: {e}",
                extra={"event_type": event.event_type, "payload": event.payload},
                exc_info=True,
            )
