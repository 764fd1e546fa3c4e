# tests/worker/test_base_worker.py
import pytest

from eato.infra.event_bus import DomainEvent
from eato.worker.base import BaseWorker


class RecordingWorker(BaseWorker):
    def __init__(self, event_bus, fail: bool = False):
        super().__init__(event_bus)
        self.fail = fail
        self.handled = []

    @property
    def name(self) -> str:
        return "recording"

    @property
    def subscriptions(self) -> list[str]:
        return ["booking.created", "booking.accepted"]

    async def handle_event(self, event: DomainEvent) -> None:
        if self.fail:
            raise RuntimeError("handler failed")
        self.handled.append(event)


@pytest.fixture
def worker(mock_event_bus):
    return RecordingWorker(mock_event_bus)


@pytest.mark.asyncio
async def test_start_subscribes_each_event_type(worker, mock_event_bus):
    await worker.start()

    assert worker.is_running is True
    assert mock_event_bus.subscribe.await_count == 2
    first = mock_event_bus.subscribe.call_args_list[0][1]
    assert first["event_type"] == "booking.created"
    assert first["handler"] == worker._on_event
    assert first["queue_name"] == "eato.recording.booking_created"


@pytest.mark.asyncio
async def test_start_twice_subscribes_once(worker, mock_event_bus):
    await worker.start()
    await worker.start()

    assert mock_event_bus.subscribe.await_count == 2


@pytest.mark.asyncio
async def test_stop(worker):
    await worker.start()
    await worker.stop()

    assert worker.is_running is False


@pytest.mark.asyncio
async def test_events_ignored_when_stopped(worker):
    await worker._on_event(DomainEvent(event_type="booking.created"))

    assert worker.handled == []


@pytest.mark.asyncio
async def test_handler_errors_are_contained(mock_event_bus):
    worker = RecordingWorker(mock_event_bus, fail=True)
    await worker.start()

    await worker._on_event(DomainEvent(event_type="booking.created"))
