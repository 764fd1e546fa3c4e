# eato/worker/runner.py
"""
Runs the notification worker.
"""

from __future__ import annotations

import asyncio
from typing import List

from eato.worker.base import BaseWorker
from eato.worker.notifications import BookingNotificationWorker
from eato.infra.database import init_db, close_db
from eato.infra.event_bus import init_event_bus, close_event_bus
from eato.common.logger import log_info, log_error
from eato.common.constants import TypeMsg


async def run_workers(init_infra: bool = True) -> None:
    """
    Starts the workers and blocks until cancelled.

    Args:
        init_infra: Connect PostgreSQL and RabbitMQ here. main.py passes
                    False in "all" mode where the API lifespan owns them.
    """
    await log_info("Starting notification worker...", type_msg=TypeMsg.INFO)

    if init_infra:
        await init_db(apply_schema=False)
        await init_event_bus()

    workers: List[BaseWorker] = [
        BookingNotificationWorker(),
    ]

    try:
        for worker in workers:
            await worker.start()

        await log_info(f"{len(workers)} worker(s) running", type_msg=TypeMsg.INFO)

        while True:
            await asyncio.sleep(1)

    except asyncio.CancelledError:
        await log_info("Stop signal received", type_msg=TypeMsg.INFO)
    except Exception as e:
        await log_error(f"Worker runner crashed: {e}", exc_info=True)
    finally:
        for worker in workers:
            await worker.stop()

        if init_infra:
            await close_event_bus()
            await close_db()

        await log_info("Workers stopped", type_msg=TypeMsg.INFO)


def main() -> None:
    try:
        asyncio.run(run_workers())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
