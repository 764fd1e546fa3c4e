#!/usr/bin/env python3
# main.py
"""
Main entry point for Eato.
Starts the API, the notification worker or both, depending on COMPONENT_MODE.
"""

from __future__ import annotations

import asyncio
import signal

from eato.config import settings
from eato.common.logger import setup_logging, log_info, log_error
from eato.common.constants import TypeMsg
from eato.infra.database import init_db, close_db
from eato.infra.redis_client import init_redis, close_redis
from eato.infra.event_bus import init_event_bus, close_event_bus

VALID_MODES = ("api", "notifications", "all")

_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []


def setup_signal_handlers() -> None:
    """Cancels running components on SIGINT/SIGTERM."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nStop signal received (sig={sig}), shutting down...")
            _shutdown_event.set()
            for task in _running_tasks:
                if not task.done():
                    task.cancel()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows has no add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


async def init_infrastructure() -> None:
    await log_info("Initializing infrastructure...", type_msg=TypeMsg.INFO)
    await init_db()
    await init_redis()
    await init_event_bus()
    await log_info("Infrastructure initialized", type_msg=TypeMsg.INFO)


async def close_infrastructure() -> None:
    await close_event_bus()
    await close_redis()
    await close_db()
    await log_info("Connections closed", type_msg=TypeMsg.INFO)


async def run_api(manage_infra: bool = True) -> None:
    """
    Serves the HTTP API with uvicorn.

    Args:
        manage_infra: When False the caller owns the connections and the
                      app is built without its lifespan.
    """
    import uvicorn
    from eato.services.api.app import create_app

    await log_info(
        f"Starting API on {settings.deployment.API_HOST}:{settings.deployment.API_PORT}",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        create_app(use_lifespan=manage_infra),
        host=settings.deployment.API_HOST,
        port=settings.deployment.API_PORT,
        log_level="debug" if settings.system.DEBUG else "info",
    )
    server = uvicorn.Server(config)
    await server.serve()


async def run_notifications(init_infra: bool = True) -> None:
    from eato.worker.runner import run_workers

    await run_workers(init_infra=init_infra)


async def main(mode: str | None = None) -> None:
    """
    Args:
        mode: api, notifications or all. Falls back to COMPONENT_MODE.
    """
    global _running_tasks

    setup_logging()
    setup_signal_handlers()

    mode = mode or settings.system.COMPONENT_MODE
    if mode not in VALID_MODES:
        await log_error(f"Unknown mode '{mode}', expected one of {', '.join(VALID_MODES)}")
        return

    await log_info(
        f"Eato v{settings.system.VERSION} starting in '{mode}' mode ({settings.system.ENVIRONMENT})",
        type_msg=TypeMsg.INFO,
    )

    if mode == "api":
        await run_api()
        return

    if mode == "notifications":
        await run_notifications()
        return

    # all: one set of connections shared by the API and the worker
    await init_infrastructure()
    _running_tasks = [
        asyncio.create_task(run_api(manage_infra=False)),
        asyncio.create_task(run_notifications(init_infra=False)),
    ]
    try:
        await asyncio.gather(*_running_tasks, return_exceptions=True)
    except asyncio.CancelledError:
        for task in _running_tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*_running_tasks, return_exceptions=True)
        raise
    finally:
        await close_infrastructure()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
