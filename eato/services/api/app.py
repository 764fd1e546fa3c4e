# eato/services/api/app.py
"""
FastAPI application for the Eato marketplace.

All resources are mounted under /api:
- /api/auth/user, /api/profile
- /api/trucks, /api/unavailability, /api/truck/analytics
- /api/events
- /api/bookings
- /api/create-payment-intent, /api/stripe-webhook
- /api/subscription/*
- /api/favorites, /api/follows
- /api/schedules, /api/updates
- /api/invites, /api/applications
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eato.config import settings
from eato.common.logger import log_error, log_info, log_warning, setup_logging
from eato.common.constants import TypeMsg
from eato.infra.database import close_db, get_db, init_db
from eato.infra.event_bus import close_event_bus, get_event_bus, init_event_bus
from eato.infra.redis_client import close_redis, get_redis, init_redis
from eato.services.bookings.routes import router as bookings_router
from eato.services.engagement.routes import router as engagement_router
from eato.services.events.routes import router as events_router
from eato.services.matching.routes import router as matching_router
from eato.services.payments.routes import router as payments_router
from eato.services.posts.routes import router as posts_router
from eato.services.subscriptions.routes import router as subscriptions_router
from eato.services.trucks.routes import router as trucks_router
from eato.services.users.routes import router as users_router
from eato.shared.errors import EatoError
from eato.shared.models.common import HealthStatus

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    await init_redis()
    await init_event_bus()
    await log_info("Eato API started", type_msg=TypeMsg.INFO)
    yield
    await close_event_bus()
    await close_redis()
    await close_db()
    await log_info("Eato API stopped", type_msg=TypeMsg.INFO)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(EatoError)
    async def eato_error_handler(request: Request, exc: EatoError) -> JSONResponse:
        if exc.status_code >= 500:
            await log_error(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        await log_warning(
            f"Validation error on {request.method} {request.url.path}",
            extra={"errors": jsonable_encoder(exc.errors())},
        )
        return JSONResponse(
            status_code=400,
            content={"message": "Validation error", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        await log_error(
            f"Unhandled error on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(use_lifespan: bool = True) -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="Eato API",
        version=settings.system.VERSION,
        lifespan=lifespan if use_lifespan else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.domain.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        await log_info(
            f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms",
            type_msg=TypeMsg.DEBUG,
        )
        return response

    register_exception_handlers(app)

    for router in (
        users_router,
        trucks_router,
        events_router,
        bookings_router,
        payments_router,
        subscriptions_router,
        engagement_router,
        posts_router,
        matching_router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check() -> HealthStatus:
        checks = {
            "postgres": await get_db().health_check(),
            "redis": await get_redis().health_check(),
            "rabbitmq": await get_event_bus().health_check(),
        }
        return HealthStatus(
            service="api",
            status="healthy" if all(checks.values()) else "degraded",
            version=settings.system.VERSION,
            dependencies={name: "healthy" if ok else "unhealthy" for name, ok in checks.items()},
        )

    return app


app = create_app()
