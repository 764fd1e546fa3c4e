# tests/conftest.py
"""
Shared pytest fixtures.
"""

from __future__ import annotations

import os

# Environment must be set before eato.config is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("DB_PASSWORD", "test_password")

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from eato.shared.models.booking_dto import BookingDTO
from eato.shared.models.event_dto import EventDTO
from eato.shared.models.truck_dto import TruckDTO
from eato.shared.models.user_dto import UserDTO


NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)

OWNER_ID = "user-owner"
ORGANIZER_ID = "user-organizer"
STRANGER_ID = "user-stranger"


# =============================================================================
# PATHS
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    return project_root / "config" / "config.json"


# =============================================================================
# INFRASTRUCTURE MOCKS
# =============================================================================

@pytest.fixture
def mock_db() -> AsyncMock:
    """DatabaseManager mock."""
    db = AsyncMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="INSERT 0 1")
    db.fetchval = AsyncMock(return_value=None)
    return db


@pytest.fixture
def mock_redis() -> AsyncMock:
    """RedisClient mock with an empty webhook ledger."""
    redis = AsyncMock()
    redis.is_event_processed = AsyncMock(return_value=False)
    redis.mark_event_processed = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def mock_event_bus() -> AsyncMock:
    event_bus = AsyncMock()
    event_bus.publish = AsyncMock(return_value=None)
    event_bus.subscribe = AsyncMock(return_value=None)
    event_bus.is_connected = True
    return event_bus


@pytest.fixture
def mock_billing() -> AsyncMock:
    billing = AsyncMock()
    billing.create_payment_intent = AsyncMock(return_value={
        "id": "pi_new",
        "client_secret": "pi_new_secret",
        "amount": 12500,
        "status": "requires_payment_method",
    })
    billing.create_subscription_checkout = AsyncMock(return_value={
        "id": "cs_test",
        "url": "https://checkout.stripe.com/c/cs_test",
    })
    return billing


# =============================================================================
# MODEL FACTORIES
# =============================================================================

@pytest.fixture
def make_user() -> Callable[..., UserDTO]:
    def _make(**overrides: Any) -> UserDTO:
        data: dict[str, Any] = {
            "id": OWNER_ID,
            "email": "owner@example.com",
            "first_name": "Olga",
            "last_name": "Owner",
            "user_role": "truck_owner",
            "created_at": NOW,
            "updated_at": NOW,
        }
        data.update(overrides)
        return UserDTO(**data)
    return _make


@pytest.fixture
def make_truck() -> Callable[..., TruckDTO]:
    def _make(**overrides: Any) -> TruckDTO:
        data: dict[str, Any] = {
            "id": "truck-1",
            "owner_id": OWNER_ID,
            "name": "Taco Wheels",
            "cuisine": "Mexican",
            "created_at": NOW,
            "updated_at": NOW,
        }
        data.update(overrides)
        return TruckDTO(**data)
    return _make


@pytest.fixture
def make_event() -> Callable[..., EventDTO]:
    def _make(**overrides: Any) -> EventDTO:
        data: dict[str, Any] = {
            "id": "event-1",
            "organizer_id": ORGANIZER_ID,
            "title": "Summer Street Fair",
            "date": datetime(2026, 7, 4, 16, 0, tzinfo=timezone.utc),
            "location": "Main Street",
            "expected_headcount": 500,
            "created_at": NOW,
            "updated_at": NOW,
        }
        data.update(overrides)
        return EventDTO(**data)
    return _make


@pytest.fixture
def make_booking() -> Callable[..., BookingDTO]:
    def _make(**overrides: Any) -> BookingDTO:
        data: dict[str, Any] = {
            "id": "booking-1",
            "truck_id": "truck-1",
            "event_id": "event-1",
            "status": "pending",
            "proposed_price": "$500",
            "created_at": NOW,
            "updated_at": NOW,
        }
        data.update(overrides)
        return BookingDTO(**data)
    return _make


@pytest.fixture
def owner(make_user) -> UserDTO:
    return make_user()


@pytest.fixture
def organizer(make_user) -> UserDTO:
    return make_user(
        id=ORGANIZER_ID,
        email="organizer@example.com",
        first_name="Ivan",
        last_name="Organizer",
        user_role="event_organizer",
    )


@pytest.fixture
def truck(make_truck) -> TruckDTO:
    return make_truck()


@pytest.fixture
def event(make_event) -> EventDTO:
    return make_event()


@pytest.fixture
def booking(make_booking) -> BookingDTO:
    return make_booking()
