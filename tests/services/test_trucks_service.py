# tests/services/test_trucks_service.py
"""
Tests for trucks, unavailability and tier gating.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

import asyncpg
import pytest

from eato.services.trucks.service import TruckService
from eato.shared.errors import Forbidden, NotFound, ValidationFailed
from eato.shared.models.enums import SubscriptionTier
from eato.shared.models.truck_dto import (
    CreateTruckRequest,
    CreateUnavailabilityRequest,
    TruckAnalyticsDTO,
    UnavailabilityDTO,
    UpdateTruckRequest,
)

OWNER_ID = "user-owner"
STRANGER_ID = "user-stranger"
NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo():
    return AsyncMock()


@pytest.fixture
def subscriptions():
    subscriptions = AsyncMock()
    subscriptions.effective_tier.return_value = SubscriptionTier.FREE
    return subscriptions


@pytest.fixture
def service(repo, subscriptions):
    return TruckService(repo, subscriptions)


class TestCreateTruck:
    @pytest.mark.asyncio
    async def test_first_truck_on_free_plan(self, service, repo, truck) -> None:
        repo.count_by_owner.return_value = 0
        repo.create_truck.return_value = truck

        created = await service.create_truck(OWNER_ID, CreateTruckRequest(name="Taco Wheels", cuisine="Mexican"))

        assert created is truck
        owner_id, fields = repo.create_truck.call_args[0]
        assert owner_id == OWNER_ID
        assert fields["name"] == "Taco Wheels"

    @pytest.mark.asyncio
    async def test_free_plan_limit(self, service, repo) -> None:
        repo.count_by_owner.return_value = 1

        with pytest.raises(Forbidden):
            await service.create_truck(OWNER_ID, CreateTruckRequest(name="Second", cuisine="BBQ"))
        repo.create_truck.assert_not_called()

    @pytest.mark.asyncio
    async def test_paid_plan_has_no_limit(self, service, repo, subscriptions, truck) -> None:
        subscriptions.effective_tier.return_value = SubscriptionTier.BASIC
        repo.create_truck.return_value = truck

        await service.create_truck(OWNER_ID, CreateTruckRequest(name="Second", cuisine="BBQ"))

        repo.count_by_owner.assert_not_called()
        repo.create_truck.assert_awaited_once()


class TestOwnership:
    @pytest.mark.asyncio
    async def test_missing_truck_is_404_before_ownership(self, service, repo) -> None:
        repo.get_truck_by_id.return_value = None

        with pytest.raises(NotFound):
            await service.update_truck("missing", STRANGER_ID, UpdateTruckRequest(name="X"))

    @pytest.mark.asyncio
    async def test_non_owner_update(self, service, repo, truck) -> None:
        repo.get_truck_by_id.return_value = truck

        with pytest.raises(Forbidden):
            await service.update_truck(truck.id, STRANGER_ID, UpdateTruckRequest(name="X"))
        repo.update_truck.assert_not_called()

    @pytest.mark.asyncio
    async def test_partial_update_sends_only_given_fields(self, service, repo, truck) -> None:
        repo.get_truck_by_id.return_value = truck
        repo.update_truck.return_value = truck

        await service.update_truck(truck.id, OWNER_ID, UpdateTruckRequest(is_active=False))

        assert repo.update_truck.call_args[0][1] == {"is_active": False}

    @pytest.mark.asyncio
    async def test_delete_with_bookings(self, service, repo, truck) -> None:
        repo.get_truck_by_id.return_value = truck
        repo.delete_truck.side_effect = asyncpg.ForeignKeyViolationError("bookings_truck_id_fkey")

        with pytest.raises(ValidationFailed):
            await service.delete_truck(truck.id, OWNER_ID)


class TestUnavailability:
    @pytest.mark.asyncio
    async def test_owner_blocks_date(self, service, repo, truck) -> None:
        repo.get_truck_by_id.return_value = truck
        entry = UnavailabilityDTO(id="u-1", truck_id=truck.id, blocked_date=date(2026, 7, 4), created_at=NOW)
        repo.add_unavailability.return_value = entry

        result = await service.add_unavailability(
            truck.id, OWNER_ID, CreateUnavailabilityRequest(blocked_date=date(2026, 7, 4), reason="Maintenance")
        )

        assert result is entry
        repo.add_unavailability.assert_awaited_once_with(truck.id, date(2026, 7, 4), "Maintenance")

    @pytest.mark.asyncio
    async def test_delete_entry_of_foreign_truck(self, service, repo, truck) -> None:
        repo.get_unavailability.return_value = UnavailabilityDTO(
            id="u-1", truck_id=truck.id, blocked_date=date(2026, 7, 4), created_at=NOW
        )
        repo.get_truck_by_id.return_value = truck

        with pytest.raises(Forbidden):
            await service.delete_unavailability("u-1", STRANGER_ID)
        repo.delete_unavailability.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_missing_entry(self, service, repo) -> None:
        repo.get_unavailability.return_value = None

        with pytest.raises(NotFound):
            await service.delete_unavailability("u-404", OWNER_ID)


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_truck_id_required(self, service) -> None:
        with pytest.raises(ValidationFailed):
            await service.get_analytics(None, OWNER_ID)

    @pytest.mark.asyncio
    async def test_owner_reads_counts(self, service, repo, truck) -> None:
        repo.get_truck_by_id.return_value = truck
        repo.get_analytics.return_value = TruckAnalyticsDTO(truck_id=truck.id, followers=3, favorites=5)

        analytics = await service.get_analytics(truck.id, OWNER_ID)

        assert analytics.followers == 3
        assert analytics.favorites == 5
