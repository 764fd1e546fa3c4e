from typing import Optional

import asyncpg

from eato.common.logger import log_info
from eato.common.constants import TypeMsg
from eato.config import settings
from eato.services.subscriptions.service import SubscriptionService
from eato.services.trucks.repository import TruckRepository
from eato.shared.errors import Forbidden, NotFound, ValidationFailed
from eato.shared.models.enums import SubscriptionTier
from eato.shared.models.truck_dto import (
    CreateTruckRequest,
    CreateUnavailabilityRequest,
    TruckAnalyticsDTO,
    TruckDTO,
    UnavailabilityDTO,
    UpdateTruckRequest,
)


class TruckService:
    def __init__(self, repository: TruckRepository, subscriptions: SubscriptionService):
        self.repository = repository
        self.subscriptions = subscriptions

    async def list_trucks(self) -> list[TruckDTO]:
        return await self.repository.list_active()

    async def list_my_trucks(self, owner_id: str) -> list[TruckDTO]:
        return await self.repository.list_by_owner(owner_id)

    async def get_truck(self, truck_id: str) -> TruckDTO:
        truck = await self.repository.get_truck_by_id(truck_id)
        if not truck:
            raise NotFound.entity("Truck")
        return truck

    async def get_owned_truck(self, truck_id: str, user_id: str) -> TruckDTO:
        """404 when the truck is absent, 403 when it belongs to someone else."""
        truck = await self.get_truck(truck_id)
        if truck.owner_id != user_id:
            raise Forbidden("You do not own this truck")
        return truck

    async def create_truck(self, owner_id: str, request: CreateTruckRequest) -> TruckDTO:
        tier = await self.subscriptions.effective_tier(owner_id)
        if tier == SubscriptionTier.FREE:
            limit = settings.tiers.FREE_TRUCK_LIMIT
            owned = await self.repository.count_by_owner(owner_id)
            if owned >= limit:
                raise Forbidden(
                    f"The free plan allows {limit} truck(s). Upgrade to Basic or Pro to add more"
                )

        truck = await self.repository.create_truck(owner_id, request.model_dump())
        await log_info(f"Truck {truck.id} created by {owner_id}", type_msg=TypeMsg.INFO)
        return truck

    async def update_truck(self, truck_id: str, user_id: str, request: UpdateTruckRequest) -> TruckDTO:
        await self.get_owned_truck(truck_id, user_id)
        updated = await self.repository.update_truck(truck_id, request.model_dump(exclude_unset=True))
        if not updated:
            raise NotFound.entity("Truck")
        return updated

    async def delete_truck(self, truck_id: str, user_id: str) -> None:
        await self.get_owned_truck(truck_id, user_id)
        try:
            await self.repository.delete_truck(truck_id)
        except asyncpg.ForeignKeyViolationError:
            raise ValidationFailed(
                "This truck has bookings and cannot be deleted. Deactivate it instead"
            )
        await log_info(f"Truck {truck_id} deleted by {user_id}", type_msg=TypeMsg.INFO)

    # =========================================================================
    # UNAVAILABILITY
    # =========================================================================

    async def list_unavailability(self, truck_id: str) -> list[UnavailabilityDTO]:
        await self.get_truck(truck_id)
        return await self.repository.list_unavailability(truck_id)

    async def add_unavailability(
        self, truck_id: str, user_id: str, request: CreateUnavailabilityRequest
    ) -> UnavailabilityDTO:
        await self.get_owned_truck(truck_id, user_id)
        return await self.repository.add_unavailability(truck_id, request.blocked_date, request.reason)

    async def delete_unavailability(self, unavailability_id: str, user_id: str) -> None:
        entry = await self.repository.get_unavailability(unavailability_id)
        if not entry:
            raise NotFound.entity("Unavailability entry")
        await self.get_owned_truck(entry.truck_id, user_id)
        await self.repository.delete_unavailability(unavailability_id)

    async def get_analytics(self, truck_id: Optional[str], user_id: str) -> TruckAnalyticsDTO:
        if not truck_id:
            raise ValidationFailed("truck_id is required")
        await self.get_owned_truck(truck_id, user_id)
        return await self.repository.get_analytics(truck_id)
