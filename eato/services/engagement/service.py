import asyncpg

from eato.services.engagement.repository import EngagementRepository
from eato.services.trucks.repository import TruckRepository
from eato.shared.errors import Forbidden, NotFound, ValidationFailed
from eato.shared.models.engagement_dto import (
    CreateFavoriteRequest,
    CreateFollowRequest,
    FavoriteDTO,
    FollowDTO,
    UpdateFollowRequest,
)


class EngagementService:
    def __init__(self, repository: EngagementRepository, trucks: TruckRepository):
        self.repository = repository
        self.trucks = trucks

    async def _require_truck(self, truck_id: str) -> None:
        if not await self.trucks.get_truck_by_id(truck_id):
            raise NotFound.entity("Truck")

    async def _attach_trucks(self, rows: list) -> list:
        trucks = await self.trucks.get_trucks_by_ids(list({r.truck_id for r in rows}))
        by_id = {t.id: t for t in trucks}
        for row in rows:
            row.truck = by_id.get(row.truck_id)
        return rows

    # =========================================================================
    # FAVORITES
    # =========================================================================

    async def list_favorites(self, user_id: str) -> list[FavoriteDTO]:
        return await self._attach_trucks(await self.repository.list_favorites(user_id))

    async def add_favorite(self, user_id: str, request: CreateFavoriteRequest) -> FavoriteDTO:
        await self._require_truck(request.truck_id)
        try:
            return await self.repository.add_favorite(user_id, request.truck_id)
        except asyncpg.UniqueViolationError:
            raise ValidationFailed("This truck is already in your favorites")

    async def remove_favorite(self, favorite_id: str, user_id: str) -> None:
        favorite = await self.repository.get_favorite(favorite_id)
        if not favorite:
            raise NotFound.entity("Favorite")
        if favorite.user_id != user_id:
            raise Forbidden("This favorite belongs to another user")
        await self.repository.delete_favorite(favorite_id)

    # =========================================================================
    # FOLLOWS
    # =========================================================================

    async def list_follows(self, user_id: str) -> list[FollowDTO]:
        return await self._attach_trucks(await self.repository.list_follows(user_id))

    async def follow(self, user_id: str, request: CreateFollowRequest) -> FollowDTO:
        await self._require_truck(request.truck_id)
        try:
            return await self.repository.add_follow(user_id, request.truck_id, request.alerts_enabled)
        except asyncpg.UniqueViolationError:
            raise ValidationFailed("You already follow this truck")

    async def _owned_follow(self, follow_id: str, user_id: str) -> FollowDTO:
        follow = await self.repository.get_follow(follow_id)
        if not follow:
            raise NotFound.entity("Follow")
        if follow.user_id != user_id:
            raise Forbidden("This follow belongs to another user")
        return follow

    async def update_follow(self, follow_id: str, user_id: str, request: UpdateFollowRequest) -> FollowDTO:
        await self._owned_follow(follow_id, user_id)
        updated = await self.repository.set_follow_alerts(follow_id, request.alerts_enabled)
        if not updated:
            raise NotFound.entity("Follow")
        return updated

    async def unfollow(self, follow_id: str, user_id: str) -> None:
        await self._owned_follow(follow_id, user_id)
        await self.repository.delete_follow(follow_id)
