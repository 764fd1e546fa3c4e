from typing import Optional

from eato.infra.database import DatabaseManager
from eato.shared.models.engagement_dto import FavoriteDTO, FollowDTO


class EngagementRepository:
    """Favorites and follows: one row per (user, truck)."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    # =========================================================================
    # FAVORITES
    # =========================================================================

    async def list_favorites(self, user_id: str) -> list[FavoriteDTO]:
        query = """
            SELECT id, user_id, truck_id, created_at
            FROM favorites WHERE user_id = $1
            ORDER BY created_at DESC
        """
        records = await self.db.fetch(query, user_id)
        return [FavoriteDTO(**dict(r)) for r in records]

    async def get_favorite(self, favorite_id: str) -> Optional[FavoriteDTO]:
        query = "SELECT id, user_id, truck_id, created_at FROM favorites WHERE id = $1"
        record = await self.db.fetchrow(query, favorite_id)
        if record:
            return FavoriteDTO(**dict(record))
        return None

    async def add_favorite(self, user_id: str, truck_id: str) -> FavoriteDTO:
        query = """
            INSERT INTO favorites (user_id, truck_id)
            VALUES ($1, $2)
            RETURNING id, user_id, truck_id, created_at
        """
        record = await self.db.fetchrow(query, user_id, truck_id)
        return FavoriteDTO(**dict(record))

    async def delete_favorite(self, favorite_id: str) -> None:
        await self.db.execute("DELETE FROM favorites WHERE id = $1", favorite_id)

    # =========================================================================
    # FOLLOWS
    # =========================================================================

    async def list_follows(self, user_id: str) -> list[FollowDTO]:
        query = """
            SELECT id, user_id, truck_id, alerts_enabled, created_at
            FROM follows WHERE user_id = $1
            ORDER BY created_at DESC
        """
        records = await self.db.fetch(query, user_id)
        return [FollowDTO(**dict(r)) for r in records]

    async def get_follow(self, follow_id: str) -> Optional[FollowDTO]:
        query = "SELECT id, user_id, truck_id, alerts_enabled, created_at FROM follows WHERE id = $1"
        record = await self.db.fetchrow(query, follow_id)
        if record:
            return FollowDTO(**dict(record))
        return None

    async def add_follow(self, user_id: str, truck_id: str, alerts_enabled: bool) -> FollowDTO:
        query = """
            INSERT INTO follows (user_id, truck_id, alerts_enabled)
            VALUES ($1, $2, $3)
            RETURNING id, user_id, truck_id, alerts_enabled, created_at
        """
        record = await self.db.fetchrow(query, user_id, truck_id, alerts_enabled)
        return FollowDTO(**dict(record))

    async def set_follow_alerts(self, follow_id: str, alerts_enabled: bool) -> Optional[FollowDTO]:
        query = """
            UPDATE follows SET alerts_enabled = $2
            WHERE id = $1
            RETURNING id, user_id, truck_id, alerts_enabled, created_at
        """
        record = await self.db.fetchrow(query, follow_id, alerts_enabled)
        if record:
            return FollowDTO(**dict(record))
        return None

    async def delete_follow(self, follow_id: str) -> None:
        await self.db.execute("DELETE FROM follows WHERE id = $1", follow_id)

    async def list_alert_follower_ids(self, truck_id: str) -> list[str]:
        query = "SELECT user_id FROM follows WHERE truck_id = $1 AND alerts_enabled = TRUE"
        records = await self.db.fetch(query, truck_id)
        return [r["user_id"] for r in records]
