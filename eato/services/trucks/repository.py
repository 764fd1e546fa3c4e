from datetime import date
from typing import Any, Optional

from eato.infra.database import DatabaseManager
from eato.shared.models.truck_dto import TruckAnalyticsDTO, TruckDTO, UnavailabilityDTO

TRUCK_COLUMNS = """
    id, owner_id, name, cuisine, description, images, menu_items, price_range,
    lat, lng, hours, social_links, is_active, created_at, updated_at
"""

# Columns a create/update may write
TRUCK_FIELDS = (
    "name", "cuisine", "description", "images", "menu_items", "price_range",
    "lat", "lng", "hours", "social_links", "is_active",
)


class TruckRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_truck_by_id(self, truck_id: str) -> Optional[TruckDTO]:
        query = f"SELECT {TRUCK_COLUMNS} FROM trucks WHERE id = $1"
        record = await self.db.fetchrow(query, truck_id)
        if record:
            return TruckDTO(**dict(record))
        return None

    async def get_trucks_by_ids(self, truck_ids: list[str]) -> list[TruckDTO]:
        if not truck_ids:
            return []
        query = f"SELECT {TRUCK_COLUMNS} FROM trucks WHERE id = ANY($1::varchar[])"
        records = await self.db.fetch(query, truck_ids)
        return [TruckDTO(**dict(r)) for r in records]

    async def list_active(self) -> list[TruckDTO]:
        query = f"SELECT {TRUCK_COLUMNS} FROM trucks WHERE is_active = TRUE ORDER BY created_at DESC"
        records = await self.db.fetch(query)
        return [TruckDTO(**dict(r)) for r in records]

    async def list_by_owner(self, owner_id: str) -> list[TruckDTO]:
        query = f"SELECT {TRUCK_COLUMNS} FROM trucks WHERE owner_id = $1 ORDER BY created_at DESC"
        records = await self.db.fetch(query, owner_id)
        return [TruckDTO(**dict(r)) for r in records]

    async def count_by_owner(self, owner_id: str) -> int:
        return await self.db.fetchval("SELECT COUNT(*) FROM trucks WHERE owner_id = $1", owner_id)

    async def create_truck(self, owner_id: str, fields: dict[str, Any]) -> TruckDTO:
        columns = [name for name in TRUCK_FIELDS if name in fields]
        placeholders = ", ".join(f"${i + 2}" for i in range(len(columns)))
        query = f"""
            INSERT INTO trucks (owner_id, {", ".join(columns)})
            VALUES ($1, {placeholders})
            RETURNING {TRUCK_COLUMNS}
        """
        record = await self.db.fetchrow(query, owner_id, *(fields[name] for name in columns))
        return TruckDTO(**dict(record))

    async def update_truck(self, truck_id: str, fields: dict[str, Any]) -> Optional[TruckDTO]:
        columns = [name for name in TRUCK_FIELDS if name in fields]
        if not columns:
            return await self.get_truck_by_id(truck_id)

        assignments = ", ".join(f"{name} = ${i + 2}" for i, name in enumerate(columns))
        query = f"""
            UPDATE trucks
            SET {assignments}, updated_at = NOW()
            WHERE id = $1
            RETURNING {TRUCK_COLUMNS}
        """
        record = await self.db.fetchrow(query, truck_id, *(fields[name] for name in columns))
        if record:
            return TruckDTO(**dict(record))
        return None

    async def delete_truck(self, truck_id: str) -> None:
        await self.db.execute("DELETE FROM trucks WHERE id = $1", truck_id)

    # =========================================================================
    # UNAVAILABILITY
    # =========================================================================

    async def list_unavailability(self, truck_id: str) -> list[UnavailabilityDTO]:
        query = """
            SELECT id, truck_id, blocked_date, reason, created_at
            FROM truck_unavailability
            WHERE truck_id = $1
            ORDER BY blocked_date
        """
        records = await self.db.fetch(query, truck_id)
        return [UnavailabilityDTO(**dict(r)) for r in records]

    async def get_unavailability(self, unavailability_id: str) -> Optional[UnavailabilityDTO]:
        query = """
            SELECT id, truck_id, blocked_date, reason, created_at
            FROM truck_unavailability
            WHERE id = $1
        """
        record = await self.db.fetchrow(query, unavailability_id)
        if record:
            return UnavailabilityDTO(**dict(record))
        return None

    async def add_unavailability(
        self, truck_id: str, blocked_date: date, reason: Optional[str]
    ) -> UnavailabilityDTO:
        query = """
            INSERT INTO truck_unavailability (truck_id, blocked_date, reason)
            VALUES ($1, $2, $3)
            RETURNING id, truck_id, blocked_date, reason, created_at
        """
        record = await self.db.fetchrow(query, truck_id, blocked_date, reason)
        return UnavailabilityDTO(**dict(record))

    async def delete_unavailability(self, unavailability_id: str) -> None:
        await self.db.execute("DELETE FROM truck_unavailability WHERE id = $1", unavailability_id)

    async def is_blocked_on(self, truck_id: str, day: date) -> bool:
        query = """
            SELECT EXISTS(
                SELECT 1 FROM truck_unavailability WHERE truck_id = $1 AND blocked_date = $2
            )
        """
        return await self.db.fetchval(query, truck_id, day)

    # =========================================================================
    # ANALYTICS
    # =========================================================================

    async def get_analytics(self, truck_id: str) -> TruckAnalyticsDTO:
        query = """
            SELECT
                (SELECT COUNT(*) FROM follows WHERE truck_id = $1) AS followers,
                (SELECT COUNT(*) FROM favorites WHERE truck_id = $1) AS favorites,
                (SELECT COUNT(*) FROM invites WHERE truck_id = $1) AS invites,
                (SELECT COUNT(*) FROM applications WHERE truck_id = $1) AS applications
        """
        record = await self.db.fetchrow(query, truck_id)
        return TruckAnalyticsDTO(truck_id=truck_id, **dict(record))
