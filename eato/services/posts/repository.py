from typing import Optional

from eato.infra.database import DatabaseManager
from eato.shared.models.engagement_dto import (
    CreateScheduleRequest,
    CreateTruckUpdateRequest,
    ScheduleDTO,
    TruckUpdateDTO,
)

SCHEDULE_COLUMNS = "id, truck_id, title, date, start_time, end_time, lat, lng, note, created_at"
UPDATE_COLUMNS = "id, truck_id, title, content, created_at"


class PostRepository:
    """Truck-owned posts: schedules and updates."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def list_schedules(self, truck_id: str) -> list[ScheduleDTO]:
        query = f"SELECT {SCHEDULE_COLUMNS} FROM schedules WHERE truck_id = $1 ORDER BY date, start_time"
        records = await self.db.fetch(query, truck_id)
        return [ScheduleDTO(**dict(r)) for r in records]

    async def get_schedule(self, schedule_id: str) -> Optional[ScheduleDTO]:
        record = await self.db.fetchrow(f"SELECT {SCHEDULE_COLUMNS} FROM schedules WHERE id = $1", schedule_id)
        if record:
            return ScheduleDTO(**dict(record))
        return None

    async def create_schedule(self, request: CreateScheduleRequest) -> ScheduleDTO:
        query = f"""
            INSERT INTO schedules (truck_id, title, date, start_time, end_time, lat, lng, note)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING {SCHEDULE_COLUMNS}
        """
        record = await self.db.fetchrow(
            query,
            request.truck_id,
            request.title,
            request.date,
            request.start_time,
            request.end_time,
            request.lat,
            request.lng,
            request.note,
        )
        return ScheduleDTO(**dict(record))

    async def delete_schedule(self, schedule_id: str) -> None:
        await self.db.execute("DELETE FROM schedules WHERE id = $1", schedule_id)

    async def list_updates(self, truck_id: str) -> list[TruckUpdateDTO]:
        query = f"SELECT {UPDATE_COLUMNS} FROM updates WHERE truck_id = $1 ORDER BY created_at DESC"
        records = await self.db.fetch(query, truck_id)
        return [TruckUpdateDTO(**dict(r)) for r in records]

    async def get_update(self, update_id: str) -> Optional[TruckUpdateDTO]:
        record = await self.db.fetchrow(f"SELECT {UPDATE_COLUMNS} FROM updates WHERE id = $1", update_id)
        if record:
            return TruckUpdateDTO(**dict(record))
        return None

    async def create_update(self, request: CreateTruckUpdateRequest) -> TruckUpdateDTO:
        query = f"""
            INSERT INTO updates (truck_id, title, content)
            VALUES ($1, $2, $3)
            RETURNING {UPDATE_COLUMNS}
        """
        record = await self.db.fetchrow(query, request.truck_id, request.title, request.content)
        return TruckUpdateDTO(**dict(record))

    async def delete_update(self, update_id: str) -> None:
        await self.db.execute("DELETE FROM updates WHERE id = $1", update_id)
