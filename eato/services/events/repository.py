from typing import Any, Optional

from eato.infra.database import DatabaseManager
from eato.shared.models.event_dto import EventDTO

EVENT_COLUMNS = """
    id, organizer_id, title, description, date, location, lat, lng,
    expected_headcount, cuisines_needed, trucks_needed, budget, event_type,
    images, is_active, created_at, updated_at
"""

EVENT_FIELDS = (
    "title", "description", "date", "location", "lat", "lng", "expected_headcount",
    "cuisines_needed", "trucks_needed", "budget", "event_type", "images", "is_active",
)


class EventRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_event_by_id(self, event_id: str) -> Optional[EventDTO]:
        query = f"SELECT {EVENT_COLUMNS} FROM events WHERE id = $1"
        record = await self.db.fetchrow(query, event_id)
        if record:
            return EventDTO(**dict(record))
        return None

    async def get_events_by_ids(self, event_ids: list[str]) -> list[EventDTO]:
        if not event_ids:
            return []
        query = f"SELECT {EVENT_COLUMNS} FROM events WHERE id = ANY($1::varchar[])"
        records = await self.db.fetch(query, event_ids)
        return [EventDTO(**dict(r)) for r in records]

    async def list_active(self) -> list[EventDTO]:
        query = f"SELECT {EVENT_COLUMNS} FROM events WHERE is_active = TRUE ORDER BY date"
        records = await self.db.fetch(query)
        return [EventDTO(**dict(r)) for r in records]

    async def list_by_organizer(self, organizer_id: str) -> list[EventDTO]:
        query = f"SELECT {EVENT_COLUMNS} FROM events WHERE organizer_id = $1 ORDER BY date"
        records = await self.db.fetch(query, organizer_id)
        return [EventDTO(**dict(r)) for r in records]

    async def create_event(self, organizer_id: str, fields: dict[str, Any]) -> EventDTO:
        columns = [name for name in EVENT_FIELDS if name in fields]
        placeholders = ", ".join(f"${i + 2}" for i in range(len(columns)))
        query = f"""
            INSERT INTO events (organizer_id, {", ".join(columns)})
            VALUES ($1, {placeholders})
            RETURNING {EVENT_COLUMNS}
        """
        record = await self.db.fetchrow(query, organizer_id, *(fields[name] for name in columns))
        return EventDTO(**dict(record))

    async def update_event(self, event_id: str, fields: dict[str, Any]) -> Optional[EventDTO]:
        columns = [name for name in EVENT_FIELDS if name in fields]
        if not columns:
            return await self.get_event_by_id(event_id)

        assignments = ", ".join(f"{name} = ${i + 2}" for i, name in enumerate(columns))
        query = f"""
            UPDATE events
            SET {assignments}, updated_at = NOW()
            WHERE id = $1
            RETURNING {EVENT_COLUMNS}
        """
        record = await self.db.fetchrow(query, event_id, *(fields[name] for name in columns))
        if record:
            return EventDTO(**dict(record))
        return None

    async def delete_event(self, event_id: str) -> None:
        await self.db.execute("DELETE FROM events WHERE id = $1", event_id)
