from typing import Optional

from eato.infra.database import DatabaseManager
from eato.shared.models.matching_dto import ApplicationDTO, InviteDTO

INVITE_COLUMNS = "i.id, i.event_id, i.truck_id, i.status, i.created_at, i.updated_at"
APPLICATION_COLUMNS = "a.id, a.event_id, a.truck_id, a.note, a.status, a.created_at, a.updated_at"


class MatchingRepository:
    """Invites (organizer -> truck) and applications (truck -> event)."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    # =========================================================================
    # INVITES
    # =========================================================================

    async def get_invite(self, invite_id: str) -> Optional[InviteDTO]:
        record = await self.db.fetchrow(f"SELECT {INVITE_COLUMNS} FROM invites i WHERE i.id = $1", invite_id)
        if record:
            return InviteDTO(**dict(record))
        return None

    async def has_pending_invite(self, event_id: str, truck_id: str) -> bool:
        query = """
            SELECT EXISTS(
                SELECT 1 FROM invites WHERE event_id = $1 AND truck_id = $2 AND status = 'pending'
            )
        """
        return await self.db.fetchval(query, event_id, truck_id)

    async def create_invite(self, event_id: str, truck_id: str) -> InviteDTO:
        query = """
            INSERT INTO invites (event_id, truck_id)
            VALUES ($1, $2)
            RETURNING id, event_id, truck_id, status, created_at, updated_at
        """
        record = await self.db.fetchrow(query, event_id, truck_id)
        return InviteDTO(**dict(record))

    async def list_invites_for_user(self, user_id: str) -> list[InviteDTO]:
        """Invites for trucks the user owns or events the user organizes."""
        query = f"""
            SELECT {INVITE_COLUMNS}
            FROM invites i
            JOIN trucks t ON t.id = i.truck_id
            JOIN events e ON e.id = i.event_id
            WHERE t.owner_id = $1 OR e.organizer_id = $1
            ORDER BY i.created_at DESC
        """
        records = await self.db.fetch(query, user_id)
        return [InviteDTO(**dict(r)) for r in records]

    async def update_invite_status(
        self, invite_id: str, new_status: str, expected_status: str
    ) -> Optional[InviteDTO]:
        query = """
            UPDATE invites SET status = $2, updated_at = NOW()
            WHERE id = $1 AND status = $3
            RETURNING id, event_id, truck_id, status, created_at, updated_at
        """
        record = await self.db.fetchrow(query, invite_id, new_status, expected_status)
        if record:
            return InviteDTO(**dict(record))
        return None

    # =========================================================================
    # APPLICATIONS
    # =========================================================================

    async def get_application(self, application_id: str) -> Optional[ApplicationDTO]:
        record = await self.db.fetchrow(
            f"SELECT {APPLICATION_COLUMNS} FROM applications a WHERE a.id = $1", application_id
        )
        if record:
            return ApplicationDTO(**dict(record))
        return None

    async def has_open_application(self, event_id: str, truck_id: str) -> bool:
        query = """
            SELECT EXISTS(
                SELECT 1 FROM applications WHERE event_id = $1 AND truck_id = $2 AND status = 'applied'
            )
        """
        return await self.db.fetchval(query, event_id, truck_id)

    async def create_application(self, event_id: str, truck_id: str, note: Optional[str]) -> ApplicationDTO:
        query = """
            INSERT INTO applications (event_id, truck_id, note)
            VALUES ($1, $2, $3)
            RETURNING id, event_id, truck_id, note, status, created_at, updated_at
        """
        record = await self.db.fetchrow(query, event_id, truck_id, note)
        return ApplicationDTO(**dict(record))

    async def list_applications_for_user(self, user_id: str) -> list[ApplicationDTO]:
        query = f"""
            SELECT {APPLICATION_COLUMNS}
            FROM applications a
            JOIN trucks t ON t.id = a.truck_id
            JOIN events e ON e.id = a.event_id
            WHERE t.owner_id = $1 OR e.organizer_id = $1
            ORDER BY a.created_at DESC
        """
        records = await self.db.fetch(query, user_id)
        return [ApplicationDTO(**dict(r)) for r in records]

    async def update_application_status(
        self, application_id: str, new_status: str, expected_status: str
    ) -> Optional[ApplicationDTO]:
        query = """
            UPDATE applications SET status = $2, updated_at = NOW()
            WHERE id = $1 AND status = $3
            RETURNING id, event_id, truck_id, note, status, created_at, updated_at
        """
        record = await self.db.fetchrow(query, application_id, new_status, expected_status)
        if record:
            return ApplicationDTO(**dict(record))
        return None
