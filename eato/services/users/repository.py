from typing import Any, Optional

from eato.infra.database import DatabaseManager
from eato.shared.models.user_dto import Identity, UserDTO

USER_COLUMNS = """
    id, email, first_name, last_name, profile_image_url, user_role,
    phone_number, bio, created_at, updated_at
"""

# Columns a profile update may touch
PROFILE_FIELDS = ("first_name", "last_name", "phone_number", "bio", "user_role")


class UserRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_user_by_id(self, user_id: str) -> Optional[UserDTO]:
        query = f"SELECT {USER_COLUMNS} FROM users WHERE id = $1"
        record = await self.db.fetchrow(query, user_id)
        if record:
            return UserDTO(**dict(record))
        return None

    async def get_users_by_ids(self, user_ids: list[str]) -> list[UserDTO]:
        query = f"SELECT {USER_COLUMNS} FROM users WHERE id = ANY($1::varchar[])"
        records = await self.db.fetch(query, user_ids)
        return [UserDTO(**dict(r)) for r in records]

    async def upsert_from_identity(self, identity: Identity) -> UserDTO:
        """
        Creates the user on first login or refreshes claim-derived fields.
        The role and profile fields edited in-app are never touched here.
        """
        query = f"""
            INSERT INTO users (id, email, first_name, last_name, profile_image_url)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (id) DO UPDATE SET
                email = COALESCE(EXCLUDED.email, users.email),
                first_name = COALESCE(users.first_name, EXCLUDED.first_name),
                last_name = COALESCE(users.last_name, EXCLUDED.last_name),
                profile_image_url = COALESCE(EXCLUDED.profile_image_url, users.profile_image_url),
                updated_at = NOW()
            RETURNING {USER_COLUMNS}
        """
        record = await self.db.fetchrow(
            query,
            identity.sub,
            identity.email,
            identity.first_name,
            identity.last_name,
            identity.profile_image_url,
        )
        return UserDTO(**dict(record))

    async def update_profile(self, user_id: str, fields: dict[str, Any]) -> Optional[UserDTO]:
        """
        Applies a partial profile update.

        When user_role is among the fields the row is only updated while
        the stored role is still unset, neutral or already equal. Returns
        None when that guard (or the id) does not match.
        """
        columns = [name for name in PROFILE_FIELDS if name in fields]
        if not columns:
            return await self.get_user_by_id(user_id)

        assignments = ", ".join(f"{name} = ${i + 2}" for i, name in enumerate(columns))
        args: list[Any] = [user_id, *(fields[name] for name in columns)]

        where = "id = $1"
        if "user_role" in fields:
            role_param = columns.index("user_role") + 2
            where += f" AND (user_role IS NULL OR user_role = 'user' OR user_role = ${role_param})"

        query = f"""
            UPDATE users
            SET {assignments}, updated_at = NOW()
            WHERE {where}
            RETURNING {USER_COLUMNS}
        """
        record = await self.db.fetchrow(query, *args)
        if record:
            return UserDTO(**dict(record))
        return None
