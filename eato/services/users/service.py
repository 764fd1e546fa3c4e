from typing import Optional

import asyncpg

from eato.common.logger import log_info, log_warning
from eato.common.constants import TypeMsg
from eato.services.users.repository import UserRepository
from eato.services.users.state_machine import RoleStateMachine
from eato.shared.errors import Forbidden, NotFound, ValidationFailed
from eato.shared.models.user_dto import Identity, UpdateProfileRequest, UserDTO


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def get_user(self, user_id: str) -> Optional[UserDTO]:
        return await self.repository.get_user_by_id(user_id)

    async def get_or_create(self, identity: Identity) -> UserDTO:
        """Returns the caller's row, creating it on first login."""
        user = await self.repository.get_user_by_id(identity.sub)
        if user:
            return user
        await log_info(f"First login for user {identity.sub}", type_msg=TypeMsg.INFO)
        return await self.sync_user(identity)

    async def sync_user(self, identity: Identity) -> UserDTO:
        """Upserts claim-derived fields (email, names, avatar)."""
        try:
            return await self.repository.upsert_from_identity(identity)
        except asyncpg.UniqueViolationError:
            await log_warning(
                f"Email of user {identity.sub} already belongs to another account",
                extra={"email": identity.email},
            )
            raise ValidationFailed("This email is already linked to another account")

    async def update_profile(self, user_id: str, request: UpdateProfileRequest) -> UserDTO:
        user = await self.repository.get_user_by_id(user_id)
        if not user:
            raise NotFound.entity("User")

        fields = request.model_dump(exclude_unset=True, exclude={"user_role"})
        new_role = RoleStateMachine.apply(user.user_role, request.user_role)
        if new_role != user.user_role:
            fields["user_role"] = new_role.value

        updated = await self.repository.update_profile(user_id, fields)
        if updated is None:
            # Role was set by a concurrent request between read and write
            raise Forbidden("Role is already set and cannot be changed")

        if "user_role" in fields:
            await log_info(f"User {user_id} chose role {new_role}", type_msg=TypeMsg.INFO)
        return updated
