# tests/services/test_users_service.py
"""
Tests for the user service and the one-time role choice.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import asyncpg
import pytest

from eato.services.users.service import UserService
from eato.services.users.state_machine import RoleStateMachine
from eato.shared.errors import Forbidden, NotFound, ValidationFailed
from eato.shared.models.enums import UserRole
from eato.shared.models.user_dto import Identity, UpdateProfileRequest


class TestRoleStateMachine:
    @pytest.mark.parametrize("current", [None, "user"])
    @pytest.mark.parametrize("new", ["truck_owner", "event_organizer"])
    def test_unset_or_neutral_can_choose(self, current, new) -> None:
        assert RoleStateMachine.can_transition(current, new) is True

    def test_chosen_role_is_terminal(self) -> None:
        assert RoleStateMachine.can_transition("truck_owner", "event_organizer") is False
        assert RoleStateMachine.can_transition("event_organizer", "truck_owner") is False
        assert RoleStateMachine.can_transition("truck_owner", "user") is False

    def test_same_role_is_allowed(self) -> None:
        assert RoleStateMachine.can_transition("truck_owner", "truck_owner") is True

    def test_unknown_role(self) -> None:
        assert RoleStateMachine.can_transition(None, "admin") is False

    def test_apply_without_requested_role_keeps_current(self) -> None:
        assert RoleStateMachine.apply(UserRole.TRUCK_OWNER, None) == UserRole.TRUCK_OWNER

    def test_apply_refuses_role_change(self) -> None:
        with pytest.raises(Forbidden):
            RoleStateMachine.apply(UserRole.TRUCK_OWNER, "event_organizer")


@pytest.fixture
def repo():
    return AsyncMock()


@pytest.fixture
def service(repo):
    return UserService(repo)


class TestUserService:
    @pytest.mark.asyncio
    async def test_get_or_create_returns_existing(self, service, repo, owner) -> None:
        repo.get_user_by_id.return_value = owner

        user = await service.get_or_create(Identity(sub=owner.id))

        assert user is owner
        repo.upsert_from_identity.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_or_create_first_login(self, service, repo, owner) -> None:
        repo.get_user_by_id.return_value = None
        repo.upsert_from_identity.return_value = owner

        user = await service.get_or_create(Identity(sub=owner.id, email=owner.email))

        assert user == owner
        repo.upsert_from_identity.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_sync_user_email_conflict(self, service, repo) -> None:
        repo.upsert_from_identity.side_effect = asyncpg.UniqueViolationError("users_email_key")

        with pytest.raises(ValidationFailed):
            await service.sync_user(Identity(sub="u-2", email="taken@example.com"))

    @pytest.mark.asyncio
    async def test_update_profile_unknown_user(self, service, repo) -> None:
        repo.get_user_by_id.return_value = None

        with pytest.raises(NotFound):
            await service.update_profile("missing", UpdateProfileRequest(bio="hi"))

    @pytest.mark.asyncio
    async def test_first_role_choice(self, service, repo, make_user) -> None:
        fresh = make_user(user_role=None)
        repo.get_user_by_id.return_value = fresh
        repo.update_profile.return_value = make_user(user_role="event_organizer")

        updated = await service.update_profile(
            fresh.id, UpdateProfileRequest(user_role="event_organizer", first_name="Eve")
        )

        assert updated.user_role == UserRole.EVENT_ORGANIZER
        fields = repo.update_profile.call_args[0][1]
        assert fields == {"first_name": "Eve", "user_role": "event_organizer"}

    @pytest.mark.asyncio
    async def test_owner_cannot_become_organizer(self, service, repo, owner) -> None:
        repo.get_user_by_id.return_value = owner

        with pytest.raises(Forbidden):
            await service.update_profile(owner.id, UpdateProfileRequest(user_role="event_organizer"))
        repo.update_profile.assert_not_called()

    @pytest.mark.asyncio
    async def test_resending_same_role_is_not_a_role_write(self, service, repo, owner) -> None:
        repo.get_user_by_id.return_value = owner
        repo.update_profile.return_value = owner

        await service.update_profile(owner.id, UpdateProfileRequest(user_role="truck_owner", bio="tacos"))

        assert repo.update_profile.call_args[0][1] == {"bio": "tacos"}

    @pytest.mark.asyncio
    async def test_concurrent_role_write_lost(self, service, repo, make_user) -> None:
        repo.get_user_by_id.return_value = make_user(user_role="user")
        repo.update_profile.return_value = None

        with pytest.raises(Forbidden):
            await service.update_profile("u-1", UpdateProfileRequest(user_role="truck_owner"))
