# tests/services/test_auth.py
"""
Tests for identity token verification.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from eato.services.auth.dependencies import decode_identity_token, get_current_user, get_identity
from eato.shared.errors import IntegrationError, Unauthorized
from eato.shared.models.user_dto import Identity

SECRET = "unit-test-secret"


def _token(claims: dict, secret: str = SECRET) -> str:
    return jwt.encode(claims, secret, algorithm="HS256")


class TestDecodeIdentityToken:
    def test_valid_token(self) -> None:
        token = _token({"sub": "user-1", "email": "a@b.c", "first_name": "Ann"})

        identity = decode_identity_token(token, SECRET)

        assert identity.sub == "user-1"
        assert identity.email == "a@b.c"
        assert identity.first_name == "Ann"

    def test_wrong_secret(self) -> None:
        with pytest.raises(Unauthorized):
            decode_identity_token(_token({"sub": "user-1"}, "other"), SECRET)

    def test_expired_token(self) -> None:
        expired = datetime.now(timezone.utc) - timedelta(minutes=5)
        with pytest.raises(Unauthorized):
            decode_identity_token(_token({"sub": "user-1", "exp": expired}), SECRET)

    def test_missing_subject(self) -> None:
        with pytest.raises(Unauthorized):
            decode_identity_token(_token({"email": "a@b.c"}), SECRET)

    def test_audience_checked_when_configured(self) -> None:
        token = _token({"sub": "user-1", "aud": "other-app"})
        with pytest.raises(Unauthorized):
            decode_identity_token(token, SECRET, audience="eato")

    def test_garbage(self) -> None:
        with pytest.raises(Unauthorized):
            decode_identity_token("not-a-jwt", SECRET)


class TestGetIdentity:
    @pytest.mark.asyncio
    async def test_no_credentials(self) -> None:
        with pytest.raises(Unauthorized):
            await get_identity(None)

    @pytest.mark.asyncio
    async def test_secret_not_configured(self) -> None:
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="x")
        with patch("eato.services.auth.dependencies.settings") as settings:
            settings.auth.AUTH_JWT_SECRET = ""
            with pytest.raises(IntegrationError):
                await get_identity(credentials)

    @pytest.mark.asyncio
    async def test_valid_credentials(self) -> None:
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=_token({"sub": "user-9"}))
        with patch("eato.services.auth.dependencies.settings") as settings:
            settings.auth.AUTH_JWT_SECRET = SECRET
            settings.auth.AUTH_JWT_ALGORITHM = "HS256"
            settings.auth.AUTH_JWT_AUDIENCE = None
            identity = await get_identity(credentials)
        assert identity.sub == "user-9"


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_delegates_to_get_or_create(self, owner) -> None:
        service = AsyncMock()
        service.get_or_create.return_value = owner

        user = await get_current_user(Identity(sub=owner.id), service)

        assert user is owner
        service.get_or_create.assert_awaited_once()
