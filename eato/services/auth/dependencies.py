# eato/services/auth/dependencies.py
"""
Identity verification.

The identity provider signs a bearer JWT; this service only verifies it
and maps the claims onto a local user row.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from eato.config import settings
from eato.services.users.dependencies import get_user_service
from eato.services.users.service import UserService
from eato.shared.errors import IntegrationError, Unauthorized
from eato.shared.models.user_dto import Identity, UserDTO

bearer_scheme = HTTPBearer(auto_error=False)


def decode_identity_token(
    token: str,
    secret: str,
    algorithm: str = "HS256",
    audience: Optional[str] = None,
) -> Identity:
    """
    Verifies the token signature and expiry and returns its claims.

    Raises:
        Unauthorized: bad signature, expired token or missing subject
    """
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError:
        raise Unauthorized("Invalid token")

    sub = claims.get("sub")
    if not sub:
        raise Unauthorized("Invalid token payload")

    return Identity(
        sub=str(sub),
        email=claims.get("email"),
        first_name=claims.get("first_name"),
        last_name=claims.get("last_name"),
        profile_image_url=claims.get("profile_image_url"),
    )


async def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authenticated")
    if not settings.auth.AUTH_JWT_SECRET:
        raise IntegrationError("Identity verification is not configured")
    return decode_identity_token(
        credentials.credentials,
        settings.auth.AUTH_JWT_SECRET,
        settings.auth.AUTH_JWT_ALGORITHM,
        settings.auth.AUTH_JWT_AUDIENCE,
    )


async def get_current_user(
    identity: Identity = Depends(get_identity),
    service: UserService = Depends(get_user_service),
) -> UserDTO:
    """Authenticated caller; the row is created on first login."""
    return await service.get_or_create(identity)
