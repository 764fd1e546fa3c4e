# eato/shared/errors.py
"""
Error taxonomy shared by all services.
Services raise these; the API layer maps them to HTTP responses.
"""

from __future__ import annotations

from typing import Any


class EatoError(Exception):
    """Base class for expected, client-visible errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message}
        if self.details is not None:
            body["errors"] = self.details
        return body


class ValidationFailed(EatoError):
    """Malformed input or a request the current state does not allow."""
    status_code = 400
    default_message = "Validation error"


class Unauthorized(EatoError):
    """Missing or invalid identity token."""
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(EatoError):
    """Authenticated but not permitted."""
    status_code = 403
    default_message = "Forbidden"


class NotFound(EatoError):
    """Referenced entity does not exist."""
    status_code = 404
    default_message = "Not found"

    @classmethod
    def entity(cls, name: str) -> "NotFound":
        return cls(f"{name} not found")


class IntegrationError(EatoError):
    """Billing or email provider failure, or missing provider configuration."""
    status_code = 500
    default_message = "Upstream provider error"
