from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from eato.shared.models.enums import UserRole


class UserDTO(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    user_role: Optional[UserRole] = None
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def display_name(self) -> str:
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.email or "there"


class Identity(BaseModel):
    """Claims of a verified identity token."""
    sub: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=40)
    bio: Optional[str] = Field(default=None, max_length=2000)
    user_role: Optional[Literal["truck_owner", "event_organizer"]] = None
