from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from eato.shared.models.enums import ApplicationStatus, InviteStatus


class InviteDTO(BaseModel):
    id: str
    event_id: str
    truck_id: str
    status: InviteStatus = InviteStatus.PENDING
    created_at: datetime
    updated_at: datetime
    booking_id: Optional[str] = None

    class Config:
        from_attributes = True


class CreateInviteRequest(BaseModel):
    event_id: str = Field(min_length=1)
    truck_id: str = Field(min_length=1)


class RespondInviteRequest(BaseModel):
    status: Literal["accepted", "declined"]


class ApplicationDTO(BaseModel):
    id: str
    event_id: str
    truck_id: str
    note: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.APPLIED
    created_at: datetime
    updated_at: datetime
    booking_id: Optional[str] = None

    class Config:
        from_attributes = True


class CreateApplicationRequest(BaseModel):
    event_id: str = Field(min_length=1)
    truck_id: str = Field(min_length=1)
    note: Optional[str] = Field(default=None, max_length=5000)


class RespondApplicationRequest(BaseModel):
    status: Literal["accepted", "rejected"]
