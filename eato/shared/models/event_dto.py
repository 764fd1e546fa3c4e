from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class EventDTO(BaseModel):
    id: str
    organizer_id: str
    title: str
    description: Optional[str] = None
    date: datetime
    location: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    expected_headcount: Optional[int] = None
    cuisines_needed: list[str] = Field(default_factory=list)
    trucks_needed: Optional[int] = None
    budget: Optional[str] = None
    event_type: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CreateEventRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    date: datetime
    location: str = Field(min_length=1, max_length=500)
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    expected_headcount: Optional[int] = Field(default=None, ge=0)
    cuisines_needed: list[str] = Field(default_factory=list)
    trucks_needed: Optional[int] = Field(default=None, ge=0)
    budget: Optional[str] = None
    event_type: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    is_active: bool = True


class UpdateEventRequest(BaseModel):
    """Partial update; only fields that were sent are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=500)
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    expected_headcount: Optional[int] = Field(default=None, ge=0)
    cuisines_needed: Optional[list[str]] = None
    trucks_needed: Optional[int] = Field(default=None, ge=0)
    budget: Optional[str] = None
    event_type: Optional[str] = None
    images: Optional[list[str]] = None
    is_active: Optional[bool] = None
