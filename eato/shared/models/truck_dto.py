from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class MenuItem(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    price: Optional[str] = None
    description: Optional[str] = None


class TruckDTO(BaseModel):
    id: str
    owner_id: str
    name: str
    cuisine: str
    description: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    menu_items: list[MenuItem] = Field(default_factory=list)
    price_range: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    hours: Optional[str] = None
    social_links: dict[str, str] = Field(default_factory=dict)
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CreateTruckRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    cuisine: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    menu_items: list[MenuItem] = Field(default_factory=list)
    price_range: Optional[str] = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    hours: Optional[str] = None
    social_links: dict[str, str] = Field(default_factory=dict)
    is_active: bool = True


class UpdateTruckRequest(BaseModel):
    """Partial update; only fields that were sent are applied."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    cuisine: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    images: Optional[list[str]] = None
    menu_items: Optional[list[MenuItem]] = None
    price_range: Optional[str] = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    hours: Optional[str] = None
    social_links: Optional[dict[str, str]] = None
    is_active: Optional[bool] = None


class UnavailabilityDTO(BaseModel):
    id: str
    truck_id: str
    blocked_date: date
    reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CreateUnavailabilityRequest(BaseModel):
    blocked_date: date
    reason: Optional[str] = Field(default=None, max_length=500)


class TruckAnalyticsDTO(BaseModel):
    truck_id: str
    followers: int = 0
    favorites: int = 0
    invites: int = 0
    applications: int = 0
