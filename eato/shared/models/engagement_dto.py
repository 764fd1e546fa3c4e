from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from eato.shared.models.truck_dto import TruckDTO


# Favorites / follows

class FavoriteDTO(BaseModel):
    id: str
    user_id: str
    truck_id: str
    created_at: datetime
    truck: Optional[TruckDTO] = None

    class Config:
        from_attributes = True


class CreateFavoriteRequest(BaseModel):
    truck_id: str = Field(min_length=1)


class FollowDTO(BaseModel):
    id: str
    user_id: str
    truck_id: str
    alerts_enabled: bool = False
    created_at: datetime
    truck: Optional[TruckDTO] = None

    class Config:
        from_attributes = True


class CreateFollowRequest(BaseModel):
    truck_id: str = Field(min_length=1)
    alerts_enabled: bool = False


class UpdateFollowRequest(BaseModel):
    alerts_enabled: bool


# Truck posts

class ScheduleDTO(BaseModel):
    id: str
    truck_id: str
    title: str
    date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    note: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CreateScheduleRequest(BaseModel):
    truck_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=200)
    date: date
    start_time: Optional[str] = Field(default=None, max_length=20)
    end_time: Optional[str] = Field(default=None, max_length=20)
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    note: Optional[str] = Field(default=None, max_length=2000)


class TruckUpdateDTO(BaseModel):
    id: str
    truck_id: str
    title: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class CreateTruckUpdateRequest(BaseModel):
    truck_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=5000)
