from fastapi import APIRouter, Depends, status

from eato.services.auth.dependencies import get_current_user
from eato.services.bookings.dependencies import get_booking_service
from eato.services.bookings.service import BookingService
from eato.shared.models.booking_dto import (
    BookingDetailsDTO,
    BookingDTO,
    CreateBookingRequest,
    UpdateBookingStatusRequest,
)
from eato.shared.models.user_dto import UserDTO

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingDTO, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: CreateBookingRequest,
    user: UserDTO = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.create_booking(user.id, request)


@router.get("/my-truck-bookings", response_model=list[BookingDetailsDTO])
async def list_my_truck_bookings(
    user: UserDTO = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.list_truck_bookings(user.id)


@router.get("/my-event-bookings", response_model=list[BookingDetailsDTO])
async def list_my_event_bookings(
    user: UserDTO = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.list_event_bookings(user.id)


@router.get("/{booking_id}", response_model=BookingDetailsDTO)
async def get_booking(
    booking_id: str,
    user: UserDTO = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_booking(booking_id, user.id)


@router.patch("/{booking_id}/status", response_model=BookingDTO)
async def update_booking_status(
    booking_id: str,
    request: UpdateBookingStatusRequest,
    user: UserDTO = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.set_status(booking_id, user.id, request)
