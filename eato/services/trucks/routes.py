from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from eato.services.auth.dependencies import get_current_user
from eato.services.trucks.dependencies import get_truck_service
from eato.services.trucks.service import TruckService
from eato.shared.models.truck_dto import (
    CreateTruckRequest,
    CreateUnavailabilityRequest,
    TruckAnalyticsDTO,
    TruckDTO,
    UnavailabilityDTO,
    UpdateTruckRequest,
)
from eato.shared.models.user_dto import UserDTO

router = APIRouter(tags=["Trucks"])


@router.get("/trucks", response_model=list[TruckDTO])
async def list_trucks(service: TruckService = Depends(get_truck_service)):
    return await service.list_trucks()


@router.get("/trucks/my-trucks", response_model=list[TruckDTO])
async def list_my_trucks(
    user: UserDTO = Depends(get_current_user),
    service: TruckService = Depends(get_truck_service),
):
    return await service.list_my_trucks(user.id)


@router.get("/trucks/{truck_id}", response_model=TruckDTO)
async def get_truck(truck_id: str, service: TruckService = Depends(get_truck_service)):
    return await service.get_truck(truck_id)


@router.post("/trucks", response_model=TruckDTO, status_code=status.HTTP_201_CREATED)
async def create_truck(
    request: CreateTruckRequest,
    user: UserDTO = Depends(get_current_user),
    service: TruckService = Depends(get_truck_service),
):
    return await service.create_truck(user.id, request)


@router.patch("/trucks/{truck_id}", response_model=TruckDTO)
async def update_truck(
    truck_id: str,
    request: UpdateTruckRequest,
    user: UserDTO = Depends(get_current_user),
    service: TruckService = Depends(get_truck_service),
):
    return await service.update_truck(truck_id, user.id, request)


@router.delete("/trucks/{truck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_truck(
    truck_id: str,
    user: UserDTO = Depends(get_current_user),
    service: TruckService = Depends(get_truck_service),
):
    await service.delete_truck(truck_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/trucks/{truck_id}/unavailability", response_model=list[UnavailabilityDTO])
async def list_unavailability(truck_id: str, service: TruckService = Depends(get_truck_service)):
    return await service.list_unavailability(truck_id)


@router.post(
    "/trucks/{truck_id}/unavailability",
    response_model=UnavailabilityDTO,
    status_code=status.HTTP_201_CREATED,
)
async def add_unavailability(
    truck_id: str,
    request: CreateUnavailabilityRequest,
    user: UserDTO = Depends(get_current_user),
    service: TruckService = Depends(get_truck_service),
):
    return await service.add_unavailability(truck_id, user.id, request)


@router.delete("/unavailability/{unavailability_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_unavailability(
    unavailability_id: str,
    user: UserDTO = Depends(get_current_user),
    service: TruckService = Depends(get_truck_service),
):
    await service.delete_unavailability(unavailability_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/truck/analytics", response_model=TruckAnalyticsDTO)
async def get_truck_analytics(
    truck_id: Optional[str] = None,
    user: UserDTO = Depends(get_current_user),
    service: TruckService = Depends(get_truck_service),
):
    return await service.get_analytics(truck_id, user.id)
