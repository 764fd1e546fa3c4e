from fastapi import APIRouter, Depends, Query, Response, status

from eato.services.auth.dependencies import get_current_user
from eato.services.posts.dependencies import get_post_service
from eato.services.posts.service import PostService
from eato.shared.models.engagement_dto import (
    CreateScheduleRequest,
    CreateTruckUpdateRequest,
    ScheduleDTO,
    TruckUpdateDTO,
)
from eato.shared.models.user_dto import UserDTO

router = APIRouter(tags=["Posts"])


@router.get("/schedules", response_model=list[ScheduleDTO])
async def list_schedules(
    truck_id: str = Query(..., min_length=1),
    service: PostService = Depends(get_post_service),
):
    return await service.list_schedules(truck_id)


@router.post("/schedules", response_model=ScheduleDTO, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    request: CreateScheduleRequest,
    user: UserDTO = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    return await service.create_schedule(user.id, request)


@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    schedule_id: str,
    user: UserDTO = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    await service.delete_schedule(schedule_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/updates", response_model=list[TruckUpdateDTO])
async def list_updates(
    truck_id: str = Query(..., min_length=1),
    service: PostService = Depends(get_post_service),
):
    return await service.list_updates(truck_id)


@router.post("/updates", response_model=TruckUpdateDTO, status_code=status.HTTP_201_CREATED)
async def create_update(
    request: CreateTruckUpdateRequest,
    user: UserDTO = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    return await service.create_update(user.id, request)


@router.delete("/updates/{update_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_update(
    update_id: str,
    user: UserDTO = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    await service.delete_update(update_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
