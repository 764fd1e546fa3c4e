from fastapi import APIRouter, Depends, Response, status

from eato.services.auth.dependencies import get_current_user
from eato.services.events.dependencies import get_event_service
from eato.services.events.service import EventService
from eato.shared.models.event_dto import CreateEventRequest, EventDTO, UpdateEventRequest
from eato.shared.models.user_dto import UserDTO

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=list[EventDTO])
async def list_events(service: EventService = Depends(get_event_service)):
    return await service.list_events()


@router.get("/my-events", response_model=list[EventDTO])
async def list_my_events(
    user: UserDTO = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return await service.list_my_events(user.id)


@router.get("/{event_id}", response_model=EventDTO)
async def get_event(event_id: str, service: EventService = Depends(get_event_service)):
    return await service.get_event(event_id)


@router.post("", response_model=EventDTO, status_code=status.HTTP_201_CREATED)
async def create_event(
    request: CreateEventRequest,
    user: UserDTO = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return await service.create_event(user.id, request)


@router.patch("/{event_id}", response_model=EventDTO)
async def update_event(
    event_id: str,
    request: UpdateEventRequest,
    user: UserDTO = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return await service.update_event(event_id, user.id, request)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: str,
    user: UserDTO = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    await service.delete_event(event_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
