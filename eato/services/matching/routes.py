from fastapi import APIRouter, Depends, status

from eato.services.auth.dependencies import get_current_user
from eato.services.matching.dependencies import get_matching_service
from eato.services.matching.service import MatchingService
from eato.shared.models.matching_dto import (
    ApplicationDTO,
    CreateApplicationRequest,
    CreateInviteRequest,
    InviteDTO,
    RespondApplicationRequest,
    RespondInviteRequest,
)
from eato.shared.models.user_dto import UserDTO

router = APIRouter(tags=["Matching"])


@router.get("/invites", response_model=list[InviteDTO])
async def list_invites(
    user: UserDTO = Depends(get_current_user),
    service: MatchingService = Depends(get_matching_service),
):
    return await service.list_invites(user.id)


@router.post("/invites", response_model=InviteDTO, status_code=status.HTTP_201_CREATED)
async def create_invite(
    request: CreateInviteRequest,
    user: UserDTO = Depends(get_current_user),
    service: MatchingService = Depends(get_matching_service),
):
    return await service.create_invite(user.id, request)


@router.patch("/invites/{invite_id}", response_model=InviteDTO)
async def respond_invite(
    invite_id: str,
    request: RespondInviteRequest,
    user: UserDTO = Depends(get_current_user),
    service: MatchingService = Depends(get_matching_service),
):
    return await service.respond_invite(invite_id, user.id, request)


@router.get("/applications", response_model=list[ApplicationDTO])
async def list_applications(
    user: UserDTO = Depends(get_current_user),
    service: MatchingService = Depends(get_matching_service),
):
    return await service.list_applications(user.id)


@router.post("/applications", response_model=ApplicationDTO, status_code=status.HTTP_201_CREATED)
async def create_application(
    request: CreateApplicationRequest,
    user: UserDTO = Depends(get_current_user),
    service: MatchingService = Depends(get_matching_service),
):
    return await service.create_application(user.id, request)


@router.patch("/applications/{application_id}", response_model=ApplicationDTO)
async def respond_application(
    application_id: str,
    request: RespondApplicationRequest,
    user: UserDTO = Depends(get_current_user),
    service: MatchingService = Depends(get_matching_service),
):
    return await service.respond_application(application_id, user.id, request)
