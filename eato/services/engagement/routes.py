from fastapi import APIRouter, Depends, Response, status

from eato.services.auth.dependencies import get_current_user
from eato.services.engagement.dependencies import get_engagement_service
from eato.services.engagement.service import EngagementService
from eato.shared.models.engagement_dto import (
    CreateFavoriteRequest,
    CreateFollowRequest,
    FavoriteDTO,
    FollowDTO,
    UpdateFollowRequest,
)
from eato.shared.models.user_dto import UserDTO

router = APIRouter(tags=["Engagement"])


@router.get("/favorites", response_model=list[FavoriteDTO])
async def list_favorites(
    user: UserDTO = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    return await service.list_favorites(user.id)


@router.post("/favorites", response_model=FavoriteDTO, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    request: CreateFavoriteRequest,
    user: UserDTO = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    return await service.add_favorite(user.id, request)


@router.delete("/favorites/{favorite_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    favorite_id: str,
    user: UserDTO = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    await service.remove_favorite(favorite_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/follows", response_model=list[FollowDTO])
async def list_follows(
    user: UserDTO = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    return await service.list_follows(user.id)


@router.post("/follows", response_model=FollowDTO, status_code=status.HTTP_201_CREATED)
async def follow_truck(
    request: CreateFollowRequest,
    user: UserDTO = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    return await service.follow(user.id, request)


@router.patch("/follows/{follow_id}", response_model=FollowDTO)
async def update_follow(
    follow_id: str,
    request: UpdateFollowRequest,
    user: UserDTO = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    return await service.update_follow(follow_id, user.id, request)


@router.delete("/follows/{follow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_truck(
    follow_id: str,
    user: UserDTO = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    await service.unfollow(follow_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
