from fastapi import APIRouter, Depends

from eato.services.auth.dependencies import get_current_user, get_identity
from eato.services.users.dependencies import get_user_service
from eato.services.users.service import UserService
from eato.shared.models.user_dto import Identity, UpdateProfileRequest, UserDTO

router = APIRouter(tags=["Users"])


@router.get("/auth/user", response_model=UserDTO)
async def get_auth_user(
    identity: Identity = Depends(get_identity),
    service: UserService = Depends(get_user_service),
):
    """Returns the caller, syncing profile claims from the identity token."""
    return await service.sync_user(identity)


@router.patch("/profile", response_model=UserDTO)
async def update_profile(
    request: UpdateProfileRequest,
    user: UserDTO = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return await service.update_profile(user.id, request)
