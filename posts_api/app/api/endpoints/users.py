"""User profile endpoint."""

from fastapi import APIRouter, Depends

from ...core.security import TokenIdentity, get_current_identity
from ...schemas.user import UserRead
from ...services.user_service import UserService
from ..deps import get_user_service

router = APIRouter()


@router.get("/me", response_model=UserRead)
async def read_current_user(
    identity: TokenIdentity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Return the profile of the token's owner."""
    return await service.get_profile(identity)
