"""
Authentication endpoints.

``/auth/signup`` creates an account and ``/auth/login`` exchanges an
email and password for a bearer token.  Both return the token together
with the public user profile.
"""

from fastapi import APIRouter, Depends

from ...schemas.user import AuthResponse, LoginRequest, SignupRequest
from ...services.user_service import UserService
from ..deps import get_user_service

router = APIRouter()


@router.post("/signup", response_model=AuthResponse)
async def signup(
    payload: SignupRequest,
    service: UserService = Depends(get_user_service),
) -> AuthResponse:
    """Register a new user.

    Returns 409 if the email is already registered and 400 if the
    email, username (3-20 chars) or password (8-100 chars) is invalid.
    """
    return await service.signup(payload)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    service: UserService = Depends(get_user_service),
) -> AuthResponse:
    """Authenticate with email and password and return a token.

    A wrong password and an unknown email both return 401.
    """
    return await service.login(payload)
