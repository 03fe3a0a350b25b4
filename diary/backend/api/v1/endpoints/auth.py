"""
Auth API Endpoints.

Signup, login and logout. None of these routes require a token.
"""

from fastapi import APIRouter

from diary.backend.core.dependencies import DbSession
from diary.backend.core.logging import get_logger
from diary.backend.schemas.auth import (
    AuthResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)
from diary.backend.schemas.base import ApiResponse, MessageResponse
from diary.backend.services.auth import LOGGED_OUT, AuthService

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/signup",
    response_model=ApiResponse[AuthResponse],
    status_code=201,
    summary="Create an account",
    description="Register a new user and return a bearer token.",
)
async def signup(
    data: SignupRequest,
    db: DbSession,
) -> ApiResponse[AuthResponse]:
    """Register a new user."""
    service = AuthService(db)
    user, token = await service.signup(data)
    return ApiResponse(
        data=AuthResponse(user=UserResponse.model_validate(user), token=token)
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthResponse],
    summary="Log in",
    description="Exchange email and password for a bearer token.",
)
async def login(
    data: LoginRequest,
    db: DbSession,
) -> ApiResponse[AuthResponse]:
    service = AuthService(db)
    user, token = await service.login(data)
    return ApiResponse(
        data=AuthResponse(user=UserResponse.model_validate(user), token=token)
    )


@router.post(
    "/logout",
    response_model=ApiResponse[MessageResponse],
    summary="Log out",
    description="Acknowledge a logout. Issued tokens are not revoked.",
)
async def logout() -> ApiResponse[MessageResponse]:
    """
    Acknowledge a logout.

    Tokens are stateless, so nothing is revoked server-side; the client
    discards its own copy.
    """
    logger.debug("Logout acknowledged")
    return ApiResponse(data=MessageResponse(message=LOGGED_OUT))
