"""Authentication endpoints for user registration, login, and token management."""

from fastapi import APIRouter, Depends, status

from budget_api.api.deps import get_auth_service, get_current_user
from budget_api.models.user import User
from budget_api.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    TokenPair,
    UserRegister,
    UserResponse,
)
from budget_api.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="""
    Create a new user account.

    Without an invite token a personal budget named "<name>'s Budget" is
    created. With a valid invite token the user joins the invited budget
    instead.
    """,
)
async def register(
    data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Register a new user account.

    Args:
        data: Registration data (email, password, name, invite_token)
        auth_service: Authentication service

    Returns:
        Token pair and the user's budget id

    Raises:
        400: Email already registered, or invite unusable
        404: Invite token not found
        410: Invite expired
    """
    return await auth_service.register(
        email=data.email,
        password=data.password,
        name=data.name,
        invite_token=data.invite_token,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="User login",
    description="Authenticate with email and password. remember_me issues a longer-lived access token.",
)
async def login(
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Authenticate user and return JWT tokens.

    Raises:
        401: Invalid credentials
        403: User account deactivated
    """
    return await auth_service.login(
        email=data.email,
        password=data.password,
        remember_me=data.remember_me,
    )


@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
    description="Get new token pair using a valid refresh token.",
)
async def refresh(
    data: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenPair:
    return await auth_service.refresh_tokens(data.refresh_token)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
async def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
