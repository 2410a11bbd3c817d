"""Authentication service with business logic."""

import logging
from datetime import timedelta

from fastapi import HTTPException, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.config import settings
from budget_api.core.exceptions import ValidationError
from budget_api.core.security import (
    create_access_token,
    create_refresh_token,
    get_user_id_from_token,
    hash_password,
    verify_password,
)
from budget_api.models.budget import Budget
from budget_api.models.user import User
from budget_api.repositories.budget import BudgetRepository
from budget_api.repositories.user import UserRepository
from budget_api.schemas.auth import AuthResponse, TokenPair
from budget_api.services.invite import InviteService

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        """
        Initialize authentication service.

        Args:
            db: Database session
        """
        self.db = db
        self.user_repo = UserRepository(db)
        self.budget_repo = BudgetRepository(db)
        self.invite_service = InviteService(db)

    async def register(
        self, email: str, password: str, name: str, invite_token: str | None = None
    ) -> AuthResponse:
        """
        Register a new user and give them a budget.

        With an invite token the user joins the invited budget and no
        budget of their own is created. Otherwise a new budget named
        "<name>'s Budget" is created with the user as owner.

        Args:
            email: User email address
            password: Plain text password
            name: Display name
            invite_token: Optional invite token from an invite email

        Returns:
            Token pair and the id of the user's budget

        Raises:
            ValidationError: If the email is taken or the invite is unusable
            NotFoundError: If the invite token does not exist
        """
        email = email.lower()
        if await self.user_repo.email_exists(email):
            raise ValidationError("AUTH_001")

        invite = None
        if invite_token:
            # Validate before creating anything so a bad token leaves no user behind
            invite = await self.invite_service.get_usable(invite_token, email=email)

        user = User(email=email, password_hash=hash_password(password), name=name)
        self.db.add(user)
        await self.db.flush()

        if invite is not None:
            budget = await self.invite_service.consume(invite, user.id)
        else:
            budget = Budget.create(name=f"{name}'s Budget", owner_id=user.id)
            self.db.add(budget)
            await self.db.commit()

        logger.info(
            "User registered",
            extra={"user_id": str(user.id), "budget_id": str(budget.id)},
        )
        return AuthResponse(
            access_token=create_access_token(user.id),
            refresh_token=create_refresh_token(user.id),
            budget_id=budget.id,
        )

    async def login(self, email: str, password: str, remember_me: bool = False) -> AuthResponse:
        """
        Authenticate user and return JWT tokens.

        Args:
            email: User email address
            password: Plain text password
            remember_me: Issue a longer-lived access token

        Returns:
            Token pair and the user's primary (earliest joined) budget

        Raises:
            HTTPException: If credentials are invalid
        """
        user = await self.user_repo.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User account is deactivated",
            )

        expires = timedelta(days=settings.jwt_remember_me_expire_days) if remember_me else None
        budget = await self.budget_repo.get_primary_for_user(user.id)

        return AuthResponse(
            access_token=create_access_token(user.id, expires_delta=expires),
            refresh_token=create_refresh_token(user.id),
            budget_id=budget.id if budget else None,
        )

    async def refresh_tokens(self, refresh_token: str) -> TokenPair:
        """
        Generate new token pair using refresh token.

        Raises:
            HTTPException: If refresh token is invalid
        """
        try:
            user_id = get_user_id_from_token(refresh_token, expected_type="refresh")
        except (JWTError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired refresh token",
            )

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User account is deactivated",
            )

        return TokenPair(
            access_token=create_access_token(user.id),
            refresh_token=create_refresh_token(user.id),
        )
