"""FastAPI dependency injection for authentication, database and aggregators."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.aggregators.base import AggregatorClient
from budget_api.core.exceptions import AggregatorNotConfiguredError
from budget_api.core.security import get_user_id_from_token
from budget_api.db.session import get_db
from budget_api.models.budget import AggregatorProvider, Budget
from budget_api.models.user import User
from budget_api.repositories.user import UserRepository
from budget_api.services.auth import AuthService
from budget_api.services.bank_sync import BankSyncService
from budget_api.services.budget import BudgetService
from budget_api.services.invite import InviteService
from budget_api.services.mailer import EmailSender

# OAuth2 bearer token scheme
security = HTTPBearer()


async def get_user_repository(
    db: AsyncSession = Depends(get_db),
) -> UserRepository:
    return UserRepository(db)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_budget_service(db: AsyncSession = Depends(get_db)) -> BudgetService:
    return BudgetService(db)


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    user_repo: UserRepository = Depends(get_user_repository),
) -> User:
    """
    Extract and validate user from JWT token.

    Also records the user id on ``request.state`` for request logging.

    Raises:
        HTTPException: If token is invalid, expired, or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        user_id = get_user_id_from_token(credentials.credentials)
    except (JWTError, ValueError):
        raise credentials_exception

    user = await user_repo.get_by_id(user_id)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    request.state.user_id = str(user.id)
    return user


async def get_accessible_budget(
    budget_id: UUID,
    current_user: User = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
) -> Budget:
    """
    Resolve the budget in the path, enforcing owner-or-member access.

    Raises:
        AccessDeniedError: If the user is neither owner nor member
    """
    return await budget_service.require_access(current_user.id, budget_id)


async def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


async def get_invite_service(
    db: AsyncSession = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
) -> InviteService:
    return InviteService(db, email_sender)


async def get_aggregator_registry(request: Request) -> dict[AggregatorProvider, AggregatorClient]:
    """Aggregator clients built at startup (replaced by fakes in tests)."""
    return request.app.state.aggregators


async def get_aggregator_client(
    provider: AggregatorProvider,
    registry: dict[AggregatorProvider, AggregatorClient] = Depends(get_aggregator_registry),
) -> AggregatorClient:
    client = registry.get(provider)
    if client is None:
        raise AggregatorNotConfiguredError("SYNC_003", details={"provider": provider.value})
    return client


async def get_bank_sync_service(
    client: AggregatorClient = Depends(get_aggregator_client),
    db: AsyncSession = Depends(get_db),
) -> BankSyncService:
    return BankSyncService(db, client)
