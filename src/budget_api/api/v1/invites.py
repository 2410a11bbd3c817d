"""Invite token endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.api.deps import get_current_user, get_db
from budget_api.core.exceptions import NotFoundError
from budget_api.models.user import User
from budget_api.repositories.budget import BudgetRepository
from budget_api.schemas.budget import BudgetResponse
from budget_api.schemas.invite import InviteValidation
from budget_api.services.invite import InviteService

router = APIRouter(prefix="/invites", tags=["invites"])


@router.get(
    "/{token}",
    response_model=InviteValidation,
    summary="Validate invite",
    description="Public. Check an invite token before registering and show which budget it joins.",
    responses={
        404: {"description": "Unknown token"},
        400: {"description": "Invite already used"},
        410: {"description": "Invite expired"},
    },
)
async def validate_invite(
    token: str,
    db: AsyncSession = Depends(get_db),
) -> InviteValidation:
    invite = await InviteService(db).get_usable(token)
    budget = await BudgetRepository(db).get_by_id(invite.budget_id)
    if budget is None:
        raise NotFoundError("API_001")
    return InviteValidation(
        email=invite.email,
        budget_id=budget.id,
        budget_name=budget.name,
        expires_at=invite.expires_at,
    )


@router.post(
    "/{token}/accept",
    response_model=BudgetResponse,
    summary="Accept invite",
    description="Join the invited budget as an existing user. The invite must be addressed to the user's email.",
)
async def accept_invite(
    token: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BudgetResponse:
    budget = await InviteService(db).accept(token, current_user.id, current_user.email)
    return BudgetResponse.model_validate(budget)
