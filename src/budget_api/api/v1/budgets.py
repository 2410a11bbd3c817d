"""Budget endpoints: budgets, members, invite codes and email invites."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from budget_api.api.deps import (
    get_accessible_budget,
    get_budget_service,
    get_current_user,
    get_invite_service,
)
from budget_api.models.budget import Budget
from budget_api.models.user import User
from budget_api.schemas.budget import (
    BudgetCreate,
    BudgetResponse,
    BudgetUpdate,
    InviteCodeResponse,
    JoinBudgetRequest,
)
from budget_api.schemas.invite import InviteCreate, InviteResponse, InviteSendResult
from budget_api.services.budget import BudgetService
from budget_api.services.invite import InviteService

router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.get(
    "",
    response_model=list[BudgetResponse],
    summary="List my budgets",
    description="All budgets the user owns or is a member of, oldest membership first.",
)
async def list_budgets(
    current_user: User = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
) -> list[BudgetResponse]:
    budgets = await budget_service.list_for_user(current_user.id)
    return [BudgetResponse.model_validate(budget) for budget in budgets]


@router.post(
    "",
    response_model=BudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create budget",
    description="Create a budget owned by the current user. The owner is added as the first member.",
)
async def create_budget(
    data: BudgetCreate,
    current_user: User = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
) -> BudgetResponse:
    name = data.name or f"{current_user.name}'s Budget"
    budget = await budget_service.create(current_user.id, name)
    return BudgetResponse.model_validate(budget)


@router.post(
    "/join",
    response_model=BudgetResponse,
    summary="Join budget by invite code",
    responses={404: {"description": "Unknown invite code"}, 400: {"description": "Already a member"}},
)
async def join_budget(
    data: JoinBudgetRequest,
    current_user: User = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
) -> BudgetResponse:
    budget = await budget_service.join_by_code(current_user.id, data.invite_code)
    return BudgetResponse.model_validate(budget)


@router.get(
    "/{budget_id}",
    response_model=BudgetResponse,
    summary="Get budget",
    responses={403: {"description": "Access denied"}},
)
async def get_budget(
    budget_id: UUID,
    current_user: User = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
) -> BudgetResponse:
    budget = await budget_service.get(current_user.id, budget_id)
    return BudgetResponse.model_validate(budget)


@router.patch(
    "/{budget_id}",
    response_model=BudgetResponse,
    summary="Rename budget",
    description="Owner only.",
)
async def rename_budget(
    budget_id: UUID,
    data: BudgetUpdate,
    current_user: User = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
) -> BudgetResponse:
    budget = await budget_service.rename(current_user.id, budget_id, data.name)
    return BudgetResponse.model_validate(budget)


@router.get(
    "/{budget_id}/invite-code",
    response_model=InviteCodeResponse,
    summary="Get invite code",
    description="Return the budget's shareable invite code, generating it on first request.",
)
async def get_invite_code(
    budget_id: UUID,
    current_user: User = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
) -> InviteCodeResponse:
    code = await budget_service.get_invite_code(current_user.id, budget_id)
    return InviteCodeResponse(invite_code=code)


@router.post(
    "/{budget_id}/invite-code/regenerate",
    response_model=InviteCodeResponse,
    summary="Regenerate invite code",
    description="Owner only. Previously shared codes stop working.",
)
async def regenerate_invite_code(
    budget_id: UUID,
    current_user: User = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
) -> InviteCodeResponse:
    code = await budget_service.regenerate_invite_code(current_user.id, budget_id)
    return InviteCodeResponse(invite_code=code)


@router.delete(
    "/{budget_id}/members/{member_user_id}",
    response_model=BudgetResponse,
    summary="Remove member",
    description="Owner only. The owner cannot be removed.",
)
async def remove_member(
    budget_id: UUID,
    member_user_id: UUID,
    current_user: User = Depends(get_current_user),
    budget_service: BudgetService = Depends(get_budget_service),
) -> BudgetResponse:
    budget = await budget_service.remove_member(current_user.id, budget_id, member_user_id)
    return BudgetResponse.model_validate(budget)


@router.post(
    "/{budget_id}/invites",
    response_model=InviteSendResult,
    status_code=status.HTTP_201_CREATED,
    summary="Send email invite",
    description="""
    Invite someone to this budget by email.

    If a pending invite already exists for the address it is sent again.
    If the email cannot be delivered the invite is still kept and the
    response is 502 with error code EMAIL_001.
    """,
)
async def send_invite(
    data: InviteCreate,
    response: Response,
    budget: Budget = Depends(get_accessible_budget),
    invite_service: InviteService = Depends(get_invite_service),
) -> InviteSendResult:
    invite, resent = await invite_service.send(budget, data.email)
    if resent:
        response.status_code = status.HTTP_200_OK
    return InviteSendResult(
        invite=InviteResponse.model_validate(invite),
        resent=resent,
        message="Invite resent" if resent else "Invite sent",
    )
