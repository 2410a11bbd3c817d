"""Pydantic schemas for budgets and membership."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BudgetCreate(BaseModel):
    name: str | None = Field(
        None, min_length=1, max_length=255, description="Budget name (defaults to \"<name>'s Budget\")"
    )


class BudgetUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="New budget name")


class MemberResponse(BaseModel):
    """One member of a budget."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    role: str = Field(description="owner or member")
    joined_at: datetime
    name: str | None = Field(None, description="Member display name")
    email: str | None = Field(None, description="Member email")


class BankConnectionResponse(BaseModel):
    """Linked institution, without its access credential."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    provider: str
    institution_id: str | None = None
    institution_name: str
    created_at: datetime


class BudgetResponse(BaseModel):
    """Budget with its members and linked institutions."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    owner_id: UUID
    members: list[MemberResponse]
    connections: list[BankConnectionResponse] = Field(default_factory=list)
    created_at: datetime


class InviteCodeResponse(BaseModel):
    invite_code: str = Field(description="Shareable code that lets anyone join the budget")


class JoinBudgetRequest(BaseModel):
    invite_code: str = Field(..., min_length=1, description="Invite code shared by a member")
