"""Pydantic schemas for email invites."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class InviteCreate(BaseModel):
    email: EmailStr = Field(..., description="Address to send the invite to")


class InviteResponse(BaseModel):
    """Invite as seen by members of the budget (token omitted)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    budget_id: UUID
    used: bool
    expires_at: datetime


class InviteSendResult(BaseModel):
    invite: InviteResponse
    resent: bool = Field(description="True if an existing pending invite was sent again")
    message: str


class InviteValidation(BaseModel):
    """Public view of an invite token."""

    email: str
    budget_id: UUID
    budget_name: str
    expires_at: datetime
