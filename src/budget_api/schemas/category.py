"""Pydantic schemas for categories."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from budget_api.models.category import DEFAULT_COLOR, DEFAULT_ICON


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Category name")
    color: str = Field(DEFAULT_COLOR, max_length=9, description="Hex display color")
    icon: str = Field(DEFAULT_ICON, max_length=16, description="Display icon")
    budget_amount: Decimal = Field(Decimal("0"), ge=0, description="Monthly allocation")
    rollover: bool = Field(False, description="Carry unspent allocation into next month")
    order: int = Field(0, description="Display order")


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    color: str | None = Field(None, max_length=9)
    icon: str | None = Field(None, max_length=16)
    budget_amount: Decimal | None = Field(None, ge=0)
    rollover: bool | None = None
    order: int | None = None


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    budget_id: UUID
    name: str
    color: str
    icon: str
    budget_amount: Decimal
    rollover: bool
    order: int
    created_at: datetime
