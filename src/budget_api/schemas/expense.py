"""Pydantic schemas for expenses and spending summaries."""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from budget_api.reconciliation.dates import parse_calendar_date


class ExpenseBase(BaseModel):
    amount: Decimal = Field(..., ge=0, description="Expense amount (non-negative)")
    description: str = Field(..., min_length=1, max_length=500)
    category_id: UUID
    date: dt.date = Field(..., description="Calendar date (YYYY-MM-DD)")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        if isinstance(value, str):
            return parse_calendar_date(value)
        return value


class ExpenseCreate(ExpenseBase):
    external_transaction_id: str | None = Field(None, max_length=255)
    account_name: str | None = Field(None, max_length=255)
    institution_name: str | None = Field(None, max_length=255)


class ExpenseUpdate(BaseModel):
    amount: Decimal | None = Field(None, ge=0)
    description: str | None = Field(None, min_length=1, max_length=500)
    category_id: UUID | None = None
    date: dt.date | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        if isinstance(value, str):
            return parse_calendar_date(value)
        return value


class ExpenseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    budget_id: UUID
    category_id: UUID
    amount: Decimal
    description: str
    date: dt.date
    created_by: UUID
    external_transaction_id: str | None = None
    account_name: str | None = None
    institution_name: str | None = None
    created_at: dt.datetime


class CategoryTotal(BaseModel):
    category_id: UUID
    category_name: str
    color: str
    icon: str
    budget_amount: Decimal = Field(description="Monthly allocation of the category")
    total: Decimal = Field(description="Sum of expense amounts")
    count: int = Field(description="Number of expenses")


class MonthSummary(BaseModel):
    year: int
    month: int
    total: Decimal
    count: int
