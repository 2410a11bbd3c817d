"""Expense endpoints and spending summaries."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.api.deps import get_accessible_budget, get_current_user, get_db
from budget_api.models.budget import Budget
from budget_api.models.user import User
from budget_api.schemas.expense import (
    CategoryTotal,
    ExpenseCreate,
    ExpenseResponse,
    ExpenseUpdate,
    MonthSummary,
)
from budget_api.services.expense import ExpenseService

router = APIRouter(prefix="/budgets/{budget_id}/expenses", tags=["expenses"])


@router.get(
    "",
    response_model=list[ExpenseResponse],
    summary="List expenses",
    description="""
    List the budget's expenses, newest first.

    Filters:
    - start_date / end_date: inclusive calendar dates (YYYY-MM-DD)
    - category_id: only expenses in this category
    """,
)
async def list_expenses(
    start_date: date | None = Query(None, description="First day (inclusive)"),
    end_date: date | None = Query(None, description="Last day (inclusive)"),
    category_id: UUID | None = Query(None, description="Filter by category"),
    skip: int = Query(0, ge=0),
    limit: int = Query(500, ge=1, le=1000),
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> list[ExpenseResponse]:
    expenses = await ExpenseService(db).list_expenses(
        budget.id, start_date, end_date, category_id, skip, limit
    )
    return [ExpenseResponse.model_validate(expense) for expense in expenses]


@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create expense",
    responses={409: {"description": "External transaction id already imported"}},
)
async def create_expense(
    data: ExpenseCreate,
    budget: Budget = Depends(get_accessible_budget),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ExpenseResponse:
    expense = await ExpenseService(db).create(budget.id, current_user.id, data)
    return ExpenseResponse.model_validate(expense)


@router.get(
    "/summary/by-category",
    response_model=list[CategoryTotal],
    summary="Totals by category",
    description="Sum and count of expenses per category, largest total first. Optionally limited to a year or month.",
)
async def totals_by_category(
    year: int | None = Query(None, ge=1900, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> list[CategoryTotal]:
    return await ExpenseService(db).totals_by_category(budget.id, year, month)


@router.get(
    "/summary/months",
    response_model=list[MonthSummary],
    summary="Months with expenses",
    description="Distinct year/month pairs that have expenses, newest first, with totals.",
)
async def list_months(
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> list[MonthSummary]:
    return await ExpenseService(db).months(budget.id)


@router.get("/{expense_id}", response_model=ExpenseResponse, summary="Get expense")
async def get_expense(
    expense_id: UUID,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> ExpenseResponse:
    expense = await ExpenseService(db).get(budget.id, expense_id)
    return ExpenseResponse.model_validate(expense)


@router.patch("/{expense_id}", response_model=ExpenseResponse, summary="Update expense")
async def update_expense(
    expense_id: UUID,
    data: ExpenseUpdate,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> ExpenseResponse:
    expense = await ExpenseService(db).update(budget.id, expense_id, data)
    return ExpenseResponse.model_validate(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete expense")
async def delete_expense(
    expense_id: UUID,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> None:
    await ExpenseService(db).delete(budget.id, expense_id)
