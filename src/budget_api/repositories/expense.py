"""Expense repository with filtering and aggregation queries."""
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.models.expense import Expense
from budget_api.repositories.base import BaseRepository


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return [first day of month, first day of next month)."""
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


class ExpenseRepository(BaseRepository[Expense]):
    """Repository for Expense model with filtering and analytics queries."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Expense)

    async def get_by_budget(self, budget_id: UUID, expense_id: UUID) -> Expense | None:
        result = await self.db.execute(
            select(Expense).where(Expense.id == expense_id, Expense.budget_id == budget_id)
        )
        return result.scalar_one_or_none()

    async def list_by_budget(
        self,
        budget_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        category_id: UUID | None = None,
        skip: int = 0,
        limit: int = 500,
    ) -> list[Expense]:
        """List expenses newest first, optionally filtered by date range and category."""
        query = select(Expense).where(Expense.budget_id == budget_id)
        if start_date is not None:
            query = query.where(Expense.date >= start_date)
        if end_date is not None:
            query = query.where(Expense.date <= end_date)
        if category_id is not None:
            query = query.where(Expense.category_id == category_id)

        result = await self.db.execute(
            query.order_by(Expense.date.desc(), Expense.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def get_external_ids(self, budget_id: UUID) -> set[str]:
        """External transaction ids already imported into this budget."""
        result = await self.db.execute(
            select(Expense.external_transaction_id).where(
                Expense.budget_id == budget_id,
                Expense.external_transaction_id.is_not(None),
            )
        )
        return set(result.scalars().all())

    async def count_by_category(self, budget_id: UUID, category_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Expense.id)).where(
                Expense.budget_id == budget_id, Expense.category_id == category_id
            )
        )
        return int(result.scalar_one())

    async def get_totals_by_category(
        self, budget_id: UUID, year: int | None = None, month: int | None = None
    ) -> list[tuple[UUID, Decimal, int]]:
        """
        Sum and count expenses per category, largest total first.
        Returns list of (category_id, total, count).
        """
        query = select(
            Expense.category_id,
            func.sum(Expense.amount).label("total"),
            func.count(Expense.id).label("count"),
        ).where(Expense.budget_id == budget_id)

        if year is not None and month is not None:
            start, end = month_bounds(year, month)
            query = query.where(Expense.date >= start, Expense.date < end)
        elif year is not None:
            query = query.where(Expense.date >= date(year, 1, 1), Expense.date < date(year + 1, 1, 1))

        result = await self.db.execute(
            query.group_by(Expense.category_id).order_by(func.sum(Expense.amount).desc())
        )
        return [(row.category_id, Decimal(str(row.total)), int(row.count)) for row in result]

    async def get_months(self, budget_id: UUID) -> list[tuple[int, int, Decimal, int]]:
        """
        Distinct (year, month) pairs with expenses, newest first.
        Returns list of (year, month, total, count).
        """
        year_col = extract("year", Expense.date).label("year")
        month_col = extract("month", Expense.date).label("month")
        result = await self.db.execute(
            select(
                year_col,
                month_col,
                func.sum(Expense.amount).label("total"),
                func.count(Expense.id).label("count"),
            )
            .where(Expense.budget_id == budget_id)
            .group_by(year_col, month_col)
            .order_by(year_col.desc(), month_col.desc())
        )
        return [
            (int(row.year), int(row.month), Decimal(str(row.total)), int(row.count)) for row in result
        ]
