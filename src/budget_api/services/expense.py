"""Expense service: CRUD and spending summaries."""

from datetime import date
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from budget_api.models.expense import Expense
from budget_api.repositories.category import CategoryRepository
from budget_api.repositories.expense import ExpenseRepository
from budget_api.schemas.expense import CategoryTotal, ExpenseCreate, ExpenseUpdate, MonthSummary


class ExpenseService:
    """Service layer for expenses. Callers check budget access first."""

    def __init__(self, db: AsyncSession):
        """Initialize expense service with database session.

        Args:
            db: Database session
        """
        self.db = db
        self.expense_repo = ExpenseRepository(db)
        self.category_repo = CategoryRepository(db)

    async def _require_category(self, budget_id: UUID, category_id: UUID) -> None:
        if await self.category_repo.get_by_budget(budget_id, category_id) is None:
            raise NotFoundError("API_002", details={"category_id": str(category_id)})

    async def list_expenses(
        self,
        budget_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        category_id: UUID | None = None,
        skip: int = 0,
        limit: int = 500,
    ) -> list[Expense]:
        """List expenses newest first.

        Raises:
            ValidationError: If start_date is after end_date
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationError("VAL_003")
        return await self.expense_repo.list_by_budget(
            budget_id, start_date, end_date, category_id, skip, limit
        )

    async def get(self, budget_id: UUID, expense_id: UUID) -> Expense:
        expense = await self.expense_repo.get_by_budget(budget_id, expense_id)
        if expense is None:
            raise NotFoundError("API_003", details={"expense_id": str(expense_id)})
        return expense

    async def create(self, budget_id: UUID, user_id: UUID, data: ExpenseCreate) -> Expense:
        """Create an expense in a category of the same budget.

        Raises:
            NotFoundError: If the category is not in this budget
            DuplicateRecordError: If the external transaction id is already used
        """
        await self._require_category(budget_id, data.category_id)
        expense = Expense(budget_id=budget_id, created_by=user_id, **data.model_dump())
        try:
            return await self.expense_repo.create(expense)
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateRecordError(
                "DB_002", details={"budget_id": str(budget_id)}
            ) from e

    async def update(self, budget_id: UUID, expense_id: UUID, data: ExpenseUpdate) -> Expense:
        expense = await self.get(budget_id, expense_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("category_id"):
            await self._require_category(budget_id, changes["category_id"])
        return await self.expense_repo.update(expense, changes)

    async def delete(self, budget_id: UUID, expense_id: UUID) -> None:
        expense = await self.get(budget_id, expense_id)
        await self.expense_repo.delete(expense)

    async def totals_by_category(
        self, budget_id: UUID, year: int | None = None, month: int | None = None
    ) -> list[CategoryTotal]:
        """Spending per category, largest total first.

        Args:
            budget_id: Budget ID
            year: Optional year filter
            month: Optional month filter (needs year)

        Returns:
            One entry per category that has expenses in the period
        """
        if month is not None and year is None:
            raise ValidationError("VAL_001", details={"reason": "month requires year"})

        categories = {c.id: c for c in await self.category_repo.get_all_by_budget(budget_id)}
        totals = []
        for category_id, total, count in await self.expense_repo.get_totals_by_category(
            budget_id, year, month
        ):
            category = categories.get(category_id)
            if category is None:
                continue
            totals.append(
                CategoryTotal(
                    category_id=category_id,
                    category_name=category.name,
                    color=category.color,
                    icon=category.icon,
                    budget_amount=category.budget_amount,
                    total=total,
                    count=count,
                )
            )
        return totals

    async def months(self, budget_id: UUID) -> list[MonthSummary]:
        """Months that have expenses, newest first."""
        return [
            MonthSummary(year=year, month=month, total=total, count=count)
            for year, month, total, count in await self.expense_repo.get_months(budget_id)
        ]
