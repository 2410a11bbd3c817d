"""Category service for business logic operations."""
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.core.exceptions import NotFoundError, ValidationError
from budget_api.models.category import Category
from budget_api.repositories.category import CategoryRepository
from budget_api.repositories.expense import ExpenseRepository
from budget_api.schemas.category import CategoryCreate, CategoryUpdate


class CategoryService:
    """Service layer for category operations. Callers check budget access first."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.category_repo = CategoryRepository(db)
        self.expense_repo = ExpenseRepository(db)

    async def list_categories(self, budget_id: UUID) -> list[Category]:
        return await self.category_repo.get_all_by_budget(budget_id)

    async def get(self, budget_id: UUID, category_id: UUID) -> Category:
        category = await self.category_repo.get_by_budget(budget_id, category_id)
        if category is None:
            raise NotFoundError("API_002", details={"category_id": str(category_id)})
        return category

    async def create(self, budget_id: UUID, data: CategoryCreate) -> Category:
        return await self.category_repo.create(Category(budget_id=budget_id, **data.model_dump()))

    async def update(self, budget_id: UUID, category_id: UUID, data: CategoryUpdate) -> Category:
        category = await self.get(budget_id, category_id)
        return await self.category_repo.update(category, data.model_dump(exclude_unset=True))

    async def delete(self, budget_id: UUID, category_id: UUID) -> None:
        """Delete a category that no expense refers to.

        Raises:
            NotFoundError: If the category is not in this budget
            ValidationError: If expenses still use the category
        """
        category = await self.get(budget_id, category_id)
        in_use = await self.expense_repo.count_by_category(budget_id, category_id)
        if in_use:
            raise ValidationError("VAL_007", details={"expense_count": in_use})
        await self.category_repo.delete(category)
