"""Category repository with budget-scoped queries."""
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.models.category import Category
from budget_api.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category model scoped to a budget."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Category)

    async def get_by_budget(self, budget_id: UUID, category_id: UUID) -> Category | None:
        """Get category only if it belongs to the specified budget."""
        result = await self.db.execute(
            select(Category).where(Category.id == category_id, Category.budget_id == budget_id)
        )
        return result.scalar_one_or_none()

    async def get_all_by_budget(self, budget_id: UUID) -> list[Category]:
        """List a budget's categories in display order."""
        result = await self.db.execute(
            select(Category)
            .where(Category.budget_id == budget_id)
            .order_by(Category.order, Category.name)
        )
        return list(result.scalars().all())

    async def get_ids_by_budget(self, budget_id: UUID) -> set[UUID]:
        result = await self.db.execute(select(Category.id).where(Category.budget_id == budget_id))
        return set(result.scalars().all())

    async def count_by_budget(self, budget_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Category.id)).where(Category.budget_id == budget_id)
        )
        return int(result.scalar_one())
