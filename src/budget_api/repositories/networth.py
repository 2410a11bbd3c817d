"""Asset and liability repositories."""
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.models.networth import Asset, Liability
from budget_api.repositories.base import BaseRepository


class AssetRepository(BaseRepository[Asset]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Asset)

    async def get_by_budget(self, budget_id: UUID, asset_id: UUID) -> Asset | None:
        result = await self.db.execute(
            select(Asset).where(Asset.id == asset_id, Asset.budget_id == budget_id)
        )
        return result.scalar_one_or_none()

    async def get_all_by_budget(self, budget_id: UUID) -> list[Asset]:
        result = await self.db.execute(
            select(Asset).where(Asset.budget_id == budget_id).order_by(Asset.value.desc())
        )
        return list(result.scalars().all())

    async def total(self, budget_id: UUID) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Asset.value), 0)).where(Asset.budget_id == budget_id)
        )
        return Decimal(str(result.scalar_one()))


class LiabilityRepository(BaseRepository[Liability]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Liability)

    async def get_by_budget(self, budget_id: UUID, liability_id: UUID) -> Liability | None:
        result = await self.db.execute(
            select(Liability).where(Liability.id == liability_id, Liability.budget_id == budget_id)
        )
        return result.scalar_one_or_none()

    async def get_all_by_budget(self, budget_id: UUID) -> list[Liability]:
        result = await self.db.execute(
            select(Liability)
            .where(Liability.budget_id == budget_id)
            .order_by(Liability.amount.desc())
        )
        return list(result.scalars().all())

    async def total(self, budget_id: UUID) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Liability.amount), 0)).where(
                Liability.budget_id == budget_id
            )
        )
        return Decimal(str(result.scalar_one()))
