"""Assets, liabilities and net worth."""
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.core.exceptions import NotFoundError
from budget_api.models.networth import Asset, Liability
from budget_api.repositories.networth import AssetRepository, LiabilityRepository
from budget_api.schemas.networth import (
    AssetCreate,
    AssetResponse,
    AssetUpdate,
    LiabilityCreate,
    LiabilityResponse,
    LiabilityUpdate,
    NetWorthResponse,
)


class NetWorthService:
    """CRUD for a budget's assets and liabilities. Callers check budget access first."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.asset_repo = AssetRepository(db)
        self.liability_repo = LiabilityRepository(db)

    async def list_assets(self, budget_id: UUID) -> list[Asset]:
        return await self.asset_repo.get_all_by_budget(budget_id)

    async def get_asset(self, budget_id: UUID, asset_id: UUID) -> Asset:
        asset = await self.asset_repo.get_by_budget(budget_id, asset_id)
        if asset is None:
            raise NotFoundError("API_004", details={"asset_id": str(asset_id)})
        return asset

    async def create_asset(self, budget_id: UUID, data: AssetCreate) -> Asset:
        payload = data.model_dump()
        payload["type"] = data.type.value
        return await self.asset_repo.create(Asset(budget_id=budget_id, **payload))

    async def update_asset(self, budget_id: UUID, asset_id: UUID, data: AssetUpdate) -> Asset:
        asset = await self.get_asset(budget_id, asset_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("type") is not None:
            changes["type"] = changes["type"].value
        return await self.asset_repo.update(asset, changes)

    async def delete_asset(self, budget_id: UUID, asset_id: UUID) -> None:
        await self.asset_repo.delete(await self.get_asset(budget_id, asset_id))

    async def list_liabilities(self, budget_id: UUID) -> list[Liability]:
        return await self.liability_repo.get_all_by_budget(budget_id)

    async def get_liability(self, budget_id: UUID, liability_id: UUID) -> Liability:
        liability = await self.liability_repo.get_by_budget(budget_id, liability_id)
        if liability is None:
            raise NotFoundError("API_004", details={"liability_id": str(liability_id)})
        return liability

    async def create_liability(self, budget_id: UUID, data: LiabilityCreate) -> Liability:
        payload = data.model_dump()
        payload["type"] = data.type.value
        return await self.liability_repo.create(Liability(budget_id=budget_id, **payload))

    async def update_liability(
        self, budget_id: UUID, liability_id: UUID, data: LiabilityUpdate
    ) -> Liability:
        liability = await self.get_liability(budget_id, liability_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("type") is not None:
            changes["type"] = changes["type"].value
        return await self.liability_repo.update(liability, changes)

    async def delete_liability(self, budget_id: UUID, liability_id: UUID) -> None:
        await self.liability_repo.delete(await self.get_liability(budget_id, liability_id))

    async def summary(self, budget_id: UUID) -> NetWorthResponse:
        """Net worth = total assets - total liabilities."""
        total_assets = await self.asset_repo.total(budget_id)
        total_liabilities = await self.liability_repo.total(budget_id)
        return NetWorthResponse(
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            net_worth=total_assets - total_liabilities,
            assets=[AssetResponse.model_validate(a) for a in await self.list_assets(budget_id)],
            liabilities=[
                LiabilityResponse.model_validate(item) for item in await self.list_liabilities(budget_id)
            ],
        )
