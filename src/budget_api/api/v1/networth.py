"""Asset, liability and net worth endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.api.deps import get_accessible_budget, get_db
from budget_api.models.budget import Budget
from budget_api.schemas.networth import (
    AssetCreate,
    AssetResponse,
    AssetUpdate,
    LiabilityCreate,
    LiabilityResponse,
    LiabilityUpdate,
    NetWorthResponse,
)
from budget_api.services.networth import NetWorthService

router = APIRouter(prefix="/budgets/{budget_id}", tags=["net worth"])


@router.get(
    "/networth",
    response_model=NetWorthResponse,
    summary="Net worth",
    description="Total assets minus total liabilities, with both lists.",
)
async def get_net_worth(
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> NetWorthResponse:
    return await NetWorthService(db).summary(budget.id)


# Assets


@router.get("/assets", response_model=list[AssetResponse], summary="List assets")
async def list_assets(
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> list[AssetResponse]:
    return [AssetResponse.model_validate(a) for a in await NetWorthService(db).list_assets(budget.id)]


@router.post(
    "/assets",
    response_model=AssetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create asset",
)
async def create_asset(
    data: AssetCreate,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> AssetResponse:
    return AssetResponse.model_validate(await NetWorthService(db).create_asset(budget.id, data))


@router.patch("/assets/{asset_id}", response_model=AssetResponse, summary="Update asset")
async def update_asset(
    asset_id: UUID,
    data: AssetUpdate,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> AssetResponse:
    asset = await NetWorthService(db).update_asset(budget.id, asset_id, data)
    return AssetResponse.model_validate(asset)


@router.delete("/assets/{asset_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete asset")
async def delete_asset(
    asset_id: UUID,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> None:
    await NetWorthService(db).delete_asset(budget.id, asset_id)


# Liabilities


@router.get("/liabilities", response_model=list[LiabilityResponse], summary="List liabilities")
async def list_liabilities(
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> list[LiabilityResponse]:
    liabilities = await NetWorthService(db).list_liabilities(budget.id)
    return [LiabilityResponse.model_validate(item) for item in liabilities]


@router.post(
    "/liabilities",
    response_model=LiabilityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create liability",
)
async def create_liability(
    data: LiabilityCreate,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> LiabilityResponse:
    liability = await NetWorthService(db).create_liability(budget.id, data)
    return LiabilityResponse.model_validate(liability)


@router.patch(
    "/liabilities/{liability_id}", response_model=LiabilityResponse, summary="Update liability"
)
async def update_liability(
    liability_id: UUID,
    data: LiabilityUpdate,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> LiabilityResponse:
    liability = await NetWorthService(db).update_liability(budget.id, liability_id, data)
    return LiabilityResponse.model_validate(liability)


@router.delete(
    "/liabilities/{liability_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete liability",
)
async def delete_liability(
    liability_id: UUID,
    budget: Budget = Depends(get_accessible_budget),
    db: AsyncSession = Depends(get_db),
) -> None:
    await NetWorthService(db).delete_liability(budget.id, liability_id)
