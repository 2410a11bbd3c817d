"""Pydantic schemas for assets, liabilities and net worth."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from budget_api.models.networth import AssetType, LiabilityType


class AssetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    value: Decimal = Field(..., ge=0, description="Current value")
    type: AssetType = AssetType.OTHER


class AssetUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    value: Decimal | None = Field(None, ge=0)
    type: AssetType | None = None


class AssetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    budget_id: UUID
    name: str
    value: Decimal
    type: str
    created_at: datetime


class LiabilityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., ge=0, description="Outstanding amount")
    type: LiabilityType = LiabilityType.OTHER


class LiabilityUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    amount: Decimal | None = Field(None, ge=0)
    type: LiabilityType | None = None


class LiabilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    budget_id: UUID
    name: str
    amount: Decimal
    type: str
    created_at: datetime


class NetWorthResponse(BaseModel):
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal = Field(description="total_assets - total_liabilities")
    assets: list[AssetResponse]
    liabilities: list[LiabilityResponse]
