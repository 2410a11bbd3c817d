"""Asset and liability models used for the net worth summary."""
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_api.models.base import BaseModel


class AssetType(str, Enum):
    CASH = "cash"
    INVESTMENT = "investment"
    PROPERTY = "property"
    VEHICLE = "vehicle"
    OTHER = "other"


class LiabilityType(str, Enum):
    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    MORTGAGE = "mortgage"
    OTHER = "other"


class Asset(BaseModel):
    __tablename__ = "assets"
    __table_args__ = (CheckConstraint("value >= 0", name="ck_asset_value_non_negative"),)

    budget_id: Mapped[UUID] = mapped_column(
        ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=AssetType.OTHER.value)

    def __repr__(self) -> str:
        return f"<Asset(id={self.id}, name={self.name}, value={self.value})>"


class Liability(BaseModel):
    __tablename__ = "liabilities"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_liability_amount_non_negative"),)

    budget_id: Mapped[UUID] = mapped_column(
        ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=LiabilityType.OTHER.value)

    def __repr__(self) -> str:
        return f"<Liability(id={self.id}, name={self.name}, amount={self.amount})>"
