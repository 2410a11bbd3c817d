"""Category model for organizing spending within a budget."""
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_api.models.base import BaseModel

DEFAULT_COLOR = "#6366f1"
DEFAULT_ICON = "💰"


class Category(BaseModel):
    """Spending category (e.g., 'Groceries') with a monthly allocation."""

    __tablename__ = "categories"
    __table_args__ = (CheckConstraint("budget_amount >= 0", name="ck_category_budget_non_negative"),)

    budget_id: Mapped[UUID] = mapped_column(
        ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(9), nullable=False, default=DEFAULT_COLOR)
    icon: Mapped[str] = mapped_column(String(16), nullable=False, default=DEFAULT_ICON)
    budget_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    rollover: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name}, budget_id={self.budget_id})>"
