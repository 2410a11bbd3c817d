"""Budget aggregate: the budget, its members and its linked bank connections."""
from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budget_api.models.base import BaseModel, utc_now


class MemberRole(str, Enum):
    OWNER = "owner"
    MEMBER = "member"


class AggregatorProvider(str, Enum):
    PLAID = "plaid"
    TELLER = "teller"


class Budget(BaseModel):
    """A shared ledger owned by one user and shared with invited members.

    Always build new budgets with ``Budget.create`` so the owner is present in
    ``members`` exactly once.
    """

    __tablename__ = "budgets"

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="My Budget")
    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    invite_code: Mapped[str | None] = mapped_column(String(32), unique=True, nullable=True)

    members: Mapped[list["BudgetMember"]] = relationship(
        "BudgetMember",
        back_populates="budget",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="BudgetMember.joined_at",
    )
    connections: Mapped[list["BankConnection"]] = relationship(
        "BankConnection",
        back_populates="budget",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @classmethod
    def create(cls, name: str, owner_id: UUID) -> "Budget":
        """Build a new budget with its owner already inserted as a member."""
        budget = cls(name=name, owner_id=owner_id)
        budget.members.append(BudgetMember(user_id=owner_id, role=MemberRole.OWNER.value))
        return budget

    def is_member(self, user_id: UUID) -> bool:
        return any(member.user_id == user_id for member in self.members)

    def has_access(self, user_id: UUID) -> bool:
        return self.owner_id == user_id or self.is_member(user_id)

    def add_member(self, user_id: UUID) -> "BudgetMember":
        """Append a plain member. Callers check ``is_member`` first."""
        member = BudgetMember(user_id=user_id, role=MemberRole.MEMBER.value)
        self.members.append(member)
        return member

    def remove_member(self, user_id: UUID) -> bool:
        """Drop a member; the owner entry can never be removed."""
        if user_id == self.owner_id:
            raise ValueError("Cannot remove budget owner")
        for member in list(self.members):
            if member.user_id == user_id:
                self.members.remove(member)
                return True
        return False

    def __repr__(self) -> str:
        return f"<Budget(id={self.id}, name={self.name}, owner_id={self.owner_id})>"


class BudgetMember(BaseModel):
    """Membership of one user in one budget."""

    __tablename__ = "budget_members"
    __table_args__ = (UniqueConstraint("budget_id", "user_id", name="uq_budget_member"),)

    budget_id: Mapped[UUID] = mapped_column(
        ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=MemberRole.MEMBER.value)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    budget: Mapped["Budget"] = relationship("Budget", back_populates="members")
    user: Mapped["User"] = relationship("User", lazy="selectin")

    @property
    def name(self) -> str | None:
        return self.user.name if self.user else None

    @property
    def email(self) -> str | None:
        return self.user.email if self.user else None

    def __repr__(self) -> str:
        return f"<BudgetMember(budget_id={self.budget_id}, user_id={self.user_id}, role={self.role})>"


class BankConnection(BaseModel):
    """One linked institution at an aggregator, with its opaque access credential."""

    __tablename__ = "bank_connections"
    __table_args__ = (
        UniqueConstraint("budget_id", "provider", "connection_id", name="uq_budget_provider_connection"),
    )

    budget_id: Mapped[UUID] = mapped_column(
        ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    # Plaid item_id / Teller connection_id
    connection_id: Mapped[str] = mapped_column(String(255), nullable=False)
    access_token: Mapped[str] = mapped_column(String(512), nullable=False)
    institution_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    institution_name: Mapped[str] = mapped_column(String(255), nullable=False, default="Unknown")

    budget: Mapped["Budget"] = relationship("Budget", back_populates="connections")

    def __repr__(self) -> str:
        return (
            f"<BankConnection(id={self.id}, provider={self.provider}, "
            f"institution={self.institution_name})>"
        )
