"""Budget repository with membership-aware queries."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from budget_api.models.budget import BankConnection, Budget, BudgetMember
from budget_api.repositories.base import BaseRepository


class BudgetRepository(BaseRepository[Budget]):
    """Repository for the Budget aggregate (members and bank connections)."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Budget)

    async def has_access(self, user_id: UUID, budget_id: UUID) -> bool:
        """True if the user owns the budget or is one of its members.

        A missing budget is reported as no access.
        """
        budget = await self.get_by_id(budget_id)
        if budget is None:
            return False
        return budget.has_access(user_id)

    def _with_members(self):
        # populate_existing: objects already in the session get their members
        # and member users re-read, not just newly loaded rows
        return (
            select(Budget)
            .options(
                selectinload(Budget.members).selectinload(BudgetMember.user),
                selectinload(Budget.connections),
            )
            .execution_options(populate_existing=True)
        )

    async def get_for_user(self, user_id: UUID) -> list[Budget]:
        """Get all budgets the user belongs to, oldest membership first."""
        result = await self.db.execute(
            self._with_members()
            .join(BudgetMember, BudgetMember.budget_id == Budget.id)
            .where(BudgetMember.user_id == user_id)
            .order_by(BudgetMember.joined_at)
        )
        return list(result.scalars().unique().all())

    async def get_primary_for_user(self, user_id: UUID) -> Budget | None:
        """Earliest budget the user joined, used as the login landing budget."""
        budgets = await self.get_for_user(user_id)
        return budgets[0] if budgets else None

    async def get_by_invite_code(self, invite_code: str) -> Budget | None:
        result = await self.db.execute(select(Budget).where(Budget.invite_code == invite_code))
        return result.scalar_one_or_none()

    async def reload(self, budget: Budget) -> Budget:
        """Re-read a budget so its members and connections reflect the last commit."""
        result = await self.db.execute(self._with_members().where(Budget.id == budget.id))
        return result.scalar_one()

    async def get_connection(
        self, budget_id: UUID, provider: str, connection_ref: str
    ) -> BankConnection | None:
        """Find a connection by its provider-side id or by its access credential."""
        result = await self.db.execute(
            select(BankConnection).where(
                BankConnection.budget_id == budget_id,
                BankConnection.provider == provider,
                (BankConnection.connection_id == connection_ref)
                | (BankConnection.access_token == connection_ref),
            )
        )
        return result.scalars().first()

    async def get_connection_by_id(
        self, budget_id: UUID, connection_pk: UUID
    ) -> BankConnection | None:
        result = await self.db.execute(
            select(BankConnection).where(
                BankConnection.budget_id == budget_id, BankConnection.id == connection_pk
            )
        )
        return result.scalar_one_or_none()

    async def get_connections(self, budget_id: UUID, provider: str) -> list[BankConnection]:
        """All connections of a budget for one aggregator."""
        result = await self.db.execute(
            select(BankConnection)
            .where(BankConnection.budget_id == budget_id, BankConnection.provider == provider)
            .order_by(BankConnection.created_at)
        )
        return list(result.scalars().all())
