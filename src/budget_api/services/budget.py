"""Budget service: access control, membership and invite codes."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.core.exceptions import AccessDeniedError, NotFoundError, ValidationError
from budget_api.core.security import generate_invite_code
from budget_api.models.budget import Budget
from budget_api.repositories.budget import BudgetRepository

logger = logging.getLogger(__name__)


class BudgetService:
    """Service layer for budgets and their members."""

    def __init__(self, db: AsyncSession):
        """Initialize budget service with database session.

        Args:
            db: Database session
        """
        self.db = db
        self.budget_repo = BudgetRepository(db)

    async def require_access(self, user_id: UUID, budget_id: UUID) -> Budget:
        """Load a budget the user owns or belongs to.

        Missing budgets and budgets the user cannot see both raise
        AccessDeniedError, so callers cannot probe for budget ids.

        Raises:
            AccessDeniedError: If the user is neither owner nor member
        """
        budget = await self.budget_repo.get_by_id(budget_id)
        if budget is None or not budget.has_access(user_id):
            logger.warning(
                "Budget access denied",
                extra={"user_id": str(user_id), "budget_id": str(budget_id), "error_code": "ACCESS_001"},
            )
            raise AccessDeniedError(
                "ACCESS_001", details={"user_id": str(user_id), "budget_id": str(budget_id)}
            )
        return budget

    async def require_owner(self, user_id: UUID, budget_id: UUID) -> Budget:
        """Like require_access, but only the owner passes.

        Raises:
            AccessDeniedError: ACCESS_001 for non-members, ACCESS_002 for members
        """
        budget = await self.require_access(user_id, budget_id)
        if budget.owner_id != user_id:
            raise AccessDeniedError("ACCESS_002", details={"budget_id": str(budget_id)})
        return budget

    async def get(self, user_id: UUID, budget_id: UUID) -> Budget:
        """Budget with members and connections, for users with access."""
        budget = await self.require_access(user_id, budget_id)
        return await self.budget_repo.reload(budget)

    async def list_for_user(self, user_id: UUID) -> list[Budget]:
        return await self.budget_repo.get_for_user(user_id)

    async def create(self, user_id: UUID, name: str) -> Budget:
        budget = Budget.create(name=name, owner_id=user_id)
        created = await self.budget_repo.create(budget)
        logger.info("Budget created", extra={"user_id": str(user_id), "budget_id": str(created.id)})
        return await self.budget_repo.reload(created)

    async def rename(self, user_id: UUID, budget_id: UUID, name: str) -> Budget:
        budget = await self.require_owner(user_id, budget_id)
        budget = await self.budget_repo.update(budget, {"name": name})
        return await self.budget_repo.reload(budget)

    async def get_invite_code(self, user_id: UUID, budget_id: UUID) -> str:
        """Return the budget's invite code, generating one on first use."""
        budget = await self.require_access(user_id, budget_id)
        if not budget.invite_code:
            budget = await self.budget_repo.update(budget, {"invite_code": generate_invite_code()})
        return budget.invite_code

    async def regenerate_invite_code(self, user_id: UUID, budget_id: UUID) -> str:
        """Replace the invite code so previously shared codes stop working."""
        budget = await self.require_owner(user_id, budget_id)
        budget = await self.budget_repo.update(budget, {"invite_code": generate_invite_code()})
        return budget.invite_code

    async def join_by_code(self, user_id: UUID, invite_code: str) -> Budget:
        """Join a budget using its shareable invite code.

        Raises:
            NotFoundError: If no budget has this code
            ValidationError: If the user is already a member
        """
        budget = await self.budget_repo.get_by_invite_code(invite_code)
        if budget is None:
            raise NotFoundError("API_001", details={"reason": "invite code not found"})
        if budget.has_access(user_id):
            raise ValidationError("VAL_005", details={"budget_id": str(budget.id)})

        budget.add_member(user_id)
        await self.db.commit()
        logger.info("Member joined budget", extra={"user_id": str(user_id), "budget_id": str(budget.id)})
        return await self.budget_repo.reload(budget)

    async def remove_member(self, user_id: UUID, budget_id: UUID, member_user_id: UUID) -> Budget:
        """Remove a member (owner only). The owner itself can never be removed.

        Raises:
            AccessDeniedError: If the acting user is not the owner
            ValidationError: If the target is the owner
            NotFoundError: If the target is not a member
        """
        budget = await self.require_owner(user_id, budget_id)
        try:
            removed = budget.remove_member(member_user_id)
        except ValueError:
            raise ValidationError("VAL_006", details={"budget_id": str(budget_id)})
        if not removed:
            raise NotFoundError("API_001", details={"reason": "member not found"})

        await self.db.commit()
        logger.info("Member removed", extra={"user_id": str(user_id), "budget_id": str(budget_id)})
        return await self.budget_repo.reload(budget)
