"""Invite repository."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.models.invite import Invite
from budget_api.repositories.base import BaseRepository


class InviteRepository(BaseRepository[Invite]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Invite)

    async def get_by_token(self, token: str) -> Invite | None:
        result = await self.db.execute(select(Invite).where(Invite.token == token))
        return result.scalar_one_or_none()

    async def get_pending(self, budget_id: UUID, email: str) -> Invite | None:
        """Latest unused invite for this email and budget, if any."""
        result = await self.db.execute(
            select(Invite)
            .where(
                Invite.budget_id == budget_id,
                Invite.email == email.lower(),
                Invite.used == False,
            )
            .order_by(Invite.created_at.desc())
        )
        return result.scalars().first()
