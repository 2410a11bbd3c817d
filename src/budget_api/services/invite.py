"""Email invites: issue, validate and consume."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.config import settings
from budget_api.core.exceptions import NotFoundError, ValidationError
from budget_api.core.security import generate_invite_token
from budget_api.models.budget import Budget
from budget_api.models.invite import Invite
from budget_api.repositories.budget import BudgetRepository
from budget_api.repositories.invite import InviteRepository
from budget_api.repositories.user import UserRepository
from budget_api.services.mailer import EmailSender

logger = logging.getLogger(__name__)


class InviteService:
    """Invite lifecycle. Sending requires an EmailSender; validating does not."""

    def __init__(self, db: AsyncSession, email_sender: EmailSender | None = None):
        self.db = db
        self.email_sender = email_sender
        self.invite_repo = InviteRepository(db)
        self.budget_repo = BudgetRepository(db)
        self.user_repo = UserRepository(db)

    async def send(self, budget: Budget, email: str) -> tuple[Invite, bool]:
        """Invite an email address to a budget the caller already has access to.

        A pending invite for the same address is re-sent instead of creating
        a new one. The invite is stored before the email goes out, so a
        delivery failure still leaves a usable invite.

        Returns:
            (invite, resent)

        Raises:
            ValidationError: If the address already belongs to a member
            EmailDeliveryError: If the email could not be delivered
        """
        email = email.strip().lower()
        existing_user = await self.user_repo.get_by_email(email)
        if existing_user is not None and budget.has_access(existing_user.id):
            raise ValidationError("VAL_005", details={"budget_id": str(budget.id)})

        invite = await self.invite_repo.get_pending(budget.id, email)
        resent = invite is not None and invite.is_usable()
        if not resent:
            invite = Invite.issue(
                email=email,
                budget_id=budget.id,
                token=generate_invite_token(),
                valid_days=settings.invite_expire_days,
            )
            invite = await self.invite_repo.create(invite)

        logger.info(
            "Invite issued",
            extra={"budget_id": str(budget.id), "created": not resent},
        )
        await self.email_sender.send_invite(invite.email, invite.token, budget.name)
        return invite, resent

    async def get_usable(self, token: str, email: str | None = None) -> Invite:
        """Look up an invite and check it can still be used.

        Args:
            token: Invite token
            email: If given, the invite must be addressed to this email

        Raises:
            NotFoundError: If the token does not exist
            ValidationError: If used, addressed elsewhere, or expired (410)
        """
        invite = await self.invite_repo.get_by_token(token)
        if invite is None:
            raise NotFoundError("API_006")
        if invite.used:
            raise ValidationError("VAL_004", details={"reason": "used"})
        if email is not None and invite.email != email.lower():
            raise ValidationError("VAL_004", details={"reason": "email mismatch"})
        if invite.is_expired():
            raise ValidationError("VAL_004", details={"reason": "expired"}, http_status=410)
        return invite

    async def consume(self, invite: Invite, user_id: UUID) -> Budget:
        """Add the user to the invited budget and mark the invite used."""
        budget = await self.budget_repo.get_by_id(invite.budget_id)
        if budget is None:
            raise NotFoundError("API_001")
        if not budget.has_access(user_id):
            budget.add_member(user_id)
        invite.used = True
        await self.db.commit()
        logger.info(
            "Invite accepted", extra={"user_id": str(user_id), "budget_id": str(budget.id)}
        )
        return await self.budget_repo.reload(budget)

    async def accept(self, token: str, user_id: UUID, email: str) -> Budget:
        """Accept an invite as an already registered user."""
        invite = await self.get_usable(token, email=email)
        return await self.consume(invite, user_id)
