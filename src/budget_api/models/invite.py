"""Email invite to join a budget."""
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from budget_api.models.base import BaseModel, utc_now


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class Invite(BaseModel):
    """Single-use invite token, valid for a fixed number of days."""

    __tablename__ = "invites"
    __table_args__ = (Index("ix_invites_email_budget_id", "email", "budget_id"),)

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    budget_id: Mapped[UUID] = mapped_column(
        ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False
    )
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @classmethod
    def issue(cls, email: str, budget_id: UUID, token: str, valid_days: int = 7) -> "Invite":
        return cls(
            email=email.strip().lower(),
            budget_id=budget_id,
            token=token,
            used=False,
            expires_at=utc_now() + timedelta(days=valid_days),
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        return _as_utc(self.expires_at) <= (now or utc_now())

    def is_usable(self, now: datetime | None = None) -> bool:
        return not self.used and not self.is_expired(now)

    def __repr__(self) -> str:
        return f"<Invite(id={self.id}, budget_id={self.budget_id}, used={self.used})>"
