"""Schemas for bank aggregator data, sync results and bulk import.

The first group are internal models produced by the aggregator clients and
the reconciliation pipeline. The second group are request/response models
for the bank endpoints.
"""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from budget_api.reconciliation.dates import parse_calendar_date
from budget_api.schemas.expense import ExpenseResponse

# Column sizes of the expense fields an import writes
DESCRIPTION_MAX_LENGTH = 500
LABEL_MAX_LENGTH = 255


# ---------------------------------------------------------------------------
# Internal models
# ---------------------------------------------------------------------------


class ExternalAccount(BaseModel):
    """An account held at a linked institution."""

    account_id: str
    name: str
    type: str = Field(description="Aggregator account type (credit, depository, loan, ...)")
    subtype: str | None = None
    mask: str | None = Field(None, description="Last digits of the account number")
    institution_name: str = "Unknown"


class AccountBalance(BaseModel):
    current: Decimal | None = None
    available: Decimal | None = None
    currency: str | None = None


class AccountWithBalance(ExternalAccount):
    balance: AccountBalance = Field(default_factory=AccountBalance)
    connection_id: str | None = None


class ExchangedConnection(BaseModel):
    """Result of exchanging a link-flow token for a long-lived credential."""

    connection_id: str
    access_token: str
    institution_id: str | None = None
    institution_name: str = "Unknown"


class LinkToken(BaseModel):
    link_token: str
    app_id: str | None = Field(None, description="Connect application id (Teller)")
    environment: str | None = None
    expiration: str | None = None


class NormalizedTransaction(BaseModel):
    """Provider-independent view of one raw aggregator transaction."""

    external_id: str
    signed_amount: Decimal = Field(description="Amount with the provider's own sign convention")
    calendar_date: dt.date
    display_name: str
    merchant_name: str | None = None
    provider_categories: list[str] = Field(default_factory=list)
    account_id: str
    account_display_name: str = "Unknown Account"
    institution_name: str = "Unknown Institution"
    pending: bool = False


# ---------------------------------------------------------------------------
# Sync
# ---------------------------------------------------------------------------


class SyncRequest(BaseModel):
    start_date: dt.date | None = Field(None, description="First day of the range (inclusive)")
    end_date: dt.date | None = Field(None, description="Last day of the range (inclusive)")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        if isinstance(value, str):
            return parse_calendar_date(value)
        return value


class SyncCandidate(BaseModel):
    """A transaction classified as an expense and not yet imported."""

    transaction_id: str
    name: str
    merchant_name: str | None = None
    amount: Decimal = Field(description="Expense amount (always positive)")
    date: dt.date
    provider_categories: list[str] = Field(default_factory=list)
    account_name: str
    institution_name: str


class SyncStats(BaseModel):
    """Why transactions were left out, counted per reason."""

    duplicate: int = 0
    not_expense: int = 0
    unsupported: int = 0
    pending: int = 0
    unknown_account: int = 0

    @property
    def total(self) -> int:
        return self.duplicate + self.not_expense + self.unsupported + self.pending + self.unknown_account


class SyncResult(BaseModel):
    transactions: list[SyncCandidate] = Field(default_factory=list)
    skipped: int = Field(0, description="Sum of every skip reason in stats")
    message: str
    stats: SyncStats = Field(default_factory=SyncStats)
    failed_institutions: list[str] = Field(
        default_factory=list, description="Institutions whose fetch failed or timed out"
    )

    @classmethod
    def build(
        cls,
        transactions: list[SyncCandidate],
        stats: SyncStats,
        failed_institutions: list[str] | None = None,
    ) -> "SyncResult":
        skipped = stats.total
        return cls(
            transactions=transactions,
            skipped=skipped,
            message=f"Found {len(transactions)} transactions to categorize, skipped {skipped}",
            stats=stats,
            failed_institutions=failed_institutions or [],
        )


# ---------------------------------------------------------------------------
# Bulk import
# ---------------------------------------------------------------------------


class ImportEntry(SyncCandidate):
    """A sync candidate with the category the user picked (if any)."""

    transaction_id: str = Field(..., min_length=1, max_length=LABEL_MAX_LENGTH)
    name: str = Field(..., max_length=DESCRIPTION_MAX_LENGTH)
    account_name: str = Field(..., max_length=LABEL_MAX_LENGTH)
    institution_name: str = Field(..., max_length=LABEL_MAX_LENGTH)
    category_id: UUID | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        if isinstance(value, str):
            return parse_calendar_date(value)
        return value

    @field_validator("amount")
    @classmethod
    def _non_negative(cls, value: Decimal) -> Decimal:
        return abs(value)


class ImportRequest(BaseModel):
    transactions: list[ImportEntry] = Field(..., description="Entries to import")


class ImportSkip(BaseModel):
    transaction_id: str
    reason: str = Field(description="missing_category or unknown_category")


class ImportFailure(BaseModel):
    transaction_id: str
    error_code: str
    message: str


class ImportResult(BaseModel):
    created_count: int
    expenses: list[ExpenseResponse] = Field(default_factory=list)
    skipped: list[ImportSkip] = Field(default_factory=list)
    failed: list[ImportFailure] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------


class ExchangeRequest(BaseModel):
    public_token: str | None = Field(None, description="Token returned by the link flow (Plaid)")
    access_token: str | None = Field(None, description="Access token returned by Teller Connect")
    institution_name: str | None = Field(None, description="Institution name from link metadata")

    @model_validator(mode="after")
    def _one_token(self) -> "ExchangeRequest":
        if not (self.public_token or self.access_token):
            raise ValueError("public_token or access_token is required")
        return self

    @property
    def token(self) -> str:
        return self.public_token or self.access_token


class ExchangeResponse(BaseModel):
    connection_id: str
    institution_name: str
    created: bool = Field(description="False when an existing connection was updated")
