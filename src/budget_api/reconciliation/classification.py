"""Provider adapters: normalize raw aggregator records and classify them.

Each aggregator reports amounts with its own sign convention. A
``ProviderAdapter`` hides that difference behind two operations so the sync
pipeline can treat every provider the same way:

- ``normalize`` maps one raw record to a ``NormalizedTransaction``
- ``classify`` decides whether a normalized transaction is an expense
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, NamedTuple

from budget_api.models.budget import AggregatorProvider
from budget_api.reconciliation.dates import parse_calendar_date
from budget_api.schemas.bank import ExternalAccount, NormalizedTransaction

logger = logging.getLogger(__name__)

CREDIT = "credit"
DEPOSITORY = "depository"
SUPPORTED_ACCOUNT_TYPES = frozenset({CREDIT, DEPOSITORY})


class Decision(str, Enum):
    EXPENSE = "expense"
    NOT_EXPENSE = "not_expense"
    UNSUPPORTED = "unsupported"


class Classification(NamedTuple):
    decision: Decision
    # Positive expense amount; None unless decision is EXPENSE
    amount: Decimal | None = None


def to_decimal(value: Any) -> Decimal:
    """Convert an aggregator amount (number or numeric string) to Decimal.

    Unparseable amounts become zero, which never classifies as an expense.
    """
    if value is None:
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning("Unparseable transaction amount", extra={"amount": str(value)})
        return Decimal("0")


class ProviderAdapter(ABC):
    """Strategy for one aggregator's data conventions."""

    provider: AggregatorProvider

    @abstractmethod
    def normalize(self, raw: dict[str, Any], account: ExternalAccount) -> NormalizedTransaction:
        """Map one raw transaction record into the common shape."""

    @abstractmethod
    def is_expense(self, amount: Decimal, account_type: str) -> bool:
        """Apply the provider's sign convention for a supported account type."""

    def classify(self, txn: NormalizedTransaction, account_type: str) -> Classification:
        """Decide Expense / NotExpense / Unsupported for one transaction.

        Account types other than credit and depository are Unsupported for
        every provider. Expense amounts are returned as absolute values.
        """
        if account_type not in SUPPORTED_ACCOUNT_TYPES:
            return Classification(Decision.UNSUPPORTED)
        if self.is_expense(txn.signed_amount, account_type):
            return Classification(Decision.EXPENSE, abs(txn.signed_amount))
        return Classification(Decision.NOT_EXPENSE)


class PlaidAdapter(ProviderAdapter):
    """Plaid: positive amounts are money leaving the account.

    Charges on a credit account are positive. Withdrawals from a depository
    account are treated as expenses when negative, matching how the
    linked institutions in use report them.
    """

    provider = AggregatorProvider.PLAID

    def normalize(self, raw: dict[str, Any], account: ExternalAccount) -> NormalizedTransaction:
        categories = raw.get("category") or []
        if isinstance(categories, str):
            categories = [categories]
        return NormalizedTransaction(
            external_id=raw["transaction_id"],
            signed_amount=to_decimal(raw.get("amount")),
            calendar_date=parse_calendar_date(raw["date"]),
            display_name=raw.get("name") or raw.get("merchant_name") or "Transaction",
            merchant_name=raw.get("merchant_name"),
            provider_categories=list(categories),
            account_id=raw.get("account_id") or account.account_id,
            account_display_name=account.name or "Unknown Account",
            institution_name=account.institution_name or "Unknown Institution",
            pending=bool(raw.get("pending", False)),
        )

    def is_expense(self, amount: Decimal, account_type: str) -> bool:
        if account_type == CREDIT:
            return amount > 0
        return amount < 0


class TellerAdapter(ProviderAdapter):
    """Teller: negative amounts are outgoing, whatever the account type."""

    provider = AggregatorProvider.TELLER

    def normalize(self, raw: dict[str, Any], account: ExternalAccount) -> NormalizedTransaction:
        details = raw.get("details") or {}
        counterparty = details.get("counterparty") or {}
        merchant = (raw.get("merchant") or {}).get("name") or counterparty.get("name")
        category = raw.get("category") or details.get("category")
        return NormalizedTransaction(
            external_id=raw["id"],
            signed_amount=to_decimal(raw.get("amount")),
            calendar_date=parse_calendar_date(raw["date"]),
            display_name=raw.get("description") or merchant or "Transaction",
            merchant_name=merchant,
            provider_categories=[category] if category else [],
            account_id=raw.get("account_id") or account.account_id,
            account_display_name=account.name or "Unknown Account",
            institution_name=account.institution_name or "Unknown Institution",
            pending=raw.get("status") == "pending",
        )

    def is_expense(self, amount: Decimal, account_type: str) -> bool:
        return amount < 0


ADAPTERS: dict[AggregatorProvider, ProviderAdapter] = {
    AggregatorProvider.PLAID: PlaidAdapter(),
    AggregatorProvider.TELLER: TellerAdapter(),
}


def get_adapter(provider: AggregatorProvider) -> ProviderAdapter:
    return ADAPTERS[provider]
