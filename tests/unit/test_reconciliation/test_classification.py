"""Provider sign conventions and the expense decision."""

from datetime import date
from decimal import Decimal

import pytest

from budget_api.models.budget import AggregatorProvider
from budget_api.reconciliation.classification import (
    Decision,
    PlaidAdapter,
    TellerAdapter,
    get_adapter,
    to_decimal,
)
from budget_api.schemas.bank import ExternalAccount, NormalizedTransaction


def _account(type_: str = "credit") -> ExternalAccount:
    return ExternalAccount(
        account_id="acc-1", name="Sapphire", type=type_, institution_name="Chase"
    )


def _txn(amount: str) -> NormalizedTransaction:
    return NormalizedTransaction(
        external_id="t-1",
        signed_amount=Decimal(amount),
        calendar_date=date(2024, 3, 15),
        display_name="Coffee",
        account_id="acc-1",
    )


class TestPlaidClassification:
    adapter = PlaidAdapter()

    def test_credit_charge_is_expense(self):
        decision, amount = self.adapter.classify(_txn("42.50"), "credit")

        assert decision is Decision.EXPENSE
        assert amount == Decimal("42.50")

    def test_credit_payment_is_not_expense(self):
        decision, amount = self.adapter.classify(_txn("-10.00"), "credit")

        assert decision is Decision.NOT_EXPENSE
        assert amount is None

    def test_depository_negative_is_expense(self):
        decision, amount = self.adapter.classify(_txn("-25.00"), "depository")

        assert decision is Decision.EXPENSE
        assert amount == Decimal("25.00")

    def test_depository_positive_is_not_expense(self):
        assert self.adapter.classify(_txn("1000"), "depository").decision is Decision.NOT_EXPENSE

    def test_zero_is_not_expense(self):
        assert self.adapter.classify(_txn("0"), "credit").decision is Decision.NOT_EXPENSE

    @pytest.mark.parametrize("account_type", ["loan", "investment", "other"])
    def test_other_account_types_are_unsupported(self, account_type):
        assert self.adapter.classify(_txn("42.50"), account_type).decision is Decision.UNSUPPORTED

    def test_normalize(self):
        raw = {
            "transaction_id": "plaid-1",
            "amount": 42.5,
            "date": "2024-03-15",
            "name": "STARBUCKS #123",
            "merchant_name": "Starbucks",
            "category": ["Food and Drink", "Coffee"],
            "account_id": "acc-1",
            "pending": False,
        }

        txn = self.adapter.normalize(raw, _account())

        assert txn.external_id == "plaid-1"
        assert txn.signed_amount == Decimal("42.5")
        assert txn.calendar_date == date(2024, 3, 15)
        assert txn.display_name == "STARBUCKS #123"
        assert txn.provider_categories == ["Food and Drink", "Coffee"]
        assert txn.account_display_name == "Sapphire"
        assert txn.institution_name == "Chase"
        assert txn.pending is False

    def test_normalize_pending(self):
        raw = {"transaction_id": "p", "amount": 5, "date": "2024-03-15", "pending": True}

        assert self.adapter.normalize(raw, _account()).pending is True

    def test_normalize_missing_id_raises(self):
        with pytest.raises(KeyError):
            self.adapter.normalize({"amount": 5, "date": "2024-03-15"}, _account())


class TestTellerClassification:
    adapter = TellerAdapter()

    def test_negative_is_expense(self):
        decision, amount = self.adapter.classify(_txn("-15.00"), "depository")

        assert decision is Decision.EXPENSE
        assert amount == Decimal("15.00")

    def test_positive_is_not_expense(self):
        assert self.adapter.classify(_txn("15.00"), "credit").decision is Decision.NOT_EXPENSE

    def test_other_account_types_are_unsupported(self):
        assert self.adapter.classify(_txn("-15.00"), "loan").decision is Decision.UNSUPPORTED

    def test_normalize_uses_string_amount_and_status(self):
        raw = {
            "id": "txn_1",
            "amount": "-15.00",
            "date": "2024-03-15",
            "description": "",
            "details": {"category": "dining", "counterparty": {"name": "Chipotle"}},
            "status": "pending",
            "account_id": "acc-1",
        }

        txn = self.adapter.normalize(raw, _account("depository"))

        assert txn.signed_amount == Decimal("-15.00")
        assert txn.display_name == "Chipotle"
        assert txn.merchant_name == "Chipotle"
        assert txn.provider_categories == ["dining"]
        assert txn.pending is True

    def test_normalize_falls_back_to_generic_name(self):
        raw = {"id": "txn_2", "amount": "-1", "date": "2024-03-15", "status": "posted"}

        txn = self.adapter.normalize(raw, _account("depository"))

        assert txn.display_name == "Transaction"
        assert txn.pending is False


def test_get_adapter():
    assert isinstance(get_adapter(AggregatorProvider.PLAID), PlaidAdapter)
    assert isinstance(get_adapter(AggregatorProvider.TELLER), TellerAdapter)


@pytest.mark.parametrize(
    "value,expected",
    [(42.5, Decimal("42.5")), ("-15.00", Decimal("-15.00")), (None, Decimal("0")), ("n/a", Decimal("0"))],
)
def test_to_decimal(value, expected):
    assert to_decimal(value) == expected
