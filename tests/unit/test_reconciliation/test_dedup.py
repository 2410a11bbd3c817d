from datetime import date
from decimal import Decimal

from budget_api.reconciliation.dedup import partition_new
from budget_api.schemas.bank import NormalizedTransaction


def _txn(external_id: str) -> NormalizedTransaction:
    return NormalizedTransaction(
        external_id=external_id,
        signed_amount=Decimal("1"),
        calendar_date=date(2024, 3, 1),
        display_name=external_id,
        account_id="acc",
    )


def test_existing_ids_are_duplicates():
    fresh, duplicates = partition_new([_txn("a"), _txn("b"), _txn("c")], {"b"})

    assert [t.external_id for t in fresh] == ["a", "c"]
    assert [t.external_id for t in duplicates] == ["b"]


def test_repeats_within_batch_are_collapsed():
    fresh, duplicates = partition_new([_txn("a"), _txn("a"), _txn("b")], set())

    assert [t.external_id for t in fresh] == ["a", "b"]
    assert len(duplicates) == 1


def test_existing_ids_are_not_mutated():
    existing = {"x"}
    partition_new([_txn("a")], existing)

    assert existing == {"x"}


def test_empty_batch():
    assert partition_new([], {"a"}) == ([], [])
