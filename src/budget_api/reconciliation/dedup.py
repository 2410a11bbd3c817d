"""Drop transactions that were already imported into a budget."""

from collections.abc import Iterable
from typing import TypeVar

from budget_api.schemas.bank import NormalizedTransaction

T = TypeVar("T", bound=NormalizedTransaction)


def partition_new(candidates: Iterable[T], existing_ids: set[str]) -> tuple[list[T], list[T]]:
    """Split candidates into (new, duplicates).

    A candidate is a duplicate when its external id is in ``existing_ids``
    or already appeared earlier in the same batch. Input order is kept.
    """
    seen = set(existing_ids)
    fresh: list[T] = []
    duplicates: list[T] = []
    for txn in candidates:
        if txn.external_id in seen:
            duplicates.append(txn)
            continue
        seen.add(txn.external_id)
        fresh.append(txn)
    return fresh, duplicates
