"""Integration tests for importing categorized sync candidates."""

from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import DataError

from budget_api.reconciliation.writer import BulkImportWriter
from budget_api.schemas.bank import ImportEntry


def entry(txn_id: str, category_id, amount: str = "12.50", day: str = "2024-03-10") -> dict:
    return {
        "transaction_id": txn_id,
        "name": f"Merchant {txn_id}",
        "amount": amount,
        "date": day,
        "account_name": "Sapphire",
        "institution_name": "Chase",
        "category_id": str(category_id) if category_id else None,
    }


def import_url(budget_id) -> str:
    return f"/api/v1/budgets/{budget_id}/bank/import"


class TestBulkImport:
    @pytest.mark.asyncio
    async def test_import_creates_categorized_entries(
        self, client: AsyncClient, test_budget, test_categories, auth_headers, test_user
    ):
        budget_id = test_budget.id
        user_id = test_user.id
        groceries, dining = (c.id for c in test_categories)
        entries = [
            entry("t1", groceries, "42.50"),
            entry("t2", dining),
            entry("t3", None),
            entry("t4", groceries, day="2024-03-11T23:30:00Z"),
            entry("t5", dining),
        ]

        response = await client.post(import_url(budget_id), json={"transactions": entries}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["created_count"] == 4
        assert data["skipped"] == [{"transaction_id": "t3", "reason": "missing_category"}]
        assert data["failed"] == []
        by_id = {e["external_transaction_id"]: e for e in data["expenses"]}
        assert Decimal(by_id["t1"]["amount"]) == Decimal("42.50")
        assert by_id["t1"]["description"] == "Merchant t1"
        assert by_id["t1"]["created_by"] == str(user_id)
        assert by_id["t1"]["institution_name"] == "Chase"
        assert by_id["t4"]["date"] == "2024-03-11"

    @pytest.mark.asyncio
    async def test_negative_amounts_are_stored_positive(
        self, client: AsyncClient, test_budget, test_categories, auth_headers
    ):
        response = await client.post(
            import_url(test_budget.id),
            json={"transactions": [entry("neg", test_categories[0].id, "-15.25")]},
            headers=auth_headers,
        )

        assert Decimal(response.json()["expenses"][0]["amount"]) == Decimal("15.25")

    @pytest.mark.asyncio
    async def test_category_from_other_budget_is_skipped(
        self, client: AsyncClient, test_budget, test_categories, auth_headers
    ):
        budget_id = test_budget.id
        category_id = test_categories[0].id
        other_budget = (
            await client.post("/api/v1/budgets", json={"name": "Side"}, headers=auth_headers)
        ).json()
        foreign = (
            await client.post(
                f"/api/v1/budgets/{other_budget['id']}/categories", json={"name": "Travel"}, headers=auth_headers
            )
        ).json()

        response = await client.post(
            import_url(budget_id),
            json={"transactions": [entry("mine", category_id), entry("theirs", foreign["id"])]},
            headers=auth_headers,
        )

        data = response.json()
        assert data["created_count"] == 1
        assert data["skipped"] == [{"transaction_id": "theirs", "reason": "unknown_category"}]

    @pytest.mark.asyncio
    async def test_duplicate_fails_alone(self, client: AsyncClient, test_budget, test_categories, auth_headers):
        budget_id = test_budget.id
        category_id = test_categories[0].id
        await client.post(import_url(budget_id), json={"transactions": [entry("dup", category_id)]}, headers=auth_headers)

        response = await client.post(
            import_url(budget_id),
            json={"transactions": [entry("before", category_id), entry("dup", category_id), entry("after", category_id)]},
            headers=auth_headers,
        )
        listed = await client.get(f"/api/v1/budgets/{budget_id}/expenses", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["created_count"] == 2
        assert [e["external_transaction_id"] for e in data["expenses"]] == ["before", "after"]
        assert len(data["failed"]) == 1
        assert data["failed"][0]["transaction_id"] == "dup"
        assert data["failed"][0]["error_code"] == "DB_002"
        assert len(listed.json()) == 3

    @pytest.mark.asyncio
    async def test_external_id_is_unique_across_budgets(
        self, client: AsyncClient, test_budget, test_categories, auth_headers, make_user, make_headers
    ):
        await client.post(
            import_url(test_budget.id),
            json={"transactions": [entry("shared-id", test_categories[0].id)]},
            headers=auth_headers,
        )
        stranger = await make_user("stranger@example.com", "Stranger")
        stranger_headers = make_headers(stranger.id)
        budget = (await client.post("/api/v1/budgets", json={"name": "Mine"}, headers=stranger_headers)).json()
        category = (
            await client.post(f"/api/v1/budgets/{budget['id']}/categories", json={"name": "Food"}, headers=stranger_headers)
        ).json()

        response = await client.post(
            import_url(budget["id"]),
            json={"transactions": [entry("shared-id", category["id"])]},
            headers=stranger_headers,
        )

        assert response.json()["created_count"] == 0
        assert response.json()["failed"][0]["error_code"] == "DB_002"

    @pytest.mark.asyncio
    async def test_non_member_denied(self, client: AsyncClient, test_budget, test_categories, other_headers):
        response = await client.post(
            import_url(test_budget.id),
            json={"transactions": [entry("t1", test_categories[0].id)]},
            headers=other_headers,
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "ACCESS_001"

    @pytest.mark.asyncio
    async def test_budget_without_categories(self, client: AsyncClient, test_budget, auth_headers):
        response = await client.post(
            import_url(test_budget.id), json={"transactions": [entry("t1", None)]}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "SYNC_001"

    @pytest.mark.asyncio
    async def test_overlong_fields_are_rejected(self, client: AsyncClient, test_budget, test_categories, auth_headers):
        too_long = entry("long", test_categories[0].id)
        too_long["name"] = "x" * 501

        response = await client.post(
            import_url(test_budget.id), json={"transactions": [too_long]}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_001"


class TestBulkImportWriter:
    @pytest.mark.asyncio
    async def test_storage_error_fails_only_that_entry(self, db_session, test_budget, test_categories, test_user, monkeypatch):
        budget_id = test_budget.id
        user_id = test_user.id
        category_id = test_categories[0].id
        entries = [ImportEntry(**entry(txn_id, category_id)) for txn_id in ("first", "broken", "last")]

        commit = db_session.commit
        calls = []

        async def commit_failing_second_entry():
            calls.append(1)
            if len(calls) == 2:
                raise DataError("INSERT INTO expenses", {}, Exception("value too long"))
            await commit()

        monkeypatch.setattr(db_session, "commit", commit_failing_second_entry)

        result = await BulkImportWriter(db_session).import_batch(budget_id, user_id, entries)

        assert result.created_count == 2
        assert [e.external_transaction_id for e in result.expenses] == ["first", "last"]
        assert [(f.transaction_id, f.error_code) for f in result.failed] == [("broken", "DB_001")]
