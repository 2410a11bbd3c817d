"""Integration tests for expenses and spending summaries."""

from decimal import Decimal

import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, budget_id, headers: dict, **fields):
    payload = {"amount": "10.00", "description": "Lunch", "date": "2024-03-15", **fields}
    return await client.post(f"/api/v1/budgets/{budget_id}/expenses", json=payload, headers=headers)


class TestExpenses:
    @pytest.mark.asyncio
    async def test_create_expense(
        self, client: AsyncClient, test_user, test_budget, test_categories, auth_headers
    ):
        user_id = str(test_user.id)
        category_id = str(test_categories[0].id)

        response = await _create(
            client, test_budget.id, auth_headers, category_id=category_id, amount="42.50"
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["amount"]) == Decimal("42.50")
        assert data["date"] == "2024-03-15"
        assert data["created_by"] == user_id
        assert data["category_id"] == category_id

    @pytest.mark.asyncio
    async def test_date_with_time_keeps_calendar_day(
        self, client: AsyncClient, test_budget, test_categories, auth_headers
    ):
        response = await _create(
            client,
            test_budget.id,
            auth_headers,
            category_id=str(test_categories[0].id),
            date="2024-03-01T00:00:00-08:00",
        )

        assert response.status_code == 201
        assert response.json()["date"] == "2024-03-01"

    @pytest.mark.asyncio
    async def test_negative_amount_rejected(self, client: AsyncClient, test_budget, test_categories, auth_headers):
        response = await _create(
            client, test_budget.id, auth_headers, category_id=str(test_categories[0].id), amount="-5"
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_category(self, client: AsyncClient, test_budget, test_categories, auth_headers):
        response = await _create(
            client, test_budget.id, auth_headers, category_id="00000000-0000-0000-0000-000000000000"
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "API_002"

    @pytest.mark.asyncio
    async def test_duplicate_external_id_is_conflict(
        self, client: AsyncClient, test_budget, test_categories, auth_headers
    ):
        budget_id = test_budget.id
        category_id = str(test_categories[0].id)

        first = await _create(
            client, budget_id, auth_headers, category_id=category_id, external_transaction_id="plaid-1"
        )
        second = await _create(
            client, budget_id, auth_headers, category_id=category_id, external_transaction_id="plaid-1"
        )

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error_code"] == "DB_002"

    @pytest.mark.asyncio
    async def test_list_filters(self, client: AsyncClient, test_budget, test_categories, auth_headers):
        budget_id = test_budget.id
        groceries = str(test_categories[0].id)
        dining = str(test_categories[1].id)
        await _create(client, budget_id, auth_headers, category_id=groceries, date="2024-02-28")
        await _create(client, budget_id, auth_headers, category_id=groceries, date="2024-03-01")
        await _create(client, budget_id, auth_headers, category_id=dining, date="2024-03-31")

        march = await client.get(
            f"/api/v1/budgets/{budget_id}/expenses",
            params={"start_date": "2024-03-01", "end_date": "2024-03-31"},
            headers=auth_headers,
        )
        dining_only = await client.get(
            f"/api/v1/budgets/{budget_id}/expenses", params={"category_id": dining}, headers=auth_headers
        )

        assert sorted(e["date"] for e in march.json()) == ["2024-03-01", "2024-03-31"]
        assert [e["category_id"] for e in dining_only.json()] == [dining]

    @pytest.mark.asyncio
    async def test_inverted_range_rejected(self, client: AsyncClient, test_budget, auth_headers):
        response = await client.get(
            f"/api/v1/budgets/{test_budget.id}/expenses",
            params={"start_date": "2024-03-31", "end_date": "2024-03-01"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_003"

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client: AsyncClient, test_budget, test_categories, auth_headers):
        budget_id = test_budget.id
        created = await _create(client, budget_id, auth_headers, category_id=str(test_categories[0].id))
        expense_id = created.json()["id"]

        updated = await client.patch(
            f"/api/v1/budgets/{budget_id}/expenses/{expense_id}",
            json={"amount": "12.25", "description": "Late lunch"},
            headers=auth_headers,
        )
        deleted = await client.delete(f"/api/v1/budgets/{budget_id}/expenses/{expense_id}", headers=auth_headers)
        missing = await client.get(f"/api/v1/budgets/{budget_id}/expenses/{expense_id}", headers=auth_headers)

        assert updated.status_code == 200
        assert Decimal(updated.json()["amount"]) == Decimal("12.25")
        assert updated.json()["description"] == "Late lunch"
        assert deleted.status_code == 204
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "API_003"

    @pytest.mark.asyncio
    async def test_member_sees_shared_expenses(
        self,
        client: AsyncClient,
        db_session,
        test_budget,
        test_categories,
        auth_headers,
        other_user,
        make_headers,
    ):
        budget_id = test_budget.id
        other_id = other_user.id
        test_budget.add_member(other_id)
        await db_session.commit()

        await _create(client, budget_id, auth_headers, category_id=str(test_categories[0].id))
        response = await client.get(f"/api/v1/budgets/{budget_id}/expenses", headers=make_headers(other_id))

        assert response.status_code == 200
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_non_member_denied(self, client: AsyncClient, test_budget, other_headers):
        response = await client.get(f"/api/v1/budgets/{test_budget.id}/expenses", headers=other_headers)

        assert response.status_code == 403
        assert response.json()["error_code"] == "ACCESS_001"


class TestSummaries:
    @pytest.mark.asyncio
    async def test_totals_by_category(self, client: AsyncClient, test_budget, test_categories, auth_headers):
        budget_id = test_budget.id
        groceries = str(test_categories[0].id)
        dining = str(test_categories[1].id)
        await _create(client, budget_id, auth_headers, category_id=groceries, amount="20.50", date="2024-03-02")
        await _create(client, budget_id, auth_headers, category_id=groceries, amount="30.25", date="2024-03-20")
        await _create(client, budget_id, auth_headers, category_id=dining, amount="15.00", date="2024-03-05")
        await _create(client, budget_id, auth_headers, category_id=dining, amount="99.00", date="2024-04-01")

        response = await client.get(
            f"/api/v1/budgets/{budget_id}/expenses/summary/by-category",
            params={"year": 2024, "month": 3},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert [t["category_name"] for t in data] == ["Groceries", "Dining"]
        assert Decimal(data[0]["total"]) == Decimal("50.75")
        assert data[0]["count"] == 2
        assert Decimal(data[1]["total"]) == Decimal("15.00")
        assert Decimal(data[0]["budget_amount"]) == Decimal("400")

    @pytest.mark.asyncio
    async def test_month_without_year_rejected(self, client: AsyncClient, test_budget, auth_headers):
        response = await client.get(
            f"/api/v1/budgets/{test_budget.id}/expenses/summary/by-category",
            params={"month": 3},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_001"

    @pytest.mark.asyncio
    async def test_months(self, client: AsyncClient, test_budget, test_categories, auth_headers):
        budget_id = test_budget.id
        category_id = str(test_categories[0].id)
        await _create(client, budget_id, auth_headers, category_id=category_id, amount="5.00", date="2024-01-31")
        await _create(client, budget_id, auth_headers, category_id=category_id, amount="7.50", date="2024-03-01")
        await _create(client, budget_id, auth_headers, category_id=category_id, amount="2.50", date="2024-03-15")

        response = await client.get(f"/api/v1/budgets/{budget_id}/expenses/summary/months", headers=auth_headers)

        data = response.json()
        assert [(m["year"], m["month"]) for m in data] == [(2024, 3), (2024, 1)]
        assert Decimal(data[0]["total"]) == Decimal("10.00")
        assert data[0]["count"] == 2
