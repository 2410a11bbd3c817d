"""Integration tests for budget categories."""

from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.models.expense import Expense


class TestCategories:
    @pytest.mark.asyncio
    async def test_create_with_defaults(self, client: AsyncClient, test_budget, auth_headers: dict):
        response = await client.post(
            f"/api/v1/budgets/{test_budget.id}/categories",
            json={"name": "Rent", "budget_amount": "1500.00"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Rent"
        assert data["color"] == "#6366f1"
        assert data["icon"] == "💰"
        assert data["rollover"] is False

    @pytest.mark.asyncio
    async def test_negative_allocation_rejected(self, client: AsyncClient, test_budget, auth_headers: dict):
        response = await client.post(
            f"/api/v1/budgets/{test_budget.id}/categories",
            json={"name": "Rent", "budget_amount": "-1"},
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_is_ordered(self, client: AsyncClient, test_budget, test_categories, auth_headers: dict):
        response = await client.get(f"/api/v1/budgets/{test_budget.id}/categories", headers=auth_headers)

        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Groceries", "Dining"]

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, test_budget, test_categories, auth_headers: dict):
        category_id = test_categories[1].id

        response = await client.patch(
            f"/api/v1/budgets/{test_budget.id}/categories/{category_id}",
            json={"rollover": True},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["rollover"] is True
        assert response.json()["name"] == "Dining"

    @pytest.mark.asyncio
    async def test_delete_unused(self, client: AsyncClient, test_budget, test_categories, auth_headers: dict):
        budget_id = test_budget.id
        category_id = test_categories[1].id

        response = await client.delete(
            f"/api/v1/budgets/{budget_id}/categories/{category_id}", headers=auth_headers
        )
        missing = await client.get(f"/api/v1/budgets/{budget_id}/categories/{category_id}", headers=auth_headers)

        assert response.status_code == 204
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "API_002"

    @pytest.mark.asyncio
    async def test_delete_in_use_is_blocked(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_user,
        test_budget,
        test_categories,
        auth_headers: dict,
    ):
        budget_id = test_budget.id
        category_id = test_categories[0].id
        db_session.add(
            Expense(
                amount=10,
                description="Milk",
                category_id=category_id,
                date=date(2024, 3, 1),
                created_by=test_user.id,
                budget_id=budget_id,
            )
        )
        await db_session.commit()

        response = await client.delete(
            f"/api/v1/budgets/{budget_id}/categories/{category_id}", headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_007"

    @pytest.mark.asyncio
    async def test_category_of_other_budget_is_not_found(
        self, client: AsyncClient, test_categories, other_user, other_headers: dict
    ):
        category_id = test_categories[0].id
        other_budget = (await client.post("/api/v1/budgets", json={}, headers=other_headers)).json()

        response = await client.get(
            f"/api/v1/budgets/{other_budget['id']}/categories/{category_id}", headers=other_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_member_denied(self, client: AsyncClient, test_budget, other_headers: dict):
        response = await client.get(f"/api/v1/budgets/{test_budget.id}/categories", headers=other_headers)

        assert response.status_code == 403
