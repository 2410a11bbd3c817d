"""Integration tests for email invites."""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.models.base import utc_now
from budget_api.repositories.invite import InviteRepository


async def _send(client: AsyncClient, budget_id, headers: dict, email: str = "friend@example.com"):
    return await client.post(f"/api/v1/budgets/{budget_id}/invites", json={"email": email}, headers=headers)


class TestSendInvite:
    @pytest.mark.asyncio
    async def test_send_invite(self, client: AsyncClient, test_budget, auth_headers: dict, email_sender):
        budget_id = str(test_budget.id)

        response = await _send(client, budget_id, auth_headers, "Friend@Example.com")

        assert response.status_code == 201
        data = response.json()
        assert data["resent"] is False
        assert data["invite"]["email"] == "friend@example.com"
        assert data["invite"]["budget_id"] == budget_id
        assert "token" not in data["invite"]

        assert len(email_sender.sent) == 1
        assert email_sender.sent[0]["recipient"] == "friend@example.com"
        assert email_sender.sent[0]["budget_name"] == "Test User's Budget"
        assert len(email_sender.sent[0]["token"]) == 64

    @pytest.mark.asyncio
    async def test_pending_invite_is_resent(
        self, client: AsyncClient, test_budget, auth_headers: dict, email_sender
    ):
        budget_id = test_budget.id

        first = await _send(client, budget_id, auth_headers)
        second = await _send(client, budget_id, auth_headers)

        assert second.status_code == 200
        assert second.json()["resent"] is True
        assert second.json()["invite"]["id"] == first.json()["invite"]["id"]
        assert email_sender.sent[0]["token"] == email_sender.sent[1]["token"]

    @pytest.mark.asyncio
    async def test_existing_member_cannot_be_invited(
        self, client: AsyncClient, test_budget, auth_headers: dict
    ):
        response = await _send(client, test_budget.id, auth_headers, "testuser@example.com")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_005"

    @pytest.mark.asyncio
    async def test_email_failure_keeps_invite(
        self, client: AsyncClient, db_session: AsyncSession, test_budget, auth_headers: dict, email_sender
    ):
        budget_id = test_budget.id
        email_sender.fail = True

        response = await _send(client, budget_id, auth_headers)

        assert response.status_code == 502
        assert response.json()["error_code"] == "EMAIL_001"
        invite = await InviteRepository(db_session).get_pending(budget_id, "friend@example.com")
        assert invite is not None
        assert invite.used is False

    @pytest.mark.asyncio
    async def test_non_member_cannot_invite(self, client: AsyncClient, test_budget, other_headers: dict):
        response = await _send(client, test_budget.id, other_headers)

        assert response.status_code == 403


class TestUseInvite:
    @pytest.mark.asyncio
    async def test_validate_invite_is_public(
        self, client: AsyncClient, test_budget, auth_headers: dict, email_sender
    ):
        budget_id = str(test_budget.id)
        await _send(client, budget_id, auth_headers)
        token = email_sender.sent[0]["token"]

        response = await client.get(f"/api/v1/invites/{token}")

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "friend@example.com"
        assert data["budget_id"] == budget_id
        assert data["budget_name"] == "Test User's Budget"

    @pytest.mark.asyncio
    async def test_unknown_token(self, client: AsyncClient):
        response = await client.get(f"/api/v1/invites/{'0' * 64}")

        assert response.status_code == 404
        assert response.json()["error_code"] == "API_006"

    @pytest.mark.asyncio
    async def test_expired_invite_is_gone(
        self, client: AsyncClient, db_session: AsyncSession, test_budget, auth_headers: dict, email_sender
    ):
        await _send(client, test_budget.id, auth_headers)
        token = email_sender.sent[0]["token"]
        invite = await InviteRepository(db_session).get_by_token(token)
        invite.expires_at = utc_now() - timedelta(days=1)
        await db_session.commit()

        response = await client.get(f"/api/v1/invites/{token}")

        assert response.status_code == 410
        assert response.json()["error_code"] == "VAL_004"

    @pytest.mark.asyncio
    async def test_register_with_invite_joins_budget(
        self, client: AsyncClient, test_budget, auth_headers: dict, email_sender
    ):
        budget_id = str(test_budget.id)
        await _send(client, budget_id, auth_headers)
        token = email_sender.sent[0]["token"]

        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": "friend@example.com",
                "password": "SecurePass123!",
                "name": "Friend",
                "invite_token": token,
            },
        )

        assert response.status_code == 201
        assert response.json()["budget_id"] == budget_id

        headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
        budgets = (await client.get("/api/v1/budgets", headers=headers)).json()
        assert [b["id"] for b in budgets] == [budget_id]
        roles = {m["email"]: m["role"] for m in budgets[0]["members"]}
        assert roles == {"testuser@example.com": "owner", "friend@example.com": "member"}

        reused = await client.get(f"/api/v1/invites/{token}")
        assert reused.status_code == 400

    @pytest.mark.asyncio
    async def test_register_with_invite_for_other_email(
        self, client: AsyncClient, test_budget, auth_headers: dict, email_sender
    ):
        await _send(client, test_budget.id, auth_headers)
        token = email_sender.sent[0]["token"]

        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": "someone-else@example.com",
                "password": "SecurePass123!",
                "name": "Else",
                "invite_token": token,
            },
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_004"

    @pytest.mark.asyncio
    async def test_accept_as_existing_user(
        self,
        client: AsyncClient,
        test_budget,
        auth_headers: dict,
        other_user,
        other_headers: dict,
        email_sender,
    ):
        budget_id = str(test_budget.id)
        other_id = str(other_user.id)
        await _send(client, budget_id, auth_headers, "other@example.com")
        token = email_sender.sent[0]["token"]

        response = await client.post(f"/api/v1/invites/{token}/accept", headers=other_headers)

        assert response.status_code == 200
        assert other_id in [m["user_id"] for m in response.json()["members"]]
