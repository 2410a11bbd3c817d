"""Plaid client over its JSON REST API."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

import httpx

from budget_api.aggregators.base import AggregatorClient
from budget_api.core.exceptions import AggregatorNotConfiguredError, UpstreamUnavailableError
from budget_api.models.budget import AggregatorProvider
from budget_api.schemas.bank import AccountBalance, ExchangedConnection, ExternalAccount, LinkToken

logger = logging.getLogger(__name__)

PLAID_HOSTS = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}

# Plaid caps transactions/get at 500 records per page
PAGE_SIZE = 500
COUNTRY_CODES = ["US"]


def _to_decimal(value: Any) -> Decimal | None:
    return None if value is None else Decimal(str(value))


class PlaidClient(AggregatorClient):
    """Plaid: client id and secret travel in every JSON body."""

    provider = AggregatorProvider.PLAID

    def __init__(
        self,
        client_id: str | None,
        secret: str | None,
        environment: str = "sandbox",
        client_name: str = "Budget Tracker",
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        base_url = PLAID_HOSTS.get(environment, PLAID_HOSTS["sandbox"])
        super().__init__(httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport))
        self.client_id = client_id
        self.secret = secret
        self.client_name = client_name

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.secret)

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        if not self.configured:
            raise AggregatorNotConfiguredError("SYNC_003", details={"provider": self.provider.value})
        payload = {"client_id": self.client_id, "secret": self.secret, **body}
        return await self._send("POST", path, json=payload)

    async def create_link_token(self, user_id: UUID) -> LinkToken:
        data = await self._post(
            "/link/token/create",
            {
                "client_name": self.client_name,
                "user": {"client_user_id": str(user_id)},
                "products": ["transactions"],
                "country_codes": COUNTRY_CODES,
                "language": "en",
            },
        )
        with self._parsing("link token"):
            return LinkToken(link_token=data["link_token"], expiration=data.get("expiration"))

    async def exchange_token(
        self, token: str, institution_name: str | None = None
    ) -> ExchangedConnection:
        exchanged = await self._post("/item/public_token/exchange", {"public_token": token})
        with self._parsing("token exchange"):
            access_token = exchanged["access_token"]
            item_id = exchanged["item_id"]

        item = await self._post("/item/get", {"access_token": access_token})
        with self._parsing("item"):
            institution_id = (item.get("item") or {}).get("institution_id")
        name = institution_name or "Unknown"
        if institution_id:
            name = await self._institution_name(institution_id) or name

        return ExchangedConnection(
            connection_id=item_id,
            access_token=access_token,
            institution_id=institution_id,
            institution_name=name,
        )

    async def _institution_name(self, institution_id: str) -> str | None:
        # The name is cosmetic; a failed lookup keeps the fallback
        try:
            data = await self._post(
                "/institutions/get_by_id",
                {"institution_id": institution_id, "country_codes": COUNTRY_CODES},
            )
        except UpstreamUnavailableError:
            logger.warning("Institution lookup failed", extra={"provider": self.provider.value})
            return None
        try:
            return (data.get("institution") or {}).get("name")
        except AttributeError:
            return None

    async def list_accounts(self, access_token: str) -> list[ExternalAccount]:
        data = await self._post("/accounts/get", {"access_token": access_token})
        with self._parsing("accounts"):
            return [
                ExternalAccount(
                    account_id=account["account_id"],
                    name=account.get("name") or account.get("official_name") or "Unknown Account",
                    type=account.get("type") or "other",
                    subtype=account.get("subtype"),
                    mask=account.get("mask"),
                )
                for account in data.get("accounts", [])
            ]

    async def get_balance(self, access_token: str, account_id: str) -> AccountBalance:
        data = await self._post(
            "/accounts/balance/get",
            {"access_token": access_token, "options": {"account_ids": [account_id]}},
        )
        with self._parsing("balance"):
            accounts = data.get("accounts") or [{}]
            balances = accounts[0].get("balances") or {}
            return AccountBalance(
                current=_to_decimal(balances.get("current")),
                available=_to_decimal(balances.get("available")),
                currency=balances.get("iso_currency_code"),
            )

    async def list_transactions(
        self,
        access_token: str,
        start_date: date,
        end_date: date,
        account_id: str | None = None,
    ) -> list[dict[str, Any]]:
        transactions: list[dict[str, Any]] = []
        options: dict[str, Any] = {"count": PAGE_SIZE}
        if account_id:
            options["account_ids"] = [account_id]

        while True:
            options["offset"] = len(transactions)
            data = await self._post(
                "/transactions/get",
                {
                    "access_token": access_token,
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                    "options": dict(options),
                },
            )
            with self._parsing("transactions"):
                page = [dict(txn) for txn in data.get("transactions", [])]
                total = int(data.get("total_transactions", 0))
            transactions.extend(page)
            if not page or len(transactions) >= total:
                return transactions

    async def remove_connection(self, access_token: str) -> None:
        await self._post("/item/remove", {"access_token": access_token})
