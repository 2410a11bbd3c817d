"""Teller client: mutual TLS plus HTTP Basic auth with the access token."""

import hashlib
import logging
import ssl
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

import httpx

from budget_api.aggregators.base import AggregatorClient
from budget_api.core.exceptions import AggregatorNotConfiguredError
from budget_api.models.budget import AggregatorProvider
from budget_api.reconciliation.dates import parse_calendar_date
from budget_api.schemas.bank import AccountBalance, ExchangedConnection, ExternalAccount, LinkToken

logger = logging.getLogger(__name__)

# Teller Connect hands the access token straight to the browser, so there is
# no server-side link token to mint.
CONNECT_READY = "teller-connect-ready"


def fallback_connection_id(token: str) -> str:
    """Stable connection id for a token whose accounts carry no enrollment id."""
    return "tok_" + hashlib.sha256(token.encode()).hexdigest()[:32]


def load_client_certificate(cert_path: str | None, key_path: str | None) -> ssl.SSLContext | None:
    """Build an SSL context carrying the Teller client certificate.

    Returns None when the paths are not configured or cannot be loaded;
    the client then refuses data calls with AggregatorNotConfiguredError.
    """
    if not (cert_path and key_path):
        logger.warning("Teller client certificate not configured", extra={"provider": "teller"})
        return None
    try:
        context = ssl.create_default_context()
        context.load_cert_chain(
            certfile=str(Path(cert_path).expanduser()), keyfile=str(Path(key_path).expanduser())
        )
    except (OSError, ssl.SSLError) as e:
        logger.error(
            "Failed to load Teller client certificate",
            extra={"provider": "teller", "error_type": type(e).__name__},
        )
        return None
    return context


def _to_decimal(value: Any) -> Decimal | None:
    return None if value is None else Decimal(str(value))


class TellerClient(AggregatorClient):
    provider = AggregatorProvider.TELLER

    def __init__(
        self,
        app_id: str | None,
        api_base: str = "https://api.teller.io",
        environment: str = "production",
        ssl_context: ssl.SSLContext | None = None,
        timeout: float = 20.0,
        currency: str = "USD",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(
            httpx.AsyncClient(
                base_url=api_base,
                timeout=timeout,
                verify=ssl_context if ssl_context is not None else True,
                transport=transport,
            )
        )
        self.app_id = app_id
        self.environment = environment
        # Teller balances carry no currency code
        self.currency = currency
        # Tests inject a transport instead of a certificate
        self.mtls_ready = ssl_context is not None or transport is not None

    @property
    def configured(self) -> bool:
        return bool(self.app_id) and self.mtls_ready

    async def _get(self, path: str, access_token: str, **params: Any) -> Any:
        if not self.mtls_ready:
            raise AggregatorNotConfiguredError("SYNC_003", details={"provider": self.provider.value})
        return await self._send("GET", path, auth=(access_token, ""), params=params or None)

    async def create_link_token(self, user_id: UUID) -> LinkToken:
        if not self.app_id:
            raise AggregatorNotConfiguredError("SYNC_003", details={"provider": self.provider.value})
        return LinkToken(link_token=CONNECT_READY, app_id=self.app_id, environment=self.environment)

    async def exchange_token(
        self, token: str, institution_name: str | None = None
    ) -> ExchangedConnection:
        """Verify a Teller Connect access token by listing its accounts."""
        accounts = await self._get("/accounts", token) or []
        with self._parsing("accounts"):
            first = accounts[0] if accounts else {}
            institution = first.get("institution") or {}
            connection_id = (
                first.get("enrollment_id") or first.get("connection_id") or fallback_connection_id(token)
            )
            return ExchangedConnection(
                connection_id=connection_id,
                access_token=token,
                institution_id=institution.get("id"),
                institution_name=institution.get("name") or institution_name or "Unknown",
            )

    async def list_accounts(self, access_token: str) -> list[ExternalAccount]:
        accounts = await self._get("/accounts", access_token) or []
        with self._parsing("accounts"):
            return [
                ExternalAccount(
                    account_id=account["id"],
                    name=account.get("name") or account.get("type") or "Unknown Account",
                    type=account.get("type") or "depository",
                    subtype=account.get("subtype") or account.get("type"),
                    mask=account.get("last_four"),
                    institution_name=(account.get("institution") or {}).get("name") or "Unknown",
                )
                for account in accounts
            ]

    async def get_balance(self, access_token: str, account_id: str) -> AccountBalance:
        balances = await self._get(f"/accounts/{account_id}/balances", access_token) or {}
        with self._parsing("balance"):
            current = balances.get("current", balances.get("ledger"))
            available = balances.get("available")
            return AccountBalance(
                current=_to_decimal(current if current is not None else available),
                available=_to_decimal(available if available is not None else current),
                currency=self.currency,
            )

    async def list_transactions(
        self,
        access_token: str,
        start_date: date,
        end_date: date,
        account_id: str | None = None,
    ) -> list[dict[str, Any]]:
        if account_id:
            account_ids = [account_id]
        else:
            account_ids = [account.account_id for account in await self.list_accounts(access_token)]

        transactions: list[dict[str, Any]] = []
        for acct_id in account_ids:
            records = await self._get(
                f"/accounts/{acct_id}/transactions",
                access_token,
                start_date=start_date.isoformat(),
                end_date=end_date.isoformat(),
            ) or []
            with self._parsing("transactions"):
                for record in map(dict, records):
                    record.setdefault("account_id", acct_id)
                    if self._in_range(record, start_date, end_date):
                        transactions.append(record)
        return transactions

    @staticmethod
    def _in_range(record: dict[str, Any], start_date: date, end_date: date) -> bool:
        # Teller may ignore the date filters; re-apply them on calendar dates
        try:
            day = parse_calendar_date(record.get("date", ""))
        except (TypeError, ValueError):
            return False
        return start_date <= day <= end_date

    async def remove_connection(self, access_token: str) -> None:
        """Teller needs no upstream revocation; forgetting the token is enough."""
        return None
