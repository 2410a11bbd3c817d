"""Common interface for bank aggregator clients."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any
from uuid import UUID

import httpx

from budget_api.core.exceptions import UpstreamUnavailableError
from budget_api.models.budget import AggregatorProvider
from budget_api.schemas.bank import AccountBalance, ExchangedConnection, ExternalAccount, LinkToken

logger = logging.getLogger(__name__)

# Upstream statuses that mean the stored credential is no longer accepted
CREDENTIAL_REJECTED_STATUSES = frozenset({400, 401, 403})

# Raised while reading an unexpected payload shape. pydantic's ValidationError
# is a ValueError; decimal.InvalidOperation is an ArithmeticError.
MALFORMED_PAYLOAD_ERRORS = (KeyError, IndexError, TypeError, AttributeError, ValueError, ArithmeticError)


class AggregatorClient(ABC):
    """One aggregator (Plaid, Teller) behind a provider-neutral API.

    Clients are created once at application start, kept on ``app.state`` and
    handed to request handlers through a dependency. Every method that talks
    to the aggregator raises ``UpstreamUnavailableError`` on transport or
    upstream failures and ``AggregatorNotConfiguredError`` when the server
    has no credentials for the provider.
    """

    provider: AggregatorProvider

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True if the server holds the credentials this client needs."""

    @abstractmethod
    async def create_link_token(self, user_id: UUID) -> LinkToken:
        """Start the aggregator's account-linking flow for a user."""

    @abstractmethod
    async def exchange_token(
        self, token: str, institution_name: str | None = None
    ) -> ExchangedConnection:
        """Turn the token returned by the link flow into a stored connection."""

    @abstractmethod
    async def list_accounts(self, access_token: str) -> list[ExternalAccount]:
        """Accounts reachable with one connection credential."""

    @abstractmethod
    async def get_balance(self, access_token: str, account_id: str) -> AccountBalance:
        """Current and available balance of one account."""

    @abstractmethod
    async def list_transactions(
        self,
        access_token: str,
        start_date: date,
        end_date: date,
        account_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """Raw transaction records in [start_date, end_date], inclusive."""

    @abstractmethod
    async def remove_connection(self, access_token: str) -> None:
        """Revoke the credential upstream where the aggregator supports it."""

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            UpstreamUnavailableError: SYNC_004 if the credential was rejected,
                SYNC_002 for any other transport or upstream failure
        """
        try:
            response = await self.http.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(
                "Aggregator request rejected",
                extra={"provider": self.provider.value, "path": path, "status_code": status_code},
            )
            if status_code in CREDENTIAL_REJECTED_STATUSES:
                raise UpstreamUnavailableError(
                    "SYNC_004", details={"status_code": status_code}, http_status=400
                ) from e
            raise UpstreamUnavailableError("SYNC_002", details={"status_code": status_code}) from e
        except httpx.HTTPError as e:
            logger.warning(
                "Aggregator request failed",
                extra={"provider": self.provider.value, "path": path, "error_type": type(e).__name__},
            )
            raise UpstreamUnavailableError("SYNC_002", details={"error": type(e).__name__}) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning(
                "Aggregator returned an unreadable body",
                extra={"provider": self.provider.value, "path": path, "status_code": response.status_code},
            )
            raise UpstreamUnavailableError("SYNC_002", details={"error": type(e).__name__}) from e

    @contextmanager
    def _parsing(self, what: str) -> Iterator[None]:
        """Report a payload that does not have the expected shape as SYNC_002."""
        try:
            yield
        except MALFORMED_PAYLOAD_ERRORS as e:
            logger.warning(
                "Malformed aggregator payload",
                extra={"provider": self.provider.value, "payload": what, "error_type": type(e).__name__},
            )
            raise UpstreamUnavailableError("SYNC_002", details={"error": type(e).__name__}) from e
