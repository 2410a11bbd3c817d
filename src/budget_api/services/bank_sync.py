"""Bank sync service: link institutions and turn their transactions into candidates.

Sync workflow:
1. Validate the request (budget id, date range)
2. Check budget access, then that the budget has categories
3. Fetch accounts and transactions for every connection concurrently,
   each under its own timeout and error boundary
4. Normalize, skip pending, classify and deduplicate
5. Return the expense candidates for the user to categorize

Nothing is written to the budget during a sync; the user imports the
candidates they categorized through the bulk import writer.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.aggregators.base import AggregatorClient
from budget_api.config import settings
from budget_api.core.exceptions import (
    AggregatorNotConfiguredError,
    BudgetAPIError,
    NoCategoriesError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from budget_api.models.budget import BankConnection
from budget_api.reconciliation.classification import Decision, get_adapter
from budget_api.reconciliation.dedup import partition_new
from budget_api.repositories.budget import BudgetRepository
from budget_api.repositories.category import CategoryRepository
from budget_api.repositories.expense import ExpenseRepository
from budget_api.schemas.bank import (
    DESCRIPTION_MAX_LENGTH,
    LABEL_MAX_LENGTH,
    AccountBalance,
    AccountWithBalance,
    ExchangeRequest,
    ExchangeResponse,
    ExternalAccount,
    LinkToken,
    NormalizedTransaction,
    SyncCandidate,
    SyncResult,
    SyncStats,
)
from budget_api.services.budget import BudgetService

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


@dataclass
class ConnectionRef:
    """Plain copy of a connection's fields, safe to use from concurrent tasks."""

    connection_id: str
    access_token: str
    institution_name: str

    @classmethod
    def of(cls, connection: BankConnection) -> "ConnectionRef":
        return cls(connection.connection_id, connection.access_token, connection.institution_name)


@dataclass
class ConnectionFetch:
    institution_name: str
    accounts: dict[str, ExternalAccount] = field(default_factory=dict)
    transactions: list[dict[str, Any]] = field(default_factory=list)


class BankSyncService:
    """Bank operations for one aggregator, scoped to budgets the user can access."""

    def __init__(self, db: AsyncSession, client: AggregatorClient, timeout: float | None = None):
        """Initialize the service.

        Args:
            db: Database session
            client: Aggregator client for the provider in the request path
            timeout: Per-connection fetch timeout in seconds
        """
        self.db = db
        self.client = client
        self.provider = client.provider
        self.adapter = get_adapter(client.provider)
        self.timeout = timeout if timeout is not None else settings.aggregator_timeout_seconds
        self.budget_service = BudgetService(db)
        self.budget_repo = BudgetRepository(db)
        self.category_repo = CategoryRepository(db)
        self.expense_repo = ExpenseRepository(db)

    def _require_configured(self) -> None:
        if not self.client.configured:
            raise AggregatorNotConfiguredError("SYNC_003", details={"provider": self.provider.value})

    async def _connections(self, budget_id: UUID) -> list[ConnectionRef]:
        rows = await self.budget_repo.get_connections(budget_id, self.provider.value)
        return [ConnectionRef.of(row) for row in rows]

    def _log_extra(self, budget_id: UUID, **extra: Any) -> dict[str, Any]:
        return {"budget_id": str(budget_id), "provider": self.provider.value, **extra}

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def sync(
        self,
        budget_id: UUID | None,
        user_id: UUID,
        start_date: date | None,
        end_date: date | None,
    ) -> SyncResult:
        """Collect new expense candidates from every linked institution.

        Args:
            budget_id: Budget to sync
            user_id: Acting user
            start_date: First calendar day (inclusive)
            end_date: Last calendar day (inclusive)

        Returns:
            SyncResult with candidates, per-reason skip counts and the
            institutions whose fetch failed

        Raises:
            ValidationError: Missing budget id or missing/inverted date range
            AccessDeniedError: User is neither owner nor member
            NoCategoriesError: Budget has no categories (checked before any network call)
            AggregatorNotConfiguredError: Server has no credentials for the provider
        """
        if budget_id is None:
            raise ValidationError("VAL_002")
        if start_date is None or end_date is None or start_date > end_date:
            raise ValidationError(
                "VAL_003",
                details={"start_date": str(start_date), "end_date": str(end_date)},
            )

        await self.budget_service.require_access(user_id, budget_id)

        if await self.category_repo.count_by_budget(budget_id) == 0:
            raise NoCategoriesError("SYNC_001", details={"budget_id": str(budget_id)})

        connections = await self._connections(budget_id)
        if not connections:
            return SyncResult(message=f"No {self.provider.value} connections found")

        self._require_configured()
        existing_ids = await self.expense_repo.get_external_ids(budget_id)

        fetches = await asyncio.gather(
            *(self._fetch_guarded(budget_id, conn, start_date, end_date) for conn in connections)
        )

        stats = SyncStats()
        expenses: list[NormalizedTransaction] = []
        amounts: dict[str, Decimal] = {}
        failed_institutions: list[str] = []

        for conn, fetch in zip(connections, fetches):
            if fetch is None:
                failed_institutions.append(conn.institution_name)
                continue
            for raw in fetch.transactions:
                account = fetch.accounts.get(raw.get("account_id"))
                if account is None:
                    stats.unknown_account += 1
                    continue
                try:
                    txn = self.adapter.normalize(raw, account)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(
                        "Skipping malformed transaction",
                        extra=self._log_extra(budget_id, error_type=type(e).__name__),
                    )
                    stats.unsupported += 1
                    continue

                if txn.pending:
                    stats.pending += 1
                    continue

                decision, amount = self.adapter.classify(txn, account.type)
                if decision is Decision.UNSUPPORTED:
                    stats.unsupported += 1
                elif decision is Decision.NOT_EXPENSE:
                    stats.not_expense += 1
                else:
                    expenses.append(txn)
                    amounts.setdefault(txn.external_id, amount)

        fresh, duplicates = partition_new(expenses, existing_ids)
        stats.duplicate = len(duplicates)

        candidates = [
            SyncCandidate(
                transaction_id=txn.external_id,
                name=txn.display_name[:DESCRIPTION_MAX_LENGTH],
                merchant_name=txn.merchant_name,
                amount=amounts[txn.external_id],
                date=txn.calendar_date,
                provider_categories=txn.provider_categories,
                account_name=txn.account_display_name[:LABEL_MAX_LENGTH],
                institution_name=txn.institution_name[:LABEL_MAX_LENGTH],
            )
            for txn in fresh
        ]
        result = SyncResult.build(candidates, stats, failed_institutions)

        logger.info(
            "Bank sync finished",
            extra=self._log_extra(
                budget_id,
                count=len(candidates),
                skipped=result.skipped,
                failed=len(failed_institutions),
            ),
        )
        return result

    async def _fetch_guarded(
        self, budget_id: UUID, conn: ConnectionRef, start_date: date, end_date: date
    ) -> ConnectionFetch | None:
        """Fetch one connection; None if it failed or timed out."""
        try:
            return await asyncio.wait_for(self._fetch(conn, start_date, end_date), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Institution fetch timed out",
                extra=self._log_extra(budget_id, institution=conn.institution_name, error_code="SYNC_002"),
            )
        except BudgetAPIError as e:
            logger.warning(
                "Institution fetch failed",
                extra=self._log_extra(budget_id, institution=conn.institution_name, error_code=e.error_code),
            )
        except Exception as e:
            # Failures stay scoped to this institution
            logger.error(
                "Institution fetch failed unexpectedly",
                extra=self._log_extra(
                    budget_id, institution=conn.institution_name, error_type=type(e).__name__
                ),
            )
        return None

    async def _fetch(self, conn: ConnectionRef, start_date: date, end_date: date) -> ConnectionFetch:
        accounts = await self.client.list_accounts(conn.access_token)
        transactions = await self.client.list_transactions(conn.access_token, start_date, end_date)
        institution = conn.institution_name
        return ConnectionFetch(
            institution_name=institution,
            accounts={a.account_id: self._with_institution(a, institution) for a in accounts},
            transactions=transactions,
        )

    @staticmethod
    def _with_institution(account: ExternalAccount, institution_name: str) -> ExternalAccount:
        if institution_name and institution_name != UNKNOWN:
            return account.model_copy(update={"institution_name": institution_name})
        return account

    # ------------------------------------------------------------------
    # Linking and connection management
    # ------------------------------------------------------------------

    async def create_link_token(self, budget_id: UUID, user_id: UUID) -> LinkToken:
        await self.budget_service.require_access(user_id, budget_id)
        return await self.client.create_link_token(user_id)

    async def exchange(
        self, budget_id: UUID, user_id: UUID, request: ExchangeRequest
    ) -> ExchangeResponse:
        """Store the connection produced by the link flow.

        An existing connection with the same connection id or credential is
        updated in place instead of duplicated.
        """
        await self.budget_service.require_access(user_id, budget_id)
        exchanged = await self.client.exchange_token(request.token, request.institution_name)

        connection = await self.budget_repo.get_connection(
            budget_id, self.provider.value, exchanged.connection_id
        ) or await self.budget_repo.get_connection(
            budget_id, self.provider.value, exchanged.access_token
        )
        created = connection is None
        if created:
            connection = BankConnection(budget_id=budget_id, provider=self.provider.value)
            self.db.add(connection)

        connection.connection_id = exchanged.connection_id
        connection.access_token = exchanged.access_token
        connection.institution_id = exchanged.institution_id
        connection.institution_name = exchanged.institution_name
        await self.db.commit()

        logger.info(
            "Bank connection saved",
            extra=self._log_extra(budget_id, institution=exchanged.institution_name, created=created),
        )
        return ExchangeResponse(
            connection_id=exchanged.connection_id,
            institution_name=exchanged.institution_name,
            created=created,
        )

    async def list_accounts(self, budget_id: UUID, user_id: UUID) -> list[AccountWithBalance]:
        """Accounts with balances across all connections.

        A connection whose account listing fails is left out; a failed
        balance lookup leaves that account's balance empty.
        """
        await self.budget_service.require_access(user_id, budget_id)
        connections = await self._connections(budget_id)
        if not connections:
            return []
        self._require_configured()

        results = await asyncio.gather(
            *(self._accounts_guarded(budget_id, conn) for conn in connections)
        )
        return [account for accounts in results for account in accounts]

    async def _accounts_guarded(self, budget_id: UUID, conn: ConnectionRef) -> list[AccountWithBalance]:
        try:
            accounts = await asyncio.wait_for(
                self.client.list_accounts(conn.access_token), timeout=self.timeout
            )
        except Exception as e:
            logger.warning(
                "Account listing failed",
                extra=self._log_extra(
                    budget_id, institution=conn.institution_name, error_type=type(e).__name__
                ),
            )
            return []

        balances = await asyncio.gather(
            *(self._balance_or_empty(conn, account.account_id) for account in accounts)
        )
        return [
            AccountWithBalance(
                **self._with_institution(account, conn.institution_name).model_dump(),
                balance=balance,
                connection_id=conn.connection_id,
            )
            for account, balance in zip(accounts, balances)
        ]

    async def _balance_or_empty(self, conn: ConnectionRef, account_id: str) -> AccountBalance:
        try:
            return await self.client.get_balance(conn.access_token, account_id)
        except BudgetAPIError:
            logger.warning(
                "Balance lookup failed",
                extra={"provider": self.provider.value, "institution": conn.institution_name},
            )
            return AccountBalance()

    async def list_transactions(
        self,
        budget_id: UUID,
        user_id: UUID,
        start_date: date | None,
        end_date: date | None,
        account_id: str | None = None,
    ) -> list[NormalizedTransaction]:
        """All transactions in the range, normalized but not filtered."""
        if start_date is None or end_date is None or start_date > end_date:
            raise ValidationError("VAL_003")
        await self.budget_service.require_access(user_id, budget_id)
        connections = await self._connections(budget_id)
        if not connections:
            return []
        self._require_configured()

        transactions: list[NormalizedTransaction] = []
        for conn in connections:
            try:
                raw_records = await asyncio.wait_for(
                    self.client.list_transactions(conn.access_token, start_date, end_date, account_id),
                    timeout=self.timeout,
                )
            except Exception as e:
                logger.warning(
                    "Transaction listing failed",
                    extra=self._log_extra(
                        budget_id, institution=conn.institution_name, error_type=type(e).__name__
                    ),
                )
                continue
            for raw in raw_records:
                account = ExternalAccount(
                    account_id=raw.get("account_id") or "",
                    name="Unknown Account",
                    type="other",
                    institution_name=conn.institution_name,
                )
                try:
                    transactions.append(self.adapter.normalize(raw, account))
                except (KeyError, TypeError, ValueError):
                    continue
        transactions.sort(key=lambda txn: txn.calendar_date, reverse=True)
        return transactions

    async def remove_connection(self, budget_id: UUID, user_id: UUID, connection_pk: UUID) -> None:
        """Forget a connection; upstream revocation is best-effort."""
        await self.budget_service.require_access(user_id, budget_id)
        connection = await self.budget_repo.get_connection_by_id(budget_id, connection_pk)
        if connection is None or connection.provider != self.provider.value:
            raise NotFoundError("API_005", details={"connection_id": str(connection_pk)})

        try:
            await self.client.remove_connection(connection.access_token)
        except (UpstreamUnavailableError, AggregatorNotConfiguredError) as e:
            logger.warning(
                "Upstream connection removal failed",
                extra=self._log_extra(budget_id, error_code=e.error_code),
            )

        await self.db.delete(connection)
        await self.db.commit()
        logger.info("Bank connection removed", extra=self._log_extra(budget_id))
