"""Bank aggregator endpoints: linking, accounts, sync and bulk import.

The ``provider`` path segment selects the aggregator (``plaid`` or
``teller``); every operation behaves the same way for both.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.api.deps import get_bank_sync_service, get_current_user, get_db
from budget_api.models.user import User
from budget_api.reconciliation.writer import BulkImportWriter
from budget_api.schemas.bank import (
    AccountWithBalance,
    ExchangeRequest,
    ExchangeResponse,
    ImportRequest,
    ImportResult,
    LinkToken,
    NormalizedTransaction,
    SyncRequest,
    SyncResult,
)
from budget_api.services.bank_sync import BankSyncService

router = APIRouter(prefix="/budgets/{budget_id}/bank", tags=["bank"])


@router.post(
    "/import",
    response_model=ImportResult,
    summary="Import categorized transactions",
    description="""
    Create expenses from sync candidates the user has categorized.

    Each entry is handled on its own:
    - no category: skipped (missing_category)
    - category from another budget: skipped (unknown_category)
    - external id already imported anywhere: failed (DB_002)

    The rest of the batch is still written.
    """,
    responses={
        400: {"description": "Budget has no categories"},
        403: {"description": "Access denied"},
    },
)
async def import_transactions(
    budget_id: UUID,
    data: ImportRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ImportResult:
    """
    Bulk import categorized transactions as expenses.

    Args:
        budget_id: Target budget
        data: Entries with the chosen category
        current_user: Authenticated user (recorded as creator)
        db: Database session

    Returns:
        Created expenses plus skipped and failed entries
    """
    return await BulkImportWriter(db).import_batch(budget_id, current_user.id, data.transactions)


@router.post(
    "/{provider}/link-token",
    response_model=LinkToken,
    summary="Start account linking",
    responses={503: {"description": "Aggregator credentials not configured"}},
)
async def create_link_token(
    budget_id: UUID,
    current_user: User = Depends(get_current_user),
    service: BankSyncService = Depends(get_bank_sync_service),
) -> LinkToken:
    return await service.create_link_token(budget_id, current_user.id)


@router.post(
    "/{provider}/exchange",
    response_model=ExchangeResponse,
    summary="Save linked institution",
    description="Exchange the token from the link flow and store the connection on the budget. Re-linking the same institution updates it.",
)
async def exchange_token(
    budget_id: UUID,
    data: ExchangeRequest,
    current_user: User = Depends(get_current_user),
    service: BankSyncService = Depends(get_bank_sync_service),
) -> ExchangeResponse:
    return await service.exchange(budget_id, current_user.id, data)


@router.get(
    "/{provider}/accounts",
    response_model=list[AccountWithBalance],
    summary="List linked accounts with balances",
)
async def list_accounts(
    budget_id: UUID,
    current_user: User = Depends(get_current_user),
    service: BankSyncService = Depends(get_bank_sync_service),
) -> list[AccountWithBalance]:
    return await service.list_accounts(budget_id, current_user.id)


@router.get(
    "/{provider}/transactions",
    response_model=list[NormalizedTransaction],
    summary="List raw transactions",
    description="All transactions in the range across linked institutions, without filtering.",
)
async def list_transactions(
    budget_id: UUID,
    start_date: date | None = Query(None, description="First day (inclusive)"),
    end_date: date | None = Query(None, description="Last day (inclusive)"),
    account_id: str | None = Query(None, description="Only this account"),
    current_user: User = Depends(get_current_user),
    service: BankSyncService = Depends(get_bank_sync_service),
) -> list[NormalizedTransaction]:
    return await service.list_transactions(
        budget_id, current_user.id, start_date, end_date, account_id
    )


@router.post(
    "/{provider}/sync",
    response_model=SyncResult,
    summary="Sync transactions",
    description="""
    Fetch transactions from every linked institution and return the new
    expenses for the user to categorize. Nothing is imported yet.

    Pending transactions, income, unsupported account types and
    transactions already imported into this budget are skipped and counted
    in stats. Institutions that fail or time out are listed in
    failed_institutions while the others still return results.
    """,
    responses={
        400: {"description": "Missing/invalid date range, or budget has no categories"},
        403: {"description": "Access denied"},
    },
)
async def sync_transactions(
    budget_id: UUID,
    data: SyncRequest,
    current_user: User = Depends(get_current_user),
    service: BankSyncService = Depends(get_bank_sync_service),
) -> SyncResult:
    return await service.sync(budget_id, current_user.id, data.start_date, data.end_date)


@router.delete(
    "/{provider}/connections/{connection_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove linked institution",
)
async def remove_connection(
    budget_id: UUID,
    connection_id: UUID,
    current_user: User = Depends(get_current_user),
    service: BankSyncService = Depends(get_bank_sync_service),
) -> None:
    await service.remove_connection(budget_id, current_user.id, connection_id)
