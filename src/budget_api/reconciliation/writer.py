"""Bulk import of categorized sync candidates as expenses."""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from budget_api.core.errors import get_error
from budget_api.core.exceptions import AccessDeniedError, NoCategoriesError
from budget_api.models.expense import Expense
from budget_api.repositories.budget import BudgetRepository
from budget_api.repositories.category import CategoryRepository
from budget_api.schemas.bank import ImportEntry, ImportFailure, ImportResult, ImportSkip
from budget_api.schemas.expense import ExpenseResponse

logger = logging.getLogger(__name__)

MISSING_CATEGORY = "missing_category"
UNKNOWN_CATEGORY = "unknown_category"


def _failure(entry: ImportEntry, error_code: str) -> ImportFailure:
    return ImportFailure(
        transaction_id=entry.transaction_id,
        error_code=error_code,
        message=get_error(error_code)["user_message"],
    )


class BulkImportWriter:
    """Create one expense per categorized entry, with per-entry outcomes.

    Entries are independent: a skipped or failed entry never prevents the
    rest of the batch from being written. Each created expense is committed
    on its own so a uniqueness collision only rolls back that entry.
    """

    def __init__(self, db: AsyncSession):
        """Initialize the writer with a database session.

        Args:
            db: Database session
        """
        self.db = db
        self.budget_repo = BudgetRepository(db)
        self.category_repo = CategoryRepository(db)

    async def import_batch(
        self, budget_id: UUID, user_id: UUID, entries: list[ImportEntry]
    ) -> ImportResult:
        """Import a batch of entries into a budget.

        Args:
            budget_id: Target budget
            user_id: Acting user, recorded as creator of every expense
            entries: Candidates with the category chosen by the user

        Returns:
            ImportResult with created expenses, skipped and failed entries

        Raises:
            AccessDeniedError: If the user cannot access the budget
            NoCategoriesError: If the budget has no categories
        """
        if not await self.budget_repo.has_access(user_id, budget_id):
            raise AccessDeniedError(
                "ACCESS_001", details={"budget_id": str(budget_id), "user_id": str(user_id)}
            )

        category_ids = await self.category_repo.get_ids_by_budget(budget_id)
        if not category_ids:
            raise NoCategoriesError("SYNC_001", details={"budget_id": str(budget_id)})

        created: list[ExpenseResponse] = []
        skipped: list[ImportSkip] = []
        failed: list[ImportFailure] = []

        for entry in entries:
            if entry.category_id is None:
                skipped.append(ImportSkip(transaction_id=entry.transaction_id, reason=MISSING_CATEGORY))
                continue
            if entry.category_id not in category_ids:
                skipped.append(ImportSkip(transaction_id=entry.transaction_id, reason=UNKNOWN_CATEGORY))
                continue

            expense = Expense(
                amount=entry.amount,
                description=entry.name,
                category_id=entry.category_id,
                date=entry.date,
                created_by=user_id,
                budget_id=budget_id,
                external_transaction_id=entry.transaction_id,
                account_name=entry.account_name,
                institution_name=entry.institution_name,
            )
            self.db.add(expense)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    "Import entry collided with an existing expense",
                    extra={"budget_id": str(budget_id), "error_code": "DB_002"},
                )
                failed.append(_failure(entry, "DB_002"))
                continue
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(
                    "Import entry could not be stored",
                    extra={"budget_id": str(budget_id), "error_code": "DB_001", "error_type": type(e).__name__},
                )
                failed.append(_failure(entry, "DB_001"))
                continue

            await self.db.refresh(expense)
            created.append(ExpenseResponse.model_validate(expense))

        logger.info(
            "Bulk import finished",
            extra={
                "budget_id": str(budget_id),
                "created": len(created),
                "skipped": len(skipped),
                "failed": len(failed),
            },
        )
        return ImportResult(
            created_count=len(created), expenses=created, skipped=skipped, failed=failed
        )
