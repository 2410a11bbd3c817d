"""Custom exception classes for budget operations.

This module defines the exception hierarchy used by services and the
bank-sync pipeline. Each exception carries an error code that maps to the
catalog in errors.py, so handlers can render a uniform response.
"""

from typing import Any


class BudgetAPIError(Exception):
    """Base exception for all budget API errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "ACCESS_001")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return (default: 500)
    """

    default_status: int = 500

    def __init__(
        self,
        error_code: str,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ):
        """Initialize the exception.

        Args:
            error_code: Error code from errors.py
            details: Additional error context (not shown to users)
            http_status: HTTP status code (default: class default)
        """
        self.error_code = error_code
        self.details = details or {}
        self.http_status = http_status or self.default_status
        super().__init__(error_code)


class AccessDeniedError(BudgetAPIError):
    """Raised when the user is neither the owner nor a member of a budget.

    Not retryable. Also raised for owner-only operations attempted by a
    plain member.
    """

    default_status = 403


class NotFoundError(BudgetAPIError):
    """Raised when a budget-scoped resource does not exist."""

    default_status = 404


class ValidationError(BudgetAPIError):
    """Raised for malformed input, before any processing happens.

    This includes:
    - Missing budget id
    - Missing or inverted date range
    - Invalid, used or expired invite tokens
    """

    default_status = 400


class UpstreamUnavailableError(BudgetAPIError):
    """Raised when a bank aggregator call fails or times out.

    During a sync this is caught per institution and the institution's
    results are omitted; elsewhere it surfaces as a 502.
    """

    default_status = 502


class AggregatorNotConfiguredError(BudgetAPIError):
    """Raised when aggregator credentials are missing from the settings."""

    default_status = 503


class DuplicateRecordError(BudgetAPIError):
    """Raised when a write collides with a uniqueness constraint."""

    default_status = 409


class NoCategoriesError(BudgetAPIError):
    """Raised when a budget has no categories to import transactions into.

    Checked before any network call is made.
    """

    default_status = 400


class EmailDeliveryError(BudgetAPIError):
    """Raised when an outbound email could not be delivered."""

    default_status = 502
