"""Error codes and user-friendly messages.

This module defines the error catalog for the budget API.
Each error has:
- code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the user
- retry_allowed: Whether the error is retryable
"""

ERROR_CATALOG: dict[str, dict] = {
    "ACCESS_001": {
        "code": "ACCESS_001",
        "message": "Access denied: user is not a member of this budget",
        "user_message": "You don't have access to this budget.",
        "suggestion": "Ask the budget owner to invite you.",
        "retry_allowed": False,
    },
    "ACCESS_002": {
        "code": "ACCESS_002",
        "message": "Owner-only operation attempted by a member",
        "user_message": "Only the budget owner can do this.",
        "suggestion": "Ask the budget owner to make this change.",
        "retry_allowed": False,
    },
    "API_001": {
        "code": "API_001",
        "message": "Budget not found",
        "user_message": "We couldn't find this budget.",
        "suggestion": "Please check the budget ID and try again.",
        "retry_allowed": False,
    },
    "API_002": {
        "code": "API_002",
        "message": "Category not found",
        "user_message": "We couldn't find this category.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "API_003": {
        "code": "API_003",
        "message": "Expense not found",
        "user_message": "We couldn't find this expense.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "API_004": {
        "code": "API_004",
        "message": "Asset or liability not found",
        "user_message": "We couldn't find this item.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "API_005": {
        "code": "API_005",
        "message": "Bank connection not found",
        "user_message": "We couldn't find this bank connection.",
        "suggestion": "Please refresh your linked accounts and try again.",
        "retry_allowed": False,
    },
    "API_006": {
        "code": "API_006",
        "message": "Invite not found",
        "user_message": "This invite link is not valid.",
        "suggestion": "Ask the budget owner to send a new invite.",
        "retry_allowed": False,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request data failed validation",
        "user_message": "Invalid input data.",
        "suggestion": "Please check your input and try again.",
        "retry_allowed": True,
    },
    "VAL_002": {
        "code": "VAL_002",
        "message": "budget_id is required",
        "user_message": "No budget was selected.",
        "suggestion": "Select a budget and try again.",
        "retry_allowed": True,
    },
    "VAL_003": {
        "code": "VAL_003",
        "message": "start_date and end_date are required and start_date must not be after end_date",
        "user_message": "The date range is missing or invalid.",
        "suggestion": "Choose a start date on or before the end date.",
        "retry_allowed": True,
    },
    "VAL_004": {
        "code": "VAL_004",
        "message": "Invite is invalid, already used, expired, or addressed to another email",
        "user_message": "This invite can no longer be used.",
        "suggestion": "Ask the budget owner to send a new invite.",
        "retry_allowed": False,
    },
    "VAL_005": {
        "code": "VAL_005",
        "message": "User is already a member of this budget",
        "user_message": "This user is already a member of this budget.",
        "suggestion": "No action needed.",
        "retry_allowed": False,
    },
    "VAL_006": {
        "code": "VAL_006",
        "message": "The budget owner cannot be removed from members",
        "user_message": "The budget owner can't be removed.",
        "suggestion": "Remove other members instead.",
        "retry_allowed": False,
    },
    "VAL_007": {
        "code": "VAL_007",
        "message": "Category still has expenses",
        "user_message": "This category still has expenses.",
        "suggestion": "Move or delete its expenses first.",
        "retry_allowed": False,
    },
    "AUTH_001": {
        "code": "AUTH_001",
        "message": "Email already registered",
        "user_message": "An account with this email already exists.",
        "suggestion": "Log in instead, or use a different email.",
        "retry_allowed": False,
    },
    "SYNC_001": {
        "code": "SYNC_001",
        "message": "Budget has no categories",
        "user_message": "No categories found. Please create at least one category first.",
        "suggestion": "Create a category, then sync again.",
        "retry_allowed": True,
    },
    "SYNC_002": {
        "code": "SYNC_002",
        "message": "Bank aggregator request failed",
        "user_message": "We couldn't reach your bank right now.",
        "suggestion": "Please try again in a few minutes.",
        "retry_allowed": True,
    },
    "SYNC_003": {
        "code": "SYNC_003",
        "message": "Bank aggregator credentials are not configured",
        "user_message": "Bank connections are not available on this server.",
        "suggestion": "Contact the administrator.",
        "retry_allowed": False,
    },
    "SYNC_004": {
        "code": "SYNC_004",
        "message": "Aggregator rejected the access credential",
        "user_message": "We couldn't verify this bank connection.",
        "suggestion": "Reconnect your bank and try again.",
        "retry_allowed": True,
    },
    "DB_001": {
        "code": "DB_001",
        "message": "Database operation failed",
        "user_message": "A database error occurred",
        "suggestion": "Please try again later",
        "retry_allowed": True,
    },
    "DB_002": {
        "code": "DB_002",
        "message": "Resource already exists",
        "user_message": "This record already exists.",
        "suggestion": "Please check if the record was already created.",
        "retry_allowed": False,
    },
    "EMAIL_001": {
        "code": "EMAIL_001",
        "message": "Invite created but the email could not be delivered",
        "user_message": "Invite created but failed to send email.",
        "suggestion": "Please check email configuration and resend the invite.",
        "retry_allowed": True,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Unknown codes return a generic definition instead of raising.
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def get_user_message(error_code: str) -> str:
    """Get user-friendly message for an error code."""
    return get_error(error_code)["user_message"]


def is_retryable(error_code: str) -> bool:
    """Check if an error is retryable."""
    return get_error(error_code)["retry_allowed"]
