# expense_tracker/core/errors.py
"""
Error taxonomy shared by the service and the client.

The store and the aggregator raise these and never swallow them; the HTTP
layer maps them to status codes and the client maps status codes back.
"""


class ExpenseTrackerError(Exception):
    """Base class for every error raised by expense_tracker."""

    default_message = "Unexpected error"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ExpenseTrackerError):
    """Malformed or out-of-range input. Never retried automatically."""

    default_message = "Invalid data"


class NotFoundError(ExpenseTrackerError):
    """The target record does not exist for the given user."""

    default_message = "Transaction not found"


class TransientError(ExpenseTrackerError):
    """Network failure, timeout or rate limiting. Safe to retry later."""

    default_message = "Service temporarily unavailable, please try again later"


class InternalError(ExpenseTrackerError):
    """Unexpected store or server failure."""

    default_message = "Internal server error"
