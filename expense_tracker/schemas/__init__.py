# expense_tracker/schemas/__init__.py
from .transaction import (
    Money,
    Summary,
    Transaction,
    TransactionCreate,
    TransactionCreatedResponse,
    TransactionListResponse,
    MessageResponse,
    NO_TRANSACTIONS_MESSAGE,
    to_money,
    to_utc,
    validate_amount,
)
