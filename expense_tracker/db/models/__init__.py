# expense_tracker/db/models/__init__.py
from .transaction import Transaction, TransactionCategory
