# expense_tracker/client/__init__.py
from .api import TransactionsClient
from .projection import TransactionsProjection
