# expense_tracker/crud/__init__.py
from . import crud_transaction
