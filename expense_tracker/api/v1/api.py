# expense_tracker/api/v1/api.py
from fastapi import APIRouter

from expense_tracker.api.v1.endpoints import transactions

api_router = APIRouter()

api_router.include_router(transactions.router, tags=["Transactions"]) # paths already start with /transactions
