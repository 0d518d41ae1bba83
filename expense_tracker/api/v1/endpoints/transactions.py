# expense_tracker/api/v1/endpoints/transactions.py
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker import schemas
from expense_tracker import crud
from expense_tracker.api.v1 import deps
from expense_tracker.core.errors import ExpenseTrackerError, InternalError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/transactions",
    response_model=schemas.TransactionCreatedResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_transaction(
    *,
    transaction_in: schemas.TransactionCreate,
    db: AsyncSession = Depends(deps.get_async_db)
):
    """Add a transaction for `userId`."""
    try:
        transaction = await crud.crud_transaction.create_transaction(db=db, obj_in=transaction_in)
    except ExpenseTrackerError:
        raise
    except Exception as e:
        logger.exception("Error adding transaction for user %s", transaction_in.user_id)
        raise InternalError() from e

    return schemas.TransactionCreatedResponse(
        message="Transaction added successfully",
        transaction=schemas.Transaction.model_validate(transaction),
    )


@router.get(
    "/transactions/{user_id}",
    response_model=schemas.TransactionListResponse
)
async def read_transactions(
    *,
    user_id: str = Depends(deps.get_user_id),
    db: AsyncSession = Depends(deps.get_async_db)
):
    """
    List the user's transactions together with their summary.
    Both come from the same rows, so the totals always match the listing.
    """
    try:
        transactions = await crud.crud_transaction.get_transactions_by_user(db=db, user_id=user_id)
    except ExpenseTrackerError:
        raise
    except Exception as e:
        logger.exception("Error fetching transactions for user %s", user_id)
        raise InternalError() from e

    if not transactions:
        raise NotFoundError(schemas.NO_TRANSACTIONS_MESSAGE)

    summary = crud.crud_transaction.summarize(transactions)
    return schemas.TransactionListResponse(
        transactions=[schemas.Transaction.model_validate(t) for t in transactions],
        total_earned=summary.total_income,
        total_spend=summary.total_expense,
        total_balance=summary.balance,
        message="Transactions fetched successfully",
    )


@router.delete(
    "/transactions/{transaction_id}/{user_id}",
    response_model=schemas.MessageResponse
)
async def delete_transaction(
    *,
    transaction_id: str,
    user_id: str = Depends(deps.get_user_id),
    db: AsyncSession = Depends(deps.get_async_db)
):
    """Delete a transaction; 404 unless it exists and belongs to `user_id`."""
    try:
        await crud.crud_transaction.remove_transaction(db=db, transaction_id=transaction_id, user_id=user_id)
    except ExpenseTrackerError:
        raise
    except Exception as e:
        logger.exception("Error deleting transaction %s for user %s", transaction_id, user_id)
        raise InternalError() from e

    return schemas.MessageResponse(message="Transaction deleted successfully")
