# expense_tracker/crud/crud_transaction.py
import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import case, delete as sqlalchemy_delete, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from expense_tracker.core.errors import InternalError, NotFoundError, ValidationError
from expense_tracker.db.models.transaction import Transaction as TransactionModel
from expense_tracker.schemas.transaction import Summary, TransactionCreate, to_money, to_utc, validate_amount

logger = logging.getLogger(__name__)


# --- Read Operations ---

async def get_transactions_by_user(db: AsyncSession, *, user_id: str) -> List[TransactionModel]:
    """
    All transactions of one user, newest logical date first.
    Rows sharing a date keep their insertion order. Unknown users get an empty list.
    """
    try:
        result = await db.execute(
            select(TransactionModel)
            .filter(TransactionModel.user_id == user_id)
            .order_by(desc(TransactionModel.date), TransactionModel.seq)
        )
    except SQLAlchemyError as e:
        logger.exception("Failed to list transactions for user %s", user_id)
        raise InternalError("Could not retrieve transactions") from e
    return list(result.scalars().all())


# --- Create Operation ---

async def create_transaction(
    db: AsyncSession,
    *,
    obj_in: Union[TransactionCreate, Dict[str, Any]]
) -> TransactionModel:
    """
    Persist a new transaction and return it once committed.
    The store assigns id, insertion sequence and timestamps.
    """
    if isinstance(obj_in, dict):
        try:
            obj_in = TransactionCreate.model_validate(obj_in)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid transaction: {e.error_count()} validation error(s)") from e

    # Schemas built with model_construct() skip validation; the store still enforces the bounds
    try:
        amount = validate_amount(obj_in.amount)
    except (ValueError, ArithmeticError) as e:
        raise ValidationError(str(e)) from e
    if not obj_in.user_id or not (obj_in.title or "").strip():
        raise ValidationError("userId and title are required")

    db_obj = TransactionModel(
        user_id=obj_in.user_id,
        title=obj_in.title.strip(),
        description=obj_in.description,
        category=obj_in.category,
        amount=amount,
        date=to_utc(obj_in.date),
    )
    db.add(db_obj)
    try:
        await db.commit()
        await db.refresh(db_obj)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to create transaction for user %s", obj_in.user_id)
        raise InternalError("Could not create transaction") from e

    logger.info("Created transaction %s for user %s", db_obj.id, db_obj.user_id)
    return db_obj


# --- Delete Operation ---

async def remove_transaction(
    db: AsyncSession,
    *,
    transaction_id: Union[uuid.UUID, str],
    user_id: str
) -> None:
    """
    Delete a transaction only if it belongs to `user_id`.
    The ownership check and the delete are one statement, so a concurrent
    delete of the same row makes the loser see NotFoundError.
    """
    if not isinstance(transaction_id, uuid.UUID):
        try:
            transaction_id = uuid.UUID(str(transaction_id))
        except ValueError:
            raise NotFoundError()

    try:
        result = await db.execute(
            sqlalchemy_delete(TransactionModel)
            .where(TransactionModel.id == transaction_id, TransactionModel.user_id == user_id)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise NotFoundError()
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to delete transaction %s for user %s", transaction_id, user_id)
        raise InternalError("Could not delete transaction") from e

    logger.info("Deleted transaction %s for user %s", transaction_id, user_id)


# --- Aggregation Operations ---

def summarize(transactions: Iterable[Any]) -> Summary:
    """
    Recompute the summary from the given records.
    Nothing is cached: the balance is always the exact sum of the amounts.
    """
    total_income = Decimal("0")
    total_expense = Decimal("0")
    for transaction in transactions:
        amount = to_money(transaction.amount)
        if amount > 0:
            total_income += amount
        elif amount < 0:
            total_expense += amount
    return Summary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income + total_expense,
    )


async def get_user_summary(db: AsyncSession, *, user_id: str) -> Summary:
    """
    Store-side aggregate for one user.
    Each figure is rounded to cents since some backends sum in binary floating point.
    """
    stmt = (
        select(
            func.coalesce(func.sum(case((TransactionModel.amount > 0, TransactionModel.amount), else_=Decimal(0))), Decimal(0)).label("total_income"),
            func.coalesce(func.sum(case((TransactionModel.amount < 0, TransactionModel.amount), else_=Decimal(0))), Decimal(0)).label("total_expense"),
        )
        .filter(TransactionModel.user_id == user_id)
    )
    try:
        result = await db.execute(stmt)
        sums = result.one()
    except SQLAlchemyError as e:
        logger.exception("Failed to summarize transactions for user %s", user_id)
        raise InternalError("Could not compute summary") from e

    total_income = to_money(sums.total_income)
    total_expense = to_money(sums.total_expense)
    return Summary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income + total_expense,
    )
