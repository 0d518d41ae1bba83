# expense_tracker/db/models/transaction.py
import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Numeric, DateTime, Integer, BigInteger, Index, Uuid, Enum as SQLAlchemyEnum
from expense_tracker.db.base_class import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionCategory(str, enum.Enum): # str mixin so pydantic/FastAPI treat it as a plain string
    food = "food"
    shopping = "shopping"
    transportation = "transportation"
    entertainment = "entertainment"
    bills = "bills"
    income = "income"
    other = "other"


class Transaction(Base):
    __tablename__ = "transactions"

    # Surrogate key; its monotonic value is the insertion order used to break date ties
    seq = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    id = Column(Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4)
    user_id = Column(String, nullable=False)

    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    category = Column(SQLAlchemyEnum(TransactionCategory, name="transaction_category_enum", create_constraint=True), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False) # > 0 income, < 0 expense

    # Logical date chosen by the user, not the insert time
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_transactions_user_id_date", "user_id", "date"),
        Index("ix_transactions_id_user_id", "id", "user_id"),
    )
