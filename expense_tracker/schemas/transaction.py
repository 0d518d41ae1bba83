# expense_tracker/schemas/transaction.py
from pydantic import BaseModel, Field, field_validator, AfterValidator, PlainSerializer
from pydantic.alias_generators import to_camel
from typing import Optional, List, Annotated
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
import uuid
from expense_tracker.db.models.transaction import TransactionCategory

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("1000000")

NO_TRANSACTIONS_MESSAGE = "No transactions found"


def to_money(value) -> Decimal:
    """Round any numeric value to the currency minor unit."""
    try:
        return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"not a monetary amount: {value!r}") from e


def validate_amount(value) -> Decimal:
    """Signed amount rules: finite, non-zero at cent precision, |amount| <= 1,000,000."""
    amount = Decimal(str(value))
    if not amount.is_finite():
        raise ValueError("amount must be a finite number")
    amount = to_money(amount)
    if amount == 0:
        raise ValueError("amount must not be zero")
    if abs(amount) > MAX_AMOUNT:
        raise ValueError(f"amount must be between -{MAX_AMOUNT} and {MAX_AMOUNT}")
    return amount


# Decimal internally, JSON number on the wire
Money = Annotated[Decimal, AfterValidator(to_money), PlainSerializer(float, return_type=float, when_used="json")]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Stored without an offset on some backends, so always kept in UTC
UtcDatetime = Annotated[datetime, AfterValidator(to_utc)]


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TransactionBase(CamelModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    category: TransactionCategory
    amount: Money
    date: UtcDatetime = Field(default_factory=_utcnow)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v


class TransactionCreate(TransactionBase):
    user_id: str = Field(..., min_length=1)

    @field_validator("amount", mode="before")
    @classmethod
    def amount_in_bounds(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float, str, Decimal)):
            raise ValueError("amount must be a number")
        try:
            return validate_amount(v)
        except InvalidOperation as e:
            raise ValueError(f"not a monetary amount: {v!r}") from e


class Transaction(TransactionBase):
    id: uuid.UUID
    user_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class Summary(CamelModel):
    """Income/expense/balance derived from a set of transactions. Expense is a negative sum."""
    total_income: Money = Decimal("0.00")
    total_expense: Money = Decimal("0.00")
    balance: Money = Decimal("0.00")


class MessageResponse(CamelModel):
    message: str


class TransactionCreatedResponse(CamelModel):
    message: str
    transaction: Transaction


class TransactionListResponse(CamelModel):
    transactions: List[Transaction]
    total_earned: Money
    total_spend: Money
    total_balance: Money
    message: str

    def summary(self) -> Summary:
        return Summary(
            total_income=self.total_earned,
            total_expense=self.total_spend,
            balance=self.total_balance,
        )
