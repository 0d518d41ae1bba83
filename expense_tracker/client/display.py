# expense_tracker/client/display.py
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, NamedTuple, Union

from expense_tracker.db.models.transaction import TransactionCategory
from expense_tracker.schemas.transaction import to_money


class CategoryInfo(NamedTuple):
    id: str
    name: str
    icon: str


CATEGORIES: List[CategoryInfo] = [
    CategoryInfo(TransactionCategory.food.value, "Food & Drinks", "fast-food"),
    CategoryInfo(TransactionCategory.shopping.value, "Shopping", "cart"),
    CategoryInfo(TransactionCategory.transportation.value, "Transportation", "car"),
    CategoryInfo(TransactionCategory.entertainment.value, "Entertainment", "film"),
    CategoryInfo(TransactionCategory.bills.value, "Bills", "receipt"),
    CategoryInfo(TransactionCategory.income.value, "Income", "cash"),
    CategoryInfo(TransactionCategory.other.value, "Other", "ellipsis-horizontal"),
]

_CATEGORIES_BY_ID: Dict[str, CategoryInfo] = {c.id: c for c in CATEGORIES}


def category_details(category: Union[TransactionCategory, str]) -> CategoryInfo:
    """Name and icon for a category id; unknown ids fall back to "other"."""
    key = category.value if isinstance(category, TransactionCategory) else str(category)
    return _CATEGORIES_BY_ID.get(key, _CATEGORIES_BY_ID[TransactionCategory.other.value])


def format_date(value: Union[date, datetime]) -> str:
    """e.g. 19 October 2026"""
    return f"{value.day} {value.strftime('%B')} {value.year}"


def format_amount(value: Union[Decimal, int, float, str]) -> str:
    """Signed amount with two decimals: income stays positive, expenses keep their minus sign."""
    return f"{to_money(value):.2f}"
