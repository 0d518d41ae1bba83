import uuid
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from expense_tracker.core.errors import NotFoundError, ValidationError
from expense_tracker.crud import crud_transaction
from expense_tracker.db.models.transaction import Transaction as TransactionModel, TransactionCategory
from expense_tracker.schemas.transaction import Summary, TransactionCreate


async def _count(db) -> int:
    result = await db.execute(select(func.count()).select_from(TransactionModel))
    return result.scalar_one()


class TestCreateAndList:
    async def test_create_then_list_round_trip(self, db, make_transaction):
        obj_in = make_transaction(description="flat white")
        created = await crud_transaction.create_transaction(db, obj_in=obj_in)

        assert isinstance(created.id, uuid.UUID)
        assert created.created_at is not None
        assert created.updated_at is not None

        listed = await crud_transaction.get_transactions_by_user(db, user_id="user-1")
        assert len(listed) == 1
        stored = listed[0]
        assert stored.id == created.id
        assert stored.user_id == "user-1"
        assert stored.title == "Coffee"
        assert stored.description == "flat white"
        assert stored.category == TransactionCategory.food
        assert stored.amount == Decimal("-150.00")
        assert stored.date == datetime(2026, 10, 1, 9, 30)

    async def test_ids_are_unique(self, db, make_transaction):
        first = await crud_transaction.create_transaction(db, obj_in=make_transaction())
        second = await crud_transaction.create_transaction(db, obj_in=make_transaction())
        assert first.id != second.id

    async def test_list_unknown_user_is_empty(self, db):
        assert await crud_transaction.get_transactions_by_user(db, user_id="nobody") == []

    async def test_list_only_returns_own_transactions(self, db, make_transaction):
        await crud_transaction.create_transaction(db, obj_in=make_transaction(user_id="alice"))
        await crud_transaction.create_transaction(db, obj_in=make_transaction(user_id="bob", title="Rent"))

        listed = await crud_transaction.get_transactions_by_user(db, user_id="bob")
        assert [t.title for t in listed] == ["Rent"]

    async def test_list_orders_by_date_desc_then_insertion(self, db, make_transaction):
        same_day = datetime(2026, 10, 1, 12, 0)
        for title in ("first", "second", "third"):
            await crud_transaction.create_transaction(db, obj_in=make_transaction(title=title, date=same_day))
        await crud_transaction.create_transaction(db, obj_in=make_transaction(title="later", date=datetime(2026, 10, 5)))
        await crud_transaction.create_transaction(db, obj_in=make_transaction(title="earlier", date=datetime(2026, 9, 1)))

        listed = await crud_transaction.get_transactions_by_user(db, user_id="user-1")
        assert [t.title for t in listed] == ["later", "first", "second", "third", "earlier"]

    async def test_create_accepts_plain_dict(self, db):
        created = await crud_transaction.create_transaction(
            db,
            obj_in={"userId": "user-1", "title": "Salary", "amount": 50000, "category": "income"},
        )
        assert created.amount == Decimal("50000.00")
        assert created.date is not None

    @pytest.mark.parametrize("payload", [
        {"userId": "user-1", "title": "Nothing", "amount": 0, "category": "other"},
        {"userId": "user-1", "title": "Too much", "amount": 1_000_000.01, "category": "other"},
        {"userId": "user-1", "title": "Too little", "amount": -1_000_001, "category": "other"},
        {"userId": "user-1", "title": "   ", "amount": 10, "category": "other"},
        {"userId": "user-1", "amount": 10, "category": "other"},
        {"userId": "user-1", "title": "Snacks", "amount": 10, "category": "groceries"},
        {"title": "No owner", "amount": 10, "category": "other"},
    ])
    async def test_create_rejects_invalid_input(self, db, payload):
        with pytest.raises(ValidationError):
            await crud_transaction.create_transaction(db, obj_in=payload)
        assert await _count(db) == 0

    async def test_create_rejects_unvalidated_zero_amount(self, db):
        obj_in = TransactionCreate.model_construct(
            user_id="user-1",
            title="Sneaky",
            description=None,
            category=TransactionCategory.other,
            amount=Decimal("0"),
            date=datetime(2026, 10, 1),
        )
        with pytest.raises(ValidationError):
            await crud_transaction.create_transaction(db, obj_in=obj_in)
        assert await _count(db) == 0


class TestRemove:
    async def test_remove_own_transaction(self, db, make_transaction):
        created = await crud_transaction.create_transaction(db, obj_in=make_transaction())
        await crud_transaction.remove_transaction(db, transaction_id=created.id, user_id="user-1")
        assert await crud_transaction.get_transactions_by_user(db, user_id="user-1") == []

    async def test_remove_accepts_string_id(self, db, make_transaction):
        created = await crud_transaction.create_transaction(db, obj_in=make_transaction())
        await crud_transaction.remove_transaction(db, transaction_id=str(created.id), user_id="user-1")
        assert await _count(db) == 0

    async def test_cross_user_delete_is_not_found_and_keeps_record(self, db, make_transaction):
        created = await crud_transaction.create_transaction(db, obj_in=make_transaction(user_id="alice"))
        created_id = created.id

        with pytest.raises(NotFoundError):
            await crud_transaction.remove_transaction(db, transaction_id=created_id, user_id="mallory")

        listed = await crud_transaction.get_transactions_by_user(db, user_id="alice")
        assert [t.id for t in listed] == [created_id]

    async def test_remove_unknown_id_leaves_store_unchanged(self, db, make_transaction):
        await crud_transaction.create_transaction(db, obj_in=make_transaction())

        with pytest.raises(NotFoundError):
            await crud_transaction.remove_transaction(db, transaction_id=uuid.uuid4(), user_id="user-1")
        assert await _count(db) == 1

    async def test_remove_malformed_id_is_not_found(self, db):
        with pytest.raises(NotFoundError):
            await crud_transaction.remove_transaction(db, transaction_id="not-a-uuid", user_id="user-1")

    async def test_second_delete_of_same_id_is_not_found(self, db, make_transaction):
        created = await crud_transaction.create_transaction(db, obj_in=make_transaction())
        await crud_transaction.remove_transaction(db, transaction_id=created.id, user_id="user-1")

        with pytest.raises(NotFoundError):
            await crud_transaction.remove_transaction(db, transaction_id=created.id, user_id="user-1")


class TestSummary:
    async def test_empty_user_summary_is_zero(self, db):
        summary = await crud_transaction.get_user_summary(db, user_id="nobody")
        assert summary == Summary(total_income=0, total_expense=0, balance=0)
        assert crud_transaction.summarize([]) == summary

    async def test_coffee_scenario(self, db, make_transaction):
        await crud_transaction.create_transaction(db, obj_in=make_transaction(user_id="U"))

        summary = await crud_transaction.get_user_summary(db, user_id="U")
        assert summary.total_income == Decimal("0")
        assert summary.total_expense == Decimal("-150")
        assert summary.balance == Decimal("-150")

    async def test_salary_and_rent_scenario(self, db, make_transaction):
        await crud_transaction.create_transaction(db, obj_in=make_transaction(title="Salary", amount=50000, category="income"))
        await crud_transaction.create_transaction(db, obj_in=make_transaction(title="Rent", amount=-20000, category="bills"))

        summary = await crud_transaction.get_user_summary(db, user_id="user-1")
        assert (summary.total_income, summary.total_expense, summary.balance) == (
            Decimal("50000"), Decimal("-20000"), Decimal("30000"),
        )

    async def test_balance_equals_sum_of_amounts(self, db, make_transaction):
        amounts = [Decimal("12.34"), Decimal("-0.99"), Decimal("1000"), Decimal("-250.50"), Decimal("0.01"), Decimal("-999999.99")]
        for amount in amounts:
            await crud_transaction.create_transaction(db, obj_in=make_transaction(amount=amount))

        listed = await crud_transaction.get_transactions_by_user(db, user_id="user-1")
        from_rows = crud_transaction.summarize(listed)
        from_store = await crud_transaction.get_user_summary(db, user_id="user-1")

        assert from_rows.balance == sum(amounts)
        assert from_rows.total_income == sum(a for a in amounts if a > 0)
        assert from_rows.total_expense == sum(a for a in amounts if a < 0)
        assert from_store == from_rows

    async def test_many_small_amounts_do_not_drift(self, db, make_transaction):
        for _ in range(100):
            await crud_transaction.create_transaction(db, obj_in=make_transaction(amount=0.1))
            await crud_transaction.create_transaction(db, obj_in=make_transaction(amount=-0.07))

        summary = await crud_transaction.get_user_summary(db, user_id="user-1")
        assert summary.total_income == Decimal("10.00")
        assert summary.total_expense == Decimal("-7.00")
        assert summary.balance == Decimal("3.00")

    async def test_summary_follows_deletes(self, db, make_transaction):
        salary = await crud_transaction.create_transaction(db, obj_in=make_transaction(title="Salary", amount=50000, category="income"))
        await crud_transaction.create_transaction(db, obj_in=make_transaction(title="Rent", amount=-20000, category="bills"))
        await crud_transaction.remove_transaction(db, transaction_id=salary.id, user_id="user-1")

        summary = await crud_transaction.get_user_summary(db, user_id="user-1")
        assert summary == Summary(total_income=0, total_expense=-20000, balance=-20000)

    def test_summarize_ignores_category(self):
        class Row:
            def __init__(self, amount, category):
                self.amount = amount
                self.category = category

        rows = [Row(Decimal("100"), "food"), Row(Decimal("-40"), "income")]
        summary = crud_transaction.summarize(rows)
        assert summary == Summary(total_income=100, total_expense=-40, balance=60)
