# expense_tracker/client/projection.py
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Tuple, Union

from expense_tracker.client.api import TransactionsClient
from expense_tracker.core.errors import ExpenseTrackerError
from expense_tracker.db.models.transaction import TransactionCategory
from expense_tracker.schemas.transaction import Summary, Transaction

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str, str], None]

EMPTY_PROJECTION: Tuple[Tuple[Transaction, ...], Summary] = ((), Summary())


class TransactionsProjection:
    """
    Local view of one user's transactions and summary.

    The view is never patched locally: every add or delete is followed by a
    full re-read from the server, and a refresh replaces the whole
    (transactions, summary) pair in one assignment. A failed refresh keeps
    the last good view. Overlapping operations are not coalesced; whichever
    refresh finishes last defines what is shown.
    """

    def __init__(self, client: TransactionsClient, user_id: str, on_error: Optional[ErrorCallback] = None):
        self._client = client
        self._user_id = user_id
        self._state = EMPTY_PROJECTION
        # Bumped on every user switch so late responses for the old user are dropped
        self._generation = 0
        self.on_error = on_error
        self.is_loading = False
        self.last_error: Optional[ExpenseTrackerError] = None

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self._state[0]

    @property
    def summary(self) -> Summary:
        return self._state[1]

    def snapshot(self) -> Tuple[Tuple[Transaction, ...], Summary]:
        return self._state

    def _report(self, title: str, error: ExpenseTrackerError) -> None:
        self.last_error = error
        logger.warning("%s for user %s: %s", title, self._user_id, error)
        if self.on_error is not None:
            self.on_error(title, error.message)

    def clear(self) -> None:
        self._state = EMPTY_PROJECTION
        self.last_error = None

    async def switch_user(self, user_id: str) -> bool:
        """Drop everything shown for the previous user, then load the new one."""
        self._generation += 1
        self._user_id = user_id
        self.clear()
        return await self.refresh()

    async def refresh(self) -> bool:
        """Re-read listing and summary. Returns True when the view was replaced."""
        user_id = self._user_id
        generation = self._generation
        self.is_loading = True
        try:
            listing = await self._client.list_transactions(user_id)
        except ExpenseTrackerError as e:
            if generation == self._generation:
                self._report("Error fetching transactions", e)
            return False
        finally:
            self.is_loading = False

        if generation != self._generation:
            logger.debug("Dropping transactions fetched for previous user %s", user_id)
            return False

        self._state = (tuple(listing.transactions), listing.summary())
        self.last_error = None
        return True

    async def add_transaction(
        self,
        *,
        title: str,
        amount: Union[Decimal, int, float, str],
        category: Union[TransactionCategory, str],
        date: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> Optional[Transaction]:
        """
        Create a transaction, then refresh whatever the outcome.
        Returns the created transaction, or None when the request failed;
        the refresh shows whether it was stored anyway.
        """
        created = None
        generation = self._generation
        self.is_loading = True
        try:
            created = await self._client.create_transaction(
                self._user_id,
                title=title,
                amount=amount,
                category=category,
                date=date,
                description=description,
            )
        except ExpenseTrackerError as e:
            if generation == self._generation:
                self._report("Error adding transaction", e)
        finally:
            self.is_loading = False
        await self.refresh()
        return created

    async def delete_transaction(self, transaction_id: str) -> bool:
        """Delete, then refresh whatever the outcome. Returns True when the server confirmed."""
        deleted = False
        generation = self._generation
        self.is_loading = True
        try:
            await self._client.delete_transaction(str(transaction_id), self._user_id)
            deleted = True
        except ExpenseTrackerError as e:
            if generation == self._generation:
                self._report("Error deleting transaction", e)
        finally:
            self.is_loading = False
        await self.refresh()
        return deleted
