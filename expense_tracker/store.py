"""The in-memory expense collection and its persistence mirror."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional

from .data_loader import Expense
from .storage import StorageError

logger = logging.getLogger(__name__)


class ExpenseStore:
    """Ordered expense records mirrored to a persistence adapter.

    Every mutation builds the new sequence, hands it to ``adapter.persist``
    and only swaps it in once that returns, so a failed write leaves the
    in-memory records untouched.
    """

    def __init__(self, adapter, expenses: Optional[Iterable[Expense]] = None):
        self.adapter = adapter
        self._expenses: List[Expense] = list(expenses or [])
        self.load_error: Optional[str] = None

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(list(self._expenses))

    @property
    def records(self) -> List[Expense]:
        return list(self._expenses)

    def get(self, position: int) -> Expense:
        self._check_position(position)
        return self._expenses[position]

    def _check_position(self, position: int) -> None:
        if not 0 <= position < len(self._expenses):
            raise IndexError(f"No expense at position {position}")

    def _commit(self, expenses: List[Expense]) -> None:
        self.adapter.persist(expenses)
        self._expenses = expenses

    def add(self, record: Expense) -> None:
        self._commit(self._expenses + [record])
        logger.debug("Added expense at position %d", len(self._expenses) - 1)

    def update(self, position: int, record: Expense) -> None:
        self._check_position(position)
        updated = list(self._expenses)
        updated[position] = record
        self._commit(updated)
        logger.debug("Updated expense at position %d", position)

    def remove(self, position: int) -> Expense:
        self._check_position(position)
        updated = list(self._expenses)
        removed = updated.pop(position)
        self._commit(updated)
        logger.debug("Removed expense at position %d", position)
        return removed

    def load(self, source: Iterable[Expense]) -> None:
        self._commit(list(source))
        logger.info("Replaced collection with %d expenses", len(self._expenses))

    def reload(self) -> None:
        """Replace the collection with whatever the adapter holds.

        A backend failure leaves an empty collection and sets ``load_error``.
        """

        try:
            expenses = self.adapter.load()
        except StorageError as exc:
            logger.error("Loading expenses failed: %s", exc)
            self._expenses = []
            self.load_error = str(exc)
            return
        self._expenses = list(expenses)
        self.load_error = None
