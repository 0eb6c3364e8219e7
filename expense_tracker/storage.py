"""Persistence adapters for the expense store.

Two interchangeable implementations with the same ``load()`` /
``persist(expenses)`` surface:

- ``LocalCacheAdapter`` keeps the whole collection as one JSON blob under a
  fixed key in a SQLite key-value table, rewritten in full on every change.
- ``DatabaseAdapter`` reads expenses joined with their owning user through
  SQLAlchemy. It is read-only; ``persist`` writes nothing.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Callable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import STORAGE_DATABASE, STORAGE_LOCAL, AppConfig
from .data_loader import Expense, dump_blob, expense_from_row, parse_blob
from .models import ExpenseRecord, User

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a persistence backend cannot be read or written."""


class LocalCacheAdapter:
    name = STORAGE_LOCAL

    def __init__(self, connection_factory: Callable[[], sqlite3.Connection], key: str = "expenses"):
        self.connection_factory = connection_factory
        self.key = key

    def load(self) -> List[Expense]:
        try:
            row = self.connection_factory().execute(
                "SELECT value FROM local_storage WHERE key = ?",
                (self.key,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Unable to read the local cache: {exc}") from exc
        if row is None:
            logger.info("No cached expenses under key %r", self.key)
            return []
        try:
            expenses = parse_blob(row["value"])
        except (TypeError, ValueError) as exc:
            logger.warning("Discarding corrupt cache under key %r: %s", self.key, exc)
            return []
        logger.info("Loaded %d expenses from the local cache", len(expenses))
        return expenses

    def persist(self, expenses: Sequence[Expense]) -> None:
        blob = dump_blob(expenses)
        conn = self.connection_factory()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO local_storage (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE
                    SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (self.key, blob),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Unable to write the local cache: {exc}") from exc
        logger.debug("Persisted %d expenses under key %r", len(expenses), self.key)


class DatabaseAdapter:
    name = STORAGE_DATABASE

    def __init__(self, session: Session):
        self.session = session

    def load(self) -> List[Expense]:
        stmt = (
            select(ExpenseRecord, User.name.label("user_name"))
            .join(User, ExpenseRecord.user_id == User.id)
            .order_by(ExpenseRecord.id)
        )
        try:
            rows = self.session.execute(stmt).all()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f"Unable to read expenses from the database: {exc}") from exc

        expenses = []
        for record, user_name in rows:
            try:
                expenses.append(
                    expense_from_row(
                        {
                            "id": record.id,
                            "user_id": record.user_id,
                            "user_name": user_name,
                            "amount": record.amount,
                            "category": record.category,
                            "description": record.description,
                            "date": record.date,
                            "is_fixed": record.is_fixed,
                        }
                    )
                )
            except (TypeError, ValueError) as exc:
                raise StorageError(f"Expense row {record.id} is invalid: {exc}") from exc
        logger.info("Loaded %d expenses from the database", len(expenses))
        return expenses

    def persist(self, expenses: Sequence[Expense]) -> None:
        logger.debug("Database storage is read-only; %d expenses kept in memory only", len(expenses))


def create_adapter(
    cfg: AppConfig,
    connection_factory: Optional[Callable[[], sqlite3.Connection]] = None,
    session: Optional[Session] = None,
):
    if cfg.storage == STORAGE_DATABASE:
        if session is None:
            raise ValueError("Database storage needs a SQLAlchemy session")
        return DatabaseAdapter(session)
    if connection_factory is None:
        raise ValueError("Local storage needs a SQLite connection factory")
    return LocalCacheAdapter(connection_factory, key=cfg.storage_key)
