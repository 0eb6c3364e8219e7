"""Unittest base class for creating a clean test environment."""
import shutil
import tempfile
import unittest
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from expense_tracker import models
from expense_tracker.config import AppConfig
from expense_tracker.data_loader import Expense, User
from expense_tracker.webapp import STORE_EXTENSION, create_app


def make_expense(amount, category='食費', date='2024-04-01', description='lunch', is_fixed=False) -> Expense:
    return Expense(
        amount=amount,
        category=category,
        description=description,
        date=date,
        is_fixed=is_fixed,
        user=User(id=1, name='John Doe'),
    )


class BaseTestCase(unittest.TestCase):
    """Gives every test its own temporary directory and SQLite files."""

    def setUp(self) -> None:
        self.tmp_dir = Path(tempfile.mkdtemp(prefix='expense_tracker_'))
        self.addCleanup(shutil.rmtree, self.tmp_dir, ignore_errors=True)

    def make_config(self, storage: str = 'local', **kwargs) -> AppConfig:
        cfg = AppConfig(
            storage=storage,
            database=str(self.tmp_dir / 'cache.db'),
            database_uri=f"sqlite:///{self.tmp_dir / 'expenses.db'}",
            log_level='WARNING',
        )
        for key, value in kwargs.items():
            setattr(cfg, key, value)
        return cfg

    def make_app(self, config: Optional[AppConfig] = None, **kwargs):
        app = create_app(config=config or self.make_config(**kwargs))
        app.config['TESTING'] = True
        return app

    def store_of(self, app):
        return app.extensions[STORE_EXTENSION]

    def seed_database(self, rows, users=((1, 'John Doe'),)) -> None:
        """Create the expenses/users tables and insert rows outside any app."""
        engine = create_engine(f"sqlite:///{self.tmp_dir / 'expenses.db'}")
        self.addCleanup(engine.dispose)
        models.db.metadata.create_all(engine)
        with Session(engine) as session:
            for user_id, name in users:
                session.add(models.User(id=user_id, name=name))
            for row in rows:
                session.add(models.ExpenseRecord(**row))
            session.commit()
