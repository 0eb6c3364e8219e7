"""Tests for the persistence adapters in expense_tracker.storage."""
import json
import sqlite3
import unittest

from expense_tracker import models
from expense_tracker.config import AppConfig
from expense_tracker.db import connect
from expense_tracker.storage import (
    DatabaseAdapter,
    LocalCacheAdapter,
    StorageError,
    create_adapter,
)
from tests.base import BaseTestCase, make_expense


class LocalCacheAdapterTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.conn = connect(self.tmp_dir / 'cache.db')
        self.addCleanup(self.conn.close)
        self.adapter = LocalCacheAdapter(lambda: self.conn, key='expenses')

    def _write_raw(self, value: str) -> None:
        with self.conn:
            self.conn.execute(
                'INSERT INTO local_storage (key, value) VALUES (?, ?)',
                ('expenses', value),
            )

    def test_missing_key_loads_empty(self):
        self.assertEqual(self.adapter.load(), [])

    def test_corrupt_blob_loads_empty(self):
        self._write_raw('{not json')
        with self.assertLogs('expense_tracker.storage', level='WARNING'):
            self.assertEqual(self.adapter.load(), [])

    def test_non_array_blob_loads_empty(self):
        self._write_raw('{"amount": 1}')
        self.assertEqual(self.adapter.load(), [])

    def test_persist_rewrites_whole_blob(self):
        self.adapter.persist([make_expense(1), make_expense(2)])
        self.adapter.persist([make_expense(3)])
        rows = self.conn.execute('SELECT key, value FROM local_storage').fetchall()
        self.assertEqual(len(rows), 1)
        self.assertEqual([e['amount'] for e in json.loads(rows[0]['value'])], [3])
        self.assertEqual([e.amount for e in self.adapter.load()], [3])

    def test_keys_are_independent(self):
        other = LocalCacheAdapter(lambda: self.conn, key='other')
        self.adapter.persist([make_expense(1)])
        self.assertEqual(other.load(), [])

    def test_unreadable_cache_raises_storage_error(self):
        def broken():
            raise sqlite3.OperationalError('unable to open database file')

        adapter = LocalCacheAdapter(broken)
        with self.assertRaises(StorageError):
            adapter.load()


class DatabaseAdapterTests(BaseTestCase):

    def test_join_inlines_user_name(self):
        self.seed_database(
            [
                dict(id=1, user_id=2, amount=1000, category='食費', description='lunch', date='2024-04-02', is_fixed=False),
                dict(id=2, user_id=1, amount=80000, category='家賃', description='rent', date='2024-04-01', is_fixed=True),
            ],
            users=((1, 'John Doe'), (2, 'Jane Roe')),
        )
        app = self.make_app(storage='database')
        with app.app_context():
            expenses = DatabaseAdapter(models.db.session).load()
        self.assertEqual([e.id for e in expenses], [1, 2])
        self.assertEqual([e.user.name for e in expenses], ['Jane Roe', 'John Doe'])
        self.assertEqual(expenses[1].amount, 80000)
        self.assertTrue(expenses[1].is_fixed)
        self.assertEqual(expenses[0].date, '2024-04-02')

    def test_missing_tables_raise_storage_error(self):
        app = self.make_app(storage='database')
        with app.app_context():
            with self.assertRaises(StorageError):
                DatabaseAdapter(models.db.session).load()

    def test_invalid_row_raises_storage_error(self):
        self.seed_database([
            dict(id=1, user_id=1, amount=-500, category='雑費', description='refund', date='2024-04-01', is_fixed=False),
        ])
        app = self.make_app(storage='database')
        with app.app_context():
            with self.assertRaises(StorageError):
                DatabaseAdapter(models.db.session).load()

    def test_persist_writes_nothing(self):
        self.seed_database([
            dict(id=1, user_id=1, amount=500, category='雑費', description='pen', date='2024-04-01', is_fixed=False),
        ])
        app = self.make_app(storage='database')
        with app.app_context():
            adapter = DatabaseAdapter(models.db.session)
            adapter.persist([])
            self.assertEqual(len(adapter.load()), 1)


class CreateAdapterTests(unittest.TestCase):

    def test_picks_local_cache(self):
        adapter = create_adapter(AppConfig(storage_key='mine'), connection_factory=lambda: None)
        self.assertIsInstance(adapter, LocalCacheAdapter)
        self.assertEqual(adapter.key, 'mine')

    def test_picks_database(self):
        adapter = create_adapter(AppConfig(storage='database'), session=object())
        self.assertIsInstance(adapter, DatabaseAdapter)

    def test_missing_collaborator(self):
        with self.assertRaises(ValueError):
            create_adapter(AppConfig(storage='database'))
        with self.assertRaises(ValueError):
            create_adapter(AppConfig())


if __name__ == '__main__':
    unittest.main()
