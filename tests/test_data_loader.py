"""Tests for expense_tracker.data_loader."""
import datetime
import json
import unittest

from expense_tracker.data_loader import (
    Expense,
    Item,
    User,
    coerce_amount,
    dump_blob,
    expense_from_row,
    parse_blob,
    validate_date,
)


class CoerceAmountTests(unittest.TestCase):

    def test_numeric_strings(self):
        self.assertEqual(coerce_amount('1500'), 1500)
        self.assertIsInstance(coerce_amount('1500'), int)
        self.assertEqual(coerce_amount('1,200'), 1200)
        self.assertEqual(coerce_amount('12.5'), 12.5)
        self.assertEqual(coerce_amount(0), 0)

    def test_rejects_bad_values(self):
        for value in ('abc', '', '-1', -5, True, 'nan', 'inf'):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    coerce_amount(value)


class ValidateDateTests(unittest.TestCase):

    def test_valid_date(self):
        self.assertEqual(validate_date('2024-04-01'), '2024-04-01')

    def test_invalid_dates(self):
        for value in ('2024-02-30', '2024/04/01', '2024-4-1', '', 'yesterday'):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    validate_date(value)


class BlobTests(unittest.TestCase):

    def test_persisted_shape(self):
        expense = Expense(
            amount=1500,
            category='食費',
            description='lunch',
            date='2024-04-01',
            is_fixed=True,
            user=User(id=1, name='John Doe'),
            items=[Item(name='ランチ', price=1000)],
        )
        raw = json.loads(dump_blob([expense]))
        self.assertEqual(raw, [{
            'amount': 1500,
            'category': '食費',
            'description': 'lunch',
            'date': '2024-04-01',
            'isFixed': True,
            'user': {'id': 1, 'name': 'John Doe'},
            'items': [{'name': 'ランチ', 'price': 1000}],
        }])
        self.assertEqual(parse_blob(dump_blob([expense])), [expense])

    def test_reads_entries_without_user_or_items(self):
        text = '[{"amount": "300", "category": "雑費", "description": "pen", "date": "2024-01-05", "isFixed": false}]'
        (expense,) = parse_blob(text)
        self.assertEqual(expense.amount, 300)
        self.assertIsNone(expense.user)
        self.assertEqual(expense.items, [])

    def test_rejects_non_array(self):
        with self.assertRaises(ValueError):
            parse_blob('{"amount": 1}')
        with self.assertRaises(ValueError):
            parse_blob('not json')

    def test_rejects_missing_fields(self):
        with self.assertRaises(ValueError):
            parse_blob('[{"category": "食費"}]')


class RowTests(unittest.TestCase):

    def test_joined_row(self):
        expense = expense_from_row({
            'id': 7,
            'user_id': 1,
            'user_name': 'John Doe',
            'amount': 2000.0,
            'category': '家賃',
            'description': 'rent',
            'date': datetime.date(2024, 4, 1),
            'is_fixed': 1,
        })
        self.assertEqual(expense.id, 7)
        self.assertEqual(expense.amount, 2000)
        self.assertEqual(expense.date, '2024-04-01')
        self.assertTrue(expense.is_fixed)
        self.assertEqual(expense.user, User(id=1, name='John Doe'))


if __name__ == '__main__':
    unittest.main()
