"""Aggregation over the expense collection.

Functions that compute the total, per-day and per-category sums fed to the
total display and the two charts. Grouping keeps keys in the order each key
first appears in the input; dates and categories are compared as raw strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .data_loader import Expense, Number


@dataclass
class ChartSeries:
    labels: List[str] = field(default_factory=list)
    values: List[Number] = field(default_factory=list)

    def as_dict(self) -> Dict[str, list]:
        return {"labels": list(self.labels), "values": list(self.values)}


@dataclass
class ExpenseSummary:
    expenses: List[Expense]
    total: Number
    daily: ChartSeries
    categories: ChartSeries
    category_filter: str = ""


def filter_by_category(expenses: Sequence[Expense], category: Optional[str]) -> List[Expense]:
    if not category:
        return list(expenses)
    return [e for e in expenses if e.category == category]


def total_amount(expenses: Iterable[Expense]) -> Number:
    return sum((e.amount for e in expenses), 0)


def _group_totals(expenses: Iterable[Expense], key) -> Dict[str, Number]:
    # dict keeps insertion order, so keys stay in first-occurrence order
    totals: Dict[str, Number] = {}
    for e in expenses:
        k = key(e)
        totals[k] = totals.get(k, 0) + e.amount
    return totals


def daily_totals(expenses: Iterable[Expense]) -> Dict[str, Number]:
    return _group_totals(expenses, lambda e: e.date)


def category_totals(expenses: Iterable[Expense]) -> Dict[str, Number]:
    return _group_totals(expenses, lambda e: e.category)


def to_series(totals: Dict[str, Number]) -> ChartSeries:
    return ChartSeries(labels=list(totals.keys()), values=list(totals.values()))


def summarize(
    expenses: Sequence[Expense],
    category: Optional[str] = None,
    pie_respects_filter: bool = False,
) -> ExpenseSummary:
    """Compute every view of the collection for one render.

    The list, total and daily chart follow ``category``. The category
    breakdown is taken over the full collection unless
    ``pie_respects_filter`` is set.
    """

    filtered = filter_by_category(expenses, category)
    pie_source = filtered if pie_respects_filter else expenses
    return ExpenseSummary(
        expenses=filtered,
        total=total_amount(filtered),
        daily=to_series(daily_totals(filtered)),
        categories=to_series(category_totals(pie_source)),
        category_filter=category or "",
    )
