"""Reporting utilities.

Formats aggregated expenses into chart payloads, human-readable text and
JSON/CSV exports.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, IO, List, Optional, Sequence

from . import analytics as an
from .config import BAR_BACKGROUND, BAR_BORDER, PIE_PALETTE
from .data_loader import Expense, Number

DAILY_CHART_LABEL = "日ごとの支出"
CATEGORY_CHART_LABEL = "カテゴリー別支出"


def format_yen(amount: Number) -> str:
    if isinstance(amount, float) and amount.is_integer():
        amount = int(amount)
    return f"{amount}円"


def bar_chart_payload(series: an.ChartSeries) -> Dict:
    return {
        "type": "bar",
        "data": {
            "labels": list(series.labels),
            "datasets": [
                {
                    "label": DAILY_CHART_LABEL,
                    "data": list(series.values),
                    "backgroundColor": BAR_BACKGROUND,
                    "borderColor": BAR_BORDER,
                    "borderWidth": 1,
                }
            ],
        },
        "options": {"scales": {"y": {"beginAtZero": True}}},
    }


def pie_colors(count: int, palette: Sequence[str] = PIE_PALETTE) -> List[str]:
    return [palette[i % len(palette)] for i in range(count)]


def pie_chart_payload(series: an.ChartSeries) -> Dict:
    return {
        "type": "pie",
        "data": {
            "labels": list(series.labels),
            "datasets": [
                {
                    "label": CATEGORY_CHART_LABEL,
                    "data": list(series.values),
                    "backgroundColor": pie_colors(len(series.labels)),
                    "borderWidth": 1,
                }
            ],
        },
    }


def build_summary(
    expenses: Sequence[Expense],
    category: Optional[str] = None,
    pie_respects_filter: bool = False,
) -> Dict:
    result = an.summarize(expenses, category, pie_respects_filter)
    return {
        "filter": result.category_filter,
        "count": len(result.expenses),
        "total": result.total,
        "total_display": format_yen(result.total),
        "daily": result.daily.as_dict(),
        "categories": result.categories.as_dict(),
        "bar_chart": bar_chart_payload(result.daily),
        "pie_chart": pie_chart_payload(result.categories),
    }


def format_text_report(summary: Dict) -> str:
    lines: List[str] = []
    lines.append("=== Expense Summary ===")
    if summary.get("filter"):
        lines.append(f"Filter:  {summary['filter']}")
    lines.append(f"Entries: {summary['count']}")
    lines.append(f"Total:   {summary['total_display']}")
    lines.append("")

    lines.append("-- Daily Totals --")
    daily = summary["daily"]
    for day, amt in zip(daily["labels"], daily["values"]):
        lines.append(f"{day:12} {format_yen(amt)}")
    lines.append("")

    lines.append("-- Spend by Category --")
    cats = summary["categories"]
    for cat, amt in zip(cats["labels"], cats["values"]):
        lines.append(f"{cat:15} {format_yen(amt)}")
    return "\n".join(lines)


def save_json(summary: Dict, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, ensure_ascii=False)


def _ensure_text_writer(target: str | Path | IO[str]):
    if hasattr(target, "write"):
        return target, None
    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = path.open("w", newline="", encoding="utf-8")
    return handle, handle


def export_summary_csv(summary: Dict, path: str | Path | IO[str]) -> None:
    rows: List[List[str]] = [["Section", "Item", "Metric", "Value"]]
    rows.append(["Totals", summary.get("filter") or "", "Total", str(summary.get("total", 0))])
    rows.append(["Totals", summary.get("filter") or "", "Entries", str(summary.get("count", 0))])

    daily = summary.get("daily") or {}
    for day, amt in zip(daily.get("labels", []), daily.get("values", [])):
        rows.append(["Daily Totals", day, "Amount", str(amt)])

    cats = summary.get("categories") or {}
    for cat, amt in zip(cats.get("labels", []), cats.get("values", [])):
        rows.append(["Category Spend", cat, "Amount", str(amt)])

    writer_target, to_close = _ensure_text_writer(path)
    try:
        writer = csv.writer(writer_target, lineterminator="\n")
        writer.writerows(rows)
    finally:
        if to_close is not None:
            to_close.close()


def export_summary_json(summary: Dict, path: str | Path | IO[str]) -> None:
    if hasattr(path, "write"):
        json.dump(summary, path, indent=2, ensure_ascii=False)
        path.write("\n")
        return
    save_json(summary, path)
