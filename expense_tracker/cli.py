"""Command-line interface for the Expense Tracker.

Usage:
  python -m expense_tracker.cli --config config.json --category 食費

Prints the summary of the configured store. ``--import`` replaces the stored
collection with a JSON array of expenses first; JSON and CSV exports are
optional.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .config import Category
from .data_loader import parse_blob
from .reports import build_summary, export_summary_csv, format_text_report, save_json
from .webapp import CONFIG_KEY, STORE_EXTENSION, create_app

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Expense Tracker")
    p.add_argument("--config", "-c", help="Path to JSON config with storage settings")
    p.add_argument("--category", help="Only include expenses in this category")
    p.add_argument("--import", dest="import_path", help="Replace stored expenses with a JSON array file")
    p.add_argument("--json", dest="json_out", help="Write summary JSON to path")
    p.add_argument("--csv", dest="csv_out", help="Write summary CSV to path")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    category = ""
    if args.category:
        try:
            category = Category.parse(args.category).value
        except ValueError as exc:
            print(exc)
            return 2

    app = create_app(config_path=args.config)
    cfg = app.config[CONFIG_KEY]
    with app.app_context():
        store = app.extensions[STORE_EXTENSION]
        if store.load_error:
            print(f"Warning: {store.load_error}")
        if args.import_path:
            text = Path(args.import_path).read_text(encoding="utf-8")
            store.load(parse_blob(text))
            logger.info("Imported %d expenses from %s", len(store), args.import_path)
        summary = build_summary(store.records, category, cfg.pie_respects_filter)

    print(format_text_report(summary))

    if args.json_out:
        save_json(summary, args.json_out)
        print(f"\nSaved JSON summary to: {args.json_out}")
    if args.csv_out:
        export_summary_csv(summary, args.csv_out)
        print(f"\nSaved CSV summary to: {args.csv_out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
