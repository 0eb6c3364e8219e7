"""Utility helpers for the SQLite-backed local cache."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from flask import current_app, g

from .config import DEFAULT_DATABASE, PROJECT_ROOT

_DEFAULT_DB_PATH = PROJECT_ROOT / DEFAULT_DATABASE

SCHEMA = """CREATE TABLE IF NOT EXISTS local_storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


def get_database_path() -> Path:
    db_path = current_app.config.get("DATABASE") if current_app else None
    if db_path:
        return Path(db_path)
    return _DEFAULT_DB_PATH


def connect(path: str | Path) -> sqlite3.Connection:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA)
    return conn


def get_db() -> sqlite3.Connection:
    if "db" not in g:
        g.db = connect(get_database_path())
    return g.db


def close_db(_: object | None = None) -> None:
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_db() -> None:
    db = get_db()
    db.executescript(SCHEMA)
    db.commit()
