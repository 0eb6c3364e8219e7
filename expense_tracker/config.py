"""Configuration utilities for the Expense Tracker.

Provides the fixed category set, the chart palette and helpers to load
user-defined configuration (storage backend, database locations) from JSON
files.
"""

from __future__ import annotations

import enum
import json
import logging
import logging.config
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

PACKAGE_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_ROOT.parent

STORAGE_LOCAL = "local"
STORAGE_DATABASE = "database"
STORAGE_CHOICES = (STORAGE_LOCAL, STORAGE_DATABASE)

DEFAULT_STORAGE_KEY = "expenses"
DEFAULT_DATABASE = "expense_tracker.db"
DEFAULT_DATABASE_URI = "sqlite:///expense_tracker.db"


class Category(str, enum.Enum):
    """The closed set of expense categories.

    Member values are the strings written to storage.
    """

    FOOD = "食費"
    RENT = "家賃"
    TRANSPORT = "交通費"
    ENTERTAINMENT = "エンターテインメント"
    MISC = "雑費"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> "Category":
        value = (value or "").strip()
        for member in cls:
            if value in (member.value, member.name):
                return member
        raise ValueError(f"Unknown category: {value}")


CATEGORY_LABELS: Dict[Category, str] = {
    Category.FOOD: "食費",
    Category.RENT: "家賃",
    Category.TRANSPORT: "交通費",
    Category.ENTERTAINMENT: "エンターテインメント",
    Category.MISC: "雑費",
}

# Pie slices cycle through these when there are more slices than colors.
PIE_PALETTE: List[str] = [
    "rgba(255, 99, 132, 0.6)",
    "rgba(54, 162, 235, 0.6)",
    "rgba(255, 206, 86, 0.6)",
    "rgba(75, 192, 192, 0.6)",
    "rgba(153, 102, 255, 0.6)",
]
BAR_BACKGROUND = "rgba(75, 192, 192, 0.2)"
BAR_BORDER = "rgba(75, 192, 192, 1)"


@dataclass
class DefaultUser:
    id: int = 1
    name: str = "John Doe"


@dataclass
class AppConfig:
    storage: str = STORAGE_LOCAL
    database: str = DEFAULT_DATABASE
    database_uri: str = DEFAULT_DATABASE_URI
    storage_key: str = DEFAULT_STORAGE_KEY
    secret_key: str = "expense-tracker-dev"
    pie_respects_filter: bool = False
    default_user: DefaultUser = field(default_factory=DefaultUser)
    log_level: str = "INFO"

    @property
    def database_path(self) -> Path:
        path = Path(self.database)
        if path.is_absolute():
            return path
        return PROJECT_ROOT / path

    @staticmethod
    def load(config_path: Optional[str | Path] = None) -> "AppConfig":
        """Load config from JSON if provided, else use defaults.

        JSON format:
        {
          "storage": "local" | "database",
          "database": "expense_tracker.db",
          "database_uri": "sqlite:///expense_tracker.db",
          "storage_key": "expenses",
          "pie_respects_filter": false,
          "default_user": {"id": 1, "name": "John Doe"},
          "log_level": "INFO"
        }
        """

        cfg = AppConfig()
        if not config_path:
            return cfg

        p = Path(config_path)
        if not p.exists():
            return cfg
        with p.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            return cfg

        storage = str(raw.get("storage") or cfg.storage).lower()
        if storage not in STORAGE_CHOICES:
            raise ValueError(f"{p.name}: storage must be one of {', '.join(STORAGE_CHOICES)}")
        cfg.storage = storage
        for key in ("database", "database_uri", "storage_key", "secret_key", "log_level"):
            if raw.get(key):
                setattr(cfg, key, str(raw[key]))
        if "pie_respects_filter" in raw:
            cfg.pie_respects_filter = bool(raw["pie_respects_filter"])
        user = raw.get("default_user")
        if isinstance(user, dict) and "id" in user and "name" in user:
            cfg.default_user = DefaultUser(id=int(user["id"]), name=str(user["name"]))
        return cfg


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s %(name)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "expense_tracker": {
                    "handlers": ["console"],
                    "level": level.upper(),
                    "propagate": False,
                },
            },
        }
    )
