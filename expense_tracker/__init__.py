"""Personal Expense Tracker package."""

__all__ = [
    "config",
    "data_loader",
    "analytics",
    "reports",
    "storage",
    "store",
    "webapp",
    "db",
    "models",
    "cli",
]

__version__ = "0.1.0"
