"""Data loading helpers.

Normalizes expenses coming from the persisted JSON blob, from database rows
and from the entry form into a common record with fields:
    amount (int|float), category (str), description (str), date (str),
    is_fixed (bool), user (User|None), items (list[Item])

Dates are kept as the raw ``YYYY-MM-DD`` string they were entered with.
"""

from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

Number = Union[int, float]


@dataclass
class User:
    id: int
    name: str


@dataclass
class Item:
    name: str
    price: Number


@dataclass
class Expense:
    amount: Number
    category: str
    description: str
    date: str
    is_fixed: bool = False
    user: Optional[User] = None
    items: List[Item] = field(default_factory=list)
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "amount": self.amount,
            "category": self.category,
            "description": self.description,
            "date": self.date,
            "isFixed": self.is_fixed,
        }
        if self.user is not None:
            data["user"] = {"id": self.user.id, "name": self.user.name}
        data["items"] = [{"name": i.name, "price": i.price} for i in self.items]
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Expense":
        if not isinstance(raw, Mapping):
            raise ValueError(f"Expense entry must be an object, got {type(raw).__name__}")
        try:
            amount = coerce_amount(raw["amount"])
            category = str(raw["category"])
            date = str(raw["date"])
        except KeyError as exc:
            raise ValueError(f"Expense entry is missing field {exc.args[0]!r}") from exc
        is_fixed = raw.get("isFixed", raw.get("is_fixed", False))

        user = None
        raw_user = raw.get("user")
        if isinstance(raw_user, Mapping) and "id" in raw_user:
            user = User(id=int(raw_user["id"]), name=str(raw_user.get("name") or ""))

        items = [
            Item(name=str(i.get("name") or ""), price=coerce_amount(i.get("price", 0)))
            for i in raw.get("items") or []
            if isinstance(i, Mapping)
        ]
        expense_id = raw.get("id")
        return cls(
            amount=amount,
            category=category,
            description=str(raw.get("description") or ""),
            date=date,
            is_fixed=bool(is_fixed),
            user=user,
            items=items,
            id=int(expense_id) if expense_id is not None else None,
        )


def coerce_amount(value: Any) -> Number:
    """Turn form or storage input into a non-negative int or float.

    Whole numbers come back as ``int`` so totals render as ``1500`` rather
    than ``1500.0``.
    """

    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value}")
    if isinstance(value, (int, float)):
        number: Number = value
    else:
        v = str(value).replace(",", "").strip()
        try:
            number = float(v)
        except ValueError as exc:  # noqa: BLE001
            raise ValueError(f"Invalid amount: {value}") from exc
    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError(f"Invalid amount: {value}")
    if number < 0:
        raise ValueError(f"Amount cannot be negative: {value}")
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def validate_date(value: str) -> str:
    value = (value or "").strip()
    try:
        parsed = dt.datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError(f"Date must be in YYYY-MM-DD format: {value}") from exc
    # strptime accepts unpadded fields such as 2024-4-1
    if parsed.isoformat() != value:
        raise ValueError(f"Date must be in YYYY-MM-DD format: {value}")
    return value


def parse_blob(text: str) -> List[Expense]:
    """Parse the serialized collection stored in the local cache."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Stored expenses are not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise ValueError("Stored expenses must be a JSON array")
    return [Expense.from_dict(entry) for entry in raw]


def dump_blob(expenses: Iterable[Expense]) -> str:
    return json.dumps([e.to_dict() for e in expenses], ensure_ascii=False)


def expense_from_row(row: Mapping[str, Any]) -> Expense:
    """Build an expense from a joined expenses/users row."""
    date = row["date"]
    if isinstance(date, (dt.date, dt.datetime)):
        date = date.strftime("%Y-%m-%d")
    user = None
    if row.get("user_id") is not None:
        user = User(id=int(row["user_id"]), name=str(row.get("user_name") or ""))
    return Expense(
        amount=coerce_amount(row["amount"]),
        category=str(row["category"]),
        description=str(row.get("description") or ""),
        date=str(date),
        is_fixed=bool(row.get("is_fixed")),
        user=user,
        id=int(row["id"]) if row.get("id") is not None else None,
    )
