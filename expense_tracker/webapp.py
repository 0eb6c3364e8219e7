"""Flask web interface for the Expense Tracker."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from flask import (
    Flask,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from . import models
from .config import PACKAGE_ROOT, PROJECT_ROOT, AppConfig, Category, configure_logging
from .data_loader import Expense, User, coerce_amount, validate_date
from .db import close_db, get_db, init_db
from .reports import build_summary, format_yen
from .storage import StorageError, create_adapter
from .store import ExpenseStore

logger = logging.getLogger(__name__)

STORE_EXTENSION = "expense_store"
CONFIG_KEY = "EXPENSE_TRACKER"


def _get_store() -> ExpenseStore:
    return current_app.extensions[STORE_EXTENSION]


def _get_config() -> AppConfig:
    return current_app.config[CONFIG_KEY]


def _today() -> str:
    return dt.date.today().isoformat()


def _empty_form() -> Dict[str, object]:
    return {
        "amount": "",
        "category": "",
        "description": "",
        "date": _today(),
        "is_fixed": False,
    }


def _form_from_expense(expense: Expense) -> Dict[str, object]:
    return {
        "amount": str(expense.amount),
        "category": expense.category,
        "description": expense.description,
        "date": expense.date,
        "is_fixed": expense.is_fixed,
    }


def _parse_category_filter(value: Optional[str]) -> str:
    if not value:
        return ""
    try:
        return Category.parse(value).value
    except ValueError:
        return ""


def _parse_position(value: Optional[str]) -> Optional[int]:
    value = (value or "").strip()
    if not value.isdecimal():
        return None
    return int(value)


def _redirect_to_index(category: str = ""):
    params = {"category": category} if category else {}
    return redirect(url_for("index", **params))


def _parse_expense_form(data, user: User) -> Tuple[Dict[str, object], Optional[Expense], List[str]]:
    form = {
        "amount": (data.get("amount") or "").strip(),
        "category": (data.get("category") or "").strip(),
        "description": (data.get("description") or "").strip(),
        "date": (data.get("date") or "").strip(),
        "is_fixed": (data.get("is_fixed") or "").lower() in {"on", "true", "1", "yes"},
    }
    errors: List[str] = []

    amount = None
    if not form["amount"]:
        errors.append("Amount is required.")
    else:
        try:
            amount = coerce_amount(form["amount"])
        except ValueError:
            errors.append("Amount must be a non-negative number.")

    category = None
    if not form["category"]:
        errors.append("Category is required.")
    else:
        try:
            category = Category.parse(form["category"])
        except ValueError:
            errors.append("Category must be one of the listed options.")

    if not form["description"]:
        errors.append("Description is required.")

    date = None
    if not form["date"]:
        errors.append("Date is required.")
    else:
        try:
            date = validate_date(form["date"])
        except ValueError:
            errors.append("Date must be in YYYY-MM-DD format.")

    if errors:
        return form, None, errors
    expense = Expense(
        amount=amount,
        category=category.value,
        description=form["description"],
        date=date,
        is_fixed=form["is_fixed"],
        user=User(id=user.id, name=user.name),
    )
    return form, expense, errors


def _expense_rows(store: ExpenseStore, category: str) -> List[Dict[str, object]]:
    """Pair each visible expense with its position in the full collection."""
    rows = []
    for position, expense in enumerate(store.records):
        if category and expense.category != category:
            continue
        rows.append(
            {
                "position": position,
                "expense": expense,
                "amount_display": format_yen(expense.amount),
                "kind": "固定費" if expense.is_fixed else "変動費",
                "user_name": expense.user.name if expense.user else "",
                "edit_url": url_for("index", edit=position, **({"category": category} if category else {})),
            }
        )
    return rows


def create_app(
    config_path: Optional[str] = None,
    store: Optional[ExpenseStore] = None,
    config: Optional[AppConfig] = None,
) -> Flask:
    cfg = config or AppConfig.load(_resolve_config_path(config_path))
    configure_logging(cfg.log_level)

    app = Flask(
        __name__,
        template_folder=str(PACKAGE_ROOT / "templates"),
        static_folder=str(PACKAGE_ROOT / "static"),
    )
    app.config["SECRET_KEY"] = cfg.secret_key
    app.config["DATABASE"] = str(cfg.database_path)
    app.config["SQLALCHEMY_DATABASE_URI"] = cfg.database_uri
    app.config[CONFIG_KEY] = cfg

    app.teardown_appcontext(close_db)
    models.db.init_app(app)
    with app.app_context():
        init_db()
        if store is None:
            adapter = create_adapter(cfg, connection_factory=get_db, session=models.db.session)
            store = ExpenseStore(adapter)
            store.reload()
    app.extensions[STORE_EXTENSION] = store
    logger.info("Expense store ready with %d expenses (%s storage)", len(store), cfg.storage)

    @app.route("/", methods=["GET", "POST"])
    def index():
        store = _get_store()
        cfg = _get_config()
        user = User(id=cfg.default_user.id, name=cfg.default_user.name)
        errors: List[str] = []
        if request.method == "POST":
            category = _parse_category_filter(request.form.get("filter_category"))
        else:
            category = _parse_category_filter(request.args.get("category"))
        expense_form = _empty_form()
        form_mode = "add"
        edit_index: Optional[int] = None

        if request.method == "POST":
            action = request.form.get("action", "")
            if action == "save":
                expense_form, expense, errors = _parse_expense_form(request.form, user)
                edit_index = _parse_position(request.form.get("edit_index"))
                if expense is not None:
                    try:
                        if edit_index is None:
                            store.add(expense)
                        else:
                            previous = store.get(edit_index)
                            expense.id = previous.id
                            expense.items = previous.items
                            store.update(edit_index, expense)
                    except IndexError:
                        errors.append("Unable to update the selected expense.")
                    except StorageError as exc:
                        logger.error("Saving expense failed: %s", exc)
                        errors.append("Unable to save the expense.")
                    else:
                        return _redirect_to_index(category)
                if edit_index is not None:
                    form_mode = "edit"
            elif action == "delete":
                position = _parse_position(request.form.get("index"))
                try:
                    if position is None:
                        raise IndexError(request.form.get("index"))
                    store.remove(position)
                except IndexError:
                    errors.append("Unable to remove the selected expense.")
                except StorageError as exc:
                    logger.error("Removing expense failed: %s", exc)
                    errors.append("Unable to remove the expense.")
                else:
                    return _redirect_to_index(category)
            else:
                errors.append("Unknown action.")
        elif request.args.get("edit"):
            edit_index = _parse_position(request.args["edit"])
            if edit_index is not None and edit_index < len(store):
                expense_form = _form_from_expense(store.get(edit_index))
                form_mode = "edit"
            else:
                edit_index = None

        summary = build_summary(store.records, category, cfg.pie_respects_filter)
        cancel_edit_url = url_for("index", **({"category": category} if category else {}))
        return render_template(
            "index.html",
            categories=list(Category),
            category_filter=category,
            expense_form=expense_form,
            form_mode=form_mode,
            edit_index=edit_index,
            expense_rows=_expense_rows(store, category),
            summary=summary,
            errors=errors,
            load_error=store.load_error,
            cancel_edit_url=cancel_edit_url,
            storage=cfg.storage,
        ), (400 if errors else 200)

    @app.route("/reload", methods=["POST"])
    def reload():
        store = _get_store()
        store.reload()
        return _redirect_to_index(_parse_category_filter(request.form.get("filter_category")))

    @app.route("/api/expenses")
    def api_expenses():
        store = _get_store()
        category = _parse_category_filter(request.args.get("category"))
        return jsonify(
            [
                {"position": position, **expense.to_dict()}
                for position, expense in enumerate(store.records)
                if not category or expense.category == category
            ]
        )

    @app.route("/api/summary")
    def api_summary():
        store = _get_store()
        cfg = _get_config()
        category = _parse_category_filter(request.args.get("category"))
        summary = build_summary(store.records, category, cfg.pie_respects_filter)
        summary["load_error"] = store.load_error
        return jsonify(summary)

    return app


def _resolve_config_path(config_path: Optional[str]) -> Optional[Path]:
    if not config_path:
        return None
    path = Path(config_path)
    if path.is_absolute():
        return path
    return PROJECT_ROOT / path


if __name__ == "__main__":
    create_app().run(debug=True)
