# Overview: Service-layer operations for manual cost entry; direct costs, indirect costs and petty expenses.

from __future__ import annotations

from ..extensions import db
from ..models import DirectCost, Expense, IndirectCost
from ..time_utils import utcnow
from .concurrency import run_in_transaction
from .errors import ValidationError
from .results import action_boundary


def _require_text(value, label: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{label} is required.")
    return str(value).strip()


def _require_positive(value, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValidationError(f"{label} must be a positive number.")
    return float(value)


@action_boundary("add direct cost")
def add_direct_cost(description: str, category: str, quantity, total):
    record = DirectCost(
        description=_require_text(description, "Description"),
        category=_require_text(category, "Category"),
        quantity=_require_positive(quantity, "Quantity"),
        total=_require_positive(total, "Total"),
    )

    def _op():
        record.date = utcnow()
        db.session.add(record)
        db.session.flush()
        return record.id

    return {"costId": run_in_transaction(_op)}


@action_boundary("add indirect cost")
def add_indirect_cost(description: str, category: str, amount, details=None):
    record = IndirectCost(
        description=_require_text(description, "Description"),
        category=_require_text(category, "Category"),
        amount=_require_positive(amount, "Amount"),
        details=details,
    )

    def _op():
        record.date = utcnow()
        db.session.add(record)
        db.session.flush()
        return record.id

    return {"costId": run_in_transaction(_op)}


@action_boundary("add expense")
def add_expense(category: str, description: str, amount, run_id: str | None = None):
    """Record a petty expense. Unlike run expenses it needs no approval."""
    record = Expense(
        category=_require_text(category, "Category"),
        description=_require_text(description, "Description"),
        amount=_require_positive(amount, "Amount"),
        run_id=run_id or None,
    )

    def _op():
        record.date = utcnow()
        db.session.add(record)
        db.session.flush()
        return record.id

    return {"expenseId": run_in_transaction(_op)}


def get_expenses(start=None, end=None) -> list[dict]:
    query = db.session.query(Expense)
    if start is not None:
        query = query.filter(Expense.date >= start)
    if end is not None:
        query = query.filter(Expense.date <= end)
    return [e.to_dict() for e in query.order_by(Expense.date.desc()).all()]


def get_direct_costs() -> list[dict]:
    return [c.to_dict() for c in db.session.query(DirectCost).order_by(DirectCost.date.desc()).all()]


def get_indirect_costs() -> list[dict]:
    return [c.to_dict() for c in db.session.query(IndirectCost).order_by(IndirectCost.date.desc()).all()]
