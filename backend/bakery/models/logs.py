from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .common import new_id


class WasteLog(db.Model):
    """Record of wasted finished product. Reporting only."""
    __tablename__ = "waste_logs"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    product_id = db.Column(db.String(32), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    product_category = db.Column(db.String(64), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(255), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    staff_id = db.Column(db.String(32), nullable=False, index=True)
    staff_name = db.Column(db.String(255), nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "productName": self.product_name,
            "productCategory": self.product_category,
            "quantity": self.quantity,
            "reason": self.reason,
            "notes": self.notes,
            "staffId": self.staff_id,
            "staffName": self.staff_name,
            "date": to_utc_z(self.date),
        }


class IngredientStockLog(db.Model):
    """
    Ingredient stock movement. change is signed (negative for releases).

    logRefId points at the batch, supply request, or manual return that
    caused the movement.
    """
    __tablename__ = "ingredient_stock_logs"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    ingredient_id = db.Column(db.String(32), nullable=True)
    ingredient_name = db.Column(db.String(255), nullable=False)
    change = db.Column(db.Float, nullable=False)
    reason = db.Column(db.String(255), nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    staff_name = db.Column(db.String(255), nullable=True)
    log_ref_id = db.Column(db.String(64), nullable=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ingredientId": self.ingredient_id,
            "ingredientName": self.ingredient_name,
            "change": self.change,
            "reason": self.reason,
            "date": to_utc_z(self.date),
            "staffName": self.staff_name,
            "logRefId": self.log_ref_id,
        }


class ProductionLog(db.Model):
    """Human-readable audit trail of production actions. Diagnostic, not authoritative."""
    __tablename__ = "production_logs"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    action = db.Column(db.String(64), nullable=False)
    details = db.Column(db.Text, nullable=False)
    staff_id = db.Column(db.String(32), nullable=False)
    staff_name = db.Column(db.String(255), nullable=False)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "details": self.details,
            "staffId": self.staff_id,
            "staffName": self.staff_name,
            "timestamp": to_utc_z(self.timestamp),
        }


class IndirectCost(db.Model):
    """Operating expense (run expenses, creditor payments, utilities...)."""
    __tablename__ = "indirect_costs"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    category = db.Column(db.String(64), nullable=False)
    description = db.Column(db.Text, nullable=False)
    amount = db.Column(db.Float, nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    details = db.Column(db.JSON, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "description": self.description,
            "amount": self.amount,
            "date": to_utc_z(self.date),
            "details": self.details,
        }


class DirectCost(db.Model):
    """Cost of production: ingredient purchases and production wages."""
    __tablename__ = "direct_costs"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    category = db.Column(db.String(64), nullable=False)
    description = db.Column(db.Text, nullable=False)
    quantity = db.Column(db.Float, nullable=True)
    total = db.Column(db.Float, nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    details = db.Column(db.JSON, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "description": self.description,
            "quantity": self.quantity,
            "total": self.total,
            "date": to_utc_z(self.date),
            "details": self.details,
        }


class Expense(db.Model):
    """Petty expense entered by an accountant, optionally tied to a sales run."""
    __tablename__ = "expenses"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    category = db.Column(db.String(64), nullable=False)
    description = db.Column(db.Text, nullable=False)
    amount = db.Column(db.Float, nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    run_id = db.Column(db.String(64), nullable=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "description": self.description,
            "amount": self.amount,
            "date": to_utc_z(self.date),
            "runId": self.run_id,
        }
