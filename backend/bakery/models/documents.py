from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .common import new_id


TRANSFER_KIND_RESTOCK = "restock"
TRANSFER_KIND_SALES_RUN = "sales_run"
TRANSFER_KIND_RETURN = "return"
TRANSFER_KIND_PRODUCTION_RETURN = "production_return"

TRANSFER_KINDS = [
    TRANSFER_KIND_RESTOCK,
    TRANSFER_KIND_SALES_RUN,
    TRANSFER_KIND_RETURN,
    TRANSFER_KIND_PRODUCTION_RETURN,
]


class Transfer(db.Model):
    """
    Movement of a bundle of items from one stock holder to another.

    LIFECYCLE:
    1. pending: created, awaiting recipient acknowledgement (no stock moved yet)
    2. active: accepted sales run, stock now in the driver's personal stock
    3. completed: accepted restock / production return, or a settled sales run
    4. pending_return: unsold stock on its way back to the storekeeper
    5. return_completed: sales run whose return has been received
    6. cancelled: declined by the recipient

    `kind` decides how acceptance moves stock. It is fixed at creation and
    never inferred from `notes`.

    items: [{productId, productName, quantity, price?}]
    """
    __tablename__ = "transfers"
    __table_args__ = (
        db.Index("ix_transfers_to_staff_status", "to_staff_id", "status"),
    )

    id = db.Column(db.String(32), primary_key=True, default=new_id)

    from_staff_id = db.Column(db.String(32), nullable=False, index=True)
    from_staff_name = db.Column(db.String(255), nullable=False)
    to_staff_id = db.Column(db.String(32), nullable=False, index=True)
    to_staff_name = db.Column(db.String(255), nullable=False)

    items = db.Column(db.JSON, nullable=False, default=list)
    date = db.Column(db.DateTime(timezone=True), nullable=False)

    # pending, active, completed, cancelled, pending_return, return_completed
    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    kind = db.Column(db.String(24), nullable=False, default=TRANSFER_KIND_RESTOCK)
    is_sales_run = db.Column(db.Boolean, nullable=False, default=False)
    notes = db.Column(db.Text, nullable=True)

    total_revenue = db.Column(db.Float, nullable=False, default=0.0)
    total_collected = db.Column(db.Float, nullable=False, default=0.0)

    time_received = db.Column(db.DateTime(timezone=True), nullable=True)
    time_completed = db.Column(db.DateTime(timezone=True), nullable=True)

    # Set on return transfers: the sales run the stock came back from
    original_run_id = db.Column(db.String(64), nullable=True, index=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Transfer id={self.id!r} kind={self.kind!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "from_staff_id": self.from_staff_id,
            "from_staff_name": self.from_staff_name,
            "to_staff_id": self.to_staff_id,
            "to_staff_name": self.to_staff_name,
            "items": list(self.items or []),
            "date": to_utc_z(self.date),
            "status": self.status,
            "kind": self.kind,
            "is_sales_run": self.is_sales_run,
            "notes": self.notes,
            "totalRevenue": self.total_revenue,
            "totalCollected": self.total_collected,
            "time_received": to_utc_z(self.time_received),
            "time_completed": to_utc_z(self.time_completed),
            "originalRunId": self.original_run_id,
        }


class ProductionBatch(db.Model):
    """
    Conversion of ingredient stock into product stock.

    LIFECYCLE:
    1. pending_approval: ingredients listed at requested quantity
    2. in_production: ingredients released (stock decremented, snapshots taken)
    3. completed: produced goods sent to the storekeeper as a pending transfer
    declined / cancelled: only from pending_approval

    ingredients: [{ingredientId, ingredientName, quantity, unit, openingStock?, closingStock?}]
    """
    __tablename__ = "production_batches"

    id = db.Column(db.String(32), primary_key=True, default=new_id)

    recipe_id = db.Column(db.String(32), db.ForeignKey("recipes.id"), nullable=False)
    recipe_name = db.Column(db.String(255), nullable=False)
    product_id = db.Column(db.String(32), nullable=True)
    product_name = db.Column(db.String(255), nullable=True)

    requested_by_id = db.Column(db.String(32), nullable=False)
    requested_by_name = db.Column(db.String(255), nullable=False)

    quantity_to_produce = db.Column(db.Integer, nullable=False)
    batch_size = db.Column(db.String(8), nullable=False, default="full")

    # pending_approval, in_production, completed, declined, cancelled
    status = db.Column(db.String(24), nullable=False, default="pending_approval", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    ingredients = db.Column(db.JSON, nullable=False, default=list)

    successfully_produced = db.Column(db.Integer, nullable=True)
    wasted = db.Column(db.Integer, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<ProductionBatch id={self.id!r} product={self.product_name!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "recipeId": self.recipe_id,
            "recipeName": self.recipe_name,
            "productId": self.product_id,
            "productName": self.product_name,
            "requestedById": self.requested_by_id,
            "requestedByName": self.requested_by_name,
            "quantityToProduce": self.quantity_to_produce,
            "batchSize": self.batch_size,
            "status": self.status,
            "createdAt": to_utc_z(self.created_at),
            "approvedAt": to_utc_z(self.approved_at),
            "completedAt": to_utc_z(self.completed_at),
            "ingredients": list(self.ingredients or []),
            "successfullyProduced": self.successfully_produced,
            "wasted": self.wasted,
        }
