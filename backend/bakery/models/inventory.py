from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .common import new_id


class Product(db.Model):
    """
    Finished product held in central inventory.

    `stock` is the central quantity on hand. Staff-held quantities live in
    PersonalStock and are never counted here.
    """
    __tablename__ = "products"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False, index=True)
    category = db.Column(db.String(64), nullable=True)
    unit = db.Column(db.String(32), nullable=True)

    price = db.Column(db.Float, nullable=False, default=0.0)
    cost_price = db.Column(db.Float, nullable=False, default=0.0)
    min_price = db.Column(db.Float, nullable=True)
    max_price = db.Column(db.Float, nullable=True)

    stock = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=20)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "price": self.price,
            "costPrice": self.cost_price,
            "minPrice": self.min_price,
            "maxPrice": self.max_price,
            "stock": self.stock,
            "lowStockThreshold": self.low_stock_threshold,
            "updated_at": to_utc_z(self.updated_at),
        }


class Ingredient(db.Model):
    """Raw ingredient held centrally. Quantities may be fractional (half batches)."""
    __tablename__ = "ingredients"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False, index=True)
    unit = db.Column(db.String(32), nullable=False, default="kg")
    stock = db.Column(db.Float, nullable=False, default=0.0)
    cost_per_unit = db.Column(db.Float, nullable=False, default=0.0)
    low_stock_threshold = db.Column(db.Float, nullable=False, default=10.0)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Ingredient id={self.id!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "stock": self.stock,
            "costPerUnit": self.cost_per_unit,
            "lowStockThreshold": self.low_stock_threshold,
        }


class PersonalStock(db.Model):
    """
    Quantity of a product held by one staff member (the personal_stock
    subdocument of a staff record).
    """
    __tablename__ = "personal_stock"

    staff_id = db.Column(db.String(32), db.ForeignKey("staff.staff_id"), primary_key=True)
    product_id = db.Column(db.String(32), db.ForeignKey("products.id"), primary_key=True)
    product_name = db.Column(db.String(255), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    staff = db.relationship("Staff", back_populates="personal_stock")
    product = db.relationship("Product")
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<PersonalStock staff_id={self.staff_id!r} product_id={self.product_id!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "stock": self.stock,
        }


class Recipe(db.Model):
    """
    Recipe for one full batch of a product.

    ingredients: [{ingredientId, ingredientName, quantity, unit}]
    """
    __tablename__ = "recipes"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    product_id = db.Column(db.String(32), db.ForeignKey("products.id"), nullable=True)
    product_name = db.Column(db.String(255), nullable=True)
    ingredients = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "productId": self.product_id,
            "productName": self.product_name,
            "ingredients": list(self.ingredients or []),
        }


class Supplier(db.Model):
    """Ingredient supplier. amountOwed grows on approved purchases, amountPaid on payments."""
    __tablename__ = "suppliers"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    contact_person = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    amount_owed = db.Column(db.Float, nullable=False, default=0.0)
    amount_paid = db.Column(db.Float, nullable=False, default=0.0)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contactPerson": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "amountOwed": self.amount_owed,
            "amountPaid": self.amount_paid,
        }


class SupplyRequest(db.Model):
    """
    Request to increase ingredient stock from a supplier.

    LIFECYCLE: pending -> approved | declined
    """
    __tablename__ = "supply_requests"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    ingredient_id = db.Column(db.String(32), db.ForeignKey("ingredients.id"), nullable=False)
    ingredient_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    supplier_id = db.Column(db.String(32), db.ForeignKey("suppliers.id"), nullable=False)
    supplier_name = db.Column(db.String(255), nullable=False)
    requester_id = db.Column(db.String(32), nullable=False)
    requester_name = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    request_date = db.Column(db.DateTime(timezone=True), nullable=False)

    cost_per_unit = db.Column(db.Float, nullable=True)
    total_cost = db.Column(db.Float, nullable=True)
    approver_id = db.Column(db.String(32), nullable=True)
    approver_name = db.Column(db.String(255), nullable=True)
    approved_date = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ingredientId": self.ingredient_id,
            "ingredientName": self.ingredient_name,
            "quantity": self.quantity,
            "supplierId": self.supplier_id,
            "supplierName": self.supplier_name,
            "requesterId": self.requester_id,
            "requesterName": self.requester_name,
            "status": self.status,
            "requestDate": to_utc_z(self.request_date),
            "costPerUnit": self.cost_per_unit,
            "totalCost": self.total_cost,
            "approverId": self.approver_id,
            "approverName": self.approver_name,
            "approvedDate": to_utc_z(self.approved_date),
        }
