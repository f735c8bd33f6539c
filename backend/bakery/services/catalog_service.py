# Overview: Service-layer operations for catalog maintenance; products, ingredients, suppliers and customers.

"""
Catalog maintenance.

STOCK RULES:
- New products always start with zero central stock; stock only enters
  through production returns and transfers.
- Editing a product or ingredient leaves its stock untouched unless the
  caller may edit stock directly (developers). Direct ingredient stock
  edits are written to the ingredient stock log.

Records still referenced by stock, recipes, supply requests or open
balances cannot be deleted.
"""

from __future__ import annotations

from ..extensions import db
from ..models import (
    Customer,
    Ingredient,
    IngredientStockLog,
    PersonalStock,
    Product,
    Recipe,
    Supplier,
    SupplyRequest,
)
from ..time_utils import utcnow
from .concurrency import lock_for_update, run_in_transaction
from .errors import InvalidStateError, NotFoundError, ValidationError
from .results import action_boundary


def _text(data: dict, key: str, label: str) -> str:
    value = data.get(key)
    if not value or not str(value).strip():
        raise ValidationError(f"{label} is required.")
    return str(value).strip()


def _number(data: dict, key: str, label: str, default=None):
    value = data.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ValidationError(f"{label} must be a non-negative number.")
    return value


def _load_for_update(model, record_id: str, message: str):
    record = lock_for_update(db.session.query(model).filter_by(id=record_id)).first()
    if record is None:
        raise NotFoundError(message)
    return record


# =============================================================================
# PRODUCTS
# =============================================================================

def _product_fields(data: dict, *, partial: bool) -> dict:
    fields = {}
    if not partial or "name" in data:
        fields["name"] = _text(data, "name", "Product name")
    for key in ("category", "unit"):
        if key in data:
            fields[key] = data[key] or None

    price = _number(data, "price", "Price", None if partial else 0.0)
    if price is not None:
        fields["price"] = float(price)
    for key, attr, label in (
        ("costPrice", "cost_price", "Cost price"),
        ("minPrice", "min_price", "Minimum price"),
        ("maxPrice", "max_price", "Maximum price"),
    ):
        value = _number(data, key, label)
        if value is not None:
            fields[attr] = float(value)
    threshold = _number(data, "lowStockThreshold", "Low stock threshold")
    if threshold is not None:
        fields["low_stock_threshold"] = int(threshold)
    return fields


@action_boundary("create product")
def create_product(data: dict):
    """Create a product with zero stock. min/max price default to the price."""
    fields = _product_fields(data or {}, partial=False)
    fields.setdefault("min_price", fields["price"])
    fields.setdefault("max_price", fields["price"])

    def _op():
        product = Product(stock=0, **fields)
        db.session.add(product)
        db.session.flush()
        return product.to_dict()

    return {"product": run_in_transaction(_op)}


@action_boundary("update product")
def update_product(product_id: str, data: dict, allow_stock_edit: bool = False):
    data = data or {}
    fields = _product_fields(data, partial=True)
    stock = _number(data, "stock", "Stock") if allow_stock_edit else None

    def _op():
        product = _load_for_update(Product, product_id, "Product not found.")
        for key, value in fields.items():
            setattr(product, key, value)
        if stock is not None:
            product.stock = int(stock)
        db.session.flush()
        return product.to_dict()

    return {"product": run_in_transaction(_op)}


@action_boundary("delete product")
def delete_product(product_id: str):
    def _op():
        product = _load_for_update(Product, product_id, "Product not found.")
        if (product.stock or 0) > 0:
            raise InvalidStateError("Product still has stock in central inventory.")
        held = db.session.query(PersonalStock).filter_by(product_id=product_id).all()
        if any((row.stock or 0) != 0 for row in held):
            raise InvalidStateError("Product is still held by staff members.")
        if db.session.query(Recipe).filter_by(product_id=product_id).first():
            raise InvalidStateError("Product is used by a recipe.")
        for row in held:
            db.session.delete(row)
        db.session.delete(product)

    run_in_transaction(_op)
    return {"productId": product_id}


# =============================================================================
# INGREDIENTS
# =============================================================================

def _ingredient_fields(data: dict, *, partial: bool) -> dict:
    fields = {}
    if not partial or "name" in data:
        fields["name"] = _text(data, "name", "Ingredient name")
    if not partial or "unit" in data:
        fields["unit"] = _text(data, "unit", "Unit")
    cost = _number(data, "costPerUnit", "Cost per unit")
    if cost is not None:
        fields["cost_per_unit"] = float(cost)
    threshold = _number(data, "lowStockThreshold", "Low stock threshold")
    if threshold is not None:
        fields["low_stock_threshold"] = float(threshold)
    return fields


def _log_stock_edit(ingredient: Ingredient, change: float, reason: str, user) -> None:
    if not change:
        return
    db.session.add(IngredientStockLog(
        ingredient_id=ingredient.id,
        ingredient_name=ingredient.name,
        change=change,
        reason=reason,
        date=utcnow(),
        staff_name=user.name if user is not None else None,
        log_ref_id=ingredient.id,
    ))


@action_boundary("create ingredient")
def create_ingredient(data: dict, user=None):
    """Create an ingredient; an opening stock quantity is logged as such."""
    data = data or {}
    fields = _ingredient_fields(data, partial=False)
    opening = float(_number(data, "stock", "Stock") or 0.0)

    def _op():
        ingredient = Ingredient(stock=opening, **fields)
        db.session.add(ingredient)
        db.session.flush()
        _log_stock_edit(ingredient, opening, "Opening stock", user)
        return ingredient.to_dict()

    return {"ingredient": run_in_transaction(_op)}


@action_boundary("update ingredient")
def update_ingredient(ingredient_id: str, data: dict, user=None, allow_stock_edit: bool = False):
    data = data or {}
    fields = _ingredient_fields(data, partial=True)
    stock = _number(data, "stock", "Stock") if allow_stock_edit else None

    def _op():
        ingredient = _load_for_update(Ingredient, ingredient_id, "Ingredient not found.")
        for key, value in fields.items():
            setattr(ingredient, key, value)
        if stock is not None:
            change = float(stock) - (ingredient.stock or 0.0)
            ingredient.stock = float(stock)
            _log_stock_edit(ingredient, change, "Manual stock adjustment", user)
        db.session.flush()
        return ingredient.to_dict()

    return {"ingredient": run_in_transaction(_op)}


def _used_by_recipe(ingredient_id: str) -> bool:
    for recipe in db.session.query(Recipe).all():
        if any(line.get("ingredientId") == ingredient_id for line in recipe.ingredients or []):
            return True
    return False


@action_boundary("delete ingredient")
def delete_ingredient(ingredient_id: str):
    def _op():
        ingredient = _load_for_update(Ingredient, ingredient_id, "Ingredient not found.")
        if _used_by_recipe(ingredient_id):
            raise InvalidStateError("Ingredient is used by a recipe.")
        if db.session.query(SupplyRequest).filter_by(ingredient_id=ingredient_id).first():
            raise InvalidStateError("Ingredient has supply requests and cannot be deleted.")
        db.session.delete(ingredient)

    run_in_transaction(_op)
    return {"ingredientId": ingredient_id}


# =============================================================================
# SUPPLIERS AND CUSTOMERS
# =============================================================================

SUPPLIER_FIELDS = {"contactPerson": "contact_person", "phone": "phone", "email": "email"}
CUSTOMER_FIELDS = {"phone": "phone", "email": "email", "address": "address"}


def _contact_fields(data: dict, optional: dict, label: str, *, partial: bool) -> dict:
    fields = {}
    if not partial or "name" in data:
        fields["name"] = _text(data, "name", label)
    for key, attr in optional.items():
        if key in data:
            fields[attr] = data[key] or None
    return fields


def _save_contact(model, record_id: str | None, fields: dict, message: str) -> dict:
    def _op():
        if record_id:
            record = _load_for_update(model, record_id, message)
        else:
            record = model()
            db.session.add(record)
        for key, value in fields.items():
            setattr(record, key, value)
        db.session.flush()
        return record.to_dict()

    return run_in_transaction(_op)


def _outstanding(record) -> float:
    return (record.amount_owed or 0.0) - (record.amount_paid or 0.0)


@action_boundary("save supplier")
def save_supplier(data: dict, supplier_id: str | None = None):
    """Create a supplier, or update one when supplier_id is given. Balances are not editable."""
    fields = _contact_fields(data or {}, SUPPLIER_FIELDS, "Supplier name", partial=bool(supplier_id))
    return {"supplier": _save_contact(Supplier, supplier_id, fields, "Supplier not found.")}


@action_boundary("delete supplier")
def delete_supplier(supplier_id: str):
    def _op():
        supplier = _load_for_update(Supplier, supplier_id, "Supplier not found.")
        if _outstanding(supplier) > 0:
            raise InvalidStateError("Supplier still has an outstanding balance.")
        if db.session.query(SupplyRequest).filter_by(supplier_id=supplier_id).first():
            raise InvalidStateError("Supplier has supply requests and cannot be deleted.")
        db.session.delete(supplier)

    run_in_transaction(_op)
    return {"supplierId": supplier_id}


@action_boundary("save customer")
def save_customer(data: dict, customer_id: str | None = None):
    """Create a credit customer, or update one when customer_id is given."""
    fields = _contact_fields(data or {}, CUSTOMER_FIELDS, "Customer name", partial=bool(customer_id))
    return {"customer": _save_contact(Customer, customer_id, fields, "Customer not found.")}


@action_boundary("delete customer")
def delete_customer(customer_id: str):
    def _op():
        customer = _load_for_update(Customer, customer_id, "Customer not found.")
        if _outstanding(customer) > 0:
            raise InvalidStateError("Customer still owes money and cannot be deleted.")
        db.session.delete(customer)

    run_in_transaction(_op)
    return {"customerId": customer_id}
