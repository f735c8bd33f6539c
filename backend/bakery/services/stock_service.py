# Overview: Service-layer operations for stock; the only place stock counters change.

"""
Stock repository for the three kinds of stock holder:

- central products (products.stock)
- central ingredients (ingredients.stock)
- a staff member's personal stock (personal_stock rows)

Every checked decrement follows the same pattern inside the caller's
transaction: read every row first, fail with InsufficientStockError if any
line is short, and only then write. A bundle is therefore moved completely
or not at all. Duplicate lines for the same item are summed before the check.

Increments need no check. The unchecked decrement used by the developer
correction tool is in transfer_service and is deliberately not here.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Ingredient, PersonalStock, Product
from .concurrency import lock_for_update
from .errors import InsufficientStockError, NotFoundError, ValidationError


def validate_items(items, *, id_key: str = "productId", allow_fractional: bool = False) -> list[dict]:
    """
    Validate a list of item lines and return normalized copies.

    Each line needs an id and a positive quantity. Products move in whole
    units; ingredients may be fractional.
    """
    if not items:
        raise ValidationError("No items provided.")

    normalized = []
    for raw in items:
        if not isinstance(raw, dict):
            raise ValidationError("Each item must be an object.")
        item_id = raw.get(id_key)
        if not item_id:
            raise ValidationError(f"Every item needs a {id_key}.")
        quantity = raw.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
            raise ValidationError(f"Quantity for {item_id} must be a number.")
        if not allow_fractional and isinstance(quantity, float):
            if not quantity.is_integer():
                raise ValidationError(f"Quantity for {item_id} must be a whole number.")
            quantity = int(quantity)
        if quantity <= 0:
            raise ValidationError(f"Quantity for {item_id} must be positive.")
        line = dict(raw)
        line["quantity"] = quantity
        normalized.append(line)
    return normalized


def _totals(items, id_key: str) -> dict[str, float]:
    totals: dict[str, float] = {}
    for item in items:
        totals[item[id_key]] = totals.get(item[id_key], 0) + item["quantity"]
    return totals


def _label(item: dict, *keys: str) -> str:
    for key in keys:
        if item.get(key):
            return item[key]
    return "an item"


# =============================================================================
# CENTRAL PRODUCTS
# =============================================================================

def get_product_for_update(product_id: str) -> Product | None:
    return lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()


def require_central_products(items) -> dict[str, Product]:
    """
    Read every product in the bundle and check central stock covers it.

    Returns {product_id: Product}. Nothing is written.
    """
    totals = _totals(items, "productId")
    products: dict[str, Product] = {}
    for product_id in totals:
        products[product_id] = get_product_for_update(product_id)

    for item in items:
        product = products[item["productId"]]
        needed = totals[item["productId"]]
        if product is None or (product.stock or 0) < needed:
            raise InsufficientStockError(
                f"Not enough stock for {_label(item, 'productName', 'name')} in main inventory.",
                details={
                    "productId": item["productId"],
                    "requested": needed,
                    "available": product.stock if product else 0,
                },
            )
    return products


def take_central_products(items, products: dict[str, Product]) -> None:
    """Decrement central stock for lines already checked by require_central_products."""
    for item in items:
        product = products[item["productId"]]
        product.stock = (product.stock or 0) - item["quantity"]


def add_central_product(product_id: str, quantity: int) -> Product:
    product = get_product_for_update(product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found in main inventory.")
    product.stock = (product.stock or 0) + quantity
    return product


# =============================================================================
# INGREDIENTS
# =============================================================================

def get_ingredient_for_update(ingredient_id: str) -> Ingredient | None:
    return lock_for_update(db.session.query(Ingredient).filter_by(id=ingredient_id)).first()


def require_ingredients(lines) -> dict[str, Ingredient]:
    """Read every ingredient line and check stock covers the requested quantity."""
    totals = _totals(lines, "ingredientId")
    ingredients: dict[str, Ingredient] = {}
    for ingredient_id in totals:
        ingredients[ingredient_id] = get_ingredient_for_update(ingredient_id)

    for line in lines:
        ingredient = ingredients[line["ingredientId"]]
        needed = totals[line["ingredientId"]]
        if ingredient is None or (ingredient.stock or 0) < needed:
            raise InsufficientStockError(
                f"Not enough stock for {_label(line, 'ingredientName')}.",
                details={
                    "ingredientId": line["ingredientId"],
                    "requested": needed,
                    "available": ingredient.stock if ingredient else 0,
                },
            )
    return ingredients


def add_ingredient(ingredient_id: str, quantity: float) -> Ingredient:
    ingredient = get_ingredient_for_update(ingredient_id)
    if ingredient is None:
        raise NotFoundError(f"Ingredient {ingredient_id} not found.")
    ingredient.stock = (ingredient.stock or 0) + quantity
    return ingredient


# =============================================================================
# PERSONAL STOCK
# =============================================================================

def get_personal_stock_for_update(staff_id: str, product_id: str) -> PersonalStock | None:
    return lock_for_update(
        db.session.query(PersonalStock).filter_by(staff_id=staff_id, product_id=product_id)
    ).first()


def require_personal_stock(staff_id: str, items) -> dict[str, PersonalStock]:
    """
    Read the staff member's stock row for every line and check it covers the
    requested quantity. A missing row counts as zero stock.
    """
    totals = _totals(items, "productId")
    rows: dict[str, PersonalStock] = {}
    for product_id in totals:
        rows[product_id] = get_personal_stock_for_update(staff_id, product_id)

    for item in items:
        row = rows[item["productId"]]
        needed = totals[item["productId"]]
        if row is None or (row.stock or 0) < needed:
            raise InsufficientStockError(
                f"Not enough stock for {_label(item, 'productName', 'name')}.",
                details={
                    "productId": item["productId"],
                    "requested": needed,
                    "available": row.stock if row else 0,
                },
            )
    return rows


def take_personal_stock(items, rows: dict[str, PersonalStock]) -> None:
    """Decrement personal stock for lines already checked by require_personal_stock."""
    for item in items:
        row = rows[item["productId"]]
        row.stock = (row.stock or 0) - item["quantity"]


def add_personal_stock(staff_id: str, product_id: str, product_name: str, quantity: int) -> PersonalStock:
    """Create-or-increment the staff member's row for a product."""
    row = get_personal_stock_for_update(staff_id, product_id)
    if row is None:
        row = PersonalStock(
            staff_id=staff_id,
            product_id=product_id,
            product_name=product_name or product_id,
            stock=quantity,
        )
        db.session.add(row)
        db.session.flush()
        return row
    row.stock = (row.stock or 0) + quantity
    return row
