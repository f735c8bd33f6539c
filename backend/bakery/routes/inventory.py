# Overview: Flask API routes for inventory supply operations; parses input and returns JSON responses.

# backend/bakery/routes/inventory.py
"""
Inventory API routes: central stock listings, catalog maintenance,
ingredient supply requests and supplier payments.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_role
from ..extensions import db
from ..models import Product
from ..models.staff import ROLE_ACCOUNTANT, ROLE_DEVELOPER, ROLE_MANAGER, ROLE_STOREKEEPER, ROLE_SUPERVISOR
from ..services import catalog_service, supply_service
from .responses import action_response, internal_error, missing_field


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/products")
@require_auth
def list_products_route():
    products = db.session.query(Product).order_by(Product.name).all()
    return jsonify({"products": [p.to_dict() for p in products]}), 200


@inventory_bp.get("/ingredients")
@require_auth
def list_ingredients_route():
    return jsonify({"ingredients": supply_service.get_ingredients()}), 200


@inventory_bp.get("/suppliers")
@require_auth
@require_role(ROLE_STOREKEEPER, ROLE_ACCOUNTANT, ROLE_MANAGER)
def list_suppliers_route():
    return jsonify({"suppliers": supply_service.get_suppliers()}), 200


@inventory_bp.get("/supply-requests")
@require_auth
@require_role(ROLE_STOREKEEPER, ROLE_ACCOUNTANT, ROLE_MANAGER)
def pending_supply_requests_route():
    return jsonify({"requests": supply_service.get_pending_supply_requests()}), 200


@inventory_bp.post("/supply-requests")
@require_auth
@require_role(ROLE_STOREKEEPER, ROLE_MANAGER)
def request_stock_increase_route():
    """Request body: {"ingredient_id": "...", "quantity": 50, "supplier_id": "..."}"""
    try:
        data = request.get_json() or {}
        result = supply_service.request_stock_increase(
            data["ingredient_id"], data["quantity"], data["supplier_id"], g.current_staff,
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to create supply request")
        return internal_error()


@inventory_bp.post("/supply-requests/<request_id>/approve")
@require_auth
@require_role(ROLE_ACCOUNTANT, ROLE_MANAGER)
def approve_stock_increase_route(request_id: str):
    """Request body: {"cost_per_unit": 800, "total_cost": 40000}"""
    try:
        data = request.get_json() or {}
        result = supply_service.approve_stock_increase(
            request_id, data["cost_per_unit"], data["total_cost"], g.current_staff,
        )
        return action_response(result)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to approve supply request")
        return internal_error()


@inventory_bp.post("/supply-requests/<request_id>/decline")
@require_auth
@require_role(ROLE_ACCOUNTANT, ROLE_MANAGER)
def decline_stock_increase_route(request_id: str):
    return action_response(supply_service.decline_stock_increase(request_id, g.current_staff))


@inventory_bp.post("/suppliers/<supplier_id>/payments")
@require_auth
@require_role(ROLE_ACCOUNTANT, ROLE_MANAGER)
def log_supplier_payment_route(supplier_id: str):
    """Request body: {"amount": 20000}"""
    try:
        data = request.get_json() or {}
        return action_response(supply_service.log_supplier_payment(supplier_id, data["amount"]), 201)
    except KeyError as e:
        return missing_field(e)


# =============================================================================
# CATALOG MAINTENANCE
# =============================================================================

CATALOG_ROLES = (ROLE_MANAGER, ROLE_STOREKEEPER, ROLE_ACCOUNTANT, ROLE_SUPERVISOR)


def _can_edit_stock() -> bool:
    return g.current_staff.role == ROLE_DEVELOPER


@inventory_bp.post("/products")
@require_auth
@require_role(*CATALOG_ROLES)
def create_product_route():
    """
    Request body:
    {
        "name": "Agege Bread",
        "price": 1200,
        "category": "Breads",     (optional)
        "costPrice": 700,         (optional)
        "minPrice": 1100,         (optional)
        "maxPrice": 1300          (optional)
    }
    Any "stock" in the body is ignored; new products start empty.
    """
    data = request.get_json() or {}
    return action_response(catalog_service.create_product(data), 201)


@inventory_bp.patch("/products/<product_id>")
@require_auth
@require_role(*CATALOG_ROLES)
def update_product_route(product_id: str):
    data = request.get_json() or {}
    return action_response(catalog_service.update_product(product_id, data, allow_stock_edit=_can_edit_stock()))


@inventory_bp.delete("/products/<product_id>")
@require_auth
@require_role(*CATALOG_ROLES)
def delete_product_route(product_id: str):
    return action_response(catalog_service.delete_product(product_id))


@inventory_bp.post("/ingredients")
@require_auth
@require_role(*CATALOG_ROLES)
def create_ingredient_route():
    """Request body: {"name": "Flour", "unit": "kg", "stock": 0, "costPerUnit": 800}"""
    data = request.get_json() or {}
    return action_response(catalog_service.create_ingredient(data, g.current_staff), 201)


@inventory_bp.patch("/ingredients/<ingredient_id>")
@require_auth
@require_role(*CATALOG_ROLES)
def update_ingredient_route(ingredient_id: str):
    data = request.get_json() or {}
    result = catalog_service.update_ingredient(
        ingredient_id, data, g.current_staff, allow_stock_edit=_can_edit_stock(),
    )
    return action_response(result)


@inventory_bp.delete("/ingredients/<ingredient_id>")
@require_auth
@require_role(*CATALOG_ROLES)
def delete_ingredient_route(ingredient_id: str):
    return action_response(catalog_service.delete_ingredient(ingredient_id))


@inventory_bp.post("/suppliers")
@require_auth
@require_role(*CATALOG_ROLES)
def create_supplier_route():
    """Request body: {"name": "...", "contactPerson": "...", "phone": "...", "email": "..."}"""
    data = request.get_json() or {}
    return action_response(catalog_service.save_supplier(data), 201)


@inventory_bp.patch("/suppliers/<supplier_id>")
@require_auth
@require_role(*CATALOG_ROLES)
def update_supplier_route(supplier_id: str):
    data = request.get_json() or {}
    return action_response(catalog_service.save_supplier(data, supplier_id))


@inventory_bp.delete("/suppliers/<supplier_id>")
@require_auth
@require_role(*CATALOG_ROLES)
def delete_supplier_route(supplier_id: str):
    return action_response(catalog_service.delete_supplier(supplier_id))
