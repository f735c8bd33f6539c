# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/bakery/routes/sales.py
"""
Sales API routes: run sales, showroom POS sales and waste reports.

The seller is always the authenticated staff member; stock comes out of
their personal stock.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_role
from ..models.staff import ROLE_MANAGER, ROLE_SUPERVISOR
from ..services import catalog_service, sales_service
from ..time_utils import parse_iso_datetime
from .responses import action_response, internal_error, missing_field


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("/runs/<run_id>/orders")
@require_auth
def sell_to_customer_route(run_id: str):
    """
    Sell from a sales run.

    Request body:
    {
        "items": [{"productId": "...", "name": "...", "quantity": 2, "price": 500}],
        "customer_id": "walk-in" | "<customer id>",
        "customer_name": "...",
        "payment_method": "Cash" | "POS" | "Credit" | "Paystack",
        "total": 1000
    }
    """
    try:
        data = request.get_json() or {}
        result = sales_service.sell_to_customer(
            run_id,
            data["items"],
            data.get("customer_id"),
            data.get("customer_name"),
            data["payment_method"],
            g.current_staff.staff_id,
            data["total"],
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return internal_error()


@sales_bp.post("/pos")
@require_auth
def pos_sale_route():
    """
    Showroom sale outside a sales run.

    Request body:
    {
        "items": [...],
        "customer_name": "...",     (optional)
        "payment_method": "Cash" | "POS" | "Paystack",
        "total": 1000,
        "date": "2024-05-01T10:00:00Z"   (optional, defaults to now)
    }
    """
    try:
        data = request.get_json() or {}
        result = sales_service.pos_sale(
            data["items"],
            g.current_staff.staff_id,
            g.current_staff.name,
            data.get("customer_name"),
            data["total"],
            data["payment_method"],
            parse_iso_datetime(data.get("date")),
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except ValueError:
        return jsonify({"error": "Invalid date"}), 400
    except Exception:
        current_app.logger.exception("Failed to process POS sale")
        return internal_error()


@sales_bp.post("/waste")
@require_auth
def report_waste_route():
    """
    Report wasted stock.

    Request body:
    {
        "items": [{"productId": "...", "productName": "...", "productCategory": "Breads", "quantity": 2}],
        "reason": "Damaged",
        "notes": "..."   (optional)
    }
    """
    try:
        data = request.get_json() or {}
        result = sales_service.report_waste(
            data.get("items"), data.get("reason"), data.get("notes"), g.current_staff,
        )
        return action_response(result, 201)
    except Exception:
        current_app.logger.exception("Failed to report waste")
        return internal_error()


@sales_bp.get("/products")
@require_auth
def my_products_route():
    return jsonify({"products": sales_service.get_products_for_staff(g.current_staff.staff_id)}), 200


@sales_bp.get("/runs/<run_id>/orders")
@require_auth
def run_orders_route(run_id: str):
    return jsonify({"orders": sales_service.get_orders_for_run(run_id)}), 200


@sales_bp.get("/runs/<run_id>/customers")
@require_auth
def run_customers_route(run_id: str):
    return jsonify({"customers": sales_service.get_customers_for_run(run_id)}), 200


@sales_bp.get("/customers")
@require_auth
def customers_route():
    return jsonify({"customers": sales_service.get_customers()}), 200


@sales_bp.post("/customers")
@require_auth
@require_role(ROLE_MANAGER, ROLE_SUPERVISOR)
def create_customer_route():
    """Request body: {"name": "...", "phone": "...", "email": "...", "address": "..."}"""
    data = request.get_json() or {}
    return action_response(catalog_service.save_customer(data), 201)


@sales_bp.patch("/customers/<customer_id>")
@require_auth
@require_role(ROLE_MANAGER, ROLE_SUPERVISOR)
def update_customer_route(customer_id: str):
    data = request.get_json() or {}
    return action_response(catalog_service.save_customer(data, customer_id))


@sales_bp.delete("/customers/<customer_id>")
@require_auth
@require_role(ROLE_MANAGER, ROLE_SUPERVISOR)
def delete_customer_route(customer_id: str):
    return action_response(catalog_service.delete_customer(customer_id))
