# Overview: Flask API routes for payments operations; parses input and returns JSON responses.

# backend/bakery/routes/payments.py
"""
Payment API routes.

- Drivers queue debt payments and run expenses for approval
- Accountants approve or decline payment confirmations
- Card/transfer payments are initialized and verified against Paystack
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_role
from ..models.staff import ROLE_ACCOUNTANT, ROLE_MANAGER
from ..services import gateway_service, payment_service
from .responses import action_response, internal_error, missing_field


payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


# =============================================================================
# CONFIRMATIONS
# =============================================================================

@payments_bp.get("/confirmations")
@require_auth
@require_role(ROLE_ACCOUNTANT, ROLE_MANAGER)
def list_confirmations_route():
    confirmations = payment_service.get_payment_confirmations(request.args.get("status"))
    return jsonify({"confirmations": confirmations}), 200


@payments_bp.post("/confirmations/<confirmation_id>")
@require_auth
@require_role(ROLE_ACCOUNTANT, ROLE_MANAGER)
def handle_confirmation_route(confirmation_id: str):
    """Request body: {"action": "approve" | "decline"}"""
    try:
        data = request.get_json() or {}
        return action_response(
            payment_service.handle_payment_confirmation(confirmation_id, data["action"])
        )
    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to process payment confirmation")
        return internal_error()


@payments_bp.post("/runs/<run_id>/debt-payments")
@require_auth
def record_debt_payment_route(run_id: str):
    """
    Request body:
    {
        "customer_id": "...",
        "customer_name": "...",
        "amount": 2500,
        "payment_method": "Cash" | "POS"
    }
    """
    try:
        data = request.get_json() or {}
        result = payment_service.record_debt_payment_for_run(
            run_id,
            data["customer_id"],
            data.get("customer_name"),
            g.current_staff.staff_id,
            data["amount"],
            data["payment_method"],
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to record debt payment")
        return internal_error()


@payments_bp.post("/runs/<run_id>/expenses")
@require_auth
def log_run_expense_route(run_id: str):
    """Request body: {"amount": 1500, "category": "Fuel", "description": "..."}"""
    try:
        data = request.get_json() or {}
        result = payment_service.log_run_expense(
            run_id,
            g.current_staff.staff_id,
            data["amount"],
            data.get("category"),
            data.get("description"),
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to log run expense")
        return internal_error()


# =============================================================================
# PAYSTACK
# =============================================================================

@payments_bp.post("/paystack/initialize")
@require_auth
def initialize_paystack_route():
    """
    Request body:
    {
        "email": "customer@example.com",
        "total": 1500,
        "items": [...],
        "customer_name": "...", "customer_id": "...", "run_id": "...",
        "is_pos_sale": false, "is_debt_payment": false
    }
    """
    try:
        data = request.get_json() or {}
        result = gateway_service.initialize_payment(
            email=data["email"],
            total=data["total"],
            staff_id=g.current_staff.staff_id,
            items=data.get("items"),
            customer_name=data.get("customer_name"),
            customer_id=data.get("customer_id"),
            run_id=data.get("run_id"),
            is_pos_sale=bool(data.get("is_pos_sale")),
            is_debt_payment=bool(data.get("is_debt_payment")),
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to initialize Paystack transaction")
        return internal_error()


@payments_bp.post("/paystack/verify/<reference>")
@require_auth
def verify_paystack_route(reference: str):
    try:
        return action_response(gateway_service.verify_and_finalize_order(reference))
    except Exception:
        current_app.logger.exception("Failed to finalize order for %s", reference)
        return jsonify({
            "success": False,
            "error": "Failed to finalize the order after payment verification.",
        }), 500
