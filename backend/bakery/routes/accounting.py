# Overview: Flask API routes for manual cost entry; parses input and returns JSON responses.

"""
Accounting API routes: direct costs, indirect costs and petty expenses
entered by hand.
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_role
from ..models.staff import ROLE_ACCOUNTANT, ROLE_MANAGER
from ..services import accounting_service
from ..time_utils import parse_iso_datetime
from .responses import action_response, internal_error, missing_field


accounting_bp = Blueprint("accounting", __name__, url_prefix="/api/accounting")


@accounting_bp.post("/direct-costs")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def add_direct_cost_route():
    """Request body: {"description": "...", "category": "Packaging", "quantity": 10, "total": 5000}"""
    try:
        data = request.get_json() or {}
        result = accounting_service.add_direct_cost(
            data["description"], data["category"], data["quantity"], data["total"],
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to add direct cost")
        return internal_error()


@accounting_bp.get("/direct-costs")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def direct_costs_route():
    return jsonify({"costs": accounting_service.get_direct_costs()}), 200


@accounting_bp.post("/indirect-costs")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def add_indirect_cost_route():
    """Request body: {"description": "...", "category": "Utilities", "amount": 25000}"""
    try:
        data = request.get_json() or {}
        result = accounting_service.add_indirect_cost(
            data["description"], data["category"], data["amount"], data.get("details"),
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to add indirect cost")
        return internal_error()


@accounting_bp.get("/indirect-costs")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def indirect_costs_route():
    return jsonify({"costs": accounting_service.get_indirect_costs()}), 200


@accounting_bp.post("/expenses")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def add_expense_route():
    """Request body: {"category": "Fuel", "description": "...", "amount": 3000, "runId": "..."}"""
    try:
        data = request.get_json() or {}
        result = accounting_service.add_expense(
            data["category"], data["description"], data["amount"], data.get("runId"),
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to add expense")
        return internal_error()


@accounting_bp.get("/expenses")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def expenses_route():
    """Query params: ?from=ISO&to=ISO"""
    try:
        start = parse_iso_datetime(request.args.get("from"))
        end = parse_iso_datetime(request.args.get("to"))
    except ValueError:
        return jsonify({"error": "Invalid date"}), 400
    return jsonify({"expenses": accounting_service.get_expenses(start, end)}), 200
