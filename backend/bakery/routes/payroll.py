# Overview: Flask API routes for payroll operations; parses input and returns JSON responses.

"""
Payroll API routes: salary advances and the monthly wage run.

Only managers and accountants see pay details.
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_role
from ..models.staff import ROLE_ACCOUNTANT, ROLE_MANAGER
from ..services import payroll_service, staff_service
from .responses import action_response, internal_error, missing_field


payroll_bp = Blueprint("payroll", __name__, url_prefix="/api/payroll")


@payroll_bp.get("/staff")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def payroll_staff_route():
    return jsonify({"staff": staff_service.get_staff_list()}), 200


@payroll_bp.get("/status")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def payroll_status_route():
    period = request.args.get("period")
    if not period:
        return jsonify({"error": "period is required"}), 400
    return jsonify({"period": period, "processed": payroll_service.has_payroll_been_processed(period)}), 200


@payroll_bp.post("/advances")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def advance_salary_route():
    """Request body: {"staff_id": "...", "amount": 10000, "period": "2026-10"}"""
    try:
        data = request.get_json() or {}
        result = payroll_service.request_advance_salary(data["staff_id"], data["amount"], data["period"])
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to record salary advance")
        return internal_error()


@payroll_bp.post("/process")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def process_payroll_route():
    """
    Request body:
    {
        "period": "2026-10",
        "entries": [
            {
                "staffId": "...",
                "basePay": 80000,
                "additions": 5000,
                "deductions": {"shortages": 0, "advanceSalary": 10000, "debt": 0, "fine": 0}
            }
        ]
    }
    """
    try:
        data = request.get_json() or {}
        return action_response(payroll_service.process_payroll(data["entries"], data["period"]), 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to process payroll")
        return internal_error()


@payroll_bp.get("/wages")
@require_auth
@require_role(ROLE_MANAGER, ROLE_ACCOUNTANT)
def wages_route():
    return jsonify({"wages": payroll_service.get_wages(request.args.get("period"))}), 200
