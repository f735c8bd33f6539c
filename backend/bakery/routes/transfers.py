# Overview: Flask API routes for transfers and sales runs; parses input and returns JSON responses.

# backend/bakery/routes/transfers.py
"""
Transfer and sales run API routes.

Storekeepers send stock to staff; the recipient accepts or declines.
Drivers return unsold stock and close their runs from here.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_role
from ..extensions import db
from ..models import Transfer
from ..models.staff import (
    ROLE_ACCOUNTANT,
    ROLE_DELIVERY,
    ROLE_DEVELOPER,
    ROLE_MANAGER,
    ROLE_SHOWROOM,
    ROLE_STOREKEEPER,
    ROLE_SUPERVISOR,
)
from ..services import transfer_service
from .responses import action_response, internal_error, missing_field


transfers_bp = Blueprint("transfers", __name__, url_prefix="/api/transfers")

# Roles that may act on a transfer addressed to someone else
OVERSEER_ROLES = {ROLE_MANAGER, ROLE_DEVELOPER}


@transfers_bp.post("")
@require_auth
@require_role(ROLE_STOREKEEPER, ROLE_MANAGER, ROLE_SUPERVISOR)
def initiate_transfer_route():
    """
    Send stock from central inventory to a staff member.

    Request body:
    {
        "to_staff_id": "123456",
        "items": [{"productId": "...", "productName": "...", "quantity": 10}],
        "is_sales_run": true,   (optional)
        "notes": "..."          (optional)
    }
    """
    try:
        data = request.get_json() or {}
        result = transfer_service.initiate_transfer(
            data["items"],
            g.current_staff,
            data["to_staff_id"],
            is_sales_run=bool(data.get("is_sales_run", False)),
            notes=data.get("notes"),
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to initiate transfer")
        return internal_error()


@transfers_bp.post("/<transfer_id>/acknowledge")
@require_auth
def acknowledge_transfer_route(transfer_id: str):
    """
    Accept or decline a transfer addressed to the caller.

    Request body: {"action": "accept" | "decline"}
    """
    try:
        data = request.get_json() or {}
        action = data["action"]

        transfer = db.session.get(Transfer, transfer_id)
        if transfer is None:
            return jsonify({"success": False, "error": "Transfer does not exist."}), 404
        if (
            transfer.to_staff_id != g.current_staff.staff_id
            and g.current_staff.role not in OVERSEER_ROLES
        ):
            return jsonify({"error": "Permission denied"}), 403

        return action_response(transfer_service.acknowledge_transfer(transfer_id, action))

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to acknowledge transfer")
        return internal_error()


@transfers_bp.get("/pending")
@require_auth
def pending_transfers_route():
    transfers = transfer_service.get_pending_transfers_for_staff(g.current_staff.staff_id)
    return jsonify({"transfers": transfers}), 200


@transfers_bp.get("/completed")
@require_auth
def completed_transfers_route():
    transfers = transfer_service.get_completed_transfers_for_staff(g.current_staff.staff_id)
    return jsonify({"transfers": transfers}), 200


@transfers_bp.get("/returns")
@require_auth
@require_role(ROLE_STOREKEEPER, ROLE_MANAGER, ROLE_SUPERVISOR)
def returned_stock_route():
    return jsonify({"transfers": transfer_service.get_returned_stock_transfers()}), 200


@transfers_bp.get("/production")
@require_auth
@require_role(ROLE_STOREKEEPER, ROLE_MANAGER, ROLE_SUPERVISOR)
def production_transfers_route():
    return jsonify({"transfers": transfer_service.get_production_transfers()}), 200


@transfers_bp.get("/stock")
@require_auth
def my_stock_route():
    return jsonify({"stock": transfer_service.get_staff_stock(g.current_staff.staff_id)}), 200


# =============================================================================
# SALES RUNS
# =============================================================================

@transfers_bp.get("/runs")
@require_auth
def sales_runs_route():
    """
    Sales runs grouped into active and completed.

    Managers and accountants see every run (or ?staff_id=...); other staff
    see their own.
    """
    staff = g.current_staff
    if staff.role in OVERSEER_ROLES or staff.role in (ROLE_ACCOUNTANT, ROLE_SUPERVISOR):
        staff_id = request.args.get("staff_id")
    else:
        staff_id = staff.staff_id
    return jsonify(transfer_service.get_sales_runs(staff_id)), 200


@transfers_bp.get("/runs/<run_id>")
@require_auth
def sales_run_details_route(run_id: str):
    run = transfer_service.get_sales_run_details(run_id)
    if run is None:
        return jsonify({"error": "Sales run not found."}), 404
    return jsonify({"run": run}), 200


@transfers_bp.post("/runs/<run_id>/return")
@require_auth
def return_stock_route(run_id: str):
    """
    Return unsold stock to a storekeeper.

    run_id may be "showroom-return" or "delivery-return" for stock not tied
    to a sales run.

    Request body:
    {
        "to_staff_id": "...",
        "items": [{"productId": "...", "productName": "...", "quantity": 3}]
    }
    """
    try:
        data = request.get_json() or {}
        result = transfer_service.return_stock(
            run_id, data["items"], g.current_staff, data["to_staff_id"],
        )
        return action_response(result, 201)

    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to return stock")
        return internal_error()


@transfers_bp.post("/runs/<run_id>/complete")
@require_auth
@require_role(ROLE_DELIVERY, ROLE_SHOWROOM, ROLE_ACCOUNTANT, ROLE_MANAGER, ROLE_SUPERVISOR)
def complete_run_route(run_id: str):
    try:
        return action_response(transfer_service.complete_run(run_id))
    except Exception:
        current_app.logger.exception("Failed to complete sales run")
        return internal_error()
