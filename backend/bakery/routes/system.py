# backend/bakery/routes/system.py
"""
System health endpoint and developer-only maintenance tools.

The developer tools bypass the normal workflows (a run reset deletes its
orders; stock removal is an unchecked decrement) and are restricted to the
Developer role.
"""

import time
from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_role
from ..extensions import db
from ..models import Staff, SessionToken
from ..models.staff import ROLE_DEVELOPER
from ..services import transfer_service
from ..time_utils import utcnow, to_utc_z
from .responses import action_response, missing_field


system_bp = Blueprint("system", __name__)
dev_bp = Blueprint("dev", __name__, url_prefix="/api/dev")


def check_database_health() -> dict:
    """Check database connectivity with a couple of cheap counts."""
    start_time = time.time()
    try:
        staff_count = db.session.query(Staff).count()
        active_sessions = db.session.query(SessionToken).filter(
            SessionToken.revoked_at.is_(None),
            SessionToken.expires_at > utcnow(),
        ).count()

        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "staff": staff_count,
                "active_sessions": active_sessions,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable
    - 503: database unreachable
    """
    start_time = time.time()
    database_health = check_database_health()

    if database_health["status"] == "unhealthy":
        overall_status, http_status = "unhealthy", 503
    else:
        overall_status, http_status = "healthy", 200

    response = {
        "status": overall_status,
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {"database": database_health},
    }
    return jsonify(response), http_status


# =============================================================================
# DEVELOPER TOOLS
# =============================================================================

@dev_bp.post("/runs/<run_id>/reset")
@require_auth
@require_role(ROLE_DEVELOPER)
def reset_sales_run_route(run_id: str):
    return action_response(transfer_service.reset_sales_run(run_id))


@dev_bp.post("/stock/remove")
@require_auth
@require_role(ROLE_DEVELOPER)
def remove_stock_route():
    """Request body: {"staff_id": "...", "product_id": "...", "quantity": 3}"""
    try:
        data = request.get_json() or {}
        result = transfer_service.remove_stock_from_staff(
            data["staff_id"], data["product_id"], data["quantity"],
        )
        return action_response(result)
    except KeyError as e:
        return missing_field(e)
