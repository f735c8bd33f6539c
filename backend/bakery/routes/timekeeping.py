# Overview: Flask API routes for attendance operations; parses input and returns JSON responses.

"""
Attendance Routes

SECURITY:
- Any signed-in staff member clocks themselves in and out.
- Attendance history is visible to managers and supervisors.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..models.staff import ROLE_MANAGER, ROLE_SUPERVISOR
from ..services import timekeeping_service
from ..time_utils import parse_iso_datetime
from .responses import action_response


attendance_bp = Blueprint("attendance", __name__, url_prefix="/api/attendance")


@attendance_bp.get("/status")
@require_auth
def attendance_status_route():
    status = timekeeping_service.get_attendance_status(g.current_staff.staff_id)
    return jsonify({"clockedIn": status is not None, "attendanceId": (status or {}).get("attendanceId")}), 200


@attendance_bp.post("/clock-in")
@require_auth
def clock_in_route():
    return action_response(timekeeping_service.clock_in(g.current_staff.staff_id), 201)


@attendance_bp.post("/clock-out/<attendance_id>")
@require_auth
def clock_out_route(attendance_id: str):
    return action_response(timekeeping_service.clock_out(attendance_id, g.current_staff.staff_id))


@attendance_bp.get("")
@require_auth
@require_role(ROLE_MANAGER, ROLE_SUPERVISOR)
def list_attendance_route():
    """Query params: ?from=ISO&to=ISO&staff_id=..."""
    try:
        start = parse_iso_datetime(request.args.get("from"))
        end = parse_iso_datetime(request.args.get("to"))
    except ValueError:
        return jsonify({"error": "Invalid date"}), 400

    entries = timekeeping_service.get_attendance(start, end, request.args.get("staff_id"))
    return jsonify({"attendance": entries}), 200
