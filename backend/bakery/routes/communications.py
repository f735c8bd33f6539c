# Overview: Flask API routes for announcements and staff reports; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..models.staff import ROLE_MANAGER, ROLE_SUPERVISOR
from ..services import communications_service
from .responses import action_response


communications_bp = Blueprint("communications", __name__, url_prefix="/api/communications")


@communications_bp.get("/announcements")
@require_auth
def announcements_route():
    return jsonify({"announcements": communications_service.get_announcements()}), 200


@communications_bp.post("/announcements")
@require_auth
@require_role(ROLE_MANAGER, ROLE_SUPERVISOR)
def post_announcement_route():
    """Request body: {"message": "..."}"""
    data = request.get_json() or {}
    return action_response(communications_service.post_announcement(data.get("message"), g.current_staff), 201)


@communications_bp.post("/reports")
@require_auth
def submit_report_route():
    """Request body: {"subject": "...", "type": "Complaint", "message": "..."}"""
    data = request.get_json() or {}
    result = communications_service.submit_report(
        data.get("subject"), data.get("type"), data.get("message"), g.current_staff,
    )
    return action_response(result, 201)


@communications_bp.get("/reports")
@require_auth
@require_role(ROLE_MANAGER, ROLE_SUPERVISOR)
def reports_route():
    return jsonify({"reports": communications_service.get_reports(request.args.get("status"))}), 200


@communications_bp.post("/reports/<report_id>/status")
@require_auth
@require_role(ROLE_MANAGER, ROLE_SUPERVISOR)
def update_report_status_route(report_id: str):
    """Request body: {"status": "in_progress"}"""
    data = request.get_json() or {}
    return action_response(communications_service.update_report_status(report_id, data.get("status")))
