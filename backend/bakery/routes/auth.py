# Overview: Flask API routes for auth and staff operations; parses input and returns JSON responses.

# backend/bakery/routes/auth.py
"""
Authentication and staff administration API routes.

Staff log in with their staff ID and password and receive an opaque bearer
token. Staff accounts are created by managers (or via `flask staff create`).
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_role
from ..extensions import db
from ..models.staff import ROLE_DEVELOPER, ROLE_MANAGER, PAY_TYPE_SALARY
from ..services import auth_service, sales_service, session_service, staff_service
from ..services.errors import ValidationError
from ..time_utils import to_utc_z
from .responses import action_response, internal_error, missing_field


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")
staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate a staff member and create a session token.

    Request body:
    {
        "staff_id": "123456",
        "password": "..."
    }
    """
    try:
        data = request.get_json() or {}
        staff_id = data.get("staff_id")
        password = data.get("password")

        if not all([staff_id, password]):
            return jsonify({"error": "Staff ID and password are required."}), 400

        staff = auth_service.authenticate(staff_id, password)
        if not staff:
            return jsonify({"error": "Invalid Staff ID or password."}), 401

        session, token = session_service.create_session(staff.staff_id)

        return jsonify({
            "user": staff.to_dict(),
            "token": token,
            "expires_at": to_utc_z(session.expires_at),
            "message": "Login successful",
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login staff")
        return internal_error()


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(g.session_token)
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_staff.to_dict()}), 200


@auth_bp.post("/change-password")
@require_auth
def change_password_route():
    try:
        data = request.get_json() or {}
        result = auth_service.change_password(
            g.current_staff.staff_id,
            data["current_password"],
            data["new_password"],
            keep_token=g.session_token,
        )
        return action_response(result)
    except KeyError as e:
        return missing_field(e)
    except Exception:
        current_app.logger.exception("Failed to change password")
        return internal_error()


@auth_bp.post("/theme")
@require_auth
def update_theme_route():
    try:
        data = request.get_json() or {}
        return action_response(auth_service.update_theme(g.current_staff.staff_id, data["theme"]))
    except KeyError as e:
        return missing_field(e)


# =============================================================================
# STAFF ADMINISTRATION
# =============================================================================

@staff_bp.get("")
@require_auth
def list_staff_route():
    """List active staff, optionally filtered by ?role=. Managers may add ?include_inactive=1."""
    include_inactive = (
        request.args.get("include_inactive") in ("1", "true")
        and g.current_staff.role in (ROLE_MANAGER, ROLE_DEVELOPER)
    )
    staff = staff_service.get_staff_list(include_inactive=include_inactive, role=request.args.get("role"))
    return jsonify({"staff": staff}), 200


@staff_bp.post("")
@require_auth
@require_role(ROLE_MANAGER)
def create_staff_route():
    """
    Create a staff member.

    Request body:
    {
        "name": "Ada",
        "role": "Delivery Staff",
        "password": "...",
        "email": "ada@example.com",  (optional)
        "pay_rate": 0,               (optional)
        "pay_type": "Salary",        (optional)
        "bank_name": "...",          (optional)
        "account_number": "..."      (optional)
    }
    """
    try:
        data = request.get_json() or {}
        staff = auth_service.create_staff(
            name=data["name"],
            role=data["role"],
            password=data["password"],
            email=data.get("email"),
            pay_rate=data.get("pay_rate", 0.0),
            pay_type=data.get("pay_type", PAY_TYPE_SALARY),
            bank_name=data.get("bank_name"),
            account_number=data.get("account_number"),
        )
        return jsonify({"staff": staff.to_dict()}), 201

    except KeyError as e:
        return missing_field(e)
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create staff")
        return internal_error()


@staff_bp.get("/<staff_id>/stock")
@require_auth
def staff_stock_route(staff_id: str):
    return jsonify({"products": sales_service.get_products_for_staff(staff_id)}), 200


@staff_bp.patch("/<staff_id>")
@require_auth
@require_role(ROLE_MANAGER)
def update_staff_route(staff_id: str):
    """
    Edit a staff member.

    Request body: any of name, email, role, pay_type, pay_rate, bank_name,
    account_number, is_active, password.
    """
    try:
        data = request.get_json() or {}
        return action_response(staff_service.update_staff(staff_id, data))
    except Exception:
        current_app.logger.exception("Failed to update staff %s", staff_id)
        return internal_error()


@staff_bp.delete("/<staff_id>")
@require_auth
@require_role(ROLE_MANAGER)
def deactivate_staff_route(staff_id: str):
    """Deactivate a staff member. Records stay for history."""
    return action_response(staff_service.deactivate_staff(staff_id, g.current_staff))
