# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .models.staff import ROLE_DEVELOPER
from .services import session_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1]


def require_auth(f):
    """
    Require a valid session token.

    Sets:
    - g.current_staff: the authenticated Staff record
    - g.session_token: the plaintext bearer token (for logout)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        staff = session_service.validate_session(token)
        if not staff:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_staff = staff
        g.session_token = token
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles):
    """
    Require the authenticated staff member to hold one of the given roles.

    Developers pass every role check.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "current_staff"):
                return jsonify({"error": "Authentication required"}), 401

            staff = g.current_staff
            if staff.role != ROLE_DEVELOPER and staff.role not in roles:
                return jsonify({
                    "error": "Permission denied",
                    "required_roles": list(roles),
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
