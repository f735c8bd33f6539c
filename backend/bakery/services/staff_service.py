# Overview: Service-layer operations for staff administration; profile edits and deactivation.

"""
Staff administration.

Staff records are never hard-deleted: transfers, orders, wages and
attendance keep referring to them. "Deleting" a staff member deactivates
the account and signs it out everywhere.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Staff
from ..models.staff import PAY_TYPES, VALID_ROLES
from . import session_service
from .auth_service import hash_password
from .concurrency import lock_for_update, run_in_transaction
from .errors import NotFoundError, ValidationError
from .results import action_boundary


EDITABLE_FIELDS = (
    "name",
    "email",
    "role",
    "pay_type",
    "pay_rate",
    "bank_name",
    "account_number",
    "is_active",
)


def _load_staff_for_update(staff_id: str) -> Staff:
    staff = lock_for_update(db.session.query(Staff).filter_by(staff_id=staff_id)).first()
    if staff is None:
        raise NotFoundError("Staff member not found.")
    return staff


def _clean_changes(data: dict) -> dict:
    changes = {key: data[key] for key in EDITABLE_FIELDS if key in data}

    if "name" in changes:
        if not changes["name"] or not str(changes["name"]).strip():
            raise ValidationError("Name is required.")
        changes["name"] = str(changes["name"]).strip()
    if "role" in changes and changes["role"] not in VALID_ROLES:
        raise ValidationError(f"Invalid role: {changes['role']}")
    if "pay_type" in changes and changes["pay_type"] not in PAY_TYPES:
        raise ValidationError(f"Invalid pay type: {changes['pay_type']}")
    if "pay_rate" in changes:
        rate = changes["pay_rate"]
        if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate < 0:
            raise ValidationError("Pay rate must be a non-negative number.")
        changes["pay_rate"] = float(rate)
    if "is_active" in changes:
        changes["is_active"] = bool(changes["is_active"])
    return changes


@action_boundary("update staff member")
def update_staff(staff_id: str, data: dict):
    """
    Edit a staff member's profile, pay details or active flag.

    A new password may be supplied under "password". Deactivating the
    account or changing its password revokes every open session.
    """
    changes = _clean_changes(data or {})
    new_password = (data or {}).get("password")
    password_hash = hash_password(new_password) if new_password else None

    def _op():
        staff = _load_staff_for_update(staff_id)
        email = changes.get("email")
        if email and email != staff.email:
            taken = db.session.query(Staff).filter(Staff.email == email, Staff.staff_id != staff_id).first()
            if taken:
                raise ValidationError(f"Email {email} is already in use.")

        for key, value in changes.items():
            setattr(staff, key, value)
        if password_hash:
            staff.password_hash = password_hash
        db.session.flush()
        return staff.to_dict()

    staff = run_in_transaction(_op)

    revoked = 0
    if password_hash or changes.get("is_active") is False:
        revoked = session_service.revoke_all_staff_sessions(staff_id)
    return {"staff": staff, "revokedSessions": revoked}


@action_boundary("deactivate staff member")
def deactivate_staff(staff_id: str, actor):
    if actor is not None and actor.staff_id == staff_id:
        raise ValidationError("You cannot deactivate your own account.")

    def _op():
        staff = _load_staff_for_update(staff_id)
        staff.is_active = False

    run_in_transaction(_op)
    revoked = session_service.revoke_all_staff_sessions(staff_id)
    return {"staffId": staff_id, "revokedSessions": revoked}


def get_staff_list(include_inactive: bool = False, role: str | None = None) -> list[dict]:
    query = db.session.query(Staff)
    if not include_inactive:
        query = query.filter_by(is_active=True)
    if role:
        query = query.filter_by(role=role)
    return [s.to_dict() for s in query.order_by(Staff.name).all()]
