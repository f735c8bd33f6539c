# Overview: Service-layer operations for auth; staff accounts and password handling.

"""
Staff authentication.

WHY: Every stock movement is attributed to a staff member, so every action
starts from an authenticated staff record.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor BCRYPT_ROUNDS, 12 by default)
- Minimum 8 characters, at least one letter and one digit
- Staff IDs are random digit strings of STAFF_ID_LENGTH (login identifier)
- Session tokens managed separately (see session_service.py)
"""

from __future__ import annotations

import re
import secrets

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import Staff
from ..models.staff import PAY_TYPE_SALARY, PAY_TYPES, VALID_ROLES
from . import session_service
from .concurrency import run_in_transaction
from .errors import NotFoundError, ValidationError
from .results import action_boundary


class PasswordValidationError(ValidationError):
    """Raised when a password doesn't meet strength requirements."""


def validate_password_strength(password: str) -> None:
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long.")
    if not re.search(r"[A-Za-z]", password):
        raise PasswordValidationError("Password must contain at least one letter.")
    if not re.search(r"\d", password):
        raise PasswordValidationError("Password must contain at least one digit.")


def hash_password(password: str) -> str:
    """Validate and hash a password with bcrypt."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def generate_staff_id(length: int | None = None) -> str:
    """Random unused numeric staff ID."""
    length = length or current_app.config.get("STAFF_ID_LENGTH", 6)
    while True:
        candidate = "".join(secrets.choice("0123456789") for _ in range(length))
        if not db.session.get(Staff, candidate):
            return candidate


def create_staff(
    name: str,
    role: str,
    password: str,
    email: str | None = None,
    pay_rate: float = 0.0,
    staff_id: str | None = None,
    pay_type: str = PAY_TYPE_SALARY,
    bank_name: str | None = None,
    account_number: str | None = None,
) -> Staff:
    """
    Create a staff member. Raises ValidationError on bad input or a taken
    staff ID / email.
    """
    if not name or not name.strip():
        raise ValidationError("Name is required.")
    if role not in VALID_ROLES:
        raise ValidationError(f"Invalid role: {role}")
    if pay_type not in PAY_TYPES:
        raise ValidationError(f"Invalid pay type: {pay_type}")
    if staff_id and db.session.get(Staff, staff_id):
        raise ValidationError(f"Staff ID {staff_id} is already in use.")
    if email and db.session.query(Staff).filter_by(email=email).first():
        raise ValidationError(f"Email {email} is already in use.")

    staff = Staff(
        staff_id=staff_id or generate_staff_id(),
        name=name.strip(),
        email=email,
        role=role,
        password_hash=hash_password(password),
        is_active=True,
        pay_type=pay_type,
        pay_rate=pay_rate or 0.0,
        bank_name=bank_name,
        account_number=account_number,
    )
    db.session.add(staff)
    db.session.commit()
    return staff


def authenticate(staff_id: str, password: str) -> Staff | None:
    """Return the active staff member if the credentials match, else None."""
    staff = db.session.get(Staff, staff_id)
    if not staff or not staff.is_active:
        return None
    if not verify_password(password, staff.password_hash):
        return None
    return staff


@action_boundary("change password")
def change_password(staff_id: str, current_password: str, new_password: str, keep_token: str | None = None):
    """Change a password and sign the staff member out everywhere else."""
    def _op():
        staff = db.session.get(Staff, staff_id)
        if not staff:
            raise NotFoundError("User not found.")
        if not verify_password(current_password, staff.password_hash):
            raise ValidationError("Incorrect current password.")
        staff.password_hash = hash_password(new_password)

    run_in_transaction(_op)
    revoked = session_service.revoke_all_staff_sessions(staff_id, keep_token=keep_token)
    return {"revokedSessions": revoked}


@action_boundary("update theme")
def update_theme(staff_id: str, theme: str):
    def _op():
        staff = db.session.get(Staff, staff_id)
        if not staff:
            raise NotFoundError("User not found.")
        staff.theme = theme

    run_in_transaction(_op)
    return {"theme": theme}
