# Overview: Service-layer operations for session; opaque login tokens for staff.

"""
Session tokens.

- Cryptographically secure random tokens (32 bytes)
- Only the SHA-256 of a token is stored
- Absolute timeout of SESSION_TTL_HOURS
- Revocable on logout and password change
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, Staff
from ..time_utils import utcnow


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy, so a fast hash is sufficient.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(staff_id: str) -> tuple[SessionToken, str]:
    """Returns (session_record, plaintext_token). Only the hash is stored."""
    token = generate_token()
    now = utcnow()
    ttl = timedelta(hours=current_app.config.get("SESSION_TTL_HOURS", 12))

    session = SessionToken(
        staff_id=staff_id,
        token_hash=hash_token(token),
        created_at=now,
        expires_at=now + ttl,
    )
    db.session.add(session)
    db.session.commit()
    return session, token


def validate_session(token: str) -> Staff | None:
    """
    Return the staff member behind a token, or None if the token is unknown,
    expired, revoked, or belongs to a deactivated account.
    """
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        revoked_at=None,
    ).first()
    if not session:
        return None

    now = utcnow()
    if session.expires_at < now:
        return None

    staff = session.staff
    if not staff or not staff.is_active:
        session.revoked_at = now
        db.session.commit()
        return None
    return staff


def revoke_session(token: str) -> bool:
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        revoked_at=None,
    ).first()
    if not session:
        return False
    session.revoked_at = utcnow()
    db.session.commit()
    return True


def revoke_all_staff_sessions(staff_id: str, keep_token: str | None = None) -> int:
    """Revoke every live session of a staff member, optionally sparing one token."""
    keep_hash = hash_token(keep_token) if keep_token else None
    now = utcnow()

    sessions = db.session.query(SessionToken).filter_by(staff_id=staff_id, revoked_at=None).all()
    count = 0
    for session in sessions:
        if session.token_hash == keep_hash:
            continue
        session.revoked_at = now
        count += 1
    db.session.commit()
    return count
