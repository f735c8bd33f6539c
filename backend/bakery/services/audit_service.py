# Overview: Service-layer operations for audit logs written after a workflow commits.

"""
Audit entries (production logs, ingredient stock logs) are diagnostic, not
authoritative. They are written after the main transaction commits, at most
once: a failure is logged and dropped, never retried, and never undoes the
business change it describes.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import IngredientStockLog, ProductionLog
from ..models.staff import ROLE_DEVELOPER, ROLE_MANAGER
from ..time_utils import utcnow


def _write_after_commit(build, description: str) -> bool:
    try:
        db.session.add(build())
        db.session.commit()
        return True
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.warning("Failed to write %s", description, exc_info=True)
        return False


def log_production_action(action: str, details: str, actor) -> bool:
    # Developer accounts appear as Manager in the production history
    staff_name = ROLE_MANAGER if actor.role == ROLE_DEVELOPER else actor.name
    return _write_after_commit(
        lambda: ProductionLog(
            action=action,
            details=details,
            staff_id=actor.staff_id,
            staff_name=staff_name,
            timestamp=utcnow(),
        ),
        f"production log '{action}'",
    )


def log_ingredient_movement(
    *,
    ingredient_name: str,
    change: float,
    reason: str,
    staff_name: str | None,
    log_ref_id: str | None,
    ingredient_id: str | None = None,
) -> bool:
    return _write_after_commit(
        lambda: IngredientStockLog(
            ingredient_id=ingredient_id,
            ingredient_name=ingredient_name,
            change=change,
            reason=reason,
            date=utcnow(),
            staff_name=staff_name,
            log_ref_id=log_ref_id,
        ),
        f"ingredient stock log for {log_ref_id}",
    )
