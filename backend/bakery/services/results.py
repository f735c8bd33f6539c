# Overview: Result objects returned at the boundary of every workflow operation.

from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from typing import Any

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from .errors import TransientStoreError, WorkflowError


@dataclass
class ActionResult:
    """
    Outcome of a workflow operation: {success, error?, ...fields}.

    Callers never see exceptions from the workflow services; they inspect
    success and display error directly.
    """
    success: bool
    error: str | None = None
    error_code: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **data) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> "ActionResult":
        return cls(success=False, error=error, error_code=error_code)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def to_dict(self) -> dict:
        payload = {"success": self.success}
        if self.error is not None:
            payload["error"] = self.error
        if self.error_code is not None:
            payload["error_code"] = self.error_code
        payload.update(self.data)
        return payload


def action_boundary(action: str):
    """
    Convert a service function into a result-returning operation.

    - WorkflowError -> failure with its message and error_code
    - database errors that survived run_with_retry -> generic transient failure
    The session is rolled back on every failure so nothing partial is kept.
    The wrapped function returns None or a dict of extra result fields.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except WorkflowError as exc:
                db.session.rollback()
                current_app.logger.info("Could not %s: %s", action, exc)
                return ActionResult.failure(str(exc), exc.error_code)
            except SQLAlchemyError:
                db.session.rollback()
                current_app.logger.exception("Failed to %s", action)
                return ActionResult.failure(
                    f"Failed to {action}. Please try again.",
                    TransientStoreError.error_code,
                )

            if isinstance(result, ActionResult):
                return result
            return ActionResult.ok(**(result or {}))
        return wrapper
    return decorator
