# Overview: Service-layer operations for concurrency; encapsulates transaction retry and locking.

from __future__ import annotations

import time

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


# Errors meaning "someone else committed first"; the whole body is safe to re-run.
RETRYABLE_ERRORS = (OperationalError, StaleDataError, IntegrityError)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; there the version_id
    columns catch the conflict at flush time instead.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.05):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks), StaleDataError
    (optimistic locking conflicts) and IntegrityError (two writers creating
    the same keyed row). The session is rolled back before each retry so
    the body re-reads fresh state.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except RETRYABLE_ERRORS as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


def run_in_transaction(func, *, attempts: int = 3, backoff_base: float = 0.05):
    """
    Run func and commit, as one retryable unit.

    func must only read and write through db.session: anything it does
    outside the database would be repeated on retry.
    """
    def _op():
        result = func()
        db.session.commit()
        return result
    return run_with_retry(_op, attempts=attempts, backoff_base=backoff_base)
