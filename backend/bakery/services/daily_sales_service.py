# Overview: Service-layer operations for the per-day sales aggregate.

from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..models import DailySales
from ..time_utils import day_key, start_of_day
from .concurrency import lock_for_update


DAILY_SALES_FIELDS = ("cash", "pos", "transfer", "credit_sales", "shortage", "total")


def add_to_daily_sales(when: datetime, **deltas: float) -> DailySales:
    """
    Add deltas to the sales/{yyyy-MM-dd} aggregate, creating it on first use.

    Must run inside the caller's transaction. Two requests creating the same
    day concurrently collide on the primary key; the loser is retried by
    run_with_retry and then finds the row.
    """
    unknown = set(deltas) - set(DAILY_SALES_FIELDS)
    if unknown:
        raise ValueError(f"Unknown daily sales fields: {sorted(unknown)}")

    key = day_key(when)
    row = lock_for_update(db.session.query(DailySales).filter_by(id=key)).first()
    if row is None:
        row = DailySales(
            id=key,
            date=start_of_day(when),
            description=f"Daily Sales for {key}",
            cash=0.0,
            pos=0.0,
            transfer=0.0,
            credit_sales=0.0,
            shortage=0.0,
            total=0.0,
        )
        db.session.add(row)

    for field_name, delta in deltas.items():
        setattr(row, field_name, (getattr(row, field_name) or 0.0) + delta)

    db.session.flush()
    return row
