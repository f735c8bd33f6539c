# Overview: Service-layer operations for attendance; clock-in and clock-out.

"""
Attendance (clock-in / clock-out).

A staff member has at most one open attendance entry at a time. The open
entry's id is what the dashboard passes back on clock-out.
"""

from __future__ import annotations

from datetime import timedelta

from ..extensions import db
from ..models import Attendance, Staff
from ..time_utils import day_key, start_of_day, utcnow
from .concurrency import lock_for_update, run_in_transaction
from .errors import InvalidStateError, NotFoundError
from .results import action_boundary


def _open_entry(staff_id: str) -> Attendance | None:
    return (
        db.session.query(Attendance)
        .filter_by(staff_id=staff_id, clock_out_time=None)
        .order_by(Attendance.clock_in_time.desc())
        .first()
    )


def get_attendance_status(staff_id: str) -> dict | None:
    """Return {"attendanceId"} for today's open entry, or None when clocked out."""
    today = start_of_day(utcnow())
    entry = (
        db.session.query(Attendance)
        .filter(
            Attendance.staff_id == staff_id,
            Attendance.clock_out_time.is_(None),
            Attendance.clock_in_time >= today,
            Attendance.clock_in_time < today + timedelta(days=1),
        )
        .order_by(Attendance.clock_in_time.desc())
        .first()
    )
    return {"attendanceId": entry.id} if entry else None


@action_boundary("clock in")
def clock_in(staff_id: str):
    def _op():
        if db.session.get(Staff, staff_id) is None:
            raise NotFoundError("Staff member not found.")
        if _open_entry(staff_id) is not None:
            raise InvalidStateError("You are already clocked in.")

        now = utcnow()
        entry = Attendance(staff_id=staff_id, date=day_key(now), clock_in_time=now)
        db.session.add(entry)
        db.session.flush()
        return entry.id

    attendance_id = run_in_transaction(_op)
    return {"attendanceId": attendance_id}


@action_boundary("clock out")
def clock_out(attendance_id: str, staff_id: str | None = None):
    """Close an open attendance entry. staff_id, when given, must own it."""
    def _op():
        entry = lock_for_update(db.session.query(Attendance).filter_by(id=attendance_id)).first()
        if entry is None or (staff_id is not None and entry.staff_id != staff_id):
            raise NotFoundError("Attendance record not found.")
        if not entry.is_open:
            raise InvalidStateError("You have already clocked out.")
        entry.clock_out_time = utcnow()
        db.session.flush()
        return entry.to_dict()

    return {"attendance": run_in_transaction(_op)}


def get_attendance(start=None, end=None, staff_id: str | None = None) -> list[dict]:
    """Attendance entries between two datetimes, newest first, with staff names."""
    query = db.session.query(Attendance, Staff.name).join(Staff, Staff.staff_id == Attendance.staff_id)
    if start is not None:
        query = query.filter(Attendance.clock_in_time >= start)
    if end is not None:
        query = query.filter(Attendance.clock_in_time < end)
    if staff_id:
        query = query.filter(Attendance.staff_id == staff_id)

    rows = query.order_by(Attendance.clock_in_time.desc()).all()
    return [{**entry.to_dict(), "staff_name": name} for entry, name in rows]
