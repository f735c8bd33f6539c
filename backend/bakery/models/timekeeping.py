from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .common import new_id


class Attendance(db.Model):
    """
    One clock-in/clock-out pair for a staff member.

    LIFECYCLE:
    - open: clock_out_time is NULL (shift in progress)
    - closed: clock_out_time set; the entry is not modified again

    `date` is the calendar day (yyyy-MM-dd) of the clock-in.
    """
    __tablename__ = "attendance"
    __table_args__ = (
        db.Index("ix_attendance_staff_clock_in", "staff_id", "clock_in_time"),
    )

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    staff_id = db.Column(db.String(32), db.ForeignKey("staff.staff_id"), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False, index=True)
    clock_in_time = db.Column(db.DateTime(timezone=True), nullable=False)
    clock_out_time = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "date": self.date,
            "clock_in_time": to_utc_z(self.clock_in_time),
            "clock_out_time": to_utc_z(self.clock_out_time),
        }
