from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .common import new_id


REPORT_STATUS_NEW = "new"
REPORT_STATUS_IN_PROGRESS = "in_progress"
REPORT_STATUS_RESOLVED = "resolved"

REPORT_STATUSES = [REPORT_STATUS_NEW, REPORT_STATUS_IN_PROGRESS, REPORT_STATUS_RESOLVED]


class Announcement(db.Model):
    """Message posted to every staff member's dashboard."""
    __tablename__ = "announcements"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    staff_id = db.Column(db.String(32), nullable=False)
    staff_name = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "staffId": self.staff_id,
            "staffName": self.staff_name,
            "message": self.message,
            "timestamp": to_utc_z(self.timestamp),
        }


class StaffReport(db.Model):
    """
    Issue or complaint raised by a staff member for management.

    Status is one of new, in_progress or resolved and is set freely by
    management.
    """
    __tablename__ = "reports"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    subject = db.Column(db.String(255), nullable=False)
    report_type = db.Column(db.String(64), nullable=False)
    message = db.Column(db.Text, nullable=False)
    staff_id = db.Column(db.String(32), nullable=False, index=True)
    staff_name = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=REPORT_STATUS_NEW, index=True)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subject": self.subject,
            "reportType": self.report_type,
            "message": self.message,
            "staffId": self.staff_id,
            "staffName": self.staff_name,
            "status": self.status,
            "timestamp": to_utc_z(self.timestamp),
        }
