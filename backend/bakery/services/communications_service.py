# Overview: Service-layer operations for communications; announcements and staff reports.

from __future__ import annotations

from ..extensions import db
from ..models import Announcement, StaffReport
from ..models.communications import REPORT_STATUS_NEW, REPORT_STATUSES
from ..time_utils import utcnow
from .concurrency import lock_for_update, run_in_transaction
from .errors import NotFoundError, ValidationError
from .results import action_boundary


@action_boundary("post announcement")
def post_announcement(message: str, user):
    if not message or not message.strip():
        raise ValidationError("Announcement message cannot be empty.")

    def _op():
        announcement = Announcement(
            message=message.strip(),
            staff_id=user.staff_id,
            staff_name=user.name,
            timestamp=utcnow(),
        )
        db.session.add(announcement)
        db.session.flush()
        return announcement.id

    return {"announcementId": run_in_transaction(_op)}


def get_announcements() -> list[dict]:
    announcements = db.session.query(Announcement).order_by(Announcement.timestamp.desc()).all()
    return [a.to_dict() for a in announcements]


@action_boundary("submit report")
def submit_report(subject: str, report_type: str, message: str, user):
    """File a report for management; it starts with status "new"."""
    if not (subject or "").strip() or not report_type or not (message or "").strip():
        raise ValidationError("Please fill out all fields.")

    def _op():
        report = StaffReport(
            subject=subject.strip(),
            report_type=report_type,
            message=message.strip(),
            staff_id=user.staff_id,
            staff_name=user.name,
            status=REPORT_STATUS_NEW,
            timestamp=utcnow(),
        )
        db.session.add(report)
        db.session.flush()
        return report.id

    return {"reportId": run_in_transaction(_op)}


def get_reports(status: str | None = None) -> list[dict]:
    query = db.session.query(StaffReport)
    if status:
        query = query.filter_by(status=status)
    return [r.to_dict() for r in query.order_by(StaffReport.timestamp.desc()).all()]


@action_boundary("update report status")
def update_report_status(report_id: str, new_status: str):
    if new_status not in REPORT_STATUSES:
        raise ValidationError(f"Invalid report status: {new_status}")

    def _op():
        report = lock_for_update(db.session.query(StaffReport).filter_by(id=report_id)).first()
        if report is None:
            raise NotFoundError("Report not found.")
        report.status = new_status

    run_in_transaction(_op)
    return {"reportId": report_id, "status": new_status}
