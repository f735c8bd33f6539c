from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .common import new_id


class Wage(db.Model):
    """
    Wage record for one staff member and pay period (month, "yyyy-MM").

    Salary advances are wage rows with is_advance=True and a negative
    netPay. A period counts as processed once any non-advance row exists.

    deductions: {shortages, advanceSalary, debt, fine}
    """
    __tablename__ = "wages"
    __table_args__ = (
        db.Index("ix_wages_month_advance", "month", "is_advance"),
    )

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    staff_id = db.Column(db.String(32), db.ForeignKey("staff.staff_id"), nullable=False, index=True)
    staff_name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=True)
    month = db.Column(db.String(7), nullable=False)
    description = db.Column(db.Text, nullable=True)

    base_pay = db.Column(db.Float, nullable=False, default=0.0)
    additions = db.Column(db.Float, nullable=False, default=0.0)
    deductions = db.Column(db.JSON, nullable=False, default=dict)
    net_pay = db.Column(db.Float, nullable=False)
    is_advance = db.Column(db.Boolean, nullable=False, default=False)

    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "staffId": self.staff_id,
            "staffName": self.staff_name,
            "role": self.role,
            "month": self.month,
            "description": self.description,
            "basePay": self.base_pay,
            "additions": self.additions,
            "deductions": dict(self.deductions or {}),
            "netPay": self.net_pay,
            "isAdvance": self.is_advance,
            "date": to_utc_z(self.date),
        }
