# Overview: Service-layer operations for payroll; salary advances and monthly wage runs.

"""
Payroll.

Pay periods are months ("yyyy-MM"). A period is processed once: after the
monthly wage rows exist no further advances or payroll runs are accepted
for it.

Wages are booked as costs when they are paid:
- production roles (bakers)  -> DirectCost
- everyone else              -> IndirectCost
Advances are booked one by one under "Salary Advance"; a payroll run books
one consolidated "Salary" cost per side with a per-person breakdown.
"""

from __future__ import annotations

import re

from ..extensions import db
from ..models import DirectCost, IndirectCost, Staff, Wage
from ..models.staff import PRODUCTION_ROLES
from ..time_utils import utcnow
from .concurrency import run_in_transaction
from .errors import InvalidStateError, NotFoundError, ValidationError
from .results import action_boundary


SALARY_CATEGORY = "Salary"
SALARY_ADVANCE_CATEGORY = "Salary Advance"

DEDUCTION_KEYS = ("shortages", "advanceSalary", "debt", "fine")

PERIOD_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _require_period(period: str) -> str:
    if not isinstance(period, str) or not PERIOD_PATTERN.match(period):
        raise ValidationError("Pay period must be a month in the form YYYY-MM.")
    return period


def _money(value, label: str, *, allow_zero: bool = True) -> float:
    if value is None:
        value = 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{label} must be a number.")
    if value < 0 or (not allow_zero and value == 0):
        raise ValidationError(f"{label} must be {'non-negative' if allow_zero else 'positive'}.")
    return float(value)


def has_payroll_been_processed(period: str) -> bool:
    return db.session.query(
        db.session.query(Wage).filter_by(month=period, is_advance=False).exists()
    ).scalar()


def _require_open_period(period: str) -> None:
    if has_payroll_been_processed(period):
        raise InvalidStateError(
            f"Payroll for {period} has already been processed. No more advances allowed."
        )


@action_boundary("request advance salary")
def request_advance_salary(staff_id: str, amount: float, period: str):
    """Pay part of a staff member's wage early and book it as a cost."""
    if not staff_id:
        raise ValidationError("Invalid staff ID or amount.")
    amount = _money(amount, "Amount", allow_zero=False)
    period = _require_period(period)

    def _op():
        staff = db.session.get(Staff, staff_id)
        if staff is None:
            raise NotFoundError("Staff member not found.")
        _require_open_period(period)

        now = utcnow()
        wage = Wage(
            staff_id=staff.staff_id,
            staff_name=staff.name,
            role=staff.role,
            month=period,
            description=f"Salary advance for {period}",
            deductions={"advanceSalary": amount},
            net_pay=-amount,
            is_advance=True,
            date=now,
        )
        db.session.add(wage)

        description = f"Salary advance for {staff.name} ({period})"
        if staff.role in PRODUCTION_ROLES:
            db.session.add(DirectCost(
                category=SALARY_ADVANCE_CATEGORY, description=description, quantity=1, total=amount, date=now,
            ))
        else:
            db.session.add(IndirectCost(
                category=SALARY_ADVANCE_CATEGORY, description=description, amount=amount, date=now,
            ))
        db.session.flush()
        return wage.id

    wage_id = run_in_transaction(_op)
    return {"wageId": wage_id}


def _payroll_line(entry: dict) -> dict:
    staff_id = entry.get("staffId")
    if not staff_id:
        raise ValidationError("Every payroll entry needs a staffId.")

    base_pay = _money(entry.get("basePay"), "Base pay")
    additions = _money(entry.get("additions"), "Additions")
    raw_deductions = entry.get("deductions") or {}
    deductions = {key: _money(raw_deductions.get(key), f"Deduction '{key}'") for key in DEDUCTION_KEYS}

    return {
        "staffId": staff_id,
        "basePay": base_pay,
        "additions": additions,
        "deductions": deductions,
        "netPay": base_pay + additions - sum(deductions.values()),
    }


@action_boundary("process payroll")
def process_payroll(entries, period: str):
    """
    Record the month's wages for every listed staff member.

    netPay is recomputed as basePay + additions - deductions; names and
    roles are taken from the staff records.
    """
    period = _require_period(period)
    if not entries:
        raise ValidationError("Payroll must include at least one staff member.")
    lines = [_payroll_line(entry) for entry in entries]
    staff_ids = [line["staffId"] for line in lines]
    if len(set(staff_ids)) != len(staff_ids):
        raise ValidationError("A staff member appears more than once in this payroll.")

    def _op():
        _require_open_period(period)
        staff_by_id = {
            s.staff_id: s for s in db.session.query(Staff).filter(Staff.staff_id.in_(staff_ids)).all()
        }
        missing = [sid for sid in staff_ids if sid not in staff_by_id]
        if missing:
            raise NotFoundError(f"Staff member {missing[0]} not found.")

        now = utcnow()
        direct, indirect = [], []
        for line in lines:
            staff = staff_by_id[line["staffId"]]
            db.session.add(Wage(
                staff_id=staff.staff_id,
                staff_name=staff.name,
                role=staff.role,
                month=period,
                description=f"Salary for {period}",
                base_pay=line["basePay"],
                additions=line["additions"],
                deductions=line["deductions"],
                net_pay=line["netPay"],
                is_advance=False,
                date=now,
            ))
            share = {"name": staff.name, "amount": line["netPay"]}
            (direct if staff.role in PRODUCTION_ROLES else indirect).append(share)

        if direct:
            db.session.add(DirectCost(
                category=SALARY_CATEGORY,
                description=f"Salary for {period}",
                quantity=len(direct),
                total=sum(p["amount"] for p in direct),
                date=now,
                details=direct,
            ))
        if indirect:
            db.session.add(IndirectCost(
                category=SALARY_CATEGORY,
                description=f"Salary for {period}",
                amount=sum(p["amount"] for p in indirect),
                date=now,
                details=indirect,
            ))
        return sum(line["netPay"] for line in lines)

    total = run_in_transaction(_op)
    return {"period": period, "staffCount": len(lines), "totalNetPay": total}


def get_wages(period: str | None = None) -> list[dict]:
    query = db.session.query(Wage)
    if period:
        query = query.filter_by(month=period)
    return [w.to_dict() for w in query.order_by(Wage.date.desc()).all()]
