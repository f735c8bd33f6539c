# Overview: Service-layer operations for payment confirmations; gates run collections on approval.

"""
Money collected on a sales run is not counted until an accountant approves
it. A PaymentConfirmation is one of:

- a deferred Cash/POS sale (becomes an Order on approval)
- a debt payment (credits the customer's amountPaid)
- a run expense (becomes an IndirectCost record)

LIFECYCLE: pending -> approved | declined, exactly once.
Approval of anything tied to a real sales run adds the amount to the
run's totalCollected.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Customer, IndirectCost, Order, PaymentConfirmation, Staff, Transfer
from ..models.sales import (
    PAYMENT_METHOD_CASH,
    PAYMENT_METHOD_POS,
    POS_SALE_RUN_PREFIX,
    WALK_IN_CUSTOMER_ID,
)
from ..time_utils import utcnow
from .concurrency import lock_for_update, run_in_transaction
from .errors import InvalidStateError, NotFoundError, ValidationError
from .results import action_boundary
from .workflow import (
    APPROVAL_MACHINE,
    APPROVAL_STATUS_APPROVED,
    APPROVAL_STATUS_DECLINED,
    APPROVAL_STATUS_PENDING,
)


ACTION_APPROVE = "approve"
ACTION_DECLINE = "decline"

RUN_EXPENSE_CATEGORY = "Run Expense"

COLLECTION_METHODS = {PAYMENT_METHOD_CASH, PAYMENT_METHOD_POS}


def _require_amount(amount) -> float:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
        raise ValidationError("Amount must be a positive number.")
    return float(amount)


def _is_real_run(run_id: str | None) -> bool:
    return bool(run_id) and not run_id.startswith(POS_SALE_RUN_PREFIX)


def _load_driver(driver_id: str) -> Staff:
    driver = db.session.get(Staff, driver_id)
    if not driver:
        raise NotFoundError("Operating staff not found.")
    return driver


@action_boundary("record debt payment")
def record_debt_payment_for_run(
    run_id: str,
    customer_id: str,
    customer_name: str | None,
    driver_id: str,
    amount: float,
    payment_method: str,
):
    """Queue a customer's debt repayment, collected on a run, for approval."""
    amount = _require_amount(amount)
    if payment_method not in COLLECTION_METHODS:
        raise ValidationError(f"Unsupported payment method: {payment_method}")
    if not customer_id or customer_id == WALK_IN_CUSTOMER_ID:
        raise ValidationError("Debt payments need a registered customer.")

    def _op():
        driver = _load_driver(driver_id)
        customer = db.session.get(Customer, customer_id)
        if not customer:
            raise NotFoundError("Customer not found.")

        confirmation = PaymentConfirmation(
            run_id=run_id,
            customer_id=customer.id,
            customer_name=customer_name or customer.name,
            items=[],
            amount=amount,
            driver_id=driver.staff_id,
            driver_name=driver.name,
            date=utcnow(),
            status=APPROVAL_STATUS_PENDING,
            payment_method=payment_method,
            is_debt_payment=True,
        )
        db.session.add(confirmation)
        db.session.flush()
        return confirmation.id

    confirmation_id = run_in_transaction(_op)
    return {"confirmationId": confirmation_id}


@action_boundary("log run expense")
def log_run_expense(run_id: str, driver_id: str, amount: float, category: str | None, description: str | None):
    """Queue a cash expense paid out of a run's takings for approval."""
    amount = _require_amount(amount)

    def _op():
        driver = _load_driver(driver_id)
        confirmation = PaymentConfirmation(
            run_id=run_id,
            items=[],
            amount=amount,
            driver_id=driver.staff_id,
            driver_name=driver.name,
            date=utcnow(),
            status=APPROVAL_STATUS_PENDING,
            payment_method=PAYMENT_METHOD_CASH,
            is_expense=True,
            expense_details={"category": category, "description": description},
        )
        db.session.add(confirmation)
        db.session.flush()
        return confirmation.id

    confirmation_id = run_in_transaction(_op)
    return {"confirmationId": confirmation_id}


def _post_approval(confirmation: PaymentConfirmation) -> None:
    if _is_real_run(confirmation.run_id):
        run = lock_for_update(db.session.query(Transfer).filter_by(id=confirmation.run_id)).first()
        if run is not None:
            run.total_collected = (run.total_collected or 0.0) + confirmation.amount

    if confirmation.is_debt_payment and confirmation.customer_id:
        customer = lock_for_update(
            db.session.query(Customer).filter_by(id=confirmation.customer_id)
        ).first()
        if customer is None:
            raise NotFoundError("Customer not found.")
        customer.amount_paid = (customer.amount_paid or 0.0) + confirmation.amount
    elif confirmation.is_expense:
        details = confirmation.expense_details or {}
        db.session.add(IndirectCost(
            category=details.get("category") or RUN_EXPENSE_CATEGORY,
            description=details.get("description") or f"Expense for run {confirmation.run_id}",
            amount=confirmation.amount,
            date=utcnow(),
            details=[{"name": confirmation.driver_name, "amount": confirmation.amount}],
        ))
    else:
        db.session.add(Order(
            sales_run_id=confirmation.run_id,
            customer_id=confirmation.customer_id or WALK_IN_CUSTOMER_ID,
            customer_name=confirmation.customer_name,
            items=list(confirmation.items or []),
            total=confirmation.amount,
            payment_method=confirmation.payment_method,
            date=utcnow(),
            staff_id=confirmation.driver_id,
            staff_name=confirmation.driver_name,
            is_debt_payment=False,
        ))


@action_boundary("process payment confirmation")
def handle_payment_confirmation(confirmation_id: str, action: str):
    """Approve or decline a pending confirmation. Declining has no side effect."""
    if action not in (ACTION_APPROVE, ACTION_DECLINE):
        raise ValidationError(f"Unknown action: {action}")
    target = APPROVAL_STATUS_APPROVED if action == ACTION_APPROVE else APPROVAL_STATUS_DECLINED

    def _op():
        confirmation = lock_for_update(
            db.session.query(PaymentConfirmation).filter_by(id=confirmation_id)
        ).first()
        if confirmation is None:
            raise NotFoundError(f"Failed to {action} payment. Confirmation not found.")
        if confirmation.status != APPROVAL_STATUS_PENDING:
            raise InvalidStateError(
                f"Failed to {action} payment. This confirmation has already been processed."
            )
        APPROVAL_MACHINE.require(confirmation.status, target)

        confirmation.status = target
        if target == APPROVAL_STATUS_APPROVED:
            _post_approval(confirmation)
        db.session.flush()
        return confirmation.status

    status = run_in_transaction(_op)
    return {"status": status}


def get_payment_confirmations(status: str | None = None) -> list[dict]:
    query = db.session.query(PaymentConfirmation)
    if status:
        query = query.filter_by(status=status)
    return [c.to_dict() for c in query.order_by(PaymentConfirmation.date.desc()).all()]
