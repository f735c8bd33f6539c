from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .common import new_id


WALK_IN_CUSTOMER_ID = "walk-in"

PAYMENT_METHOD_CASH = "Cash"
PAYMENT_METHOD_POS = "POS"
PAYMENT_METHOD_CREDIT = "Credit"
PAYMENT_METHOD_PAYSTACK = "Paystack"

PAYMENT_METHODS = [
    PAYMENT_METHOD_CASH,
    PAYMENT_METHOD_POS,
    PAYMENT_METHOD_CREDIT,
    PAYMENT_METHOD_PAYSTACK,
]

# Sales recorded outside a sales run carry salesRunId "pos-sale-{orderId}"
POS_SALE_RUN_PREFIX = "pos-sale-"


class Customer(db.Model):
    """
    Credit customer served on sales runs.

    amountOwed grows with Credit sales; amountPaid grows with approved debt
    payments. The outstanding balance is amountOwed - amountPaid.
    """
    __tablename__ = "customers"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)

    amount_owed = db.Column(db.Float, nullable=False, default=0.0)
    amount_paid = db.Column(db.Float, nullable=False, default=0.0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "amountOwed": self.amount_owed,
            "amountPaid": self.amount_paid,
        }


class Order(db.Model):
    """
    Completed sale. Written once and never updated; only the developer
    run-reset tool deletes orders.

    items: [{productId, name, quantity, price, costPrice?}]
    """
    __tablename__ = "orders"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    sales_run_id = db.Column(db.String(64), nullable=True, index=True)
    customer_id = db.Column(db.String(32), nullable=False, default=WALK_IN_CUSTOMER_ID, index=True)
    customer_name = db.Column(db.String(255), nullable=True)
    items = db.Column(db.JSON, nullable=False, default=list)
    total = db.Column(db.Float, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False, index=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    staff_id = db.Column(db.String(32), nullable=False, index=True)
    staff_name = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="Completed")
    is_debt_payment = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "salesRunId": self.sales_run_id,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "items": list(self.items or []),
            "total": self.total,
            "paymentMethod": self.payment_method,
            "date": to_utc_z(self.date),
            "staffId": self.staff_id,
            "staffName": self.staff_name,
            "status": self.status,
            "isDebtPayment": self.is_debt_payment,
        }


class PaymentConfirmation(db.Model):
    """
    Cash/POS collection, debt payment, or run expense awaiting approval.

    LIFECYCLE: pending -> approved | declined (exactly one transition)
    """
    __tablename__ = "payment_confirmations"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    run_id = db.Column(db.String(64), nullable=True, index=True)
    customer_id = db.Column(db.String(32), nullable=True)
    customer_name = db.Column(db.String(255), nullable=True)
    items = db.Column(db.JSON, nullable=False, default=list)
    amount = db.Column(db.Float, nullable=False)
    driver_id = db.Column(db.String(32), nullable=False)
    driver_name = db.Column(db.String(255), nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    # pending, approved, declined
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    payment_method = db.Column(db.String(16), nullable=False)
    is_debt_payment = db.Column(db.Boolean, nullable=False, default=False)
    is_expense = db.Column(db.Boolean, nullable=False, default=False)
    expense_details = db.Column(db.JSON, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "runId": self.run_id,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "items": list(self.items or []),
            "amount": self.amount,
            "driverId": self.driver_id,
            "driverName": self.driver_name,
            "date": to_utc_z(self.date),
            "status": self.status,
            "paymentMethod": self.payment_method,
            "isDebtPayment": self.is_debt_payment,
            "isExpense": self.is_expense,
            "expenseDetails": self.expense_details,
        }


class DailySales(db.Model):
    """
    Per-day sales aggregate keyed by calendar day (yyyy-MM-dd).

    Every writer adds to the running figures; rows are created on first use.
    """
    __tablename__ = "sales"

    id = db.Column(db.String(10), primary_key=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    cash = db.Column(db.Float, nullable=False, default=0.0)
    pos = db.Column(db.Float, nullable=False, default=0.0)
    transfer = db.Column(db.Float, nullable=False, default=0.0)
    credit_sales = db.Column(db.Float, nullable=False, default=0.0)
    shortage = db.Column(db.Float, nullable=False, default=0.0)
    total = db.Column(db.Float, nullable=False, default=0.0)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "description": self.description,
            "cash": self.cash,
            "pos": self.pos,
            "transfer": self.transfer,
            "creditSales": self.credit_sales,
            "shortage": self.shortage,
            "total": self.total,
        }
