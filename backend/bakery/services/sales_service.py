# Overview: Service-layer operations for sales; manages run sales, POS sales and waste.

"""
Sales always decrement the seller's personal stock, never central stock.

- sell_to_customer: sale on a sales run. Cash/POS money is not counted until
  an accountant approves the PaymentConfirmation created here; Credit sales
  go straight onto the customer's balance.
- pos_sale: showroom sale outside a run, posted directly to the day's sales.
- report_waste: managers/storekeepers waste central stock, everyone else
  wastes their own stock.

Every line is checked against stock before any line is written.
"""

from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..models import Customer, Order, PaymentConfirmation, PersonalStock, Product, Staff, Transfer, WasteLog
from ..models.common import new_id
from ..models.sales import (
    PAYMENT_METHOD_CASH,
    PAYMENT_METHOD_CREDIT,
    PAYMENT_METHOD_PAYSTACK,
    PAYMENT_METHOD_POS,
    PAYMENT_METHODS,
    POS_SALE_RUN_PREFIX,
    WALK_IN_CUSTOMER_ID,
)
from ..models.staff import CENTRAL_STOCK_ROLES
from ..time_utils import utcnow
from . import stock_service
from .concurrency import lock_for_update, run_in_transaction
from .daily_sales_service import add_to_daily_sales
from .errors import NotFoundError, ValidationError
from .results import action_boundary
from .workflow import APPROVAL_STATUS_APPROVED, APPROVAL_STATUS_PENDING


# Methods whose money is held until an accountant confirms it
METHODS_NEEDING_CONFIRMATION = {PAYMENT_METHOD_CASH, PAYMENT_METHOD_POS}

POS_SALE_METHODS = {PAYMENT_METHOD_CASH, PAYMENT_METHOD_POS, PAYMENT_METHOD_PAYSTACK}

DAILY_SALES_FIELD_BY_METHOD = {
    PAYMENT_METHOD_CASH: "cash",
    PAYMENT_METHOD_POS: "pos",
    PAYMENT_METHOD_PAYSTACK: "transfer",
}


def _require_total(total) -> float:
    if isinstance(total, bool) or not isinstance(total, (int, float)) or total < 0:
        raise ValidationError("Total must be a non-negative number.")
    return float(total)


@action_boundary("complete sale")
def sell_to_customer(
    run_id: str,
    items,
    customer_id: str,
    customer_name: str | None,
    payment_method: str,
    staff_id: str,
    total: float,
):
    """Record a sale made on a sales run from the driver's personal stock."""
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"Unknown payment method: {payment_method}")
    lines = stock_service.validate_items(items)
    total = _require_total(total)
    customer_id = customer_id or WALK_IN_CUSTOMER_ID
    if payment_method == PAYMENT_METHOD_CREDIT and customer_id == WALK_IN_CUSTOMER_ID:
        raise ValidationError("Credit sales need a registered customer.")

    def _op():
        staff = db.session.get(Staff, staff_id)
        if not staff:
            raise NotFoundError("Operating staff not found.")

        run = db.session.get(Transfer, run_id)
        if not run:
            raise NotFoundError("Sales run not found.")

        customer = None
        if customer_id != WALK_IN_CUSTOMER_ID:
            customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
            if not customer:
                raise NotFoundError("Customer not found.")

        rows = stock_service.require_personal_stock(staff_id, lines)
        stock_service.take_personal_stock(lines, rows)

        now = utcnow()
        resolved_name = customer_name or (customer.name if customer else None)

        if payment_method in METHODS_NEEDING_CONFIRMATION:
            # The Order is written when an accountant approves the collection
            confirmation = PaymentConfirmation(
                run_id=run_id,
                customer_id=customer_id,
                customer_name=resolved_name,
                items=lines,
                amount=total,
                driver_id=staff_id,
                driver_name=staff.name,
                date=now,
                status=APPROVAL_STATUS_PENDING,
                payment_method=payment_method,
                is_debt_payment=False,
            )
            db.session.add(confirmation)
            db.session.flush()
            return {"orderId": None, "confirmationId": confirmation.id}

        order = Order(
            sales_run_id=run_id,
            customer_id=customer_id,
            customer_name=resolved_name,
            items=lines,
            total=total,
            payment_method=payment_method,
            date=now,
            staff_id=staff_id,
            staff_name=staff.name,
            is_debt_payment=False,
        )
        db.session.add(order)

        if payment_method == PAYMENT_METHOD_CREDIT:
            customer.amount_owed = (customer.amount_owed or 0.0) + total
        # Gateway payments were verified before this sale was recorded

        db.session.flush()
        return {"orderId": order.id, "confirmationId": None}

    return run_in_transaction(_op)


@action_boundary("process POS sale")
def pos_sale(
    items,
    staff_id: str,
    staff_name: str,
    customer_name: str | None,
    total: float,
    payment_method: str,
    date: datetime | None = None,
):
    """
    Walk-in sale from the showroom. Paid on the spot, so it goes straight
    into the day's sales aggregate under cash, pos, or transfer.
    """
    if payment_method not in POS_SALE_METHODS:
        raise ValidationError(f"Unsupported POS payment method: {payment_method}")
    lines = stock_service.validate_items(items)
    total = _require_total(total)
    order_date = date or utcnow()

    def _op():
        rows = stock_service.require_personal_stock(staff_id, lines)
        stock_service.take_personal_stock(lines, rows)

        order_id = new_id()
        db.session.add(Order(
            id=order_id,
            sales_run_id=f"{POS_SALE_RUN_PREFIX}{order_id}",
            customer_id=WALK_IN_CUSTOMER_ID,
            customer_name=customer_name,
            items=lines,
            total=total,
            payment_method=payment_method,
            date=order_date,
            staff_id=staff_id,
            staff_name=staff_name,
            is_debt_payment=False,
        ))

        add_to_daily_sales(order_date, **{DAILY_SALES_FIELD_BY_METHOD[payment_method]: total, "total": total})
        db.session.flush()
        return order_id

    order_id = run_in_transaction(_op)
    return {"orderId": order_id}


@action_boundary("report waste")
def report_waste(items, reason: str, notes: str | None, user):
    if not items or not reason:
        raise ValidationError("Please provide items and a reason for the waste.")
    lines = stock_service.validate_items(items)
    from_central = user.role in CENTRAL_STOCK_ROLES

    def _op():
        if from_central:
            products = stock_service.require_central_products(lines)
            stock_service.take_central_products(lines, products)
        else:
            rows = stock_service.require_personal_stock(user.staff_id, lines)
            stock_service.take_personal_stock(lines, rows)

        now = utcnow()
        for line in lines:
            db.session.add(WasteLog(
                product_id=line["productId"],
                product_name=line.get("productName") or "Unknown",
                product_category=line.get("productCategory") or "Unknown",
                quantity=line["quantity"],
                reason=reason,
                notes=notes or "",
                staff_id=user.staff_id,
                staff_name=user.name,
                date=now,
            ))
        db.session.flush()

    run_in_transaction(_op)
    return {"wasted": sum(line["quantity"] for line in lines)}


# =============================================================================
# QUERIES
# =============================================================================

def get_products_for_staff(staff_id: str) -> list[dict]:
    rows = db.session.query(PersonalStock).filter_by(staff_id=staff_id).all()
    if not rows:
        return []
    products = {
        p.id: p
        for p in db.session.query(Product).filter(Product.id.in_([r.product_id for r in rows])).all()
    }

    result = []
    for row in rows:
        product = products.get(row.product_id)
        result.append({
            "productId": row.product_id,
            "name": row.product_name,
            "stock": row.stock,
            "price": (product.price if product else 0) or 0,
            "costPrice": (product.cost_price if product else 0) or 0,
            "minPrice": (product.min_price if product else 0) or 0,
            "maxPrice": (product.max_price if product else 0) or 0,
        })
    return result


def get_orders_for_run(run_id: str) -> list[dict]:
    orders = db.session.query(Order).filter_by(sales_run_id=run_id).order_by(Order.date.desc()).all()
    return [order.to_dict() for order in orders]


def get_customers_for_run(run_id: str) -> list[dict]:
    """Per-customer totals for a run: everything sold, and what has been paid."""
    by_customer: dict[str, dict] = {}
    for order in db.session.query(Order).filter_by(sales_run_id=run_id).all():
        customer_id = order.customer_id or WALK_IN_CUSTOMER_ID
        entry = by_customer.setdefault(customer_id, {
            "customerId": customer_id,
            "customerName": order.customer_name or "Walk-in",
            "totalSold": 0.0,
            "totalPaid": 0.0,
        })
        entry["totalSold"] += order.total
        if order.payment_method != PAYMENT_METHOD_CREDIT:
            entry["totalPaid"] += order.total

    debt_payments = db.session.query(PaymentConfirmation).filter_by(
        run_id=run_id, status=APPROVAL_STATUS_APPROVED, is_debt_payment=True,
    ).all()
    for payment in debt_payments:
        if payment.customer_id in by_customer:
            by_customer[payment.customer_id]["totalPaid"] += payment.amount

    return list(by_customer.values())


def get_customers() -> list[dict]:
    return [c.to_dict() for c in db.session.query(Customer).order_by(Customer.name).all()]
