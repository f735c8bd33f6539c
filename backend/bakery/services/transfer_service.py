# backend/bakery/services/transfer_service.py
"""
Transfer workflow: moving stock between central inventory and staff.

WHY: Stock changes hands only when the recipient acknowledges a transfer,
so every movement is attributable and either fully applied or not at all.

KINDS (fixed at creation):
- restock:           central -> staff, completed on acceptance
- sales_run:         central -> driver/showroom, active until settled
- return:            staff -> central, unsold stock from a sales run
- production_return: baker -> central, finished goods from a production batch

LIFECYCLE:
1. pending: created, no stock moved
2. accept: stock moves; restock/production_return -> completed, sales_run -> active
3. return_stock on an active run: new return transfer (pending_return),
   run -> pending_return; accepting it: run -> return_completed
4. complete_run: active -> completed once cash is settled
5. decline: pending/pending_return -> cancelled
"""
from __future__ import annotations

from ..extensions import db
from ..models import Customer, Order, PaymentConfirmation, PersonalStock, Product, Staff, Transfer
from ..models.documents import (
    TRANSFER_KIND_PRODUCTION_RETURN,
    TRANSFER_KIND_RESTOCK,
    TRANSFER_KIND_RETURN,
    TRANSFER_KIND_SALES_RUN,
)
from ..models.sales import PAYMENT_METHOD_CREDIT
from ..time_utils import utcnow
from . import stock_service
from .concurrency import lock_for_update, run_in_transaction
from .daily_sales_service import add_to_daily_sales
from .errors import InvalidStateError, NotFoundError, ValidationError
from .results import action_boundary
from .workflow import (
    APPROVAL_STATUS_APPROVED,
    TRANSFER_MACHINE,
    TRANSFER_STATUS_ACTIVE,
    TRANSFER_STATUS_CANCELLED,
    TRANSFER_STATUS_COMPLETED,
    TRANSFER_STATUS_PENDING,
    TRANSFER_STATUS_PENDING_RETURN,
    TRANSFER_STATUS_RETURN_COMPLETED,
)


ACTION_ACCEPT = "accept"
ACTION_DECLINE = "decline"

# Returns not tied to a sales run document
RETURN_SENTINEL_RUN_IDS = {"showroom-return", "delivery-return"}

PRODUCTION_RETURN_NOTE_PREFIX = "Return from production batch"

# Differences below this are rounding noise, not a cash shortage
SHORTAGE_TOLERANCE = 0.01

ALREADY_PROCESSED = "This transfer has already been processed."


def _load_transfer_for_update(transfer_id: str) -> Transfer:
    transfer = lock_for_update(db.session.query(Transfer).filter_by(id=transfer_id)).first()
    if not transfer:
        raise NotFoundError("Transfer does not exist.")
    return transfer


def _load_run_for_update(run_id: str) -> Transfer:
    run = lock_for_update(db.session.query(Transfer).filter_by(id=run_id)).first()
    if not run:
        raise NotFoundError("Sales run not found.")
    return run


def _load_staff(staff_id: str, message: str) -> Staff:
    staff = db.session.get(Staff, staff_id)
    if not staff:
        raise NotFoundError(message)
    return staff


def _item_lines(items) -> list[dict]:
    return [
        {
            "productId": item["productId"],
            "productName": item.get("productName") or item.get("name") or item["productId"],
            "quantity": item["quantity"],
            **({"price": item["price"]} if item.get("price") is not None else {}),
        }
        for item in items
    ]


# =============================================================================
# CREATION
# =============================================================================

@action_boundary("initiate transfer")
def initiate_transfer(
    items,
    from_staff,
    to_staff_id: str,
    is_sales_run: bool = False,
    notes: str | None = None,
):
    """
    Create a pending transfer from the storekeeper to a staff member.

    No stock moves here: central stock is checked when the recipient
    accepts. For sales runs, totalRevenue is fixed now from current prices.
    """
    lines = _item_lines(stock_service.validate_items(items))

    def _op():
        to_staff = _load_staff(to_staff_id, "Receiving staff member not found.")
        if to_staff.staff_id == from_staff.staff_id:
            raise ValidationError("Cannot transfer stock to yourself.")

        total_revenue = 0.0
        if is_sales_run:
            product_ids = [line["productId"] for line in lines]
            prices = {
                p.id: p.price or 0.0
                for p in db.session.query(Product).filter(Product.id.in_(product_ids)).all()
            }
            for line in lines:
                line["price"] = prices.get(line["productId"], 0.0)
                total_revenue += line["price"] * line["quantity"]

        transfer = Transfer(
            from_staff_id=from_staff.staff_id,
            from_staff_name=from_staff.name,
            to_staff_id=to_staff.staff_id,
            to_staff_name=to_staff.name,
            items=lines,
            date=utcnow(),
            status=TRANSFER_STATUS_PENDING,
            kind=TRANSFER_KIND_SALES_RUN if is_sales_run else TRANSFER_KIND_RESTOCK,
            is_sales_run=bool(is_sales_run),
            notes=notes,
            total_revenue=total_revenue,
            total_collected=0.0,
        )
        db.session.add(transfer)
        db.session.flush()
        return transfer.id

    transfer_id = run_in_transaction(_op)
    return {"transferId": transfer_id}


# =============================================================================
# ACKNOWLEDGEMENT
# =============================================================================

def _decline(transfer: Transfer) -> None:
    if transfer.status not in (TRANSFER_STATUS_PENDING, TRANSFER_STATUS_PENDING_RETURN):
        raise InvalidStateError(ALREADY_PROCESSED)
    TRANSFER_MACHINE.require(transfer.status, TRANSFER_STATUS_CANCELLED, ALREADY_PROCESSED)

    if transfer.kind == TRANSFER_KIND_RETURN:
        # Stock left the returner's hands at return time; give it back
        for item in transfer.items:
            stock_service.add_personal_stock(
                transfer.from_staff_id, item["productId"], item.get("productName"), item["quantity"],
            )

    if transfer.original_run_id and transfer.original_run_id not in RETURN_SENTINEL_RUN_IDS:
        run = lock_for_update(db.session.query(Transfer).filter_by(id=transfer.original_run_id)).first()
        if run and TRANSFER_MACHINE.can(run.status, TRANSFER_STATUS_ACTIVE):
            run.status = TRANSFER_STATUS_ACTIVE

    transfer.status = TRANSFER_STATUS_CANCELLED


def _accept_return(transfer: Transfer) -> None:
    TRANSFER_MACHINE.require(transfer.status, TRANSFER_STATUS_COMPLETED, ALREADY_PROCESSED)

    for item in transfer.items:
        stock_service.add_central_product(item["productId"], item["quantity"])

    if transfer.original_run_id and transfer.original_run_id not in RETURN_SENTINEL_RUN_IDS:
        run = lock_for_update(db.session.query(Transfer).filter_by(id=transfer.original_run_id)).first()
        if run and TRANSFER_MACHINE.can(run.status, TRANSFER_STATUS_RETURN_COMPLETED):
            run.status = TRANSFER_STATUS_RETURN_COMPLETED

    now = utcnow()
    transfer.status = TRANSFER_STATUS_COMPLETED
    transfer.time_received = now
    transfer.time_completed = now


def _accept_production_return(transfer: Transfer) -> None:
    TRANSFER_MACHINE.require(transfer.status, TRANSFER_STATUS_COMPLETED, ALREADY_PROCESSED)

    for item in transfer.items:
        stock_service.add_central_product(item["productId"], item["quantity"])

    now = utcnow()
    transfer.status = TRANSFER_STATUS_COMPLETED
    transfer.time_received = now
    transfer.time_completed = now


def _accept_outbound(transfer: Transfer) -> None:
    new_status = TRANSFER_STATUS_ACTIVE if transfer.is_sales_run else TRANSFER_STATUS_COMPLETED
    TRANSFER_MACHINE.require(transfer.status, new_status, ALREADY_PROCESSED)

    items = list(transfer.items)
    # Every line is checked before any line is written
    products = stock_service.require_central_products(items)
    stock_service.take_central_products(items, products)
    for item in items:
        stock_service.add_personal_stock(
            transfer.to_staff_id, item["productId"], item.get("productName"), item["quantity"],
        )

    now = utcnow()
    transfer.status = new_status
    transfer.time_received = now
    transfer.time_completed = None if transfer.is_sales_run else now


@action_boundary("acknowledge transfer")
def acknowledge_transfer(transfer_id: str, action: str):
    """
    Accept or decline a transfer addressed to the caller.

    Exactly one acceptance branch applies, chosen by status and kind:
    - return (pending_return): stock back to central, run -> return_completed
    - production_return (pending): finished goods into central
    - restock / sales_run (pending): central -> recipient's personal stock
    """
    if action not in (ACTION_ACCEPT, ACTION_DECLINE):
        raise ValidationError(f"Unknown action: {action}")

    def _op():
        transfer = _load_transfer_for_update(transfer_id)

        if action == ACTION_DECLINE:
            _decline(transfer)
        elif transfer.status == TRANSFER_STATUS_PENDING_RETURN and transfer.kind == TRANSFER_KIND_RETURN:
            _accept_return(transfer)
        elif transfer.status == TRANSFER_STATUS_PENDING and transfer.kind == TRANSFER_KIND_PRODUCTION_RETURN:
            _accept_production_return(transfer)
        elif transfer.status == TRANSFER_STATUS_PENDING and transfer.kind in (
            TRANSFER_KIND_RESTOCK, TRANSFER_KIND_SALES_RUN,
        ):
            _accept_outbound(transfer)
        else:
            raise InvalidStateError(ALREADY_PROCESSED)

        db.session.flush()
        return transfer.status

    status = run_in_transaction(_op)
    return {"status": status}


# =============================================================================
# SALES RUN SETTLEMENT
# =============================================================================

@action_boundary("return stock")
def return_stock(run_id: str, items, from_staff, to_staff_id: str):
    """
    Send unsold stock back to the storekeeper.

    Unlike outbound transfers, the returner's personal stock is decremented
    immediately; central stock is credited when the storekeeper accepts.
    """
    if not items:
        raise ValidationError("No items selected to return.")
    lines = _item_lines(stock_service.validate_items(items))

    def _op():
        to_staff = _load_staff(to_staff_id, "Receiving staff member not found.")

        rows = stock_service.require_personal_stock(from_staff.staff_id, lines)

        if run_id not in RETURN_SENTINEL_RUN_IDS:
            run = _load_run_for_update(run_id)
            TRANSFER_MACHINE.require(
                run.status,
                TRANSFER_STATUS_PENDING_RETURN,
                "Only an active sales run can return stock.",
            )
            run.status = TRANSFER_STATUS_PENDING_RETURN

        stock_service.take_personal_stock(lines, rows)

        transfer = Transfer(
            from_staff_id=from_staff.staff_id,
            from_staff_name=from_staff.name,
            to_staff_id=to_staff.staff_id,
            to_staff_name=to_staff.name,
            items=lines,
            date=utcnow(),
            status=TRANSFER_STATUS_PENDING_RETURN,
            kind=TRANSFER_KIND_RETURN,
            is_sales_run=False,
            notes=f"Return from Sales Run {run_id}",
            original_run_id=run_id,
            total_revenue=0.0,
            total_collected=0.0,
        )
        db.session.add(transfer)
        db.session.flush()
        return transfer.id

    transfer_id = run_in_transaction(_op)
    return {"transferId": transfer_id}


def _credit_sales_for_run(run_id: str) -> float:
    orders = db.session.query(Order).filter_by(sales_run_id=run_id, payment_method=PAYMENT_METHOD_CREDIT).all()
    return sum(order.total for order in orders)


@action_boundary("complete sales run")
def complete_run(run_id: str):
    """
    Close an active sales run.

    expectedCash = totalRevenue - creditSales
    shortage     = expectedCash - totalCollected
    A shortage beyond rounding is added to the run day's sales aggregate.
    """
    def _op():
        run = _load_run_for_update(run_id)
        if run.status != TRANSFER_STATUS_ACTIVE:
            raise InvalidStateError("This run is not active or has already been completed.")
        TRANSFER_MACHINE.require(run.status, TRANSFER_STATUS_COMPLETED)

        credit_sales = _credit_sales_for_run(run_id)
        expected_cash = (run.total_revenue or 0.0) - credit_sales
        shortage = expected_cash - (run.total_collected or 0.0)

        if abs(shortage) > SHORTAGE_TOLERANCE:
            add_to_daily_sales(run.date, shortage=shortage)

        run.status = TRANSFER_STATUS_COMPLETED
        run.time_completed = utcnow()
        return {
            "creditSales": credit_sales,
            "expectedCash": expected_cash,
            "shortage": shortage,
        }

    return run_in_transaction(_op)


# =============================================================================
# DEVELOPER TOOLS (bypass the state machine on purpose)
# =============================================================================

@action_boundary("reset sales run")
def reset_sales_run(run_id: str):
    """
    Undo all sales activity on a run: delete its orders and payment
    confirmations, reverse the customer balances they produced, and set the
    run back to active. Stock is not touched.
    """
    def _op():
        run = _load_run_for_update(run_id)

        orders = db.session.query(Order).filter_by(sales_run_id=run_id).all()
        confirmations = db.session.query(PaymentConfirmation).filter_by(run_id=run_id).all()

        owed: dict[str, float] = {}
        for order in orders:
            if order.payment_method == PAYMENT_METHOD_CREDIT and order.customer_id:
                owed[order.customer_id] = owed.get(order.customer_id, 0.0) + order.total
        paid: dict[str, float] = {}
        for confirmation in confirmations:
            if (
                confirmation.is_debt_payment
                and confirmation.status == APPROVAL_STATUS_APPROVED
                and confirmation.customer_id
            ):
                paid[confirmation.customer_id] = paid.get(confirmation.customer_id, 0.0) + confirmation.amount

        for customer_id in set(owed) | set(paid):
            customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
            if customer is None:
                continue
            customer.amount_owed = (customer.amount_owed or 0.0) - owed.get(customer_id, 0.0)
            customer.amount_paid = (customer.amount_paid or 0.0) - paid.get(customer_id, 0.0)

        for order in orders:
            db.session.delete(order)
        for confirmation in confirmations:
            db.session.delete(confirmation)

        run.status = TRANSFER_STATUS_ACTIVE
        run.total_collected = 0.0
        run.time_completed = None
        return {"deletedOrders": len(orders), "deletedConfirmations": len(confirmations)}

    return run_in_transaction(_op)


@action_boundary("remove stock from staff")
def remove_stock_from_staff(staff_id: str, product_id: str, quantity: int):
    """Administrative correction: unchecked decrement of a staff member's stock."""
    if not staff_id or not product_id or not quantity or quantity <= 0:
        raise ValidationError("Invalid staff ID, product ID, or quantity.")

    def _op():
        row = stock_service.get_personal_stock_for_update(staff_id, product_id)
        if row is None:
            raise NotFoundError("Stock record not found for this staff member.")
        row.stock = (row.stock or 0) - quantity
        return {"stock": row.stock}

    return run_in_transaction(_op)


# =============================================================================
# QUERIES
# =============================================================================

def _with_current_prices(transfer: Transfer) -> dict:
    data = transfer.to_dict()
    product_ids = [item["productId"] for item in data["items"]]
    products = {
        p.id: p for p in db.session.query(Product).filter(Product.id.in_(product_ids)).all()
    } if product_ids else {}

    total_value = 0.0
    items = []
    for item in data["items"]:
        product = products.get(item["productId"])
        price = item.get("price")
        if price is None:
            price = product.price if product else 0.0
        total_value += price * item["quantity"]
        items.append({**item, "price": price})
    data["items"] = items
    data["totalValue"] = total_value
    return data


def get_pending_transfers_for_staff(staff_id: str) -> list[dict]:
    transfers = (
        db.session.query(Transfer)
        .filter_by(to_staff_id=staff_id, status=TRANSFER_STATUS_PENDING)
        .order_by(Transfer.date.desc())
        .all()
    )
    return [_with_current_prices(t) for t in transfers]


def get_returned_stock_transfers() -> list[dict]:
    transfers = (
        db.session.query(Transfer)
        .filter_by(status=TRANSFER_STATUS_PENDING_RETURN, kind=TRANSFER_KIND_RETURN)
        .order_by(Transfer.date.desc())
        .all()
    )
    return [t.to_dict() for t in transfers]


def get_production_transfers() -> list[dict]:
    transfers = (
        db.session.query(Transfer)
        .filter_by(status=TRANSFER_STATUS_PENDING, kind=TRANSFER_KIND_PRODUCTION_RETURN)
        .order_by(Transfer.date.desc())
        .all()
    )
    return [t.to_dict() for t in transfers]


def get_completed_transfers_for_staff(staff_id: str) -> list[dict]:
    transfers = (
        db.session.query(Transfer)
        .filter(
            Transfer.to_staff_id == staff_id,
            Transfer.status.in_([
                TRANSFER_STATUS_COMPLETED,
                TRANSFER_STATUS_ACTIVE,
                TRANSFER_STATUS_PENDING_RETURN,
                TRANSFER_STATUS_RETURN_COMPLETED,
            ]),
        )
        .order_by(Transfer.date.desc())
        .all()
    )
    return [t.to_dict() for t in transfers]


def _run_summary(run: Transfer) -> dict:
    data = _with_current_prices(run)
    data["totalOutstanding"] = (run.total_revenue or 0.0) - (run.total_collected or 0.0)
    return data


def get_sales_runs(staff_id: str | None = None) -> dict:
    """Sales runs split into active (incl. pending_return) and completed."""
    query = db.session.query(Transfer).filter_by(is_sales_run=True)
    if staff_id:
        query = query.filter_by(to_staff_id=staff_id)
    runs = [_run_summary(run) for run in query.order_by(Transfer.date.desc()).all()]

    return {
        "active": [r for r in runs if r["status"] in (TRANSFER_STATUS_ACTIVE, TRANSFER_STATUS_PENDING_RETURN)],
        "completed": [
            r for r in runs
            if r["status"] in (
                TRANSFER_STATUS_COMPLETED, TRANSFER_STATUS_RETURN_COMPLETED, TRANSFER_STATUS_CANCELLED,
            )
        ],
    }


def get_sales_run_details(run_id: str) -> dict | None:
    run = db.session.get(Transfer, run_id)
    if not run:
        return None
    return _run_summary(run)


def get_staff_stock(staff_id: str) -> list[dict]:
    rows = db.session.query(PersonalStock).filter_by(staff_id=staff_id).all()
    return [row.to_dict() for row in rows]
