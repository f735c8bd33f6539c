# Overview: Service-layer operations for ingredient supply; purchase requests and supplier payments.

from __future__ import annotations

from ..extensions import db
from ..models import DirectCost, Ingredient, IndirectCost, IngredientStockLog, Supplier, SupplyRequest
from ..time_utils import utcnow
from . import stock_service
from .concurrency import lock_for_update, run_in_transaction
from .errors import InvalidStateError, NotFoundError, ValidationError
from .results import action_boundary
from .workflow import (
    APPROVAL_MACHINE,
    APPROVAL_STATUS_APPROVED,
    APPROVAL_STATUS_DECLINED,
    APPROVAL_STATUS_PENDING,
)


INGREDIENTS_COST_CATEGORY = "Ingredients"
CREDITOR_PAYMENTS_CATEGORY = "Creditor Payments"

ALREADY_PROCESSED = "Request not found or already processed."


def _positive(value, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValidationError(f"{label} must be a positive number.")
    return float(value)


def _load_pending_request(request_id: str, target: str) -> SupplyRequest:
    request = lock_for_update(db.session.query(SupplyRequest).filter_by(id=request_id)).first()
    if request is None or request.status != APPROVAL_STATUS_PENDING:
        raise InvalidStateError(ALREADY_PROCESSED)
    APPROVAL_MACHINE.require(request.status, target, ALREADY_PROCESSED)
    return request


@action_boundary("create stock request")
def request_stock_increase(ingredient_id: str, quantity: float, supplier_id: str, user):
    quantity = _positive(quantity, "Quantity")

    def _op():
        ingredient = db.session.get(Ingredient, ingredient_id)
        supplier = db.session.get(Supplier, supplier_id)
        if not ingredient or not supplier:
            raise NotFoundError("Invalid ingredient or supplier.")

        request = SupplyRequest(
            ingredient_id=ingredient.id,
            ingredient_name=ingredient.name,
            quantity=quantity,
            supplier_id=supplier.id,
            supplier_name=supplier.name,
            requester_id=user.staff_id,
            requester_name=user.name,
            status=APPROVAL_STATUS_PENDING,
            request_date=utcnow(),
        )
        db.session.add(request)
        db.session.flush()
        return request.id

    request_id = run_in_transaction(_op)
    return {"requestId": request_id}


@action_boundary("approve stock increase")
def approve_stock_increase(request_id: str, cost_per_unit: float, total_cost: float, user):
    """
    Receive a supply request into stock.

    Adds the quantity to the ingredient, books the cost against the supplier
    (amountOwed) and as a direct cost, and logs the stock movement, all in
    one transaction.
    """
    cost_per_unit = _positive(cost_per_unit, "Cost per unit")
    total_cost = _positive(total_cost, "Total cost")

    def _op():
        request = _load_pending_request(request_id, APPROVAL_STATUS_APPROVED)
        now = utcnow()

        request.status = APPROVAL_STATUS_APPROVED
        request.cost_per_unit = cost_per_unit
        request.total_cost = total_cost
        request.approver_id = user.staff_id
        request.approver_name = user.name
        request.approved_date = now

        ingredient = stock_service.add_ingredient(request.ingredient_id, request.quantity)
        ingredient.cost_per_unit = cost_per_unit

        supplier = lock_for_update(db.session.query(Supplier).filter_by(id=request.supplier_id)).first()
        if supplier is None:
            raise NotFoundError("Supplier not found.")
        supplier.amount_owed = (supplier.amount_owed or 0.0) + total_cost

        db.session.add(DirectCost(
            category=INGREDIENTS_COST_CATEGORY,
            description=f"Purchase of {request.ingredient_name} from {request.supplier_name}",
            quantity=request.quantity,
            total=total_cost,
            date=now,
        ))
        db.session.add(IngredientStockLog(
            ingredient_id=request.ingredient_id,
            ingredient_name=request.ingredient_name,
            change=request.quantity,
            reason=f"Purchase from {request.supplier_name} (Approved)",
            date=now,
            staff_name=request.requester_name,
            log_ref_id=request.id,
        ))
        db.session.flush()

    run_in_transaction(_op)
    return {"requestId": request_id}


@action_boundary("decline stock increase")
def decline_stock_increase(request_id: str, user):
    def _op():
        request = _load_pending_request(request_id, APPROVAL_STATUS_DECLINED)
        request.status = APPROVAL_STATUS_DECLINED
        request.approver_id = user.staff_id
        request.approver_name = user.name
        request.approved_date = utcnow()

    run_in_transaction(_op)
    return {"requestId": request_id}


@action_boundary("log payment")
def log_supplier_payment(supplier_id: str, amount: float):
    amount = _positive(amount, "Amount")

    def _op():
        supplier = lock_for_update(db.session.query(Supplier).filter_by(id=supplier_id)).first()
        if supplier is None:
            raise NotFoundError("Supplier not found.")
        supplier.amount_paid = (supplier.amount_paid or 0.0) + amount
        db.session.add(IndirectCost(
            category=CREDITOR_PAYMENTS_CATEGORY,
            description=f"Payment to supplier: {supplier.name}",
            amount=amount,
            date=utcnow(),
        ))

    run_in_transaction(_op)
    return {"supplierId": supplier_id}


def get_pending_supply_requests() -> list[dict]:
    requests = (
        db.session.query(SupplyRequest)
        .filter_by(status=APPROVAL_STATUS_PENDING)
        .order_by(SupplyRequest.request_date.desc())
        .all()
    )
    return [r.to_dict() for r in requests]


def get_suppliers() -> list[dict]:
    return [s.to_dict() for s in db.session.query(Supplier).order_by(Supplier.name).all()]


def get_ingredients() -> list[dict]:
    return [i.to_dict() for i in db.session.query(Ingredient).order_by(Ingredient.name).all()]
