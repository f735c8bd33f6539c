# Overview: Service-layer operations for the card/transfer payment gateway (Paystack).

"""
Checkout happens in the browser; the server only initializes transactions
and verifies them afterwards. A verified transaction is finalized according
to the metadata attached at initialization:

- isPosSale      -> pos_sale with method Paystack
- isDebtPayment  -> credit run totalCollected and customer amountPaid
- runId          -> sell_to_customer with method Paystack

Amounts travel to and from the gateway in minor units (kobo).
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from flask import current_app

from ..extensions import db
from ..models import Customer, Staff, Transfer
from ..models.sales import PAYMENT_METHOD_PAYSTACK, WALK_IN_CUSTOMER_ID
from ..time_utils import parse_iso_datetime
from . import sales_service
from .concurrency import lock_for_update, run_in_transaction
from .errors import NotFoundError, PaymentGatewayError, ValidationError
from .results import ActionResult, action_boundary


class PaystackClient:
    """
    Minimal Paystack REST client.

    verify() returns a normalized dict:
    {status, amount (major units), metadata, paid_at, message}
    """

    def __init__(self, secret_key: str, base_url: str = "https://api.paystack.co", timeout: float = 15.0):
        if not secret_key:
            raise PaymentGatewayError("Paystack secret key is not configured.")
        self.base_url = base_url.rstrip("/")
        self.secret_key = secret_key
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "PaystackClient":
        config = current_app.config
        return cls(
            config.get("PAYSTACK_SECRET_KEY"),
            config.get("PAYSTACK_BASE_URL", "https://api.paystack.co"),
            config.get("PAYSTACK_TIMEOUT_SECONDS", 15.0),
        )

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> dict:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.request(
                    method, f"{self.base_url}{path}", headers=self._headers(), json=json,
                )
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            current_app.logger.warning("Paystack %s %s failed: %s", method, path, exc)
            raise PaymentGatewayError("Could not reach the payment gateway.") from exc

    def initialize(self, *, email: str, amount: float, metadata: dict) -> str:
        body = self._request("POST", "/transaction/initialize", json={
            "email": email,
            "amount": int(round(amount * 100)),
            "metadata": metadata,
        })
        if not body.get("status"):
            raise PaymentGatewayError(body.get("message") or "Payment initialization failed.")
        return body["data"]["reference"]

    def verify(self, reference: str) -> dict[str, Any]:
        body = self._request("GET", f"/transaction/verify/{reference}")
        data = body.get("data") or {}
        return {
            "status": data.get("status") if body.get("status") else "failed",
            "amount": (data.get("amount") or 0) / 100,
            "metadata": data.get("metadata"),
            "paid_at": data.get("paid_at") or data.get("transaction_date"),
            "message": body.get("message"),
        }


@action_boundary("initialize payment")
def initialize_payment(
    *,
    email: str,
    total: float,
    staff_id: str,
    items,
    customer_name: str | None = None,
    customer_id: str | None = None,
    run_id: str | None = None,
    is_pos_sale: bool = False,
    is_debt_payment: bool = False,
    client=None,
):
    """Start a gateway transaction and return its reference for the browser checkout."""
    if not email:
        raise ValidationError("Customer email is required for card payments.")
    staff = db.session.get(Staff, staff_id)
    metadata = {
        "customer_name": customer_name,
        "staff_id": staff_id,
        "staff_name": staff.name if staff else "Unknown",
        "cart": items or [],
        "isPosSale": bool(is_pos_sale),
        "isDebtPayment": bool(is_debt_payment),
        "runId": run_id,
        "customerId": customer_id,
    }
    client = client or PaystackClient.from_config()
    return {"reference": client.initialize(email=email, amount=total, metadata=metadata)}


@action_boundary("finalize payment")
def _credit_debt_payment(run_id: str, customer_id: str, amount: float, reference: str):
    def _op():
        run = lock_for_update(db.session.query(Transfer).filter_by(id=run_id)).first()
        if run is None:
            raise NotFoundError("Sales run not found.")
        customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
        if customer is None:
            raise NotFoundError("Customer not found.")
        run.total_collected = (run.total_collected or 0.0) + amount
        customer.amount_paid = (customer.amount_paid or 0.0) + amount

    run_in_transaction(_op)
    return {"orderId": f"debt-payment-{reference}"}


def verify_and_finalize_order(reference: str, verifier=None) -> ActionResult:
    """
    Verify a gateway transaction and record what it paid for.

    verifier is anything with verify(reference) -> {status, amount, metadata,
    paid_at, message}; it defaults to the configured PaystackClient.
    """
    try:
        verifier = verifier or PaystackClient.from_config()
        verification = verifier.verify(reference)
    except PaymentGatewayError as exc:
        return ActionResult.failure(str(exc), exc.error_code)

    if verification.get("status") != "success":
        return ActionResult.failure(
            verification.get("message") or "Payment verification failed.",
            PaymentGatewayError.error_code,
        )

    metadata = verification.get("metadata")
    if not metadata:
        return ActionResult.failure(
            "Transaction metadata is missing or corrupt.", ValidationError.error_code,
        )

    amount = verification.get("amount") or 0.0
    paid_at = verification.get("paid_at")
    if isinstance(paid_at, str):
        try:
            paid_at = parse_iso_datetime(paid_at)
        except ValueError:
            current_app.logger.warning("Unparseable paid_at %r for %s", paid_at, reference)
            return ActionResult.failure(
                "Transaction payment date is invalid.", ValidationError.error_code,
            )

    if metadata.get("isPosSale"):
        return sales_service.pos_sale(
            metadata.get("cart"),
            metadata.get("staff_id"),
            metadata.get("staff_name"),
            metadata.get("customer_name"),
            amount,
            PAYMENT_METHOD_PAYSTACK,
            paid_at,
        )

    if metadata.get("isDebtPayment"):
        if not metadata.get("runId") or not metadata.get("customerId"):
            return ActionResult.failure(
                "Metadata for debt payment is incomplete.", ValidationError.error_code,
            )
        return _credit_debt_payment(metadata["runId"], metadata["customerId"], amount, reference)

    if metadata.get("runId"):
        return sales_service.sell_to_customer(
            metadata["runId"],
            metadata.get("cart"),
            metadata.get("customerId") or WALK_IN_CUSTOMER_ID,
            metadata.get("customer_name"),
            PAYMENT_METHOD_PAYSTACK,
            metadata.get("staff_id"),
            amount,
        )

    return ActionResult.failure(
        "Could not determine transaction type from metadata.", ValidationError.error_code,
    )
