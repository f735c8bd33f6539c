"""
Payment gateway tests.

The gateway is replaced by a fake verifier; no network calls are made.
"""

import pytest

from bakery.extensions import db
from bakery.models import Customer, DailySales, Order, PaymentConfirmation, Transfer
from bakery.services import gateway_service, transfer_service
from bakery.services.errors import PaymentGatewayError
from bakery.services.gateway_service import PaystackClient
from bakery.time_utils import day_key
from conftest import item


class FakeVerifier:
    def __init__(self, status="success", amount=0.0, metadata=None, paid_at=None, message=None):
        self.response = {
            "status": status,
            "amount": amount,
            "metadata": metadata,
            "paid_at": paid_at,
            "message": message,
        }
        self.calls = []

    def verify(self, reference):
        self.calls.append(reference)
        return self.response


class FakeInitializer:
    def initialize(self, *, email, amount, metadata):
        self.last = {"email": email, "amount": amount, "metadata": metadata}
        return "ref_123"


class TestVerifyAndFinalize:

    def test_pos_sale(self, showroom, make_product, give_stock):
        bread = make_product(stock=0, price=300.0)
        give_stock(showroom, bread, 5)
        verifier = FakeVerifier(amount=600.0, paid_at="2026-03-02T09:30:00Z", metadata={
            "isPosSale": True,
            "cart": [item(bread, 2)],
            "staff_id": showroom.staff_id,
            "staff_name": showroom.name,
            "customer_name": "Walk-in",
        })

        result = gateway_service.verify_and_finalize_order("ref_pos", verifier=verifier)

        assert result.success, result.error
        assert verifier.calls == ["ref_pos"]
        order = db.session.get(Order, result["orderId"])
        assert order.payment_method == "Paystack"
        assert db.session.get(DailySales, "2026-03-02").transfer == 600.0

    def test_run_sale_creates_order_without_confirmation(self, storekeeper, driver, make_product):
        bread = make_product(stock=100, price=100.0)
        created = transfer_service.initiate_transfer([item(bread, 10)], storekeeper, driver.staff_id, is_sales_run=True)
        run_id = created["transferId"]
        transfer_service.acknowledge_transfer(run_id, "accept")
        verifier = FakeVerifier(amount=300.0, metadata={
            "runId": run_id,
            "cart": [item(bread, 3)],
            "staff_id": driver.staff_id,
        })

        result = gateway_service.verify_and_finalize_order("ref_run", verifier=verifier)

        assert result.success, result.error
        assert db.session.get(Order, result["orderId"]).sales_run_id == run_id
        assert db.session.query(PaymentConfirmation).count() == 0

    def test_debt_payment(self, storekeeper, driver, make_product, make_customer):
        bread = make_product(stock=100)
        customer = make_customer(amount_owed=900.0)
        created = transfer_service.initiate_transfer([item(bread, 1)], storekeeper, driver.staff_id, is_sales_run=True)
        run_id = created["transferId"]
        verifier = FakeVerifier(amount=450.0, metadata={
            "isDebtPayment": True,
            "runId": run_id,
            "customerId": customer.id,
        })

        result = gateway_service.verify_and_finalize_order("ref_debt", verifier=verifier)

        assert result["orderId"] == "debt-payment-ref_debt"
        assert db.session.get(Customer, customer.id).amount_paid == 450.0
        assert db.session.get(Transfer, run_id).total_collected == 450.0

    def test_failed_verification(self):
        verifier = FakeVerifier(status="failed", message="Transaction abandoned")

        result = gateway_service.verify_and_finalize_order("ref_x", verifier=verifier)

        assert result.error == "Transaction abandoned"
        assert result.error_code == "payment_gateway_error"

    def test_missing_metadata(self):
        result = gateway_service.verify_and_finalize_order("ref_x", verifier=FakeVerifier(metadata=None))

        assert result.error == "Transaction metadata is missing or corrupt."

    def test_unknown_transaction_type(self):
        verifier = FakeVerifier(metadata={"staff_id": "123456"})

        result = gateway_service.verify_and_finalize_order("ref_x", verifier=verifier)

        assert result.error == "Could not determine transaction type from metadata."

    def test_malformed_payment_date(self, showroom, make_product, give_stock):
        bread = make_product(stock=0, price=300.0)
        give_stock(showroom, bread, 5)
        verifier = FakeVerifier(amount=300.0, paid_at="garbage", metadata={
            "isPosSale": True,
            "cart": [item(bread, 1)],
            "staff_id": showroom.staff_id,
        })

        result = gateway_service.verify_and_finalize_order("ref_bad_date", verifier=verifier)

        assert not result.success
        assert result.error_code == "validation_error"
        assert db.session.query(Order).count() == 0

    def test_incomplete_debt_metadata(self):
        verifier = FakeVerifier(metadata={"isDebtPayment": True, "runId": "run-1"})

        result = gateway_service.verify_and_finalize_order("ref_x", verifier=verifier)

        assert result.error == "Metadata for debt payment is incomplete."


class TestPaystackClient:

    def test_requires_secret_key(self):
        with pytest.raises(PaymentGatewayError):
            PaystackClient("")

    def test_verify_normalizes_minor_units(self, monkeypatch):
        client = PaystackClient("sk_test")
        monkeypatch.setattr(client, "_request", lambda method, path, json=None: {
            "status": True,
            "data": {
                "status": "success",
                "amount": 150000,
                "metadata": {"isPosSale": True},
                "paid_at": "2026-01-01T10:00:00Z",
            },
        })

        verification = client.verify("ref_1")

        assert verification["status"] == "success"
        assert verification["amount"] == 1500.0
        assert verification["metadata"] == {"isPosSale": True}

    def test_verify_reports_gateway_rejection(self, monkeypatch):
        client = PaystackClient("sk_test")
        monkeypatch.setattr(client, "_request", lambda method, path, json=None: {
            "status": False,
            "message": "Invalid key",
        })

        verification = client.verify("ref_1")

        assert verification["status"] == "failed"
        assert verification["message"] == "Invalid key"

    def test_initialize_payment_attaches_metadata(self, driver):
        initializer = FakeInitializer()

        result = gateway_service.initialize_payment(
            email="buyer@example.com",
            total=1200.0,
            staff_id=driver.staff_id,
            items=[{"productId": "p1", "quantity": 2}],
            run_id="run-9",
            client=initializer,
        )

        assert result["reference"] == "ref_123"
        assert initializer.last["metadata"]["runId"] == "run-9"
        assert initializer.last["metadata"]["staff_name"] == driver.name
        assert initializer.last["metadata"]["isPosSale"] is False

    def test_initialize_payment_needs_email(self, driver):
        result = gateway_service.initialize_payment(
            email="", total=100.0, staff_id=driver.staff_id, items=[], client=FakeInitializer(),
        )

        assert result.error_code == "validation_error"
