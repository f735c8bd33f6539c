"""
Transfer workflow tests.

Verifies:
- Acceptance moves the whole bundle or nothing
- A transfer can only be acknowledged once
- Sales run return round trip restores central stock
- Declining a return gives the stock back to the returner
- Run settlement computes the cash shortage
"""

import pytest

from bakery.extensions import db
from bakery.models import DailySales, Order, PersonalStock, Product, Transfer
from bakery.models.sales import PAYMENT_METHOD_CREDIT
from bakery.services import transfer_service
from bakery.services.transfer_service import ACTION_ACCEPT, ACTION_DECLINE
from bakery.time_utils import day_key
from conftest import item


def _central(product_id):
    return db.session.get(Product, product_id).stock


def _personal(staff_id, product_id):
    row = db.session.get(PersonalStock, (staff_id, product_id))
    return row.stock if row else 0


def _send(storekeeper, recipient, items, is_sales_run=False):
    result = transfer_service.initiate_transfer(items, storekeeper, recipient.staff_id, is_sales_run=is_sales_run)
    assert result.success, result.error
    return result["transferId"]


# =============================================================================
# INITIATION
# =============================================================================


class TestInitiateTransfer:

    def test_creates_pending_transfer_without_moving_stock(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)

        transfer_id = _send(storekeeper, driver, [item(bread, 30)])

        transfer = db.session.get(Transfer, transfer_id)
        assert transfer.status == "pending"
        assert transfer.kind == "restock"
        assert _central(bread.id) == 100
        assert _personal(driver.staff_id, bread.id) == 0

    def test_sales_run_fixes_total_revenue_from_prices(self, storekeeper, driver, make_product):
        bread = make_product(stock=100, price=500.0)
        cake = make_product(name="Cake", stock=10, price=2000.0)

        transfer_id = _send(storekeeper, driver, [item(bread, 4), item(cake, 1)], is_sales_run=True)

        transfer = db.session.get(Transfer, transfer_id)
        assert transfer.kind == "sales_run"
        assert transfer.total_revenue == 4000.0
        assert [line["price"] for line in transfer.items] == [500.0, 2000.0]

    def test_rejects_transfer_to_self(self, storekeeper, make_product):
        bread = make_product()

        result = transfer_service.initiate_transfer([item(bread, 1)], storekeeper, storekeeper.staff_id)

        assert not result.success
        assert result.error_code == "validation_error"

    @pytest.mark.parametrize("quantity", [0, -3, 1.5, "2"])
    def test_rejects_bad_quantities(self, storekeeper, driver, make_product, quantity):
        bread = make_product()

        result = transfer_service.initiate_transfer([item(bread, quantity)], storekeeper, driver.staff_id)

        assert not result.success
        assert result.error_code == "validation_error"
        assert db.session.query(Transfer).count() == 0


# =============================================================================
# ACKNOWLEDGEMENT
# =============================================================================


class TestAcknowledgeTransfer:

    def test_accept_restock_moves_stock_and_completes(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        transfer_id = _send(storekeeper, driver, [item(bread, 30)])

        result = transfer_service.acknowledge_transfer(transfer_id, ACTION_ACCEPT)

        assert result.success
        assert result["status"] == "completed"
        assert _central(bread.id) == 70
        assert _personal(driver.staff_id, bread.id) == 30

    def test_accept_sales_run_becomes_active(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        transfer_id = _send(storekeeper, driver, [item(bread, 30)], is_sales_run=True)

        result = transfer_service.acknowledge_transfer(transfer_id, ACTION_ACCEPT)

        assert result["status"] == "active"
        transfer = db.session.get(Transfer, transfer_id)
        assert transfer.time_received is not None
        assert transfer.time_completed is None

    def test_insufficient_line_moves_nothing(self, storekeeper, driver, make_product):
        bread = make_product(name="Bread", stock=100)
        cake = make_product(name="Cake", stock=2)
        transfer_id = _send(storekeeper, driver, [item(bread, 30), item(cake, 5)])

        result = transfer_service.acknowledge_transfer(transfer_id, ACTION_ACCEPT)

        assert not result.success
        assert result.error_code == "insufficient_stock"
        assert _central(bread.id) == 100
        assert _central(cake.id) == 2
        assert _personal(driver.staff_id, bread.id) == 0
        assert db.session.get(Transfer, transfer_id).status == "pending"

    def test_duplicate_lines_are_summed_before_the_check(self, storekeeper, driver, make_product):
        bread = make_product(stock=10)
        transfer_id = _send(storekeeper, driver, [item(bread, 6), item(bread, 6)])

        result = transfer_service.acknowledge_transfer(transfer_id, ACTION_ACCEPT)

        assert result.error_code == "insufficient_stock"
        assert _central(bread.id) == 10

    def test_second_acknowledgement_is_rejected(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        transfer_id = _send(storekeeper, driver, [item(bread, 30)])
        transfer_service.acknowledge_transfer(transfer_id, ACTION_ACCEPT)

        again = transfer_service.acknowledge_transfer(transfer_id, ACTION_ACCEPT)
        decline = transfer_service.acknowledge_transfer(transfer_id, ACTION_DECLINE)

        assert again.error == "This transfer has already been processed."
        assert decline.error_code == "invalid_state"
        assert _central(bread.id) == 70
        assert _personal(driver.staff_id, bread.id) == 30

    def test_decline_pending_moves_nothing(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        transfer_id = _send(storekeeper, driver, [item(bread, 30)])

        result = transfer_service.acknowledge_transfer(transfer_id, ACTION_DECLINE)

        assert result["status"] == "cancelled"
        assert _central(bread.id) == 100

    def test_unknown_transfer(self):
        result = transfer_service.acknowledge_transfer("missing", ACTION_ACCEPT)

        assert result.error == "Transfer does not exist."
        assert result.error_code == "not_found"


# =============================================================================
# RETURNS
# =============================================================================


class TestReturnStock:

    def _active_run(self, storekeeper, driver, bread, quantity=30):
        run_id = _send(storekeeper, driver, [item(bread, quantity)], is_sales_run=True)
        transfer_service.acknowledge_transfer(run_id, ACTION_ACCEPT)
        return run_id

    def test_round_trip_restores_central_stock(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        run_id = self._active_run(storekeeper, driver, bread)
        assert _central(bread.id) == 70
        assert _personal(driver.staff_id, bread.id) == 30

        returned = transfer_service.return_stock(run_id, [item(bread, 30)], driver, storekeeper.staff_id)
        assert returned.success, returned.error
        return_id = returned["transferId"]

        assert _personal(driver.staff_id, bread.id) == 0
        assert db.session.get(Transfer, run_id).status == "pending_return"
        return_transfer = db.session.get(Transfer, return_id)
        assert return_transfer.status == "pending_return"
        assert return_transfer.kind == "return"
        assert return_transfer.original_run_id == run_id
        assert return_transfer.notes == f"Return from Sales Run {run_id}"

        accepted = transfer_service.acknowledge_transfer(return_id, ACTION_ACCEPT)

        assert accepted["status"] == "completed"
        assert _central(bread.id) == 100
        assert db.session.get(Transfer, run_id).status == "return_completed"

    def test_return_more_than_held_is_rejected(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        run_id = self._active_run(storekeeper, driver, bread, quantity=10)

        result = transfer_service.return_stock(run_id, [item(bread, 11)], driver, storekeeper.staff_id)

        assert result.error_code == "insufficient_stock"
        assert _personal(driver.staff_id, bread.id) == 10
        assert db.session.get(Transfer, run_id).status == "active"

    def test_empty_return_is_rejected(self, storekeeper, driver):
        result = transfer_service.return_stock("showroom-return", [], driver, storekeeper.staff_id)

        assert result.error == "No items selected to return."

    def test_sentinel_return_needs_no_run(self, storekeeper, showroom, make_product, give_stock):
        bread = make_product(stock=0)
        give_stock(showroom, bread, 5)

        result = transfer_service.return_stock("showroom-return", [item(bread, 5)], showroom, storekeeper.staff_id)
        accepted = transfer_service.acknowledge_transfer(result["transferId"], ACTION_ACCEPT)

        assert accepted.success
        assert _central(bread.id) == 5
        assert _personal(showroom.staff_id, bread.id) == 0

    def test_declining_return_restocks_returner_and_reactivates_run(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        run_id = self._active_run(storekeeper, driver, bread)
        returned = transfer_service.return_stock(run_id, [item(bread, 12)], driver, storekeeper.staff_id)

        declined = transfer_service.acknowledge_transfer(returned["transferId"], ACTION_DECLINE)

        assert declined["status"] == "cancelled"
        assert _personal(driver.staff_id, bread.id) == 30
        assert _central(bread.id) == 70
        assert db.session.get(Transfer, run_id).status == "active"

    def test_completed_run_cannot_return(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        run_id = self._active_run(storekeeper, driver, bread)
        transfer_service.complete_run(run_id)

        result = transfer_service.return_stock(run_id, [item(bread, 1)], driver, storekeeper.staff_id)

        assert result.error == "Only an active sales run can return stock."
        assert _personal(driver.staff_id, bread.id) == 30


# =============================================================================
# RUN SETTLEMENT
# =============================================================================


class TestCompleteRun:

    def test_shortage_is_recorded_in_daily_sales(self, storekeeper, driver, make_product, make_customer):
        bread = make_product(stock=100, price=100.0)
        customer = make_customer()
        run_id = _send(storekeeper, driver, [item(bread, 10)], is_sales_run=True)
        transfer_service.acknowledge_transfer(run_id, ACTION_ACCEPT)

        run = db.session.get(Transfer, run_id)
        assert run.total_revenue == 1000.0
        run.total_collected = 750.0
        db.session.add(Order(
            sales_run_id=run_id,
            customer_id=customer.id,
            items=[],
            total=200.0,
            payment_method=PAYMENT_METHOD_CREDIT,
            date=run.date,
            staff_id=driver.staff_id,
        ))
        db.session.commit()
        run_date = run.date

        result = transfer_service.complete_run(run_id)

        assert result.success, result.error
        assert result["creditSales"] == 200.0
        assert result["expectedCash"] == 800.0
        assert result["shortage"] == 50.0
        assert db.session.get(Transfer, run_id).status == "completed"
        assert db.session.get(DailySales, day_key(run_date)).shortage == 50.0

    def test_settled_run_records_no_shortage(self, storekeeper, driver, make_product):
        bread = make_product(stock=100, price=100.0)
        run_id = _send(storekeeper, driver, [item(bread, 5)], is_sales_run=True)
        transfer_service.acknowledge_transfer(run_id, ACTION_ACCEPT)
        db.session.get(Transfer, run_id).total_collected = 500.0
        db.session.commit()

        result = transfer_service.complete_run(run_id)

        assert result["shortage"] == 0.0
        assert db.session.query(DailySales).count() == 0

    def test_only_active_runs_complete(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        run_id = _send(storekeeper, driver, [item(bread, 5)], is_sales_run=True)

        pending = transfer_service.complete_run(run_id)
        transfer_service.acknowledge_transfer(run_id, ACTION_ACCEPT)
        transfer_service.complete_run(run_id)
        twice = transfer_service.complete_run(run_id)

        assert pending.error == "This run is not active or has already been completed."
        assert twice.error_code == "invalid_state"


# =============================================================================
# QUERIES
# =============================================================================


class TestTransferQueries:

    def test_pending_and_returned_queues(self, storekeeper, driver, make_product):
        bread = make_product(stock=100, price=500.0)
        pending_id = _send(storekeeper, driver, [item(bread, 2)])
        run_id = _send(storekeeper, driver, [item(bread, 10)], is_sales_run=True)
        transfer_service.acknowledge_transfer(run_id, ACTION_ACCEPT)
        returned = transfer_service.return_stock(run_id, [item(bread, 4)], driver, storekeeper.staff_id)

        pending = transfer_service.get_pending_transfers_for_staff(driver.staff_id)
        returns = transfer_service.get_returned_stock_transfers()

        assert [t["id"] for t in pending] == [pending_id]
        assert pending[0]["totalValue"] == 1000.0
        assert [t["id"] for t in returns] == [returned["transferId"]]

    def test_sales_runs_grouped_by_status(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        active_id = _send(storekeeper, driver, [item(bread, 2)], is_sales_run=True)
        done_id = _send(storekeeper, driver, [item(bread, 2)], is_sales_run=True)
        transfer_service.acknowledge_transfer(active_id, ACTION_ACCEPT)
        transfer_service.acknowledge_transfer(done_id, ACTION_ACCEPT)
        transfer_service.complete_run(done_id)

        runs = transfer_service.get_sales_runs(driver.staff_id)

        assert [r["id"] for r in runs["active"]] == [active_id]
        assert [r["id"] for r in runs["completed"]] == [done_id]
