"""
Sales and payment confirmation tests.

Verifies:
- Sales decrement the seller's personal stock, all lines or none
- Cash/POS run sales become Orders only once an accountant approves them
- Declined collections have no financial side effect
- Debt payments and run expenses are applied on approval
- POS sales post straight to the daily sales aggregate
"""

from bakery.extensions import db
from bakery.models import (
    Customer,
    DailySales,
    IndirectCost,
    Order,
    PaymentConfirmation,
    PersonalStock,
    Product,
    Transfer,
    WasteLog,
)
from bakery.services import payment_service, sales_service, transfer_service
from bakery.time_utils import day_key, utcnow
from conftest import item


def _personal(staff_id, product_id):
    row = db.session.get(PersonalStock, (staff_id, product_id))
    return row.stock if row else 0


def _active_run(storekeeper, driver, product, quantity=10):
    created = transfer_service.initiate_transfer(
        [item(product, quantity)], storekeeper, driver.staff_id, is_sales_run=True,
    )
    transfer_service.acknowledge_transfer(created["transferId"], "accept")
    return created["transferId"]


def _sell(run_id, driver, product, quantity, method, customer_id="walk-in"):
    return sales_service.sell_to_customer(
        run_id,
        [item(product, quantity, price=product.price)],
        customer_id,
        None,
        method,
        driver.staff_id,
        product.price * quantity,
    )


class TestRunSales:

    def test_cash_sale_waits_for_approval(self, storekeeper, driver, make_product):
        bread = make_product(stock=100, price=100.0)
        run_id = _active_run(storekeeper, driver, bread)

        sale = _sell(run_id, driver, bread, 3, "Cash")

        assert sale.success, sale.error
        assert sale["orderId"] is None
        assert _personal(driver.staff_id, bread.id) == 7
        assert db.session.query(Order).count() == 0
        confirmation = db.session.get(PaymentConfirmation, sale["confirmationId"])
        assert confirmation.status == "pending"
        assert confirmation.amount == 300.0

        approved = payment_service.handle_payment_confirmation(confirmation.id, "approve")

        assert approved["status"] == "approved"
        order = db.session.query(Order).one()
        assert order.total == 300.0
        assert order.payment_method == "Cash"
        assert order.sales_run_id == run_id
        assert db.session.get(Transfer, run_id).total_collected == 300.0

    def test_confirmation_is_processed_once(self, storekeeper, driver, make_product):
        bread = make_product(stock=100, price=100.0)
        run_id = _active_run(storekeeper, driver, bread)
        sale = _sell(run_id, driver, bread, 2, "POS")
        payment_service.handle_payment_confirmation(sale["confirmationId"], "approve")

        again = payment_service.handle_payment_confirmation(sale["confirmationId"], "approve")
        decline = payment_service.handle_payment_confirmation(sale["confirmationId"], "decline")

        assert again.error == "Failed to approve payment. This confirmation has already been processed."
        assert decline.error_code == "invalid_state"
        assert db.session.query(Order).count() == 1
        assert db.session.get(Transfer, run_id).total_collected == 200.0

    def test_declined_collection_has_no_financial_effect(self, storekeeper, driver, make_product):
        bread = make_product(stock=100, price=100.0)
        run_id = _active_run(storekeeper, driver, bread)
        sale = _sell(run_id, driver, bread, 2, "Cash")

        declined = payment_service.handle_payment_confirmation(sale["confirmationId"], "decline")

        assert declined["status"] == "declined"
        assert db.session.query(Order).count() == 0
        assert db.session.get(Transfer, run_id).total_collected == 0.0
        assert _personal(driver.staff_id, bread.id) == 8

    def test_credit_sale_needs_registered_customer(self, storekeeper, driver, make_product):
        bread = make_product(stock=100, price=100.0)
        run_id = _active_run(storekeeper, driver, bread)

        result = _sell(run_id, driver, bread, 2, "Credit")

        assert result.error == "Credit sales need a registered customer."
        assert _personal(driver.staff_id, bread.id) == 10

    def test_credit_sale_books_customer_debt(self, storekeeper, driver, make_product, make_customer):
        bread = make_product(stock=100, price=100.0)
        customer = make_customer()
        run_id = _active_run(storekeeper, driver, bread)

        result = _sell(run_id, driver, bread, 4, "Credit", customer_id=customer.id)

        assert result.success, result.error
        assert result["confirmationId"] is None
        assert db.session.get(Customer, customer.id).amount_owed == 400.0
        assert db.session.get(Order, result["orderId"]).payment_method == "Credit"
        assert db.session.query(PaymentConfirmation).count() == 0

    def test_oversell_moves_nothing(self, storekeeper, driver, make_product):
        bread = make_product(name="Bread", stock=100, price=100.0)
        cake = make_product(name="Cake", stock=100, price=900.0)
        run_id = _active_run(storekeeper, driver, bread)

        result = sales_service.sell_to_customer(
            run_id,
            [item(bread, 2), item(cake, 1)],
            "walk-in",
            None,
            "Cash",
            driver.staff_id,
            1100.0,
        )

        assert result.error_code == "insufficient_stock"
        assert _personal(driver.staff_id, bread.id) == 10
        assert db.session.query(PaymentConfirmation).count() == 0

    def test_settlement_after_approved_and_credit_sales(self, storekeeper, driver, make_product, make_customer):
        bread = make_product(stock=100, price=100.0)
        customer = make_customer()
        run_id = _active_run(storekeeper, driver, bread)
        cash = _sell(run_id, driver, bread, 5, "Cash")
        _sell(run_id, driver, bread, 2, "Credit", customer_id=customer.id)
        payment_service.handle_payment_confirmation(cash["confirmationId"], "approve")

        result = transfer_service.complete_run(run_id)

        assert result["creditSales"] == 200.0
        assert result["expectedCash"] == 800.0
        assert result["shortage"] == 300.0


class TestDebtAndExpenses:

    def test_debt_payment_credits_customer_on_approval(self, storekeeper, driver, make_product, make_customer):
        bread = make_product(stock=100)
        customer = make_customer(amount_owed=1000.0)
        run_id = _active_run(storekeeper, driver, bread)

        queued = payment_service.record_debt_payment_for_run(
            run_id, customer.id, None, driver.staff_id, 400.0, "Cash",
        )
        assert db.session.get(Customer, customer.id).amount_paid == 0.0

        payment_service.handle_payment_confirmation(queued["confirmationId"], "approve")

        assert db.session.get(Customer, customer.id).amount_paid == 400.0
        assert db.session.get(Transfer, run_id).total_collected == 400.0
        assert db.session.query(Order).count() == 0

    def test_run_customer_totals(self, storekeeper, driver, make_product, make_customer):
        bread = make_product(stock=100, price=100.0)
        customer = make_customer()
        run_id = _active_run(storekeeper, driver, bread)
        _sell(run_id, driver, bread, 3, "Credit", customer_id=customer.id)
        queued = payment_service.record_debt_payment_for_run(
            run_id, customer.id, None, driver.staff_id, 100.0, "POS",
        )
        payment_service.handle_payment_confirmation(queued["confirmationId"], "approve")

        customers = sales_service.get_customers_for_run(run_id)

        assert customers == [{
            "customerId": customer.id,
            "customerName": "Mama Put",
            "totalSold": 300.0,
            "totalPaid": 100.0,
        }]

    def test_debt_payment_needs_customer(self, driver):
        result = payment_service.record_debt_payment_for_run("run", "walk-in", None, driver.staff_id, 100.0, "Cash")

        assert result.error_code == "validation_error"

    def test_run_expense_becomes_indirect_cost(self, storekeeper, driver, make_product):
        bread = make_product(stock=100)
        run_id = _active_run(storekeeper, driver, bread)

        queued = payment_service.log_run_expense(run_id, driver.staff_id, 1500.0, "Fuel", "Diesel top-up")
        payment_service.handle_payment_confirmation(queued["confirmationId"], "approve")

        cost = db.session.query(IndirectCost).one()
        assert cost.category == "Fuel"
        assert cost.amount == 1500.0
        assert cost.details == [{"name": driver.name, "amount": 1500.0}]

    def test_unknown_confirmation(self):
        result = payment_service.handle_payment_confirmation("missing", "decline")

        assert result.error == "Failed to decline payment. Confirmation not found."


class TestPosSale:

    def test_posts_to_daily_sales(self, showroom, make_product, give_stock):
        bread = make_product(stock=0, price=250.0)
        give_stock(showroom, bread, 10)
        when = utcnow()

        result = sales_service.pos_sale(
            [item(bread, 2)], showroom.staff_id, showroom.name, None, 500.0, "Cash", when,
        )

        assert result.success, result.error
        order = db.session.get(Order, result["orderId"])
        assert order.sales_run_id == f"pos-sale-{order.id}"
        assert _personal(showroom.staff_id, bread.id) == 8
        daily = db.session.get(DailySales, day_key(when))
        assert daily.cash == 500.0
        assert daily.total == 500.0

    def test_same_day_sales_accumulate(self, showroom, make_product, give_stock):
        bread = make_product(stock=0, price=250.0)
        give_stock(showroom, bread, 10)
        when = utcnow()

        sales_service.pos_sale([item(bread, 1)], showroom.staff_id, showroom.name, None, 250.0, "POS", when)
        sales_service.pos_sale([item(bread, 2)], showroom.staff_id, showroom.name, None, 500.0, "Paystack", when)

        daily = db.session.get(DailySales, day_key(when))
        assert daily.pos == 250.0
        assert daily.transfer == 500.0
        assert daily.total == 750.0

    def test_credit_not_allowed(self, showroom, make_product, give_stock):
        bread = make_product(stock=0)
        give_stock(showroom, bread, 10)

        result = sales_service.pos_sale([item(bread, 1)], showroom.staff_id, showroom.name, None, 500.0, "Credit")

        assert result.error_code == "validation_error"
        assert _personal(showroom.staff_id, bread.id) == 10


class TestReportWaste:

    def test_staff_waste_comes_from_personal_stock(self, driver, make_product, give_stock):
        bread = make_product(stock=100)
        give_stock(driver, bread, 5)

        result = sales_service.report_waste([item(bread, 2)], "Damaged", None, driver)

        assert result.success
        assert _personal(driver.staff_id, bread.id) == 3
        assert db.session.get(Product, bread.id).stock == 100
        assert db.session.query(WasteLog).one().staff_id == driver.staff_id

    def test_storekeeper_waste_comes_from_central(self, storekeeper, make_product):
        bread = make_product(stock=100)

        sales_service.report_waste([item(bread, 4)], "Expired", "Left overnight", storekeeper)

        assert db.session.get(Product, bread.id).stock == 96

    def test_needs_reason(self, driver, make_product):
        bread = make_product()

        result = sales_service.report_waste([item(bread, 1)], "", None, driver)

        assert result.error == "Please provide items and a reason for the waste."
