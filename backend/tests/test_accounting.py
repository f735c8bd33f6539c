"""
Manual cost entry tests: direct costs, indirect costs and petty expenses.
"""

from datetime import timedelta

from bakery.extensions import db
from bakery.models import DirectCost, Expense, IndirectCost
from bakery.services import accounting_service
from bakery.time_utils import utcnow


class TestCosts:

    def test_add_direct_cost(self, db_session):
        result = accounting_service.add_direct_cost("Bread bags", "Packaging", 500, 25000)

        assert result.success, result.error
        cost = db.session.get(DirectCost, result["costId"])
        assert cost.category == "Packaging"
        assert cost.quantity == 500.0
        assert cost.total == 25000.0
        assert accounting_service.get_direct_costs()[0]["id"] == cost.id

    def test_add_indirect_cost_with_breakdown(self, db_session):
        details = [{"name": "Generator", "amount": 15000}]

        result = accounting_service.add_indirect_cost("Diesel", "Utilities", 15000, details)

        assert result.success, result.error
        assert db.session.get(IndirectCost, result["costId"]).details == details
        assert len(accounting_service.get_indirect_costs()) == 1

    def test_amounts_must_be_positive(self, db_session):
        assert accounting_service.add_direct_cost("Bags", "Packaging", 0, 100).error_code == "validation_error"
        assert accounting_service.add_indirect_cost("Rent", "Rent", -1).error == "Amount must be a positive number."
        assert accounting_service.add_indirect_cost("Rent", "Rent", "lots").error_code == "validation_error"
        assert db.session.query(DirectCost).count() == 0
        assert db.session.query(IndirectCost).count() == 0

    def test_description_required(self, db_session):
        result = accounting_service.add_direct_cost("  ", "Packaging", 1, 100)

        assert result.error == "Description is required."


class TestExpenses:

    def test_add_expense_for_run(self, db_session):
        result = accounting_service.add_expense("Fuel", "Van diesel", 3000, run_id="run-1")

        assert result.success, result.error
        expense = db.session.get(Expense, result["expenseId"])
        assert expense.run_id == "run-1"
        assert expense.amount == 3000.0

    def test_expense_date_range(self, db_session):
        accounting_service.add_expense("Fuel", "Van diesel", 3000)

        assert len(accounting_service.get_expenses(start=utcnow() - timedelta(hours=1))) == 1
        assert accounting_service.get_expenses(end=utcnow() - timedelta(hours=1)) == []

    def test_category_required(self, db_session):
        result = accounting_service.add_expense("", "Van diesel", 3000)

        assert result.error == "Category is required."
        assert db.session.query(Expense).count() == 0
