"""
Catalog maintenance tests: products, ingredients, suppliers and customers.

Verifies:
- New products start with zero stock whatever the request says
- Stock only changes through a catalog edit when direct stock edits are allowed
- Records still in use cannot be deleted
"""

from bakery.extensions import db
from bakery.models import Customer, Ingredient, IngredientStockLog, PersonalStock, Product, Supplier
from bakery.services import catalog_service, supply_service


class TestProducts:

    def test_new_product_starts_empty(self, db_session):
        result = catalog_service.create_product({"name": "Meat Pie", "price": 300, "category": "Snacks", "stock": 50})

        assert result.success, result.error
        product = db.session.get(Product, result["product"]["id"])
        assert product.stock == 0
        assert product.min_price == 300.0
        assert product.max_price == 300.0

    def test_name_required(self, db_session):
        result = catalog_service.create_product({"price": 300})

        assert result.error == "Product name is required."
        assert db.session.query(Product).count() == 0

    def test_negative_price_rejected(self, db_session):
        result = catalog_service.create_product({"name": "Meat Pie", "price": -1})

        assert result.error_code == "validation_error"

    def test_update_ignores_stock_by_default(self, make_product):
        product = make_product(stock=40)

        result = catalog_service.update_product(product.id, {"price": 650, "stock": 999})

        assert result.success, result.error
        updated = db.session.get(Product, product.id)
        assert updated.price == 650.0
        assert updated.stock == 40

    def test_update_stock_when_allowed(self, make_product):
        product = make_product(stock=40)

        result = catalog_service.update_product(product.id, {"stock": 35}, allow_stock_edit=True)

        assert result["product"]["stock"] == 35

    def test_update_unknown_product(self, db_session):
        assert catalog_service.update_product("missing", {"price": 1}).error_code == "not_found"

    def test_delete_empty_product(self, make_product, driver, give_stock):
        product = make_product(stock=0)
        give_stock(driver, product, 0)

        result = catalog_service.delete_product(product.id)

        assert result.success, result.error
        assert db.session.get(Product, product.id) is None
        assert db.session.query(PersonalStock).count() == 0

    def test_cannot_delete_product_with_central_stock(self, make_product):
        product = make_product(stock=3)

        result = catalog_service.delete_product(product.id)

        assert result.error_code == "invalid_state"
        assert db.session.get(Product, product.id) is not None

    def test_cannot_delete_product_held_by_staff(self, make_product, driver, give_stock):
        product = make_product(stock=0)
        give_stock(driver, product, 4)

        result = catalog_service.delete_product(product.id)

        assert result.error == "Product is still held by staff members."

    def test_cannot_delete_product_with_recipe(self, recipe):
        result = catalog_service.delete_product(recipe.product_id)

        assert result.error == "Product is used by a recipe."


class TestIngredients:

    def test_opening_stock_is_logged(self, storekeeper):
        result = catalog_service.create_ingredient(
            {"name": "Yeast", "unit": "kg", "stock": 12.5, "costPerUnit": 2000}, storekeeper,
        )

        assert result.success, result.error
        assert result["ingredient"]["stock"] == 12.5
        log = db.session.query(IngredientStockLog).one()
        assert log.change == 12.5
        assert log.reason == "Opening stock"
        assert log.staff_name == "Store Keeper"

    def test_no_log_without_opening_stock(self, storekeeper):
        catalog_service.create_ingredient({"name": "Yeast", "unit": "kg"}, storekeeper)

        assert db.session.query(IngredientStockLog).count() == 0

    def test_unit_required(self, storekeeper):
        result = catalog_service.create_ingredient({"name": "Yeast"}, storekeeper)

        assert result.error == "Unit is required."

    def test_update_ignores_stock_by_default(self, make_ingredient, storekeeper):
        flour = make_ingredient(stock=50.0)

        catalog_service.update_ingredient(flour.id, {"costPerUnit": 900, "stock": 1.0}, storekeeper)

        updated = db.session.get(Ingredient, flour.id)
        assert updated.cost_per_unit == 900.0
        assert updated.stock == 50.0
        assert db.session.query(IngredientStockLog).count() == 0

    def test_stock_edit_is_logged(self, make_ingredient, developer):
        flour = make_ingredient(stock=50.0)

        result = catalog_service.update_ingredient(flour.id, {"stock": 42.0}, developer, allow_stock_edit=True)

        assert result.success, result.error
        assert db.session.get(Ingredient, flour.id).stock == 42.0
        log = db.session.query(IngredientStockLog).one()
        assert log.change == -8.0
        assert log.reason == "Manual stock adjustment"

    def test_cannot_delete_recipe_ingredient(self, recipe):
        flour_id = recipe.ingredients[0]["ingredientId"]

        result = catalog_service.delete_ingredient(flour_id)

        assert result.error == "Ingredient is used by a recipe."
        assert db.session.get(Ingredient, flour_id) is not None

    def test_cannot_delete_ingredient_with_supply_history(self, make_ingredient, supplier, storekeeper):
        salt = make_ingredient(name="Salt", stock=0.0)
        supply_service.request_stock_increase(salt.id, 5.0, supplier.id, storekeeper)

        assert catalog_service.delete_ingredient(salt.id).error_code == "invalid_state"

    def test_delete_unused_ingredient(self, make_ingredient):
        salt = make_ingredient(name="Salt", stock=0.0)

        assert catalog_service.delete_ingredient(salt.id).success
        assert db.session.get(Ingredient, salt.id) is None


class TestSuppliersAndCustomers:

    def test_create_and_edit_supplier(self, db_session):
        created = catalog_service.save_supplier({"name": "Golden Mills", "phone": "0800"})
        supplier_id = created["supplier"]["id"]

        result = catalog_service.save_supplier({"contactPerson": "Bisi", "amountOwed": 1000000}, supplier_id)

        assert result.success, result.error
        supplier = db.session.get(Supplier, supplier_id)
        assert supplier.name == "Golden Mills"
        assert supplier.contact_person == "Bisi"
        assert supplier.amount_owed == 0.0

    def test_supplier_name_required(self, db_session):
        assert catalog_service.save_supplier({"phone": "0800"}).error == "Supplier name is required."

    def test_cannot_delete_supplier_owed_money(self, supplier):
        supplier.amount_owed = 5000.0
        db.session.commit()

        result = catalog_service.delete_supplier(supplier.id)

        assert result.error == "Supplier still has an outstanding balance."

    def test_delete_settled_supplier(self, supplier):
        assert catalog_service.delete_supplier(supplier.id).success
        assert db.session.get(Supplier, supplier.id) is None

    def test_create_and_edit_customer(self, db_session):
        created = catalog_service.save_customer({"name": "Iya Bose", "address": "12 Market Rd"})
        customer_id = created["customer"]["id"]

        catalog_service.save_customer({"phone": "0803"}, customer_id)

        customer = db.session.get(Customer, customer_id)
        assert customer.phone == "0803"
        assert customer.address == "12 Market Rd"

    def test_cannot_delete_customer_in_debt(self, make_customer):
        customer = make_customer(amount_owed=2500.0)

        result = catalog_service.delete_customer(customer.id)

        assert result.error == "Customer still owes money and cannot be deleted."

    def test_delete_unknown_customer(self, db_session):
        assert catalog_service.delete_customer("missing").error_code == "not_found"
