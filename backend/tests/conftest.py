"""
Pytest fixtures for bakery backend tests.

Provides the application, a wiped database per test, and small factories
for staff, products, ingredients and customers.
"""

import pytest
from bakery import create_app
from bakery.extensions import db
from bakery.models import Customer, Ingredient, PersonalStock, Product, Recipe, Supplier
from bakery.models.staff import (
    ROLE_ACCOUNTANT,
    ROLE_BAKER,
    ROLE_DELIVERY,
    ROLE_DEVELOPER,
    ROLE_MANAGER,
    ROLE_SHOWROOM,
    ROLE_STOREKEEPER,
)
from bakery.services import session_service
from bakery.services.auth_service import create_staff


TEST_PASSWORD = "bread1234"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'PAYSTACK_SECRET_KEY': 'sk_test_dummy',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


# =============================================================================
# FACTORIES
# =============================================================================

@pytest.fixture
def make_staff(db_session):
    def _make(role, name=None, staff_id=None):
        return create_staff(
            name=name or role,
            role=role,
            password=TEST_PASSWORD,
            staff_id=staff_id,
        )
    return _make


@pytest.fixture
def make_product(db_session):
    def _make(name="White Loaf", stock=100, price=500.0, category="Breads"):
        product = Product(name=name, stock=stock, price=price, cost_price=price / 2, category=category)
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture
def make_ingredient(db_session):
    def _make(name="Flour", stock=50.0, unit="kg"):
        ingredient = Ingredient(name=name, stock=stock, unit=unit)
        db_session.add(ingredient)
        db_session.commit()
        return ingredient
    return _make


@pytest.fixture
def make_customer(db_session):
    def _make(name="Mama Put", amount_owed=0.0):
        customer = Customer(name=name, amount_owed=amount_owed, amount_paid=0.0)
        db_session.add(customer)
        db_session.commit()
        return customer
    return _make


@pytest.fixture
def give_stock(db_session):
    """Put products directly into a staff member's personal stock."""
    def _give(staff, product, quantity):
        db_session.add(PersonalStock(
            staff_id=staff.staff_id,
            product_id=product.id,
            product_name=product.name,
            stock=quantity,
        ))
        db_session.commit()
    return _give


@pytest.fixture
def storekeeper(make_staff):
    return make_staff(ROLE_STOREKEEPER, "Store Keeper")


@pytest.fixture
def driver(make_staff):
    return make_staff(ROLE_DELIVERY, "Van Driver")


@pytest.fixture
def showroom(make_staff):
    return make_staff(ROLE_SHOWROOM, "Showroom")


@pytest.fixture
def baker(make_staff):
    return make_staff(ROLE_BAKER, "Baker")


@pytest.fixture
def accountant(make_staff):
    return make_staff(ROLE_ACCOUNTANT, "Accountant")


@pytest.fixture
def manager(make_staff):
    return make_staff(ROLE_MANAGER, "Manager")


@pytest.fixture
def developer(make_staff):
    return make_staff(ROLE_DEVELOPER, "Developer")


@pytest.fixture
def supplier(db_session):
    supplier = Supplier(name="Golden Mills")
    db_session.add(supplier)
    db_session.commit()
    return supplier


@pytest.fixture
def recipe(db_session, make_product, make_ingredient):
    product = make_product(name="Agege Bread", stock=0)
    flour = make_ingredient(name="Flour", stock=50.0)
    sugar = make_ingredient(name="Sugar", stock=10.0)
    recipe = Recipe(
        name="Agege Bread",
        product_id=product.id,
        product_name=product.name,
        ingredients=[
            {"ingredientId": flour.id, "ingredientName": "Flour", "quantity": 20.0, "unit": "kg"},
            {"ingredientId": sugar.id, "ingredientName": "Sugar", "quantity": 4.0, "unit": "kg"},
        ],
    )
    db_session.add(recipe)
    db_session.commit()
    return recipe


# =============================================================================
# AUTH HELPERS
# =============================================================================

def get_auth_token(client, staff_id: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a staff member."""
    response = client.post('/api/auth/login', json={
        'staff_id': staff_id,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def headers_for(db_session):
    """Authorization headers for a staff member without going through login."""
    def _headers(staff):
        _, token = session_service.create_session(staff.staff_id)
        return auth_headers(token)
    return _headers


def item(product, quantity, **extra):
    return {"productId": product.id, "productName": product.name, "quantity": quantity, **extra}
