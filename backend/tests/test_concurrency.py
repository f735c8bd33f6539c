"""
Concurrency tests.

Two threads race on the same records against a file-backed SQLite
database. Exactly one must win; stock must be conserved either way.
"""

import threading

import pytest

from bakery import create_app
from bakery.extensions import db
from bakery.models import PersonalStock, Product, Staff
from bakery.models.staff import ROLE_DELIVERY, ROLE_STOREKEEPER
from bakery.services import transfer_service
from bakery.services.auth_service import create_staff


@pytest.fixture
def race_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'race.sqlite3'}",
        'BCRYPT_ROUNDS': 4,
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def _seed(app, stock):
    with app.app_context():
        storekeeper = create_staff(name="Store", role=ROLE_STOREKEEPER, password="bread1234")
        driver = create_staff(name="Driver", role=ROLE_DELIVERY, password="bread1234")
        product = Product(name="White Loaf", stock=stock, price=500.0)
        db.session.add(product)
        db.session.commit()
        return storekeeper.staff_id, driver.staff_id, product.id


def _race(app, calls):
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def _worker(index, call):
        with app.app_context():
            barrier.wait()
            results[index] = call()

    threads = [threading.Thread(target=_worker, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results


def _stock_levels(app, driver_id, product_id):
    with app.app_context():
        central = db.session.get(Product, product_id).stock
        row = db.session.get(PersonalStock, (driver_id, product_id))
        return central, row.stock if row else 0


def test_double_acceptance_moves_stock_once(race_app):
    storekeeper_id, driver_id, product_id = _seed(race_app, stock=10)
    with race_app.app_context():
        storekeeper = db.session.get(Staff, storekeeper_id)
        created = transfer_service.initiate_transfer(
            [{"productId": product_id, "quantity": 4}], storekeeper, driver_id,
        )
    transfer_id = created["transferId"]

    results = _race(race_app, [
        lambda: transfer_service.acknowledge_transfer(transfer_id, "accept"),
        lambda: transfer_service.acknowledge_transfer(transfer_id, "accept"),
    ])

    assert sum(1 for r in results if r.success) == 1
    loser = next(r for r in results if not r.success)
    assert loser.error_code == "invalid_state"
    assert _stock_levels(race_app, driver_id, product_id) == (6, 4)


def test_competing_transfers_never_oversell(race_app):
    storekeeper_id, driver_id, product_id = _seed(race_app, stock=10)
    with race_app.app_context():
        storekeeper = db.session.get(Staff, storekeeper_id)
        first = transfer_service.initiate_transfer([{"productId": product_id, "quantity": 7}], storekeeper, driver_id)
        second = transfer_service.initiate_transfer([{"productId": product_id, "quantity": 7}], storekeeper, driver_id)

    results = _race(race_app, [
        lambda: transfer_service.acknowledge_transfer(first["transferId"], "accept"),
        lambda: transfer_service.acknowledge_transfer(second["transferId"], "accept"),
    ])

    assert sum(1 for r in results if r.success) == 1
    loser = next(r for r in results if not r.success)
    assert loser.error_code == "insufficient_stock"
    assert _stock_levels(race_app, driver_id, product_id) == (3, 7)
