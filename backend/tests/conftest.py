"""
Pytest fixtures for the heladeria backend tests.

Provides an in-memory application, a per-test clean database, the Flask test
client and a few catalog/store fixtures.
"""

import pytest
from heladeria import create_app
from heladeria.extensions import db
from heladeria.models import Flavor, StoreFlavor, Order, OrderItem
from heladeria.services import get_services


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'AUTO_CREATE_SCHEMA': False,
        'SEED_DEFAULT_FLAVORS': False,
        'BASE_STORE': 'puesto',
        'DERIVED_STORES': ['puesto2'],
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


@pytest.fixture(scope='function')
def services(db_session):
    return get_services()


@pytest.fixture(scope='function')
def flavors(db_session):
    """Three catalog flavors at 12.00."""
    rows = [
        Flavor(name="Fresa", price_cents=1200),
        Flavor(name="Limón", price_cents=1200),
        Flavor(name="Mango", price_cents=1200),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture(scope='function')
def base_store_assignments(db_session, flavors):
    """Base store 'puesto' sells Fresa and Mango."""
    db_session.add_all([
        StoreFlavor(store_name="puesto", flavor_name="Fresa"),
        StoreFlavor(store_name="puesto", flavor_name="Mango"),
    ])
    db_session.commit()


@pytest.fixture(scope='function')
def legacy_order(db_session):
    """Factory inserting an order the way older front-end revisions stored them."""
    def _make(*, total_cents=2400, ticket=None, cups=None, items=()):
        order = Order(total_cents=total_cents, ticket=ticket, cups=cups)
        db_session.add(order)
        db_session.flush()
        for flavor, quantity, price_cents in items:
            db_session.add(OrderItem(order_id=order.id, flavor=flavor, quantity=quantity, price_cents=price_cents))
        db_session.commit()
        return order.id

    return _make
