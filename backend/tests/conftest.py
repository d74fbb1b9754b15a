"""
Pytest fixtures for the PDV backend tests.

Provides an in-memory application, a clean database per test, staff accounts
for each role and a couple of catalog products.
"""

import base64

import pytest
from pdv import create_app
from pdv.extensions import db
from pdv.models import Product, ROLE_ADMIN, ROLE_MANAGER, ROLE_SELLER
from pdv.services import user_service

PASSWORD = "Password123!"

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'BCRYPT_ROUNDS': 4,
    'SALE_RETRY_BACKOFF': 0,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

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
def seller(db_session):
    return user_service.create_user("Sam Seller", "seller", PASSWORD, ROLE_SELLER)


@pytest.fixture(scope='function')
def manager(db_session):
    return user_service.create_user("Morgan Manager", "manager", PASSWORD, ROLE_MANAGER)


@pytest.fixture(scope='function')
def admin(db_session):
    return user_service.create_user("Alex Admin", "admin", PASSWORD, ROLE_ADMIN, allow_admin=True)


@pytest.fixture(scope='function')
def phone(db_session):
    """Product with 10 units on hand at 1750.90."""
    product = Product(description="Samsung Galaxy S20", quantity=10, price_cents=175090)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def charger(db_session):
    """Product with 5 units on hand at 99.90."""
    product = Product(description="USB-C Charger", quantity=5, price_cents=9990)
    db_session.add(product)
    db_session.commit()
    return product


def basic_headers(login: str, password: str = PASSWORD) -> dict:
    """Helper to create HTTP Basic Authorization headers."""
    token = base64.b64encode(f"{login}:{password}".encode("utf-8")).decode("ascii")
    return {'Authorization': f'Basic {token}'}
