"""
Pytest configuration and fixtures for storefront tests
"""
import os
import tempfile

# keep test runs from writing into the project's logs/ directory
os.environ.setdefault("STOREFRONT_LOG_DIR", tempfile.mkdtemp(prefix="storefront-test-logs-"))

import pytest

from storefront import create_app
from storefront import db as _db
from storefront.data.catalog.product import Product
from storefront.data.core.user import User
from storefront.data.ordering.cart_item import CartItem
from storefront.business.ordering.cart_context import CartContext, CartLine

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'RATELIMIT_ENABLED': False,
    'COMPETITOR_API_BASE_URL': None,
    'COMPETITOR_API_KEY': None,
    'ORDER_RESERVATION_MINUTES': 15,
}


@pytest.fixture(scope='session')
def app():
    """Create Flask application for testing"""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        yield app


@pytest.fixture(autouse=True)
def clean_db(app):
    """Fresh schema for every test"""
    _db.drop_all()
    _db.create_all()
    yield _db
    _db.session.remove()


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


@pytest.fixture
def user():
    return User.find_or_create(1)


@pytest.fixture
def make_product():
    """Factory for persisted products"""
    counter = {'n': 0}

    def _make(name=None, category='Clothing', default_price=1000, quantity=10, **kwargs):
        counter['n'] += 1
        product = Product(
            name=name or f"Product {counter['n']}",
            category=category,
            default_price=default_price,
            quantity=quantity,
            **kwargs,
        )
        _db.session.add(product)
        _db.session.commit()
        return product

    return _make


@pytest.fixture
def make_cart(user):
    """
    Factory for a user's cart.

    Takes (product, quantity) pairs; quantities are written directly so
    zero-quantity lines can be set up too.
    """
    def _make(*lines, owner=None):
        context = CartContext.for_user(owner or user)
        for product, quantity in lines:
            context.cart.items.append(CartItem(product_id=product.id, quantity=quantity))
        _db.session.commit()
        return context

    return _make


class StubCart:
    """Minimal cart collaborator: fixed lines, records clear()"""

    def __init__(self, *lines):
        self._lines = [CartLine(product.id if hasattr(product, 'id') else product, qty) for product, qty in lines]
        self.cleared = False

    def lines(self):
        return list(self._lines)

    def clear(self, commit=True):
        self.cleared = True


@pytest.fixture
def stub_cart():
    return StubCart
