"""
Tests for scheduled jobs, the database build and the app factory
"""
import logging
from datetime import timedelta
from unittest import mock

import pytest

from storefront import create_app, db
from storefront.build import build_database, insert_debug_data
from storefront.data.catalog.product import Product
from storefront.data.ordering.order import Order, OrderStatus
from storefront.data.ordering.order_line import OrderLine
from storefront.jobs import order_cleanup_job, price_update_job
from storefront.utils.clock import utcnow


def test_order_cleanup_job_expires_overdue_orders(make_product, user, caplog):
    product = make_product(quantity=10)
    order = Order(user_id=user.id, status=OrderStatus.PENDING, expires_at=utcnow() - timedelta(minutes=1))
    db.session.add(order)
    db.session.flush()
    db.session.add(OrderLine(order_id=order.id, product_id=product.id, quantity=2, price_at_order_time=1000))
    db.session.commit()

    with caplog.at_level(logging.INFO):
        assert order_cleanup_job() == 1

    assert db.session.get(Product, product.id, populate_existing=True).quantity == 12
    assert db.session.get(Order, order.id).status == OrderStatus.EXPIRED
    assert "Cleaned up 1 expired orders" in caplog.text


def test_price_update_job_uses_configured_competitor_source(make_product, app):
    product = make_product(name='Trail Runner', default_price=1000, quantity=200)
    app.config['COMPETITOR_API_BASE_URL'] = 'https://prices.example.com'
    response = mock.Mock(status_code=200)
    response.json.return_value = [{"name": "Trail Runner", "price": 1200}]

    try:
        with mock.patch('storefront.services.pricing.competitor_price_client.requests.get',
                        return_value=response) as get:
            result = price_update_job()
    finally:
        app.config['COMPETITOR_API_BASE_URL'] = None

    get.assert_called_once()
    assert result.competitor_data_used
    # stock 200 -> inventory 1.0; 16.7% under the competitor -> 1050
    assert db.session.get(Product, product.id, populate_existing=True).dynamic_price == 1050


def test_price_update_job_without_competitor_api(make_product):
    product = make_product(default_price=1000, quantity=200)

    result = price_update_job(dry_run=True)

    assert result.competitor_data_used is False
    assert db.session.get(Product, product.id, populate_existing=True).dynamic_price is None


def test_build_database_seeds_an_empty_catalog():
    build_database(enable_debug_data=True)
    seeded = Product.query.count()
    assert seeded > 0

    # second build leaves the catalog alone
    assert insert_debug_data() == 0
    assert Product.query.count() == seeded


def test_build_database_without_debug_data():
    build_database(enable_debug_data=False)
    assert Product.query.count() == 0


def test_create_app_requires_secret_key(monkeypatch):
    monkeypatch.delenv('SECRET_KEY', raising=False)
    with pytest.raises(RuntimeError):
        create_app({'SQLALCHEMY_DATABASE_URI': 'sqlite://'})
