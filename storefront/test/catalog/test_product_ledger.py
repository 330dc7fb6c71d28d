"""
Tests for the product ledger and Product stock invariants
"""
import pytest
from sqlalchemy import text

from storefront import db
from storefront.business.catalog.product_ledger import ProductLedger
from storefront.business.errors import QuantityBelowReservedError
from storefront.data.catalog.product import Product
from storefront.data.ordering.order import Order, OrderStatus
from storefront.data.ordering.order_line import OrderLine


def _pending_order(user, product, quantity, status=OrderStatus.PENDING):
    order = Order(user_id=user.id, status=status)
    db.session.add(order)
    db.session.flush()
    db.session.add(OrderLine(order_id=order.id, product_id=product.id, quantity=quantity,
                             price_at_order_time=product.current_price))
    db.session.commit()
    return order


def test_current_price_prefers_dynamic_price(make_product):
    product = make_product(default_price=1000)
    assert product.current_price == 1000

    product.dynamic_price = 1200
    db.session.commit()
    assert product.current_price == 1200


def test_decrement_if_available_reserves_stock(make_product):
    product = make_product(quantity=5, default_price=700)

    reservation = ProductLedger().decrement_if_available(product.id, 3)
    db.session.commit()

    assert reservation.quantity == 3
    assert reservation.unit_price == 700
    assert reservation.product_name == product.name
    assert db.session.get(Product, product.id).quantity == 2


def test_decrement_if_available_refuses_short_stock(make_product):
    product = make_product(quantity=2)

    assert ProductLedger().decrement_if_available(product.id, 3) is None
    db.session.rollback()
    assert db.session.get(Product, product.id).quantity == 2


def test_decrement_can_take_the_last_unit(make_product):
    product = make_product(quantity=1)
    ledger = ProductLedger()

    assert ledger.decrement_if_available(product.id, 1) is not None
    assert ledger.decrement_if_available(product.id, 1) is None
    db.session.commit()
    assert db.session.get(Product, product.id).quantity == 0


def test_decrement_unknown_product_returns_none():
    assert ProductLedger().decrement_if_available(9999, 1) is None


def test_decrement_checks_stored_quantity_not_loaded_copy(make_product):
    product = make_product(quantity=5)
    assert product.quantity == 5

    # another writer takes most of the stock behind this session's back
    db.session.execute(text("UPDATE products SET quantity = 1 WHERE id = :id"), {'id': product.id})

    assert ProductLedger().decrement_if_available(product.id, 3) is None
    assert ProductLedger().get(product.id).quantity == 1


def test_decrement_rejects_non_positive_quantity(make_product):
    product = make_product()
    with pytest.raises(ValueError):
        ProductLedger().decrement_if_available(product.id, 0)


def test_increment_returns_stock(make_product):
    product = make_product(quantity=4)
    ProductLedger().increment(product.id, 6)
    db.session.commit()
    assert db.session.get(Product, product.id).quantity == 10


def test_quantity_cannot_go_negative(make_product):
    product = make_product(quantity=4)
    with pytest.raises(ValueError):
        product.quantity = -1


def test_quantity_cannot_drop_below_pending_reservations(make_product, user):
    product = make_product(quantity=10)
    _pending_order(user, product, 4)

    ledger = ProductLedger()
    assert ledger.reserved_quantity(product.id) == 4

    with pytest.raises(QuantityBelowReservedError) as excinfo:
        ledger.set_quantity(product, 3)
    assert excinfo.value.reserved == 4
    assert excinfo.value.requested == 3

    ledger.set_quantity(product, 4)
    db.session.commit()
    assert db.session.get(Product, product.id).quantity == 4


def test_terminal_orders_do_not_count_as_reserved(make_product, user):
    product = make_product(quantity=10)
    _pending_order(user, product, 4, status=OrderStatus.PAID)
    _pending_order(user, product, 2, status=OrderStatus.EXPIRED)

    assert ProductLedger().reserved_quantity(product.id) == 0
    ProductLedger().set_quantity(product, 0)
    db.session.commit()
    assert db.session.get(Product, product.id).quantity == 0


def test_product_requires_name_and_category():
    with pytest.raises(ValueError):
        Product(name='', category='Clothing', default_price=100)
    with pytest.raises(ValueError):
        Product(name='Hat', category='  ', default_price=100)


def test_prices_cannot_be_negative(make_product):
    product = make_product()
    with pytest.raises(ValueError):
        product.dynamic_price = -5


def test_record_pricing_state(make_product):
    product = make_product()
    ledger = ProductLedger()
    ledger.record_dynamic_price(product, 1234)
    ledger.record_demand_multiplier(product, 1.15)
    db.session.commit()

    stored = db.session.get(Product, product.id)
    assert stored.dynamic_price == 1234
    assert stored.last_demand_multiplier == pytest.approx(1.15)
