"""
Tests for the cart collaborator
"""
import pytest

from storefront.business.errors import ProductNotFoundError
from storefront.business.ordering.cart_context import CartContext, CartLine
from storefront.data.ordering.cart_addition import CartAddition


@pytest.fixture
def cart(user):
    return CartContext.for_user(user)


def _additions(product):
    return [a.quantity for a in CartAddition.query.filter_by(product_id=product.id).order_by(CartAddition.id)]


def test_for_user_reuses_the_same_cart(user):
    first = CartContext.for_user(user)
    second = CartContext.for_user(user)
    assert first.cart.id == second.cart.id


def test_add_product_creates_then_increments_a_line(cart, make_product):
    product = make_product(default_price=300)

    cart.add_product(product.id, 2)
    cart.add_product(product.id, 3)

    assert cart.lines() == [CartLine(product.id, 5)]
    assert cart.total_price == 1500
    assert _additions(product) == [2, 3]


def test_add_product_rejects_bad_input(cart, make_product):
    product = make_product()
    with pytest.raises(ValueError):
        cart.add_product(product.id, 0)
    with pytest.raises(ProductNotFoundError):
        cart.add_product(9999, 1)


def test_update_product_sets_quantity_and_logs_only_increases(cart, make_product):
    product = make_product()

    cart.update_product(product.id, 4)
    cart.update_product(product.id, 1)
    cart.update_product(product.id, 6)

    assert cart.lines() == [CartLine(product.id, 6)]
    assert _additions(product) == [4, 5]


def test_update_product_to_zero_removes_the_line(cart, make_product):
    product = make_product()
    cart.update_product(product.id, 2)

    assert cart.update_product(product.id, 0) is None
    assert cart.is_empty


def test_counts_and_totals(cart, make_product):
    cheap = make_product(default_price=100)
    pricey = make_product(default_price=1000, dynamic_price=900)
    cart.add_product(cheap.id, 3)
    cart.add_product(pricey.id, 1)

    assert cart.distinct_products_count == 2
    assert cart.total_items_count == 4
    assert cart.total_price == 3 * 100 + 900
    assert not cart.is_empty


def test_remove_item_and_clear(cart, make_product):
    first = make_product()
    second = make_product()
    item = cart.add_product(first.id, 1)
    cart.add_product(second.id, 1)

    assert cart.remove_item(item.id) is not None
    assert cart.remove_item(item.id) is None
    assert [line.product_id for line in cart.lines()] == [second.id]

    cart.clear()
    assert cart.is_empty
    # the demand history outlives the cart
    assert _additions(first) == [1]
