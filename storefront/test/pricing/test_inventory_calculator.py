import pytest

from storefront.business.pricing.inventory_calculator import InventoryCalculator
from storefront.data.catalog.product import Product


def _product(quantity, category='Clothing'):
    return Product(name='Item', category=category, default_price=1000, quantity=quantity)


@pytest.mark.parametrize('quantity, expected', [
    (1, 1.3), (50, 1.3),
    (51, 1.2), (100, 1.2),
    (101, 1.1), (175, 1.1),
    (176, 1.0), (250, 1.0),
    (251, 0.9), (10000, 0.9),
])
def test_stock_level_bands(quantity, expected):
    assert InventoryCalculator.stock_level_multiplier(quantity) == expected


@pytest.mark.parametrize('category, expected', [
    ('footwear', 1.05), ('FOOTWEAR', 1.05), ('Accessories', 0.95),
    ('clothing', 1.0), ('garden', 1.0), (None, 1.0),
])
def test_category_adjustment(category, expected):
    assert InventoryCalculator.category_adjustment(category) == expected


@pytest.mark.parametrize('quantity, category, expected', [
    (10, 'Footwear', 1.37),
    (300, 'Accessories', 0.86),
    (300, 'Footwear', 0.95),
    (60, 'Clothing', 1.2),
    (120, 'Toys', 1.1),
])
def test_multiplier_is_rounded_half_up(quantity, category, expected):
    assert InventoryCalculator().multiplier(_product(quantity, category)) == expected


def test_no_stock_is_no_signal():
    assert InventoryCalculator().multiplier(_product(0, 'Footwear')) == 1.0
