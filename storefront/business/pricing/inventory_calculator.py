from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from storefront.data.catalog.product import Product

# (lowest quantity, multiplier), ascending
STOCK_LEVEL_BANDS = (
    (1, 1.3),     # very low stock
    (51, 1.2),    # low
    (101, 1.1),   # medium-low
    (176, 1.0),   # good
    (251, 0.9),   # high stock, discount
)

CATEGORY_ADJUSTMENTS = {
    "footwear": 1.05,
    "accessories": 0.95,
    "clothing": 1.0,
}


class InventoryCalculator:
    """Price multiplier from stock level and category"""

    @staticmethod
    def stock_level_multiplier(quantity: int) -> float:
        multiplier = STOCK_LEVEL_BANDS[0][1]
        for floor, value in STOCK_LEVEL_BANDS:
            if quantity < floor:
                break
            multiplier = value
        return multiplier

    @staticmethod
    def category_adjustment(category: str | None) -> float:
        return CATEGORY_ADJUSTMENTS.get((category or "").strip().lower(), 1.0)

    @classmethod
    def multiplier(cls, product: Product) -> float:
        """
        Stock multiplier times category adjustment, rounded half-up to 2 places.
        No stock means no signal: 1.0.
        """
        if not product.quantity:
            return 1.0

        combined = (
            Decimal(str(cls.stock_level_multiplier(product.quantity)))
            * Decimal(str(cls.category_adjustment(product.category)))
        )
        return float(combined.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
