from __future__ import annotations

from dataclasses import dataclass

from storefront.utils.rounding import round_half_up

OVERPRICED_THRESHOLD = 10.0     # percent above competitor
UNDERPRICED_THRESHOLD = -5.0    # percent below competitor
MAX_DISCOUNT_FACTOR = 0.8
MAX_RAISE_FACTOR = 1.05
UNDERCUT_FACTOR = 0.95

REDUCE = "reduce"
INCREASE = "increase"
NONE = "none"


@dataclass(frozen=True)
class CompetitorAdjustment:
    kind: str
    price: int
    competitor_price: int | None = None
    percent_difference: float | None = None


def _competitor_price(item) -> int | None:
    try:
        return int(float(item.get("price")))
    except (TypeError, ValueError):
        return None


class CompetitorAnalyzer:
    """
    Nudges a computed price toward a competitor's price for the same product.

    Built per product for one pricing run; the snapshot is the list of
    `{"name", "price"}` records fetched once for the whole batch.
    """

    def __init__(self, product_name: str):
        self.product_name = product_name

    def find_competitor_price(self, snapshot) -> int | None:
        if not snapshot or not self.product_name:
            return None
        wanted = self.product_name.lower()
        for item in snapshot:
            name = item.get("name")
            if name is not None and str(name).lower() == wanted:
                return _competitor_price(item)
        return None

    def analyze(self, our_price: int, snapshot) -> CompetitorAdjustment:
        competitor_price = self.find_competitor_price(snapshot)
        if competitor_price is None or competitor_price <= 0:
            return CompetitorAdjustment(NONE, our_price)

        percent = round_half_up((our_price - competitor_price) / competitor_price * 100, 2)

        if percent > OVERPRICED_THRESHOLD:
            # match the competitor, but never more than 20% below our own price
            price = int(max(competitor_price, our_price * MAX_DISCOUNT_FACTOR))
            return CompetitorAdjustment(REDUCE, price, competitor_price, percent)
        if percent < UNDERPRICED_THRESHOLD:
            price = int(min(our_price * MAX_RAISE_FACTOR, competitor_price * UNDERCUT_FACTOR))
            return CompetitorAdjustment(INCREASE, price, competitor_price, percent)
        return CompetitorAdjustment(NONE, our_price, competitor_price, percent)

    def adjust(self, our_price: int, snapshot) -> int:
        """Price after competitor adjustment; unchanged without usable competitor data"""
        return self.analyze(our_price, snapshot).price
