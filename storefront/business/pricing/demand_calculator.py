"""
Demand multiplier from week-over-week purchase and cart-addition growth.

Stages:
1. Current ISO week volume; fewer than 10 units of activity means no signal (1.0).
2. Growth against the previous week, in percent.
3. Weighted growth, purchases counting more for cheaper products.
4. Step function per price tier.
5. Smoothing against the last stored multiplier, then the global band.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import NamedTuple

from sqlalchemy import func

from storefront import db
from storefront.business.catalog.product_ledger import ProductLedger
from storefront.data.catalog.product import Product
from storefront.data.ordering.cart_addition import CartAddition
from storefront.data.ordering.order import Order, OrderStatus
from storefront.data.ordering.order_line import OrderLine
from storefront.utils.clock import utcnow, week_bounds
from storefront.utils.rounding import round_half_up

MIN_WEEKLY_VOLUME = 10
MAX_CHANGE_PER_RUN = 0.15
MULTIPLIER_FLOOR = 0.7
MULTIPLIER_CEILING = 1.5

LOW = "low"
MEDIUM = "medium"
HIGH = "high"
PREMIUM = "premium"


class Band(NamedTuple):
    """
    A step of a tier's growth -> multiplier table.

    The band applies from `floor` upwards; `closed=False` means `floor` itself
    still belongs to the band below.
    """
    floor: float
    multiplier: float
    closed: bool = True

    def admits(self, growth: float) -> bool:
        return growth >= self.floor if self.closed else growth > self.floor


_NEG_INF = float('-inf')

# Ordered lowest band first. Cheaper tiers swing harder on tighter growth bands.
TIER_BANDS = {
    LOW: (
        Band(_NEG_INF, 0.75),
        Band(-25, 0.85, closed=False),
        Band(-10, 0.92),
        Band(-3, 1.0),
        Band(3, 1.08, closed=False),
        Band(10, 1.20),
        Band(25, 1.35),
        Band(40, 1.50),
    ),
    MEDIUM: (
        Band(_NEG_INF, 0.80),
        Band(-30, 0.90, closed=False),
        Band(-15, 0.95),
        Band(-5, 1.0),
        Band(5, 1.05, closed=False),
        Band(15, 1.15),
        Band(30, 1.25),
        Band(50, 1.35),
    ),
    HIGH: (
        Band(_NEG_INF, 0.85),
        Band(-35, 0.92, closed=False),
        Band(-20, 0.96),
        Band(-8, 1.0),
        Band(8, 1.03, closed=False),
        Band(20, 1.08),
        Band(35, 1.15),
        Band(60, 1.25),
    ),
    PREMIUM: (
        Band(_NEG_INF, 0.90),
        Band(-40, 0.95, closed=False),
        Band(-25, 0.98),
        Band(-10, 1.0),
        Band(10, 1.02, closed=False),
        Band(25, 1.05),
        Band(40, 1.10),
        Band(70, 1.20),
    ),
}

# (purchase_weight, cart_weight)
TIER_WEIGHTS = {
    LOW: (0.8, 0.2),
    MEDIUM: (0.7, 0.3),
    HIGH: (0.6, 0.4),
    PREMIUM: (0.5, 0.5),
}


@dataclass(frozen=True)
class WeeklyDemand:
    purchases: int
    cart_additions: int

    @property
    def total(self) -> int:
        return self.purchases + self.cart_additions


@dataclass(frozen=True)
class GrowthRate:
    purchases: float = 0.0
    cart_additions: float = 0.0
    total: float = 0.0


def price_tier(price: int | None) -> str:
    price = price or 0
    if 1 <= price <= 1000:
        return LOW
    if 1001 <= price <= 3000:
        return MEDIUM
    if 3001 <= price <= 6000:
        return HIGH
    return PREMIUM


def tier_multiplier(tier: str, weighted_growth: float) -> float:
    multiplier = 1.0
    for band in TIER_BANDS[tier]:
        if not band.admits(weighted_growth):
            break
        multiplier = band.multiplier
    return multiplier


def percent_growth(current: int, previous: int) -> float:
    if not previous:
        return 0.0
    return round_half_up((current - previous) / previous * 100, 2)


def growth_between(current: WeeklyDemand, previous: WeeklyDemand) -> GrowthRate:
    if previous.total == 0:
        return GrowthRate()
    return GrowthRate(
        purchases=percent_growth(current.purchases, previous.purchases),
        cart_additions=percent_growth(current.cart_additions, previous.cart_additions),
        total=percent_growth(current.total, previous.total),
    )


def weighted_growth(tier: str, growth: GrowthRate) -> float:
    purchase_weight, cart_weight = TIER_WEIGHTS[tier]
    return round_half_up(growth.purchases * purchase_weight + growth.cart_additions * cart_weight, 2)


def smooth(raw_multiplier: float, last_multiplier: float) -> float:
    """Limit the move from `last_multiplier` to MAX_CHANGE_PER_RUN, then clamp to the global band"""
    change = raw_multiplier - last_multiplier
    if abs(change) > MAX_CHANGE_PER_RUN:
        change = MAX_CHANGE_PER_RUN if change > 0 else -MAX_CHANGE_PER_RUN
    return min(max(last_multiplier + change, MULTIPLIER_FLOOR), MULTIPLIER_CEILING)


class DemandCalculator:
    """
    Short-lived calculator for one pricing run.

    `now` pins the week boundaries so a batch sees one consistent calendar.
    When `persist` is set the smoothed result is written to the product's
    `last_demand_multiplier` through the ledger (the caller commits).
    """

    def __init__(self, ledger: ProductLedger | None = None, now: datetime | None = None, persist: bool = True):
        self.ledger = ledger or ProductLedger()
        self.now = now or utcnow()
        self.persist = persist

    def weekly_demand(self, product: Product, moment: datetime) -> WeeklyDemand:
        start, end = week_bounds(moment)

        purchases = (
            db.session.query(func.coalesce(func.sum(OrderLine.quantity), 0))
            .join(Order, Order.id == OrderLine.order_id)
            .filter(
                OrderLine.product_id == product.id,
                Order.status == OrderStatus.PAID,
                Order.created_at >= start,
                Order.created_at < end,
            )
            .scalar()
        )
        cart_additions = (
            db.session.query(func.coalesce(func.sum(CartAddition.quantity), 0))
            .filter(
                CartAddition.product_id == product.id,
                CartAddition.created_at >= start,
                CartAddition.created_at < end,
            )
            .scalar()
        )
        return WeeklyDemand(purchases=int(purchases), cart_additions=int(cart_additions))

    def multiplier(self, product: Product) -> float:
        current = self.weekly_demand(product, self.now)
        if current.total < MIN_WEEKLY_VOLUME:
            return 1.0

        previous = self.weekly_demand(product, self.now - timedelta(weeks=1))
        tier = price_tier(product.current_price)
        growth = weighted_growth(tier, growth_between(current, previous))
        raw = tier_multiplier(tier, growth)

        last = product.last_demand_multiplier if product.last_demand_multiplier is not None else 1.0
        result = smooth(raw, last)

        if self.persist:
            self.ledger.record_demand_multiplier(product, result)
        return result
