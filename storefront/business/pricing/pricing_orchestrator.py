"""
Dynamic pricing: composes demand, inventory and competitor signals into one
bounded price per product.

    calculated = round(current_price * demand * inventory)
    adjusted   = competitor adjustment of calculated (when data is available)
    final      = clamp(adjusted, round(default * 0.8), round(default * 1.5))

The clamp against the default price is applied last and always holds.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from storefront import db
from storefront.business.catalog.product_ledger import ProductLedger
from storefront.business.errors import PriceSourceUnavailableError
from storefront.business.pricing.competitor_analyzer import CompetitorAnalyzer
from storefront.business.pricing.demand_calculator import DemandCalculator
from storefront.business.pricing.inventory_calculator import InventoryCalculator
from storefront.data.catalog.product import Product
from storefront.logger import get_logger
from storefront.utils.rounding import round_half_up

logger = get_logger("storefront.pricing.orchestrator")

FLOOR_FACTOR = 0.8
CEILING_FACTOR = 1.5


def price_bounds(default_price: int) -> tuple[int, int]:
    return round_half_up(default_price * FLOOR_FACTOR), round_half_up(default_price * CEILING_FACTOR)


@dataclass
class PricingBatchResult:
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    duration_seconds: float = 0.0
    competitor_data_used: bool = False


class PricingOrchestrator:
    """
    Recomputes dynamic prices.

    Calculators are built per run; `demand_calculator` and
    `inventory_calculator` may be injected (anything with a
    `multiplier(product)` method). `price_source` provides `fetch_snapshot()`.
    Only one batch runs at a time per process.
    """

    _batch_lock = threading.Lock()

    def __init__(
        self,
        ledger: ProductLedger | None = None,
        price_source=None,
        demand_calculator=None,
        inventory_calculator=None,
    ):
        self.ledger = ledger or ProductLedger()
        self.price_source = price_source
        self.demand_calculator = demand_calculator
        self.inventory_calculator = inventory_calculator or InventoryCalculator()

    def recompute(self, product: Product, competitor_snapshot=None, dry_run: bool = False) -> int:
        """
        Compute the bounded dynamic price for one product.

        Args:
            product: Product to price
            competitor_snapshot: Competitor price records, or None to skip that step
            dry_run: Compute only; the session is rolled back instead of committed

        Returns:
            int: The final price
        """
        try:
            final = self._price(product, competitor_snapshot, dry_run, self._demand_for(dry_run))
        except Exception:
            db.session.rollback()
            raise
        self._settle(dry_run)
        return final

    @staticmethod
    def _settle(dry_run: bool) -> None:
        # a dry run also discards whatever an injected calculator wrote
        if dry_run:
            db.session.rollback()
        else:
            db.session.commit()

    def _demand_for(self, dry_run: bool):
        """An injected calculator is used as is; dry runs rely on the rollback in _settle"""
        if self.demand_calculator is not None:
            return self.demand_calculator
        return DemandCalculator(self.ledger, persist=not dry_run)

    def _price(self, product: Product, competitor_snapshot, dry_run: bool, demand) -> int:
        base = product.current_price
        demand_multiplier = demand.multiplier(product)
        inventory_multiplier = self.inventory_calculator.multiplier(product)
        calculated = round_half_up(base * demand_multiplier * inventory_multiplier)

        adjusted = calculated
        if competitor_snapshot is not None:
            adjusted = CompetitorAnalyzer(product.name).adjust(calculated, competitor_snapshot)

        floor, ceiling = price_bounds(product.default_price)
        final = min(max(adjusted, floor), ceiling)

        logger.debug(
            f"Priced {product.name}: base={base} demand={demand_multiplier} "
            f"inventory={inventory_multiplier} calculated={calculated} adjusted={adjusted} final={final}"
        )

        if not dry_run:
            self.ledger.record_dynamic_price(product, final)
        return final

    def fetch_competitor_snapshot(self):
        """One best-effort fetch per batch; unavailability only degrades the run"""
        if self.price_source is None:
            return None
        try:
            return self.price_source.fetch_snapshot()
        except PriceSourceUnavailableError as e:
            logger.warning(f"Competitor prices unavailable, pricing without them: {e}")
            return None

    def run_batch(self, dry_run: bool = False) -> PricingBatchResult | None:
        """
        Reprice every product.

        A failure on one product is logged and rolled back without stopping
        the batch.

        Returns:
            PricingBatchResult, or None if another batch is already running
        """
        if not self._batch_lock.acquire(blocking=False):
            logger.warning("Price update already running, skipping this run")
            return None

        try:
            return self._run_batch(dry_run)
        finally:
            self._batch_lock.release()

    def _run_batch(self, dry_run: bool) -> PricingBatchResult:
        logger.info("Starting price update batch" + (" (dry run)" if dry_run else ""))
        start_time = time.monotonic()

        snapshot = self.fetch_competitor_snapshot()
        result = PricingBatchResult(competitor_data_used=snapshot is not None)

        demand = self._demand_for(dry_run)
        product_ids = [row.id for row in db.session.query(Product.id).order_by(Product.id)]
        for product_id in product_ids:
            product = db.session.get(Product, product_id)
            if product is None:
                continue
            name = product.name
            old_price = product.dynamic_price
            try:
                new_price = self._price(product, snapshot, dry_run, demand)
                self._settle(dry_run)
            except Exception as e:
                db.session.rollback()
                result.failed += 1
                logger.error(f"Failed to update price for product {product_id} ({name}): {e}", exc_info=True)
                continue

            if old_price != new_price:
                result.updated += 1
                logger.info(f"Updated price for {name}: {old_price} -> {new_price}")
            else:
                result.unchanged += 1

        result.duration_seconds = round(time.monotonic() - start_time, 2)
        logger.info(
            f"Price update completed. Updated {result.updated} products, "
            f"{result.failed} failed, in {result.duration_seconds} seconds"
        )
        return result
