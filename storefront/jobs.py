"""
Scheduled job entry points.

Both jobs expect an application context and are invoked by an external
scheduler through `app.py --sweep-expired` / `app.py --update-prices`.
"""

from storefront.business.ordering.expiration_sweeper import ExpirationSweeper
from storefront.business.pricing.pricing_orchestrator import PricingOrchestrator
from storefront.logger import get_logger
from storefront.services.pricing.competitor_price_client import CompetitorPriceClient

logger = get_logger("storefront.jobs")


def order_cleanup_job(now=None):
    """
    Expire overdue pending orders and return their stock.

    Returns:
        int: Number of orders expired
    """
    swept = ExpirationSweeper().sweep_expired(now)
    logger.info(f"Cleaned up {swept} expired orders")
    return swept


def price_update_job(dry_run=False, price_source=None):
    """
    Recompute dynamic prices for every product.

    Args:
        dry_run: Compute and log prices without saving them
        price_source: Competitor price source; built from app config when omitted

    Returns:
        PricingBatchResult, or None when another batch was already running
    """
    if price_source is None:
        price_source = CompetitorPriceClient.from_config()
    orchestrator = PricingOrchestrator(price_source=price_source)
    return orchestrator.run_batch(dry_run=dry_run)
