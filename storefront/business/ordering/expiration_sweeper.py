from __future__ import annotations

from datetime import datetime

from storefront import db
from storefront.business.catalog.product_ledger import ProductLedger
from storefront.business.errors import InvalidStatusTransitionError
from storefront.business.ordering.order_status import OrderStatusManager
from storefront.data.ordering.order import Order, OrderStatus
from storefront.logger import get_logger
from storefront.utils.clock import utcnow

logger = get_logger("storefront.ordering.sweeper")


class ExpirationSweeper:
    """
    Releases stock held by pending orders whose reservation window has passed.

    Each order is claimed with a conditional status update before its lines
    are returned to stock, and the claim and the increments commit together.
    Running two sweeps at once, or sweeping twice, returns each order's stock
    exactly once. Storage errors propagate to the caller.
    """

    def __init__(self, ledger: ProductLedger | None = None, status_manager: OrderStatusManager | None = None):
        self.ledger = ledger or ProductLedger()
        self.status_manager = status_manager or OrderStatusManager()

    def find_expired(self, now: datetime | None = None) -> list[Order]:
        now = now or utcnow()
        return (
            Order.query
            .filter(Order.status == OrderStatus.PENDING, Order.expires_at < now)
            .order_by(Order.expires_at)
            .all()
        )

    def sweep_expired(self, now: datetime | None = None) -> int:
        """
        Expire every overdue pending order.

        Returns:
            Number of orders moved to `expired` by this call
        """
        swept = 0
        for order in self.find_expired(now):
            if self._expire(order):
                swept += 1

        if swept:
            logger.info(f"Expired {swept} pending orders")
        return swept

    def _expire(self, order: Order) -> bool:
        try:
            self.status_manager.transition(order, OrderStatus.EXPIRED)
        except InvalidStatusTransitionError:
            # another sweep or the placement itself got there first
            db.session.rollback()
            return False

        for line in order.lines:
            self.ledger.increment(line.product_id, line.quantity)
        db.session.commit()

        logger.info(f"Order {order.id} expired; returned {sum(l.quantity for l in order.lines)} units to stock")
        return True
