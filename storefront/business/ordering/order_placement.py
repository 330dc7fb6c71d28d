"""
Order placement: converts a cart into a paid order.

Each cart line is reserved with one conditional UPDATE against the product
ledger and committed together with its order line. When a line cannot be
reserved, or anything unexpected happens, every line already committed for
this placement is returned to stock and the order is marked `failed`.
"""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from storefront import db
from storefront.business.catalog.product_ledger import ProductLedger, Reservation
from storefront.business.errors import (
    EmptyCartError,
    InsufficientInventoryError,
    InvalidStatusTransitionError,
    PersistenceError,
    ProductNotFoundError,
)
from storefront.business.ordering.order_status import OrderStatusManager
from storefront.data.ordering.order import Order, OrderStatus
from storefront.data.ordering.order_line import OrderLine
from storefront.logger import get_logger
from storefront.utils.clock import utcnow

logger = get_logger("storefront.ordering.placement")

DEFAULT_RESERVATION_WINDOW = timedelta(minutes=15)


class OrderPlacementEngine:
    """
    Places orders against the shared product ledger.

    The engine holds no per-placement state, so one instance can serve
    concurrent requests as long as each runs in its own session.
    """

    def __init__(
        self,
        ledger: ProductLedger | None = None,
        status_manager: OrderStatusManager | None = None,
        reservation_window: timedelta = DEFAULT_RESERVATION_WINDOW,
    ):
        self.ledger = ledger or ProductLedger()
        self.status_manager = status_manager or OrderStatusManager()
        self.reservation_window = reservation_window

    def place(self, order: Order, cart) -> Order:
        """
        Place `order` for the contents of `cart`.

        Args:
            order: New, unsaved order with user_id set
            cart: Object exposing lines() -> [(product_id, quantity)] and clear(commit)

        Returns:
            The order, now `paid`, with one line per cart line

        Raises:
            EmptyCartError: cart has no positive lines; no order is created
            InsufficientInventoryError: a line could not be reserved; order is `failed`
            PersistenceError: storage failed mid-placement; order is `failed`
        """
        lines = [line for line in cart.lines() if line.quantity > 0]
        if not lines:
            raise EmptyCartError()

        self._create_pending(order)

        committed: list[Reservation] = []
        try:
            total = 0
            for line in lines:
                reservation = self._reserve_line(order, line.product_id, line.quantity)
                committed.append(reservation)
                total += reservation.quantity * reservation.unit_price

            self.status_manager.transition(order, OrderStatus.PAID, total_price=total)
            # the cart empties in the same commit that marks the order paid
            cart.clear(commit=False)
            db.session.commit()
        except InsufficientInventoryError as e:
            self._compensate(order, committed)
            e.order = order
            logger.info(f"Order {order.id} failed: {e}")
            raise
        except SQLAlchemyError as e:
            self._compensate(order, committed)
            logger.error(f"Order {order.id} failed on a storage error: {e}", exc_info=True)
            raise PersistenceError(f"Order {order.id} could not be placed: {e}", order=order) from e
        except Exception:
            self._compensate(order, committed)
            logger.error(f"Order {order.id} failed unexpectedly", exc_info=True)
            raise

        logger.info(f"Order {order.id} paid: {len(committed)} lines, total {order.total_price}")
        return order

    def _create_pending(self, order: Order) -> None:
        order.status = OrderStatus.PENDING
        order.total_price = 0
        order.expires_at = utcnow() + self.reservation_window
        db.session.add(order)
        db.session.commit()
        logger.debug(f"Order {order.id} created pending until {order.expires_at.isoformat()}")

    def _reserve_line(self, order: Order, product_id: int, quantity: int) -> Reservation:
        reservation = self.ledger.decrement_if_available(product_id, quantity)
        if reservation is None:
            db.session.rollback()
            product = self.ledger.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id, requested=quantity)
            raise InsufficientInventoryError(product.name, product.quantity, quantity)

        # decrement and order line commit together, so a failed commit leaves nothing to undo
        db.session.add(OrderLine(
            order_id=order.id,
            product_id=product_id,
            quantity=quantity,
            price_at_order_time=reservation.unit_price,
        ))
        db.session.commit()
        return reservation

    def _compensate(self, order: Order, committed: list[Reservation]) -> None:
        db.session.rollback()
        db.session.refresh(order)
        try:
            # claim the order first; whoever moves it out of pending owns its stock
            self.status_manager.transition(order, OrderStatus.FAILED)
        except InvalidStatusTransitionError:
            db.session.rollback()
            logger.warning(f"Order {order.id} is already {order.status}; its stock was released elsewhere")
            return

        for reservation in reversed(committed):
            self.ledger.increment(reservation.product_id, reservation.quantity)
            logger.info(
                f"Returned {reservation.quantity} x {reservation.product_name} to stock for failed order {order.id}"
            )
        db.session.commit()
