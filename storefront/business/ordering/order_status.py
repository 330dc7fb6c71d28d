from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import update

from storefront import db
from storefront.business.errors import InvalidStatusTransitionError
from storefront.data.ordering.order import Order, OrderStatus
from storefront.utils.clock import utcnow


class OrderStatusValidator:
    """
    Allowed order status transitions.

    `pending` is the only state with exits; every other state is terminal.
    """

    _NEXT = {
        OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.FAILED, OrderStatus.EXPIRED},
        OrderStatus.PAID: set(),
        OrderStatus.FAILED: set(),
        OrderStatus.EXPIRED: set(),
    }

    @classmethod
    def can_transition(cls, current_status: str, new_status: str) -> bool:
        return new_status in cls._NEXT.get(current_status, set())


@dataclass(frozen=True)
class StatusChange:
    order_id: int
    from_status: str
    to_status: str


class OrderStatusManager:
    """
    Applies status transitions as conditional updates.

    The UPDATE only matches while the row still holds the status the caller
    saw, so a placement finishing late and a sweep expiring the same order
    cannot both win. Leaving `pending` always clears `expires_at`.
    """

    def transition(self, order: Order, new_status: str, **values) -> StatusChange:
        """
        Move `order` to `new_status`, optionally writing extra columns in the same statement.

        Args:
            order: Order to transition (refreshed from the database afterwards)
            new_status: Target status
            **values: Additional column values, e.g. total_price

        Returns:
            StatusChange describing the applied transition

        Raises:
            InvalidStatusTransitionError: if the transition is not allowed or the
                stored status changed underneath the caller
        """
        current = order.status
        if not OrderStatusValidator.can_transition(current, new_status):
            raise InvalidStatusTransitionError(order.id, current, new_status)

        values.setdefault('expires_at', None)
        result = db.session.execute(
            update(Order)
            .where(Order.id == order.id, Order.status == current)
            .values(status=new_status, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.session.refresh(order)
            raise InvalidStatusTransitionError(order.id, order.status, new_status)

        db.session.refresh(order)
        return StatusChange(order.id, current, new_status)
