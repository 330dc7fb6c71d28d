"""
Tests for order status transitions
"""
import pytest

from storefront import db
from storefront.business.errors import InvalidStatusTransitionError
from storefront.business.ordering.order_status import OrderStatusManager, OrderStatusValidator
from storefront.data.ordering.order import Order, OrderStatus
from storefront.utils.clock import utcnow


@pytest.fixture
def pending_order(user):
    order = Order(user_id=user.id, status=OrderStatus.PENDING, expires_at=utcnow())
    db.session.add(order)
    db.session.commit()
    return order


@pytest.mark.parametrize('new_status', [OrderStatus.PAID, OrderStatus.FAILED, OrderStatus.EXPIRED])
def test_pending_can_leave_to_any_terminal_state(new_status):
    assert OrderStatusValidator.can_transition(OrderStatus.PENDING, new_status)


@pytest.mark.parametrize('terminal', OrderStatus.TERMINAL)
@pytest.mark.parametrize('new_status', OrderStatus.ALL)
def test_terminal_states_have_no_exits(terminal, new_status):
    assert not OrderStatusValidator.can_transition(terminal, new_status)


def test_transition_clears_expiry_and_writes_values(pending_order):
    change = OrderStatusManager().transition(pending_order, OrderStatus.PAID, total_price=4200)
    db.session.commit()

    assert change.from_status == OrderStatus.PENDING
    assert change.to_status == OrderStatus.PAID
    order = db.session.get(Order, pending_order.id)
    assert order.status == OrderStatus.PAID
    assert order.total_price == 4200
    assert order.expires_at is None


def test_terminal_order_cannot_move_again(pending_order):
    manager = OrderStatusManager()
    manager.transition(pending_order, OrderStatus.EXPIRED)
    db.session.commit()

    with pytest.raises(InvalidStatusTransitionError) as excinfo:
        manager.transition(pending_order, OrderStatus.PAID)
    assert excinfo.value.current_status == OrderStatus.EXPIRED


def test_stale_status_loses_the_race(pending_order):
    """Two holders of the same pending order: only the first transition applies"""
    assert pending_order.status == OrderStatus.PENDING
    db.session.execute(
        Order.__table__.update()
        .where(Order.__table__.c.id == pending_order.id)
        .values(status=OrderStatus.EXPIRED)
    )

    with pytest.raises(InvalidStatusTransitionError) as excinfo:
        OrderStatusManager().transition(pending_order, OrderStatus.PAID)

    assert excinfo.value.current_status == OrderStatus.EXPIRED
    assert pending_order.status == OrderStatus.EXPIRED
