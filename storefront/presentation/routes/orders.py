from datetime import timedelta

from flask import Blueprint, current_app, jsonify

from storefront import limiter
from storefront.business.errors import EmptyCartError, InsufficientInventoryError, PersistenceError
from storefront.business.ordering.cart_context import CartContext
from storefront.business.ordering.order_placement import OrderPlacementEngine
from storefront.data.ordering.order import Order
from storefront.logger import get_logger
from storefront.presentation.routes.request_params import current_user
from storefront.services.ordering.serializers import order_json

bp = Blueprint('orders', __name__)
logger = get_logger("storefront.routes.orders")


def _placement_engine():
    minutes = current_app.config['ORDER_RESERVATION_MINUTES']
    return OrderPlacementEngine(reservation_window=timedelta(minutes=minutes))


@bp.get('')
def list_orders():
    user = current_user()
    orders = user.orders.order_by(Order.created_at.desc(), Order.id.desc()).all()
    return jsonify({'orders': [order_json(order) for order in orders]})


@bp.get('/<int:order_id>')
def show_order(order_id):
    user = current_user()
    order = user.orders.filter(Order.id == order_id).first()
    if order is None:
        return jsonify({'error': 'Order not found'}), 404
    return jsonify({'order': order_json(order)})


@bp.post('')
@limiter.limit(lambda: current_app.config['ORDER_RATE_LIMIT'])
def create_order():
    user = current_user()
    cart = CartContext.for_user(user)
    order = Order(user_id=user.id)

    try:
        _placement_engine().place(order, cart)
    except EmptyCartError as e:
        return jsonify({'error': str(e)}), 422
    except InsufficientInventoryError as e:
        body = {'error': str(e)}
        if e.order is not None:
            body['order'] = order_json(e.order)
        return jsonify(body), 422
    except PersistenceError as e:
        logger.error(f"Order placement failed for user {user.id}: {e}")
        return jsonify({'error': 'Order could not be placed, please retry'}), 500

    return jsonify({'message': 'Order placed successfully', 'order': order_json(order)}), 201
