"""
Cart API.

Stock checks here are advisory only: availability is enforced atomically
when the order is placed.
"""

from flask import Blueprint, jsonify

from storefront import db
from storefront.business.errors import ProductNotFoundError
from storefront.business.ordering.cart_context import CartContext
from storefront.data.catalog.product import Product
from storefront.logger import get_logger
from storefront.presentation.routes.request_params import current_user, param
from storefront.services.ordering.serializers import cart_json

bp = Blueprint('cart', __name__)
logger = get_logger("storefront.routes.cart")


def _cart_context():
    return CartContext.for_user(current_user())


def _cart_response(context, message=None, error=None, status=200):
    body = {}
    if message:
        body['message'] = message
    if error:
        body['error'] = error
    body['cart'] = cart_json(context)
    body['total_price'] = context.total_price
    return jsonify(body), status


@bp.get('')
def show_cart():
    return _cart_response(_cart_context())


@bp.delete('')
def clear_cart():
    context = _cart_context()
    context.clear()
    return jsonify({'message': 'Cart cleared'})


@bp.post('/items')
def set_item():
    """Set a product's quantity in the cart; quantity 0 removes the line"""
    context = _cart_context()
    product_id = param('product_id', type=int)
    quantity = param('quantity', 0, type=int)

    if quantity is None or quantity < 0:
        return _cart_response(context, error='Quantity must be >= 0', status=422)

    product = db.session.get(Product, product_id) if product_id is not None else None
    if product is None:
        return jsonify({'error': 'Product not found'}), 404

    if quantity > 0 and product.quantity < quantity:
        return _cart_response(
            context,
            error=f"Not enough inventory available for {product.name}",
            status=422,
        )

    try:
        context.update_product(product.id, quantity)
    except ProductNotFoundError:
        return jsonify({'error': 'Product not found'}), 404

    if quantity == 0:
        message = f"{product.name} removed from cart"
    else:
        message = f"{product.name} updated in cart"
    logger.debug(f"Cart {context.cart.id}: {message}")
    return _cart_response(context, message=message)


def _find_item(context, item_id):
    return next((item for item in context.items if item.id == item_id), None)


@bp.patch('/items/<int:item_id>')
def update_item(item_id):
    context = _cart_context()
    item = _find_item(context, item_id)
    if item is None or item.product is None:
        return jsonify({'error': 'Cart item not found'}), 404

    quantity = param('quantity', 0, type=int) or 0
    product = item.product

    if quantity <= 0:
        context.remove_item(item_id)
        return _cart_response(context, message=f"{product.name} removed from cart")

    if product.quantity < quantity:
        return _cart_response(context, error='Not enough inventory available', status=422)

    context.update_product(product.id, quantity)
    return _cart_response(context, message='Cart item updated')


@bp.delete('/items/<int:item_id>')
def remove_item(item_id):
    context = _cart_context()
    if context.remove_item(item_id) is None:
        return jsonify({'error': 'Cart item not found'}), 404
    return _cart_response(context, message='Item removed from cart')
