"""
Serializers
JSON shapes returned by the storefront API.
"""

from storefront.business.ordering.cart_context import CartContext
from storefront.data.catalog.product import Product
from storefront.data.ordering.order import Order


def product_json(product: Product) -> dict:
    data = product.to_dict(include_audit_fields=False)
    return {
        'id': data['id'],
        'name': data['name'],
        'category': data['category'],
        'dynamic_price': product.current_price,
        'quantity': data['quantity'],
    }


def cart_json(context: CartContext) -> dict:
    """Cart lines whose product still exists, plus totals"""
    items = []
    for item in context.items:
        if item.product is None:
            continue
        items.append({
            'id': item.id,
            'product': {
                'id': item.product.id,
                'name': item.product.name,
                'price': item.product.current_price,
            },
            'quantity': item.quantity,
            'subtotal': item.subtotal,
        })
    return {
        'id': context.cart.id,
        'items': items,
        'total_items': context.total_items_count,
    }


def order_json(order: Order) -> dict:
    return {
        'id': order.id,
        'status': order.status,
        'total_price': order.total_price,
        'created_at': order.created_at.isoformat() if order.created_at else None,
        'expires_at': order.expires_at.isoformat() if order.expires_at else None,
        'items': [
            {
                'id': line.id,
                'product': {
                    'id': line.product_id,
                    'name': line.product.name if line.product else None,
                },
                'quantity': line.quantity,
                'price': line.price_at_order_time,
                'subtotal': line.subtotal,
            }
            for line in order.lines
        ],
    }
