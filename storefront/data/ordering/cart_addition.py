from storefront import db
from storefront.data.core.timestamped_base import TimestampedBase


class CartAddition(TimestampedBase):
    """
    Append-only log of units added to carts.

    Cart items are deleted when an order is placed, so demand pricing reads
    cart activity from this log instead of from live cart items.
    """
    __tablename__ = 'cart_additions'

    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_cart_additions_quantity_positive'),
    )

    def __repr__(self):
        return f'<CartAddition Product:{self.product_id} +{self.quantity}>'
