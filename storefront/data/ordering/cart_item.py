from storefront import db
from storefront.data.core.timestamped_base import TimestampedBase


class CartItem(TimestampedBase):
    """A product line in a cart. A product appears at most once per cart."""
    __tablename__ = 'cart_items'

    cart_id = db.Column(db.Integer, db.ForeignKey('carts.id'), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    __table_args__ = (
        db.UniqueConstraint('cart_id', 'product_id', name='uix_cart_items_cart_product'),
        db.CheckConstraint('quantity >= 0', name='ck_cart_items_quantity_non_negative'),
    )

    cart = db.relationship('Cart', back_populates='items')
    product = db.relationship('Product')

    def __repr__(self):
        return f'<CartItem Cart:{self.cart_id} Product:{self.product_id} Qty:{self.quantity}>'

    @property
    def subtotal(self):
        if self.product is None:
            return 0
        return self.quantity * self.product.current_price
