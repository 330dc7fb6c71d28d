from storefront import db
from sqlalchemy import func
from sqlalchemy.orm import validates
from storefront.data.core.timestamped_base import TimestampedBase
from storefront.data.ordering.order import Order, OrderStatus


class OrderLine(TimestampedBase):
    """
    A product line on an order.

    `price_at_order_time` is the product's current price captured when stock
    was decremented. It never changes afterwards, so order totals survive
    later repricing.
    """
    __tablename__ = 'order_lines'

    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    price_at_order_time = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_order_lines_quantity_positive'),
        db.CheckConstraint('price_at_order_time >= 0', name='ck_order_lines_price_non_negative'),
    )

    order = db.relationship('Order', back_populates='lines')
    product = db.relationship('Product')

    def __repr__(self):
        return f'<OrderLine Order:{self.order_id} Product:{self.product_id} {self.quantity}x{self.price_at_order_time}>'

    @property
    def subtotal(self):
        return self.quantity * self.price_at_order_time

    @validates('price_at_order_time')
    def validate_price_snapshot(self, key, value):
        current = self.price_at_order_time
        if current is not None and current != value:
            raise ValueError("price_at_order_time is immutable once captured")
        return value

    @validates('quantity')
    def validate_quantity(self, key, value):
        if value is None or value <= 0:
            raise ValueError("quantity must be greater than 0")
        return value

    @classmethod
    def pending_quantity_for_product(cls, product_id):
        """Units of a product held by orders still in `pending` status"""
        with db.session.no_autoflush:
            total = (
                db.session.query(func.coalesce(func.sum(cls.quantity), 0))
                .join(Order, Order.id == cls.order_id)
                .filter(cls.product_id == product_id, Order.status == OrderStatus.PENDING)
                .scalar()
            )
        return int(total or 0)
