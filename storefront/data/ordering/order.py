from storefront import db
from storefront.data.core.timestamped_base import TimestampedBase


class OrderStatus:
    PENDING = "pending"
    PAID = "paid"
    EXPIRED = "expired"
    FAILED = "failed"

    ALL = (PENDING, PAID, EXPIRED, FAILED)
    TERMINAL = (PAID, EXPIRED, FAILED)


class Order(TimestampedBase):
    """
    A customer order.

    Created `pending` with `expires_at` set; leaves `pending` exactly once, to
    `paid`, `failed` or `expired`, and `expires_at` is cleared on the way out.
    Status changes go through OrderStatusManager.
    """
    __tablename__ = 'orders'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING)
    total_price = db.Column(db.Integer, nullable=False, default=0)
    expires_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'paid', 'expired', 'failed')",
            name='ck_orders_status',
        ),
        db.Index('ix_orders_status_expires_at', 'status', 'expires_at'),
    )

    user = db.relationship('User', back_populates='orders')
    lines = db.relationship(
        'OrderLine',
        back_populates='order',
        cascade='all, delete-orphan',
        order_by='OrderLine.id',
    )

    def __repr__(self):
        return f'<Order {self.id} User:{self.user_id} {self.status} Total:{self.total_price}>'
