from storefront import db
from storefront.data.core.timestamped_base import TimestampedBase


class Cart(TimestampedBase):
    """One shopping cart per user; items are managed through CartContext"""
    __tablename__ = 'carts'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)

    user = db.relationship('User', back_populates='cart')
    items = db.relationship(
        'CartItem',
        back_populates='cart',
        cascade='all, delete-orphan',
        order_by='CartItem.id',
    )

    def __repr__(self):
        return f'<Cart {self.id} User:{self.user_id} Items:{len(self.items)}>'
