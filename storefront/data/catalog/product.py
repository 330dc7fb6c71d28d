from storefront import db
from sqlalchemy.orm import validates
from storefront.business.errors import QuantityBelowReservedError
from storefront.data.core.timestamped_base import TimestampedBase


class Product(TimestampedBase):
    """
    Inventory-of-record for a sellable product.

    `quantity` is stock available to new orders; units held by pending orders
    have already been subtracted. Order placement and the expiration sweeper
    change it with single conditional UPDATE statements (see ProductLedger),
    which bypass the ORM validator below. Every other assignment goes through
    `validate_quantity`.
    """
    __tablename__ = 'products'

    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(100), nullable=False)
    default_price = db.Column(db.Integer, nullable=False)
    dynamic_price = db.Column(db.Integer, nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    last_demand_multiplier = db.Column(db.Float, nullable=False, default=1.0)

    __table_args__ = (
        db.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
        db.CheckConstraint('default_price >= 0', name='ck_products_default_price_non_negative'),
        db.UniqueConstraint('name', 'category', name='uix_products_name_category'),
    )

    def __repr__(self):
        return f'<Product {self.id}: {self.name} Qty:{self.quantity} Price:{self.current_price}>'

    @property
    def current_price(self):
        """Dynamic price when one has been computed, otherwise the default price"""
        if self.dynamic_price is not None:
            return self.dynamic_price
        return self.default_price

    @validates('name', 'category')
    def validate_presence(self, key, value):
        if value is None or not str(value).strip():
            raise ValueError(f"{key} is required")
        return value

    @validates('default_price', 'dynamic_price')
    def validate_price(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} must be >= 0")
        return value

    @validates('quantity')
    def validate_quantity(self, key, value):
        if value is None:
            return value
        if value < 0:
            raise ValueError("quantity must be >= 0")
        if self.id is None:
            return value

        from storefront.data.ordering.order_line import OrderLine
        reserved = OrderLine.pending_quantity_for_product(self.id)
        if value < reserved:
            raise QuantityBelowReservedError(self.name, value, reserved)
        return value
