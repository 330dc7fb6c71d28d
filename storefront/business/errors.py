"""
Storefront error taxonomy.

Placement errors carry the terminal `failed` order (when one was created) on
`error.order` so callers can report it; the presentation layer maps each class
to an HTTP status.
"""

from __future__ import annotations


class StorefrontError(Exception):
    """Base class for storefront business errors"""


class PlacementError(StorefrontError):
    """Order placement could not complete; any reserved stock has been returned"""

    def __init__(self, message, order=None):
        super().__init__(message)
        self.order = order


class EmptyCartError(PlacementError):
    def __init__(self, message="Cart is empty"):
        super().__init__(message)


class InsufficientInventoryError(PlacementError):
    def __init__(self, product_name, available, requested, order=None):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Not enough inventory for {product_name}. Available: {available}, Requested: {requested}",
            order=order,
        )


class ProductNotFoundError(InsufficientInventoryError):
    """The product vanished between cart add and placement; nothing is available"""

    def __init__(self, product_id, requested=0, order=None):
        self.product_id = product_id
        super().__init__(f"product {product_id}", available=0, requested=requested, order=order)
        # replace the inventory wording, keep the attributes
        self.args = (f"Product {product_id} not found",)


class PersistenceError(PlacementError):
    """Unexpected storage failure during placement, raised after compensation"""


class PriceSourceUnavailableError(StorefrontError):
    """Competitor price data could not be fetched; pricing proceeds without it"""


class QuantityBelowReservedError(ValueError):
    """Raised when stock would be set below what pending orders have reserved"""

    def __init__(self, product_name, requested, reserved):
        self.product_name = product_name
        self.requested = requested
        self.reserved = reserved
        super().__init__(
            f"Quantity for {product_name} cannot be set to {requested}: "
            f"{reserved} units are reserved by pending orders"
        )


class InvalidStatusTransitionError(ValueError):
    def __init__(self, order_id, current_status, new_status):
        self.order_id = order_id
        self.current_status = current_status
        self.new_status = new_status
        super().__init__(f"Invalid status transition for order {order_id}: {current_status} -> {new_status}")
