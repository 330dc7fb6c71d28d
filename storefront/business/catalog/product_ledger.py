from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import update

from storefront import db
from storefront.data.catalog.product import Product
from storefront.data.ordering.order_line import OrderLine
from storefront.logger import get_logger
from storefront.utils.clock import utcnow

logger = get_logger("storefront.catalog.ledger")


@dataclass(frozen=True)
class Reservation:
    """Outcome of a successful conditional decrement"""
    product_id: int
    product_name: str
    quantity: int
    unit_price: int


class ProductLedger:
    """
    The only writer of product stock and pricing state.

    Stock changes made on behalf of orders are single conditional UPDATE
    statements, so the check and the write happen inside the database and
    concurrent placements cannot both spend the same unit. Administrative
    quantity changes go through the ORM and the Product quantity validator.

    Nothing here commits; callers own the transaction boundary.
    """

    def get(self, product_id: int) -> Product | None:
        # populate_existing refreshes a stale identity-map copy with the row as stored now
        return db.session.get(Product, product_id, populate_existing=True)

    def decrement_if_available(self, product_id: int, quantity: int) -> Reservation | None:
        """
        Atomically subtract `quantity` from stock if at least that much is available.

        Args:
            product_id: Product to reserve
            quantity: Units requested (> 0)

        Returns:
            Reservation with the price captured right after the decrement,
            or None when stock is short or the product does not exist
        """
        if quantity <= 0:
            raise ValueError("quantity must be > 0")

        result = db.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.quantity >= quantity)
            .values(quantity=Product.quantity - quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None

        product = self.get(product_id)
        return Reservation(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.current_price,
        )

    def increment(self, product_id: int, quantity: int) -> None:
        """Atomically return `quantity` units to stock"""
        if quantity <= 0:
            raise ValueError("quantity must be > 0")

        db.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(quantity=Product.quantity + quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )

    def set_quantity(self, product: Product, quantity: int) -> Product:
        """
        Administrative stock change, validated against pending reservations.

        Raises:
            QuantityBelowReservedError: if pending orders hold more than `quantity`
            ValueError: if `quantity` is negative
        """
        old = product.quantity
        product.quantity = quantity
        logger.info(f"Stock for {product.name} set {old} -> {quantity}")
        return product

    def reserved_quantity(self, product_id: int) -> int:
        return OrderLine.pending_quantity_for_product(product_id)

    def record_demand_multiplier(self, product: Product, multiplier: float) -> None:
        product.last_demand_multiplier = multiplier

    def record_dynamic_price(self, product: Product, price: int) -> None:
        product.dynamic_price = price
