from __future__ import annotations

from dataclasses import dataclass

from storefront import db
from storefront.business.errors import ProductNotFoundError
from storefront.data.catalog.product import Product
from storefront.data.core.user import User
from storefront.data.ordering.cart import Cart
from storefront.data.ordering.cart_addition import CartAddition
from storefront.data.ordering.cart_item import CartItem
from storefront.logger import get_logger

logger = get_logger("storefront.ordering.cart")


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int


class CartContext:
    """
    Business wrapper around a user's cart.

    Order placement only relies on `lines()` and `clear()`; the rest backs the
    cart API. Mutating methods commit.
    """

    def __init__(self, cart: Cart):
        self.cart = cart

    @classmethod
    def for_user(cls, user: User) -> "CartContext":
        cart = user.cart
        if cart is None:
            cart = Cart(user_id=user.id)
            db.session.add(cart)
            db.session.commit()
        return cls(cart)

    @property
    def items(self) -> list[CartItem]:
        return list(self.cart.items)

    def lines(self) -> list[CartLine]:
        """Cart contents in insertion order"""
        return [CartLine(item.product_id, item.quantity) for item in self.items]

    def clear(self, commit: bool = True) -> None:
        """Remove every line; with commit=False the caller owns the transaction"""
        self.cart.items.clear()
        if commit:
            db.session.commit()
        logger.debug(f"Cleared cart {self.cart.id}")

    def _find_item(self, product_id: int) -> CartItem | None:
        return next((item for item in self.cart.items if item.product_id == product_id), None)

    def _record_addition(self, product_id: int, quantity: int) -> None:
        if quantity > 0:
            db.session.add(CartAddition(product_id=product_id, quantity=quantity))

    def add_product(self, product_id: int, quantity: int = 1) -> CartItem:
        """
        Add units of a product, incrementing an existing line.

        Raises:
            ValueError: if quantity <= 0
            ProductNotFoundError: if the product does not exist
        """
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")
        if db.session.get(Product, product_id) is None:
            raise ProductNotFoundError(product_id, requested=quantity)

        item = self._find_item(product_id)
        if item is None:
            item = CartItem(product_id=product_id, quantity=quantity)
            self.cart.items.append(item)
        else:
            item.quantity += quantity
        self._record_addition(product_id, quantity)
        db.session.commit()
        return item

    def update_product(self, product_id: int, quantity: int) -> CartItem | None:
        """
        Set the quantity of a product line; 0 removes it.

        Returns:
            The updated item, or None when the line was removed
        """
        if quantity < 0:
            raise ValueError("Quantity must be >= 0")
        if db.session.get(Product, product_id) is None:
            raise ProductNotFoundError(product_id, requested=quantity)

        item = self._find_item(product_id)
        if quantity == 0:
            if item is not None:
                self.cart.items.remove(item)
            db.session.commit()
            return None

        previous = 0
        if item is None:
            item = CartItem(product_id=product_id, quantity=quantity)
            self.cart.items.append(item)
        else:
            previous = item.quantity
            item.quantity = quantity
        self._record_addition(product_id, quantity - previous)
        db.session.commit()
        return item

    def remove_item(self, item_id: int) -> CartItem | None:
        item = next((i for i in self.cart.items if i.id == item_id), None)
        if item is None:
            return None
        self.cart.items.remove(item)
        db.session.commit()
        return item

    @property
    def total_price(self) -> int:
        return sum(item.subtotal for item in self.items)

    @property
    def distinct_products_count(self) -> int:
        return len(self.cart.items)

    @property
    def total_items_count(self) -> int:
        return sum(item.quantity for item in self.cart.items)

    @property
    def is_empty(self) -> bool:
        return not self.cart.items
