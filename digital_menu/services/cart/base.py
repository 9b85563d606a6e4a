"""
Cart Store Abstract Base Class

A cart holds what a customer has picked at one restaurant before ordering,
plus the name and table they entered. Callers address it with an opaque
token; where the cart actually lives is up to the implementation.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class CartLine:
    dish_id: int
    name: str
    price: int
    quantity: int

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


@dataclass
class CartView:
    """
    Snapshot of a cart priced with the current dish prices.

    Attributes:
        token: Cart identifier held by the client
        restaurant_id: Restaurant the cart belongs to
        customer_name: Name entered on the start screen
        table_number: Table entered on the start screen
        last_order_id: Most recent order placed from this cart
        items: Lines in the order they were added
    """
    token: str
    restaurant_id: int
    customer_name: Optional[str] = None
    table_number: Optional[str] = None
    last_order_id: Optional[int] = None
    items: list[CartLine] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(line.line_total for line in self.items)


class BaseCartStore(ABC):
    """Interface every cart backend implements."""

    @abstractmethod
    async def open_cart(
        self,
        restaurant_id: int,
        customer_name: Optional[str] = None,
        table_number: Optional[str] = None,
    ) -> CartView:
        """Start an empty cart and return it with its new token."""
        pass

    @abstractmethod
    async def get_cart(self, token: str) -> CartView:
        """Raises NotFoundError for an unknown token."""
        pass

    @abstractmethod
    async def update_details(
        self,
        token: str,
        customer_name: Optional[str] = None,
        table_number: Optional[str] = None,
    ) -> CartView:
        pass

    @abstractmethod
    async def set_item(self, token: str, dish_id: int, quantity: int) -> CartView:
        """Set the quantity of a dish; 0 removes it."""
        pass

    async def remove_item(self, token: str, dish_id: int) -> CartView:
        return await self.set_item(token, dish_id, 0)

    @abstractmethod
    async def clear(self, token: str) -> CartView:
        pass

    @abstractmethod
    async def checkout(self, token: str) -> int:
        """
        Turn the cart into an order, empty it and return the order id.

        Raises:
            ValidationError: Empty cart, or name / table missing
        """
        pass
