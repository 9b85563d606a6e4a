"""
Database-backed cart store.

Carts survive device changes and server restarts because they live in the
same database as orders; checkout reuses the order service so a cart order
is priced exactly like any other order.
"""

import logging
import secrets
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from digital_menu.core.exceptions import NotFoundError, ValidationError
from digital_menu.models import Cart, CartItem, Dish, Restaurant, dish_restaurants
from digital_menu.services import orders as order_service
from digital_menu.services.cart.base import BaseCartStore, CartLine, CartView

logger = logging.getLogger(__name__)


class DatabaseCartStore(BaseCartStore):
    """Cart store on top of the request's ``AsyncSession``."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, token: str) -> Cart:
        result = await self.db.execute(
            select(Cart)
            .where(Cart.token == token)
            .options(selectinload(Cart.items).selectinload(CartItem.dish))
            .execution_options(populate_existing=True)
        )
        cart = result.scalar_one_or_none()
        if cart is None:
            raise NotFoundError("Cart not found")
        return cart

    @staticmethod
    def _view(cart: Cart) -> CartView:
        return CartView(
            token=cart.token,
            restaurant_id=cart.restaurant_id,
            customer_name=cart.customer_name,
            table_number=cart.table_number,
            last_order_id=cart.last_order_id,
            items=[
                CartLine(
                    dish_id=item.dish_id,
                    name=item.dish.name,
                    price=item.dish.price,
                    quantity=item.quantity,
                )
                for item in cart.items
                if item.dish is not None
            ],
        )

    async def open_cart(
        self,
        restaurant_id: int,
        customer_name: Optional[str] = None,
        table_number: Optional[str] = None,
    ) -> CartView:
        if await self.db.get(Restaurant, restaurant_id) is None:
            raise NotFoundError(f"Restaurant #{restaurant_id} not found")

        cart = Cart(
            token=secrets.token_urlsafe(24),
            restaurant_id=restaurant_id,
            customer_name=customer_name or None,
            table_number=table_number or None,
        )
        self.db.add(cart)
        await self.db.commit()

        logger.info(f"Cart opened at restaurant #{restaurant_id}")
        return await self.get_cart(cart.token)

    async def get_cart(self, token: str) -> CartView:
        return self._view(await self._load(token))

    async def update_details(
        self,
        token: str,
        customer_name: Optional[str] = None,
        table_number: Optional[str] = None,
    ) -> CartView:
        cart = await self._load(token)
        if customer_name is not None:
            cart.customer_name = customer_name or None
        if table_number is not None:
            cart.table_number = table_number or None
        await self.db.commit()
        return await self.get_cart(token)

    async def set_item(self, token: str, dish_id: int, quantity: int) -> CartView:
        if not 0 <= quantity <= order_service.MAX_QUANTITY:
            raise ValidationError(f"Quantity must be between 0 and {order_service.MAX_QUANTITY}")

        cart = await self._load(token)
        existing = next((item for item in cart.items if item.dish_id == dish_id), None)

        if quantity == 0:
            if existing is not None:
                cart.items.remove(existing)
        elif existing is not None:
            existing.quantity = quantity
        else:
            offered = await self.db.execute(
                select(Dish.id)
                .join(dish_restaurants, dish_restaurants.c.dish_id == Dish.id)
                .where(
                    Dish.id == dish_id,
                    dish_restaurants.c.restaurant_id == cart.restaurant_id,
                )
            )
            if offered.first() is None:
                raise ValidationError(f"Dish #{dish_id} is not on this restaurant's menu")
            cart.items.append(CartItem(dish_id=dish_id, quantity=quantity))

        await self.db.commit()
        return await self.get_cart(token)

    async def clear(self, token: str) -> CartView:
        cart = await self._load(token)
        cart.items.clear()
        await self.db.commit()
        return await self.get_cart(token)

    async def checkout(self, token: str) -> int:
        cart = await self._load(token)
        view = self._view(cart)

        if not view.items:
            raise ValidationError("Cart is empty")
        if not view.customer_name or not view.table_number:
            raise ValidationError("Customer name and table number are required")

        order = await order_service.create_order(
            self.db,
            restaurant_id=cart.restaurant_id,
            customer_name=view.customer_name,
            table_number=view.table_number,
            items=[
                order_service.LineRequest(dish_id=line.dish_id, quantity=line.quantity)
                for line in view.items
            ],
            commit=False,
        )

        # Order and emptied cart land in the same commit
        cart.items.clear()
        cart.last_order_id = order.id
        await self.db.commit()

        logger.info(f"Cart checked out as order #{order.id}")
        return order.id
