"""
Cart Store Factory

Usage:
    from digital_menu.services.cart import get_cart_store

    @router.get("/carts/{token}")
    async def read_cart(token: str, store: BaseCartStore = Depends(get_cart_store)):
        ...
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digital_menu.database import get_db
from digital_menu.services.cart.base import BaseCartStore, CartLine, CartView
from digital_menu.services.cart.database import DatabaseCartStore


def get_cart_store(db: AsyncSession = Depends(get_db)) -> BaseCartStore:
    """FastAPI dependency returning the cart store bound to the request session."""
    return DatabaseCartStore(db)


__all__ = [
    "get_cart_store",
    "BaseCartStore",
    "CartLine",
    "CartView",
    "DatabaseCartStore",
]
