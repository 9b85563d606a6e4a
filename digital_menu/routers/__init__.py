"""
API routers, one module per resource.
"""

from digital_menu.routers import auth, carts, categories, dishes, orders, restaurants, uploads

__all__ = ["auth", "carts", "categories", "dishes", "orders", "restaurants", "uploads"]
