"""
Menu Registry Service

Owner-scoped create/read/update/delete for restaurants, categories and
dishes.

Every function takes the request's ``AsyncSession`` and commits its own
unit of work. Rows handed back to the caller are re-selected after the
commit so server-generated columns (timestamps) and relationships are
loaded; nothing is lazy-loaded later from outside the session.
"""

import logging
import re
import time
from typing import Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from digital_menu.core.config import get_settings
from digital_menu.core.exceptions import NotFoundError, ValidationError
from digital_menu.models import (
    CartItem,
    Category,
    Dish,
    OrderItem,
    Restaurant,
    User,
    dish_restaurants,
)

logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def make_slug(name: str) -> str:
    """``"Spice Hub"`` -> ``"spice-hub-4821"`` (last four digits of the ms clock)."""
    base = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "restaurant"
    suffix = str(int(time.time() * 1000))[-4:]
    return f"{base}-{suffix}"


def menu_url(restaurant: Restaurant) -> str:
    """Customer entry point for a restaurant; this is what the table QR code encodes."""
    base = get_settings().app_base_url.rstrip("/")
    return f"{base}/{restaurant.id}/start"


async def _unique_slug(db: AsyncSession, name: str) -> str:
    slug = make_slug(name)
    while (await db.execute(select(Restaurant.id).where(Restaurant.slug == slug))).first():
        slug = make_slug(f"{name} {time.time_ns() % 10}")
    return slug


# =============================================================================
# RESTAURANTS
# =============================================================================

async def get_restaurant(db: AsyncSession, restaurant_id: int) -> Restaurant:
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.id == restaurant_id)
        .execution_options(populate_existing=True)
    )
    restaurant = result.scalar_one_or_none()
    if restaurant is None:
        raise NotFoundError(f"Restaurant #{restaurant_id} not found")
    return restaurant


async def list_restaurants(db: AsyncSession, owner_id: int) -> Sequence[Restaurant]:
    """Owner's restaurants, newest first."""
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.owner_id == owner_id)
        .order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
    )
    return result.scalars().all()


async def create_restaurant(
    db: AsyncSession,
    owner_id: int,
    name: str,
    location: str,
) -> Restaurant:
    owner = await db.get(User, owner_id)
    if owner is None:
        raise NotFoundError(f"Owner #{owner_id} not found")

    restaurant = Restaurant(
        name=name,
        location=location,
        slug=await _unique_slug(db, name),
        owner_id=owner_id,
    )
    db.add(restaurant)
    await db.commit()

    logger.info(f"Restaurant #{restaurant.id} '{name}' created for owner #{owner_id}")
    return await get_restaurant(db, restaurant.id)


async def update_restaurant(
    db: AsyncSession,
    restaurant_id: int,
    name: Optional[str] = None,
    location: Optional[str] = None,
) -> Restaurant:
    restaurant = await get_restaurant(db, restaurant_id)
    if name is not None:
        restaurant.name = name
    if location is not None:
        restaurant.location = location
    await db.commit()
    return await get_restaurant(db, restaurant_id)


async def delete_restaurant(db: AsyncSession, restaurant_id: int) -> None:
    """
    Delete a restaurant with its categories, orders and carts.

    Dishes offered only here are deleted too; dishes shared with another
    restaurant just lose this link.
    """
    restaurant = await get_restaurant(db, restaurant_id)

    result = await db.execute(
        select(Dish)
        .join(dish_restaurants, dish_restaurants.c.dish_id == Dish.id)
        .where(dish_restaurants.c.restaurant_id == restaurant_id)
        .options(selectinload(Dish.restaurants))
    )
    exclusive = [
        dish for dish in result.scalars().all()
        if {r.id for r in dish.restaurants} == {restaurant_id}
    ]

    for dish in exclusive:
        await _detach_dish_references(db, dish.id)
        await db.delete(dish)
    await db.delete(restaurant)
    await db.commit()

    logger.info(
        f"Restaurant #{restaurant_id} deleted ({len(exclusive)} exclusive dishes removed)"
    )


# =============================================================================
# CATEGORIES
# =============================================================================

async def get_category(db: AsyncSession, category_id: int) -> Category:
    result = await db.execute(
        select(Category)
        .where(Category.id == category_id)
        .execution_options(populate_existing=True)
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError(f"Category #{category_id} not found")
    return category


async def list_categories(
    db: AsyncSession,
    restaurant_id: Optional[int] = None,
    owner_id: Optional[int] = None,
) -> Sequence[Category]:
    """
    Categories of one restaurant (by name) or of every restaurant an owner
    has (most recently changed first).
    """
    if restaurant_id is not None:
        query = (
            select(Category)
            .where(Category.restaurant_id == restaurant_id)
            .order_by(Category.name, Category.id)
        )
    elif owner_id is not None:
        query = (
            select(Category)
            .join(Restaurant, Restaurant.id == Category.restaurant_id)
            .where(Restaurant.owner_id == owner_id)
            .order_by(Category.updated_at.desc(), Category.id.desc())
        )
    else:
        raise ValidationError("restaurant_id or owner_id is required")

    result = await db.execute(query)
    return result.scalars().all()


async def create_category(db: AsyncSession, restaurant_id: int, name: str) -> Category:
    await get_restaurant(db, restaurant_id)

    category = Category(name=name, restaurant_id=restaurant_id)
    db.add(category)
    await db.commit()

    logger.info(f"Category #{category.id} '{name}' added to restaurant #{restaurant_id}")
    return await get_category(db, category.id)


async def update_category(db: AsyncSession, category_id: int, name: str) -> Category:
    category = await get_category(db, category_id)
    category.name = name
    await db.commit()
    return await get_category(db, category_id)


async def delete_category(db: AsyncSession, category_id: int) -> None:
    """Delete a category; its dishes stay on the menu without it."""
    category = await get_category(db, category_id)
    await db.delete(category)
    await db.commit()
    logger.info(f"Category #{category_id} deleted")


# =============================================================================
# DISHES
# =============================================================================

async def get_dish(db: AsyncSession, dish_id: int) -> Dish:
    result = await db.execute(
        select(Dish)
        .where(Dish.id == dish_id)
        .options(selectinload(Dish.categories), selectinload(Dish.restaurants))
        .execution_options(populate_existing=True)
    )
    dish = result.scalar_one_or_none()
    if dish is None:
        raise NotFoundError(f"Dish #{dish_id} not found")
    return dish


async def list_dishes(db: AsyncSession, restaurant_id: int) -> Sequence[Dish]:
    """Dishes offered at a restaurant, alphabetically."""
    result = await db.execute(
        select(Dish)
        .join(dish_restaurants, dish_restaurants.c.dish_id == Dish.id)
        .where(dish_restaurants.c.restaurant_id == restaurant_id)
        .options(selectinload(Dish.categories))
        .order_by(Dish.name, Dish.id)
    )
    return result.scalars().all()


async def create_dish(
    db: AsyncSession,
    restaurant_id: int,
    category_id: int,
    name: str,
    price: int,
    description: str = "",
    spice_level: str = "",
    image_url: str = "",
) -> Dish:
    restaurant = await get_restaurant(db, restaurant_id)
    category = await get_category(db, category_id)
    if category.restaurant_id != restaurant.id:
        raise ValidationError(
            f"Category #{category_id} does not belong to restaurant #{restaurant_id}"
        )

    dish = Dish(
        name=name,
        price=price,
        description=description or "",
        spice_level=spice_level or "",
        image_url=image_url or "",
        categories=[category],
        restaurants=[restaurant],
    )
    db.add(dish)
    await db.commit()

    logger.info(f"Dish #{dish.id} '{name}' added to restaurant #{restaurant_id}")
    return await get_dish(db, dish.id)


async def update_dish(
    db: AsyncSession,
    dish_id: int,
    name: Optional[str] = None,
    price: Optional[int] = None,
    description: Optional[str] = None,
    spice_level: Optional[str] = None,
    image_url: Optional[str] = None,
    category_id: Optional[int] = None,
) -> Dish:
    """
    Partial update. A new ``category_id`` replaces all existing category
    links in the same commit as the field changes.
    """
    dish = await get_dish(db, dish_id)

    if category_id is not None:
        category = await get_category(db, category_id)
        if category.restaurant_id not in {r.id for r in dish.restaurants}:
            raise ValidationError(
                f"Category #{category_id} does not belong to a restaurant offering this dish"
            )
        dish.categories = [category]

    if name is not None:
        dish.name = name
    if price is not None:
        dish.price = price
    if description is not None:
        dish.description = description
    if spice_level is not None:
        dish.spice_level = spice_level
    if image_url is not None:
        dish.image_url = image_url

    await db.commit()
    return await get_dish(db, dish_id)


async def _detach_dish_references(db: AsyncSession, dish_id: int) -> None:
    # Order history keeps name and price; open carts drop the dish
    await db.execute(
        update(OrderItem).where(OrderItem.dish_id == dish_id).values(dish_id=None)
    )
    await db.execute(delete(CartItem).where(CartItem.dish_id == dish_id))


async def delete_dish(db: AsyncSession, dish_id: int) -> None:
    dish = await get_dish(db, dish_id)
    await _detach_dish_references(db, dish_id)
    await db.delete(dish)
    await db.commit()
    logger.info(f"Dish #{dish_id} deleted")
