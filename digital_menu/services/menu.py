"""
Customer Menu Service

Read-only projection of a restaurant's dishes grouped by category name.
"""

from collections import defaultdict
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from digital_menu.models import Dish, Restaurant, dish_restaurants
from digital_menu.services.registry import get_restaurant

DEFAULT_GROUP = "Other"


@dataclass
class MenuGroup:
    category: str
    dishes: list[Dish]


@dataclass
class Menu:
    restaurant: Restaurant
    groups: list[MenuGroup]


def group_dishes(dishes: list[Dish]) -> list[MenuGroup]:
    """
    Bucket dishes by category name.

    A dish linked to several categories appears in each of them; one with
    no category goes to ``Other``. Groups are sorted by name with ``Other``
    last, dishes alphabetically (case-insensitive) inside a group.
    """
    buckets: dict[str, list[Dish]] = defaultdict(list)
    for dish in dishes:
        names = {category.name for category in dish.categories} or {DEFAULT_GROUP}
        for name in names:
            buckets[name].append(dish)

    ordered = sorted(buckets, key=lambda name: (name == DEFAULT_GROUP, name.lower()))
    return [
        MenuGroup(
            category=name,
            dishes=sorted(buckets[name], key=lambda d: (d.name.lower(), d.id)),
        )
        for name in ordered
    ]


async def get_menu(db: AsyncSession, restaurant_id: int) -> Menu:
    restaurant = await get_restaurant(db, restaurant_id)

    result = await db.execute(
        select(Dish)
        .join(dish_restaurants, dish_restaurants.c.dish_id == Dish.id)
        .where(dish_restaurants.c.restaurant_id == restaurant_id)
        .options(selectinload(Dish.categories))
    )
    return Menu(restaurant=restaurant, groups=group_dishes(list(result.scalars().all())))
