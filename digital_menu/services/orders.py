"""
Order Service

Order intake and lifecycle.

Totals are always recomputed here from the prices stored on the dishes;
whatever price the client saw is ignored. Status moves strictly forward
through ``pending → preparing → ready → completed``.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from digital_menu.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from digital_menu.models import Cart, Dish, Order, OrderItem, OrderStatus, Restaurant, dish_restaurants

logger = logging.getLogger(__name__)

MAX_QUANTITY = 99

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
}


@dataclass(frozen=True)
class LineRequest:
    """What the client may say about a line: which dish and how many."""
    dish_id: int
    quantity: int


def parse_status(value: Union[str, OrderStatus]) -> OrderStatus:
    """
    Raises:
        ValidationError: ``value`` is not one of the four known statuses
    """
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        valid = [s.value for s in OrderStatus]
        raise ValidationError(f"Invalid status '{value}'. Options: {valid}")


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


async def get_order(db: AsyncSession, order_id: int) -> Order:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.items))
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFoundError(f"Order #{order_id} not found")
    return order


async def list_orders(
    db: AsyncSession,
    restaurant_id: Optional[int] = None,
    owner_id: Optional[int] = None,
    status: Optional[str] = None,
) -> Sequence[Order]:
    """Orders of one restaurant or of all restaurants of an owner, newest first."""
    query = select(Order).options(selectinload(Order.items))

    if restaurant_id is not None:
        query = query.where(Order.restaurant_id == restaurant_id)
    elif owner_id is not None:
        query = query.join(Restaurant, Restaurant.id == Order.restaurant_id).where(
            Restaurant.owner_id == owner_id
        )
    else:
        raise ValidationError("restaurant_id or owner_id is required")

    if status:
        query = query.where(Order.status == parse_status(status))

    result = await db.execute(query.order_by(Order.created_at.desc(), Order.id.desc()))
    return result.scalars().all()


async def create_order(
    db: AsyncSession,
    restaurant_id: int,
    customer_name: str,
    table_number: str,
    items: Iterable[LineRequest],
    user_id: Optional[int] = None,
    commit: bool = True,
) -> Order:
    """
    Place an order.

    Every line must name a dish offered at the restaurant with a quantity
    between 1 and 99. The header and all lines are written in one commit
    with status ``pending``.

    With ``commit=False`` the order is only flushed, so the caller can
    commit it together with its own changes.

    Raises:
        NotFoundError: Unknown restaurant
        ValidationError: Empty order, bad quantity, or a dish that is not
            on this restaurant's menu
    """
    lines = list(items)
    if not lines:
        raise ValidationError("Order is empty")
    if not customer_name or not customer_name.strip():
        raise ValidationError("Customer name is required")
    if not table_number or not str(table_number).strip():
        raise ValidationError("Table number is required")

    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFoundError(f"Restaurant #{restaurant_id} not found")

    for line in lines:
        if not 1 <= line.quantity <= MAX_QUANTITY:
            raise ValidationError(
                f"Quantity for dish #{line.dish_id} must be between 1 and {MAX_QUANTITY}"
            )

    dish_ids = {line.dish_id for line in lines}
    result = await db.execute(
        select(Dish)
        .join(dish_restaurants, dish_restaurants.c.dish_id == Dish.id)
        .where(
            dish_restaurants.c.restaurant_id == restaurant_id,
            Dish.id.in_(dish_ids),
        )
    )
    dishes = {dish.id: dish for dish in result.scalars().all()}

    missing = sorted(dish_ids - dishes.keys())
    if missing:
        raise ValidationError(f"Dish #{missing[0]} is not on this restaurant's menu")

    order_items = [
        OrderItem(
            dish_id=line.dish_id,
            name=dishes[line.dish_id].name,
            price=dishes[line.dish_id].price,
            quantity=line.quantity,
        )
        for line in lines
    ]
    order = Order(
        restaurant_id=restaurant_id,
        customer_name=customer_name.strip(),
        table_number=str(table_number).strip(),
        user_id=user_id,
        total=sum(item.price * item.quantity for item in order_items),
        status=OrderStatus.PENDING,
        items=order_items,
    )
    db.add(order)
    if not commit:
        await db.flush()
        return order
    await db.commit()

    logger.info(
        f"Order #{order.id} placed at restaurant #{restaurant_id} "
        f"(table {order.table_number}, {len(order_items)} lines, total {order.total})"
    )
    return await get_order(db, order.id)


async def update_order_status(
    db: AsyncSession,
    order_id: int,
    new_status: Union[str, OrderStatus],
) -> Order:
    """
    Move an order one step forward.

    Raises:
        ValidationError: Unknown status string
        NotFoundError: Unknown order
        InvalidTransitionError: Not the next step after the current status
    """
    target = parse_status(new_status)
    order = await get_order(db, order_id)

    if not can_transition(order.status, target):
        raise InvalidTransitionError(
            f"Cannot move order #{order_id} from {order.status.value} to {target.value}"
        )

    previous = order.status
    order.status = target
    await db.commit()

    logger.info(f"Order #{order_id}: {previous.value} -> {target.value}")
    return await get_order(db, order_id)


async def delete_order(db: AsyncSession, order_id: int) -> None:
    order = await get_order(db, order_id)
    await db.execute(
        update(Cart).where(Cart.last_order_id == order_id).values(last_order_id=None)
    )
    await db.delete(order)
    await db.commit()
    logger.info(f"Order #{order_id} deleted")
