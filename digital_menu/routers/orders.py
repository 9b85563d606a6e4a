"""
Order Endpoints

    - POST /orders: Place an order (customer)
    - GET /orders: List orders of a restaurant or an owner (admin)
    - GET /orders/{id}: Order status (customer status screen polls this)
    - PATCH /orders/{id}: Move the order to its next status (admin)
    - DELETE /orders/{id}: Remove an order (admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from digital_menu.database import get_db
from digital_menu.schemas import (
    ErrorResponse,
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
    SuccessResponse,
)
from digital_menu.services import orders as order_service

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post(
    "",
    response_model=OrderResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Place Order",
)
async def create_order(
    payload: OrderCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """
    Place an order from a list of dish ids and quantities.

    Prices and the total are taken from the menu, never from the request.
    """
    order = await order_service.create_order(
        db,
        restaurant_id=payload.restaurant_id,
        customer_name=payload.customer_name,
        table_number=payload.table_number,
        items=[
            order_service.LineRequest(dish_id=item.dish_id, quantity=item.quantity)
            for item in payload.items
        ],
        user_id=payload.user_id,
    )
    return OrderResponse.model_validate(order)


@router.get(
    "",
    response_model=list[OrderResponse],
    responses={400: {"model": ErrorResponse}},
    summary="List Orders",
)
async def list_orders(
    restaurant_id: Optional[int] = Query(None),
    owner_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[OrderResponse]:
    orders = await order_service.list_orders(
        db, restaurant_id=restaurant_id, owner_id=owner_id, status=status
    )
    return [OrderResponse.model_validate(o) for o in orders]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    return OrderResponse.model_validate(await order_service.get_order(db, order_id))


@router.patch(
    "/{order_id}",
    response_model=OrderResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update Order Status",
)
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """Only the next step is accepted: pending → preparing → ready → completed."""
    order = await order_service.update_order_status(db, order_id, payload.status)
    return OrderResponse.model_validate(order)


@router.delete(
    "/{order_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await order_service.delete_order(db, order_id)
    return SuccessResponse()
