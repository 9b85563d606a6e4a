"""
Cart Endpoints

Server-side cart addressed by the token returned from ``POST /carts``.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from digital_menu.database import get_db
from digital_menu.schemas import (
    CartCreate,
    CartItemSet,
    CartLineResponse,
    CartResponse,
    CartUpdate,
    ErrorResponse,
    OrderResponse,
)
from digital_menu.services.cart import BaseCartStore, CartView, get_cart_store
from digital_menu.services import orders as order_service

router = APIRouter(prefix="/carts", tags=["Carts"])


def to_response(view: CartView) -> CartResponse:
    return CartResponse(
        token=view.token,
        restaurant_id=view.restaurant_id,
        customer_name=view.customer_name,
        table_number=view.table_number,
        last_order_id=view.last_order_id,
        items=[
            CartLineResponse(
                dish_id=line.dish_id,
                name=line.name,
                price=line.price,
                quantity=line.quantity,
                line_total=line.line_total,
            )
            for line in view.items
        ],
        total=view.total,
    )


@router.post(
    "",
    response_model=CartResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
    summary="Open Cart",
)
async def open_cart(
    payload: CartCreate,
    store: BaseCartStore = Depends(get_cart_store),
) -> CartResponse:
    view = await store.open_cart(
        payload.restaurant_id,
        customer_name=payload.customer_name,
        table_number=payload.table_number,
    )
    return to_response(view)


@router.get("/{token}", response_model=CartResponse, responses={404: {"model": ErrorResponse}})
async def get_cart(
    token: str,
    store: BaseCartStore = Depends(get_cart_store),
) -> CartResponse:
    return to_response(await store.get_cart(token))


@router.patch("/{token}", response_model=CartResponse, responses={404: {"model": ErrorResponse}})
async def update_cart(
    token: str,
    payload: CartUpdate,
    store: BaseCartStore = Depends(get_cart_store),
) -> CartResponse:
    """Set the customer name and table number."""
    view = await store.update_details(
        token,
        customer_name=payload.customer_name,
        table_number=payload.table_number,
    )
    return to_response(view)


@router.put(
    "/{token}/items/{dish_id}",
    response_model=CartResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_cart_item(
    token: str,
    dish_id: int,
    payload: CartItemSet,
    store: BaseCartStore = Depends(get_cart_store),
) -> CartResponse:
    """Set a dish's quantity; 0 removes the line."""
    return to_response(await store.set_item(token, dish_id, payload.quantity))


@router.delete(
    "/{token}/items/{dish_id}",
    response_model=CartResponse,
    responses={404: {"model": ErrorResponse}},
)
async def remove_cart_item(
    token: str,
    dish_id: int,
    store: BaseCartStore = Depends(get_cart_store),
) -> CartResponse:
    return to_response(await store.remove_item(token, dish_id))


@router.delete("/{token}/items", response_model=CartResponse, responses={404: {"model": ErrorResponse}})
async def clear_cart(
    token: str,
    store: BaseCartStore = Depends(get_cart_store),
) -> CartResponse:
    return to_response(await store.clear(token))


@router.post(
    "/{token}/checkout",
    response_model=OrderResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Checkout Cart",
)
async def checkout_cart(
    token: str,
    store: BaseCartStore = Depends(get_cart_store),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """Place the cart as an order and empty it."""
    order_id = await store.checkout(token)
    order = await order_service.get_order(db, order_id)
    return OrderResponse.model_validate(order)
