"""
Dish Endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from digital_menu.database import get_db
from digital_menu.schemas import (
    DishCreate,
    DishResponse,
    DishUpdate,
    ErrorResponse,
    SuccessResponse,
)
from digital_menu.services import registry

router = APIRouter(prefix="/dishes", tags=["Dishes"])


@router.get("", response_model=list[DishResponse])
async def list_dishes(
    restaurant_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
) -> list[DishResponse]:
    """Dishes offered at a restaurant, alphabetically."""
    dishes = await registry.list_dishes(db, restaurant_id)
    return [DishResponse.model_validate(d) for d in dishes]


@router.post(
    "",
    response_model=DishResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_dish(
    payload: DishCreate,
    db: AsyncSession = Depends(get_db),
) -> DishResponse:
    dish = await registry.create_dish(db, **payload.model_dump())
    return DishResponse.model_validate(dish)


@router.get(
    "/{dish_id}",
    response_model=DishResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_dish(
    dish_id: int,
    db: AsyncSession = Depends(get_db),
) -> DishResponse:
    return DishResponse.model_validate(await registry.get_dish(db, dish_id))


@router.patch(
    "/{dish_id}",
    response_model=DishResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_dish(
    dish_id: int,
    payload: DishUpdate,
    db: AsyncSession = Depends(get_db),
) -> DishResponse:
    """Partial update; ``category_id`` replaces the dish's category."""
    dish = await registry.update_dish(db, dish_id, **payload.model_dump(exclude_unset=True))
    return DishResponse.model_validate(dish)


@router.delete(
    "/{dish_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_dish(
    dish_id: int,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await registry.delete_dish(db, dish_id)
    return SuccessResponse()
