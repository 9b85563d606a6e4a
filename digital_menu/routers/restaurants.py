"""
Restaurant Endpoints

Owner-scoped restaurant registry plus the customer menu projection.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from digital_menu.database import get_db
from digital_menu.models import Restaurant
from digital_menu.schemas import (
    ErrorResponse,
    MenuDish,
    MenuGroup,
    MenuResponse,
    MenuRestaurant,
    RestaurantCreate,
    RestaurantResponse,
    RestaurantUpdate,
    SuccessResponse,
)
from digital_menu.services import menu as menu_service
from digital_menu.services import registry

router = APIRouter(prefix="/restaurants", tags=["Restaurants"])


def to_response(restaurant: Restaurant) -> RestaurantResponse:
    return RestaurantResponse(
        id=restaurant.id,
        name=restaurant.name,
        location=restaurant.location,
        slug=restaurant.slug,
        owner_id=restaurant.owner_id,
        menu_url=registry.menu_url(restaurant),
        created_at=restaurant.created_at,
    )


@router.get("", response_model=list[RestaurantResponse], summary="List Restaurants")
async def list_restaurants(
    owner_id: int = Query(..., description="Owner whose restaurants to list"),
    db: AsyncSession = Depends(get_db),
) -> list[RestaurantResponse]:
    """Owner's restaurants, newest first."""
    return [to_response(r) for r in await registry.list_restaurants(db, owner_id)]


@router.post(
    "",
    response_model=RestaurantResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
    summary="Add Restaurant",
)
async def create_restaurant(
    payload: RestaurantCreate,
    db: AsyncSession = Depends(get_db),
) -> RestaurantResponse:
    restaurant = await registry.create_restaurant(
        db, owner_id=payload.owner_id, name=payload.name, location=payload.location
    )
    return to_response(restaurant)


@router.get(
    "/{restaurant_id}",
    response_model=RestaurantResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_restaurant(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
) -> RestaurantResponse:
    return to_response(await registry.get_restaurant(db, restaurant_id))


@router.patch(
    "/{restaurant_id}",
    response_model=RestaurantResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_restaurant(
    restaurant_id: int,
    payload: RestaurantUpdate,
    db: AsyncSession = Depends(get_db),
) -> RestaurantResponse:
    restaurant = await registry.update_restaurant(
        db, restaurant_id, name=payload.name, location=payload.location
    )
    return to_response(restaurant)


@router.delete(
    "/{restaurant_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_restaurant(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await registry.delete_restaurant(db, restaurant_id)
    return SuccessResponse()


@router.get(
    "/{restaurant_id}/menu",
    response_model=MenuResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Customer Menu",
)
async def get_menu(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
) -> MenuResponse:
    """Dishes grouped by category, as shown to customers."""
    menu = await menu_service.get_menu(db, restaurant_id)
    return MenuResponse(
        restaurant=MenuRestaurant.model_validate(menu.restaurant),
        groups=[
            MenuGroup(
                category=group.category,
                dishes=[MenuDish.model_validate(dish) for dish in group.dishes],
            )
            for group in menu.groups
        ],
    )
