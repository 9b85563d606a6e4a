"""
Category Endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from digital_menu.database import get_db
from digital_menu.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ErrorResponse,
    SuccessResponse,
)
from digital_menu.services import registry

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get(
    "",
    response_model=list[CategoryResponse],
    responses={400: {"model": ErrorResponse}},
)
async def list_categories(
    restaurant_id: Optional[int] = Query(None),
    owner_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[CategoryResponse]:
    """Categories of a restaurant, or of every restaurant an owner has."""
    categories = await registry.list_categories(
        db, restaurant_id=restaurant_id, owner_id=owner_id
    )
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
)
async def create_category(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await registry.create_category(db, payload.restaurant_id, payload.name)
    return CategoryResponse.model_validate(category)


@router.patch(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await registry.update_category(db, category_id, payload.name)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await registry.delete_category(db, category_id)
    return SuccessResponse()
