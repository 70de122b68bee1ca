"""
Restaurant Catalog Endpoints

Public:
    - GET /api/restaurants
    - GET /api/restaurants/search-suggestions
    - GET /api/restaurants/{restaurant_id}
    - GET /api/restaurants/{restaurant_id}/menu

Restaurant owners / admins:
    - POST   /api/restaurants
    - PUT    /api/restaurants/{restaurant_id}
    - DELETE /api/restaurants/{restaurant_id}
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fooddelivery.core.config import get_settings
from fooddelivery.core.security import require_roles
from fooddelivery.database import get_db
from fooddelivery.models import User, UserRole
from fooddelivery.schemas import (
    ApiResponse,
    ErrorResponse,
    RestaurantCreate,
    RestaurantDetail,
    RestaurantMenu,
    RestaurantPage,
    RestaurantUpdate,
    SearchSuggestions,
)
from fooddelivery.services import catalog
from fooddelivery.services.catalog import RestaurantQuery

settings = get_settings()

router = APIRouter(prefix="/api/restaurants", tags=["Restaurants"])

manager_only = require_roles(UserRole.RESTAURANT_OWNER, UserRole.ADMIN)


@router.get(
    "",
    response_model=ApiResponse[RestaurantPage],
    responses={400: {"model": ErrorResponse}},
    summary="Search, filter and page through restaurants",
)
async def list_restaurants(
    search: Optional[str] = Query(None, max_length=100),
    cuisine: Optional[str] = Query(None, max_length=50),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    max_delivery_fee: Optional[float] = Query(None, alias="maxDeliveryFee", ge=0),
    sort_by: str = Query("rating", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[RestaurantPage]:
    query = RestaurantQuery(
        search=search,
        cuisine=cuisine,
        min_rating=min_rating,
        max_delivery_fee=max_delivery_fee,
        sort_by=sort_by,
        sort_order=sort_order.lower(),
        page=page,
        limit=limit,
    )
    return ApiResponse(data=await catalog.search_restaurants(db, query))


@router.get("/search-suggestions", response_model=ApiResponse[SearchSuggestions])
async def search_suggestions(
    q: str = Query("", max_length=100),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[SearchSuggestions]:
    """Type-ahead suggestions for the search box."""
    return ApiResponse(data=await catalog.search_suggestions(db, q))


@router.get(
    "/{restaurant_id}",
    response_model=ApiResponse[RestaurantDetail],
    responses={404: {"model": ErrorResponse}},
)
async def get_restaurant(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[RestaurantDetail]:
    """Restaurant with its full menu grouped by category."""
    return ApiResponse(data=await catalog.get_restaurant_detail(db, restaurant_id))


@router.get(
    "/{restaurant_id}/menu",
    response_model=ApiResponse[RestaurantMenu],
    responses={404: {"model": ErrorResponse}},
)
async def get_restaurant_menu(
    restaurant_id: int,
    category: Optional[str] = Query(None),
    veg_only: bool = Query(False, alias="vegOnly"),
    available_only: bool = Query(True, alias="availableOnly"),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[RestaurantMenu]:
    menu = await catalog.get_restaurant_menu(db, restaurant_id, category, veg_only, available_only)
    return ApiResponse(data=menu)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[RestaurantDetail],
    responses={403: {"model": ErrorResponse}},
)
async def create_restaurant(
    data: RestaurantCreate,
    user: User = Depends(manager_only),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[RestaurantDetail]:
    restaurant = await catalog.create_restaurant(db, data, user)
    return ApiResponse(message="Restaurant created successfully", data=restaurant)


@router.put(
    "/{restaurant_id}",
    response_model=ApiResponse[RestaurantDetail],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_restaurant(
    restaurant_id: int,
    data: RestaurantUpdate,
    user: User = Depends(manager_only),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[RestaurantDetail]:
    restaurant = await catalog.update_restaurant(db, restaurant_id, data, user)
    return ApiResponse(message="Restaurant updated successfully", data=restaurant)


@router.delete(
    "/{restaurant_id}",
    response_model=ApiResponse[None],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_restaurant(
    restaurant_id: int,
    user: User = Depends(manager_only),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    await catalog.deactivate_restaurant(db, restaurant_id, user)
    return ApiResponse(message="Restaurant deleted successfully")
