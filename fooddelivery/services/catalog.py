"""
Restaurant Catalog

Read-mostly queries over restaurants and their menus. Query shaping
(filter, sort, paginate) is passed as a ``RestaurantQuery`` and results come
back as schema DTOs rather than raw ORM rows.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fooddelivery.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from fooddelivery.models import Address, MenuItem, Order, Restaurant, Review, User, UserRole
from fooddelivery.schemas import (
    DishSuggestion,
    MenuItemOut,
    Pagination,
    RestaurantCreate,
    RestaurantDetail,
    RestaurantMenu,
    RestaurantPage,
    RestaurantSuggestion,
    RestaurantSummary,
    RestaurantUpdate,
    SearchSuggestions,
)

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "rating": Restaurant.rating,
    "deliveryFee": Restaurant.delivery_fee,
    "minOrder": Restaurant.min_order,
    "name": Restaurant.name,
    "createdAt": Restaurant.created_at,
    "totalOrders": Restaurant.total_orders,
}

SUGGESTION_LIMIT = 5


@dataclass
class RestaurantQuery:
    """Filter, sort and page parameters for the restaurant listing."""
    search: Optional[str] = None
    cuisine: Optional[str] = None
    min_rating: Optional[float] = None
    max_delivery_fee: Optional[float] = None
    sort_by: str = "rating"
    sort_order: str = "desc"
    page: int = 1
    limit: int = 12


def _like(term: str) -> str:
    """Substring LIKE pattern with wildcards in ``term`` escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _review_count():
    return (
        select(func.count(Review.id))
        .where(Review.restaurant_id == Restaurant.id)
        .correlate(Restaurant)
        .scalar_subquery()
        .label("review_count")
    )


def _order_count():
    return (
        select(func.count(Order.id))
        .where(Order.restaurant_id == Restaurant.id)
        .correlate(Restaurant)
        .scalar_subquery()
        .label("order_count")
    )


def _listing_filters(query: RestaurantQuery) -> list:
    filters = [Restaurant.is_active.is_(True)]
    cuisines_text = cast(Restaurant.cuisine_type, String)

    if query.search:
        pattern = _like(query.search.strip())
        filters.append(
            or_(
                Restaurant.name.ilike(pattern, escape="\\"),
                Restaurant.description.ilike(pattern, escape="\\"),
                cuisines_text.ilike(pattern, escape="\\"),
            )
        )
    if query.cuisine:
        # Match a whole tag inside the stored JSON list
        filters.append(cuisines_text.ilike(_like(f'"{query.cuisine.strip()}"'), escape="\\"))
    if query.min_rating is not None:
        filters.append(Restaurant.rating >= query.min_rating)
    if query.max_delivery_fee is not None:
        filters.append(Restaurant.delivery_fee <= query.max_delivery_fee)

    return filters


def _summary(restaurant: Restaurant, review_count: int, order_count: int) -> RestaurantSummary:
    return RestaurantSummary.model_validate(restaurant).model_copy(
        update={"review_count": review_count or 0, "order_count": order_count or 0}
    )


def group_menu(items: Iterable[MenuItem]) -> tuple[list[str], dict[str, list[MenuItemOut]]]:
    """Group menu items by category, keeping first-seen category order."""
    menu: dict[str, list[MenuItemOut]] = {}
    for item in items:
        menu.setdefault(item.category, []).append(MenuItemOut.model_validate(item))
    return list(menu.keys()), menu


# =============================================================================
# QUERIES
# =============================================================================

async def search_restaurants(db: AsyncSession, query: RestaurantQuery) -> RestaurantPage:
    """Paginated restaurant listing with search, filters and sorting."""
    sort_column = SORT_COLUMNS.get(query.sort_by)
    if sort_column is None:
        raise BadRequestError(f"Invalid sortBy. Options: {list(SORT_COLUMNS)}")
    if query.sort_order not in ("asc", "desc"):
        raise BadRequestError("Invalid sortOrder. Options: ['asc', 'desc']")

    filters = _listing_filters(query)
    ordering = sort_column.asc() if query.sort_order == "asc" else sort_column.desc()

    total_result = await db.execute(select(func.count(Restaurant.id)).where(*filters))
    total_count = total_result.scalar() or 0

    stmt = (
        select(Restaurant, _review_count(), _order_count())
        .options(selectinload(Restaurant.address))
        .where(*filters)
        .order_by(ordering, Restaurant.id.asc())
        .offset((query.page - 1) * query.limit)
        .limit(query.limit)
    )
    rows = (await db.execute(stmt)).all()

    logger.debug(f"Restaurant search {query} -> {len(rows)}/{total_count}")

    return RestaurantPage(
        restaurants=[_summary(r, reviews, orders) for r, reviews, orders in rows],
        pagination=Pagination.build(query.page, query.limit, total_count),
    )


async def _load_restaurant(
    db: AsyncSession, restaurant_id: int, include_inactive: bool = False
) -> tuple[Restaurant, int, int]:
    stmt = (
        select(Restaurant, _review_count(), _order_count())
        .options(selectinload(Restaurant.address), selectinload(Restaurant.menu_items))
        .where(Restaurant.id == restaurant_id)
        .execution_options(populate_existing=True)
    )
    row = (await db.execute(stmt)).first()
    if row is None or (not include_inactive and not row[0].is_active):
        raise NotFoundError("Restaurant not found")
    return row[0], row[1], row[2]


async def get_restaurant_detail(
    db: AsyncSession, restaurant_id: int, include_inactive: bool = False
) -> RestaurantDetail:
    """Full restaurant with its menu grouped by category."""
    restaurant, reviews, orders = await _load_restaurant(db, restaurant_id, include_inactive)
    categories, menu = group_menu(restaurant.menu_items)

    detail = RestaurantDetail.model_validate(restaurant)
    return detail.model_copy(
        update={
            "review_count": reviews or 0,
            "order_count": orders or 0,
            "menu_categories": categories,
            "menu": menu,
        }
    )


async def get_restaurant_menu(
    db: AsyncSession,
    restaurant_id: int,
    category: Optional[str] = None,
    veg_only: bool = False,
    available_only: bool = True,
) -> RestaurantMenu:
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None or not restaurant.is_active:
        raise NotFoundError("Restaurant not found")

    stmt = select(MenuItem).where(MenuItem.restaurant_id == restaurant_id)
    if category:
        stmt = stmt.where(MenuItem.category == category)
    if veg_only:
        stmt = stmt.where(MenuItem.is_veg.is_(True))
    if available_only:
        stmt = stmt.where(MenuItem.is_available.is_(True))

    items = (await db.execute(stmt.order_by(MenuItem.id))).scalars().all()
    categories, menu = group_menu(items)
    return RestaurantMenu(restaurant_id=restaurant_id, menu_categories=categories, menu=menu)


async def search_suggestions(db: AsyncSession, q: str) -> SearchSuggestions:
    """Restaurant names, cuisine tags and dishes matching a partial term."""
    term = (q or "").strip()
    if len(term) < 2:
        return SearchSuggestions()
    pattern = _like(term)

    restaurants = await db.execute(
        select(Restaurant.id, Restaurant.name)
        .where(Restaurant.is_active.is_(True), Restaurant.name.ilike(pattern, escape="\\"))
        .order_by(Restaurant.rating.desc())
        .limit(SUGGESTION_LIMIT)
    )

    dishes = await db.execute(
        select(MenuItem.id, MenuItem.name, MenuItem.restaurant_id)
        .join(Restaurant, Restaurant.id == MenuItem.restaurant_id)
        .where(
            Restaurant.is_active.is_(True),
            MenuItem.is_available.is_(True),
            MenuItem.name.ilike(pattern, escape="\\"),
        )
        .order_by(MenuItem.times_ordered.desc())
        .limit(SUGGESTION_LIMIT)
    )

    tag_rows = await db.execute(
        select(Restaurant.cuisine_type).where(
            Restaurant.is_active.is_(True),
            cast(Restaurant.cuisine_type, String).ilike(pattern, escape="\\"),
        )
    )
    cuisines: list[str] = []
    needle = term.lower()
    for (tags,) in tag_rows:
        for tag in tags or []:
            if needle in tag.lower() and tag not in cuisines:
                cuisines.append(tag)

    return SearchSuggestions(
        restaurants=[RestaurantSuggestion(id=r.id, name=r.name) for r in restaurants],
        cuisines=cuisines[:SUGGESTION_LIMIT],
        dishes=[
            DishSuggestion(id=d.id, name=d.name, restaurant_id=d.restaurant_id)
            for d in dishes
        ],
    )


# =============================================================================
# OWNER / ADMIN MANAGEMENT
# =============================================================================

def _ensure_can_manage(restaurant: Restaurant, actor: User) -> None:
    if actor.role != UserRole.ADMIN and restaurant.owner_id != actor.id:
        raise ForbiddenError("Access denied")


async def create_restaurant(db: AsyncSession, data: RestaurantCreate, actor: User) -> RestaurantDetail:
    owner_id = actor.id
    if actor.role == UserRole.ADMIN and data.owner_id is not None:
        owner_id = data.owner_id

    try:
        address = Address(**data.address.model_dump(exclude={"is_default"}))
        db.add(address)
        await db.flush()

        restaurant = Restaurant(
            **data.model_dump(exclude={"address", "owner_id"}),
            owner_id=owner_id,
            address_id=address.id,
        )
        db.add(restaurant)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Created restaurant #{restaurant.id} ({restaurant.name}) for owner #{owner_id}")
    return await get_restaurant_detail(db, restaurant.id, include_inactive=True)


async def update_restaurant(
    db: AsyncSession, restaurant_id: int, data: RestaurantUpdate, actor: User
) -> RestaurantDetail:
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    _ensure_can_manage(restaurant, actor)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(restaurant, field, value)
    await db.commit()

    logger.info(f"Updated restaurant #{restaurant_id}")
    return await get_restaurant_detail(db, restaurant_id, include_inactive=True)


async def deactivate_restaurant(db: AsyncSession, restaurant_id: int, actor: User) -> None:
    """Soft delete: the restaurant disappears from the catalog, orders stay."""
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    _ensure_can_manage(restaurant, actor)

    restaurant.is_active = False
    await db.commit()
    logger.info(f"Deactivated restaurant #{restaurant_id}")
