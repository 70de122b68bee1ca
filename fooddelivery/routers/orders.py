"""
Order Endpoints (authentication required)

Customers:
    - POST /api/orders
    - GET  /api/orders
    - GET  /api/orders/{order_id}

Restaurant owners / admins:
    - PATCH /api/orders/{order_id}/status
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fooddelivery.core.exceptions import AppError, InternalServerError
from fooddelivery.core.security import get_current_user, require_roles
from fooddelivery.database import get_db
from fooddelivery.models import OrderStatus, User, UserRole
from fooddelivery.schemas import (
    ApiResponse,
    ErrorResponse,
    OrderCreate,
    OrderOut,
    OrderPage,
    OrderStatusUpdate,
)
from fooddelivery.services import orders as order_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[OrderOut],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Place an order from the cart",
)
async def create_order(
    data: OrderCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[OrderOut]:
    """
    Validate the cart against the live menu and persist the order.

    Prices in the submitted cart are ignored; the order is priced from the
    menu. The whole operation is atomic.
    """
    customer_id = user.id
    logger.info(
        f"Creating order for user #{customer_id}: restaurant #{data.restaurant_id}, "
        f"{len(data.cart_items)} line(s)"
    )

    try:
        order = await order_service.create_order(
            db,
            customer_id=customer_id,
            cart_lines=data.cart_items,
            restaurant_id=data.restaurant_id,
            delivery_address_id=data.delivery_address_id,
            instructions=data.delivery_instructions,
            payment_method=data.payment_method,
        )
    except AppError:
        raise
    except Exception as exc:
        logger.exception(f"Error creating order for user #{customer_id}: {exc}")
        raise InternalServerError("Failed to place order") from exc

    return ApiResponse(message="Order created successfully", data=OrderOut.model_validate(order))


@router.get("", response_model=ApiResponse[OrderPage])
async def list_orders(
    status: Optional[OrderStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[OrderPage]:
    """The caller's order history."""
    orders, pagination = await order_service.list_customer_orders(
        db,
        customer_id=user.id,
        status=status,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order.lower(),
    )
    return ApiResponse(
        data=OrderPage(
            orders=[OrderOut.model_validate(o) for o in orders],
            pagination=pagination,
        )
    )


@router.get(
    "/{order_id}",
    response_model=ApiResponse[OrderOut],
    responses={404: {"model": ErrorResponse}},
)
async def get_order(
    order_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[OrderOut]:
    order = await order_service.get_customer_order(db, user.id, order_id)
    return ApiResponse(data=OrderOut.model_validate(order))


@router.patch(
    "/{order_id}/status",
    response_model=ApiResponse[OrderOut],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    user: User = Depends(require_roles(UserRole.RESTAURANT_OWNER, UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[OrderOut]:
    order = await order_service.update_order_status(
        db, order_id, data.status, user, preparation_time=data.preparation_time
    )
    return ApiResponse(message="Order status updated successfully", data=OrderOut.model_validate(order))
