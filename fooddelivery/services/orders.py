"""
Order Transaction

Turns a submitted cart into a durable order inside a single database
transaction:

    1. restaurant exists and is active
    2. delivery address belongs to the customer
    3. every line references an available item of that restaurant; prices
       are read from the menu, never from the client
    4. totals computed server-side (5% tax + restaurant delivery fee)

followed by the writes (order, order items, item popularity counters,
restaurant aggregates, per-day analytics row). Any failure rolls all of
them back. Order numbers are protected by a unique constraint; a collision
rolls the attempt back and the whole unit of work is retried with a fresh
number.

Status updates are a separate operation gated to the restaurant owner or
an administrator.
"""

import logging
import random
import string
import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fooddelivery.core.config import get_settings
from fooddelivery.core.exceptions import (
    BadRequestError,
    BusinessRuleError,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
)
from fooddelivery.core.pricing import calculate_order_totals, line_subtotal
from fooddelivery.models import (
    Address,
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Restaurant,
    RestaurantAnalytics,
    User,
    UserRole,
)
from fooddelivery.schemas import CartItemIn, Pagination

logger = logging.getLogger(__name__)

ORDER_NUMBER_ALPHABET = string.digits + string.ascii_uppercase

UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Forward-only sequence used when ENFORCE_STATUS_SEQUENCE is on
STATUS_SEQUENCE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]
CANCELLABLE_STATUSES = {
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
}

ORDER_SORT_COLUMNS = {
    "createdAt": Order.created_at,
    "totalAmount": Order.total_amount,
    "status": Order.status,
}


class OrderNumberCollision(Exception):
    """Raised when the generated order number already exists."""


@dataclass
class ValidatedLine:
    menu_item: MenuItem
    quantity: int
    notes: Optional[str]

    @property
    def price(self) -> float:
        return self.menu_item.price


def generate_order_number() -> str:
    """``ORD`` + epoch milliseconds + 4 random base-36 characters."""
    suffix = "".join(random.choices(ORDER_NUMBER_ALPHABET, k=4))
    return f"ORD{int(time.time() * 1000)}{suffix}"


def _order_detail_query():
    return select(Order).options(
        selectinload(Order.customer),
        selectinload(Order.restaurant).selectinload(Restaurant.address),
        selectinload(Order.delivery_address),
        selectinload(Order.items).selectinload(OrderItem.menu_item),
    )


async def load_order(db: AsyncSession, order_id: int) -> Order:
    """Fetch an order with customer, restaurant, address and items."""
    result = await db.execute(
        _order_detail_query()
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFoundError("Order not found")
    return order


# =============================================================================
# ORDER PLACEMENT
# =============================================================================

async def _validate_lines(
    db: AsyncSession, restaurant_id: int, cart_lines: Sequence[CartItemIn]
) -> list[ValidatedLine]:
    validated = []
    for line in cart_lines:
        menu_item = await db.get(MenuItem, line.id)
        if (
            menu_item is None
            or not menu_item.is_available
            or menu_item.restaurant_id != restaurant_id
        ):
            label = line.name or (menu_item.name if menu_item else f"#{line.id}")
            raise BusinessRuleError(f"Menu item {label} is not available")

        validated.append(
            ValidatedLine(
                menu_item=menu_item,
                quantity=line.quantity,
                notes=line.special_instructions or None,
            )
        )
    return validated


def _insert_for(db: AsyncSession):
    """Dialect ``insert`` construct supporting ON CONFLICT upserts."""
    dialect = db.get_bind().dialect.name
    try:
        return UPSERT_INSERTS[dialect]
    except KeyError:
        raise InternalServerError(f"Analytics upsert is not supported on {dialect}") from None


async def _record_analytics(
    db: AsyncSession, restaurant_id: int, lines: Sequence[ValidatedLine], total_amount: float
) -> None:
    """
    Bump popularity counters, restaurant aggregates and today's analytics row.

    Counters are incremented in SQL against the stored values, never
    computed from rows loaded into the session.
    """
    for line in lines:
        await db.execute(
            update(MenuItem)
            .where(MenuItem.id == line.menu_item.id)
            .values(times_ordered=MenuItem.times_ordered + line.quantity)
        )

    await db.execute(
        update(Restaurant)
        .where(Restaurant.id == restaurant_id)
        .values(
            total_orders=Restaurant.total_orders + 1,
            total_revenue=Restaurant.total_revenue + total_amount,
            avg_order_value=(Restaurant.total_revenue + total_amount) / (Restaurant.total_orders + 1),
        )
    )

    insert = _insert_for(db)
    stmt = insert(RestaurantAnalytics).values(
        restaurant_id=restaurant_id,
        date=date.today(),
        total_orders=1,
        total_revenue=total_amount,
        avg_order_value=total_amount,
        new_customers=0,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[RestaurantAnalytics.restaurant_id, RestaurantAnalytics.date],
        set_={
            "total_orders": RestaurantAnalytics.total_orders + 1,
            "total_revenue": RestaurantAnalytics.total_revenue + stmt.excluded.total_revenue,
            "avg_order_value": (RestaurantAnalytics.total_revenue + stmt.excluded.total_revenue)
            / (RestaurantAnalytics.total_orders + 1),
        },
    )
    await db.execute(stmt)


async def _place_order_once(
    db: AsyncSession,
    customer_id: int,
    cart_lines: Sequence[CartItemIn],
    restaurant_id: int,
    delivery_address_id: int,
    instructions: Optional[str],
    payment_method: str,
) -> int:
    """One attempt of the unit of work. Leaves the changes flushed, uncommitted."""
    settings = get_settings()

    # 1. Restaurant
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None or not restaurant.is_active:
        raise BusinessRuleError("Restaurant not found or inactive")

    # 2. Delivery address
    address = await db.get(Address, delivery_address_id)
    if address is None or address.user_id != customer_id:
        raise BusinessRuleError("Invalid delivery address")

    # 3. Lines, with server-side prices
    lines = await _validate_lines(db, restaurant_id, cart_lines)

    # 4. Totals
    subtotal = line_subtotal((line.price, line.quantity) for line in lines)
    totals = calculate_order_totals(subtotal, restaurant.delivery_fee or 0.0, settings.tax_rate)

    order = Order(
        order_number=generate_order_number(),
        customer_id=customer_id,
        restaurant_id=restaurant_id,
        address_id=delivery_address_id,
        subtotal=totals.subtotal,
        tax=totals.tax,
        delivery_fee=totals.delivery_fee,
        discount=0.0,
        total_amount=totals.total_amount,
        instructions=instructions or None,
        payment_method=payment_method,
        payment_status=PaymentStatus.PENDING,
        status=OrderStatus.PENDING,
        estimated_delivery_time=datetime.now(timezone.utc)
        + timedelta(minutes=settings.estimated_delivery_minutes),
        items=[
            OrderItem(
                menu_item_id=line.menu_item.id,
                quantity=line.quantity,
                price=line.price,
                notes=line.notes,
            )
            for line in lines
        ],
    )
    db.add(order)

    try:
        await db.flush()
    except IntegrityError as exc:
        if "order_number" in str(exc.orig):
            raise OrderNumberCollision(order.order_number) from exc
        raise

    await _record_analytics(db, restaurant_id, lines, totals.total_amount)
    await db.flush()

    logger.info(
        f"Order {order.order_number} staged: restaurant #{restaurant_id}, "
        f"{len(lines)} line(s), total {totals.total_amount}"
    )
    return order.id


async def create_order(
    db: AsyncSession,
    customer_id: int,
    cart_lines: Sequence[CartItemIn],
    restaurant_id: int,
    delivery_address_id: int,
    instructions: Optional[str] = None,
    payment_method: Optional[str] = None,
) -> Order:
    """
    Place an order atomically.

    Args:
        db: Session; any transaction already open on it is committed into
            this unit of work or rolled back with it
        customer_id: Ordering user
        cart_lines: Submitted cart; only ``id``, ``quantity`` and
            ``special_instructions`` are trusted
        restaurant_id: Restaurant the cart is bound to
        delivery_address_id: One of the customer's saved addresses
        instructions: Free-text delivery instructions
        payment_method: Stored verbatim (defaults to DEFAULT_PAYMENT_METHOD)

    Returns:
        The persisted order with customer, restaurant, address and items loaded

    Raises:
        BadRequestError: Empty cart
        BusinessRuleError: Inactive restaurant, foreign address, unavailable item
    """
    settings = get_settings()
    if not cart_lines:
        raise BadRequestError("Missing required fields: cartItems, restaurantId, deliveryAddressId")

    method = payment_method or settings.default_payment_method

    for attempt in range(1, settings.order_number_attempts + 1):
        try:
            order_id = await _place_order_once(
                db,
                customer_id,
                cart_lines,
                restaurant_id,
                delivery_address_id,
                instructions,
                method,
            )
            await db.commit()
        except OrderNumberCollision as exc:
            await db.rollback()
            logger.warning(f"Order number {exc} collided (attempt {attempt}), retrying")
            continue
        except Exception:
            await db.rollback()
            raise

        order = await load_order(db, order_id)
        logger.info(f"Order {order.order_number} created for customer #{customer_id}")
        return order

    raise InternalServerError("Could not allocate a unique order number")


# =============================================================================
# ORDER QUERIES
# =============================================================================

async def list_customer_orders(
    db: AsyncSession,
    customer_id: int,
    status: Optional[OrderStatus] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> tuple[list[Order], Pagination]:
    sort_column = ORDER_SORT_COLUMNS.get(sort_by)
    if sort_column is None:
        raise BadRequestError(f"Invalid sortBy. Options: {list(ORDER_SORT_COLUMNS)}")
    ordering = sort_column.asc() if sort_order == "asc" else sort_column.desc()

    filters = [Order.customer_id == customer_id]
    if status is not None:
        filters.append(Order.status == status)

    total_result = await db.execute(select(func.count(Order.id)).where(*filters))
    total_count = total_result.scalar() or 0

    result = await db.execute(
        _order_detail_query()
        .where(*filters)
        .order_by(ordering, Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    orders = list(result.scalars().all())
    return orders, Pagination.build(page, limit, total_count)


async def get_customer_order(db: AsyncSession, customer_id: int, order_id: int) -> Order:
    """An order visible to its customer; anyone else gets 404."""
    order = await load_order(db, order_id)
    if order.customer_id != customer_id:
        raise NotFoundError("Order not found")
    return order


# =============================================================================
# STATUS TRANSITIONS
# =============================================================================

def check_transition(current: OrderStatus, new: OrderStatus) -> None:
    """Reject moves that go backwards or leave a terminal status."""
    if current == new:
        return
    if current in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
        raise BusinessRuleError(f"Order is already {current.value}")
    if new == OrderStatus.CANCELLED:
        if current not in CANCELLABLE_STATUSES:
            raise BusinessRuleError(f"Order cannot be cancelled once {current.value}")
        return
    if STATUS_SEQUENCE.index(new) < STATUS_SEQUENCE.index(current):
        raise BusinessRuleError(f"Cannot move order from {current.value} back to {new.value}")


async def update_order_status(
    db: AsyncSession,
    order_id: int,
    status: OrderStatus,
    actor: User,
    preparation_time: Optional[int] = None,
) -> Order:
    """
    Change an order's status.

    Only the owner of the order's restaurant or an administrator may do
    this. Any status of the enum is accepted unless
    ENFORCE_STATUS_SEQUENCE is set. DELIVERED stamps the delivery time.
    """
    settings = get_settings()

    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")

    if actor.role != UserRole.ADMIN:
        restaurant = await db.get(Restaurant, order.restaurant_id)
        if restaurant is None or restaurant.owner_id != actor.id:
            raise ForbiddenError("Access denied")

    if settings.enforce_status_sequence:
        check_transition(order.status, status)

    previous = order.status
    order.status = status
    if preparation_time is not None:
        order.preparation_time = preparation_time
    if status == OrderStatus.DELIVERED:
        order.actual_delivery_time = datetime.now(timezone.utc)

    await db.commit()
    logger.info(
        f"Order {order.order_number}: {previous.value} -> {status.value} "
        f"(by user #{actor.id})"
    )
    return await load_order(db, order_id)
