"""
Checkout: submit the cart as an order.

The cart, including its delivery details, is cleared only after the API
accepted the order. Any failure leaves the cart untouched so the user can
fix the problem and retry.
"""

import logging
from typing import Any, Optional

from fooddelivery.cart.store import CartStore
from fooddelivery.client.api import FoodDeliveryClient

logger = logging.getLogger(__name__)


class EmptyCartError(Exception):
    """Checkout attempted with nothing in the cart."""


def cart_payload(store: CartStore) -> list[dict[str, Any]]:
    """Cart lines in the shape the order endpoint expects."""
    return [
        {
            "id": line.id,
            "name": line.name,
            "price": line.price,
            "quantity": line.quantity,
            "specialInstructions": line.special_instructions or None,
        }
        for line in store.items
    ]


async def checkout(
    store: CartStore,
    client: FoodDeliveryClient,
    address_id: int,
    payment_method: Optional[str] = None,
) -> dict[str, Any]:
    """
    Place an order for the current cart.

    Returns:
        The created order as returned by the API

    Raises:
        EmptyCartError: if the cart has no lines or no restaurant
        ApiError: if the API rejects the order
    """
    state = store.state
    if state.is_empty or state.restaurant_id is None:
        raise EmptyCartError("Cart is empty")

    order = await client.place_order(
        cart_items=cart_payload(store),
        restaurant_id=state.restaurant_id,
        delivery_address_id=address_id,
        delivery_instructions=state.delivery_instructions or None,
        payment_method=payment_method,
    )

    logger.info(f"Order {order['orderNumber']} placed, total {order['totalAmount']}")
    store.set_delivery_info(None)
    store.clear_cart()
    return order
