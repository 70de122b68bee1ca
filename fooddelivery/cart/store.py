"""
Cart Store

Owns the current ``CartState``. Each operation dispatches one event through
``reduce``, persists the result and emits the matching notification.

Usage:
    store = CartStore(FileCartStorage())
    store.add_item(item, restaurant_id=1, restaurant_info=info)
    print(store.state.total)
"""

import json
import logging
from typing import Any, Optional

from fooddelivery.cart.events import (
    AddItem,
    CancelRestaurantChange,
    CartEvent,
    ClearCart,
    LoadCart,
    RemoveItem,
    ReplaceCart,
    SetDeliveryInfo,
    UpdateInstructions,
    UpdateQuantity,
)
from fooddelivery.cart.notifications import BaseNotifier, LoggingNotifier
from fooddelivery.cart.reducer import reduce
from fooddelivery.cart.state import CartLine, CartState, MenuItemSnapshot, RestaurantInfo
from fooddelivery.cart.storage import CART_STORAGE_KEY, BaseCartStorage, CartStorageError, MemoryCartStorage

logger = logging.getLogger(__name__)


class CartStore:
    """Single-owner, synchronous cart."""

    def __init__(
        self,
        storage: Optional[BaseCartStorage] = None,
        notifier: Optional[BaseNotifier] = None,
        key: str = CART_STORAGE_KEY,
    ):
        self.storage = storage or MemoryCartStorage()
        self.notifier = notifier or LoggingNotifier()
        self.key = key
        self._state = CartState()
        self._load()

    @property
    def state(self) -> CartState:
        return self._state

    def _load(self) -> None:
        """Adopt the persisted cart. Unreadable data leaves the cart empty."""
        try:
            raw = self.storage.load(self.key)
            if not raw:
                return
            stored = CartState.from_storage(json.loads(raw))
        except (CartStorageError, ValueError) as e:
            logger.warning(f"Ignoring unreadable saved cart: {e}")
            return
        self._state = reduce(self._state, LoadCart(stored))
        logger.debug(f"Loaded cart with {len(self._state.items)} line(s)")

    def dispatch(self, event: CartEvent) -> CartState:
        self._state = reduce(self._state, event)
        self.storage.save(self.key, self._state.to_storage())
        return self._state

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def add_item(
        self,
        item: MenuItemSnapshot,
        restaurant_id: int,
        restaurant_info: Optional[RestaurantInfo] = None,
    ) -> CartState:
        """
        Add one unit of ``item``.

        Adding from a different restaurant than the one in a non-empty cart
        does not touch the lines: the add is staged and
        ``show_restaurant_change_modal`` is raised until ``replace_cart`` or
        ``cancel_restaurant_change`` is called.
        """
        current = self._state
        staged = bool(current.items) and current.restaurant_id not in (None, restaurant_id)
        state = self.dispatch(AddItem(item, restaurant_id, restaurant_info))
        if not staged:
            self.notifier.success(f"{item.name} added to cart")
        return state

    def remove_item(self, item_id: int) -> CartState:
        line = self._state.get_item(item_id)
        state = self.dispatch(RemoveItem(item_id))
        if line is not None:
            self.notifier.success(f"{line.name} removed from cart")
        return state

    def update_quantity(self, item_id: int, quantity: int) -> CartState:
        return self.dispatch(UpdateQuantity(item_id, quantity))

    def update_instructions(self, item_id: int, instructions: str) -> CartState:
        return self.dispatch(UpdateInstructions(item_id, instructions))

    def clear_cart(self) -> CartState:
        state = self.dispatch(ClearCart())
        self.notifier.success("Cart cleared")
        return state

    def replace_cart(self) -> CartState:
        applied = self._state.pending_add is not None
        state = self.dispatch(ReplaceCart())
        if applied:
            self.notifier.success("Cart replaced with new restaurant items")
        return state

    def cancel_restaurant_change(self) -> CartState:
        return self.dispatch(CancelRestaurantChange())

    def set_delivery_info(self, address: Optional[dict[str, Any]], instructions: str = "") -> CartState:
        return self.dispatch(SetDeliveryInfo(address, instructions))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def items(self) -> tuple[CartLine, ...]:
        return self._state.items

    def get_item(self, item_id: int) -> Optional[CartLine]:
        return self._state.get_item(item_id)
