"""
Client-side cart.

A pure reducer over immutable state, plus a store that persists every
change and emits user-facing notifications.
"""

from fooddelivery.cart.state import CartLine, CartState, MenuItemSnapshot, PendingAdd, RestaurantInfo
from fooddelivery.cart.storage import CART_STORAGE_KEY, BaseCartStorage, FileCartStorage, MemoryCartStorage
from fooddelivery.cart.store import CartStore

__all__ = [
    "CART_STORAGE_KEY",
    "BaseCartStorage",
    "CartLine",
    "CartState",
    "CartStore",
    "FileCartStorage",
    "MemoryCartStorage",
    "MenuItemSnapshot",
    "PendingAdd",
    "RestaurantInfo",
]
