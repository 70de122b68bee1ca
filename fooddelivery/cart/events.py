"""Cart events consumed by ``reduce``."""

from dataclasses import dataclass
from typing import Any, Optional, Union

from fooddelivery.cart.state import CartState, MenuItemSnapshot, RestaurantInfo


@dataclass(frozen=True)
class LoadCart:
    """Adopt a previously persisted cart."""
    state: CartState


@dataclass(frozen=True)
class AddItem:
    item: MenuItemSnapshot
    restaurant_id: int
    restaurant_info: Optional[RestaurantInfo] = None


@dataclass(frozen=True)
class RemoveItem:
    item_id: int


@dataclass(frozen=True)
class UpdateQuantity:
    item_id: int
    quantity: int


@dataclass(frozen=True)
class UpdateInstructions:
    item_id: int
    instructions: str


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class ReplaceCart:
    """Accept the staged add and drop the current restaurant's lines."""


@dataclass(frozen=True)
class CancelRestaurantChange:
    pass


@dataclass(frozen=True)
class SetDeliveryInfo:
    address: Optional[dict[str, Any]]
    instructions: str = ""


CartEvent = Union[
    LoadCart,
    AddItem,
    RemoveItem,
    UpdateQuantity,
    UpdateInstructions,
    ClearCart,
    ReplaceCart,
    CancelRestaurantChange,
    SetDeliveryInfo,
]
