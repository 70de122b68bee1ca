"""
Cart State

Immutable pydantic models for the client-side cart. Every transition builds
a new ``CartState``; nothing is mutated in place.

The cart is bound to at most one restaurant. Lines are unique by menu item
id and always belong to the bound restaurant.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fooddelivery.core.pricing import DEFAULT_TAX_RATE, OrderTotals, calculate_order_totals, line_subtotal

# Fields written to storage. Pending/modal state is transient.
PERSISTED_FIELDS = {
    "items",
    "restaurant_id",
    "restaurant_info",
    "delivery_address",
    "delivery_instructions",
}


class FrozenModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class MenuItemSnapshot(FrozenModel):
    """The menu item as shown in the catalog when it was added."""
    id: int
    name: str
    price: float
    is_veg: bool = True
    spice_level: Optional[str] = None
    image: Optional[str] = None


class CartLine(MenuItemSnapshot):
    quantity: int = 1
    special_instructions: str = ""

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class RestaurantInfo(FrozenModel):
    """Snapshot of the bound restaurant kept alongside the lines."""
    id: int
    name: str
    delivery_fee: float = 0.0
    min_order: float = 0.0
    image: Optional[str] = None


class PendingAdd(FrozenModel):
    """An add from another restaurant, staged until the user decides."""
    item: MenuItemSnapshot
    restaurant_id: int
    restaurant_info: Optional[RestaurantInfo] = None


class CartState(FrozenModel):
    items: tuple[CartLine, ...] = ()
    restaurant_id: Optional[int] = None
    restaurant_info: Optional[RestaurantInfo] = None
    delivery_address: Optional[dict[str, Any]] = None
    delivery_instructions: str = ""
    pending_add: Optional[PendingAdd] = None
    show_restaurant_change_modal: bool = False

    # -------------------------------------------------------------------------
    # Derived queries
    # -------------------------------------------------------------------------

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def subtotal(self) -> float:
        return line_subtotal((line.price, line.quantity) for line in self.items)

    @property
    def delivery_fee(self) -> float:
        if self.restaurant_info is None:
            return 0.0
        return self.restaurant_info.delivery_fee

    def totals(self, tax_rate: float = DEFAULT_TAX_RATE) -> OrderTotals:
        return calculate_order_totals(self.subtotal, self.delivery_fee, tax_rate)

    @property
    def tax(self) -> float:
        return self.totals().tax

    @property
    def total(self) -> float:
        return self.totals().total_amount

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    def get_item(self, item_id: int) -> Optional[CartLine]:
        for line in self.items:
            if line.id == item_id:
                return line
        return None

    # -------------------------------------------------------------------------
    # Storage format
    # -------------------------------------------------------------------------

    def to_storage(self) -> dict[str, Any]:
        """JSON-ready blob with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, include=PERSISTED_FIELDS)

    @classmethod
    def from_storage(cls, data: dict[str, Any]) -> "CartState":
        """
        Rebuild a state from a stored blob.

        Raises:
            ValueError: if the blob does not describe a cart
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return cls.model_validate({key: value for key, value in data.items() if value is not None})
