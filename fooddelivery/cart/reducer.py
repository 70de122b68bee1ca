"""
Cart transition function.

``reduce(state, event)`` is pure: it returns a new ``CartState`` and never
touches storage or notifications. Unknown events leave the state unchanged.
"""

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
from fooddelivery.cart.state import CartLine, CartState, MenuItemSnapshot, PendingAdd


def _new_line(item: MenuItemSnapshot) -> CartLine:
    snapshot = item.model_dump(include=set(MenuItemSnapshot.model_fields))
    return CartLine(**snapshot, quantity=1, special_instructions="")


def _without(state: CartState, item_id: int) -> tuple[CartLine, ...]:
    return tuple(line for line in state.items if line.id != item_id)


def _add_item(state: CartState, event: AddItem) -> CartState:
    if state.items and state.restaurant_id is not None and state.restaurant_id != event.restaurant_id:
        return state.model_copy(
            update={
                "pending_add": PendingAdd(
                    item=event.item,
                    restaurant_id=event.restaurant_id,
                    restaurant_info=event.restaurant_info,
                ),
                "show_restaurant_change_modal": True,
            }
        )

    if state.get_item(event.item.id) is not None:
        items = tuple(
            line.model_copy(update={"quantity": line.quantity + 1})
            if line.id == event.item.id else line
            for line in state.items
        )
    else:
        items = state.items + (_new_line(event.item),)

    return state.model_copy(
        update={
            "items": items,
            "restaurant_id": event.restaurant_id,
            "restaurant_info": event.restaurant_info,
        }
    )


def _replace_cart(state: CartState) -> CartState:
    pending = state.pending_add
    if pending is None:
        return state
    return state.model_copy(
        update={
            "items": (_new_line(pending.item),),
            "restaurant_id": pending.restaurant_id,
            "restaurant_info": pending.restaurant_info,
            "pending_add": None,
            "show_restaurant_change_modal": False,
        }
    )


def reduce(state: CartState, event: CartEvent) -> CartState:
    if isinstance(event, LoadCart):
        loaded = event.state
        return state.model_copy(
            update={
                "items": loaded.items,
                "restaurant_id": loaded.restaurant_id,
                "restaurant_info": loaded.restaurant_info,
                "delivery_address": loaded.delivery_address,
                "delivery_instructions": loaded.delivery_instructions,
            }
        )

    if isinstance(event, AddItem):
        return _add_item(state, event)

    if isinstance(event, RemoveItem):
        return state.model_copy(update={"items": _without(state, event.item_id)})

    if isinstance(event, UpdateQuantity):
        if event.quantity <= 0:
            return state.model_copy(update={"items": _without(state, event.item_id)})
        items = tuple(
            line.model_copy(update={"quantity": event.quantity})
            if line.id == event.item_id else line
            for line in state.items
        )
        return state.model_copy(update={"items": items})

    if isinstance(event, UpdateInstructions):
        items = tuple(
            line.model_copy(update={"special_instructions": event.instructions})
            if line.id == event.item_id else line
            for line in state.items
        )
        return state.model_copy(update={"items": items})

    if isinstance(event, ClearCart):
        return state.model_copy(
            update={"items": (), "restaurant_id": None, "restaurant_info": None}
        )

    if isinstance(event, ReplaceCart):
        return _replace_cart(state)

    if isinstance(event, CancelRestaurantChange):
        return state.model_copy(
            update={"pending_add": None, "show_restaurant_change_modal": False}
        )

    if isinstance(event, SetDeliveryInfo):
        return state.model_copy(
            update={
                "delivery_address": event.address,
                "delivery_instructions": event.instructions,
            }
        )

    return state
