import pytest

from fooddelivery.cart.events import (
    AddItem,
    CancelRestaurantChange,
    ClearCart,
    LoadCart,
    RemoveItem,
    ReplaceCart,
    SetDeliveryInfo,
    UpdateInstructions,
    UpdateQuantity,
)
from fooddelivery.cart.reducer import reduce
from fooddelivery.cart.state import CartState, MenuItemSnapshot, RestaurantInfo

TASTY = RestaurantInfo(id=1, name="Tasty Bites", delivery_fee=30.0, min_order=150.0)
SPICE = RestaurantInfo(id=2, name="Spice Route", delivery_fee=25.0)

BIRYANI = MenuItemSnapshot(id=10, name="Chicken Biryani", price=100.0, is_veg=False)
NAAN = MenuItemSnapshot(id=11, name="Garlic Naan", price=100.0)
LASSI = MenuItemSnapshot(id=12, name="Sweet Lassi", price=50.0)
DOSA = MenuItemSnapshot(id=20, name="Masala Dosa", price=90.0)


def add(state: CartState, item: MenuItemSnapshot, info: RestaurantInfo = TASTY) -> CartState:
    return reduce(state, AddItem(item, info.id, info))


@pytest.fixture
def cart() -> CartState:
    state = add(CartState(), BIRYANI)
    state = add(state, BIRYANI)
    return add(state, LASSI)


def test_empty_cart_defaults():
    state = CartState()
    assert state.is_empty
    assert state.item_count == 0
    assert state.subtotal == 0
    assert state.delivery_fee == 0
    assert state.total == 0
    assert state.restaurant_id is None


def test_first_add_binds_restaurant():
    state = add(CartState(), NAAN)

    assert state.restaurant_id == 1
    assert state.restaurant_info == TASTY
    line = state.get_item(NAAN.id)
    assert line.quantity == 1
    assert line.special_instructions == ""


@pytest.mark.parametrize("times", [1, 2, 5])
def test_repeated_adds_accumulate_quantity(times):
    state = CartState()
    for _ in range(times):
        state = add(state, BIRYANI)

    assert len(state.items) == 1
    assert state.get_item(BIRYANI.id).quantity == times


def test_lines_keep_insertion_order(cart):
    assert [line.id for line in cart.items] == [BIRYANI.id, LASSI.id]


def test_derived_totals(cart):
    # 2 x 100 + 1 x 50, fee 30
    assert cart.item_count == 3
    assert cart.subtotal == 250
    assert cart.delivery_fee == 30
    assert cart.tax == 12.5
    assert cart.total == 292.5


def test_cross_restaurant_add_stages_without_touching_items(cart):
    staged = add(cart, DOSA, SPICE)

    assert staged.items == cart.items
    assert staged.restaurant_id == 1
    assert staged.show_restaurant_change_modal is True
    assert staged.pending_add.item == DOSA
    assert staged.pending_add.restaurant_id == 2


def test_replace_cart_adopts_pending_item(cart):
    staged = add(cart, DOSA, SPICE)
    replaced = reduce(staged, ReplaceCart())

    assert len(replaced.items) == 1
    line = replaced.items[0]
    assert line.id == DOSA.id
    assert line.quantity == 1
    assert line.special_instructions == ""
    assert replaced.restaurant_id == 2
    assert replaced.restaurant_info == SPICE
    assert replaced.pending_add is None
    assert replaced.show_restaurant_change_modal is False


def test_replace_cart_without_pending_is_noop(cart):
    assert reduce(cart, ReplaceCart()) == cart


def test_cancel_restaurant_change_keeps_items(cart):
    staged = add(cart, DOSA, SPICE)
    cancelled = reduce(staged, CancelRestaurantChange())

    assert cancelled.items == cart.items
    assert cancelled.restaurant_id == 1
    assert cancelled.pending_add is None
    assert cancelled.show_restaurant_change_modal is False


def test_add_to_empty_cart_from_new_restaurant_is_not_staged(cart):
    emptied = reduce(cart, ClearCart())
    state = add(emptied, DOSA, SPICE)

    assert state.pending_add is None
    assert state.restaurant_id == 2
    assert state.get_item(DOSA.id).quantity == 1


def test_remove_item(cart):
    state = reduce(cart, RemoveItem(BIRYANI.id))
    assert state.get_item(BIRYANI.id) is None
    assert state.item_count == 1


def test_remove_missing_item_is_noop(cart):
    assert reduce(cart, RemoveItem(999)).items == cart.items


@pytest.mark.parametrize("quantity", [0, -1])
def test_update_quantity_to_zero_or_less_removes(cart, quantity):
    assert reduce(cart, UpdateQuantity(BIRYANI.id, quantity)) == reduce(cart, RemoveItem(BIRYANI.id))


def test_update_quantity_sets_exact_value(cart):
    state = reduce(cart, UpdateQuantity(LASSI.id, 7))
    assert state.get_item(LASSI.id).quantity == 7
    assert state.get_item(BIRYANI.id).quantity == 2


def test_update_instructions(cart):
    state = reduce(cart, UpdateInstructions(BIRYANI.id, "no onions"))
    assert state.get_item(BIRYANI.id).special_instructions == "no onions"
    assert state.get_item(LASSI.id).special_instructions == ""


def test_clear_cart_keeps_pending_add(cart):
    staged = add(cart, DOSA, SPICE)
    cleared = reduce(staged, ClearCart())

    assert cleared.is_empty
    assert cleared.restaurant_id is None
    assert cleared.restaurant_info is None
    assert cleared.pending_add is not None
    assert cleared.show_restaurant_change_modal is True


def test_set_delivery_info(cart):
    address = {"id": 3, "street": "456 Customer Lane"}
    state = reduce(cart, SetDeliveryInfo(address, "Ring twice"))
    assert state.delivery_address == address
    assert state.delivery_instructions == "Ring twice"


def test_load_cart_adopts_persisted_fields(cart):
    staged = add(CartState(), DOSA, SPICE)
    loaded = reduce(staged, LoadCart(cart))

    assert loaded.items == cart.items
    assert loaded.restaurant_id == cart.restaurant_id
    assert loaded.restaurant_info == cart.restaurant_info


def test_transitions_never_mutate_input(cart):
    before = cart.model_dump()
    reduce(cart, AddItem(BIRYANI, 1, TASTY))
    reduce(cart, UpdateQuantity(LASSI.id, 4))
    reduce(cart, ClearCart())
    assert cart.model_dump() == before


def test_storage_blob_uses_camel_case(cart):
    blob = reduce(cart, SetDeliveryInfo(None, "Leave at door")).to_storage()

    assert set(blob) == {"items", "restaurantId", "restaurantInfo", "deliveryAddress", "deliveryInstructions"}
    assert blob["restaurantInfo"]["deliveryFee"] == 30.0
    assert blob["items"][0]["specialInstructions"] == ""
    assert blob["items"][0]["isVeg"] is False


def test_storage_round_trip(cart):
    restored = CartState.from_storage(cart.to_storage())
    assert restored == cart
