import pytest
import pytest_asyncio

from fooddelivery.models import MenuItem, Restaurant, Review


@pytest_asyncio.fixture
async def catalog(db, seed):
    """Adds two more restaurants next to Tasty Bites."""
    spice = Restaurant(
        name="Spice Route",
        description="South Indian tiffin",
        owner_id=seed.owner_id,
        cuisine_type=["South Indian"],
        delivery_fee=20.0,
        min_order=100.0,
        rating=4.8,
    )
    dragon = Restaurant(
        name="Dragon Wok",
        description="Indo-Chinese favourites",
        owner_id=seed.stranger_id,
        cuisine_type=["Chinese", "Thai"],
        delivery_fee=50.0,
        min_order=200.0,
        rating=3.9,
    )
    closed = Restaurant(name="Closed Kitchen", cuisine_type=["Chinese"], rating=5.0, is_active=False)
    db.add_all([spice, dragon, closed])
    await db.flush()

    db.add_all([
        MenuItem(restaurant_id=spice.id, name="Masala Dosa", price=90.0, category="Tiffin", is_veg=True),
        MenuItem(restaurant_id=dragon.id, name="Chilli Chicken", price=220.0, category="Starter"),
        Review(restaurant_id=seed.restaurant_id, user_id=seed.customer_id, rating=5, comment="Great"),
        Review(restaurant_id=seed.restaurant_id, user_id=seed.other_id, rating=4),
    ])
    await db.commit()
    return {"spice": spice.id, "dragon": dragon.id, "closed": closed.id, "tasty": seed.restaurant_id}


def names(response) -> list[str]:
    return [r["name"] for r in response.json()["data"]["restaurants"]]


@pytest.mark.asyncio
async def test_listing_defaults_to_rating_desc(api, catalog):
    response = await api.get("/api/restaurants")

    assert response.status_code == 200
    assert names(response) == ["Spice Route", "Tasty Bites", "Dragon Wok"]
    pagination = response.json()["data"]["pagination"]
    assert pagination["totalCount"] == 3
    assert pagination["currentPage"] == 1


@pytest.mark.asyncio
async def test_listing_includes_counts_and_address(api, catalog):
    response = await api.get("/api/restaurants", params={"search": "tasty"})

    [tasty] = response.json()["data"]["restaurants"]
    assert tasty["reviewCount"] == 2
    assert tasty["orderCount"] == 0
    assert tasty["address"]["city"] == "Vellore"
    assert tasty["cuisineType"] == ["North Indian", "Chinese"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params,expected",
    [
        ({"search": "wok"}, ["Dragon Wok"]),
        ({"search": "tiffin"}, ["Spice Route"]),
        ({"search": "thai"}, ["Dragon Wok"]),
        ({"cuisine": "Chinese"}, ["Tasty Bites", "Dragon Wok"]),
        ({"cuisine": "Indian"}, []),
        ({"minRating": 4.5}, ["Spice Route", "Tasty Bites"]),
        ({"maxDeliveryFee": 30}, ["Spice Route", "Tasty Bites"]),
        ({"sortBy": "deliveryFee", "sortOrder": "asc"}, ["Spice Route", "Tasty Bites", "Dragon Wok"]),
        ({"sortBy": "name", "sortOrder": "asc"}, ["Dragon Wok", "Spice Route", "Tasty Bites"]),
        ({"sortBy": "minOrder", "sortOrder": "desc"}, ["Dragon Wok", "Tasty Bites", "Spice Route"]),
    ],
)
async def test_listing_filters_and_sorting(api, catalog, params, expected):
    response = await api.get("/api/restaurants", params=params)
    assert response.status_code == 200
    assert names(response) == expected


@pytest.mark.asyncio
async def test_listing_pagination(api, catalog):
    response = await api.get("/api/restaurants", params={"page": 2, "limit": 2})

    assert names(response) == ["Dragon Wok"]
    assert response.json()["data"]["pagination"] == {
        "currentPage": 2,
        "totalPages": 2,
        "totalCount": 3,
        "hasNext": False,
        "hasPrev": True,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"sortBy": "secret"}, {"sortOrder": "sideways"}, {"limit": 500}])
async def test_listing_rejects_bad_parameters(api, catalog, params):
    response = await api.get("/api/restaurants", params=params)
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_restaurant_detail_groups_menu(api, seed):
    response = await api.get(f"/api/restaurants/{seed.restaurant_id}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Tasty Bites"
    assert data["menuCategories"] == ["Main Course", "Bread", "Drinks", "Dessert"]
    assert [i["name"] for i in data["menu"]["Main Course"]] == ["Chicken Biryani"]
    assert data["menu"]["Dessert"][0]["isAvailable"] is False


@pytest.mark.asyncio
async def test_inactive_restaurant_is_not_found(api, catalog):
    response = await api.get(f"/api/restaurants/{catalog['closed']}")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Restaurant not found"}


@pytest.mark.asyncio
async def test_menu_hides_unavailable_items(api, seed):
    response = await api.get(f"/api/restaurants/{seed.restaurant_id}/menu")

    data = response.json()["data"]
    assert data["restaurantId"] == seed.restaurant_id
    assert data["menuCategories"] == ["Main Course", "Bread", "Drinks"]


@pytest.mark.asyncio
async def test_menu_filters(api, seed):
    veg = await api.get(f"/api/restaurants/{seed.restaurant_id}/menu", params={"vegOnly": "true"})
    assert veg.json()["data"]["menuCategories"] == ["Bread", "Drinks"]

    bread = await api.get(f"/api/restaurants/{seed.restaurant_id}/menu", params={"category": "Bread"})
    assert list(bread.json()["data"]["menu"]) == ["Bread"]


@pytest.mark.asyncio
async def test_search_suggestions(api, catalog):
    response = await api.get("/api/restaurants/search-suggestions", params={"q": "chi"})

    data = response.json()["data"]
    assert data["cuisines"] == ["Chinese"]
    assert {d["name"] for d in data["dishes"]} == {"Chicken Biryani", "Chilli Chicken"}
    assert data["restaurants"] == []


@pytest.mark.asyncio
async def test_short_suggestion_query_returns_nothing(api, catalog):
    response = await api.get("/api/restaurants/search-suggestions", params={"q": "c"})
    assert response.json()["data"] == {"restaurants": [], "cuisines": [], "dishes": []}


# =============================================================================
# Management
# =============================================================================

NEW_RESTAURANT = {
    "name": "Curry House",
    "description": "Home style curries",
    "cuisineType": ["North Indian"],
    "deliveryFee": 25,
    "minOrder": 120,
    "openTime": "11:00",
    "closeTime": "22:30",
    "address": {"street": "9 Market Road", "city": "Vellore", "state": "Tamil Nadu", "zipCode": "632014"},
}


@pytest.mark.asyncio
async def test_owner_creates_restaurant(api, seed, auth_for):
    response = await api.post("/api/restaurants", json=NEW_RESTAURANT, headers=auth_for(seed.owner_id))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["name"] == "Curry House"
    assert data["ownerId"] == seed.owner_id
    assert data["address"]["street"] == "9 Market Road"
    assert data["menu"] == {}


@pytest.mark.asyncio
async def test_customer_cannot_create_restaurant(api, seed, auth_for):
    response = await api.post("/api/restaurants", json=NEW_RESTAURANT, headers=auth_for(seed.customer_id))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_bad_opening_time_is_rejected(api, seed, auth_for):
    response = await api.post(
        "/api/restaurants", json={**NEW_RESTAURANT, "openTime": "25:00"}, headers=auth_for(seed.owner_id)
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_owner_updates_own_restaurant(api, seed, auth_for):
    response = await api.put(
        f"/api/restaurants/{seed.restaurant_id}",
        json={"deliveryFee": 40},
        headers=auth_for(seed.owner_id),
    )
    assert response.status_code == 200
    assert response.json()["data"]["deliveryFee"] == 40


@pytest.mark.asyncio
async def test_other_owner_cannot_update(api, seed, auth_for):
    response = await api.put(
        f"/api/restaurants/{seed.restaurant_id}",
        json={"deliveryFee": 0},
        headers=auth_for(seed.stranger_id),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_deactivates_restaurant(api, seed, auth_for):
    response = await api.delete(f"/api/restaurants/{seed.restaurant_id}", headers=auth_for(seed.admin_id))
    assert response.status_code == 200

    listing = await api.get("/api/restaurants")
    assert listing.json()["data"]["restaurants"] == []
    detail = await api.get(f"/api/restaurants/{seed.restaurant_id}")
    assert detail.status_code == 404
