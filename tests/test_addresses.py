import pytest

ADDRESS = {
    "street": "12 Lake View Road",
    "city": "Vellore",
    "state": "Tamil Nadu",
    "zipCode": "632014",
    "landmark": "Opposite the park",
}


async def defaults(api, headers) -> list[int]:
    response = await api.get("/api/addresses", headers=headers)
    return [a["id"] for a in response.json()["data"] if a["isDefault"]]


@pytest.mark.asyncio
async def test_list_puts_default_first(api, seed, auth_for):
    headers = auth_for(seed.customer_id)
    await api.post("/api/addresses", json={**ADDRESS, "addressType": "WORK"}, headers=headers)

    response = await api.get("/api/addresses", headers=headers)
    assert response.status_code == 200
    addresses = response.json()["data"]
    assert len(addresses) == 2
    assert addresses[0]["id"] == seed.address_id
    assert addresses[0]["isDefault"] is True
    assert addresses[1]["addressType"] == "WORK"


@pytest.mark.asyncio
async def test_create_default_clears_previous(api, seed, auth_for):
    headers = auth_for(seed.customer_id)

    response = await api.post("/api/addresses", json={**ADDRESS, "isDefault": True}, headers=headers)
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Address created successfully"
    new_id = body["data"]["id"]

    assert await defaults(api, headers) == [new_id]


@pytest.mark.asyncio
async def test_update_to_default_clears_previous(api, seed, auth_for):
    headers = auth_for(seed.customer_id)
    created = await api.post("/api/addresses", json=ADDRESS, headers=headers)
    new_id = created.json()["data"]["id"]

    response = await api.put(f"/api/addresses/{new_id}", json={"isDefault": True}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["isDefault"] is True

    assert await defaults(api, headers) == [new_id]


@pytest.mark.asyncio
async def test_partial_update_keeps_other_fields(api, seed, auth_for):
    headers = auth_for(seed.customer_id)

    response = await api.put(
        f"/api/addresses/{seed.address_id}", json={"landmark": "Near VIT"}, headers=headers
    )
    data = response.json()["data"]
    assert data["landmark"] == "Near VIT"
    assert data["street"] == "456 Customer Lane"
    assert data["isDefault"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize("zip_code", ["63201", "6320145", "ABCDEF", "632014\n", "६३२०१४"])
async def test_zip_code_must_be_six_digits(api, seed, auth_for, zip_code):
    response = await api.post(
        "/api/addresses", json={**ADDRESS, "zipCode": zip_code}, headers=auth_for(seed.customer_id)
    )
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "zipCode"


@pytest.mark.asyncio
async def test_delete_only_default_address_succeeds(api, seed, auth_for):
    headers = auth_for(seed.customer_id)

    response = await api.delete(f"/api/addresses/{seed.address_id}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Address deleted successfully", "data": None}

    listing = await api.get("/api/addresses", headers=headers)
    assert listing.json()["data"] == []


@pytest.mark.asyncio
async def test_delete_default_with_others_is_refused(api, seed, auth_for):
    headers = auth_for(seed.customer_id)
    await api.post("/api/addresses", json=ADDRESS, headers=headers)

    response = await api.delete(f"/api/addresses/{seed.address_id}", headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == (
        "Cannot delete default address. Please set another address as default first."
    )


@pytest.mark.asyncio
async def test_delete_non_default_address(api, seed, auth_for):
    headers = auth_for(seed.customer_id)
    created = await api.post("/api/addresses", json=ADDRESS, headers=headers)
    new_id = created.json()["data"]["id"]

    response = await api.delete(f"/api/addresses/{new_id}", headers=headers)
    assert response.status_code == 200
    assert await defaults(api, headers) == [seed.address_id]


@pytest.mark.asyncio
async def test_other_users_addresses_are_not_found(api, seed, auth_for):
    headers = auth_for(seed.other_id)

    update = await api.put(f"/api/addresses/{seed.address_id}", json={"city": "Chennai"}, headers=headers)
    delete = await api.delete(f"/api/addresses/{seed.address_id}", headers=headers)

    assert update.status_code == 404
    assert delete.status_code == 404
    assert delete.json()["error"] == "Address not found"


@pytest.mark.asyncio
async def test_addresses_require_auth(api, seed):
    response = await api.get("/api/addresses")
    assert response.status_code == 401
