"""
Food Delivery API Client

Async wrapper over the REST API built on ``httpx.AsyncClient``.

The bearer token is attached per request by ``BearerAuth``, which reads the
client's current token each time. Logging in or out never mutates shared
default headers.

Usage:
    async with FoodDeliveryClient("http://localhost:5000") as client:
        await client.login("john.doe@email.com", "password123")
        page = await client.list_restaurants(search="biryani")
"""

import logging
from typing import Any, Callable, Generator, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details


class BearerAuth(httpx.Auth):
    """Adds ``Authorization: Bearer <token>`` when a token is available."""

    def __init__(self, token_provider: Callable[[], Optional[str]]):
        self.token_provider = token_provider

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self.token_provider()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


class FoodDeliveryClient:

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self._http = httpx.AsyncClient(
            base_url=base_url,
            auth=BearerAuth(lambda: self.token),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "FoodDeliveryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._http.request(method, path, **kwargs)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            message = body.get("error") if isinstance(body, dict) else None
            logger.warning(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiError(
                response.status_code,
                message or response.reason_phrase,
                body.get("details") if isinstance(body, dict) else None,
            )

        return body.get("data") if isinstance(body, dict) else body

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    async def register(self, **fields: Any) -> dict[str, Any]:
        data = await self._request("POST", "/api/auth/register", json=fields)
        self.token = data["token"]
        return data["user"]

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        self.token = data["token"]
        return data["user"]

    def logout(self) -> None:
        self.token = None

    async def me(self) -> dict[str, Any]:
        return await self._request("GET", "/api/auth/me")

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    async def list_restaurants(self, **filters: Any) -> dict[str, Any]:
        """
        Search restaurants.

        Filters use the API's query names (``search``, ``cuisine``,
        ``minRating``, ``maxDeliveryFee``, ``sortBy``, ``sortOrder``, ``page``,
        ``limit``). ``None`` values are dropped.
        """
        params = {key: value for key, value in filters.items() if value is not None}
        return await self._request("GET", "/api/restaurants", params=params)

    async def search_suggestions(self, q: str) -> dict[str, Any]:
        return await self._request("GET", "/api/restaurants/search-suggestions", params={"q": q})

    async def get_restaurant(self, restaurant_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/api/restaurants/{restaurant_id}")

    async def get_menu(
        self,
        restaurant_id: int,
        category: Optional[str] = None,
        veg_only: bool = False,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"vegOnly": str(veg_only).lower()}
        if category:
            params["category"] = category
        return await self._request("GET", f"/api/restaurants/{restaurant_id}/menu", params=params)

    # -------------------------------------------------------------------------
    # Addresses
    # -------------------------------------------------------------------------

    async def list_addresses(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/addresses")

    async def create_address(self, **fields: Any) -> dict[str, Any]:
        return await self._request("POST", "/api/addresses", json=fields)

    async def update_address(self, address_id: int, **fields: Any) -> dict[str, Any]:
        return await self._request("PUT", f"/api/addresses/{address_id}", json=fields)

    async def delete_address(self, address_id: int) -> None:
        await self._request("DELETE", f"/api/addresses/{address_id}")

    # -------------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------------

    async def place_order(
        self,
        cart_items: list[dict[str, Any]],
        restaurant_id: int,
        delivery_address_id: int,
        delivery_instructions: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "cartItems": cart_items,
            "restaurantId": restaurant_id,
            "deliveryAddressId": delivery_address_id,
        }
        if delivery_instructions:
            payload["deliveryInstructions"] = delivery_instructions
        if payment_method:
            payload["paymentMethod"] = payment_method
        return await self._request("POST", "/api/orders", json=payload)

    async def list_orders(self, **params: Any) -> dict[str, Any]:
        params = {key: value for key, value in params.items() if value is not None}
        return await self._request("GET", "/api/orders", params=params)

    async def get_order(self, order_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/api/orders/{order_id}")

    async def update_order_status(
        self,
        order_id: int,
        status: str,
        preparation_time: Optional[int] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": status}
        if preparation_time is not None:
            payload["preparationTime"] = preparation_time
        return await self._request("PATCH", f"/api/orders/{order_id}/status", json=payload)
