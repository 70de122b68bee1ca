"""
Order Load Simulation

Places many orders concurrently through the API client to exercise the
order transaction (unique order numbers, counters, analytics).
Run from project root after seeding: python scripts/simulate.py
"""

import argparse
import asyncio
import os
import random
import sys
import time
from typing import Any

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fooddelivery.cart import CartStore, MemoryCartStorage, MenuItemSnapshot, RestaurantInfo  # noqa: E402
from fooddelivery.cart.notifications import RecordingNotifier  # noqa: E402
from fooddelivery.client import ApiError, FoodDeliveryClient, checkout  # noqa: E402

API_BASE_URL = "http://localhost:5000"
TOTAL_ORDERS = 50

CUSTOMERS = [
    ("john.doe@email.com", "password123"),
    ("jane.smith@email.com", "password123"),
]
INSTRUCTIONS = ["", "Ring doorbell", "Leave at door", "Call on arrival", "Extra spicy"]


def build_cart(restaurant: dict[str, Any]) -> CartStore:
    """Fill a throwaway cart with 1-4 random dishes."""
    store = CartStore(MemoryCartStorage(), RecordingNotifier())
    info = RestaurantInfo(
        id=restaurant["id"],
        name=restaurant["name"],
        delivery_fee=restaurant["deliveryFee"],
        min_order=restaurant["minOrder"],
        image=restaurant.get("image"),
    )
    dishes = [item for items in restaurant["menu"].values() for item in items]

    for dish in random.sample(dishes, k=min(len(dishes), random.randint(1, 4))):
        snapshot = MenuItemSnapshot.model_validate(dish)
        for _ in range(random.randint(1, 3)):
            store.add_item(snapshot, restaurant["id"], info)

    store.set_delivery_info(None, random.choice(INSTRUCTIONS))
    return store


async def place_one(
    client: FoodDeliveryClient,
    restaurant: dict[str, Any],
    address_id: int,
    order_num: int,
) -> dict[str, Any]:
    store = build_cart(restaurant)
    start_time = time.time()

    try:
        order = await checkout(store, client, address_id)
        return {
            "order_num": order_num,
            "success": True,
            "order_number": order["orderNumber"],
            "total": order["totalAmount"],
            "time": round(time.time() - start_time, 3),
        }
    except ApiError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": f"{e.status_code} {e.message}"[:100],
            "time": round(time.time() - start_time, 3),
        }


async def run_simulation(base_url: str, num_orders: int) -> None:
    print("=" * 70)
    print(f"ORDER SIMULATION: {num_orders} concurrent orders against {base_url}")
    print("=" * 70)

    clients = []
    try:
        for email, password in CUSTOMERS:
            client = FoodDeliveryClient(base_url)
            await client.login(email, password)
            addresses = await client.list_addresses()
            if not addresses:
                print(f"   {email} has no saved address, skipping")
                await client.aclose()
                continue
            clients.append((client, addresses[0]["id"]))

        if not clients:
            print("No usable customers. Did you run scripts/seed.py?")
            return

        page = await clients[0][0].list_restaurants(limit=1)
        if not page["restaurants"]:
            print("No restaurants found. Did you run scripts/seed.py?")
            return
        restaurant = await clients[0][0].get_restaurant(page["restaurants"][0]["id"])
        print(f"Restaurant: {restaurant['name']} ({sum(len(v) for v in restaurant['menu'].values())} dishes)")

        start = time.time()
        tasks = []
        for i in range(num_orders):
            client, address_id = clients[i % len(clients)]
            tasks.append(place_one(client, restaurant, address_id, i + 1))
        results = await asyncio.gather(*tasks)
        elapsed = time.time() - start
    finally:
        for client, _ in clients:
            await client.aclose()

    succeeded = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    numbers = {r["order_number"] for r in succeeded}

    print("\n" + "-" * 70)
    print(f"Succeeded:       {len(succeeded)}/{num_orders}")
    print(f"Failed:          {len(failed)}")
    print(f"Unique numbers:  {len(numbers)}")
    print(f"Revenue:         {sum(r['total'] for r in succeeded):.2f}")
    print(f"Elapsed:         {elapsed:.2f}s")
    if results:
        print(f"Avg latency:     {sum(r['time'] for r in results) / len(results):.3f}s")
    for r in failed[:10]:
        print(f"   #{r['order_num']}: {r['error']}")
    print("=" * 70)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Order Load Simulation")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    args = parser.parse_args()

    asyncio.run(run_simulation(args.url, args.orders))
