"""
API routers, one per resource.
"""

from fooddelivery.routers import addresses, auth, orders, restaurants

__all__ = ["addresses", "auth", "orders", "restaurants"]
