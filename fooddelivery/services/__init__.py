"""
                        Services Module

Business logic behind the API routers. Each service takes an
``AsyncSession`` and raises ``AppError`` subclasses on failure.

Services:
    - users: registration and login
    - addresses: saved delivery addresses
    - catalog: restaurant search, detail and menu
    - orders: atomic order placement and status updates
"""

from fooddelivery.services import addresses, catalog, orders, users

__all__ = ["addresses", "catalog", "orders", "users"]
