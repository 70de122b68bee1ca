"""
HTTP client for the Food Delivery API.
"""

from fooddelivery.client.api import ApiError, BearerAuth, FoodDeliveryClient
from fooddelivery.client.checkout import EmptyCartError, checkout

__all__ = ["ApiError", "BearerAuth", "EmptyCartError", "FoodDeliveryClient", "checkout"]
