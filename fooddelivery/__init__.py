"""
                Food Delivery Ordering Service

Restaurant catalog, saved delivery addresses and transactional order
placement behind a FastAPI JSON API, plus the client-side cart and API
client used at checkout.
"""

__version__ = "1.0.0"
