"""
Pydantic Schemas for Request/Response Validation

Field names are snake_case in Python and camelCase on the wire. Every
response is wrapped in ``ApiResponse`` (``{success, message, data}``) or,
for failures, ``ErrorResponse`` (``{success, error, details}``).
"""

import re
from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from fooddelivery.models import (
    AddressType,
    OrderStatus,
    PaymentStatus,
    SpiceLevel,
    UserRole,
)

DataT = TypeVar("DataT")

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_RE = re.compile(r"\+?[0-9 \-\(\)]{10,15}")
PASSWORD_RE = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])[a-zA-Z0-9@$!%*?&]{8,}")
ZIP_RE = re.compile(r"[0-9]{6}")
TIME_RE = re.compile(r"([01][0-9]|2[0-3]):[0-5][0-9]")


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, accepts ORM objects."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# ENVELOPES
# =============================================================================

class ApiResponse(CamelModel, Generic[DataT]):
    """Successful response envelope."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


class ErrorResponse(CamelModel):
    """Standard error response."""
    success: bool = False
    error: str
    details: Optional[Any] = None


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    database: str
    version: str
    environment: str
    timestamp: datetime


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> "Pagination":
        total_pages = (total_count + limit - 1) // limit if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            has_next=page * limit < total_count,
            has_prev=page > 1,
        )


# =============================================================================
# AUTH
# =============================================================================

class RegisterRequest(CamelModel):
    email: str = Field(..., max_length=255, examples=["john.doe@email.com"])
    password: str = Field(..., examples=["Password123"])
    first_name: str = Field(..., max_length=100, examples=["John"])
    last_name: str = Field(..., max_length=100, examples=["Doe"])
    phone: str = Field(..., examples=["+91-9123456789"])
    role: UserRole = UserRole.CUSTOMER

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not EMAIL_RE.fullmatch(v):
            raise ValueError("Valid email is required")
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not PASSWORD_RE.fullmatch(v):
            raise ValueError(
                "Password must be at least 8 characters with uppercase, lowercase, and number"
            )
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if not PHONE_RE.fullmatch(v):
            raise ValueError("Valid phone number is required")
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: UserRole) -> UserRole:
        if v == UserRole.ADMIN:
            raise ValueError("Administrator accounts cannot be self-registered")
        return v


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserOut(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone: str
    role: UserRole
    avatar: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class AuthPayload(CamelModel):
    user: UserOut
    token: str


# =============================================================================
# ADDRESSES
# =============================================================================

def _check_zip(v: Optional[str]) -> Optional[str]:
    if v is not None and not ZIP_RE.fullmatch(v):
        raise ValueError("zipCode must be exactly 6 digits")
    return v


class AddressCreate(CamelModel):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., examples=["632014"])
    landmark: Optional[str] = Field(None, max_length=255)
    address_type: AddressType = AddressType.HOME
    is_default: bool = False
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("zip_code")
    @classmethod
    def validate_zip(cls, v: Optional[str]) -> Optional[str]:
        return _check_zip(v)


class AddressUpdate(CamelModel):
    street: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    zip_code: Optional[str] = None
    landmark: Optional[str] = Field(None, max_length=255)
    address_type: Optional[AddressType] = None
    is_default: Optional[bool] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("zip_code")
    @classmethod
    def validate_zip(cls, v: Optional[str]) -> Optional[str]:
        return _check_zip(v)


class AddressOut(CamelModel):
    id: int
    user_id: Optional[int] = None
    street: str
    city: str
    state: str
    zip_code: str
    landmark: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address_type: AddressType
    is_default: bool
    created_at: Optional[datetime] = None


# =============================================================================
# CATALOG
# =============================================================================

class MenuItemOut(CamelModel):
    id: int
    restaurant_id: int
    name: str
    description: Optional[str] = None
    price: float
    category: str
    image: Optional[str] = None
    is_veg: bool
    spice_level: SpiceLevel
    is_available: bool
    times_ordered: int = 0


class RestaurantSummary(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    cuisine_type: List[str] = []
    delivery_fee: float
    min_order: float
    rating: float
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    is_active: bool
    total_orders: int = 0
    address: Optional[AddressOut] = None
    review_count: int = 0
    order_count: int = 0


class RestaurantDetail(RestaurantSummary):
    phone: Optional[str] = None
    email: Optional[str] = None
    owner_id: Optional[int] = None
    menu_categories: List[str] = []
    menu: dict[str, List[MenuItemOut]] = {}


class RestaurantMenu(CamelModel):
    restaurant_id: int
    menu_categories: List[str] = []
    menu: dict[str, List[MenuItemOut]] = {}


class RestaurantPage(CamelModel):
    restaurants: List[RestaurantSummary]
    pagination: Pagination


class DishSuggestion(CamelModel):
    id: int
    name: str
    restaurant_id: int


class RestaurantSuggestion(CamelModel):
    id: int
    name: str


class SearchSuggestions(CamelModel):
    restaurants: List[RestaurantSuggestion] = []
    cuisines: List[str] = []
    dishes: List[DishSuggestion] = []


class RestaurantCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=150)
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    cuisine_type: List[str] = []
    delivery_fee: float = Field(0.0, ge=0)
    min_order: float = Field(0.0, ge=0)
    open_time: Optional[str] = Field(None, examples=["10:00"])
    close_time: Optional[str] = Field(None, examples=["23:00"])
    address: AddressCreate
    owner_id: Optional[int] = None

    @field_validator("open_time", "close_time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not TIME_RE.fullmatch(v):
            raise ValueError("Times must use HH:MM")
        return v


class RestaurantUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=150)
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    cuisine_type: Optional[List[str]] = None
    delivery_fee: Optional[float] = Field(None, ge=0)
    min_order: Optional[float] = Field(None, ge=0)
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("open_time", "close_time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not TIME_RE.fullmatch(v):
            raise ValueError("Times must use HH:MM")
        return v


# =============================================================================
# ORDERS
# =============================================================================

class CartItemIn(CamelModel):
    """
    One cart line as submitted by the client.

    ``price`` is accepted for compatibility but never used: the order
    transaction reads prices from the menu.
    """
    id: int
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: int = Field(..., ge=1)
    special_instructions: Optional[str] = None


class OrderCreate(CamelModel):
    cart_items: List[CartItemIn] = Field(..., min_length=1)
    restaurant_id: int
    delivery_address_id: int
    delivery_instructions: Optional[str] = Field(None, max_length=500)
    payment_method: Optional[str] = Field(None, max_length=50, examples=["CASH_ON_DELIVERY"])


class OrderStatusUpdate(CamelModel):
    status: OrderStatus
    preparation_time: Optional[int] = Field(None, ge=0, le=600)


class CustomerBrief(CamelModel):
    first_name: str
    last_name: str
    phone: str
    email: str


class RestaurantBrief(CamelModel):
    id: int
    name: str
    phone: Optional[str] = None
    image: Optional[str] = None
    address: Optional[AddressOut] = None


class MenuItemBrief(CamelModel):
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    is_veg: bool
    spice_level: SpiceLevel


class OrderItemOut(CamelModel):
    id: int
    menu_item_id: int
    quantity: int
    price: float
    notes: Optional[str] = None
    menu_item: Optional[MenuItemBrief] = None


class OrderOut(CamelModel):
    id: int
    order_number: str
    customer_id: int
    restaurant_id: int
    address_id: int
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: str
    subtotal: float
    tax: float
    delivery_fee: float
    discount: float
    total_amount: float
    instructions: Optional[str] = None
    preparation_time: Optional[int] = None
    estimated_delivery_time: Optional[datetime] = None
    actual_delivery_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    customer: Optional[CustomerBrief] = None
    restaurant: Optional[RestaurantBrief] = None
    delivery_address: Optional[AddressOut] = None
    items: List[OrderItemOut] = []


class OrderPage(CamelModel):
    orders: List[OrderOut]
    pagination: Pagination

