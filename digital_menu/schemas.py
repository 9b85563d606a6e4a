"""
Pydantic Schemas for Request/Response Validation

One request model and one response model per operation. All money fields
are integers in the currency's minor unit.

Version: 1.0.0
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


# =============================================================================
# ENUMS
# =============================================================================

class VerifyOutcome(str, Enum):
    EXISTING_USER = "existing_user"
    PROFILE_COMPLETED = "profile_completed"
    NEEDS_PROFILE = "needs_profile"


# =============================================================================
# AUTH
# =============================================================================

class SendOtpRequest(BaseModel):
    email: EmailStr


class SendOtpResponse(BaseModel):
    success: bool
    message: str


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=12, examples=["123456"])
    name: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)

    model_config = ConfigDict(str_strip_whitespace=True)


class UserResponse(BaseModel):
    id: int
    email: EmailStr
    name: str
    country: str
    is_verified: bool

    model_config = ConfigDict(from_attributes=True)


class VerifyOtpResponse(BaseModel):
    success: bool
    existing_user: bool = False
    need_profile: bool = False
    message: str
    user: Optional[UserResponse] = None


# =============================================================================
# RESTAURANTS
# =============================================================================

class RestaurantCreate(BaseModel):
    owner_id: int
    name: str = Field(..., min_length=2, max_length=120, examples=["Spice Hub"])
    location: str = Field(..., min_length=2, max_length=255, examples=["Pune"])

    model_config = ConfigDict(str_strip_whitespace=True)


class RestaurantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=120)
    location: Optional[str] = Field(None, min_length=2, max_length=255)

    model_config = ConfigDict(str_strip_whitespace=True)


class RestaurantResponse(BaseModel):
    id: int
    name: str
    location: str
    slug: str
    owner_id: int
    menu_url: str
    created_at: Optional[datetime] = None


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryCreate(BaseModel):
    restaurant_id: int
    name: str = Field(..., min_length=2, max_length=80, examples=["Starters"])

    model_config = ConfigDict(str_strip_whitespace=True)


class CategoryUpdate(BaseModel):
    name: str = Field(..., min_length=2, max_length=80)

    model_config = ConfigDict(str_strip_whitespace=True)


class CategoryResponse(BaseModel):
    id: int
    name: str
    restaurant_id: int

    model_config = ConfigDict(from_attributes=True)


class CategoryRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# DISHES
# =============================================================================

class DishCreate(BaseModel):
    restaurant_id: int
    category_id: int
    name: str = Field(..., min_length=1, max_length=120, examples=["Paneer Tikka"])
    price: int = Field(..., ge=0, examples=[180])
    description: str = Field(default="", max_length=2000)
    spice_level: str = Field(default="", max_length=40)
    image_url: str = Field(default="", max_length=500)

    model_config = ConfigDict(str_strip_whitespace=True)


class DishUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    price: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=2000)
    spice_level: Optional[str] = Field(None, max_length=40)
    image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[int] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class DishResponse(BaseModel):
    id: int
    name: str
    description: str
    price: int
    spice_level: str
    image_url: str
    categories: List[CategoryRef] = []

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# MENU
# =============================================================================

class MenuDish(BaseModel):
    id: int
    name: str
    description: str
    price: int
    spice_level: str
    image_url: str

    model_config = ConfigDict(from_attributes=True)


class MenuGroup(BaseModel):
    category: str
    dishes: List[MenuDish]


class MenuRestaurant(BaseModel):
    id: int
    name: str
    location: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


class MenuResponse(BaseModel):
    restaurant: MenuRestaurant
    groups: List[MenuGroup]


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemCreate(BaseModel):
    """
    Single line of an order.

    Only the dish and quantity are taken from the client; name and price
    are read from the stored dish.
    """
    dish_id: int
    quantity: int = Field(..., ge=1, le=99, examples=[2])


class OrderCreate(BaseModel):
    restaurant_id: int
    customer_name: str = Field(..., min_length=1, max_length=100, examples=["Asha"])
    table_number: str = Field(..., min_length=1, max_length=20, examples=["7"])
    items: List[OrderItemCreate] = Field(..., min_length=1)
    user_id: Optional[int] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., examples=["preparing"])


class OrderItemResponse(BaseModel):
    dish_id: Optional[int]
    name: str
    price: int
    quantity: int
    line_total: int

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: int
    restaurant_id: int
    customer_name: str
    table_number: str
    user_id: Optional[int] = None
    items: List[OrderItemResponse]
    total: int
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v):
        return getattr(v, "value", v)


# =============================================================================
# CARTS
# =============================================================================

class CartCreate(BaseModel):
    restaurant_id: int
    customer_name: Optional[str] = Field(None, max_length=100)
    table_number: Optional[str] = Field(None, max_length=20)

    model_config = ConfigDict(str_strip_whitespace=True)


class CartUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, max_length=100)
    table_number: Optional[str] = Field(None, max_length=20)

    model_config = ConfigDict(str_strip_whitespace=True)


class CartItemSet(BaseModel):
    quantity: int = Field(..., ge=0, le=99)


class CartLineResponse(BaseModel):
    dish_id: int
    name: str
    price: int
    quantity: int
    line_total: int


class CartResponse(BaseModel):
    token: str
    restaurant_id: int
    customer_name: Optional[str] = None
    table_number: Optional[str] = None
    last_order_id: Optional[int] = None
    items: List[CartLineResponse]
    total: int


# =============================================================================
# UPLOADS
# =============================================================================

class UploadResponse(BaseModel):
    url: str


# =============================================================================
# GENERIC
# =============================================================================

class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    storage_service: str
    notification_service: str
    timestamp: datetime
