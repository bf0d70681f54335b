"""
Pydantic Schemas for Request/Response Validation

JSON uses camelCase (firstName, customerPhone, ...); Python code uses
snake_case. Every response is wrapped in ApiResponse:

    {"success": true, "data": ..., "error": null, "message": null}
"""

import re
from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from reservation_api.core.security import PASSWORD_TOO_LONG, password_fits
from reservation_api.models import (
    MenuCategory,
    OrderStatus,
    ReservationStatus,
    TableLocation,
    UserRole,
)

T = TypeVar("T")

EMAIL_PATTERN = re.compile(r"^[\w\.\+-]+@[\w\.-]+\.\w+$")


class ApiModel(BaseModel):
    """Base for all schemas: camelCase aliases, ORM attribute loading."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# ENVELOPE
# =============================================================================

class ApiResponse(BaseModel, Generic[T]):
    """Standard response envelope."""
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime


# =============================================================================
# AUTH & USERS
# =============================================================================

class RegisterRequest(ApiModel):
    email: str = Field(..., max_length=255, examples=["sara@example.com"])
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20, examples=["09120000000"])

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email format")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        # bcrypt counts bytes, not characters
        if not password_fits(v):
            raise ValueError(PASSWORD_TOO_LONG)
        return v


class LoginRequest(ApiModel):
    email: str = Field(..., max_length=255)
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not password_fits(v):
            raise ValueError(PASSWORD_TOO_LONG)
        return v


class ProfileUpdate(ApiModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)


class RoleUpdate(ApiModel):
    role: UserRole


class UserOut(ApiModel):
    """Public user projection - never carries the password hash."""
    id: int
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None


# =============================================================================
# CATALOG
# =============================================================================

class TableCreate(ApiModel):
    name: str = Field(..., max_length=100, examples=["T1"])
    capacity: int = Field(..., examples=[4])
    location: TableLocation = TableLocation.HALL


class TableUpdate(ApiModel):
    name: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = None
    location: Optional[TableLocation] = None


class TableOut(ApiModel):
    id: int
    name: str
    capacity: int
    location: TableLocation
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MenuItemCreate(ApiModel):
    title: str = Field(..., max_length=200, examples=["Kebab"])
    price: int = Field(..., examples=[45000])
    category: MenuCategory
    image: Optional[str] = Field(None, max_length=500)
    available: bool = True


class MenuItemUpdate(ApiModel):
    title: Optional[str] = Field(None, max_length=200)
    price: Optional[int] = None
    category: Optional[MenuCategory] = None
    image: Optional[str] = Field(None, max_length=500)
    available: Optional[bool] = None


class MenuItemOut(ApiModel):
    id: int
    title: str
    price: int
    category: MenuCategory
    image: Optional[str] = None
    available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# RESERVATIONS
# =============================================================================

class ReservationCreate(ApiModel):
    table: int = Field(..., description="Table id")
    name: str = Field(..., max_length=100)
    phone: str = Field(..., max_length=20)
    guests: int = Field(..., examples=[2])
    time: datetime = Field(..., examples=["2026-05-01T19:30:00Z"])


class ReservationStatusUpdate(ApiModel):
    status: ReservationStatus


class ReservationOut(ApiModel):
    id: int
    table_id: Optional[int] = None
    table: Optional[TableOut] = None
    name: str
    phone: str
    guests: int
    time: datetime
    status: ReservationStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("time")
    def serialize_time(self, value: datetime) -> str:
        # Stored as naive UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat().replace("+00:00", "Z")


# =============================================================================
# ORDERS
# =============================================================================

class OrderLineIn(ApiModel):
    """A requested line item. Any client-sent price is ignored."""
    item: int = Field(..., description="Menu item id")
    qty: int = Field(..., ge=1)


class OrderCreate(ApiModel):
    items: List[OrderLineIn] = Field(default_factory=list)
    customer_name: str = Field(..., max_length=100)
    customer_phone: str = Field(..., max_length=20)
    reservation: Optional[int] = Field(None, description="Reservation id")
    notes: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdate(ApiModel):
    status: OrderStatus


class OrderItemOut(ApiModel):
    item_id: Optional[int] = None
    item: Optional[MenuItemOut] = None
    qty: int


class OrderOut(ApiModel):
    id: int
    reservation_id: Optional[int] = None
    reservation: Optional[ReservationOut] = None
    items: List[OrderItemOut]
    total: int
    status: OrderStatus
    customer_name: str
    customer_phone: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
