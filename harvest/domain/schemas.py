# harvest/domain/schemas.py
from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from harvest.domain.enums import Category, Role

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Uniform response wrapper: { ok, data?, message? }."""

    ok: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    meta: Optional[dict[str, Any]] = None
    warning: Optional[str] = None


# ---------------------------------------------------------------- auth / users


class RegisterIn(BaseModel):
    """Schema for customer registration."""

    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6, description="At least 6 characters")
    phone: Optional[str] = Field(None, max_length=40)
    subscription_plan: Optional[str] = Field(None, description="BASIC, STANDARD or PREMIUM")


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    phone: Optional[str] = Field(None, max_length=40)
    preferences: Optional[dict[str, Any]] = None


class UserOut(BaseModel):
    """Schema for a user (response). Never carries the password hash."""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    preferences: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthOut(BaseModel):
    user: UserOut
    token: str


class RoleUpdateIn(BaseModel):
    role: Role


class AdminUserOut(UserOut):
    total_orders: int = 0


# ---------------------------------------------------------------- subscription


class SubscriptionOut(BaseModel):
    id: int
    user_id: int
    plan: str
    limit_in_kg: float
    used_kg: float
    remaining_kg: float
    renewal_date: datetime
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class UsageOut(BaseModel):
    plan: str
    limit_in_kg: float
    used_kg: float
    remaining_kg: float
    renewal_date: datetime
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class ChangePlanIn(BaseModel):
    plan: str


class ValidateWeightIn(BaseModel):
    weight_in_kg: float = Field(..., gt=0, description="Weight to check (must be > 0)")


class WeightCheckOut(BaseModel):
    can_add: bool
    weight_to_add: float
    current_used: float
    limit: float
    remaining: float
    would_exceed: bool
    excess_kg: float


# ---------------------------------------------------------------- producers / products


class ProducerIn(BaseModel):
    """Schema for registering or updating a producer profile."""

    business_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=200)
    contact_info: Optional[dict[str, Any]] = None


class ProducerUpdateIn(BaseModel):
    business_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=200)
    contact_info: Optional[dict[str, Any]] = None


class ProducerBrief(BaseModel):
    id: int
    business_name: str
    location: Optional[str] = None
    verified: bool = False

    model_config = ConfigDict(from_attributes=True)


class ProductBrief(BaseModel):
    id: int
    name: str
    category: str
    weight_in_kg: float
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProducerOut(ProducerBrief):
    user_id: int
    description: Optional[str] = None
    contact_info: Optional[dict[str, Any]] = None
    created_at: datetime
    products: List[ProductBrief] = Field(default_factory=list)


class VerifyProducerIn(BaseModel):
    verified: bool = True


class ProductIn(BaseModel):
    """Schema for creating a product."""

    producer_id: Optional[int] = Field(None, gt=0, description="Required for admins only")
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Category
    weight_in_kg: float = Field(..., gt=0, description="Unit weight (must be > 0)")
    stock: int = Field(0, ge=0)
    image: Optional[str] = None
    origin: Optional[str] = None
    season: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    nutritional_info: Optional[dict[str, Any]] = None


class ProductUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[Category] = None
    weight_in_kg: Optional[float] = Field(None, gt=0)
    available: Optional[bool] = None
    stock: Optional[int] = Field(None, ge=0)
    image: Optional[str] = None
    origin: Optional[str] = None
    season: Optional[str] = None
    tags: Optional[List[str]] = None
    nutritional_info: Optional[dict[str, Any]] = None


class ProductOut(ProductBrief):
    producer_id: int
    description: Optional[str] = None
    available: bool
    stock: int
    origin: Optional[str] = None
    season: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    nutritional_info: Optional[dict[str, Any]] = None
    producer: Optional[ProducerBrief] = None


# ---------------------------------------------------------------- cart


class CartItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: int = Field(..., ge=1, description="Quantity (at least 1)")


class CartItemUpdateIn(BaseModel):
    item_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=0, description="0 removes the item")


class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    weight_in_kg: float
    name: str
    image: Optional[str] = None
    producer_id: int
    producer_name: str

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    id: int
    user_id: int
    version: int
    items: List[CartItemOut]
    total_weight_in_kg: float
    limit_in_kg: float = 0.0
    used_kg: float = 0.0
    remaining_kg: float = 0.0

    model_config = ConfigDict(from_attributes=True)


class CartAddOut(BaseModel):
    item: CartItemOut
    cart: CartOut
    remaining_kg: float


# ---------------------------------------------------------------- orders


class OrderCreateIn(BaseModel):
    """Schema for turning the cart into an order."""

    delivery_address: str = Field(..., min_length=1, description="Delivery address is required")
    delivery_date: Optional[datetime] = None
    notes: Optional[str] = None


class StatusUpdateIn(BaseModel):
    # validated against the whitelist in the service, so any string gets through here
    status: str


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    weight_in_kg: float
    name: str
    image: Optional[str] = None
    producer_id: int
    producer_name: str

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    order_number: str
    user_id: int
    status: str
    total_weight_in_kg: float
    delivery_address: Optional[str] = None
    delivery_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class CustomerBrief(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProducerOrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    weight_in_kg: float


class ProducerOrderOut(BaseModel):
    id: int
    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    delivery_address: str
    status: str
    date: datetime
    items: List[ProducerOrderItemOut]
    total_weight_in_kg: float
    notes: Optional[str] = None


class EmployeeOrderOut(OrderOut):
    customer: CustomerBrief
    order_age_minutes: int
    is_urgent: bool
