"""Pydantic schemas for bakery service."""

import re
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

from libs.common.datetime_utils import ensure_utc, start_of_day_utc
from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    PlainSerializer,
    TypeAdapter,
    field_validator,
    model_validator,
)
from services.bakery_service.models import (
    MAX_ITEM_QUANTITY,
    DeliveryMethod,
    OrderStatus,
    PaymentStatus,
    UserRole,
)

# Money travels as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

_http_url = TypeAdapter(HttpUrl)


def _check_url(value: str) -> str:
    _http_url.validate_python(value)
    return value


ImageUrl = Annotated[str, AfterValidator(_check_url)]

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_PHONE = r"^\+?[\d\s\-()]+$"

# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: Money = Field(..., gt=0, le=1000)
    cost: Money = Field(..., gt=0, le=1000)
    category: str = Field(..., min_length=1, max_length=50)
    lead_time_hours: Optional[int] = Field(None, ge=0, le=168)
    image_url: Optional[ImageUrl] = None
    available: bool = True


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: Optional[Money] = Field(None, gt=0, le=1000)
    cost: Optional[Money] = Field(None, gt=0, le=1000)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    lead_time_hours: Optional[int] = Field(None, ge=0, le=168)
    image_url: Optional[ImageUrl] = None
    available: Optional[bool] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    price: Money
    cost: Money
    category: str
    available: bool
    image_url: Optional[str] = None
    lead_time_hours: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ProductEnvelope(BaseModel):
    product: ProductResponse


class ProductListEnvelope(BaseModel):
    products: list[ProductResponse]


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class ProductSnapshot(BaseModel):
    """The product as the customer saw it when adding to the cart."""

    id: uuid.UUID
    price: Money = Field(..., gt=0)
    cost: Money = Field(..., gt=0)
    name: Optional[str] = None


class OrderItemCreate(BaseModel):
    product: ProductSnapshot
    quantity: int = Field(..., ge=1, le=MAX_ITEM_QUANTITY)


class OrderCreate(BaseModel):
    """Place an order from the cart."""

    user_id: uuid.UUID
    pickup_date: datetime
    delivery_method: DeliveryMethod
    notes: Optional[str] = Field(None, max_length=500)
    items: list[OrderItemCreate] = Field(..., min_length=1)

    @field_validator("pickup_date", mode="before")
    @classmethod
    def parse_pickup_date(cls, value: Any) -> Any:
        # A bare date means midnight UTC on that day
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("Pickup date is required")
            if _DATE_ONLY.match(value):
                return start_of_day_utc(datetime.strptime(value, "%Y-%m-%d").date())
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                raise ValueError("Invalid pickup date format") from None
        return value

    @field_validator("pickup_date")
    @classmethod
    def pickup_date_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class OrderUpdate(BaseModel):
    """Admin status / payment status change."""

    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None

    @field_validator("payment_status", mode="before")
    @classmethod
    def legacy_completed(cls, value: Any) -> Any:
        # Older dashboard builds send "completed" for a settled payment
        if value == "completed":
            return PaymentStatus.PAID
        return value

    @model_validator(mode="after")
    def require_a_field(self) -> "OrderUpdate":
        if self.status is None and self.payment_status is None:
            raise ValueError("Provide status or payment_status")
        return self


class ProfileSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    order_number: str
    status: OrderStatus
    payment_status: PaymentStatus
    total: Money
    cost: Money
    profit: Money
    pickup_date: datetime
    delivery_method: DeliveryMethod
    notes: Optional[str] = None
    stripe_payment_link_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: Optional[uuid.UUID] = None
    quantity: int
    price: Money
    created_at: datetime
    product: Optional[ProductResponse] = None


class OrderWithItems(OrderResponse):
    order_items: list[OrderItemResponse] = Field(
        default_factory=list, validation_alias=AliasChoices("order_items", "items")
    )
    profile: Optional[ProfileSummary] = None


class OrderEnvelope(BaseModel):
    order: OrderResponse


class OrderDetailEnvelope(BaseModel):
    order: OrderWithItems


class OrderListEnvelope(BaseModel):
    orders: list[OrderWithItems]


# ============================================================================
# PROFILE SCHEMAS
# ============================================================================


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20, pattern=_PHONE)
    address: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=50)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=10)


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime


class ProfileEnvelope(BaseModel):
    profile: ProfileResponse


# ============================================================================
# PAYMENT / UPLOAD SCHEMAS
# ============================================================================


class PaymentLinkRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: uuid.UUID = Field(..., alias="orderId")


class PaymentLinkResponse(BaseModel):
    paymentUrl: str
    paymentLinkId: str


class WebhookAck(BaseModel):
    received: bool = True


class ImageUploadResponse(BaseModel):
    imageUrl: str
    fileName: str


class SuccessResponse(BaseModel):
    success: bool = True


# ============================================================================
# ANALYTICS SCHEMAS
# ============================================================================


class DashboardStats(BaseModel):
    total_orders: int
    total_revenue: Money
    total_profit: Money
    orders_today: int
    revenue_today: Money
    profit_today: Money
    completed_today: int
    orders_this_week: int
    revenue_this_week: Money
    pending_orders: int
    baking_orders: int
    ready_orders: int
    avg_order_value: Money
    profit_margin: float


class TopProduct(BaseModel):
    product_id: uuid.UUID
    name: str
    quantity: int
    revenue: Money


class SalesAnalytics(BaseModel):
    days: int
    total_revenue: Money
    total_cost: Money
    total_profit: Money
    profit_margin: float
    total_orders: int
    paid_orders: int
    pending_orders: int
    completed_orders: int
    average_order_value: Money
    status_breakdown: dict[OrderStatus, int]
    top_products: list[TopProduct]
