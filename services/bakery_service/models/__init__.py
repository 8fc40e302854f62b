"""Bakery Service models package."""

from services.bakery_service.models.catalog import (
    DEFAULT_LEAD_TIME_HOURS,
    CustomerFavorite,
    Product,
)
from services.bakery_service.models.commerce import MAX_ITEM_QUANTITY, Order, OrderItem
from services.bakery_service.models.enums import (
    DeliveryMethod,
    OrderStatus,
    PaymentStatus,
    UserRole,
)
from services.bakery_service.models.profile import Profile

__all__ = [
    "CustomerFavorite",
    "DEFAULT_LEAD_TIME_HOURS",
    "DeliveryMethod",
    "MAX_ITEM_QUANTITY",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "Product",
    "Profile",
    "UserRole",
]
