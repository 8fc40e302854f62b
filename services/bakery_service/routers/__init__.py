"""Bakery service routers package."""

from services.bakery_service.routers.analytics import router as analytics_router
from services.bakery_service.routers.orders import router as orders_router
from services.bakery_service.routers.payments import router as payments_router
from services.bakery_service.routers.products import router as products_router
from services.bakery_service.routers.profile import router as profile_router
from services.bakery_service.routers.uploads import router as uploads_router

__all__ = [
    "analytics_router",
    "orders_router",
    "payments_router",
    "products_router",
    "profile_router",
    "uploads_router",
]
