"""FastAPI application for the Bakery Service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from libs.common.config import validate_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter
from services.bakery_service.routers import (
    analytics_router,
    orders_router,
    payments_router,
    products_router,
    profile_router,
    uploads_router,
)


def create_app() -> FastAPI:
    """Create and configure the Bakery Service FastAPI app."""
    # Fail fast on a bad environment rather than on the first request
    settings = validate_settings()

    app = FastAPI(
        title="Bakery Service",
        version="0.1.0",
        description="Bakery storefront and admin API - menu, orders, payments, uploads.",
    )

    # Rate limiting: per-route limits via decorators, default limit via middleware
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or [settings.site_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    # Storefront routes
    app.include_router(products_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(profile_router, prefix="/api")
    app.include_router(payments_router, prefix="/api")

    # Admin-only routes
    app.include_router(uploads_router, prefix="/api")
    app.include_router(analytics_router, prefix="/api")

    return app


app = create_app()
