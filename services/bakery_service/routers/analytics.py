"""Admin dashboard and sales analytics."""

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.db.session import get_async_db
from services.bakery_service.analytics import dashboard_stats, sales_analytics
from services.bakery_service.repositories import OrderRepository
from services.bakery_service.schemas import DashboardStats, SalesAnalytics
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin-analytics"])


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    orders = await OrderRepository(db).list_with_items()
    return dashboard_stats(orders, now=utc_now())


@router.get("/analytics", response_model=SalesAnalytics)
async def get_sales_analytics(
    days: int = Query(30, ge=0, le=3650, description="Window in days; 0 for all time"),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    orders = await OrderRepository(db).list_with_items()
    return sales_analytics(orders, days=days, now=utc_now())
