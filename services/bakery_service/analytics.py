"""Admin dashboard and sales analytics over a list of orders.

Both functions are pure: the router loads the orders and passes ``now`` so
the day and week windows are deterministic under test.
"""

import uuid
from collections import Counter
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from libs.common.currency import to_money
from libs.common.datetime_utils import ensure_utc, start_of_day_utc, utc_now
from services.bakery_service.models import OrderStatus, PaymentStatus
from services.bakery_service.schemas import (
    DashboardStats,
    OrderWithItems,
    SalesAnalytics,
    TopProduct,
)

TOP_PRODUCTS_LIMIT = 5
UNKNOWN_PRODUCT = "Unknown Product"


def _margin(profit: Decimal, revenue: Decimal) -> float:
    if revenue <= 0:
        return 0.0
    return round(float(profit / revenue * 100), 2)


def _sum(values: Iterable[Decimal]) -> Decimal:
    return to_money(sum(values, Decimal("0")))


def dashboard_stats(
    orders: list[OrderWithItems], now: Optional[datetime] = None
) -> DashboardStats:
    """Headline numbers for the admin dashboard, across all payment states."""
    now = ensure_utc(now or utc_now())
    today = start_of_day_utc(now.date())
    week_start = start_of_day_utc((now - timedelta(days=7)).date())

    todays = [o for o in orders if ensure_utc(o.created_at) >= today]
    this_week = [o for o in orders if ensure_utc(o.created_at) >= week_start]
    statuses = Counter(o.status for o in orders)

    total_revenue = _sum(o.total for o in orders)
    total_profit = _sum(o.profit for o in orders)
    avg = total_revenue / len(orders) if orders else Decimal("0")

    return DashboardStats(
        total_orders=len(orders),
        total_revenue=total_revenue,
        total_profit=total_profit,
        orders_today=len(todays),
        revenue_today=_sum(o.total for o in todays),
        profit_today=_sum(o.profit for o in todays),
        completed_today=sum(1 for o in todays if o.status == OrderStatus.COMPLETED),
        orders_this_week=len(this_week),
        revenue_this_week=_sum(o.total for o in this_week),
        pending_orders=statuses[OrderStatus.PENDING],
        baking_orders=statuses[OrderStatus.BAKING],
        ready_orders=statuses[OrderStatus.READY],
        avg_order_value=to_money(avg),
        profit_margin=_margin(total_profit, total_revenue),
    )


def _top_products(paid: list[OrderWithItems]) -> list[TopProduct]:
    performance: dict[uuid.UUID, dict] = {}
    for order in paid:
        for item in order.order_items:
            # Items whose product was deleted have no id to group on
            if item.product_id is None:
                continue
            entry = performance.setdefault(
                item.product_id,
                {
                    "name": item.product.name if item.product else UNKNOWN_PRODUCT,
                    "quantity": 0,
                    "revenue": Decimal("0"),
                },
            )
            entry["quantity"] += item.quantity
            entry["revenue"] += item.price * item.quantity

    ranked = sorted(
        performance.items(), key=lambda pair: pair[1]["revenue"], reverse=True
    )
    return [
        TopProduct(
            product_id=product_id,
            name=entry["name"],
            quantity=entry["quantity"],
            revenue=to_money(entry["revenue"]),
        )
        for product_id, entry in ranked[:TOP_PRODUCTS_LIMIT]
    ]


def sales_analytics(
    orders: list[OrderWithItems], days: int = 30, now: Optional[datetime] = None
) -> SalesAnalytics:
    """
    Revenue, margin and product performance for the last ``days`` days.

    ``days == 0`` means all time. Revenue and cost only count paid orders;
    order counts include every order in the window.
    """
    now = ensure_utc(now or utc_now())
    if days > 0:
        cutoff = now - timedelta(days=days)
        orders = [o for o in orders if ensure_utc(o.created_at) >= cutoff]

    paid = [o for o in orders if o.payment_status == PaymentStatus.PAID]
    revenue = _sum(o.total for o in paid)
    cost = _sum(o.cost for o in paid)
    profit = revenue - cost
    statuses = Counter(o.status for o in orders)
    avg = revenue / len(paid) if paid else Decimal("0")

    return SalesAnalytics(
        days=days,
        total_revenue=revenue,
        total_cost=cost,
        total_profit=profit,
        profit_margin=_margin(profit, revenue),
        total_orders=len(orders),
        paid_orders=len(paid),
        pending_orders=statuses[OrderStatus.PENDING],
        completed_orders=statuses[OrderStatus.COMPLETED],
        average_order_value=to_money(avg),
        status_breakdown={status: statuses[status] for status in OrderStatus},
        top_products=_top_products(paid),
    )
