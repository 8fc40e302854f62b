"""Orders router: placement, history, and admin status changes."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from libs.auth.dependencies import ADMIN_ROLE, get_current_user, get_user_role, require_admin
from libs.auth.models import AuthUser
from libs.common.errors import Forbidden, NotFound
from libs.common.logging import get_logger
from libs.common.rate_limit import ORDER_LIMIT, limiter
from libs.db.session import get_async_db
from services.bakery_service.lifecycle import validate_transition
from services.bakery_service.repositories import OrderRepository, ProfileRepository
from services.bakery_service.schemas import (
    OrderCreate,
    OrderDetailEnvelope,
    OrderEnvelope,
    OrderListEnvelope,
    OrderUpdate,
    OrderWithItems,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/orders", tags=["orders"])
logger = get_logger(__name__)


@router.post("", response_model=OrderEnvelope, status_code=status.HTTP_201_CREATED)
@limiter.limit(ORDER_LIMIT)
async def create_order(
    request: Request,
    payload: OrderCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Place an order from the cart; customers may only order for themselves."""
    if payload.user_id != current_user.user_id:
        raise Forbidden("Forbidden")

    customer = await ProfileRepository(db).get(current_user.user_id)
    order = await OrderRepository(db).create(payload, customer=customer)
    logger.info(
        "Order %s placed by %s (total %s)",
        order.order_number,
        current_user.user_id,
        order.total,
    )
    return {"order": order}


@router.get("/list", response_model=OrderListEnvelope)
async def list_orders(
    user_id: Optional[uuid.UUID] = Query(None),
    admin: bool = Query(False),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Orders with items, products and customer profile, newest first.

    ``admin=true`` lists every order and requires the admin role; otherwise
    ``user_id`` must be the caller.
    """
    repo = OrderRepository(db)
    if admin:
        await require_admin(current_user, db)
        return {"orders": await repo.list_with_items()}

    if user_id is None or user_id != current_user.user_id:
        raise Forbidden("Forbidden")
    return {"orders": await repo.list_with_items(user_id=user_id)}


@router.get("/{order_id}", response_model=OrderDetailEnvelope)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Single order with items; visible to its owner and to admins."""
    order = await OrderRepository(db).get_with_items(order_id)
    if order is None:
        raise NotFound("Order not found")

    if order.user_id != current_user.user_id:
        if await get_user_role(db, current_user) != ADMIN_ROLE:
            raise Forbidden("Forbidden")

    summaries = await ProfileRepository(db).summaries([order.user_id])
    detail = OrderWithItems.model_validate(order).model_copy(
        update={"profile": summaries.get(order.user_id)}
    )
    return {"order": detail}


@router.patch("/{order_id}", response_model=OrderEnvelope)
async def update_order(
    order_id: uuid.UUID,
    payload: OrderUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Admin status / payment status change; 409 when the status move is illegal."""
    repo = OrderRepository(db)
    order = await repo.get(order_id)
    if order is None:
        raise NotFound("Order not found")

    if payload.status is not None:
        validate_transition(order.status, payload.status)

    previous = order.status
    order = await repo.update_status(
        order, status=payload.status, payment_status=payload.payment_status
    )
    logger.info(
        "Order %s updated by %s: %s -> %s, payment %s",
        order.order_number,
        current_user.user_id,
        previous.value,
        order.status.value,
        order.payment_status.value,
    )
    return {"order": order}
