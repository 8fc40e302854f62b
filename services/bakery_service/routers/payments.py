"""Stripe payment links and the Stripe webhook."""

import uuid

from fastapi import APIRouter, Depends, Request
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.errors import Forbidden, NotFound, PersistenceError
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.bakery_service.lifecycle import WEBHOOK_FAILED, WEBHOOK_PAID
from services.bakery_service.repositories import OrderRepository
from services.bakery_service.schemas import (
    PaymentLinkRequest,
    PaymentLinkResponse,
    WebhookAck,
)
from services.bakery_service.stripe_client import (
    CHECKOUT_COMPLETED,
    PAYMENT_FAILED,
    StripeClient,
    get_stripe_client,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["payments"])
logger = get_logger(__name__)


@router.post("/create-payment-link", response_model=PaymentLinkResponse)
async def create_payment_link(
    payload: PaymentLinkRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    stripe_client: StripeClient = Depends(get_stripe_client),
):
    """Create a Stripe payment link for one of the caller's orders."""
    repo = OrderRepository(db)
    order = await repo.get_with_items(payload.order_id)
    if order is None:
        raise NotFound("Order not found")
    if order.user_id != current_user.user_id:
        raise Forbidden("Forbidden")

    redirect_url = f"{get_settings().site_url}/orders/{order.id}?payment=success"
    link = await stripe_client.create_payment_link(order, redirect_url)
    await repo.attach_payment_link(order, link.id)

    logger.info("Payment link %s created for order %s", link.id, order.order_number)
    return PaymentLinkResponse(paymentUrl=link.url, paymentLinkId=link.id)


@router.post("/webhook/stripe", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
    stripe_client: StripeClient = Depends(get_stripe_client),
):
    """
    Stripe webhook endpoint (no auth; verified by Stripe-Signature).

    Payment outcomes are written directly and skip the admin transition
    rules: a completed checkout confirms the order.
    """
    raw = await request.body()
    event = stripe_client.parse_webhook(raw, request.headers.get("stripe-signature"))

    if event.type not in (CHECKOUT_COMPLETED, PAYMENT_FAILED) or not event.order_id:
        return WebhookAck()

    try:
        order_id = uuid.UUID(event.order_id)
    except ValueError:
        logger.warning("Webhook %s has malformed orderId %r", event.id, event.order_id)
        return WebhookAck()

    repo = OrderRepository(db)
    order = await repo.get(order_id)
    if order is None:
        logger.warning("Webhook %s references unknown order %s", event.id, order_id)
        return WebhookAck()

    try:
        if event.type == CHECKOUT_COMPLETED:
            status, payment_status = WEBHOOK_PAID
            await repo.update_status(order, status=status, payment_status=payment_status)
        else:
            await repo.update_status(order, payment_status=WEBHOOK_FAILED)
    except PersistenceError as exc:
        # Non-2xx makes Stripe retry the delivery
        raise PersistenceError("Webhook processing failed") from exc

    logger.info(
        "Webhook %s applied to order %s: %s/%s",
        event.type,
        order.order_number,
        order.status.value,
        order.payment_status.value,
    )
    return WebhookAck()
