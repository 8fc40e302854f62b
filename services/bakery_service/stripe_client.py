"""
Stripe client for payment links and webhook verification.

Provides:
- Creating a hosted payment link for an order
- Verifying webhook signatures and decoding the event payload
"""

import json
from dataclasses import dataclass
from typing import Optional

import stripe
from libs.common.config import get_settings
from libs.common.currency import dollars_to_cents
from libs.common.errors import PaymentProviderError, WebhookSignatureError
from libs.common.logging import get_logger
from services.bakery_service.models import Order
from starlette.concurrency import run_in_threadpool

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
PAYMENT_FAILED = "payment_intent.payment_failed"


@dataclass
class PaymentLink:
    """A hosted Stripe payment page for one order."""

    id: str
    url: str


@dataclass
class WebhookEvent:
    """Verified webhook event, reduced to what order handling needs."""

    id: Optional[str]
    type: str
    order_id: Optional[str]


class StripeClient:
    """Thin wrapper over the Stripe SDK; SDK calls run in the thread pool."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        currency: Optional[str] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET
        self.currency = currency or settings.STRIPE_CURRENCY

    def build_line_items(self, order: Order) -> list[dict]:
        """One Stripe line per order item, priced from the item's snapshot."""
        line_items = []
        for item in order.items:
            product = item.product
            product_data = {"name": product.name if product else "Unknown Product"}
            if product is not None and product.description:
                product_data["description"] = product.description
            line_items.append(
                {
                    "price_data": {
                        "currency": self.currency,
                        "product_data": product_data,
                        "unit_amount": dollars_to_cents(item.price),
                    },
                    "quantity": item.quantity,
                }
            )
        return line_items

    async def create_payment_link(self, order: Order, redirect_url: str) -> PaymentLink:
        """
        Create a payment link whose metadata carries the order id.

        Raises:
            PaymentProviderError: if Stripe rejects the request
        """
        try:
            link = await run_in_threadpool(
                stripe.PaymentLink.create,
                api_key=self.secret_key,
                line_items=self.build_line_items(order),
                metadata={
                    "orderId": str(order.id),
                    "orderNumber": order.order_number,
                },
                after_completion={
                    "type": "redirect",
                    "redirect": {"url": redirect_url},
                },
            )
        except stripe.StripeError as exc:
            logger.error(
                "Stripe payment link error for order %s: %s",
                order.order_number,
                exc,
            )
            raise PaymentProviderError("Failed to create payment link") from exc

        return PaymentLink(id=link["id"], url=link["url"])

    def parse_webhook(self, payload: bytes, signature: Optional[str]) -> WebhookEvent:
        """
        Verify the ``Stripe-Signature`` header and decode the event.

        Raises:
            WebhookSignatureError: missing or invalid signature
        """
        if not signature:
            raise WebhookSignatureError("No signature")

        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise WebhookSignatureError("Invalid signature") from exc

        try:
            stripe.WebhookSignature.verify_header(
                body, signature, self.webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE
            )
        except stripe.SignatureVerificationError as exc:
            logger.warning("Webhook signature verification failed: %s", exc)
            raise WebhookSignatureError("Invalid signature") from exc

        event = json.loads(body or "{}")
        data_object = (event.get("data") or {}).get("object") or {}
        metadata = data_object.get("metadata") or {}
        return WebhookEvent(
            id=event.get("id"),
            type=event.get("type", ""),
            order_id=metadata.get("orderId"),
        )


def get_stripe_client() -> StripeClient:
    """FastAPI dependency; overridden in tests."""
    return StripeClient()
