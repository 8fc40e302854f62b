"""Checkout: turn the cart into an order and, optionally, a payment link."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from libs.common.logging import get_logger
from libs.storefront.api_client import BakeryApiClient, IdLike, StorefrontAPIError
from libs.storefront.cart import CartStore

logger = get_logger(__name__)


@dataclass
class CheckoutResult:
    order: dict
    payment_url: Optional[str] = None
    # Set when the order was placed but the payment link could not be created
    payment_error: Optional[str] = None


async def checkout(
    client: BakeryApiClient,
    cart: CartStore,
    user_id: IdLike,
    pickup_date: Union[date, datetime, str],
    delivery_method: str = "pickup",
    notes: Optional[str] = None,
    pay_online: bool = False,
) -> CheckoutResult:
    """
    Place an order for everything in ``cart``.

    The cart is cleared only once the order exists; a failed order leaves
    it intact for a retry. With ``pay_online`` a Stripe payment link is
    requested for the new order.

    Raises:
        StorefrontAPIError: empty cart, or the order was rejected
    """
    if cart.total_items() == 0:
        raise StorefrontAPIError("Cart is empty")

    if isinstance(pickup_date, (date, datetime)):
        pickup_date = pickup_date.isoformat()

    payload = {
        "user_id": str(user_id),
        "pickup_date": pickup_date,
        "delivery_method": delivery_method,
        "items": cart.order_items(),
    }
    if notes:
        payload["notes"] = notes

    order = await client.create_order(payload)
    cart.clear()
    logger.info("Placed order %s", order.get("order_number"))

    result = CheckoutResult(order=order)
    if pay_online:
        try:
            link = await client.create_payment_link(order["id"])
        except StorefrontAPIError as exc:
            logger.warning(
                "Order %s placed but payment link failed: %s",
                order.get("order_number"),
                exc.message,
            )
            result.payment_error = exc.message
        else:
            result.payment_url = link["paymentUrl"]
    return result
