import hashlib
import hmac
import json
import time
from collections import defaultdict
from typing import Optional

from libs.common.errors import PaymentProviderError, StorageError
from services.bakery_service.stripe_client import PaymentLink, StripeClient


class FakeStripeClient(StripeClient):
    """
    Records payment link requests instead of calling Stripe.

    Webhook verification is inherited, so tests sign payloads for real.
    """

    def __init__(self, fail: bool = False):
        super().__init__()
        self.fail = fail
        self.created: list[dict] = []

    async def create_payment_link(self, order, redirect_url: str) -> PaymentLink:
        if self.fail:
            raise PaymentProviderError("Failed to create payment link")
        link_id = f"plink_test_{len(self.created) + 1}"
        self.created.append(
            {
                "order_id": str(order.id),
                "line_items": self.build_line_items(order),
                "redirect_url": redirect_url,
            }
        )
        return PaymentLink(id=link_id, url=f"https://buy.stripe.com/test/{link_id}")


class FakeImageStorage:
    """In-memory stand-in for the Supabase products bucket."""

    base_url = "https://bakery-test.supabase.co/storage/v1/object/public/products"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []

    async def upload(self, file_name: str, data: bytes, content_type: str) -> str:
        if self.fail:
            raise StorageError("Failed to upload image")
        self.files[file_name] = data
        return f"{self.base_url}/{file_name}"

    async def delete(self, file_name: str) -> None:
        if self.fail:
            raise StorageError("Failed to delete image")
        self.files.pop(file_name, None)
        self.deleted.append(file_name)


class InMemoryChangeSource:
    """Change source whose events are emitted by the test."""

    def __init__(self):
        self.callbacks = defaultdict(list)
        self.unsubscribed = []

    async def subscribe(self, table: str, callback):
        self.callbacks[table].append(callback)
        return (table, callback)

    async def unsubscribe(self, subscription) -> None:
        table, callback = subscription
        self.callbacks[table].remove(callback)
        self.unsubscribed.append(table)

    def emit(self, table: str, event_type: str = "UPDATE", record: Optional[dict] = None):
        payload = {"eventType": event_type, "table": table, "new": record or {}}
        for callback in list(self.callbacks[table]):
            callback(payload)


def sign_stripe_payload(payload: str, secret: str, timestamp: Optional[int] = None) -> str:
    """Build a ``Stripe-Signature`` header the way Stripe does."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def stripe_event(event_type: str, order_id: str, event_id: str = "evt_test_1") -> str:
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "data": {"object": {"id": "cs_test_1", "metadata": {"orderId": order_id}}},
        }
    )
