"""HTTP client the storefront and admin dashboard use to call the bakery API."""

import uuid
from typing import Any, Optional, Union

import httpx

from libs.common.logging import get_logger

logger = get_logger(__name__)

IdLike = Union[str, uuid.UUID]


class StorefrontAPIError(Exception):
    """A non-2xx API response, carrying the server's ``error`` message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class BakeryApiClient:
    """
    Async client for the bakery API.

    Responses are returned as decoded JSON (dicts and lists). Pass
    ``transport`` to run against an in-process app.
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        headers = {}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "BakeryApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Bakery API %s %s failed: %s", method, path, exc)
            raise StorefrontAPIError(f"Network error: {exc}") from exc

        if response.is_error:
            try:
                message = response.json().get("error")
            except ValueError:
                message = None
            raise StorefrontAPIError(
                message or f"Request failed with status {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def list_products(self, available_only: bool = False) -> list[dict]:
        params = {"available_only": "true"} if available_only else None
        data = await self._request("GET", "/api/products", params=params)
        return data.get("products") or []

    async def get_product(self, product_id: IdLike) -> dict:
        data = await self._request("GET", f"/api/products/{product_id}")
        return data["product"]

    async def create_product(self, **fields) -> dict:
        data = await self._request("POST", "/api/products", json=fields)
        return data["product"]

    async def update_product(self, product_id: IdLike, **fields) -> dict:
        data = await self._request("PATCH", f"/api/products/{product_id}", json=fields)
        return data["product"]

    async def delete_product(self, product_id: IdLike) -> None:
        await self._request("DELETE", f"/api/products/{product_id}")

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def create_order(self, payload: dict) -> dict:
        data = await self._request("POST", "/api/orders", json=payload)
        return data["order"]

    async def list_orders(
        self, user_id: Optional[IdLike] = None, admin: bool = False
    ) -> list[dict]:
        params = {"admin": "true"} if admin else {"user_id": str(user_id)}
        data = await self._request("GET", "/api/orders/list", params=params)
        return data.get("orders") or []

    async def get_order(self, order_id: IdLike) -> dict:
        data = await self._request("GET", f"/api/orders/{order_id}")
        return data["order"]

    async def update_order(
        self,
        order_id: IdLike,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
    ) -> dict:
        body = {}
        if status is not None:
            body["status"] = status
        if payment_status is not None:
            body["payment_status"] = payment_status
        data = await self._request("PATCH", f"/api/orders/{order_id}", json=body)
        return data["order"]

    async def create_payment_link(self, order_id: IdLike) -> dict:
        """Returns ``{"paymentUrl", "paymentLinkId"}``."""
        return await self._request(
            "POST", "/api/create-payment-link", json={"orderId": str(order_id)}
        )

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def get_profile(self) -> dict:
        data = await self._request("GET", "/api/profile")
        return data["profile"]

    async def update_profile(self, **fields) -> dict:
        data = await self._request("PUT", "/api/profile", json=fields)
        return data["profile"]
