"""Realtime-synchronized collections.

A ``RealtimeCollection`` fetches its records once, then subscribes to
database change notifications for one table. Any change triggers a full
re-fetch; event payloads are ignored. While a fetch is in flight, further
events only mark the collection dirty, and a single follow-up fetch runs
once the current one finishes.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, Protocol

from supabase import AsyncClient, acreate_client

from libs.common.logging import get_logger
from libs.storefront.api_client import BakeryApiClient, IdLike

logger = get_logger(__name__)

Fetcher = Callable[[], Awaitable[list]]
ChangeCallback = Callable[[dict], None]


class ChangeSource(Protocol):
    """Anything that can deliver row-change notifications for a table."""

    async def subscribe(self, table: str, callback: ChangeCallback) -> Any: ...

    async def unsubscribe(self, subscription: Any) -> None: ...


class SupabaseChangeSource:
    """Change notifications from a Supabase realtime ``postgres_changes`` channel."""

    def __init__(self, client: AsyncClient, schema: str = "public"):
        self.client = client
        self.schema = schema

    @classmethod
    async def connect(cls, url: str, key: str) -> "SupabaseChangeSource":
        return cls(await acreate_client(url, key))

    async def subscribe(self, table: str, callback: ChangeCallback) -> Any:
        channel = self.client.channel(f"{table}-changes")
        channel.on_postgres_changes(
            "*", schema=self.schema, table=table, callback=callback
        )
        await channel.subscribe()
        return channel

    async def unsubscribe(self, subscription: Any) -> None:
        await self.client.remove_channel(subscription)


class RealtimeCollection:
    def __init__(self, fetcher: Fetcher, change_source: ChangeSource, table: str):
        self.fetcher = fetcher
        self.change_source = change_source
        self.table = table

        self.data: list = []
        self.loading = True
        self.error: Optional[str] = None
        self.fetch_count = 0

        self._subscription: Any = None
        self._fetch_task: Optional[asyncio.Task] = None
        self._dirty = False

    async def start(self) -> "RealtimeCollection":
        await self.refetch()
        self._subscription = await self.change_source.subscribe(
            self.table, self._on_change
        )
        return self

    async def stop(self) -> None:
        if self._subscription is not None:
            await self.change_source.unsubscribe(self._subscription)
            self._subscription = None
        if self._fetch_task is not None and not self._fetch_task.done():
            self._fetch_task.cancel()
            try:
                await self._fetch_task
            except asyncio.CancelledError:
                pass
        self._fetch_task = None

    async def __aenter__(self) -> "RealtimeCollection":
        return await self.start()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def refetch(self) -> list:
        """Fetch now, or join the fetch already in flight plus its follow-up."""
        self._schedule()
        await self.wait_idle()
        return self.data

    async def wait_idle(self) -> None:
        """Wait until no fetch is running or queued."""
        while self._fetch_task is not None and not self._fetch_task.done():
            await asyncio.shield(self._fetch_task)

    def _on_change(self, payload: dict) -> None:
        logger.debug("%s change received; refreshing", self.table)
        self._schedule()

    def _schedule(self) -> None:
        if self._fetch_task is not None and not self._fetch_task.done():
            self._dirty = True
            return
        self._fetch_task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            self._dirty = False
            await self._fetch_once()
            if not self._dirty:
                return

    async def _fetch_once(self) -> None:
        self.fetch_count += 1
        try:
            self.data = list(await self.fetcher())
            self.error = None
        except Exception as exc:
            logger.error("Error fetching %s: %s", self.table, exc)
            self.data = []
            self.error = str(exc)
        finally:
            self.loading = False


def orders_collection(
    client: BakeryApiClient,
    change_source: ChangeSource,
    user_id: Optional[IdLike] = None,
    admin: bool = False,
) -> RealtimeCollection:
    """The caller's orders, or every order when ``admin`` is set."""

    async def fetch() -> list:
        return await client.list_orders(user_id=user_id, admin=admin)

    return RealtimeCollection(fetch, change_source, "orders")


def products_collection(
    client: BakeryApiClient,
    change_source: ChangeSource,
    available_only: bool = False,
) -> RealtimeCollection:
    async def fetch() -> list:
        return await client.list_products(available_only=available_only)

    return RealtimeCollection(fetch, change_source, "products")
