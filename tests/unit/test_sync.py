"""Unit tests for realtime-synchronized collections."""

import asyncio

import pytest
from libs.storefront.sync import RealtimeCollection, SupabaseChangeSource
from tests.stubs import InMemoryChangeSource


class GatedFetcher:
    """Fetcher that blocks until the test opens the gate."""

    def __init__(self):
        self.calls = 0
        self.gate = asyncio.Event()
        self.gate.set()
        self.rows = [{"id": 1}]

    async def __call__(self):
        self.calls += 1
        await self.gate.wait()
        return list(self.rows)


@pytest.mark.asyncio
async def test_start_fetches_once_then_subscribes():
    source = InMemoryChangeSource()
    fetcher = GatedFetcher()
    collection = RealtimeCollection(fetcher, source, "orders")

    await collection.start()

    assert fetcher.calls == 1
    assert collection.data == [{"id": 1}]
    assert collection.loading is False
    assert len(source.callbacks["orders"]) == 1
    await collection.stop()


@pytest.mark.asyncio
async def test_change_event_triggers_refetch():
    source = InMemoryChangeSource()
    fetcher = GatedFetcher()
    collection = await RealtimeCollection(fetcher, source, "products").start()

    fetcher.rows = [{"id": 1}, {"id": 2}]
    source.emit("products", "INSERT", {"id": 2})
    await collection.wait_idle()

    assert fetcher.calls == 2
    assert collection.data == [{"id": 1}, {"id": 2}]
    await collection.stop()


@pytest.mark.asyncio
async def test_burst_of_events_is_coalesced():
    source = InMemoryChangeSource()
    fetcher = GatedFetcher()
    collection = await RealtimeCollection(fetcher, source, "orders").start()

    fetcher.gate.clear()
    for _ in range(5):
        source.emit("orders")
    # Let the first re-fetch start and park on the gate
    await asyncio.sleep(0)
    for _ in range(5):
        source.emit("orders")
    fetcher.gate.set()
    await collection.wait_idle()

    # initial fetch + the in-flight one + exactly one follow-up
    assert fetcher.calls == 3
    await collection.stop()


@pytest.mark.asyncio
async def test_events_for_other_tables_ignored():
    source = InMemoryChangeSource()
    fetcher = GatedFetcher()
    collection = await RealtimeCollection(fetcher, source, "orders").start()

    source.emit("products")
    await collection.wait_idle()

    assert fetcher.calls == 1
    await collection.stop()


@pytest.mark.asyncio
async def test_fetch_error_leaves_data_empty():
    source = InMemoryChangeSource()

    async def failing():
        raise RuntimeError("Failed to fetch orders")

    collection = await RealtimeCollection(failing, source, "orders").start()

    assert collection.data == []
    assert collection.error == "Failed to fetch orders"
    assert collection.loading is False
    await collection.stop()


@pytest.mark.asyncio
async def test_stop_unsubscribes():
    source = InMemoryChangeSource()
    fetcher = GatedFetcher()
    async with RealtimeCollection(fetcher, source, "orders"):
        pass

    assert source.callbacks["orders"] == []
    assert source.unsubscribed == ["orders"]


@pytest.mark.asyncio
async def test_repeated_refetch_returns_same_records():
    source = InMemoryChangeSource()
    fetcher = GatedFetcher()
    collection = await RealtimeCollection(fetcher, source, "orders").start()

    first = list(collection.data)
    second = await collection.refetch()

    assert first == second
    await collection.stop()


class FakeChannel:
    def __init__(self, name):
        self.name = name
        self.bindings = []
        self.subscribed = False

    def on_postgres_changes(self, event, schema=None, table=None, callback=None):
        self.bindings.append(
            {"event": event, "schema": schema, "table": table, "callback": callback}
        )
        return self

    async def subscribe(self):
        self.subscribed = True
        return self


class FakeRealtimeClient:
    """Just the channel surface of supabase's AsyncClient."""

    def __init__(self):
        self.channels = []
        self.removed = []

    def channel(self, name):
        channel = FakeChannel(name)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel):
        self.removed.append(channel)


@pytest.mark.asyncio
async def test_supabase_source_subscribes_to_table_changes():
    client = FakeRealtimeClient()
    source = SupabaseChangeSource(client)
    fetcher = GatedFetcher()

    async with RealtimeCollection(fetcher, source, "orders") as collection:
        channel = client.channels[0]
        assert channel.name == "orders-changes"
        assert channel.subscribed is True
        binding = channel.bindings[0]
        assert (binding["event"], binding["schema"], binding["table"]) == (
            "*",
            "public",
            "orders",
        )

        binding["callback"]({"eventType": "DELETE", "table": "orders"})
        await collection.wait_idle()
        assert fetcher.calls == 2

    assert client.removed == [channel]
