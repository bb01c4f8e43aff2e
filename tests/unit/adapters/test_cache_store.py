"""Unit tests for cache stores."""

from unittest.mock import AsyncMock

import pytest

from igbo_api.adapters.cache_store import InMemoryCacheStore, RedisCacheStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.unit
class TestInMemoryCacheStore:
    @pytest.mark.asyncio
    async def test_round_trip_until_expiry(self):
        clock = FakeClock()
        store = InMemoryCacheStore(clock=clock)

        await store.set("words:u:bia:0:10:0:0", "[]", ttl_seconds=60)
        assert await store.get("words:u:bia:0:10:0:0") == "[]"

        clock.now += 60
        assert await store.get("words:u:bia:0:10:0:0") is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_set_overwrites(self, memory_cache_store):
        await memory_cache_store.set("k", "[]", ttl_seconds=60)
        await memory_cache_store.set("k", '[{"word": "bia"}]', ttl_seconds=60)

        assert await memory_cache_store.get("k") == '[{"word": "bia"}]'
        assert (await memory_cache_store.ping())["keys"] == 1

    @pytest.mark.asyncio
    async def test_expired_entries_are_purged_on_write(self):
        clock = FakeClock()
        store = InMemoryCacheStore(clock=clock)
        for page in range(1000):
            await store.set(f"words:u:bia:{page}:10:0:0", "[]", ttl_seconds=1)

        clock.now += 10_000
        await store.set("words:u:nri:0:10:0:0", "[]", ttl_seconds=60)

        assert len(store) == 1
        assert await store.get("words:u:nri:0:10:0:0") == "[]"

    @pytest.mark.asyncio
    async def test_oldest_write_is_evicted_at_capacity(self):
        store = InMemoryCacheStore(clock=FakeClock(), max_entries=2)

        await store.set("a", "1", ttl_seconds=60)
        await store.set("b", "2", ttl_seconds=60)
        await store.set("a", "3", ttl_seconds=60)
        await store.set("c", "4", ttl_seconds=60)

        assert len(store) == 2
        assert await store.get("b") is None
        assert await store.get("a") == "3"
        assert await store.get("c") == "4"


@pytest.mark.unit
class TestRedisCacheStore:
    @pytest.fixture
    def client(self):
        client = AsyncMock()
        client.get.return_value = "[]"
        return client

    @pytest.mark.asyncio
    async def test_set_uses_expiry(self, client):
        store = RedisCacheStore("redis://localhost:6379/0", client=client)

        await store.set("k", "[]", ttl_seconds=3600)

        client.set.assert_awaited_once_with("k", "[]", ex=3600)

    @pytest.mark.asyncio
    async def test_get_and_ping(self, client):
        store = RedisCacheStore("redis://localhost:6379/0", client=client)

        assert await store.get("k") == "[]"
        assert await store.ping() == {"status": "ok", "backend": "redis"}
        client.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_releases_client(self, client):
        await RedisCacheStore("redis://localhost:6379/0", client=client).close()

        client.aclose.assert_awaited_once()

    def test_builds_client_from_url(self):
        store = RedisCacheStore("redis://localhost:6379/0")

        assert store._client.connection_pool.connection_kwargs["decode_responses"] is True
