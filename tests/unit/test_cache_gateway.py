"""Unit tests for the search result cache gateway."""

import asyncio
from unittest.mock import AsyncMock

import orjson
import pytest

from igbo_api.adapters.cache_store import InMemoryCacheStore
from igbo_api.domain.model import Example, WordRecord
from igbo_api.domain.search import SearchRequest
from igbo_api.service_layer.cache_gateway import CacheGateway, build_cache_key, cache_key_for


def _key(**overrides) -> str:
    values = {
        "has_quotes": False,
        "search_word": "bia",
        "skip": 0,
        "limit": 10,
        "dialects": False,
        "examples": False,
    }
    values.update(overrides)
    return build_cache_key(**values)


@pytest.mark.unit
class TestBuildCacheKey:
    def test_layout(self):
        assert _key() == "words:u:bia:0:10:0:0"
        assert _key(has_quotes=True, dialects=True) == "words:q:bia:0:10:1:0"

    @pytest.mark.parametrize(
        "change",
        [
            {"has_quotes": True},
            {"search_word": "biara"},
            {"skip": 10},
            {"limit": 25},
            {"dialects": True},
            {"examples": True},
        ],
    )
    def test_every_field_changes_the_key(self, change):
        assert _key(**change) != _key()

    def test_delimiters_in_the_keyword_cannot_collide(self):
        """A keyword containing ':' must not mimic other fields."""
        assert _key(search_word="a:0") != _key(search_word="a", skip=0)
        assert _key(search_word="a:b:c") == "words:u:a%3Ab%3Ac:0:10:0:0"

    def test_unicode_keyword_is_escaped(self):
        assert _key(search_word="ụlọ") == "words:u:%E1%BB%A5l%E1%BB%8D:0:10:0:0"

    def test_key_from_request(self):
        request = SearchRequest(raw_keyword='"come"', search_word="come", has_quotes=True, skip=5, limit=5)

        assert cache_key_for(request) == "words:q:come:5:5:0:0"


@pytest.mark.unit
class TestCacheGateway:
    @pytest.mark.asyncio
    async def test_round_trip_preserves_words(self, sample_words):
        gateway = CacheGateway(InMemoryCacheStore())
        words = [
            sample_words[0].model_copy(update={"examples": [Example(id="ex-bia-1", igbo="Bia.", english="Come.")]}),
            sample_words[1],
        ]

        await gateway.set("k", words)

        assert await gateway.get("k") == words

    @pytest.mark.asyncio
    async def test_round_trip_keeps_omitted_dialects_omitted(self, sample_words):
        gateway = CacheGateway(InMemoryCacheStore())
        word = sample_words[0].model_copy(update={"dialects": None})

        await gateway.set("k", [word])
        cached = await gateway.get("k")

        assert cached[0].dialects is None
        assert cached[0].to_json() == word.to_json()

    @pytest.mark.asyncio
    async def test_empty_list_is_a_hit(self):
        gateway = CacheGateway(InMemoryCacheStore())

        await gateway.set("k", [])

        assert await gateway.get("k") == []
        assert await gateway.get("other") is None

    @pytest.mark.asyncio
    async def test_set_applies_expiration(self):
        store = AsyncMock()
        gateway = CacheGateway(store, expiration_seconds=120)

        await gateway.set("k", [WordRecord(id="w1", word="bia")])

        key, payload, ttl = store.set.await_args.args
        assert (key, ttl) == ("k", 120)
        assert orjson.loads(payload)[0]["word"] == "bia"

    @pytest.mark.asyncio
    async def test_store_failures_are_misses(self, failing_cache_store, caplog):
        gateway = CacheGateway(failing_cache_store)

        assert await gateway.get("k") is None
        await gateway.set("k", [])

        assert "Cache read failed" in caplog.text
        assert "Cache write failed" in caplog.text

    @pytest.mark.asyncio
    async def test_slow_store_times_out(self):
        async def slow_get(key):
            await asyncio.sleep(1)
            return "[]"

        store = AsyncMock()
        store.get.side_effect = slow_get
        gateway = CacheGateway(store, timeout_seconds=0.01)

        assert await gateway.get("k") is None

    @pytest.mark.asyncio
    async def test_undecodable_payload_is_a_miss(self):
        store = InMemoryCacheStore()
        await store.set("k", "not json", ttl_seconds=60)
        await store.set("bad-shape", '[{"wordClass": "V"}]', ttl_seconds=60)
        gateway = CacheGateway(store)

        assert await gateway.get("k") is None
        assert await gateway.get("bad-shape") is None
