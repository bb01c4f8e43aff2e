"""Best-effort cache of search results in front of the word store."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import quote

import orjson
from pydantic import ValidationError

from igbo_api.adapters.cache_store import AbstractCacheStore
from igbo_api.domain.model import WordRecord
from igbo_api.domain.search import SearchRequest
from igbo_api.observability.metrics import CACHE_LOOKUPS
from igbo_api.observability.tracing import create_span


logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "words"


def _flag(value: bool) -> str:
    return "1" if value else "0"


def build_cache_key(
    *,
    has_quotes: bool,
    search_word: str,
    skip: int,
    limit: int,
    dialects: bool,
    examples: bool,
) -> str:
    """Build the cache key for one page of a search.

    ``words:{q|u}:{search word}:{skip}:{limit}:{dialects}:{examples}``; the
    search word is percent-encoded so it never contains ``:``.
    """
    return ":".join(
        (
            CACHE_KEY_PREFIX,
            "q" if has_quotes else "u",
            quote(search_word, safe=""),
            str(skip),
            str(limit),
            _flag(dialects),
            _flag(examples),
        )
    )


def cache_key_for(request: SearchRequest) -> str:
    return build_cache_key(
        has_quotes=request.has_quotes,
        search_word=request.search_word,
        skip=request.skip,
        limit=request.limit,
        dialects=request.dialects,
        examples=request.examples,
    )


class CacheGateway:
    """Read and write word lists, treating every cache failure as a miss."""

    def __init__(self, store: AbstractCacheStore, *, expiration_seconds: int = 3600, timeout_seconds: float = 0.5):
        self.store = store
        self.expiration_seconds = expiration_seconds
        self.timeout_seconds = timeout_seconds

    async def get(self, key: str) -> list[WordRecord] | None:
        with create_span("cache.get", attributes={"cache.key": key}):
            try:
                raw = await asyncio.wait_for(self.store.get(key), timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                logger.warning("Cache read timed out after %.2fs for %s", self.timeout_seconds, key)
                CACHE_LOOKUPS.labels(operation="get", outcome="timeout").inc()
                return None
            except Exception as exc:
                logger.warning("Cache read failed for %s: %s", key, exc)
                CACHE_LOOKUPS.labels(operation="get", outcome="error").inc()
                return None

            if raw is None:
                CACHE_LOOKUPS.labels(operation="get", outcome="miss").inc()
                return None

            try:
                words = [WordRecord.model_validate(item) for item in orjson.loads(raw)]
            except (orjson.JSONDecodeError, TypeError, ValidationError) as exc:
                logger.warning("Discarding undecodable cache entry %s: %s", key, exc)
                CACHE_LOOKUPS.labels(operation="get", outcome="corrupt").inc()
                return None

            CACHE_LOOKUPS.labels(operation="get", outcome="hit").inc()
            return words

    async def set(self, key: str, words: list[WordRecord]) -> None:
        # None fields are kept so a hit decodes to the same shape as a fresh result
        payload = orjson.dumps([word.model_dump(mode="json", by_alias=True) for word in words]).decode("utf-8")
        with create_span("cache.set", attributes={"cache.key": key, "cache.size": len(words)}):
            try:
                await asyncio.wait_for(
                    self.store.set(key, payload, self.expiration_seconds),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError:
                logger.warning("Cache write timed out after %.2fs for %s", self.timeout_seconds, key)
                CACHE_LOOKUPS.labels(operation="set", outcome="timeout").inc()
                return
            except Exception as exc:
                logger.warning("Cache write failed for %s: %s", key, exc)
                CACHE_LOOKUPS.labels(operation="set", outcome="error").inc()
                return
            CACHE_LOOKUPS.labels(operation="set", outcome="stored").inc()
