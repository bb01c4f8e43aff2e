"""Key-value stores backing the search result cache."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import time
from typing import Any

import redis.asyncio as redis_async


logger = logging.getLogger(__name__)


class AbstractCacheStore(ABC):
    """String key to string value store with per-key expiry."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    async def ping(self) -> dict[str, Any]:
        return {"status": "ok"}

    async def close(self) -> None:  # noqa: B027 - optional hook
        """Release connections held by the store."""


class InMemoryCacheStore(AbstractCacheStore):
    """Process-local store used when no Redis URL is configured.

    Expired entries are dropped on every write. When ``max_entries`` live
    entries are held, the oldest write is evicted to make room.
    """

    def __init__(self, clock=time.monotonic, max_entries: int = 10_000) -> None:
        self._clock = clock
        self.max_entries = max_entries
        self._entries: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        self._purge_expired(now)
        # Re-inserting moves the key to the end of the write order
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_entries:
            evicted = next(iter(self._entries))
            del self._entries[evicted]
            logger.debug("Evicted cache entry %s", evicted)
        self._entries[key] = (value, now + ttl_seconds)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    async def ping(self) -> dict[str, Any]:
        return {"status": "ok", "backend": "memory", "keys": len(self._entries), "max_entries": self.max_entries}


class RedisCacheStore(AbstractCacheStore):
    """Redis-backed store; values are kept with ``SET key value EX ttl``."""

    def __init__(self, url: str, *, socket_timeout: float = 1.0, client: Any | None = None) -> None:
        self.url = url
        self._client = client or redis_async.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._client.set(key, value, ex=ttl_seconds)

    async def ping(self) -> dict[str, Any]:
        await self._client.ping()
        return {"status": "ok", "backend": "redis"}

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Closed Redis cache connection")
