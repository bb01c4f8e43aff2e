"""Health endpoint factory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse


if TYPE_CHECKING:
    from starlette.requests import Request

    from igbo_api.adapters.cache_store import AbstractCacheStore
    from igbo_api.adapters.word_repository import AbstractWordRepository


logger = logging.getLogger(__name__)


def build_health_endpoint(repository: AbstractWordRepository, cache_store: AbstractCacheStore):
    """Return a coroutine function reporting word store and cache status.

    The word store is required: if it fails the service is ``unhealthy``.
    The cache is best-effort: if it fails the service is only ``degraded``.
    """

    async def health_check(request: Request) -> JSONResponse:
        status = "healthy"

        try:
            store_health = await repository.ping()
        except Exception as exc:
            logger.error("Word store health check failed: %s", exc, exc_info=True)
            store_health = {"status": "unhealthy", "error": str(exc)}
            status = "unhealthy"

        try:
            cache_health = await cache_store.ping()
        except Exception as exc:
            logger.warning("Cache health check failed: %s", exc)
            cache_health = {"status": "unhealthy", "error": str(exc)}
            if status == "healthy":
                status = "degraded"

        return JSONResponse(
            {"status": status, "store": store_health, "cache": cache_health},
            status_code=503 if status == "unhealthy" else 200,
        )

    return health_check
