"""ASGI application for the Igbo dictionary API.

Routes:
    GET  /api/v1/words            search words by Igbo or English keyword
    GET  /api/v1/words/{id}       fetch one word
    POST /api/v1/words            create a word and its examples
    GET  /api/v1/examples/{id}    fetch one example
    GET  /health                  word store and cache status
    GET  /metrics                 Prometheus exposition

Domain errors are translated into JSON responses by the exception handlers
registered here and nowhere else.

Usage:
    python -m igbo_api.app
"""

from contextlib import asynccontextmanager
import json
import logging

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from igbo_api.adapters.cache_store import AbstractCacheStore, InMemoryCacheStore, RedisCacheStore
from igbo_api.adapters.sqlite_word_repository import SqliteWordRepository
from igbo_api.adapters.word_repository import AbstractWordRepository
from igbo_api.config import Settings
from igbo_api.domain.errors import (
    ExampleNotFoundError,
    IgboApiError,
    InvalidQueryParameterError,
    MissingSearchTermError,
    UpstreamQueryError,
    WordNotFoundError,
)
from igbo_api.domain.model import WordPayload
from igbo_api.observability.logging import configure_logging
from igbo_api.observability.metrics import ERROR_COUNT, get_metrics, get_metrics_content_type
from igbo_api.observability.tracing import TraceContextMiddleware, init_tracing, trace_request
from igbo_api.runtime.health import build_health_endpoint
from igbo_api.search.classifier import build_search_request, parse_bool
from igbo_api.service_layer.cache_gateway import CacheGateway
from igbo_api.service_layer.services import count_words, create_word, get_example, get_word, search_words
from igbo_api.service_layer.word_search_service import WordSearchService


logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
API_KEY_HEADER = "x-api-key"

_STATUS_BY_ERROR: dict[type[IgboApiError], int] = {
    MissingSearchTermError: 400,
    InvalidQueryParameterError: 400,
    WordNotFoundError: 404,
    ExampleNotFoundError: 404,
    UpstreamQueryError: 502,
}


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


def content_range(skip: int, returned: int, total: int) -> str:
    """Format the ``Content-Range`` header for one page of words."""
    if returned == 0:
        return f"words */{total}"
    return f"words {skip}-{skip + returned - 1}/{total}"


def build_cache_store(settings: Settings) -> AbstractCacheStore:
    if settings.is_cache_remote():
        logger.info("Caching search results in Redis")
        return RedisCacheStore(settings.redis_url, socket_timeout=max(settings.cache_timeout_seconds, 0.1))
    logger.info("REDIS_URL not set; caching search results in process memory")
    return InMemoryCacheStore(max_entries=settings.cache_max_entries)


def create_app(
    settings: Settings | None = None,
    *,
    repository: AbstractWordRepository | None = None,
    cache_store: AbstractCacheStore | None = None,
) -> Starlette:
    """Build the Starlette application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        repository: Word store; a SQLite store at ``settings.database_path`` when omitted
        cache_store: Cache backend; Redis or in-memory per ``settings`` when omitted
    """
    settings = settings or Settings()
    if repository is None:
        repository = SqliteWordRepository(settings.database_path)
    if cache_store is None:
        cache_store = build_cache_store(settings)

    cache = CacheGateway(
        cache_store,
        expiration_seconds=settings.cache_expiration_seconds,
        timeout_seconds=settings.cache_timeout_seconds,
    )
    search_service = WordSearchService(repository, cache)

    async def list_words(request: Request) -> JSONResponse:
        search_request = build_search_request(
            request.query_params,
            is_using_main_key=settings.is_main_key(request.headers.get(API_KEY_HEADER)),
            default_limit=settings.default_page_limit,
            max_limit=settings.max_page_limit,
        )
        outcome = await search_words(search_request, search_service)
        total = await count_words(outcome.query, repository)
        return JSONResponse(
            [word.to_json() for word in outcome.words],
            headers={"Content-Range": content_range(search_request.skip, len(outcome.words), total)},
        )

    async def show_word(request: Request) -> JSONResponse:
        word = await get_word(
            request.path_params["id"],
            repository,
            dialects=parse_bool(request.query_params, "dialects"),
            examples=parse_bool(request.query_params, "examples"),
        )
        return JSONResponse(word.to_json())

    async def post_word(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except json.JSONDecodeError:
            return _error_response("Request body must be valid JSON", 400)
        payload = WordPayload.model_validate(body)
        word = await create_word(payload, repository)
        return JSONResponse(word.to_json(), status_code=201)

    async def show_example(request: Request) -> JSONResponse:
        example = await get_example(request.path_params["id"], repository)
        return JSONResponse(example.model_dump(mode="json", by_alias=True, exclude_none=True))

    def metrics_endpoint(request: Request) -> Response:
        return Response(get_metrics(), media_type=get_metrics_content_type())

    async def handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
        status_code = _STATUS_BY_ERROR.get(type(exc), 500)
        ERROR_COUNT.labels(error_type=type(exc).__name__).inc()
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return _error_response(str(exc), status_code)

    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        ERROR_COUNT.labels(error_type="ValidationError").inc()
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}" for error in exc.errors()
        )
        return _error_response(f"Invalid request: {details}", 400)

    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        ERROR_COUNT.labels(error_type=type(exc).__name__).inc()
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        message = "An unexpected error occurred" if settings.mask_error_details else str(exc)
        return _error_response(message, 500)

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info("Igbo API ready (cache=%s)", "redis" if settings.is_cache_remote() else "memory")
        try:
            yield
        finally:
            await cache_store.close()

    routes = [
        Route("/health", endpoint=build_health_endpoint(repository, cache_store), methods=["GET"]),
        Route("/metrics", endpoint=metrics_endpoint, methods=["GET"]),
        Route(f"{API_PREFIX}/words", endpoint=list_words, methods=["GET"]),
        Route(f"{API_PREFIX}/words", endpoint=post_word, methods=["POST"]),
        Route(f"{API_PREFIX}/words/{{id}}", endpoint=show_word, methods=["GET"]),
        Route(f"{API_PREFIX}/examples/{{id}}", endpoint=show_example, methods=["GET"]),
    ]

    app = Starlette(
        debug=settings.log_level.lower() == "debug",
        routes=routes,
        lifespan=lifespan,
        exception_handlers={
            IgboApiError: handle_domain_error,
            ValidationError: handle_validation_error,
            Exception: handle_unexpected_error,
        },
    )
    app.add_middleware(BaseHTTPMiddleware, dispatch=trace_request)
    app.add_middleware(TraceContextMiddleware)
    app.state.settings = settings
    app.state.repository = repository
    app.state.search_service = search_service
    return app


def build_app_from_env() -> Starlette:
    """Factory for uvicorn: configure logging and tracing, then build the app.

    Each uvicorn worker process calls this once, so it must not rely on
    state set up by the parent process.
    """
    settings = Settings()
    configure_logging(settings.log_level, json_output=settings.json_logs)
    init_tracing(service_name=settings.service_name)
    return create_app(settings)


def main() -> None:
    """Run the API under uvicorn."""
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level, json_output=settings.json_logs)

    logger.info("Starting Igbo API on %s:%d (%d workers)", settings.host, settings.port, settings.uvicorn_workers)
    logger.info("Health check: http://%s:%d/health", settings.host, settings.port)

    uvicorn.run(
        "igbo_api.app:build_app_from_env",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
        workers=settings.uvicorn_workers,
    )


if __name__ == "__main__":
    main()
