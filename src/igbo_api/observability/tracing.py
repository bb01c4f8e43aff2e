"""OpenTelemetry tracing helpers and Starlette request middleware."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode
from starlette.routing import Match

from igbo_api.observability.context import (
    generate_span_id,
    get_request_context,
    set_request_context,
    update_span_id,
)
from igbo_api.observability.metrics import REQUEST_COUNT, REQUEST_LATENCY, track_latency


if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span, Tracer
    from starlette.requests import Request
    from starlette.responses import Response

logger = logging.getLogger(__name__)

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(
    service_name: str = "igbo-api",
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Install a tracer provider for ``service_name``."""
    attributes = {"service.name": service_name}
    if resource_attributes:
        attributes.update(resource_attributes)
    provider = TracerProvider(resource=Resource.create(attributes))
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = trace.get_tracer(__name__)
    logger.info("Tracing initialized for service: %s", service_name)
    return provider


def get_tracer() -> Tracer:
    if _tracer_holder["tracer"] is None:
        _tracer_holder["tracer"] = trace.get_tracer(__name__)
    return _tracer_holder["tracer"]  # type: ignore[return-value]


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Open a span as the current span and mirror its id into the log context."""
    tracer = get_tracer()
    with tracer.start_as_current_span(name, kind=kind) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)

        ctx = span.get_span_context()
        if ctx.is_valid:
            update_span_id(format(ctx.span_id, "016x"))

        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise


class TraceContextMiddleware:
    """ASGI middleware seeding the request context from ``X-Trace-Id``."""

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        trace_id = headers.get(b"x-trace-id", b"").decode() or None
        if not trace_id:
            trace_id = get_request_context()["trace_id"]

        set_request_context(trace_id, generate_span_id(), route=scope.get("path", ""))
        await self.app(scope, receive, send)


def _route_template(request: Request) -> str:
    """Return the matched route path (``/api/v1/words/{id}``) rather than the raw URL path."""
    router = getattr(request.app, "router", None)
    for route in getattr(router, "routes", ()):
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return request.url.path


async def trace_request(request: Request, call_next: Any) -> Response:
    """Wrap each request in a server span and record request metrics."""
    route = _route_template(request)
    attributes = {
        "http.method": request.method,
        "http.url": str(request.url),
        "http.route": route,
    }

    with track_latency(REQUEST_LATENCY, route=route), create_span(
        "http.request",
        kind=SpanKind.SERVER,
        attributes=attributes,
    ) as span:
        response: Response = await call_next(request)
        span.set_attribute("http.status_code", response.status_code)
        if response.status_code >= 500:
            span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
        REQUEST_COUNT.labels(route=route, status=str(response.status_code)).inc()
        return response
