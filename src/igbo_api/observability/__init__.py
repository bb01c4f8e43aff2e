"""Observability: structured logging, tracing and Prometheus metrics."""

from igbo_api.observability.context import (
    bind_search,
    get_bound_search,
    get_request_context,
    request_context,
    set_request_context,
)
from igbo_api.observability.logging import JsonFormatter, configure_logging
from igbo_api.observability.metrics import (
    CACHE_LOOKUPS,
    ERROR_COUNT,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    SEARCH_FALLBACKS,
    SEARCH_LATENCY,
    WORD_SEARCHES,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from igbo_api.observability.tracing import (
    TraceContextMiddleware,
    create_span,
    get_tracer,
    init_tracing,
    trace_request,
)


__all__ = [
    "CACHE_LOOKUPS",
    "ERROR_COUNT",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "SEARCH_FALLBACKS",
    "SEARCH_LATENCY",
    "WORD_SEARCHES",
    "JsonFormatter",
    "TraceContextMiddleware",
    "bind_search",
    "configure_logging",
    "create_span",
    "get_bound_search",
    "get_metrics",
    "get_metrics_content_type",
    "get_request_context",
    "get_tracer",
    "init_tracing",
    "request_context",
    "set_request_context",
    "trace_request",
    "track_latency",
]
