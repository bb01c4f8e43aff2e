"""Prometheus metrics for the word lookup flow."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


REQUEST_LATENCY = Histogram(
    "igbo_api_request_latency_seconds",
    "HTTP request latency in seconds",
    ["route"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

REQUEST_COUNT = Counter(
    "igbo_api_requests_total",
    "Total HTTP requests",
    ["route", "status"],
)

ERROR_COUNT = Counter(
    "igbo_api_errors_total",
    "Errors mapped to HTTP responses",
    ["error_type"],
)

WORD_SEARCHES = Counter(
    "igbo_api_word_searches_total",
    "Word searches by the strategy that produced the result",
    ["strategy", "source"],
)

SEARCH_FALLBACKS = Counter(
    "igbo_api_search_fallbacks_total",
    "Igbo searches that fell back to English regex",
    ["from_strategy"],
)

CACHE_LOOKUPS = Counter(
    "igbo_api_cache_lookups_total",
    "Cache gateway operations by outcome",
    ["operation", "outcome"],
)

SEARCH_LATENCY = Histogram(
    "igbo_api_search_latency_seconds",
    "Store query latency",
    ["strategy"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Observe the wall time of the wrapped block."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
