"""Per-request correlation context shared by logs and spans.

Besides trace and span ids, a request that runs a word search carries the
search that answered it, so every later log line of that request says which
keyword and strategy it belongs to and whether the cache served it.
"""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4


request_context: ContextVar[dict | None] = ContextVar("request_context", default=None)


def generate_trace_id() -> str:
    """Generate a 32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-char hex span ID."""
    return uuid4().hex[:16]


def get_request_context() -> dict:
    """Return the current context, creating a fresh trace when none is set."""
    ctx = request_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        request_context.set(ctx)
    return ctx


def set_request_context(trace_id: str, span_id: str, **extra: object) -> None:
    request_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def update_span_id(span_id: str) -> None:
    """Swap the active span id, keeping the trace id and extras."""
    ctx = request_context.get() or {}
    request_context.set({**ctx, "span_id": span_id})


def bind_search(search_word: str, strategy: str, *, cache_hit: bool, fell_back: bool = False) -> None:
    """Record which search answered the current request."""
    ctx = get_request_context()
    request_context.set(
        {
            **ctx,
            "search": {
                "keyword": search_word,
                "strategy": strategy,
                "cache_hit": cache_hit,
                "fell_back": fell_back,
            },
        }
    )


def get_bound_search() -> dict | None:
    """Return the search bound to the current request, if any."""
    ctx = request_context.get()
    return ctx.get("search") if ctx else None
