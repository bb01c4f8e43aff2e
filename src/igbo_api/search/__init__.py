"""Query routing: keyword classification, filters, query shapes and ranking."""

from igbo_api.search.classifier import build_search_request, classify_keyword, remove_prefix
from igbo_api.search.filters import generate_filtering_params
from igbo_api.search.queries import (
    build_fallback_query,
    build_primary_query,
    create_regexp,
    search_english_regex_query,
    search_igbo_text_search,
    strict_search_igbo_query,
)
from igbo_api.search.ranking import levenshtein_distance, resolve_path, sort_docs_by


__all__ = [
    "build_fallback_query",
    "build_primary_query",
    "build_search_request",
    "classify_keyword",
    "create_regexp",
    "generate_filtering_params",
    "levenshtein_distance",
    "remove_prefix",
    "resolve_path",
    "search_english_regex_query",
    "search_igbo_text_search",
    "sort_docs_by",
    "strict_search_igbo_query",
]
