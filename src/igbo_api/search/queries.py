"""Builders for the three search query shapes."""

from __future__ import annotations

from collections.abc import Sequence
import re

from igbo_api.domain.search import (
    BuiltQuery,
    EnglishRegex,
    FilterPredicate,
    IgboStrictMatch,
    IgboTextSearch,
    SearchRequest,
)
from igbo_api.search.filters import generate_filtering_params


def create_regexp(search_word: str) -> str:
    """Return a regex source matching ``search_word`` literally.

    Case-insensitivity is applied by the store when the pattern is compiled.
    """
    return re.escape(search_word.strip())


def search_igbo_text_search(
    *,
    keyword: str,
    pattern: str,
    is_using_main_key: bool = False,
    filters: Sequence[FilterPredicate] = (),
) -> IgboTextSearch:
    return IgboTextSearch(
        keyword=keyword,
        pattern=pattern,
        is_using_main_key=is_using_main_key,
        filters=tuple(filters),
    )


def strict_search_igbo_query(keyword: str) -> IgboStrictMatch:
    """Exact headword lookup.

    Attribute filters are not applied: a strict lookup returns the entry
    for that exact headword whatever its attributes.
    """
    return IgboStrictMatch(keyword=keyword)


def search_english_regex_query(*, pattern: str, filters: Sequence[FilterPredicate] = ()) -> EnglishRegex:
    return EnglishRegex(pattern=pattern, filters=tuple(filters))


def build_primary_query(request: SearchRequest) -> BuiltQuery:
    """Pick the first strategy for a classified request."""
    filters = generate_filtering_params(request.word_fields)
    pattern = create_regexp(request.search_word)
    if request.has_quotes:
        return search_english_regex_query(pattern=pattern, filters=filters)
    if request.strict:
        return strict_search_igbo_query(request.search_word)
    return search_igbo_text_search(
        keyword=request.search_word,
        pattern=pattern,
        is_using_main_key=request.is_using_main_key,
        filters=filters,
    )


def build_fallback_query(request: SearchRequest) -> EnglishRegex:
    """English regex query used when an Igbo search comes back empty."""
    return search_english_regex_query(
        pattern=create_regexp(request.search_word),
        filters=generate_filtering_params(request.word_fields),
    )
