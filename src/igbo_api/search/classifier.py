"""Keyword classification and request parsing.

Turns raw query parameters into a typed :class:`SearchRequest`:
quoted keywords target English definitions, everything else targets Igbo
headwords.
"""

from __future__ import annotations

from collections.abc import Mapping
import re

from igbo_api.domain.errors import InvalidQueryParameterError, MissingSearchTermError
from igbo_api.domain.search import SearchRequest, WordFields


# Whole keyword wrapped in a matching pair of quotes
_QUOTED_PATTERN = re.compile(r"""^(["'])(.*)\1$""", re.DOTALL)
# English infinitive marker ("to eat" -> "eat")
_PREFIX_PATTERN = re.compile(r"^to\s+", re.IGNORECASE)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off", ""})


def remove_prefix(keyword: str) -> str:
    """Strip surrounding whitespace and a leading ``to `` marker."""
    return _PREFIX_PATTERN.sub("", keyword.strip()).strip()


def classify_keyword(raw_keyword: str | None) -> tuple[str, bool]:
    """Split a raw keyword into the term to search for and its quote flag.

    Args:
        raw_keyword: Keyword exactly as received from the caller

    Returns:
        Tuple of (search_word, has_quotes)

    Raises:
        MissingSearchTermError: If nothing is left after stripping quotes and prefix
    """
    keyword = (raw_keyword or "").strip()
    has_quotes = False

    match = _QUOTED_PATTERN.match(keyword)
    if match and len(keyword) >= 2:
        keyword = match.group(2)
        has_quotes = True

    search_word = remove_prefix(keyword)
    if not search_word:
        raise MissingSearchTermError()
    return search_word, has_quotes


def parse_bool(params: Mapping[str, str], name: str) -> bool:
    """Read a boolean flag; absent flags are False."""
    raw_value = params.get(name)
    if raw_value is None:
        return False
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidQueryParameterError(f"Invalid {name}")


def _parse_int(params: Mapping[str, str], name: str, default: int) -> int:
    raw_value = params.get(name)
    if raw_value is None or raw_value.strip() == "":
        return default
    try:
        return int(raw_value)
    except ValueError as exc:
        raise InvalidQueryParameterError(f"Invalid {name}") from exc


def parse_pagination(
    params: Mapping[str, str],
    *,
    default_limit: int,
    max_limit: int,
) -> tuple[int, int]:
    """Resolve ``page``/``limit`` parameters into (skip, limit).

    Limits above ``max_limit`` are capped rather than rejected.
    """
    page = _parse_int(params, "page", 0)
    limit = _parse_int(params, "limit", default_limit)
    if page < 0:
        raise InvalidQueryParameterError("Invalid page")
    if limit < 1:
        raise InvalidQueryParameterError("Invalid limit")
    limit = min(limit, max_limit)
    return page * limit, limit


def build_search_request(
    params: Mapping[str, str],
    *,
    is_using_main_key: bool = False,
    default_limit: int = 10,
    max_limit: int = 25,
) -> SearchRequest:
    """Classify a keyword and collect every flag that shapes the search."""
    raw_keyword = params.get("keyword") or ""
    search_word, has_quotes = classify_keyword(raw_keyword)
    skip, limit = parse_pagination(params, default_limit=default_limit, max_limit=max_limit)

    return SearchRequest(
        raw_keyword=raw_keyword,
        search_word=search_word,
        has_quotes=has_quotes,
        skip=skip,
        limit=limit,
        strict=parse_bool(params, "strict"),
        dialects=parse_bool(params, "dialects"),
        examples=parse_bool(params, "examples"),
        is_using_main_key=is_using_main_key,
        word_fields=WordFields(
            is_standard_igbo=parse_bool(params, "isStandardIgbo"),
            nsibidi=parse_bool(params, "nsibidi"),
            pronunciation=parse_bool(params, "pronunciation"),
        ),
    )
