"""Relevance re-ranking of a page of words against the searched keyword.

Ordering, most relevant first:
- Exact case-insensitive match on the ranked field
- Smaller Levenshtein distance
- Earlier position of the keyword inside the field (absent sorts last)
- Records with no value at the field path sort last

``sorted`` is stable, so ties keep the order the store returned.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import re
from typing import Any, TypeVar


T = TypeVar("T")

_PATH_TOKEN = re.compile(r"([^.\[\]]+)|\[(\d+)\]")
_MISSING_KEY = (1, float("inf"), float("inf"))


def levenshtein_distance(s1: str, s2: str) -> int:
    """Number of single-character edits turning ``s1`` into ``s2``.

    >>> levenshtein_distance("kitten", "sitting")
    3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    previous = list(range(len(s1) + 1))
    for j, char2 in enumerate(s2, start=1):
        current = [j]
        for i, char1 in enumerate(s1, start=1):
            cost = 0 if char1 == char2 else 1
            current.append(min(previous[i] + 1, current[i - 1] + 1, previous[i - 1] + cost))
        previous = current
    return previous[-1]


def _split_path(path: str) -> list[str | int]:
    parts: list[str | int] = []
    for name, index in _PATH_TOKEN.findall(path):
        parts.append(int(index) if index else name)
    return parts


def resolve_path(doc: Any, path: str) -> Any:
    """Read a dotted/indexed path such as ``definitions[0]`` or ``attributes.isStandardIgbo``.

    Works on mappings, sequences and Pydantic models (by field name or alias).
    Returns None when any step is missing.
    """
    current = doc
    for part in _split_path(path):
        if current is None:
            return None
        if isinstance(part, int):
            if isinstance(current, Sequence) and not isinstance(current, str) and -len(current) <= part < len(current):
                current = current[part]
            else:
                return None
        elif isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = _get_model_field(current, part)
    return current


def _get_model_field(model: Any, name: str) -> Any:
    if hasattr(model, name):
        return getattr(model, name)
    fields = getattr(type(model), "model_fields", {})
    for field_name, info in fields.items():
        if info.alias == name:
            return getattr(model, field_name)
    return None


def relevance_key(keyword: str, value: Any) -> tuple[int, float, float]:
    """Sort key for a single field value; smaller is more relevant."""
    if not isinstance(value, str) or not value:
        return _MISSING_KEY
    needle = keyword.strip().casefold()
    haystack = value.strip().casefold()
    exact = 0 if haystack == needle else 1
    position = haystack.find(needle)
    return (
        exact,
        float(levenshtein_distance(needle, haystack)),
        float(position) if position >= 0 else float("inf"),
    )


def sort_docs_by(keyword: str, docs: Sequence[T], path: str) -> list[T]:
    """Return ``docs`` ordered by closeness of the field at ``path`` to ``keyword``."""
    return sorted(docs, key=lambda doc: relevance_key(keyword, resolve_path(doc, path)))
