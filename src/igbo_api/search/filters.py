"""Attribute filters applied on top of Igbo and English searches."""

from __future__ import annotations

from collections.abc import Mapping

from igbo_api.domain.search import (
    EqualsFilter,
    ExistsFilter,
    FilterPredicate,
    LengthGreaterThanFilter,
    NotEqualsFilter,
    WordFields,
)


STANDARD_IGBO_PATH = "attributes.isStandardIgbo"
NSIBIDI_PATH = "nsibidi"
PRONUNCIATION_PATH = "pronunciation"
MIN_PRONUNCIATION_LENGTH = 10

# Accepted spellings of each flag name
_FIELD_ALIASES = {
    "isStandardIgbo": "is_standard_igbo",
    "is_standard_igbo": "is_standard_igbo",
    "nsibidi": "nsibidi",
    "pronunciation": "pronunciation",
}


def generate_filtering_params(word_fields: WordFields | Mapping[str, object]) -> tuple[FilterPredicate, ...]:
    """Build the filter set for truthy word-field flags.

    Falsy and unknown flags produce no predicate at all.
    """
    if isinstance(word_fields, WordFields):
        flags = word_fields.model_dump()
    else:
        flags = {}
        for key, value in word_fields.items():
            field_name = _FIELD_ALIASES.get(key)
            if field_name is not None:
                flags[field_name] = bool(value)

    filters: list[FilterPredicate] = []
    if flags.get("is_standard_igbo"):
        filters.append(EqualsFilter(path=STANDARD_IGBO_PATH, value=True))
    if flags.get("nsibidi"):
        filters.append(NotEqualsFilter(path=NSIBIDI_PATH, value=""))
    if flags.get("pronunciation"):
        filters.append(ExistsFilter(path=PRONUNCIATION_PATH))
        filters.append(LengthGreaterThanFilter(path=PRONUNCIATION_PATH, length=MIN_PRONUNCIATION_LENGTH))
    return tuple(filters)
