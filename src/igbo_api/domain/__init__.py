"""Domain layer - pure dictionary and search models with no infrastructure dependencies.

This layer contains:
- Entities: words and examples with identity
- Value Objects: search requests, filter predicates and query shapes
- Errors: the failures surfaced to API callers
"""

from igbo_api.domain.errors import (
    ExampleNotFoundError,
    IgboApiError,
    InvalidQueryParameterError,
    MissingSearchTermError,
    UpstreamQueryError,
    WordNotFoundError,
)
from igbo_api.domain.model import (
    Dialect,
    Example,
    ExamplePayload,
    WordAttributes,
    WordPayload,
    WordRecord,
)
from igbo_api.domain.search import (
    BuiltQuery,
    EnglishRegex,
    EqualsFilter,
    ExistsFilter,
    FilterPredicate,
    IgboStrictMatch,
    IgboTextSearch,
    LengthGreaterThanFilter,
    NotEqualsFilter,
    SearchOutcome,
    SearchRequest,
    WordFields,
)


__all__ = [
    "BuiltQuery",
    "Dialect",
    "EnglishRegex",
    "EqualsFilter",
    "Example",
    "ExampleNotFoundError",
    "ExamplePayload",
    "ExistsFilter",
    "FilterPredicate",
    "IgboApiError",
    "IgboStrictMatch",
    "IgboTextSearch",
    "InvalidQueryParameterError",
    "LengthGreaterThanFilter",
    "MissingSearchTermError",
    "NotEqualsFilter",
    "SearchOutcome",
    "SearchRequest",
    "UpstreamQueryError",
    "WordAttributes",
    "WordFields",
    "WordNotFoundError",
    "WordPayload",
    "WordRecord",
]
