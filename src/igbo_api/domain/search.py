"""Domain models for word search.

Value objects are immutable (frozen=True). The two closed variant families
here are the filter predicates and the built query shapes; adapters
translate them into store-specific queries.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from igbo_api.domain.model import WordRecord


class WordFields(BaseModel):
    """Optional attribute filters requested alongside a search."""

    model_config = ConfigDict(frozen=True)

    is_standard_igbo: bool = False
    nsibidi: bool = False
    pronunciation: bool = False


class SearchRequest(BaseModel):
    """Value object describing one classified search call."""

    model_config = ConfigDict(frozen=True)

    raw_keyword: str
    search_word: str = Field(min_length=1)
    has_quotes: bool = False
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=10, gt=0)
    strict: bool = False
    dialects: bool = False
    examples: bool = False
    is_using_main_key: bool = False
    word_fields: WordFields = Field(default_factory=WordFields)


# Filter predicates
class EqualsFilter(BaseModel):
    """Field at ``path`` must equal ``value``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["equals"] = "equals"
    path: str
    value: bool | str


class NotEqualsFilter(BaseModel):
    """Field at ``path`` must differ from ``value``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["not_equals"] = "not_equals"
    path: str
    value: bool | str


class ExistsFilter(BaseModel):
    """Field at ``path`` must be present."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["exists"] = "exists"
    path: str


class LengthGreaterThanFilter(BaseModel):
    """String at ``path`` must have more than ``length`` code points."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["length_greater_than"] = "length_greater_than"
    path: str
    length: int = Field(ge=0)


FilterPredicate = EqualsFilter | NotEqualsFilter | ExistsFilter | LengthGreaterThanFilter


# Query shapes
class IgboTextSearch(BaseModel):
    """Relevance-scored full-text match on the Igbo headword."""

    model_config = ConfigDict(frozen=True)

    strategy: Literal["igbo_text_search"] = "igbo_text_search"
    keyword: str
    pattern: str
    is_using_main_key: bool = False
    filters: tuple[FilterPredicate, ...] = ()


class IgboStrictMatch(BaseModel):
    """Exact headword equality; carries no filters."""

    model_config = ConfigDict(frozen=True)

    strategy: Literal["igbo_strict_match"] = "igbo_strict_match"
    keyword: str


class EnglishRegex(BaseModel):
    """Case-insensitive regex over the English definitions."""

    model_config = ConfigDict(frozen=True)

    strategy: Literal["english_regex"] = "english_regex"
    pattern: str
    filters: tuple[FilterPredicate, ...] = ()


BuiltQuery = IgboTextSearch | IgboStrictMatch | EnglishRegex


class SearchOutcome(BaseModel):
    """Terminal state of a search: ranked words plus the query that produced them."""

    model_config = ConfigDict(frozen=True)

    words: list[WordRecord]
    query: BuiltQuery
    cache_key: str
    cache_hit: bool = False
    fell_back: bool = False

    @property
    def strategy(self) -> str:
        return self.query.strategy
