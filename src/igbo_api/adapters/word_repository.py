"""Word repository abstraction and in-memory implementation.

The repository is the document store collaborator: it executes built query
shapes, paginates, and resolves the example and dialect sub-documents of
each returned word.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
import logging
import re
from typing import Any
import uuid

from igbo_api.domain.model import Example, WordRecord
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
)
from igbo_api.search.ranking import resolve_path


logger = logging.getLogger(__name__)


def new_document_id() -> str:
    """Generate a 24-char hex document id."""
    return uuid.uuid4().hex[:24]


class AbstractWordRepository(ABC):
    """Abstract repository for the Word and Example aggregates."""

    @abstractmethod
    async def find_words(
        self,
        query: BuiltQuery,
        *,
        skip: int = 0,
        limit: int = 10,
        dialects: bool = False,
        examples: bool = False,
    ) -> list[WordRecord]:
        """Execute a built query and return one page of matching words.

        Args:
            query: Query shape produced by the query builder
            skip: Number of matches to skip
            limit: Maximum number of words to return
            dialects: Include embedded dialects in each word
            examples: Resolve example ids into Example records

        Returns:
            Matching words in store relevance order
        """
        raise NotImplementedError

    @abstractmethod
    async def count_words(self, query: BuiltQuery) -> int:
        """Count every word matching a built query."""
        raise NotImplementedError

    @abstractmethod
    async def get_word(self, word_id: str, *, dialects: bool = False, examples: bool = False) -> WordRecord | None:
        """Get a word by id, or None when it does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def add_word(self, word: WordRecord) -> WordRecord:
        """Persist a new word, assigning an id when it has none."""
        raise NotImplementedError

    @abstractmethod
    async def update_word(self, word: WordRecord) -> WordRecord:
        """Overwrite a stored word."""
        raise NotImplementedError

    @abstractmethod
    async def add_example(self, example: Example) -> Example:
        """Persist a new example, assigning an id when it has none."""
        raise NotImplementedError

    @abstractmethod
    async def get_example(self, example_id: str) -> Example | None:
        """Get an example by id, or None when it does not exist."""
        raise NotImplementedError

    async def ping(self) -> dict[str, Any]:
        """Optional hook returning store health details."""

        return {"status": "ok"}


def matches_filter(doc: Mapping[str, Any], predicate: FilterPredicate) -> bool:
    """Evaluate one filter predicate against a word's JSON document."""
    value = resolve_path(doc, predicate.path)
    if isinstance(predicate, EqualsFilter):
        return value == predicate.value
    if isinstance(predicate, NotEqualsFilter):
        return value != predicate.value
    if isinstance(predicate, ExistsFilter):
        return value is not None
    if isinstance(predicate, LengthGreaterThanFilter):
        return isinstance(value, str) and len(value) > predicate.length
    raise TypeError(f"Unsupported filter predicate: {predicate!r}")


def matches_filters(doc: Mapping[str, Any], filters: Iterable[FilterPredicate]) -> bool:
    return all(matches_filter(doc, predicate) for predicate in filters)


class FakeWordRepository(AbstractWordRepository):
    """In-memory repository for testing and local runs.

    Full-text search is approximated with a case-insensitive regex over the
    headword (and variations unless the main key is in use); exact headword
    matches score highest.
    """

    def __init__(self, words: Iterable[WordRecord] = (), examples: Iterable[Example] = ()):
        self._words: dict[str, WordRecord] = {}
        self._examples: dict[str, Example] = {}
        self.queries: list[BuiltQuery] = []
        for example in examples:
            stored = example if example.id else example.model_copy(update={"id": new_document_id()})
            self._examples[stored.id] = stored
        for word in words:
            stored = word if word.id else word.model_copy(update={"id": new_document_id()})
            self._words[stored.id] = stored

    def clear(self) -> None:
        self._words.clear()
        self._examples.clear()
        self.queries.clear()

    def _match(self, query: BuiltQuery) -> list[WordRecord]:
        if isinstance(query, IgboStrictMatch):
            return [word for word in self._words.values() if word.word == query.keyword]

        if isinstance(query, EnglishRegex):
            regex = re.compile(query.pattern, re.IGNORECASE)
            return [
                word
                for word in self._words.values()
                if any(regex.search(definition) for definition in word.definitions)
                and matches_filters(word.to_json(), query.filters)
            ]

        if isinstance(query, IgboTextSearch):
            regex = re.compile(query.pattern, re.IGNORECASE)
            scored: list[tuple[int, WordRecord]] = []
            for word in self._words.values():
                fields = [word.word] if query.is_using_main_key else [word.word, *word.variations]
                if not any(regex.search(value) for value in fields):
                    continue
                if not matches_filters(word.to_json(), query.filters):
                    continue
                score = 2 if word.word.casefold() == query.keyword.casefold() else 1
                scored.append((score, word))
            scored.sort(key=lambda item: -item[0])
            return [word for _, word in scored]

        raise TypeError(f"Unsupported query shape: {query!r}")

    def _project(self, word: WordRecord, *, dialects: bool, examples: bool) -> WordRecord:
        update: dict[str, Any] = {}
        if not dialects:
            update["dialects"] = None
        if examples:
            update["examples"] = [
                self._examples[example_id] for example_id in word.example_ids() if example_id in self._examples
            ]
        else:
            update["examples"] = word.example_ids()
        return word.model_copy(update=update)

    async def find_words(
        self,
        query: BuiltQuery,
        *,
        skip: int = 0,
        limit: int = 10,
        dialects: bool = False,
        examples: bool = False,
    ) -> list[WordRecord]:
        self.queries.append(query)
        matched = self._match(query)
        page = matched[skip : skip + limit]
        return [self._project(word, dialects=dialects, examples=examples) for word in page]

    async def count_words(self, query: BuiltQuery) -> int:
        return len(self._match(query))

    async def get_word(self, word_id: str, *, dialects: bool = False, examples: bool = False) -> WordRecord | None:
        word = self._words.get(word_id)
        if word is None:
            return None
        return self._project(word, dialects=dialects, examples=examples)

    async def add_word(self, word: WordRecord) -> WordRecord:
        stored = word if word.id else word.model_copy(update={"id": new_document_id()})
        self._words[stored.id] = stored
        return stored

    async def update_word(self, word: WordRecord) -> WordRecord:
        if not word.id:
            raise ValueError("Cannot update a word without an id")
        self._words[word.id] = word
        return word

    async def add_example(self, example: Example) -> Example:
        stored = example if example.id else example.model_copy(update={"id": new_document_id()})
        self._examples[stored.id] = stored
        return stored

    async def get_example(self, example_id: str) -> Example | None:
        return self._examples.get(example_id)

    async def ping(self) -> dict[str, Any]:
        return {"status": "ok", "word_count": len(self._words)}
