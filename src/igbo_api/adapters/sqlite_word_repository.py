"""SQLite-backed word repository.

- Words and examples live in plain tables; list fields are JSON text
- Igbo full-text search uses an FTS5 table over headwords and variations,
  ranked with bm25
- English regex search runs a Python ``REGEXP`` function over each
  definition through ``json_each``
- Blocking sqlite3 calls run in worker threads
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from functools import lru_cache
import json
import logging
from pathlib import Path
import re
import sqlite3
from typing import Any, TypeVar

from igbo_api.adapters.word_repository import AbstractWordRepository, new_document_id
from igbo_api.domain.errors import UpstreamQueryError
from igbo_api.domain.model import Dialect, Example, WordAttributes, WordRecord
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
from igbo_api.observability.tracing import create_span


logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS words (
    id TEXT PRIMARY KEY,
    word TEXT NOT NULL,
    word_class TEXT NOT NULL DEFAULT '',
    definitions TEXT NOT NULL DEFAULT '[]',
    variations TEXT NOT NULL DEFAULT '[]',
    stems TEXT NOT NULL DEFAULT '[]',
    dialects TEXT NOT NULL DEFAULT '[]',
    pronunciation TEXT,
    nsibidi TEXT NOT NULL DEFAULT '',
    attributes TEXT NOT NULL DEFAULT '{}',
    examples TEXT NOT NULL DEFAULT '[]',
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_words_word ON words(word);
CREATE TABLE IF NOT EXISTS examples (
    id TEXT PRIMARY KEY,
    igbo TEXT NOT NULL DEFAULT '',
    english TEXT NOT NULL DEFAULT '',
    associated_words TEXT NOT NULL DEFAULT '[]',
    pronunciation TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL
);
CREATE VIRTUAL TABLE IF NOT EXISTS words_fts USING fts5(
    word_id UNINDEXED,
    word,
    variations,
    tokenize = 'unicode61 remove_diacritics 2'
);
"""

_WORD_COLUMNS = (
    "id",
    "word",
    "word_class",
    "definitions",
    "variations",
    "stems",
    "dialects",
    "pronunciation",
    "nsibidi",
    "attributes",
    "examples",
)

# Filter paths the store knows how to evaluate, as SQL expressions
_FILTER_EXPRESSIONS = {
    "attributes.isStandardIgbo": "json_extract(words.attributes, '$.isStandardIgbo')",
    "nsibidi": "words.nsibidi",
    "pronunciation": "words.pronunciation",
}


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def _regexp(pattern: str, value: str | None) -> bool:
    if value is None:
        return False
    return _compile_pattern(pattern).search(value) is not None


def _fts_phrase(term: str) -> str:
    return '"' + term.replace('"', '""') + '"'


def _filter_clause(predicate: FilterPredicate) -> tuple[str, list[Any]]:
    expression = _FILTER_EXPRESSIONS.get(predicate.path)
    if expression is None:
        raise ValueError(f"Unsupported filter path: {predicate.path}")
    if isinstance(predicate, EqualsFilter):
        value = int(predicate.value) if isinstance(predicate.value, bool) else predicate.value
        return f"{expression} = ?", [value]
    if isinstance(predicate, NotEqualsFilter):
        value = int(predicate.value) if isinstance(predicate.value, bool) else predicate.value
        return f"({expression} IS NULL OR {expression} != ?)", [value]
    if isinstance(predicate, ExistsFilter):
        return f"{expression} IS NOT NULL", []
    if isinstance(predicate, LengthGreaterThanFilter):
        return f"length({expression}) > ?", [predicate.length]
    raise TypeError(f"Unsupported filter predicate: {predicate!r}")


def _build_match_sql(query: BuiltQuery) -> tuple[str, str, list[Any], str]:
    """Translate a query shape into (FROM, WHERE, params, ORDER BY) fragments."""
    conditions: list[str] = []
    params: list[Any] = []
    filters: Sequence[FilterPredicate] = ()

    if isinstance(query, IgboStrictMatch):
        from_clause = "words"
        conditions.append("words.word = ?")
        params.append(query.keyword)
        order_by = "words.rowid"
    elif isinstance(query, IgboTextSearch):
        columns = "word" if query.is_using_main_key else "{word variations}"
        if any(char.isalnum() for char in query.keyword):
            from_clause = "words_fts JOIN words ON words.id = words_fts.word_id"
            conditions.append("words_fts MATCH ?")
            params.append(f"{columns} : {_fts_phrase(query.keyword)}")
            order_by = "bm25(words_fts), words.rowid"
        else:
            # Nothing tokenizable; FTS5 cannot match it
            from_clause = "words"
            conditions.append("0")
            order_by = "words.rowid"
        filters = query.filters
    elif isinstance(query, EnglishRegex):
        from_clause = "words"
        conditions.append("EXISTS (SELECT 1 FROM json_each(words.definitions) AS d WHERE d.value REGEXP ?)")
        params.append(query.pattern)
        order_by = "words.rowid"
        filters = query.filters
    else:
        raise TypeError(f"Unsupported query shape: {query!r}")

    for predicate in filters:
        clause, clause_params = _filter_clause(predicate)
        conditions.append(clause)
        params.extend(clause_params)

    return from_clause, " AND ".join(conditions), params, order_by


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteWordRepository(AbstractWordRepository):
    """Persist words and examples in a single SQLite database."""

    def __init__(self, db_path: Path | str, *, busy_timeout_ms: int = 30000) -> None:
        self.db_path = Path(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")
        conn.create_function("regexp", 2, _regexp, deterministic=True)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize_schema(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.executescript(_SCHEMA)
        finally:
            conn.close()
        logger.info("Word store ready at %s", self.db_path)

    async def _run(self, operation: str, func: Callable[[sqlite3.Connection], T]) -> T:
        """Run ``func`` inside a transaction on a worker thread."""

        def _execute() -> T:
            conn = self._connect()
            try:
                with conn:
                    return func(conn)
            finally:
                conn.close()

        with create_span(f"word_store.{operation}", attributes={"db.system": "sqlite"}):
            try:
                return await asyncio.to_thread(_execute)
            except (sqlite3.Error, ValueError) as exc:
                logger.error("Word store %s failed: %s", operation, exc)
                raise UpstreamQueryError(f"Word store {operation} failed") from exc

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------
    @staticmethod
    def _row_to_word(row: sqlite3.Row) -> WordRecord:
        return WordRecord(
            id=row["id"],
            word=row["word"],
            word_class=row["word_class"],
            definitions=json.loads(row["definitions"]),
            variations=json.loads(row["variations"]),
            stems=json.loads(row["stems"]),
            dialects=[Dialect.model_validate(item) for item in json.loads(row["dialects"])],
            pronunciation=row["pronunciation"],
            nsibidi=row["nsibidi"],
            attributes=WordAttributes.model_validate(json.loads(row["attributes"])),
            examples=json.loads(row["examples"]),
        )

    @staticmethod
    def _row_to_example(row: sqlite3.Row) -> Example:
        return Example(
            id=row["id"],
            igbo=row["igbo"],
            english=row["english"],
            associated_words=json.loads(row["associated_words"]),
            pronunciation=row["pronunciation"],
        )

    @staticmethod
    def _word_params(word: WordRecord) -> tuple[Any, ...]:
        payload = word.to_json()
        return (
            word.id,
            word.word,
            word.word_class,
            json.dumps(word.definitions, ensure_ascii=False),
            json.dumps(word.variations, ensure_ascii=False),
            json.dumps(word.stems, ensure_ascii=False),
            json.dumps(payload.get("dialects", []), ensure_ascii=False),
            word.pronunciation,
            word.nsibidi,
            json.dumps(payload["attributes"]),
            json.dumps(word.example_ids()),
            _now(),
        )

    @staticmethod
    def _write_word(conn: sqlite3.Connection, word: WordRecord) -> None:
        conn.execute(
            f"INSERT OR REPLACE INTO words ({', '.join(_WORD_COLUMNS)}, updated_at) "
            f"VALUES ({', '.join('?' for _ in range(len(_WORD_COLUMNS) + 1))})",
            SqliteWordRepository._word_params(word),
        )
        conn.execute("DELETE FROM words_fts WHERE word_id = ?", (word.id,))
        conn.execute(
            "INSERT INTO words_fts (word_id, word, variations) VALUES (?, ?, ?)",
            (word.id, word.word, " ".join(word.variations)),
        )

    def _resolve(
        self,
        conn: sqlite3.Connection,
        words: list[WordRecord],
        *,
        dialects: bool,
        examples: bool,
    ) -> list[WordRecord]:
        example_lookup: dict[str, Example] = {}
        if examples:
            wanted = sorted({example_id for word in words for example_id in word.example_ids()})
            if wanted:
                placeholders = ", ".join("?" for _ in wanted)
                rows = conn.execute(f"SELECT * FROM examples WHERE id IN ({placeholders})", wanted).fetchall()
                example_lookup = {row["id"]: self._row_to_example(row) for row in rows}

        resolved: list[WordRecord] = []
        for word in words:
            update: dict[str, Any] = {}
            if not dialects:
                update["dialects"] = None
            if examples:
                update["examples"] = [
                    example_lookup[example_id] for example_id in word.example_ids() if example_id in example_lookup
                ]
            resolved.append(word.model_copy(update=update) if update else word)
        return resolved

    # ------------------------------------------------------------------
    # AbstractWordRepository
    # ------------------------------------------------------------------
    async def find_words(
        self,
        query: BuiltQuery,
        *,
        skip: int = 0,
        limit: int = 10,
        dialects: bool = False,
        examples: bool = False,
    ) -> list[WordRecord]:
        from_clause, where_clause, params, order_by = _build_match_sql(query)
        sql = (
            f"SELECT words.* FROM {from_clause} WHERE {where_clause} "
            f"ORDER BY {order_by} LIMIT ? OFFSET ?"
        )

        def _find(conn: sqlite3.Connection) -> list[WordRecord]:
            rows = conn.execute(sql, [*params, limit, skip]).fetchall()
            words = [self._row_to_word(row) for row in rows]
            return self._resolve(conn, words, dialects=dialects, examples=examples)

        words = await self._run("find_words", _find)
        logger.debug("Query %s matched %d words (skip=%d, limit=%d)", query.strategy, len(words), skip, limit)
        return words

    async def count_words(self, query: BuiltQuery) -> int:
        from_clause, where_clause, params = _build_match_sql(query)[:3]
        sql = f"SELECT COUNT(*) FROM {from_clause} WHERE {where_clause}"

        def _count(conn: sqlite3.Connection) -> int:
            row = conn.execute(sql, params).fetchone()
            return int(row[0]) if row else 0

        return await self._run("count_words", _count)

    async def get_word(self, word_id: str, *, dialects: bool = False, examples: bool = False) -> WordRecord | None:
        def _get(conn: sqlite3.Connection) -> WordRecord | None:
            row = conn.execute("SELECT * FROM words WHERE id = ?", (word_id,)).fetchone()
            if row is None:
                return None
            return self._resolve(conn, [self._row_to_word(row)], dialects=dialects, examples=examples)[0]

        return await self._run("get_word", _get)

    async def add_word(self, word: WordRecord) -> WordRecord:
        stored = word if word.id else word.model_copy(update={"id": new_document_id()})
        await self._run("add_word", lambda conn: self._write_word(conn, stored))
        return stored

    async def update_word(self, word: WordRecord) -> WordRecord:
        if not word.id:
            raise ValueError("Cannot update a word without an id")
        await self._run("update_word", lambda conn: self._write_word(conn, word))
        return word

    async def add_example(self, example: Example) -> Example:
        stored = example if example.id else example.model_copy(update={"id": new_document_id()})

        def _insert(conn: sqlite3.Connection) -> None:
            conn.execute(
                "INSERT OR REPLACE INTO examples (id, igbo, english, associated_words, pronunciation, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    stored.id,
                    stored.igbo,
                    stored.english,
                    json.dumps(stored.associated_words),
                    stored.pronunciation,
                    _now(),
                ),
            )

        await self._run("add_example", _insert)
        return stored

    async def get_example(self, example_id: str) -> Example | None:
        def _get(conn: sqlite3.Connection) -> Example | None:
            row = conn.execute("SELECT * FROM examples WHERE id = ?", (example_id,)).fetchone()
            return self._row_to_example(row) if row is not None else None

        return await self._run("get_example", _get)

    async def ping(self) -> dict[str, Any]:
        def _count(conn: sqlite3.Connection) -> int:
            return int(conn.execute("SELECT COUNT(*) FROM words").fetchone()[0])

        return {"status": "ok", "word_count": await self._run("ping", _count)}
