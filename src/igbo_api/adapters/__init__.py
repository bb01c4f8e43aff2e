"""Storage adapters: word repositories and cache stores."""

from igbo_api.adapters.cache_store import AbstractCacheStore, InMemoryCacheStore, RedisCacheStore
from igbo_api.adapters.sqlite_word_repository import SqliteWordRepository
from igbo_api.adapters.word_repository import AbstractWordRepository, FakeWordRepository, new_document_id


__all__ = [
    "AbstractCacheStore",
    "AbstractWordRepository",
    "FakeWordRepository",
    "InMemoryCacheStore",
    "RedisCacheStore",
    "SqliteWordRepository",
    "new_document_id",
]
