"""Shared test fixtures and configuration."""

import logging
import os
from unittest.mock import AsyncMock

import pytest

from igbo_api.adapters.cache_store import InMemoryCacheStore
from igbo_api.adapters.word_repository import FakeWordRepository
from igbo_api.domain.model import Dialect, Example, WordAttributes, WordRecord


# Test environment overriding every config value a developer's .env might set
TEST_ENV = {
    "DATABASE_PATH": "data/test_igbo_api.sqlite",
    "REDIS_URL": "",
    "CACHE_EXPIRATION_SECONDS": "3600",
    "CACHE_TIMEOUT_SECONDS": "0.5",
    "MAIN_KEY": "main-test-key",
    "DEFAULT_PAGE_LIMIT": "10",
    "MAX_PAGE_LIMIT": "25",
    "HOST": "127.0.0.1",
    "PORT": "18080",
    "LOG_LEVEL": "info",
    "JSON_LOGS": "false",
    "MASK_ERROR_DETAILS": "true",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset config env vars before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def sample_examples():
    return [
        Example(id="ex-bia-1", igbo="Bia ebe a.", english="Come here.", associated_words=["w-bia"]),
        Example(id="ex-ulo-1", igbo="Ulo m di nso.", english="My house is near.", associated_words=["w-ulo"]),
    ]


@pytest.fixture
def sample_words():
    """Small dictionary covering headwords, variations and English definitions."""
    return [
        WordRecord(
            id="w-bia",
            word="bia",
            word_class="V",
            definitions=["come", "arrive"],
            variations=["bịa"],
            pronunciation="https://audio.example.com/bia.mp3",
            attributes=WordAttributes(is_standard_igbo=True),
            dialects=[Dialect(word="bịa", dialects=["ONI"])],
            examples=["ex-bia-1"],
        ),
        WordRecord(
            id="w-biara",
            word="biara",
            word_class="V",
            definitions=["came"],
            attributes=WordAttributes(is_standard_igbo=False),
        ),
        WordRecord(
            id="w-ulo",
            word="ụlọ",
            word_class="NNC",
            definitions=["house", "home"],
            variations=["ulo"],
            nsibidi="𝑵",
            attributes=WordAttributes(is_standard_igbo=True),
            examples=["ex-ulo-1"],
        ),
        WordRecord(
            id="w-nri",
            word="nri",
            word_class="NNC",
            definitions=["food"],
            attributes=WordAttributes(is_standard_igbo=True),
        ),
    ]


@pytest.fixture
def fake_repository(sample_words, sample_examples):
    return FakeWordRepository(words=sample_words, examples=sample_examples)


@pytest.fixture
def memory_cache_store():
    return InMemoryCacheStore()


@pytest.fixture
def failing_cache_store():
    """Cache store whose every call raises."""
    store = AsyncMock()
    store.get.side_effect = ConnectionError("cache down")
    store.set.side_effect = ConnectionError("cache down")
    store.ping.side_effect = ConnectionError("cache down")
    return store


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo configure_logging() calls made by the code under test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("igbo_api.adapters").setLevel(logging.NOTSET)
