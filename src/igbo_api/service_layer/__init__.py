"""Service layer: caching, search orchestration and use cases."""

from igbo_api.service_layer.cache_gateway import CacheGateway, build_cache_key, cache_key_for
from igbo_api.service_layer.services import count_words, create_word, get_example, get_word, search_words
from igbo_api.service_layer.word_search_service import WordSearchService, rank_path_for


__all__ = [
    "CacheGateway",
    "WordSearchService",
    "build_cache_key",
    "cache_key_for",
    "count_words",
    "create_word",
    "get_example",
    "get_word",
    "rank_path_for",
    "search_words",
]
