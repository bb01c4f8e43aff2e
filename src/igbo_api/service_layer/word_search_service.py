"""Word search orchestration.

Runs one search through the cache, the primary strategy and, when an Igbo
search comes back empty, the English regex fallback:

    CacheLookup -> hit: Done
                -> miss: ExecutePrimary -> CacheStorePrimary
                        -> non-empty: Done
                        -> empty: ExecuteFallback -> CacheStoreFallback -> Done

The fallback result is stored under the primary key, replacing the empty
entry, so a repeated request is answered from the cache.
"""

import logging

from igbo_api.adapters.word_repository import AbstractWordRepository
from igbo_api.domain.model import WordRecord
from igbo_api.domain.search import BuiltQuery, EnglishRegex, SearchOutcome, SearchRequest
from igbo_api.observability.context import bind_search
from igbo_api.observability.metrics import SEARCH_FALLBACKS, SEARCH_LATENCY, WORD_SEARCHES, track_latency
from igbo_api.search.queries import build_fallback_query, build_primary_query
from igbo_api.search.ranking import sort_docs_by
from igbo_api.service_layer.cache_gateway import CacheGateway, cache_key_for


logger = logging.getLogger(__name__)

IGBO_RANK_PATH = "word"
ENGLISH_RANK_PATH = "definitions[0]"


def rank_path_for(query: BuiltQuery) -> str:
    """Field the ranker compares against the keyword for a query shape."""
    return ENGLISH_RANK_PATH if isinstance(query, EnglishRegex) else IGBO_RANK_PATH


class WordSearchService:
    """Search words with caching and English fallback."""

    def __init__(self, repository: AbstractWordRepository, cache: CacheGateway):
        self.repository = repository
        self.cache = cache

    async def _execute(self, query: BuiltQuery, request: SearchRequest) -> list[WordRecord]:
        """Run ``query`` against the store and rank the page it returns."""
        with track_latency(SEARCH_LATENCY, strategy=query.strategy):
            words = await self.repository.find_words(
                query,
                skip=request.skip,
                limit=request.limit,
                dialects=request.dialects,
                examples=request.examples,
            )
        return sort_docs_by(request.search_word, words, rank_path_for(query))

    def _finish(
        self,
        request: SearchRequest,
        query: BuiltQuery,
        cache_key: str,
        words: list[WordRecord],
        *,
        cache_hit: bool = False,
        fell_back: bool = False,
    ) -> SearchOutcome:
        WORD_SEARCHES.labels(strategy=query.strategy, source="cache" if cache_hit else "store").inc()
        bind_search(request.search_word, query.strategy, cache_hit=cache_hit, fell_back=fell_back)
        logger.debug(
            "Search for %r answered by %s (%d words, cache_hit=%s, fell_back=%s)",
            request.search_word,
            query.strategy,
            len(words),
            cache_hit,
            fell_back,
        )
        return SearchOutcome(
            words=words,
            query=query,
            cache_key=cache_key,
            cache_hit=cache_hit,
            fell_back=fell_back,
        )

    async def search(self, request: SearchRequest) -> SearchOutcome:
        """Run a classified request to completion.

        Results are ranked before they are cached, so a cache hit is
        returned in stored order. On a hit the reported query is the
        primary one, except that a cached empty Igbo result is reported
        as the English fallback it was overwritten by.

        Args:
            request: Validated search request from the classifier

        Returns:
            Ranked words with the query that produced them

        Raises:
            UpstreamQueryError: When the word store fails
        """
        primary = build_primary_query(request)
        cache_key = cache_key_for(request)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            query = primary
            if not cached and not isinstance(primary, EnglishRegex):
                query = build_fallback_query(request)
            return self._finish(request, query, cache_key, cached, cache_hit=True)

        words = await self._execute(primary, request)
        await self.cache.set(cache_key, words)
        if words or isinstance(primary, EnglishRegex):
            return self._finish(request, primary, cache_key, words)

        logger.info("No Igbo matches for %r, falling back to English definitions", request.search_word)
        SEARCH_FALLBACKS.labels(from_strategy=primary.strategy).inc()
        fallback = build_fallback_query(request)
        words = await self._execute(fallback, request)
        await self.cache.set(cache_key, words)
        return self._finish(request, fallback, cache_key, words, fell_back=True)
