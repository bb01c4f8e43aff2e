"""Service layer use cases.

- Search words through the cached, fallback-aware search service
- Fetch single words and examples by id
- Create a word together with its examples
"""

import asyncio
import logging

from igbo_api.adapters.word_repository import AbstractWordRepository
from igbo_api.domain.errors import ExampleNotFoundError, WordNotFoundError
from igbo_api.domain.model import Example, WordPayload, WordRecord
from igbo_api.domain.search import BuiltQuery, SearchOutcome, SearchRequest
from igbo_api.service_layer.word_search_service import WordSearchService


logger = logging.getLogger(__name__)


async def search_words(request: SearchRequest, search_service: WordSearchService) -> SearchOutcome:
    return await search_service.search(request)


async def count_words(query: BuiltQuery, repository: AbstractWordRepository) -> int:
    """Total number of words matching ``query`` across all pages."""
    return await repository.count_words(query)


async def get_word(
    word_id: str,
    repository: AbstractWordRepository,
    *,
    dialects: bool = False,
    examples: bool = False,
) -> WordRecord:
    """Fetch one word by id.

    Raises:
        WordNotFoundError: When no word has ``word_id``
    """
    word = await repository.get_word(word_id, dialects=dialects, examples=examples)
    if word is None:
        raise WordNotFoundError(word_id)
    return word


async def get_example(example_id: str, repository: AbstractWordRepository) -> Example:
    example = await repository.get_example(example_id)
    if example is None:
        raise ExampleNotFoundError(example_id)
    return example


async def create_word(payload: WordPayload, repository: AbstractWordRepository) -> WordRecord:
    """Create a word and its examples, linking them both ways.

    1. Persist the word without examples to obtain its id
    2. Create every example concurrently, each associated with the new word
    3. Store the example ids on the word and persist it again

    A failed example creation fails the whole call. Examples created
    before the failure are left in place.
    """
    word = await repository.add_word(payload.to_word_record())

    examples = await asyncio.gather(
        *(
            repository.add_example(
                Example(
                    igbo=example.igbo,
                    english=example.english,
                    pronunciation=example.pronunciation,
                    associated_words=[word.id],
                )
            )
            for example in payload.examples
        )
    )

    saved = await repository.update_word(word.model_copy(update={"examples": [example.id for example in examples]}))
    logger.info("Created word %s (%r) with %d examples", saved.id, saved.word, len(examples))
    return saved
