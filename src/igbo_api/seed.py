"""Import a JSON dictionary into the word store.

Accepted layouts:
    {"word": ["definition", ...]}
    {"word": [{"wordClass": "...", "definitions": [...], ...}, ...]}
    [{"word": "...", "definitions": [...], "examples": [...]}, ...]

Usage:
    python -m igbo_api.seed dictionary.json [--database data/igbo_api.sqlite]
"""

import argparse
import asyncio
from collections.abc import Iterator
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from igbo_api.adapters.sqlite_word_repository import SqliteWordRepository
from igbo_api.adapters.word_repository import AbstractWordRepository
from igbo_api.config import Settings
from igbo_api.domain.errors import UpstreamQueryError
from igbo_api.domain.model import WordPayload
from igbo_api.observability.logging import configure_logging
from igbo_api.service_layer.services import create_word


logger = logging.getLogger(__name__)


def iter_entries(data: Any) -> Iterator[dict[str, Any]]:
    """Yield one raw word payload per dictionary entry."""
    if isinstance(data, list):
        yield from data
        return

    if not isinstance(data, dict):
        raise ValueError("Dictionary must be a JSON object or array")

    for headword, entries in data.items():
        if not isinstance(entries, list):
            entries = [entries]
        if all(isinstance(entry, str) for entry in entries):
            yield {"word": headword, "definitions": entries}
            continue
        for entry in entries:
            if isinstance(entry, str):
                yield {"word": headword, "definitions": [entry]}
            else:
                yield {"word": headword, **entry}


def iter_payloads(data: Any) -> Iterator[WordPayload | None]:
    """Validate each entry, yielding None for entries that fail validation."""
    for entry in iter_entries(data):
        try:
            yield WordPayload.model_validate(entry)
        except ValidationError as exc:
            logger.warning("Skipping invalid dictionary entry: %s", exc.errors()[0]["msg"])
            yield None


async def seed_words(data: Any, repository: AbstractWordRepository) -> tuple[int, int]:
    """Create every valid entry in ``data``; returns (created, skipped)."""
    created = skipped = 0
    for payload in iter_payloads(data):
        if payload is None:
            skipped += 1
            continue
        await create_word(payload, repository)
        created += 1
        if created % 500 == 0:
            logger.info("Imported %d words", created)
    return created, skipped


def main() -> int:
    parser = argparse.ArgumentParser(description="Import a JSON dictionary into the Igbo API word store.")
    parser.add_argument("dictionary", type=Path, help="Path to the dictionary JSON file.")
    parser.add_argument("--database", type=Path, help="SQLite database path (defaults to DATABASE_PATH).")
    parser.add_argument("--dry-run", action="store_true", help="Validate entries without writing them.")
    args = parser.parse_args()

    settings = Settings()
    configure_logging(settings.log_level, json_output=False)

    if not args.dictionary.is_file():
        logger.error("Dictionary file not found: %s", args.dictionary)
        return 1

    try:
        data = json.loads(args.dictionary.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        logger.error("Dictionary is not valid JSON: %s", exc)
        return 1

    if args.dry_run:
        try:
            valid = sum(1 for payload in iter_payloads(data) if payload is not None)
        except ValueError as exc:
            logger.error("Import failed: %s", exc)
            return 1
        logger.info("Dry run: %d valid entries in %s", valid, args.dictionary)
        return 0

    repository = SqliteWordRepository(args.database or settings.database_path)
    try:
        created, skipped = asyncio.run(seed_words(data, repository))
    except (UpstreamQueryError, ValueError) as exc:
        logger.error("Import failed: %s", exc)
        return 1

    logger.info("Imported %d words from %s (%d skipped)", created, args.dictionary, skipped)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
