"""Domain model - dictionary entities and creation payloads.

Words and examples are separate aggregates linked by id:
- A word lists the ids of its examples
- An example lists the ids of the words it illustrates (``associatedWords``)

JSON field names follow the public API (camelCase); Python code uses
snake_case through Pydantic aliases.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WordAttributes(BaseModel):
    """Boolean flags describing a headword."""

    model_config = _MODEL_CONFIG

    is_standard_igbo: bool = False
    is_accented: bool = False
    is_complete: bool = False


class Dialect(BaseModel):
    """Regional spelling of a headword, embedded in its word."""

    model_config = _MODEL_CONFIG

    word: str = Field(min_length=1)
    variations: list[str] = Field(default_factory=list)
    dialects: list[str] = Field(default_factory=list)
    pronunciation: str = ""


class Example(BaseModel):
    """Example sentence owned independently of the words it references."""

    model_config = _MODEL_CONFIG

    id: str | None = None
    igbo: str = ""
    english: str = ""
    associated_words: list[str] = Field(default_factory=list)
    pronunciation: str = ""


class WordRecord(BaseModel):
    """Aggregate root for a dictionary entry.

    ``examples`` holds example ids as stored. When a caller asks for
    examples, the store resolves them into full :class:`Example` records.
    ``dialects`` is ``None`` when the caller did not ask for dialects.
    """

    model_config = _MODEL_CONFIG

    id: str | None = None
    word: str = Field(min_length=1)
    word_class: str = ""
    definitions: list[str] = Field(default_factory=list)
    variations: list[str] = Field(default_factory=list)
    stems: list[str] = Field(default_factory=list)
    dialects: list[Dialect] | None = Field(default_factory=list)
    pronunciation: str | None = None
    nsibidi: str = ""
    attributes: WordAttributes = Field(default_factory=WordAttributes)
    examples: list[Example | str] = Field(default_factory=list)

    def example_ids(self) -> list[str]:
        """Return example ids whether or not examples are resolved."""
        ids: list[str] = []
        for example in self.examples:
            if isinstance(example, Example):
                if example.id:
                    ids.append(example.id)
            else:
                ids.append(example)
        return ids

    def to_json(self) -> dict:
        """Serialize using the public camelCase field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ExamplePayload(BaseModel):
    """Example data nested inside a word creation payload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    igbo: str = ""
    english: str = ""
    pronunciation: str = ""


class WordPayload(BaseModel):
    """Validated body of a word creation request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    word: str = Field(min_length=1)
    word_class: str = ""
    definitions: list[str] = Field(default_factory=list)
    variations: list[str] = Field(default_factory=list)
    stems: list[str] = Field(default_factory=list)
    dialects: list[Dialect] = Field(default_factory=list)
    pronunciation: str | None = None
    nsibidi: str = ""
    attributes: WordAttributes = Field(default_factory=WordAttributes)
    examples: list[ExamplePayload] = Field(default_factory=list)

    def to_word_record(self) -> WordRecord:
        """Build an unsaved word without its examples."""
        return WordRecord(
            word=self.word,
            word_class=self.word_class,
            definitions=list(self.definitions),
            variations=list(self.variations),
            stems=list(self.stems),
            dialects=list(self.dialects),
            pronunciation=self.pronunciation,
            nsibidi=self.nsibidi,
            attributes=self.attributes,
        )
