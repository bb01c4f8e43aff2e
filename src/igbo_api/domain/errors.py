"""Domain errors raised by the search and word use cases.

The HTTP layer translates these into status codes at a single boundary;
nothing below it catches them.
"""


class IgboApiError(Exception):
    """Base class for errors surfaced to API callers."""


class MissingSearchTermError(IgboApiError):
    """Keyword was empty after quote and prefix stripping."""

    def __init__(self, message: str = "No search term was provided") -> None:
        super().__init__(message)


class InvalidQueryParameterError(IgboApiError):
    """A query parameter could not be parsed."""


class WordNotFoundError(IgboApiError):
    """No word exists with the requested id."""

    def __init__(self, word_id: str) -> None:
        super().__init__("No word exists with the provided id.")
        self.word_id = word_id


class ExampleNotFoundError(IgboApiError):
    """No example exists with the requested id."""

    def __init__(self, example_id: str) -> None:
        super().__init__("No example exists with the provided id.")
        self.example_id = example_id


class UpstreamQueryError(IgboApiError):
    """The document store failed while executing a query."""
