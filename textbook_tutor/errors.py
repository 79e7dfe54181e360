"""
Exceptions raised by the tutor pipeline.

Every stage raises one of these (or lets a third-party error through
unchanged); the web and CLI interfaces turn them into user-facing messages.
"""


class TutorError(Exception):
    """Base class for all Textbook Tutor errors."""


class IngestionError(TutorError):
    """A document could not be parsed, chunked, or embedded. No index was produced."""


class IndexNotFoundError(TutorError, FileNotFoundError):
    """The index location does not exist, is incomplete, or cannot be read."""


class EmbeddingModelMismatchError(TutorError):
    """An index is being queried with a different embedding model than it was built with."""

    def __init__(self, index_model: str, query_model: str):
        self.index_model = index_model
        self.query_model = query_model
        super().__init__(
            f"Index was built with embedding model '{index_model}' "
            f"but is being queried with '{query_model}'"
        )


class MissingCredentialsError(TutorError):
    """No API key is configured for the hosted LLM provider."""
