"""Exception hierarchy for the ingestion and classification pipeline.

Adapters and parsers raise these; the consumers catch them at the
boundaries of a poll cycle or of a single item, so none of them escape
``Classifier.classify`` or terminate a consumer.
"""


class CohortlineError(Exception):
    """Base class for all pipeline errors."""


class MalformedPayloadError(CohortlineError):
    """A queue message body or change-record image could not be parsed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class EndpointUnavailableError(CohortlineError):
    """The queue endpoint could not be resolved or created."""


class StreamUnavailableError(CohortlineError):
    """The change stream, its table or a shard is not visible.

    ``shard_id`` is set when only a single shard is affected (for example a
    shard that was closed and trimmed after re-sharding).
    """

    def __init__(self, message: str, shard_id: str | None = None) -> None:
        super().__init__(message)
        self.shard_id = shard_id


class StoreError(CohortlineError):
    """A backing store rejected or failed an operation."""


class CursorExpiredError(StreamUnavailableError):
    """A shard cursor can no longer be used: it expired, or its shard was trimmed.

    The shard must be re-initialized from a fresh cursor.
    """
