"""Structured logging configuration using structlog.

JSON output for production, console output for development. Credentials
and queue receipt handles are masked before rendering.
"""

import sys
from collections.abc import Mapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

REDACTED = "[REDACTED]"

# Compared lower-cased
SECRET_KEYS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "api_key",
    "authorization",
    "credentials",
    "aws_access_key_id",
    "aws_secret_access_key",
    "aws_session_token",
    "receipt_handle",
    "receipthandle",
    "shard_iterator",
})

_LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


class SecretRedactor:
    """Processor that masks secret values in log events.

    Matching is by key name only, recursing into nested dicts and lists.
    Shard iterators are included because they grant read access to the
    stream until they expire.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact(event_dict))

    def _redact(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                key: REDACTED if str(key).lower() in SECRET_KEYS else self._redact(item)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [self._redact(item) for item in value]
        return value


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_secrets: bool = True,
) -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: "json" for production, "console" for development
        redact_secrets: Whether to mask secret values
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_secrets:
        processors.append(SecretRedactor())

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_LEVELS.get(level.upper(), 20)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to the given name (typically ``__name__``)."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
