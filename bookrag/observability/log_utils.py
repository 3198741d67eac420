"""
Structured logging helpers.

Turns request context (conversation ids, book ids, retrieval signals,
breaker dependencies) and bookrag exceptions into flat ``extra`` fields so
every log line about one request or dependency carries the same keys.

Dependencies: logging (stdlib), bookrag.core.exceptions
System role: Logging helper functions
"""

import logging
from enum import Enum
from typing import Any
from uuid import UUID

from bookrag.core.exceptions import BookRagException

# Attributes LogRecord already owns; passing them in ``extra`` raises KeyError.
_RESERVED = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

# User text is logged only as a prefix.
QUERY_PREVIEW_LENGTH = 120


def _log_value(key: str, value: Any, max_length: int = 500) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, (list, tuple, set)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"

    text = str(value)
    limit = QUERY_PREVIEW_LENGTH if key in ("query", "message") else max_length
    if len(text) > limit:
        return text[:limit] + f"... ({len(text)} chars)"
    return text


def build_log_context(**context: Any) -> dict[str, Any]:
    """
    Build ``extra`` fields from request context.

    None values are dropped, UUIDs and enums become plain strings, queries
    are shortened, and keys that clash with LogRecord attributes get a
    ``ctx_`` prefix.

    Returns:
        dict: Fields safe to pass as ``extra``
    """
    fields: dict[str, Any] = {}
    for key, value in context.items():
        if value is None:
            continue
        name = f"ctx_{key}" if key in _RESERVED else key
        fields[name] = _log_value(key, value)
    return fields


def error_context(exc: BaseException) -> dict[str, Any]:
    """
    Flatten an exception into log fields.

    For bookrag exceptions the details dict is merged in, so a failed
    signal or breaker shows up under ``signal`` / ``dependency``.
    """
    fields: dict[str, Any] = {"error_type": type(exc).__name__}
    if isinstance(exc, BookRagException):
        fields["error_msg"] = exc.message
        for attribute in ("signal", "dependency"):
            if getattr(exc, attribute, None) is not None:
                fields[attribute] = getattr(exc, attribute)
        for key, value in exc.details.items():
            fields.setdefault(key, value)
    else:
        fields["error_msg"] = str(exc)
    return fields


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log ``message`` with context fields built by build_log_context."""
    logger.log(level, message, extra=build_log_context(**context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    level: int = logging.ERROR,
    **context: Any,
) -> None:
    """
    Log an exception with request context.

    Explicit context wins over fields taken from the exception. The
    traceback is attached only at ERROR and above; expected degradations
    (a skipped signal) are logged as warnings without one.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        level: Log level
        **context: conversation_id, book_id, signal, dependency, ...
    """
    fields = {**error_context(exc), **context}
    logger.log(
        level,
        message,
        extra=build_log_context(**fields),
        exc_info=exc if level >= logging.ERROR else None,
    )
