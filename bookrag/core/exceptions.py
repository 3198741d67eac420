"""
Exception hierarchy for the book RAG subsystem.

Provides layered exception structure for retrieval and generation errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class BookRagException(Exception):
    """Base exception for all bookrag errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class MalformedDocument(BookRagException):
    """Raised when page text cannot be decoded; fatal for that document only."""

    def __init__(
        self,
        message: str,
        book_id: str | None = None,
        page_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize malformed document error.

        Args:
            message: Error message
            book_id: Book the page belongs to
            page_number: Page that failed to decode
            details: Additional context
        """
        details = details or {}
        if book_id is not None:
            details["book_id"] = book_id
        if page_number is not None:
            details["page_number"] = page_number
        super().__init__(message, details)


class EmbeddingProviderUnavailable(BookRagException):
    """Raised when the embedding provider cannot be reached (retryable)."""

    pass


class IndexUnavailable(BookRagException):
    """Raised when one retrieval signal (vector or keyword) fails."""

    def __init__(
        self,
        message: str,
        signal: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize index unavailable error.

        Args:
            message: Error message
            signal: Retrieval signal that failed ("vector" or "keyword")
            details: Additional context
        """
        details = details or {}
        details["signal"] = signal
        self.signal = signal
        super().__init__(message, details)


class GenerationProviderUnavailable(BookRagException):
    """Raised when the language model provider fails or times out."""

    pass


class NoRelevantContext(BookRagException):
    """Raised when both retrieval signals produced no candidates."""

    pass


class CircuitOpenError(BookRagException):
    """Raised when a call is refused because its circuit breaker is open."""

    def __init__(self, dependency: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize circuit open error.

        Args:
            dependency: Name of the guarded dependency
            details: Additional context
        """
        details = details or {}
        details["dependency"] = dependency
        self.dependency = dependency
        super().__init__(f"Circuit open for dependency: {dependency}", details)


class InvalidQuery(BookRagException):
    """Raised when a query is empty or otherwise unusable."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize invalid query error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ConversationNotFound(BookRagException):
    """Raised when a conversation cannot be found or is archived."""

    def __init__(self, conversation_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize conversation not found error.

        Args:
            conversation_id: ID of the missing conversation
            details: Additional context
        """
        details = details or {}
        details["conversation_id"] = conversation_id
        super().__init__(f"Conversation not found: {conversation_id}", details)


class BookNotFound(BookRagException):
    """Raised when the catalog has no book with the requested id."""

    def __init__(self, book_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["book_id"] = book_id
        super().__init__(f"Book not found: {book_id}", details)
