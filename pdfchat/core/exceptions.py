"""
Exception hierarchy for the pdfchat service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class PdfChatException(Exception):
    """Base exception for all pdfchat errors."""

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


class ValidationError(PdfChatException):
    """Raised when caller input is malformed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ConfigError(PdfChatException):
    """Raised when service configuration is invalid."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)


class EmbeddingError(PdfChatException):
    """Raised when the embedding model call fails."""

    pass


class VectorIndexError(PdfChatException):
    """Raised on dimension mismatch or corrupted persisted index state."""

    pass


class PersistenceError(PdfChatException):
    """Raised when writing the index to durable storage fails."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize persistence error.

        Args:
            message: Error message
            path: Storage location that failed
            details: Additional context
        """
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, details)


class IndexNotFoundError(PdfChatException):
    """Raised by index loading when no persisted state exists yet."""

    def __init__(self, path: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["path"] = path
        super().__init__(f"No persisted index at: {path}", details)


class ParsingError(PdfChatException):
    """Raised when document text extraction fails."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        file_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize parsing error.

        Args:
            message: Error message
            file_path: Path of the document that failed
            file_type: Type of file that failed parsing
            details: Additional context
        """
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        if file_type:
            details["file_type"] = file_type
        super().__init__(message, details)


class GenerationError(PdfChatException):
    """Raised when the generative model fails or times out."""

    pass
