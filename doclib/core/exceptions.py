"""
Exception hierarchy for the document library.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the library
"""

from typing import Any


class DocLibraryException(Exception):
    """Base exception for all document library errors."""

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


class ValidationError(DocLibraryException):
    """Raised when input or vector validation fails."""

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


class NotFoundError(DocLibraryException):
    """Raised when a document, chunk or source file does not exist."""

    def __init__(
        self,
        message: str,
        resource: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            message: Error message
            resource: Kind of missing resource (document, chunk, file)
            details: Additional context
        """
        details = details or {}
        if resource:
            details["resource"] = resource
        super().__init__(message, details)


class DocumentNotFoundError(NotFoundError):
    """Raised when an id or title lookup matches no document."""

    def __init__(self, query: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["query"] = query
        super().__init__(f"Document not found: {query}", "document", details)


class DocumentExistsError(DocLibraryException):
    """Raised when a path has already been ingested."""

    def __init__(self, title: str, path: str) -> None:
        super().__init__(
            f"Document already exists: {title}",
            {"title": title, "path": path},
        )


class ExtractionError(DocLibraryException):
    """Raised when text extraction fails or yields nothing."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        file_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize extraction error.

        Args:
            message: Error message
            path: Source file path
            file_type: Type of file that failed extraction
            details: Additional context
        """
        details = details or {}
        if path:
            details["path"] = path
        if file_type:
            details["file_type"] = file_type
        super().__init__(message, details)


class EmbeddingError(DocLibraryException):
    """Raised when the inference service is unreachable, lacks the model, or returns an invalid vector."""

    pass


class StorageError(DocLibraryException):
    """Raised when a query or transaction against the index store fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize storage error.

        Args:
            message: Error message
            operation: Operation that failed (add_chunks, fts_search, checkpoint)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
