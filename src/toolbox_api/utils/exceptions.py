"""Centralized exception classes for the toolbox API.

This module provides a hierarchy of custom exceptions with error codes,
HTTP status code mapping, and structured error details for consistent
error handling throughout the application.

Exception Hierarchy:
    ToolboxError (base)
    ├── ValidationError
    │   └── InvalidCellReferenceError
    ├── GenerationError
    │   └── ExportStorageError
    └── ContentError
        ├── FetchError
        └── ParseError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: Request validation errors
    - E2xxx: Workbook generation errors
    - E3xxx: Web page content errors
    - E9xxx: Internal/unexpected errors
    """

    # Validation errors (E1xxx)
    VALIDATION_FAILED = "E1001"
    MISSING_FIELD = "E1002"
    INVALID_CELL_REFERENCE = "E1003"

    # Generation errors (E2xxx)
    GENERATION_FAILED = "E2001"
    EXPORT_WRITE_FAILED = "E2002"

    # Content errors (E3xxx)
    FETCH_FAILED = "E3001"
    PARSE_FAILED = "E3002"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    CONFIGURATION_ERROR = "E9002"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    Subclasses should set the `http_status` class attribute.
    """

    http_status: int = 500

    def get_http_status(self) -> int:
        """Get the HTTP status code for this exception."""
        return self.http_status


class ToolboxError(Exception, HTTPStatusMixin):
    """Base exception for all toolbox API errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses."""
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Validation Errors (E1xxx)
# =============================================================================


class ValidationError(ToolboxError):
    """General validation error for request input."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[str] | None = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with validation details.

        Args:
            message: Main error message.
            field: Field that failed validation.
            errors: List of validation errors.
            error_code: Error code.
            details: Additional details.
        """
        details = details or {}
        if field:
            details["field"] = field
        if errors:
            details["validation_errors"] = errors
        super().__init__(message=message, error_code=error_code, details=details)
        self.field = field


class InvalidCellReferenceError(ValidationError, ValueError):
    """Raised when a cell reference such as ``B3`` cannot be parsed."""

    def __init__(self, reference: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["reference"] = reference
        super().__init__(
            message=f"Invalid cell reference: {reference!r}",
            field="startCell",
            error_code=ErrorCode.INVALID_CELL_REFERENCE,
            details=details,
        )
        self.reference = reference


# =============================================================================
# Generation Errors (E2xxx)
# =============================================================================


class GenerationError(ToolboxError):
    """Raised when laying out or serializing a workbook fails."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.GENERATION_FAILED,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the sheet being generated, when known.

        Args:
            message: Error message.
            error_code: Error code.
            sheet_name: Sheet that was being laid out.
            details: Additional details.
        """
        details = details or {}
        if sheet_name:
            details["sheet_name"] = sheet_name
        super().__init__(message, error_code, details)
        self.sheet_name = sheet_name


class ExportStorageError(GenerationError):
    """Raised when a generated workbook cannot be written to disk."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        super().__init__(
            message=message,
            error_code=ErrorCode.EXPORT_WRITE_FAILED,
            details=details,
        )
        self.file_path = file_path


# =============================================================================
# Content Errors (E3xxx)
# =============================================================================


class ContentError(ToolboxError):
    """Base class for web page reader errors."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FETCH_FAILED,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the URL being read.

        Args:
            message: Error message.
            error_code: Error code.
            url: URL that was being read.
            details: Additional details.
        """
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, error_code, details)
        self.url = url


class FetchError(ContentError):
    """Raised when a web page cannot be fetched."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the upstream status, when there was a response.

        Args:
            message: Error message.
            url: URL that failed.
            status_code: HTTP status returned by the remote server.
            details: Additional details.
        """
        details = details or {}
        if status_code is not None:
            details["upstream_status"] = status_code
        super().__init__(
            message=message,
            error_code=ErrorCode.FETCH_FAILED,
            url=url,
            details=details,
        )
        self.status_code = status_code


class ParseError(ContentError):
    """Raised when a fetched page cannot be parsed as markup."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.PARSE_FAILED,
            url=url,
            details=details,
        )
