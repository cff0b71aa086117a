"""Utilities package for the toolbox API.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from toolbox_api.utils.exceptions import (
    ContentError,
    ErrorCode,
    ExportStorageError,
    FetchError,
    GenerationError,
    HTTPStatusMixin,
    InvalidCellReferenceError,
    ParseError,
    ToolboxError,
    ValidationError,
)
from toolbox_api.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "ContentError",
    "ErrorCode",
    "ExportStorageError",
    "FetchError",
    "GenerationError",
    "HTTPStatusMixin",
    "InvalidCellReferenceError",
    "ParseError",
    "ToolboxError",
    "ValidationError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
