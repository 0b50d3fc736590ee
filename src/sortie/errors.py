"""Error types for sortie.

Expected conditions in a review session (empty queue, nothing to undo,
a swipe that fell short) are not errors and never raise. The hierarchy
below covers faults that reach the user:
- bad configuration files
- missing or inaccessible media
- file operations that failed on disk
"""

from __future__ import annotations

import errno
from enum import Enum
from typing import Any, Callable

from sortie.logging import get_logger

logger = get_logger(__name__)


class ErrorCategory(str, Enum):
    """Categories of errors for handling decisions."""

    VALIDATION = "validation"  # Bad input
    CONFIGURATION = "configuration"  # Bad or unreadable config
    RESOURCE = "resource"  # Missing file/folder
    EXTERNAL = "external"  # File system operation failed
    INTERNAL = "internal"  # Bug in code


class SortieError(Exception):
    """Base exception for sortie errors.

    Attributes:
        message: Human-readable error message
        category: Error category for handling
        context: Additional context information
        recoverable: Whether retrying the operation can succeed
    """

    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        context: dict | None = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class ValidationError(SortieError):
    """Input validation error, e.g. an unknown direction or action name."""

    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class ConfigurationError(SortieError):
    """Organizer configuration could not be read, parsed or written."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class ResourceError(SortieError):
    """A clip or folder is missing or not accessible."""

    category = ErrorCategory.RESOURCE

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class ExternalServiceError(SortieError):
    """A file system operation failed part way.

    Recoverable by default: the queue is left untouched so the user
    can retry the same decision.
    """

    category = ErrorCategory.EXTERNAL

    def __init__(
        self,
        message: str,
        context: dict | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message, context, recoverable=recoverable)


class ErrorContext:
    """Context manager that logs a failed operation and runs its rollback.

    The exception is never suppressed.
    """

    def __init__(
        self,
        operation: str,
        rollback: Callable[[], None] | None = None,
        context: dict | None = None,
    ):
        self.operation = operation
        self.rollback = rollback
        self.context = context or {}
        self.error: Exception | None = None

    def __enter__(self) -> "ErrorContext":
        logger.debug(f"Starting operation: {self.operation}")
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> bool:
        if exc_val is None:
            logger.debug(f"Completed operation: {self.operation}")
            return False

        self.error = exc_val
        logger.error(
            f"Error in {self.operation}: {exc_val}",
            extra={
                "operation": self.operation,
                "error_type": type(exc_val).__name__,
                **self.context,
            },
        )

        if self.rollback:
            try:
                logger.info(f"Rolling back {self.operation}")
                self.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback failed for {self.operation}: {rollback_error}")

        return False


def wrap_os_error(error: OSError, operation: str, path: str | None = None) -> SortieError:
    """Wrap an ``OSError`` raised by a file operation.

    Args:
        error: Original error
        operation: What was being attempted, e.g. "move file"
        path: Path involved, if known

    Returns:
        ResourceError for missing paths, ExternalServiceError otherwise
    """
    context = {"operation": operation}
    if path:
        context["path"] = path

    if isinstance(error, FileNotFoundError) or error.errno == errno.ENOENT:
        return ResourceError(f"Failed to {operation}: {error}", context=context)

    recoverable = not isinstance(error, PermissionError)
    return ExternalServiceError(
        f"Failed to {operation}: {error}",
        context=context,
        recoverable=recoverable,
    )


def format_error_for_display(error: Exception) -> str:
    """Format an error message for user display."""
    if isinstance(error, SortieError):
        category = error.category.value
        if error.context:
            context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
            return f"[{category}] {error.message} ({context_str})"
        return f"[{category}] {error.message}"

    return f"[error] {type(error).__name__}: {error}"
