"""
Custom exceptions and error handling for the Sector Mapping Server.

Provides a clear exception hierarchy with:
- Categorized errors mapped to HTTP status codes
- Structured error responses for HTTP and MCP callers
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


# --- Error Categories ---


class ErrorCategory(str, Enum):
    """Categories of errors for handling decisions."""

    VALIDATION = "validation"  # User input error (400)
    NOT_FOUND = "not_found"  # Resource not found (404)
    PERMANENT = "permanent"  # Unexpected failure (500)
    CONFIGURATION = "configuration"  # Config or reference data error, fail fast (500)

    @property
    def http_status(self) -> int:
        """HTTP status code used when this category reaches the API boundary."""
        return {
            ErrorCategory.VALIDATION: 400,
            ErrorCategory.NOT_FOUND: 404,
        }.get(self, 500)


# --- Base Exception ---


class SectorMappingException(Exception):
    """
    Base exception for all Sector Mapping Server errors.

    Attributes:
        message: Human-readable error message
        category: Error category for handling decisions
        retryable: Whether the operation can be retried
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.retryable = retryable
        self.details = details or {}
        self.cause = cause

    @property
    def http_status(self) -> int:
        return self.category.http_status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        result = {
            "error": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


# --- Specific Exceptions ---


class ValidationError(SectorMappingException):
    """Input validation error - user fixable."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        constraints: dict[str, Any] | None = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            # Sanitize value for logging
            details["value_preview"] = str(value)[:50]
        if constraints:
            details["constraints"] = constraints

        super().__init__(
            message=message, category=ErrorCategory.VALIDATION, retryable=False, details=details
        )


class NotFoundError(SectorMappingException):
    """Resource not found error."""

    def __init__(self, resource_type: str, identifier: str, message: str | None = None):
        msg = message or f"{resource_type} not found: {identifier}"
        super().__init__(
            message=msg,
            category=ErrorCategory.NOT_FOUND,
            retryable=False,
            details={"resource_type": resource_type, "identifier": identifier},
        )


class ConfigurationError(SectorMappingException):
    """Configuration or setup error - requires intervention."""

    def __init__(
        self, message: str, config_key: str | None = None, details: dict[str, Any] | None = None
    ):
        details = details or {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(
            message=message, category=ErrorCategory.CONFIGURATION, retryable=False, details=details
        )


class ReferenceDataError(ConfigurationError):
    """The embedded reference tables violate one of their invariants."""

    def __init__(self, message: str, table: str, details: dict[str, Any] | None = None):
        details = details or {}
        details["table"] = table
        super().__init__(message=message, details=details)
        self.table = table


# --- Error Response Builder ---


@dataclass
class ErrorResponse:
    """Standardized error response for MCP tools."""

    error: str
    category: str
    retryable: bool
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        result = {
            "error": self.error,
            "error_category": self.category,
            "retryable": self.retryable,
        }

        if self.details:
            result["error_details"] = self.details

        return result

    @classmethod
    def from_exception(cls, exc: Exception) -> "ErrorResponse":
        """Create ErrorResponse from an exception."""
        if isinstance(exc, SectorMappingException):
            return cls(
                error=exc.message,
                category=exc.category.value,
                retryable=exc.retryable,
                details=exc.details,
            )
        else:
            # Generic exception
            return cls(
                error=str(exc)[:200],  # Truncate for safety
                category=ErrorCategory.PERMANENT.value,
                retryable=False,
            )


def handle_tool_error(
    exc: Exception, operation: str, fallback_result: dict[str, Any] | None = None
) -> dict[str, Any]:
    """
    Standard error handler for MCP tools.

    Returns a dictionary suitable for tool response.
    """
    error_response = ErrorResponse.from_exception(exc)

    if isinstance(exc, (ValidationError, NotFoundError)):
        logger.warning(f"Tool request error in {operation}: {exc}")
    else:
        logger.error(f"Tool error in {operation}: {exc}", exc_info=True)

    result = error_response.to_dict()

    # Merge with fallback result if provided
    if fallback_result:
        result.update(fallback_result)

    return result
