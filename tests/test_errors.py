"""
Unit tests for error handling module.

Tests custom exceptions and error response handling.
"""

import logging

import pytest

from sector_mapping_server.core.errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorResponse,
    NotFoundError,
    ReferenceDataError,
    SectorMappingException,
    ValidationError,
    handle_tool_error,
)


class TestErrorCategory:
    """Tests for error category enumeration."""

    def test_all_categories_exist(self):
        """All expected categories should exist."""
        assert ErrorCategory.VALIDATION == "validation"
        assert ErrorCategory.NOT_FOUND == "not_found"
        assert ErrorCategory.PERMANENT == "permanent"
        assert ErrorCategory.CONFIGURATION == "configuration"

    @pytest.mark.parametrize(
        "category,status",
        [
            (ErrorCategory.VALIDATION, 400),
            (ErrorCategory.NOT_FOUND, 404),
            (ErrorCategory.PERMANENT, 500),
            (ErrorCategory.CONFIGURATION, 500),
        ],
    )
    def test_http_status(self, category, status):
        """Categories map to HTTP status codes."""
        assert category.http_status == status


class TestSectorMappingException:
    """Tests for base exception class."""

    def test_exception_creation(self):
        """Exception should be created with all attributes."""
        exc = SectorMappingException(
            message="Test error",
            category=ErrorCategory.NOT_FOUND,
            details={"key": "value"},
        )

        assert exc.message == "Test error"
        assert exc.category == ErrorCategory.NOT_FOUND
        assert exc.retryable is False
        assert exc.details == {"key": "value"}
        assert exc.http_status == 404

    def test_default_category(self):
        """Default category is permanent."""
        exc = SectorMappingException("boom")
        assert exc.category == ErrorCategory.PERMANENT
        assert exc.details == {}

    def test_str_includes_cause(self):
        """String form mentions the cause."""
        exc = SectorMappingException("Outer", cause=ValueError("inner"))
        assert str(exc) == "Outer (caused by: inner)"

    def test_to_dict(self):
        """to_dict includes details only when present."""
        assert SectorMappingException("plain").to_dict() == {
            "error": "plain",
            "category": "permanent",
            "retryable": False,
        }
        assert SectorMappingException("x", details={"a": 1}).to_dict()["details"] == {"a": 1}


class TestSpecificExceptions:
    """Tests for the concrete exception types."""

    def test_validation_error(self):
        """ValidationError carries field, value preview and constraints."""
        exc = ValidationError(
            "Invalid onboarding sector",
            field="onboardingSector",
            value="x" * 80,
            constraints={"valid_values": ["a"]},
        )

        assert exc.category == ErrorCategory.VALIDATION
        assert exc.http_status == 400
        assert exc.details["field"] == "onboardingSector"
        assert len(exc.details["value_preview"]) == 50
        assert exc.details["constraints"] == {"valid_values": ["a"]}

    def test_not_found_error(self):
        """NotFoundError builds a default message."""
        exc = NotFoundError("ATECO code", "99")
        assert exc.message == "ATECO code not found: 99"
        assert exc.details == {"resource_type": "ATECO code", "identifier": "99"}

    def test_configuration_error(self):
        """ConfigurationError records the config key."""
        exc = ConfigurationError("Bad port", config_key="SECTOR_HTTP_PORT")
        assert exc.category == ErrorCategory.CONFIGURATION
        assert exc.details["config_key"] == "SECTOR_HTTP_PORT"

    def test_reference_data_error(self):
        """ReferenceDataError is a configuration error naming its table."""
        exc = ReferenceDataError("Weights off", table="sector_mappings", details={"total": 90})

        assert isinstance(exc, ConfigurationError)
        assert exc.table == "sector_mappings"
        assert exc.details == {"total": 90, "table": "sector_mappings"}


class TestErrorResponse:
    """Tests for standardized error responses."""

    def test_from_sector_mapping_exception(self):
        """Known exceptions keep category and details."""
        exc = ValidationError("onboardingSector is required", field="onboardingSector")
        response = ErrorResponse.from_exception(exc)

        assert response.to_dict() == {
            "error": "onboardingSector is required",
            "error_category": "validation",
            "retryable": False,
            "error_details": {"field": "onboardingSector"},
        }

    def test_from_generic_exception(self):
        """Other exceptions are reported as permanent, truncated."""
        response = ErrorResponse.from_exception(RuntimeError("x" * 300))

        assert response.category == "permanent"
        assert len(response.error) == 200
        assert "error_details" not in response.to_dict()


class TestHandleToolError:
    """Tests for the MCP tool error handler."""

    def test_merges_fallback(self):
        """Fallback fields are merged into the response."""
        result = handle_tool_error(
            ValidationError("bad query", field="query"), "search", {"results": []}
        )

        assert result["error"] == "bad query"
        assert result["results"] == []

    def test_validation_logged_as_warning(self, caplog):
        """Validation errors log at warning level."""
        with caplog.at_level(logging.WARNING, logger="sector_mapping_server"):
            handle_tool_error(ValidationError("bad"), "resolve_sector")

        assert [r.levelno for r in caplog.records] == [logging.WARNING]

    def test_not_found_logged_as_warning(self, caplog):
        """Unknown codes are caller errors, not server faults."""
        with caplog.at_level(logging.WARNING, logger="sector_mapping_server"):
            result = handle_tool_error(NotFoundError("ATECO code", "99"), "get_ateco_code")

        assert result["error_category"] == "not_found"
        assert [r.levelno for r in caplog.records] == [logging.WARNING]

    def test_unexpected_logged_as_error(self, caplog):
        """Unexpected errors log at error level with traceback."""
        with caplog.at_level(logging.WARNING, logger="sector_mapping_server"):
            try:
                raise RuntimeError("kaput")
            except RuntimeError as e:
                result = handle_tool_error(e, "resolve_sector")

        assert result["error_category"] == "permanent"
        assert caplog.records[0].levelno == logging.ERROR
        assert caplog.records[0].exc_info is not None
