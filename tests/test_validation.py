"""
Tests for input validation.
"""

import pytest

from sector_mapping_server.core.errors import ValidationError
from sector_mapping_server.core.validation import (
    ValidationConfig,
    validate_ateco_code,
    validate_limit,
    validate_onboarding_sector,
    validate_search_query,
)
from sector_mapping_server.models.sector_models import OnboardingSector


class TestValidateSearchQuery:
    """Tests for search query validation."""

    def test_valid_query(self):
        """A normal query passes unchanged."""
        result = validate_search_query("software")
        assert result.is_valid
        assert result.value == "software"
        assert result.warnings == []

    def test_only_trims(self):
        """Surrounding whitespace is trimmed; the inside is kept literally."""
        assert validate_search_query("  real \n estate ").value == "real \n estate"

    def test_no_unicode_normalization(self):
        """Decomposed accents are not composed."""
        assert validate_search_query("attivita\u0300").value == "attivita\u0300"

    def test_blank_query(self):
        """A whitespace-only query becomes blank."""
        assert validate_search_query("   ").value == ""

    def test_none_is_blank(self):
        """A missing query normalizes to blank."""
        assert validate_search_query(None).value == ""

    def test_truncates_long_query(self):
        """Overlong queries are truncated with a warning."""
        config = ValidationConfig(search_query_max_length=10)
        result = validate_search_query("x" * 30, config=config)

        assert result.value == "x" * 10
        assert "truncated" in result.warnings[0]

    def test_rejects_non_string(self):
        """Non-string queries are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_search_query(123)  # type: ignore[arg-type]
        assert exc_info.value.details["field"] == "query"


class TestValidateLimit:
    """Tests for result limit validation."""

    def test_default(self):
        """None gives the default."""
        assert validate_limit(None).value == 20

    def test_valid(self):
        """In-range limits pass."""
        assert validate_limit(5).value == 5

    def test_string_number(self):
        """Numeric strings are converted."""
        assert validate_limit("7").value == 7

    def test_capped(self):
        """Limits above the maximum are capped with a warning."""
        result = validate_limit(500)
        assert result.value == 100
        assert result.warnings

    @pytest.mark.parametrize("value", [0, -1, "abc"])
    def test_invalid(self, value):
        """Zero, negatives and non-numbers are rejected."""
        with pytest.raises(ValidationError):
            validate_limit(value)


class TestValidateOnboardingSector:
    """Tests for onboarding sector validation."""

    def test_exact_label(self):
        """Exact labels validate to the enum member."""
        result = validate_onboarding_sector("FinTech / Financial Services / Payments / InsurTech")
        assert result.value is OnboardingSector.FINTECH

    def test_enum_member(self):
        """Enum members pass through."""
        assert validate_onboarding_sector(OnboardingSector.OTHER).value is OnboardingSector.OTHER

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        """Missing sectors are reported as required."""
        with pytest.raises(ValidationError, match="onboardingSector is required"):
            validate_onboarding_sector(value)

    def test_unknown(self):
        """Unknown labels list the valid values."""
        with pytest.raises(ValidationError, match="Invalid onboarding sector") as exc_info:
            validate_onboarding_sector("Aerospace")

        assert len(exc_info.value.details["constraints"]["valid_values"]) == 16

    def test_non_string(self):
        """Non-string values are rejected."""
        with pytest.raises(ValidationError, match="must be a string"):
            validate_onboarding_sector(["Software / SaaS / IT"])


class TestValidateAtecoCode:
    """Tests for ATECO code validation."""

    def test_two_digit(self):
        """Two-digit codes pass unchanged."""
        result = validate_ateco_code("62")
        assert result.value == "62"
        assert result.warnings == []

    @pytest.mark.parametrize("code", ["62.01", "62.01.00", " 62.0 "])
    def test_dotted_reduced_to_division(self, code):
        """Dotted codes reduce to their division with a warning."""
        result = validate_ateco_code(code)
        assert result.value == "62"
        assert result.warnings

    def test_integer(self):
        """Integers are zero-padded."""
        assert validate_ateco_code(1).value == "01"

    def test_optional(self):
        """Missing codes are valid unless required."""
        assert validate_ateco_code(None).value is None
        assert validate_ateco_code("").value is None

        with pytest.raises(ValidationError, match="is required"):
            validate_ateco_code(None, required=True)

    @pytest.mark.parametrize("code", ["6", "620", "AB", "62-01", "62.123"])
    def test_malformed(self, code):
        """Malformed codes are rejected."""
        with pytest.raises(ValidationError, match="2-digit ATECO code"):
            validate_ateco_code(code)
