"""
Input validation for the Sector Mapping Server.

Validators for search queries, result limits, onboarding sectors and ATECO
codes, with clear error messages and consistent behavior. The core lookup
functions trust their inputs; these validators run at the HTTP, MCP and CLI
boundaries.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from ..models.sector_models import OnboardingSector
from .errors import ValidationError

logger = logging.getLogger(__name__)


# --- Configuration ---


@dataclass
class ValidationConfig:
    """Configuration for input validation."""

    # Search constraints
    search_query_max_length: int = 200
    search_limit_max: int = 100
    search_limit_default: int = 20

    # Onboarding sector constraints
    sector_max_length: int = 200


# Default configuration
DEFAULT_CONFIG = ValidationConfig()

# "62", "62.01" or "62.01.00"
ATECO_CODE_PATTERN = re.compile(r"^(\d{2})(?:\.\d{1,2}){0,2}$")


# --- Validation Result ---


@dataclass
class ValidationResult:
    """Result of a validation check."""

    is_valid: bool
    value: Any  # The validated (potentially transformed) value
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def valid(cls, value: Any, warnings: list[str] | None = None) -> "ValidationResult":
        """Create a valid result."""
        return cls(is_valid=True, value=value, warnings=warnings or [])


# --- Search Query Validator ---


def validate_search_query(
    query: str | None, config: ValidationConfig = DEFAULT_CONFIG, field_name: str = "query"
) -> ValidationResult:
    """
    Validate an ATECO search query.

    The query is only trimmed; matching stays literal. A missing or blank
    query is valid and becomes "", which callers route to the "list all" path.

    Raises:
        ValidationError: If the query is not a string
    """
    warnings = []

    if query is None:
        return ValidationResult.valid("")

    if not isinstance(query, str):
        raise ValidationError(
            message=f"{field_name} must be a string", field=field_name, value=type(query).__name__
        )

    normalized = query.strip()

    # Truncate if too long
    if len(normalized) > config.search_query_max_length:
        original_length = len(normalized)
        normalized = normalized[: config.search_query_max_length]
        warnings.append(
            f"{field_name} truncated from {original_length} to "
            f"{config.search_query_max_length} characters"
        )

    return ValidationResult.valid(normalized, warnings)


# --- Numeric Validators ---


def validate_limit(
    limit: int | str | None, config: ValidationConfig = DEFAULT_CONFIG, field_name: str = "limit"
) -> ValidationResult:
    """
    Validate a result limit.

    None gives the default; values above the maximum are capped.

    Raises:
        ValidationError: If the limit is not an integer or is below 1
    """
    if limit is None:
        return ValidationResult.valid(config.search_limit_default)

    if isinstance(limit, bool) or not isinstance(limit, int):
        try:
            limit = int(limit)
        except (ValueError, TypeError):
            raise ValidationError(
                message=f"{field_name} must be an integer", field=field_name, value=str(limit)
            )

    if limit < 1:
        raise ValidationError(
            message=f"{field_name} must be at least 1",
            field=field_name,
            value=limit,
            constraints={"min": 1},
        )

    if limit > config.search_limit_max:
        return ValidationResult.valid(
            config.search_limit_max,
            warnings=[f"{field_name} capped at maximum of {config.search_limit_max}"],
        )

    return ValidationResult.valid(limit)


# --- Sector Validator ---


def validate_onboarding_sector(
    sector: Any, config: ValidationConfig = DEFAULT_CONFIG, field_name: str = "onboardingSector"
) -> ValidationResult:
    """
    Validate an onboarding sector label.

    Returns:
        ValidationResult whose value is the OnboardingSector member

    Raises:
        ValidationError: If the sector is missing or not a known label
    """
    if isinstance(sector, OnboardingSector):
        return ValidationResult.valid(sector)

    if sector is None or (isinstance(sector, str) and not sector.strip()):
        raise ValidationError(message=f"{field_name} is required", field=field_name)

    if not isinstance(sector, str):
        raise ValidationError(
            message=f"{field_name} must be a string",
            field=field_name,
            value=type(sector).__name__,
        )

    label = sector.strip()[: config.sector_max_length]
    parsed = OnboardingSector.from_label(label)
    if parsed is None:
        raise ValidationError(
            message="Invalid onboarding sector",
            field=field_name,
            value=label,
            constraints={"valid_values": [s.value for s in OnboardingSector]},
        )

    return ValidationResult.valid(parsed)


# --- ATECO Code Validator ---


def validate_ateco_code(
    code: Any, field_name: str = "atecoCode", required: bool = False
) -> ValidationResult:
    """
    Validate an ATECO code and reduce it to its 2-digit division.

    Accepts "62" as well as dotted forms such as "62.01" or "62.01.00".
    A missing code is valid (value None) unless required.

    Raises:
        ValidationError: If the code is malformed, or missing when required
    """
    if code is None or (isinstance(code, str) and not code.strip()):
        if required:
            raise ValidationError(message=f"{field_name} is required", field=field_name)
        return ValidationResult.valid(None)

    if isinstance(code, int) and not isinstance(code, bool):
        code = f"{code:02d}"

    if not isinstance(code, str):
        raise ValidationError(
            message=f"{field_name} must be a string",
            field=field_name,
            value=type(code).__name__,
        )

    code = code.strip()
    match = ATECO_CODE_PATTERN.match(code)
    if match is None:
        raise ValidationError(
            message=f"{field_name} must be a 2-digit ATECO code (e.g. '62' or '62.01')",
            field=field_name,
            value=code,
        )

    division = match.group(1)
    warnings = []
    if division != code:
        warnings.append(f"{field_name} '{code}' reduced to division {division}")

    return ValidationResult.valid(division, warnings)
