"""
Core modules for the Sector Mapping Server.
"""

from .ateco_lookup import (
    get_ateco_2digit_codes,
    get_ateco_by_code,
    get_ateco_macros,
    require_ateco_code,
    search_ateco_codes,
    to_search_result,
)
from .damodaran_catalog import get_damodaran_catalog, get_damodaran_industries
from .errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorResponse,
    NotFoundError,
    ReferenceDataError,
    SectorMappingException,
    ValidationError,
    handle_tool_error,
)
from .health import (
    ComponentHealth,
    ComponentStatus,
    HealthChecker,
    HealthCheckResult,
    HealthStatus,
    liveness_check,
    readiness_check,
)
from .reference_data import ReferenceTables, build_reference_tables, get_reference_tables
from .sector_resolver import (
    get_onboarding_sectors,
    get_sector_mapping,
    get_suggested_ateco_codes,
    parse_onboarding_sector,
    resolve_sector_to_damodaran,
)
from .validation import (
    ValidationConfig,
    ValidationResult,
    validate_ateco_code,
    validate_limit,
    validate_onboarding_sector,
    validate_search_query,
)

__all__ = [
    # Reference data
    "ReferenceTables",
    "build_reference_tables",
    "get_reference_tables",
    # ATECO lookup
    "search_ateco_codes",
    "get_ateco_2digit_codes",
    "get_ateco_by_code",
    "get_ateco_macros",
    "require_ateco_code",
    "to_search_result",
    # Sector resolver
    "resolve_sector_to_damodaran",
    "parse_onboarding_sector",
    "get_sector_mapping",
    "get_onboarding_sectors",
    "get_suggested_ateco_codes",
    # Damodaran
    "get_damodaran_industries",
    "get_damodaran_catalog",
    # Validation
    "ValidationConfig",
    "ValidationResult",
    "validate_search_query",
    "validate_limit",
    "validate_onboarding_sector",
    "validate_ateco_code",
    # Errors
    "SectorMappingException",
    "ValidationError",
    "NotFoundError",
    "ConfigurationError",
    "ReferenceDataError",
    "ErrorCategory",
    "ErrorResponse",
    "handle_tool_error",
    # Health
    "HealthChecker",
    "HealthCheckResult",
    "HealthStatus",
    "ComponentStatus",
    "ComponentHealth",
    "liveness_check",
    "readiness_check",
]
