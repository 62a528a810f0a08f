"""
Sector Mapping Server

Resolves the onboarding sectors of a business-plan product to weighted
Damodaran valuation industries and searches the Italian ATECO 2-digit
classification, over MCP, HTTP and a CLI.

Usage:
    python -m sector_mapping_server                    # Run the MCP server
    python -m sector_mapping_server search software    # CLI search
    python -m sector_mapping_server http               # HTTP API
"""

__version__ = "0.1.0"

from .config import AppConfig, get_config, reset_config
from .core.ateco_lookup import get_ateco_2digit_codes, search_ateco_codes
from .core.damodaran_catalog import get_damodaran_catalog, get_damodaran_industries
from .core.reference_data import ReferenceTables, build_reference_tables, get_reference_tables
from .core.sector_resolver import resolve_sector_to_damodaran
from .models.sector_models import (
    Ateco2Digit,
    AtecoMacroCode,
    AtecoSearchResult,
    OnboardingSector,
    SectorMapping,
    SectorResolution,
)

__all__ = [
    # Version
    "__version__",
    # Config
    "AppConfig",
    "get_config",
    "reset_config",
    # Core
    "ReferenceTables",
    "build_reference_tables",
    "get_reference_tables",
    "search_ateco_codes",
    "get_ateco_2digit_codes",
    "resolve_sector_to_damodaran",
    "get_damodaran_industries",
    "get_damodaran_catalog",
    # Models
    "OnboardingSector",
    "AtecoMacroCode",
    "Ateco2Digit",
    "AtecoSearchResult",
    "SectorMapping",
    "SectorResolution",
]
