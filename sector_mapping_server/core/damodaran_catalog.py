"""
Access to Damodaran industry names.
"""

from ..models.sector_models import DamodaranIndustry
from .reference_data import ReferenceTables, get_reference_tables


def get_damodaran_industries(tables: ReferenceTables | None = None) -> list[DamodaranIndustry]:
    """
    Get the distinct Damodaran industries referenced by any sector mapping.

    Sorted for stable presentation; callers should treat it as a set.
    """
    tables = tables or get_reference_tables()
    industries = {
        industry
        for mapping in tables.sector_mappings
        for industry in mapping.damodaran_mapping.industries
    }
    return sorted(industries)


def get_damodaran_catalog(tables: ReferenceTables | None = None) -> list[DamodaranIndustry]:
    """Get the full Damodaran industry list in source order (for dropdowns)."""
    tables = tables or get_reference_tables()
    return list(tables.damodaran_industries)
