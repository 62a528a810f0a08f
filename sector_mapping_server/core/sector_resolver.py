"""
Resolution of onboarding sectors to weighted Damodaran industries.

Resolution is keyed by the onboarding sector alone. An ATECO code may be
supplied and is echoed back in the result, but it does not select between
weightings; each sector has exactly one mapping.
"""

import logging

from ..models.sector_models import (
    DamodaranIndustries,
    IndustryWeights,
    OnboardingSector,
    SectorMapping,
    SectorResolution,
)
from .reference_data import ReferenceTables, get_reference_tables

logger = logging.getLogger(__name__)


def parse_onboarding_sector(value: OnboardingSector | str | None) -> OnboardingSector | None:
    """
    Parse a boundary value into an OnboardingSector.

    Accepts an enum member or its exact label (surrounding whitespace is
    ignored). Anything else, including None, gives None.
    """
    if isinstance(value, OnboardingSector):
        return value
    if not isinstance(value, str):
        return None
    return OnboardingSector.from_label(value.strip())


def get_onboarding_sectors(tables: ReferenceTables | None = None) -> list[OnboardingSector]:
    """Get all onboarding sectors, in mapping table order."""
    tables = tables or get_reference_tables()
    return [m.onboarding_sector for m in tables.sector_mappings]


def get_sector_mapping(
    sector: OnboardingSector | str, tables: ReferenceTables | None = None
) -> SectorMapping | None:
    """Get the mapping row for a sector, or None for an unrecognized sector."""
    tables = tables or get_reference_tables()
    parsed = parse_onboarding_sector(sector)
    if parsed is None:
        return None
    return tables.mapping_by_sector.get(parsed)


def get_suggested_ateco_codes(
    sector: OnboardingSector | str, tables: ReferenceTables | None = None
) -> list[str]:
    """Get the suggested 2-digit ATECO codes for a sector (empty if unknown)."""
    mapping = get_sector_mapping(sector, tables)
    return list(mapping.suggested_ateco_codes) if mapping else []


def resolve_sector_to_damodaran(
    sector: OnboardingSector | str,
    ateco_code: str | None = None,
    tables: ReferenceTables | None = None,
    warn_on_unsuggested_ateco: bool = True,
) -> SectorResolution | None:
    """
    Resolve Damodaran industries for an onboarding sector.

    Args:
        sector: Onboarding sector, as enum member or exact label
        ateco_code: Optional ATECO code, echoed back unchanged
        tables: Reference tables (process-wide tables by default)
        warn_on_unsuggested_ateco: Log a warning when the ATECO code is not
            among the sector's suggested codes

    Returns:
        A new SectorResolution, or None if the sector is not recognized
    """
    mapping = get_sector_mapping(sector, tables)

    if mapping is None:
        logger.info(f"Unrecognized onboarding sector: {str(sector)[:80]!r}")
        return None

    if ateco_code and warn_on_unsuggested_ateco:
        division = ateco_code.strip().split(".")[0]
        if division not in mapping.suggested_ateco_codes:
            logger.warning(
                f"ATECO code {ateco_code} not in suggested codes for "
                f"{mapping.onboarding_sector.value}"
            )

    damodaran = mapping.damodaran_mapping

    return SectorResolution(
        onboarding_sector=mapping.onboarding_sector,
        ateco_code=ateco_code,
        damodaran_industries=DamodaranIndustries(
            primary=damodaran.industry1,
            secondary=damodaran.industry2,
            tertiary=damodaran.industry3,
            weights=IndustryWeights(
                primary=damodaran.weight1,
                secondary=damodaran.weight2,
                tertiary=damodaran.weight3,
            ),
        ),
        disambiguation_notes=damodaran.notes,
    )
