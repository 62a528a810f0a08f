"""
Data models for the Sector Mapping Server.
"""

from .sector_models import (
    Ateco2Digit,
    AtecoMacro,
    AtecoMacroCode,
    AtecoSearchResult,
    DamodaranIndustries,
    DamodaranIndustry,
    DamodaranMapping,
    IndustryWeights,
    OnboardingSector,
    SectorMapping,
    SectorResolution,
)

__all__ = [
    # ATECO models
    "AtecoMacroCode",
    "AtecoMacro",
    "Ateco2Digit",
    "AtecoSearchResult",
    # Sector models
    "OnboardingSector",
    "SectorMapping",
    "SectorResolution",
    # Damodaran models
    "DamodaranIndustry",
    "DamodaranMapping",
    "DamodaranIndustries",
    "IndustryWeights",
]
