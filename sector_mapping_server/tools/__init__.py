"""
Tool request models for the Sector Mapping Server.
"""

from .sector_tools import (
    AtecoCodeRequest,
    AtecoSearchRequest,
    IndustryListRequest,
    SectorResolveRequest,
)

__all__ = [
    "AtecoSearchRequest",
    "AtecoCodeRequest",
    "SectorResolveRequest",
    "IndustryListRequest",
]
