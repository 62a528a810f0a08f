"""
Sector mapping tool request models.

Pydantic models for MCP tool parameters and the HTTP request body.
Field aliases follow the camelCase wire names used by the HTTP API.
"""

from pydantic import BaseModel, ConfigDict, Field


class AtecoSearchRequest(BaseModel):
    """Parameters for ATECO 2-digit code search."""

    query: str = Field(
        default="",
        description=(
            "Free text matched against the code, its description and its macro group "
            "(e.g. 'software', '62', 'construction'). Empty lists every code."
        ),
    )
    limit: int = Field(
        default=20,
        description="Maximum results for a non-empty query; an empty query lists all 52 codes",
        ge=1,
        le=100,
    )


class AtecoCodeRequest(BaseModel):
    """Parameters for looking up one ATECO 2-digit division."""

    code: str = Field(
        description="ATECO code, e.g. '62'; dotted codes such as '62.01' use their division"
    )


class SectorResolveRequest(BaseModel):
    """Parameters for resolving an onboarding sector to Damodaran industries."""

    model_config = ConfigDict(populate_by_name=True)

    onboarding_sector: str = Field(
        alias="onboardingSector",
        description=(
            "Exact onboarding sector label, e.g. 'Software / SaaS / IT' or "
            "'FinTech / Financial Services / Payments / InsurTech'. "
            "Use list_onboarding_sectors for the full list."
        ),
    )
    ateco_code: str | None = Field(
        default=None,
        alias="atecoCode",
        description="Optional ATECO code chosen by the user (e.g. '62'); echoed in the result",
    )


class IndustryListRequest(BaseModel):
    """Parameters for listing Damodaran industries."""

    include_unmapped: bool = Field(
        default=False,
        description=(
            "False lists only industries referenced by a sector mapping; "
            "True lists the full Damodaran catalog"
        ),
    )
