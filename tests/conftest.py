"""
Pytest fixtures for Sector Mapping Server tests.

Provides reference tables, small hand-built tables for invariant tests,
and an HTTP test client.
"""

import dataclasses

import pytest
from starlette.testclient import TestClient

from sector_mapping_server.config import reset_config
from sector_mapping_server.core.health import HealthChecker
from sector_mapping_server.core.reference_data import (
    ATECO_MACROS,
    SECTOR_MAPPINGS,
    build_reference_tables,
    get_reference_tables,
)
from sector_mapping_server.http_server import HTTPServer, HTTPServerConfig
from sector_mapping_server.models.sector_models import (
    AtecoMacro,
    AtecoMacroCode,
    DamodaranMapping,
    OnboardingSector,
    SectorMapping,
)

# --- Sample Data ---

SAMPLE_MACROS = (
    AtecoMacro(AtecoMacroCode.K, "Information & Communication (ICT)", ("61", "62")),
    AtecoMacro(AtecoMacroCode.G, "Trade & Commerce", ("46", "47")),
)

SAMPLE_DESCRIPTIONS = {
    "61": "Telecommunications",
    "62": "Software production, computer programming and consultancy",
    "46": "Wholesale trade",
    # "47" deliberately missing: falls back to the macro name
}

SAMPLE_INDUSTRIES = (
    "Computer Services",
    "Information Services",
    "Retail (General)",
    "Software (Internet)",
    "Software (System & Application)",
    "Telecom. Services",
    "Unused Industry",
)


def make_mapping(
    sector: OnboardingSector,
    industries: tuple[str, str, str] = (
        "Software (System & Application)",
        "Software (Internet)",
        "Information Services",
    ),
    weights: tuple[int, int, int] = (70, 20, 10),
    suggested: tuple[str, ...] = ("62",),
    notes: str | None = None,
) -> SectorMapping:
    """Build a SectorMapping row with sensible defaults."""
    return SectorMapping(
        onboarding_sector=sector,
        ateco_macro_primary=AtecoMacroCode.K,
        ateco_macro_primary_name="ICT",
        suggested_ateco_codes=suggested,
        damodaran_mapping=DamodaranMapping(*industries, *weights, notes=notes),
    )


def full_coverage_mappings(**overrides: SectorMapping) -> list[SectorMapping]:
    """One mapping per sector over the sample data; override rows by enum name."""
    rows = []
    for sector in OnboardingSector:
        rows.append(overrides.get(sector.name, make_mapping(sector)))
    return rows


# --- Fixtures ---


@pytest.fixture
def tables():
    """The embedded, validated reference tables."""
    return get_reference_tables()


@pytest.fixture
def mapping_factory():
    """Factory for SectorMapping rows over the sample industries."""
    return make_mapping


@pytest.fixture
def build_sample_tables():
    """
    Factory building tables over the sample data.

    Accepts `overrides` (rows keyed by sector enum name), `extra` rows,
    `drop` (sectors to leave unmapped) and `macros`.
    """

    def build(overrides=None, extra=(), drop=(), macros=SAMPLE_MACROS, validate=True):
        rows = [
            m for m in full_coverage_mappings(**(overrides or {})) if m.onboarding_sector not in drop
        ]
        rows.extend(extra)
        return build_reference_tables(
            macros=macros,
            descriptions=SAMPLE_DESCRIPTIONS,
            damodaran_industries=SAMPLE_INDUSTRIES,
            sector_mappings=rows,
            validate=validate,
        )

    return build


@pytest.fixture
def sample_tables(build_sample_tables):
    """Small validated tables over the sample data, covering every sector."""
    return build_sample_tables()


@pytest.fixture
def partial_tables():
    """Unvalidated tables missing the OTHER sector mapping."""
    return build_reference_tables(
        macros=ATECO_MACROS,
        sector_mappings=[m for m in SECTOR_MAPPINGS if m.onboarding_sector != OnboardingSector.OTHER],
        validate=False,
    )


@pytest.fixture
def broken_tables():
    """Unvalidated tables whose first mapping has weights summing to 90."""
    first = SECTOR_MAPPINGS[0]
    broken = dataclasses.replace(
        first,
        damodaran_mapping=dataclasses.replace(first.damodaran_mapping, weight3=0),
    )
    return build_reference_tables(sector_mappings=(broken, *SECTOR_MAPPINGS[1:]), validate=False)


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config singleton around each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def http_server(tables):
    """HTTP server over the embedded tables with a health checker."""
    return HTTPServer(
        config=HTTPServerConfig(),
        tables=tables,
        health_checker=HealthChecker(tables=tables, version="0.1.0"),
    )


@pytest.fixture
def client(http_server):
    """Starlette test client for the HTTP API."""
    return TestClient(http_server.app)
