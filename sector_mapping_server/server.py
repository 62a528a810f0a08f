#!/usr/bin/env python3
"""
Sector Mapping MCP Server

Maps the onboarding sectors of a business-plan product to weighted
Damodaran valuation industries, and searches the Italian ATECO 2-digit
classification.
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from mcp.server.fastmcp import Context, FastMCP

from .config import AppConfig, get_config
from .core.ateco_lookup import (
    get_ateco_2digit_codes,
    get_ateco_macros,
    require_ateco_code,
    search_ateco_codes,
    to_search_result,
)
from .core.damodaran_catalog import get_damodaran_catalog, get_damodaran_industries
from .core.errors import SectorMappingException, ValidationError, handle_tool_error
from .core.health import HealthChecker
from .core.reference_data import ReferenceTables, get_reference_tables
from .core.sector_resolver import get_sector_mapping, resolve_sector_to_damodaran
from .core.validation import (
    validate_ateco_code,
    validate_limit,
    validate_onboarding_sector,
    validate_search_query,
)
from .http_server import HTTPServer, create_http_server
from .observability.logging import (
    get_logger,
    log_server_ready,
    log_server_shutdown,
    log_server_start,
    log_tool_call,
    setup_logging_from_config,
)
from .observability.metrics import (
    initialize_metrics,
    record_ateco_search,
    record_sector_resolution,
    track_tool_metrics,
    update_health_status,
)
from .tools.sector_tools import (
    AtecoCodeRequest,
    AtecoSearchRequest,
    IndustryListRequest,
    SectorResolveRequest,
)

logger = get_logger(__name__)


class AppContext:
    """Application context with all initialized services."""

    def __init__(
        self,
        config: AppConfig,
        tables: ReferenceTables,
        health_checker: HealthChecker,
        http_server: HTTPServer | None = None,
    ):
        self.config = config
        self.tables = tables
        self.health_checker = health_checker
        self.http_server = http_server


@asynccontextmanager
async def lifespan(server: FastMCP):
    """Manage server lifecycle - initialization and cleanup."""
    config = get_config()
    setup_logging_from_config()
    log_server_start(config.to_dict())

    tables = get_reference_tables()
    stats = tables.get_statistics()

    if config.metrics.enable_metrics:
        initialize_metrics(version=config.server.version, stats=stats)

    health_checker = HealthChecker(tables=tables, version=config.server.version)

    http_server = None
    if config.http.enable_http:
        http_server = create_http_server(tables=tables, health_checker=health_checker, config=config)
        await http_server.start()

    log_server_ready(stats)

    try:
        yield AppContext(config, tables, health_checker, http_server)
    finally:
        log_server_shutdown()
        if http_server is not None:
            await http_server.stop()
        logger.info("Shutdown complete")


SERVER_INSTRUCTIONS = """
# Sector Mapping Assistant - Workflow Guide

## Resolving a company's valuation industries
1. `list_onboarding_sectors` to see the 16 sector labels and their suggested ATECO codes
2. `search_ateco_codes` to find the company's ATECO 2-digit division (optional); `get_ateco_code` and `list_ateco_macros` for details
3. `resolve_sector` with the exact sector label (and the ATECO code, if known)
4. Read `disambiguationNotes` when present: it explains how to pick between the weighted industries

## Key Principles
- Sector labels must match exactly (e.g. "Software / SaaS / IT")
- Every sector maps to three Damodaran industries whose weights sum to 100
- The ATECO code is informational; it is echoed as given and never changes the weighting
"""

mcp = FastMCP(
    name="Sector Mapping Assistant",
    instructions=SERVER_INSTRUCTIONS,
    lifespan=lifespan,
)


def _app_context(ctx: Context) -> AppContext:
    return ctx.request_context.lifespan_context


# === Lookup Tools ===


@mcp.tool(name="search_ateco_codes")
@log_tool_call
@track_tool_metrics
async def search_ateco_codes_tool(request: AtecoSearchRequest, ctx: Context) -> dict[str, Any]:
    """
    Search Italian ATECO 2-digit divisions.

    Matches the query, case-insensitively, as a substring of the code, its
    description or its macro group name (A Agriculture ... R Healthcare).
    Results keep catalog order and are capped at limit. An empty query lists
    every division regardless of limit.
    """
    app_ctx = _app_context(ctx)

    try:
        query = validate_search_query(request.query).value
        limit = validate_limit(request.limit).value

        if not query:
            entries = get_ateco_2digit_codes(app_ctx.tables)
            return {
                "query": "",
                "results": [to_search_result(e).to_dict() for e in entries],
                "total_found": len(entries),
            }

        results = search_ateco_codes(query, limit=limit, tables=app_ctx.tables)
        if app_ctx.config.metrics.enable_metrics:
            record_ateco_search(len(results))

        return {
            "query": query,
            "results": [r.to_dict() for r in results],
            "total_found": len(results),
        }

    except SectorMappingException as e:
        return handle_tool_error(e, "search_ateco_codes", {"results": [], "total_found": 0})


@mcp.tool()
@log_tool_call
@track_tool_metrics
async def get_ateco_code(request: AtecoCodeRequest, ctx: Context) -> dict[str, Any]:
    """
    Get one ATECO 2-digit division with its description and macro group.

    Dotted codes ("62.01") are looked up by their division. Unknown codes
    return a not_found error.
    """
    app_ctx = _app_context(ctx)

    try:
        code = validate_ateco_code(request.code, field_name="code", required=True).value
        return to_search_result(require_ateco_code(code, app_ctx.tables)).to_dict()
    except SectorMappingException as e:
        return handle_tool_error(e, "get_ateco_code")


@mcp.tool()
@log_tool_call
@track_tool_metrics
async def list_ateco_codes(ctx: Context) -> dict[str, Any]:
    """List all 52 ATECO 2-digit divisions with their macro groups, in catalog order."""
    app_ctx = _app_context(ctx)
    codes = get_ateco_2digit_codes(app_ctx.tables)
    return {"codes": [c.to_dict() for c in codes], "total": len(codes)}


@mcp.tool()
@log_tool_call
@track_tool_metrics
async def list_ateco_macros(ctx: Context) -> dict[str, Any]:
    """List the ten ATECO macro groups with the 2-digit divisions each one contains."""
    app_ctx = _app_context(ctx)
    macros = get_ateco_macros(app_ctx.tables)
    return {"macros": [m.to_dict() for m in macros], "total": len(macros)}


@mcp.tool()
@log_tool_call
@track_tool_metrics
async def resolve_sector(request: SectorResolveRequest, ctx: Context) -> dict[str, Any]:
    """
    Resolve an onboarding sector to three weighted Damodaran industries.

    Returns the primary, secondary and tertiary industries with weights that
    sum to 100, plus disambiguation notes where the sector needs them.
    The ATECO code, if given, is echoed back as given; a code outside the
    sector's suggested divisions is accepted.
    """
    app_ctx = _app_context(ctx)

    try:
        sector = validate_onboarding_sector(request.onboarding_sector).value
        # Rejects malformed codes; the division it returns is not echoed
        validate_ateco_code(request.ateco_code)
    except ValidationError as e:
        if app_ctx.config.metrics.enable_metrics and e.message == "Invalid onboarding sector":
            record_sector_resolution(None)
        return handle_tool_error(e, "resolve_sector")

    ateco_code = request.ateco_code.strip() if request.ateco_code else None

    resolution = resolve_sector_to_damodaran(
        sector,
        ateco_code,
        tables=app_ctx.tables,
        warn_on_unsuggested_ateco=app_ctx.config.lookup.warn_on_unsuggested_ateco,
    )
    if app_ctx.config.metrics.enable_metrics:
        record_sector_resolution(resolution.onboarding_sector.value if resolution else None)

    if resolution is None:
        # Validated labels always have a mapping unless the tables were swapped
        return handle_tool_error(
            ValidationError("Invalid onboarding sector", field="onboardingSector"),
            "resolve_sector",
        )

    result = resolution.to_dict()
    mapping = get_sector_mapping(sector, app_ctx.tables)
    result["suggestedAtecoCodes"] = list(mapping.suggested_ateco_codes) if mapping else []
    return result


@mcp.tool()
@log_tool_call
@track_tool_metrics
async def list_damodaran_industries(request: IndustryListRequest, ctx: Context) -> dict[str, Any]:
    """
    List Damodaran industries.

    By default lists the distinct industries referenced by any sector mapping.
    Set include_unmapped to list the full catalog (94 industries).
    """
    app_ctx = _app_context(ctx)
    if request.include_unmapped:
        industries = get_damodaran_catalog(app_ctx.tables)
    else:
        industries = get_damodaran_industries(app_ctx.tables)
    return {"industries": industries, "total": len(industries)}


@mcp.tool()
@log_tool_call
@track_tool_metrics
async def list_onboarding_sectors(ctx: Context) -> dict[str, Any]:
    """List the onboarding sector labels with their ATECO macro groups and suggested codes."""
    app_ctx = _app_context(ctx)
    return {"sectors": [m.to_dict() for m in app_ctx.tables.sector_mappings]}


# === Health Tools ===


@mcp.tool()
async def ping() -> dict[str, Any]:
    """
    Simple liveness check.

    Returns immediately to confirm the server process is alive.
    For detailed health information, use get_server_health instead.
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@mcp.tool()
async def get_server_health(ctx: Context) -> dict[str, Any]:
    """
    Comprehensive health check with reference data diagnostics.

    Status levels:
    - healthy: reference tables loaded, valid and covering every sector
    - degraded: tables loaded but some sectors have no mapping
    - unhealthy: tables missing or inconsistent
    """
    app_ctx = _app_context(ctx)
    result = await app_ctx.health_checker.check_health()

    if app_ctx.config.metrics.enable_metrics:
        update_health_status(result.status.value, result.uptime_seconds)

    health = result.to_dict()
    health["http_api"] = {
        "enabled": app_ctx.http_server is not None,
        "running": bool(app_ctx.http_server and app_ctx.http_server.is_running),
    }
    return health


def main():
    """Run the MCP server (stdio transport)."""
    mcp.run()


if __name__ == "__main__":
    main()
