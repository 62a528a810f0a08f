#!/usr/bin/env python3
"""
Command-line interface for the Sector Mapping Server.

Provides commands for:
- Running the MCP server or the HTTP API
- Searching ATECO codes and resolving onboarding sectors from a terminal
- Listing Damodaran industries and onboarding sectors
"""

import argparse
import json
import logging
import sys

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """Configure logging for CLI operations."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def cmd_serve(args):
    """Run the MCP server."""
    logger.info("Starting Sector Mapping MCP Server...")

    from .server import mcp

    mcp.run()


def cmd_http(args):
    """Run the HTTP API in the foreground."""
    from .http_server import create_http_server

    server = create_http_server()
    server.config.enabled = True
    if args.host:
        server.config.host = args.host
    if args.port:
        server.config.port = args.port

    server.run()


def cmd_search(args):
    """Search ATECO 2-digit codes."""
    from .core.ateco_lookup import search_ateco_codes
    from .core.validation import validate_limit, validate_search_query

    query = validate_search_query(args.query).value
    limit = validate_limit(args.limit).value
    results = search_ateco_codes(query, limit=limit)

    if args.json:
        print(json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=2))
        return

    if not results:
        print(f"No ATECO codes match '{query}'")
        return

    print(f"\nATECO codes matching '{query}':")
    print("-" * 60)
    for result in results:
        print(f"  [{result.code}] {result.description}")
        print(f"       {result.macro_code} - {result.macro_name}")


def cmd_resolve(args):
    """Resolve an onboarding sector to weighted Damodaran industries."""
    from .core.sector_resolver import get_suggested_ateco_codes, resolve_sector_to_damodaran
    from .core.validation import validate_ateco_code, validate_onboarding_sector

    sector = validate_onboarding_sector(args.sector).value
    validate_ateco_code(args.ateco)
    ateco_code = args.ateco.strip() if args.ateco else None
    resolution = resolve_sector_to_damodaran(sector, ateco_code)

    if resolution is None:
        print(f"Sector '{args.sector}' has no mapping")
        sys.exit(1)

    if args.json:
        print(json.dumps(resolution.to_dict(), ensure_ascii=False, indent=2))
        return

    industries = resolution.damodaran_industries
    weights = industries.weights

    print(f"\n{resolution.onboarding_sector.value}")
    print("=" * 60)
    if resolution.ateco_code:
        print(f"ATECO code: {resolution.ateco_code}")
    print(f"Suggested ATECO codes: {', '.join(get_suggested_ateco_codes(sector))}")
    print()
    print(f"  {weights.primary:3d}%  {industries.primary}")
    print(f"  {weights.secondary:3d}%  {industries.secondary}")
    print(f"  {weights.tertiary:3d}%  {industries.tertiary}")
    if resolution.disambiguation_notes:
        print(f"\nNotes: {resolution.disambiguation_notes}")


def cmd_industries(args):
    """List Damodaran industries."""
    from .core.damodaran_catalog import get_damodaran_catalog, get_damodaran_industries

    industries = get_damodaran_catalog() if args.all else get_damodaran_industries()
    for industry in industries:
        print(industry)


def cmd_sectors(args):
    """List onboarding sectors with their suggested ATECO codes."""
    from .core.reference_data import get_reference_tables

    for mapping in get_reference_tables().sector_mappings:
        codes = ", ".join(mapping.suggested_ateco_codes)
        print(f"{mapping.onboarding_sector.value:40} {mapping.ateco_macro_primary.value}  [{codes}]")


def cmd_stats(args):
    """Show reference data statistics."""
    from .core.reference_data import get_reference_tables

    stats = get_reference_tables().get_statistics()

    print("\nSector Mapping Reference Data")
    print("=" * 40)
    print(f"ATECO macro groups:    {stats['ateco_macros']}")
    print(f"ATECO 2-digit codes:   {stats['ateco_codes']}")
    print(f"Damodaran industries:  {stats['damodaran_industries']}")
    print(f"Sector mappings:       {stats['sector_mappings']}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="Sector Mapping Server CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sector-mapping serve                                Run the MCP server
  sector-mapping http --port 8080                     Run the HTTP API
  sector-mapping search software                      Search ATECO codes
  sector-mapping resolve "Software / SaaS / IT" --ateco 62
  sector-mapping industries --all                     Full Damodaran list
        """,
    )

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the MCP server")
    serve_parser.set_defaults(func=cmd_serve)

    # http command
    http_parser = subparsers.add_parser("http", help="Run the HTTP API")
    http_parser.add_argument("--host", type=str, help="Host to bind to (overrides environment)")
    http_parser.add_argument("--port", type=int, help="Port to listen on (overrides environment)")
    http_parser.set_defaults(func=cmd_http)

    # search command
    search_parser = subparsers.add_parser("search", help="Search ATECO 2-digit codes")
    search_parser.add_argument("query", type=str, help="Code, description or macro name fragment")
    search_parser.add_argument("--limit", type=int, default=20, help="Maximum results (default: 20)")
    search_parser.add_argument("--json", action="store_true", help="Print JSON")
    search_parser.set_defaults(func=cmd_search)

    # resolve command
    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve an onboarding sector to Damodaran industries"
    )
    resolve_parser.add_argument("sector", type=str, help="Exact onboarding sector label")
    resolve_parser.add_argument("--ateco", type=str, help="ATECO code chosen by the user")
    resolve_parser.add_argument("--json", action="store_true", help="Print JSON")
    resolve_parser.set_defaults(func=cmd_resolve)

    # industries command
    industries_parser = subparsers.add_parser("industries", help="List Damodaran industries")
    industries_parser.add_argument(
        "--all", action="store_true", help="List the full catalog, not only mapped industries"
    )
    industries_parser.set_defaults(func=cmd_industries)

    # sectors command
    sectors_parser = subparsers.add_parser("sectors", help="List onboarding sectors")
    sectors_parser.set_defaults(func=cmd_sectors)

    # stats command
    stats_parser = subparsers.add_parser("stats", help="Show reference data statistics")
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def main(argv: list[str] | None = None):
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.debug)

    from .core.errors import ValidationError

    try:
        args.func(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:
        logger.error(f"Error: {e}")
        if args.debug:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
