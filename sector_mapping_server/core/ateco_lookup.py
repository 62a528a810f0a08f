"""
Lookup and search over the ATECO 2-digit catalog.

Matching is literal: the query is lower-cased and trimmed, then compared as a
substring against each row's code, description and macro name. Results keep
catalog order.
"""

import logging

from ..models.sector_models import Ateco2Digit, AtecoMacro, AtecoSearchResult
from .errors import NotFoundError
from .reference_data import ReferenceTables, get_reference_tables

logger = logging.getLogger(__name__)


def to_search_result(entry: Ateco2Digit) -> AtecoSearchResult:
    """Project a catalog row into a search result with its display label."""
    return AtecoSearchResult.from_entry(entry)


def _matches(entry: Ateco2Digit, needle: str) -> bool:
    return (
        needle in entry.code
        or needle in entry.description.lower()
        or needle in entry.macro_name.lower()
    )


def search_ateco_codes(
    query: str, limit: int | None = None, tables: ReferenceTables | None = None
) -> list[AtecoSearchResult]:
    """
    Search ATECO codes by code, description or macro name.

    Args:
        query: Free-text query; compared case-insensitively after trimming
        limit: Optional cap on the number of results
        tables: Reference tables to search (process-wide tables by default)

    Returns:
        Matching rows in catalog order. Empty when nothing matches or the
        query is blank.
    """
    tables = tables or get_reference_tables()
    needle = query.lower().strip()

    if not needle:
        return []

    results = [to_search_result(entry) for entry in tables.ateco_codes if _matches(entry, needle)]

    if limit is not None:
        results = results[:limit]

    logger.debug(f"ATECO search '{needle}' matched {len(results)} rows")
    return results


def get_ateco_2digit_codes(tables: ReferenceTables | None = None) -> list[Ateco2Digit]:
    """Get the whole ATECO 2-digit catalog in declaration order."""
    tables = tables or get_reference_tables()
    return list(tables.ateco_codes)


def get_ateco_by_code(code: str, tables: ReferenceTables | None = None) -> Ateco2Digit | None:
    """Get one catalog row by its exact 2-digit code."""
    tables = tables or get_reference_tables()
    return tables.ateco_by_code.get(code)


def get_ateco_macros(tables: ReferenceTables | None = None) -> list[AtecoMacro]:
    """Get the ATECO macro sectors in declaration order."""
    tables = tables or get_reference_tables()
    return list(tables.macros)


def require_ateco_code(code: str, tables: ReferenceTables | None = None) -> Ateco2Digit:
    """
    Get one catalog row by code, failing when it is not catalogued.

    Raises:
        NotFoundError: If no row has this code
    """
    entry = get_ateco_by_code(code, tables)
    if entry is None:
        raise NotFoundError("ATECO code", code)
    return entry
