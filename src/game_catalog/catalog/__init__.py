"""
Game Catalog Management.

Handles reading the catalog CSV, entry lookup, platform naming,
and the follow-up report of unprocessed games.
"""

from game_catalog.catalog.manager import (
    REPORT_HEADER,
    CatalogEntry,
    CatalogManager,
)

__all__ = [
    "REPORT_HEADER",
    "CatalogEntry",
    "CatalogManager",
]
