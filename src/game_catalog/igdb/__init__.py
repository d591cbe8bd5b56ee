"""
IGDB integration.

Data contracts for IGDB records, the apicalypse query builder, and the
resolver that searches games and expands their relations.
"""

from game_catalog.igdb.contracts import (
    GAME_FIELDS,
    Company,
    IGDBGame,
    InvolvedCompany,
    NamedEntity,
    Platform,
    ResolvedRecord,
    names_in_order,
    split_company_roles,
)
from game_catalog.igdb.query import build_query, escape_search
from game_catalog.igdb.resolver import MetadataResolver

__all__ = [
    "GAME_FIELDS",
    "Company",
    "IGDBGame",
    "InvolvedCompany",
    "MetadataResolver",
    "NamedEntity",
    "Platform",
    "ResolvedRecord",
    "build_query",
    "escape_search",
    "names_in_order",
    "split_company_roles",
]
