"""
Game Catalog Generator.

Turns a CSV catalog of played games into markdown notes
enriched with metadata from the IGDB API.
"""

from game_catalog.config import Settings, get_settings
from game_catalog.logger import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
