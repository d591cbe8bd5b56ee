"""
Batch note generation.

The orchestrator runs catalog entries through search, matching,
resolution and rendering, pausing randomly between entries.
"""

from game_catalog.generation.orchestrator import (
    NO_DATA_REASON,
    BatchOrchestrator,
    BatchReport,
    EntryStage,
    GenerationProgress,
    MetadataSource,
    OutcomeStatus,
    ProcessingOutcome,
    Renderer,
)
from game_catalog.generation.pacing import RandomDelay

__all__ = [
    "NO_DATA_REASON",
    "BatchOrchestrator",
    "BatchReport",
    "EntryStage",
    "GenerationProgress",
    "MetadataSource",
    "OutcomeStatus",
    "ProcessingOutcome",
    "RandomDelay",
    "Renderer",
]
