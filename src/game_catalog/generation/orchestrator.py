"""
Generation orchestrator that drives the per-entry pipeline.

Each catalog entry goes search -> match -> resolve -> render, strictly
one entry at a time in input order, with a random pause between
entries. Per-entry failures are recorded and the batch carries on;
configuration and authentication failures abort the run.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Protocol
from uuid import UUID, uuid4

from game_catalog.catalog.manager import CatalogEntry, CatalogManager
from game_catalog.config import Settings, get_settings
from game_catalog.exceptions import FatalError
from game_catalog.generation.pacing import RandomDelay
from game_catalog.igdb.contracts import IGDBGame, ResolvedRecord
from game_catalog.igdb.resolver import MetadataResolver
from game_catalog.logger import get_logger
from game_catalog.matching import MatchEngine
from game_catalog.rendering.markdown import MarkdownRenderer

NO_DATA_REASON = "No IGDB data found"


class MetadataSource(Protocol):
    """What the orchestrator needs from the metadata service."""

    async def search_by_name(self, query: str, limit: int | None = None) -> list[IGDBGame]: ...

    async def resolve_entity_graph(self, game_id: int) -> ResolvedRecord | None: ...


class Renderer(Protocol):
    """Persists a resolved entry and returns where it was written."""

    def path_for(self, entry: CatalogEntry) -> Path: ...

    def write(self, entry: CatalogEntry, record: ResolvedRecord) -> Path: ...


class OutcomeStatus(str, Enum):
    """Terminal state of one entry."""

    SUCCEEDED = "succeeded"
    UNMATCHED = "unmatched"
    FAILED = "failed"


class EntryStage(str, Enum):
    """Pipeline stage an entry is in."""

    PENDING = "pending"
    SEARCHING = "searching"
    MATCHING = "matching"
    RESOLVING = "resolving"
    RENDERING = "rendering"
    DONE = "done"


@dataclass(frozen=True)
class ProcessingOutcome:
    """Result of processing one catalog entry."""

    entry: CatalogEntry
    status: OutcomeStatus
    reason: str | None = None
    document_path: Path | None = None

    @classmethod
    def succeeded(cls, entry: CatalogEntry, document_path: Path) -> "ProcessingOutcome":
        return cls(entry=entry, status=OutcomeStatus.SUCCEEDED, document_path=document_path)

    @classmethod
    def unmatched(cls, entry: CatalogEntry, reason: str = NO_DATA_REASON) -> "ProcessingOutcome":
        return cls(entry=entry, status=OutcomeStatus.UNMATCHED, reason=reason)

    @classmethod
    def failed(cls, entry: CatalogEntry, reason: str) -> "ProcessingOutcome":
        return cls(entry=entry, status=OutcomeStatus.FAILED, reason=reason)


@dataclass
class GenerationProgress:
    """Tracks progress of a generation run."""

    total: int
    completed: int = 0
    succeeded: int = 0
    unmatched: int = 0
    failed: int = 0
    current_entry: str | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def percentage(self) -> float:
        """Get completion percentage."""
        if self.total == 0:
            return 100.0
        return (self.completed / self.total) * 100

    def record(self, outcome: ProcessingOutcome) -> None:
        self.completed += 1
        if outcome.status is OutcomeStatus.SUCCEEDED:
            self.succeeded += 1
        elif outcome.status is OutcomeStatus.UNMATCHED:
            self.unmatched += 1
        else:
            self.failed += 1


@dataclass
class BatchReport:
    """Result of a complete generation run."""

    run_id: UUID
    started_at: datetime
    completed_at: datetime
    outcomes: list[ProcessingOutcome]
    report_path: Path | None = None

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def succeeded(self) -> int:
        return self._count(OutcomeStatus.SUCCEEDED)

    @property
    def unmatched(self) -> int:
        return self._count(OutcomeStatus.UNMATCHED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def followups(self) -> list[ProcessingOutcome]:
        """Entries that did not succeed, in input order."""
        return [o for o in self.outcomes if o.status is not OutcomeStatus.SUCCEEDED]

    @property
    def duration_seconds(self) -> float:
        """Get total duration in seconds."""
        return (self.completed_at - self.started_at).total_seconds()


class BatchOrchestrator:
    """
    Orchestrates note generation for a list of catalog entries.

    Example:
        >>> orchestrator = BatchOrchestrator(resolver=resolver, renderer=renderer, pacer=pacer)
        >>> report = await orchestrator.run(entries)
        >>> print(report.succeeded, report.unmatched, report.failed)
    """

    def __init__(
        self,
        *,
        resolver: MetadataSource,
        renderer: Renderer,
        pacer: RandomDelay,
        matcher: MatchEngine | None = None,
        catalog: CatalogManager | None = None,
        report_path: Path | None = None,
        search_limit: int | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            resolver: IGDB search and resolution
            renderer: Writes resolved notes
            pacer: Pause between entries
            matcher: Candidate selection (default thresholds if None)
            catalog: Writes the follow-up report
            report_path: Follow-up report location (no report written if None)
            search_limit: Candidates requested per search
        """
        self._resolver = resolver
        self._renderer = renderer
        self._pacer = pacer
        self._matcher = matcher or MatchEngine()
        self._catalog = catalog or CatalogManager()
        self._report_path = report_path
        self._search_limit = search_limit
        # Note path -> name of the entry that wrote it during the current run
        self._written: dict[Path, str] = {}
        self._logger = get_logger(__name__, component="orchestrator")

    @classmethod
    def from_settings(
        cls,
        resolver: MetadataSource,
        *,
        settings: Settings | None = None,
        output_dir: Path | None = None,
        report_path: Path | None = None,
    ) -> "BatchOrchestrator":
        """Wire an orchestrator from application settings."""
        settings = settings or get_settings()
        catalog = CatalogManager()
        return cls(
            resolver=resolver,
            renderer=MarkdownRenderer(
                output_dir=output_dir or settings.paths.output_dir,
                catalog=catalog,
            ),
            pacer=RandomDelay(settings.pacing),
            catalog=catalog,
            report_path=report_path or settings.paths.report_path,
            search_limit=settings.igdb.search_limit,
        )

    async def run(
        self,
        entries: Sequence[CatalogEntry],
        *,
        on_progress: Callable[[GenerationProgress], None] | None = None,
    ) -> BatchReport:
        """
        Process every entry in order and write the follow-up report.

        Args:
            entries: Catalog entries
            on_progress: Called after each entry's outcome is recorded

        Returns:
            BatchReport: Outcomes and summary counts

        Raises:
            FatalError: Configuration, authentication or token storage failure
        """
        run_id = uuid4()
        started_at = datetime.now(timezone.utc)
        outcomes: list[ProcessingOutcome] = []
        progress = GenerationProgress(total=len(entries))
        self._written = {}

        self._logger.info("Starting generation", run_id=str(run_id), total_entries=len(entries))

        for index, entry in enumerate(entries):
            progress.current_entry = entry.name
            outcome = await self.process_entry(entry)
            outcomes.append(outcome)
            progress.record(outcome)

            if on_progress:
                on_progress(progress)

            if index < len(entries) - 1:
                await self._pacer.wait()

        report = BatchReport(
            run_id=run_id,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            outcomes=outcomes,
        )
        report.report_path = self._write_report(report)

        self._logger.info(
            "Generation complete",
            run_id=str(run_id),
            duration_seconds=round(report.duration_seconds, 2),
            succeeded=report.succeeded,
            unmatched=report.unmatched,
            failed=report.failed,
        )
        for outcome in report.followups:
            self._logger.warning(
                "Entry needs follow-up",
                name=outcome.entry.name,
                status=outcome.status.value,
                reason=outcome.reason,
            )

        return report

    async def process_entry(self, entry: CatalogEntry) -> ProcessingOutcome:
        """
        Run one entry through the pipeline, containing non-fatal failures.

        Raises:
            FatalError: Configuration, authentication or token storage failure
        """
        logger = self._logger.bind(entry=entry.name)
        logger.info("Processing entry", stage=EntryStage.PENDING.value)

        try:
            record = await self.prepare_entry(entry)
            if record is None:
                logger.warning("No IGDB data found", stage=EntryStage.DONE.value)
                return ProcessingOutcome.unmatched(entry)

            logger.debug("Rendering entry", stage=EntryStage.RENDERING.value)
            document_path = self._renderer.path_for(entry)
            owner = self._written.get(document_path)
            if owner is not None:
                logger.error(
                    "Note path already written",
                    path=str(document_path),
                    other_entry=owner,
                )
                return ProcessingOutcome.failed(
                    entry, f"note path {document_path} already written for {owner}"
                )
            document_path = self._renderer.write(entry, record)
            self._written[document_path] = entry.name
        except FatalError:
            raise
        except Exception as e:
            logger.error("Entry failed", error=str(e), error_type=type(e).__name__)
            return ProcessingOutcome.failed(entry, str(e) or type(e).__name__)

        logger.info("Entry succeeded", stage=EntryStage.DONE.value, path=str(document_path))
        return ProcessingOutcome.succeeded(entry, document_path)

    async def prepare_entry(self, entry: CatalogEntry) -> ResolvedRecord | None:
        """
        Search, match and resolve an entry without rendering it.

        Returns:
            ResolvedRecord | None: None when IGDB has no usable data for the entry
        """
        logger = self._logger.bind(entry=entry.name)

        logger.debug("Searching", stage=EntryStage.SEARCHING.value)
        candidates = await self._resolver.search_by_name(entry.name, self._search_limit)
        if not candidates:
            return None

        logger.debug("Matching", stage=EntryStage.MATCHING.value, candidates=len(candidates))
        match = self._matcher.best_match(entry.name, candidates)
        if match is None:
            return None

        logger.info(
            "Selected candidate",
            candidate=match.candidate.name,
            game_id=match.candidate.id,
            score=round(match.score, 2),
        )

        logger.debug("Resolving", stage=EntryStage.RESOLVING.value, game_id=match.candidate.id)
        return await self._resolver.resolve_entity_graph(match.candidate.id)

    def _write_report(self, report: BatchReport) -> Path | None:
        if self._report_path is None:
            return None

        rows = [(outcome.entry, outcome.reason or "") for outcome in report.followups]
        try:
            if not rows:
                # The report only ever lists the latest run
                self._report_path.unlink(missing_ok=True)
                return None
            return self._catalog.write_followup_report(rows, self._report_path)
        except OSError as e:
            # The summary is still returned; the caller sees report_path=None
            self._logger.error(
                "Failed to write follow-up report",
                path=str(self._report_path),
                error=str(e),
            )
            return None
