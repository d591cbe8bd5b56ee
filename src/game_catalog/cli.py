"""
Command-line interface for the Game Catalog Generator.

Provides commands to generate notes for the whole catalog or a single
game, and to manage the cached Twitch access token.
"""

import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from game_catalog.config import get_settings
from game_catalog.exceptions import FatalError
from game_catalog.logger import get_logger, setup_logging

# Initialize logging
setup_logging()
logger = get_logger(__name__, component="cli")


class CLIOutput(BaseModel):
    """Structured output for CLI commands."""

    success: bool
    command: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    data: dict[str, Any] | list[Any] | None = None
    error: str | None = None


def print_json(output: CLIOutput) -> None:
    """Print output as formatted JSON."""
    print(json.dumps(output.model_dump(), indent=2, default=str))


async def cmd_generate(csv_path: Path | None = None, output_dir: Path | None = None) -> None:
    """Generate notes for every game in the catalog."""
    from game_catalog.catalog import CatalogManager
    from game_catalog.generation import BatchOrchestrator, GenerationProgress
    from game_catalog.igdb import MetadataResolver

    settings = get_settings()
    csv_path = csv_path or settings.paths.csv_path
    output_dir = output_dir or settings.paths.output_dir

    entries = CatalogManager().load(csv_path)

    print("Game Catalog Generator")
    print(f"{'='*50}")
    print(f"  Catalog: {csv_path}")
    print(f"  Output: {output_dir}")
    print(f"  Games: {len(entries)}")
    print(f"{'='*50}\n")

    def on_progress(progress: GenerationProgress) -> None:
        bar_length = 30
        filled = int(bar_length * progress.percentage / 100)
        bar = "█" * filled + "░" * (bar_length - filled)
        print(
            f"\r  [{bar}] {progress.percentage:.1f}% "
            f"| {progress.completed}/{progress.total} "
            f"| {(progress.current_entry or '')[:30]:<30}",
            end="",
            flush=True,
        )

    async with MetadataResolver() as resolver:
        orchestrator = BatchOrchestrator.from_settings(resolver, output_dir=output_dir)
        report = await orchestrator.run(entries, on_progress=on_progress)

    print("\n")

    print("Generation Complete!")
    print(f"{'='*50}")
    print(f"  Run ID: {report.run_id}")
    print(f"  Duration: {report.duration_seconds:.2f}s")
    print(f"  Succeeded: {report.succeeded}")
    print(f"  Unmatched: {report.unmatched}")
    print(f"  Failed: {report.failed}")

    if report.followups:
        print(f"\nNeeds follow-up ({len(report.followups)}):")
        for outcome in report.followups[:10]:
            print(f"    - {outcome.entry.name}: {(outcome.reason or '')[:60]}")
        if report.report_path:
            print(f"\nReport: {report.report_path}")


async def cmd_generate_single(
    name: str,
    *,
    save: bool = False,
    csv_path: Path | None = None,
    output_dir: Path | None = None,
) -> None:
    """Generate the note for one game; print it, or write it with --save."""
    from game_catalog.catalog import CatalogManager
    from game_catalog.generation import BatchOrchestrator, OutcomeStatus
    from game_catalog.igdb import MetadataResolver
    from game_catalog.rendering import MarkdownRenderer

    settings = get_settings()
    catalog = CatalogManager()
    entries = catalog.load(csv_path or settings.paths.csv_path)

    entry = catalog.find_entry_by_name(entries, name)
    if entry is None:
        print_json(
            CLIOutput(
                success=False,
                command="generate:single",
                error=f'Game "{name}" not found in catalog',
            )
        )
        sys.exit(1)

    logger.info("Generating single note", requested=name, entry=entry.name)

    async with MetadataResolver() as resolver:
        orchestrator = BatchOrchestrator.from_settings(resolver, output_dir=output_dir)

        if save:
            outcome = await orchestrator.process_entry(entry)
            print_json(
                CLIOutput(
                    success=outcome.status is OutcomeStatus.SUCCEEDED,
                    command="generate:single",
                    data={
                        "name": entry.name,
                        "status": outcome.status.value,
                        "path": str(outcome.document_path) if outcome.document_path else None,
                    },
                    error=outcome.reason,
                )
            )
            if outcome.status is not OutcomeStatus.SUCCEEDED:
                sys.exit(1)
            return

        record = await orchestrator.prepare_entry(entry)

    if record is None:
        print_json(
            CLIOutput(
                success=False,
                command="generate:single",
                error=f'No IGDB data found for "{entry.name}"',
            )
        )
        sys.exit(1)

    renderer = MarkdownRenderer(output_dir=output_dir or settings.paths.output_dir)
    print(renderer.render(entry, record), end="")


async def cmd_token(refresh: bool = False) -> None:
    """Ensure a valid access token is cached, optionally forcing a refresh."""
    from game_catalog.auth import AuthClient

    async with AuthClient() as auth:
        token = await auth.refresh_token() if refresh else await auth.get_valid_token()

    print_json(
        CLIOutput(
            success=True,
            command="token",
            data={
                "refreshed": refresh,
                "token_preview": f"{token[:20]}...",
                "token_path": str(get_settings().paths.token_path),
            },
        )
    )


async def cmd_test_config() -> None:
    """Test configuration loading."""
    settings = get_settings()

    output = CLIOutput(
        success=True,
        command="test-config",
        data={
            "igdb_base_url": settings.igdb.base_url,
            "token_url": settings.twitch.token_url,
            "grant_type": settings.twitch.grant_type,
            "credentials_configured": settings.twitch.is_configured,
            "search_limit": settings.igdb.search_limit,
            "pacing_seconds": [
                settings.pacing.min_delay_seconds,
                settings.pacing.max_delay_seconds,
            ],
            "csv_path": str(settings.paths.csv_path),
            "output_dir": str(settings.paths.output_dir),
            "report_path": str(settings.paths.report_path),
            "token_path": str(settings.paths.token_path),
            "log_level": settings.logging.level,
        },
    )
    print_json(output)


def print_usage() -> None:
    """Print CLI usage information."""
    usage = """
Game Catalog Generator CLI
==========================

Usage: game-catalog <command> [arguments]

Commands:
  generate                    Generate notes for every game in the catalog
  generate:single <name>      Generate the note for one game (printed to stdout)
  token                       Ensure a valid access token is cached
  test-config                 Test configuration loading

Options:
  --csv <path>                Catalog CSV (default: games.csv)
  --output <dir>              Output directory (default: generated-games)
  --save                      generate:single only: write the note to the output directory
  --refresh, -r               token only: force a new token exchange

Examples:
  game-catalog generate --csv games.csv --output notes
  game-catalog generate:single "Chrono Trigger" --save
  game-catalog token --refresh
"""
    print(usage)


def _option(args: list[str], flag: str) -> str | None:
    """Value following ``flag`` in ``args``, if any."""
    if flag in args:
        idx = args.index(flag)
        if idx + 1 < len(args):
            return args[idx + 1]
    return None


def _path_option(args: list[str], flag: str) -> Path | None:
    value = _option(args, flag)
    return Path(value) if value else None


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = sys.argv[1:] if argv is None else argv

    if not args:
        print_usage()
        sys.exit(1)

    command = args[0]

    try:
        if command == "test-config":
            asyncio.run(cmd_test_config())

        elif command == "generate":
            asyncio.run(
                cmd_generate(
                    csv_path=_path_option(args, "--csv"),
                    output_dir=_path_option(args, "--output"),
                )
            )

        elif command == "generate:single":
            if len(args) < 2 or args[1].startswith("--"):
                print("Error: game name required")
                sys.exit(1)
            asyncio.run(
                cmd_generate_single(
                    args[1],
                    save="--save" in args,
                    csv_path=_path_option(args, "--csv"),
                    output_dir=_path_option(args, "--output"),
                )
            )

        elif command == "token":
            asyncio.run(cmd_token(refresh="--refresh" in args or "-r" in args))

        elif command in ("help", "--help", "-h"):
            print_usage()

        else:
            print(f"Unknown command: {command}")
            print_usage()
            sys.exit(1)

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except FatalError as e:
        logger.error(
            "Fatal error",
            error=str(e),
            error_type=type(e).__name__,
            status_code=e.status_code,
        )
        print_json(CLIOutput(success=False, command=command, error=str(e)))
        sys.exit(1)
    except Exception as e:
        logger.exception("CLI error", error=str(e))
        print_json(CLIOutput(success=False, command=command, error=str(e)))
        sys.exit(1)


if __name__ == "__main__":
    main()
