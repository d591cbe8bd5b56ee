"""
Markdown note writer.

Maps a catalog entry and its resolved IGDB record to a note with
YAML front matter, and writes one file per game.
"""

import re
from pathlib import Path

from pydantic import BaseModel, Field

from game_catalog.catalog.manager import CatalogEntry, CatalogManager
from game_catalog.igdb.contracts import ResolvedRecord
from game_catalog.logger import get_logger

RELEASE_PLACEHOLDER = "YYYY-MM-DD"
GAMEPLAY_PLACEHOLDER = "A description of the gameplay and its mechanics"
SYNOPSIS_PLACEHOLDER = "A short synopsis of the story or the world of the game"
NOTES_PLACEHOLDER = "(Notes about the gameplay as a bullet list)"

_UNSAFE_CHARS = re.compile(r"[^\w\s-]")
_SPACES = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


class NoteData(BaseModel):
    """Values substituted into the note template."""

    title: str
    status: str
    platform: str
    genres: list[str] = Field(default_factory=list)
    game_modes: list[str] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    player_perspectives: list[str] = Field(default_factory=list)
    game_engines: list[str] = Field(default_factory=list)
    developers: list[str] = Field(default_factory=list)
    publishers: list[str] = Field(default_factory=list)
    release_date: str | None = None
    summary: str | None = None
    storyline: str | None = None
    notes: str | None = None


def sanitize_filename(name: str) -> str:
    """
    Make a game name safe for use as a file name.

    Example:
        >>> sanitize_filename("Baldur's Gate 3: Director's Cut")
        'baldurs-gate-3-directors-cut'
    """
    cleaned = _UNSAFE_CHARS.sub("", name)
    cleaned = _SPACES.sub("-", cleaned.strip())
    cleaned = _HYPHENS.sub("-", cleaned)
    return cleaned.strip("-").lower()


def _quote(value: str) -> str:
    """Double-quoted YAML scalar."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _yaml_list(key: str, items: list[str]) -> str:
    if not items:
        return f"{key}:"
    lines = "\n".join(f"  - {_quote(item)}" for item in items)
    return f"{key}:\n{lines}"


def _inline_list(key: str, items: list[str]) -> str:
    if not items:
        return f"{key}:"
    return f"{key}: " + ", ".join(_quote(item) for item in items)


class MarkdownRenderer:
    """
    Renders and writes game notes.

    Example:
        >>> renderer = MarkdownRenderer(output_dir=Path("generated-games"))
        >>> path = renderer.write(entry, record)
    """

    def __init__(
        self,
        *,
        output_dir: Path,
        catalog: CatalogManager | None = None,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            output_dir: Directory for generated notes (created on first write)
            catalog: Used for platform display names
        """
        self._output_dir = output_dir
        self._catalog = catalog or CatalogManager()
        self._logger = get_logger(__name__, component="markdown_renderer")

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def build_note_data(self, entry: CatalogEntry, record: ResolvedRecord) -> NoteData:
        """Combine catalog fields with resolved IGDB metadata."""
        return NoteData(
            title=record.name,
            status=entry.status,
            platform=self._catalog.normalize_platform(entry.platform),
            genres=record.genres,
            game_modes=record.game_modes,
            themes=record.themes,
            player_perspectives=record.player_perspectives,
            game_engines=record.game_engines,
            developers=record.developers,
            publishers=record.publishers,
            release_date=record.release_date,
            summary=record.summary,
            storyline=record.storyline,
            notes=entry.notes,
        )

    def render(self, entry: CatalogEntry, record: ResolvedRecord) -> str:
        """Render the note for an entry as a markdown string."""
        return self.render_note(self.build_note_data(entry, record))

    def render_note(self, data: NoteData) -> str:
        front_matter = [
            "---",
            "class: game",
            f"status: {data.status}",
            _yaml_list("game-genre", data.genres),
            _yaml_list("game-modes", data.game_modes),
            _yaml_list("game-genre-tags", data.themes),
            _yaml_list("player-perspective", data.player_perspectives),
            f"platform: {data.platform}",
            _inline_list("engine", data.game_engines),
            _yaml_list("developer", [f"[[{name}]]" for name in data.developers]),
            _yaml_list("publisher", [f"[[{name}]]" for name in data.publishers]),
            "director:",
            f"release: {data.release_date or RELEASE_PLACEHOLDER}",
            "---",
        ]
        body = [
            "# Gameplay",
            data.summary or GAMEPLAY_PLACEHOLDER,
            "",
            "# Synopsis",
            data.storyline or SYNOPSIS_PLACEHOLDER,
            "",
            "# Review",
            "Leave empty",
            "",
            "## Notes",
            f"- {data.notes or NOTES_PLACEHOLDER}",
        ]
        return "\n".join(front_matter + body) + "\n"

    def path_for(self, entry: CatalogEntry) -> Path:
        """Output path for an entry's note."""
        filename = sanitize_filename(entry.name)
        if not filename:
            raise ValueError(f"Cannot derive a file name from {entry.name!r}")
        return self._output_dir / f"{filename}.md"

    def write(self, entry: CatalogEntry, record: ResolvedRecord) -> Path:
        """
        Render and write an entry's note, overwriting any previous version.

        Returns:
            Path: Written file
        """
        output_path = self.path_for(entry)
        markdown = self.render(entry, record)

        self._output_dir.mkdir(parents=True, exist_ok=True)
        output_path.write_text(markdown, encoding="utf-8")

        self._logger.info("Wrote note", name=entry.name, output_path=str(output_path))
        return output_path
