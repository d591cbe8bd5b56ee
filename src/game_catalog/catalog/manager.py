"""
Game Catalog Manager.

Reads the catalog CSV of played games, looks entries up by name, and
writes the follow-up report of entries that could not be generated.
"""

import csv
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

REPORT_HEADER = ("name", "status", "platform", "notes", "reason")

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class CatalogEntry:
    """A game row from the catalog CSV."""

    name: str
    status: str
    platform: str
    notes: str | None = None

    def to_row(self) -> list[str]:
        """Identity fields as CSV cells."""
        return [self.name, self.status, self.platform, self.notes or ""]


class CatalogManager:
    """
    Loads catalog entries and writes follow-up reports.

    Catalog CSV layout: a header line, then ``name,status,platform[,notes]``.
    Rows with fewer than three fields or an empty name are skipped.
    """

    MIN_FIELDS = 3

    PLATFORM_NAMES: dict[str, str] = {
        "pc": "PC",
        "ps5": "PlayStation 5",
        "ps4": "PlayStation 4",
        "ps3": "PlayStation 3",
        "psp": "PlayStation Portable",
        "xbox 360": "Xbox 360",
        "xbok 360": "Xbox 360",  # typo found in real catalogs
        "nintendo switch": "Nintendo Switch",
        "vr": "VR",
        "tabletop": "Tabletop",
        "mobile": "Mobile",
    }

    def load(self, path: Path) -> list[CatalogEntry]:
        """
        Read all catalog entries from a CSV file.

        Args:
            path: Catalog CSV path

        Returns:
            List of entries in file order
        """
        with path.open(encoding="utf-8", newline="") as f:
            entries = self.parse(f)

        logger.info("Loaded catalog", path=str(path), entries=len(entries))
        return entries

    def parse(self, lines: Iterable[str]) -> list[CatalogEntry]:
        """Parse CSV lines (header included) into entries."""
        rows = [row for row in csv.reader(lines) if any(cell.strip() for cell in row)]

        entries: list[CatalogEntry] = []
        skipped = 0
        for row in rows[1:]:
            entry = self._parse_row(row)
            if entry is None:
                skipped += 1
                continue
            entries.append(entry)

        if skipped:
            logger.debug("Skipped malformed catalog rows", skipped=skipped)
        return entries

    def _parse_row(self, row: Sequence[str]) -> CatalogEntry | None:
        if len(row) < self.MIN_FIELDS:
            return None

        fields = [cell.replace('"', "").strip() for cell in row]
        name, status, platform = fields[0], fields[1], fields[2]
        if not name:
            return None

        notes = fields[3] if len(fields) > 3 and fields[3] else None
        return CatalogEntry(name=name, status=status, platform=platform, notes=notes)

    def find_entry_by_name(
        self,
        entries: Sequence[CatalogEntry],
        search_name: str,
    ) -> CatalogEntry | None:
        """
        Find an entry by name, tolerating case and punctuation differences.

        Tries, in order: exact case-insensitive match, containment in
        either direction, then containment after stripping punctuation
        and collapsing whitespace.
        """
        search = search_name.lower().strip()
        if not search:
            return None

        for entry in entries:
            if entry.name.lower().strip() == search:
                return entry

        for entry in entries:
            name = entry.name.lower()
            if search in name or name in search:
                return entry

        clean_search = self.clean_name(search_name)
        if not clean_search:
            return None

        for entry in entries:
            clean = self.clean_name(entry.name)
            if clean and (clean_search in clean or clean in clean_search):
                return entry

        return None

    @staticmethod
    def clean_name(name: str) -> str:
        """Lowercase, drop punctuation, and collapse whitespace."""
        stripped = _NON_WORD.sub("", name.lower())
        return _WHITESPACE.sub(" ", stripped).strip()

    def normalize_platform(self, platform: str) -> str:
        """Map shorthand platform names to display names; unknown ones pass through."""
        return self.PLATFORM_NAMES.get(platform.lower().strip(), platform)

    def write_followup_report(
        self,
        rows: Sequence[tuple[CatalogEntry, str]],
        path: Path,
    ) -> Path | None:
        """
        Write entries that need manual follow-up, with the reason for each.

        Args:
            rows: (entry, reason) pairs
            path: Report CSV path

        Returns:
            Path of the written report, or None when there is nothing to report
        """
        if not rows:
            return None

        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(REPORT_HEADER)
            for entry, reason in rows:
                writer.writerow([*entry.to_row(), reason])

        logger.info("Saved follow-up report", path=str(path), entries=len(rows))
        return path
