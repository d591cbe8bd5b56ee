"""Tests for the catalog manager."""

import csv
from pathlib import Path

import pytest

from game_catalog.catalog import REPORT_HEADER, CatalogEntry, CatalogManager

CATALOG_CSV = """name,status,platform,notes
Chrono Trigger,Completed,pc,
"Baldur's Gate 3, Deluxe",Playing,ps5,"Act 2, halfway"

Hollow Knight,Backlog,nintendo switch
too,few
,Completed,pc
"""


@pytest.fixture
def manager() -> CatalogManager:
    return CatalogManager()


@pytest.fixture
def entries(manager: CatalogManager) -> list[CatalogEntry]:
    return manager.parse(CATALOG_CSV.splitlines(keepends=True))


class TestParse:
    """Tests for catalog CSV parsing."""

    def test_valid_rows_kept(self, entries: list[CatalogEntry]) -> None:
        assert [e.name for e in entries] == [
            "Chrono Trigger",
            "Baldur's Gate 3, Deluxe",
            "Hollow Knight",
        ]

    def test_quoted_fields(self, entries: list[CatalogEntry]) -> None:
        entry = entries[1]

        assert entry.status == "Playing"
        assert entry.platform == "ps5"
        assert entry.notes == "Act 2, halfway"

    def test_missing_notes(self, entries: list[CatalogEntry]) -> None:
        assert entries[0].notes is None
        assert entries[2].notes is None

    def test_header_only(self, manager: CatalogManager) -> None:
        assert manager.parse(["name,status,platform\n"]) == []

    def test_load_from_file(self, manager: CatalogManager, tmp_path: Path) -> None:
        path = tmp_path / "games.csv"
        path.write_text(CATALOG_CSV, encoding="utf-8")

        assert len(manager.load(path)) == 3


class TestFindEntryByName:
    """Tests for catalog lookup by name."""

    def test_exact_case_insensitive(
        self, manager: CatalogManager, entries: list[CatalogEntry]
    ) -> None:
        entry = manager.find_entry_by_name(entries, "  chrono TRIGGER ")

        assert entry is not None
        assert entry.name == "Chrono Trigger"

    def test_partial_match(self, manager: CatalogManager, entries: list[CatalogEntry]) -> None:
        entry = manager.find_entry_by_name(entries, "hollow")

        assert entry is not None
        assert entry.name == "Hollow Knight"

    def test_punctuation_insensitive(
        self, manager: CatalogManager, entries: list[CatalogEntry]
    ) -> None:
        entry = manager.find_entry_by_name(entries, "Baldurs Gate 3")

        assert entry is not None
        assert entry.name == "Baldur's Gate 3, Deluxe"

    def test_not_found(self, manager: CatalogManager, entries: list[CatalogEntry]) -> None:
        assert manager.find_entry_by_name(entries, "Nonexistent Game XYZ123") is None

    def test_blank_search(self, manager: CatalogManager, entries: list[CatalogEntry]) -> None:
        assert manager.find_entry_by_name(entries, "   ") is None
        assert manager.find_entry_by_name(entries, "!!!") is None


class TestNormalizePlatform:
    """Tests for platform display names."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("pc", "PC"),
            ("PS5", "PlayStation 5"),
            ("xbok 360", "Xbox 360"),
            (" Nintendo Switch ", "Nintendo Switch"),
            ("Game Boy", "Game Boy"),
        ],
    )
    def test_mapping(self, manager: CatalogManager, raw: str, expected: str) -> None:
        assert manager.normalize_platform(raw) == expected


class TestFollowupReport:
    """Tests for the follow-up report writer."""

    def test_nothing_to_report(self, manager: CatalogManager, tmp_path: Path) -> None:
        path = tmp_path / "unprocessed-games.csv"

        assert manager.write_followup_report([], path) is None
        assert not path.exists()

    def test_rows_written(
        self, manager: CatalogManager, entries: list[CatalogEntry], tmp_path: Path
    ) -> None:
        path = tmp_path / "reports" / "unprocessed-games.csv"

        written = manager.write_followup_report(
            [(entries[1], "No IGDB data found"), (entries[2], "API error: 500")],
            path,
        )

        assert written == path
        with path.open(encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
        assert tuple(rows[0]) == REPORT_HEADER
        assert rows[1] == [
            "Baldur's Gate 3, Deluxe",
            "Playing",
            "ps5",
            "Act 2, halfway",
            "No IGDB data found",
        ]
        assert rows[2] == ["Hollow Knight", "Backlog", "nintendo switch", "", "API error: 500"]
