"""
Data contracts for IGDB API responses.

These Pydantic models define the expected structure of records returned
by the IGDB v4 endpoints. Foreign-key id lists that IGDB omits are
decoded as empty lists so resolution never has to handle nulls.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Fields requested for every game record
GAME_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "summary",
    "storyline",
    "rating",
    "rating_count",
    "aggregated_rating",
    "aggregated_rating_count",
    "first_release_date",
    "genres",
    "platforms",
    "cover",
    "screenshots",
    "websites",
    "involved_companies",
    "game_modes",
    "themes",
    "player_perspectives",
    "game_engines",
    "url",
    "slug",
)


class IGDBRecord(BaseModel):
    """Common shape of IGDB records: extra fields are tolerated."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., gt=0, description="IGDB record id")


class NamedEntity(IGDBRecord):
    """Genre, game mode, theme, player perspective or game engine."""

    name: str
    slug: str | None = None
    url: str | None = None


class Platform(NamedEntity):
    """Gaming platform."""

    abbreviation: str | None = None


class Company(NamedEntity):
    """Developer or publisher company."""

    description: str | None = None
    country: int | None = None


class InvolvedCompany(IGDBRecord):
    """Link between a game and a company, with the company's roles."""

    company: int
    game: int | None = None
    developer: bool = False
    publisher: bool = False
    porting: bool = False
    supporting: bool = False


class IGDBGame(IGDBRecord):
    """
    Game record as returned by the ``games`` endpoint.

    Used both for search candidates and for the base record of
    a relational resolution.
    """

    name: str
    slug: str | None = None
    url: str | None = None
    summary: str | None = None
    storyline: str | None = None
    rating: float | None = None
    rating_count: int | None = None
    aggregated_rating: float | None = None
    aggregated_rating_count: int | None = None
    first_release_date: int | None = Field(
        default=None, description="Release date as a unix timestamp (seconds)"
    )
    cover: int | None = None

    # Relations (foreign-key id lists)
    genres: list[int] = Field(default_factory=list)
    platforms: list[int] = Field(default_factory=list)
    game_modes: list[int] = Field(default_factory=list)
    themes: list[int] = Field(default_factory=list)
    player_perspectives: list[int] = Field(default_factory=list)
    game_engines: list[int] = Field(default_factory=list)
    involved_companies: list[int] = Field(default_factory=list)
    screenshots: list[int] = Field(default_factory=list)
    websites: list[int] = Field(default_factory=list)

    @field_validator(
        "genres",
        "platforms",
        "game_modes",
        "themes",
        "player_perspectives",
        "game_engines",
        "involved_companies",
        "screenshots",
        "websites",
        mode="before",
    )
    @classmethod
    def coerce_null_list(cls, v: list[int] | None) -> list[int]:
        """Treat an explicit null relation as empty."""
        return [] if v is None else v


class ResolvedRecord(BaseModel):
    """
    A game with every relation replaced by human-readable names.

    ``developers`` and ``publishers`` come from joining the game's
    involved companies against the company records.
    """

    id: int
    name: str
    slug: str | None = None
    url: str | None = None
    summary: str | None = None
    storyline: str | None = None
    rating: float | None = None
    aggregated_rating: float | None = None
    first_release_date: int | None = None

    genres: list[str] = Field(default_factory=list)
    platforms: list[str] = Field(default_factory=list)
    game_modes: list[str] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    player_perspectives: list[str] = Field(default_factory=list)
    game_engines: list[str] = Field(default_factory=list)
    companies: list[str] = Field(default_factory=list)
    developers: list[str] = Field(default_factory=list)
    publishers: list[str] = Field(default_factory=list)

    @property
    def release_date(self) -> str | None:
        """First release date formatted as YYYY-MM-DD (UTC)."""
        if self.first_release_date is None:
            return None
        released = datetime.fromtimestamp(self.first_release_date, tz=timezone.utc)
        return released.date().isoformat()


def names_in_order(ids: list[int], records: list[NamedEntity]) -> list[str]:
    """
    Map ids to names, following the order of ``ids``.

    Ids without a matching record are skipped.
    """
    by_id = {record.id: record.name for record in records}
    return [by_id[i] for i in ids if i in by_id]


def split_company_roles(
    involvements: list[InvolvedCompany],
    companies: list[Company],
) -> tuple[list[str], list[str]]:
    """
    Join involvements against companies on company id.

    Returns:
        tuple: (developers, publishers); a company may appear in both
    """
    names = {company.id: company.name for company in companies}
    developers: list[str] = []
    publishers: list[str] = []

    for involvement in involvements:
        name = names.get(involvement.company)
        if name is None:
            continue
        if involvement.developer:
            developers.append(name)
        if involvement.publisher:
            publishers.append(name)

    return developers, publishers
