"""
IGDB metadata resolver.

Searches IGDB for candidate games and resolves a game's relational
graph (genres, platforms, modes, themes, perspectives, engines and
companies) into a ResolvedRecord.
"""

import asyncio
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from game_catalog.auth.token_manager import AuthClient
from game_catalog.base_client import BaseAPIClient
from game_catalog.config import IGDBConfig, get_settings
from game_catalog.exceptions import ResolutionError, TransportError
from game_catalog.igdb.contracts import (
    GAME_FIELDS,
    Company,
    IGDBGame,
    IGDBRecord,
    InvolvedCompany,
    NamedEntity,
    Platform,
    ResolvedRecord,
    names_in_order,
    split_company_roles,
)
from game_catalog.igdb.query import build_query

R = TypeVar("R", bound=IGDBRecord)

Headers = dict[str, str]

# IGDB caps a single response at 500 records
MAX_PAGE_SIZE = 500

NAMED_FIELDS = ("id", "name", "slug")


class MetadataResolver(BaseAPIClient):
    """
    Client for the IGDB v4 API.

    Example:
        >>> async with MetadataResolver() as resolver:
        ...     candidates = await resolver.search_by_name("Chrono Trigger")
        ...     record = await resolver.resolve_entity_graph(candidates[0].id)
    """

    def __init__(
        self,
        *,
        auth: AuthClient | None = None,
        config: IGDBConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            auth: Token provider (created from settings if None)
            config: IGDB configuration (uses cached settings if None)
            http_client: Preconfigured HTTP client
        """
        self._config = config or get_settings().igdb
        self._auth = auth or AuthClient()
        super().__init__(timeout=self._config.timeout_seconds, http_client=http_client)

    @property
    def source_name(self) -> str:
        """Return source identifier."""
        return "igdb_api"

    async def close(self) -> None:
        """Close this client and the auth client it owns."""
        await super().close()
        await self._auth.close()

    async def search_by_name(self, query: str, limit: int | None = None) -> list[IGDBGame]:
        """
        Search IGDB games by name.

        Args:
            query: Free-text game name
            limit: Maximum candidates (defaults to configured search limit)

        Returns:
            list[IGDBGame]: Candidates in IGDB's ranking order
        """
        limit = limit or self._config.search_limit
        headers = await self._auth.auth_headers()
        body = build_query(GAME_FIELDS, search=query, limit=limit)

        self._logger.info("Searching IGDB", query=query, limit=limit)
        candidates = await self._query("games", body, IGDBGame, headers)
        self._logger.info("Search complete", query=query, results=len(candidates))

        return candidates

    async def resolve_entity_graph(self, game_id: int) -> ResolvedRecord | None:
        """
        Fetch a game and resolve all of its relations.

        Relational lookups run concurrently and share one set of auth
        headers. If any of them fails the whole resolution fails.

        Args:
            game_id: IGDB game id

        Returns:
            ResolvedRecord | None: Resolved game, or None if the game does not exist

        Raises:
            ResolutionError: If the game or any related lookup cannot be fetched
        """
        try:
            headers = await self._auth.auth_headers()
            games = await self.get_games([game_id], headers=headers)
        except TransportError as e:
            raise ResolutionError(
                f"Failed to fetch game {game_id}: {e}",
                endpoint=e.endpoint,
                status_code=e.status_code,
                original_error=e,
            ) from e

        if not games:
            self._logger.warning("Game not found", game_id=game_id)
            return None

        game = games[0]

        results = await asyncio.gather(
            self.get_genres(game.genres, headers=headers),
            self.get_platforms(game.platforms, headers=headers),
            self.get_game_modes(game.game_modes, headers=headers),
            self.get_themes(game.themes, headers=headers),
            self.get_player_perspectives(game.player_perspectives, headers=headers),
            self.get_game_engines(game.game_engines, headers=headers),
            self._get_company_roles(game.involved_companies, headers=headers),
            return_exceptions=True,
        )

        for result in results:
            # Cancellation and interrupts are not lookup failures
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result

        failures = [r for r in results if isinstance(r, Exception)]
        if failures:
            self._logger.error(
                "Relational lookups failed",
                game_id=game_id,
                failed=len(failures),
                error=str(failures[0]),
            )
            raise ResolutionError(
                f"{len(failures)} related lookup(s) failed for game {game_id}: {failures[0]}",
                original_error=failures[0],
            ) from failures[0]

        genres, platforms, modes, themes, perspectives, engines, roles = results
        involvements, companies = roles  # type: ignore[misc]
        developers, publishers = split_company_roles(involvements, companies)

        record = ResolvedRecord(
            id=game.id,
            name=game.name,
            slug=game.slug,
            url=game.url,
            summary=game.summary,
            storyline=game.storyline,
            rating=game.rating,
            aggregated_rating=game.aggregated_rating,
            first_release_date=game.first_release_date,
            genres=names_in_order(game.genres, genres),  # type: ignore[arg-type]
            platforms=names_in_order(game.platforms, platforms),  # type: ignore[arg-type]
            game_modes=names_in_order(game.game_modes, modes),  # type: ignore[arg-type]
            themes=names_in_order(game.themes, themes),  # type: ignore[arg-type]
            player_perspectives=names_in_order(
                game.player_perspectives, perspectives  # type: ignore[arg-type]
            ),
            game_engines=names_in_order(game.game_engines, engines),  # type: ignore[arg-type]
            companies=[company.name for company in companies],
            developers=developers,
            publishers=publishers,
        )

        self._logger.info(
            "Resolved game",
            game_id=game_id,
            name=record.name,
            genres=len(record.genres),
            developers=len(record.developers),
            publishers=len(record.publishers),
        )
        return record

    async def get_games(
        self, game_ids: list[int], *, headers: Headers | None = None
    ) -> list[IGDBGame]:
        """Fetch full game records by id."""
        return await self._lookup("games", GAME_FIELDS, game_ids, IGDBGame, headers)

    async def get_genres(
        self, genre_ids: list[int], *, headers: Headers | None = None
    ) -> list[NamedEntity]:
        return await self._lookup(
            "genres", ("id", "name", "slug", "url"), genre_ids, NamedEntity, headers
        )

    async def get_platforms(
        self, platform_ids: list[int], *, headers: Headers | None = None
    ) -> list[Platform]:
        return await self._lookup(
            "platforms",
            ("id", "name", "abbreviation", "slug", "url"),
            platform_ids,
            Platform,
            headers,
        )

    async def get_game_modes(
        self, mode_ids: list[int], *, headers: Headers | None = None
    ) -> list[NamedEntity]:
        return await self._lookup("game_modes", NAMED_FIELDS, mode_ids, NamedEntity, headers)

    async def get_themes(
        self, theme_ids: list[int], *, headers: Headers | None = None
    ) -> list[NamedEntity]:
        return await self._lookup("themes", NAMED_FIELDS, theme_ids, NamedEntity, headers)

    async def get_player_perspectives(
        self, perspective_ids: list[int], *, headers: Headers | None = None
    ) -> list[NamedEntity]:
        return await self._lookup(
            "player_perspectives", NAMED_FIELDS, perspective_ids, NamedEntity, headers
        )

    async def get_game_engines(
        self, engine_ids: list[int], *, headers: Headers | None = None
    ) -> list[NamedEntity]:
        return await self._lookup("game_engines", NAMED_FIELDS, engine_ids, NamedEntity, headers)

    async def get_involved_companies(
        self, involvement_ids: list[int], *, headers: Headers | None = None
    ) -> list[InvolvedCompany]:
        return await self._lookup(
            "involved_companies",
            ("id", "company", "game", "developer", "publisher", "porting", "supporting"),
            involvement_ids,
            InvolvedCompany,
            headers,
        )

    async def get_companies(
        self, company_ids: list[int], *, headers: Headers | None = None
    ) -> list[Company]:
        return await self._lookup(
            "companies",
            ("id", "name", "slug", "url", "description", "country"),
            company_ids,
            Company,
            headers,
        )

    async def _get_company_roles(
        self, involvement_ids: list[int], *, headers: Headers
    ) -> tuple[list[InvolvedCompany], list[Company]]:
        """Fetch involvements, then the companies they reference."""
        involvements = await self.get_involved_companies(involvement_ids, headers=headers)
        position = {ic_id: i for i, ic_id in enumerate(involvement_ids)}
        involvements.sort(key=lambda ic: position.get(ic.id, len(position)))

        company_ids = list(dict.fromkeys(ic.company for ic in involvements))
        companies = await self.get_companies(company_ids, headers=headers)
        return involvements, companies

    async def _lookup(
        self,
        resource: str,
        fields: tuple[str, ...],
        ids: list[int],
        model: type[R],
        headers: Headers | None,
    ) -> list[R]:
        """Fetch records of one resource by id; empty ids skip the request."""
        if not ids:
            return []
        if headers is None:
            headers = await self._auth.auth_headers()

        records: list[R] = []
        for start in range(0, len(ids), MAX_PAGE_SIZE):
            page = ids[start : start + MAX_PAGE_SIZE]
            body = build_query(fields, ids=page, limit=len(page))
            records.extend(await self._query(resource, body, model, headers))
        return records

    async def _query(
        self,
        resource: str,
        body: str,
        model: type[R],
        headers: Headers,
    ) -> list[R]:
        """
        POST a query body and decode the JSON array response.

        Raises:
            TransportError: On HTTP failure or an undecodable payload
        """
        url = f"{self._config.base_url.rstrip('/')}/{resource}"
        self._logger.debug("IGDB query", resource=resource, query=body)

        response = await self._make_request(
            "POST",
            url,
            content=body.encode("utf-8"),
            headers={**headers, "Content-Type": "text/plain"},
        )

        try:
            payload: Any = response.json()
            if not isinstance(payload, list):
                raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
            return [model.model_validate(item) for item in payload]
        except (ValueError, PydanticValidationError) as e:
            raise TransportError(
                f"Unexpected response payload from {resource}: {e}",
                endpoint=url,
                status_code=response.status_code,
                body=response.text,
                original_error=e,
            ) from e
