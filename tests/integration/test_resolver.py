"""Integration tests for the IGDB resolver with mocked HTTP responses."""

from typing import Any

import httpx
import pytest
import respx

from game_catalog.auth import AuthClient
from game_catalog.config import IGDBConfig
from game_catalog.exceptions import ResolutionError, TransportError
from game_catalog.igdb import MetadataResolver

BASE_URL = "https://api.igdb.com/v4"

RELATION_RESOURCES = (
    "genres",
    "platforms",
    "game_modes",
    "themes",
    "player_perspectives",
    "involved_companies",
    "companies",
)


def mock_igdb(
    router: respx.MockRouter,
    data: dict[str, Any],
    failures: dict[str, Any] | None = None,
) -> dict[str, respx.Route]:
    """Route every IGDB resource to its recorded response, or to a failure."""
    failures = failures or {}

    def games_response(request: httpx.Request) -> httpx.Response:
        if b'search "' in request.content:
            return httpx.Response(200, json=data["search"])
        return httpx.Response(200, json=data["games"])

    routes = {"games": router.post(f"{BASE_URL}/games").mock(side_effect=games_response)}
    for resource in RELATION_RESOURCES:
        route = router.post(f"{BASE_URL}/{resource}")
        failure = failures.get(resource)
        if isinstance(failure, Exception):
            routes[resource] = route.mock(side_effect=failure)
        else:
            response = failure if failure is not None else httpx.Response(200, json=data[resource])
            routes[resource] = route.mock(return_value=response)
    routes["game_engines"] = router.post(f"{BASE_URL}/game_engines").mock(
        return_value=httpx.Response(200, json=[])
    )
    return routes


@pytest.fixture
def resolver(auth_client: AuthClient, igdb_config: IGDBConfig) -> MetadataResolver:
    return MetadataResolver(auth=auth_client, config=igdb_config)


class TestSearchByName:
    """Tests for game search."""

    @pytest.mark.asyncio
    async def test_search_request(
        self, resolver: MetadataResolver, igdb_fixture: dict[str, Any]
    ) -> None:
        with respx.mock(assert_all_called=False) as router:
            routes = mock_igdb(router, igdb_fixture)
            async with resolver:
                candidates = await resolver.search_by_name("Chrono Trigger")

        assert [c.id for c in candidates] == [1234]
        assert candidates[0].name == "Chrono Trigger"

        request = routes["games"].calls.last.request
        body = request.content.decode()
        assert 'search "Chrono Trigger";' in body
        assert "limit 5;" in body
        assert request.headers["Client-ID"] == "test_client_id"
        assert request.headers["Authorization"] == "Bearer test_token"
        assert request.headers["Content-Type"] == "text/plain"

    @respx.mock
    @pytest.mark.asyncio
    async def test_search_escapes_quotes(self, resolver: MetadataResolver) -> None:
        route = respx.post(f"{BASE_URL}/games").mock(return_value=httpx.Response(200, json=[]))

        async with resolver:
            candidates = await resolver.search_by_name('The "Best" Game', limit=2)

        assert candidates == []
        body = route.calls.last.request.content.decode()
        assert 'search "The \\"Best\\" Game";' in body
        assert "limit 2;" in body

    @respx.mock
    @pytest.mark.asyncio
    async def test_search_error_status(self, resolver: MetadataResolver) -> None:
        respx.post(f"{BASE_URL}/games").mock(
            return_value=httpx.Response(429, text="Too Many Requests")
        )

        async with resolver:
            with pytest.raises(TransportError) as exc_info:
                await resolver.search_by_name("Chrono Trigger")

        assert exc_info.value.status_code == 429
        assert exc_info.value.body == "Too Many Requests"

    @respx.mock
    @pytest.mark.asyncio
    async def test_search_non_array_payload(self, resolver: MetadataResolver) -> None:
        respx.post(f"{BASE_URL}/games").mock(
            return_value=httpx.Response(200, json={"message": "unexpected"})
        )

        async with resolver:
            with pytest.raises(TransportError, match="expected a JSON array"):
                await resolver.search_by_name("Chrono Trigger")


class TestResolveEntityGraph:
    """Tests for relation resolution."""

    @pytest.mark.asyncio
    async def test_full_resolution(
        self, resolver: MetadataResolver, igdb_fixture: dict[str, Any]
    ) -> None:
        with respx.mock(assert_all_called=False) as router:
            routes = mock_igdb(router, igdb_fixture)
            async with resolver:
                record = await resolver.resolve_entity_graph(1234)

        assert record is not None
        assert record.name == "Chrono Trigger"
        assert record.release_date == "1995-03-11"
        # Names follow the game's id order, not the response order
        assert record.genres == ["Role-playing (RPG)", "Adventure"]
        assert record.themes == ["Action", "Fantasy"]
        assert record.platforms == ["Super Nintendo Entertainment System", "PC (Microsoft Windows)"]
        assert record.game_modes == ["Single player"]
        assert record.player_perspectives == ["Bird view / Isometric"]
        assert record.game_engines == []
        assert record.developers == ["Square"]
        assert record.publishers == ["Square", "Square Enix"]
        assert record.companies == ["Square", "Square Enix"]

        # No engine ids means no engine request
        assert routes["game_engines"].call_count == 0
        for resource in RELATION_RESOURCES:
            assert routes[resource].call_count == 1

    @pytest.mark.asyncio
    async def test_lookup_queries_by_id(
        self, resolver: MetadataResolver, igdb_fixture: dict[str, Any]
    ) -> None:
        with respx.mock(assert_all_called=False) as router:
            routes = mock_igdb(router, igdb_fixture)
            async with resolver:
                await resolver.resolve_entity_graph(1234)

        genres_body = routes["genres"].calls.last.request.content.decode()
        assert "where id = (12,31);" in genres_body
        assert "limit 2;" in genres_body

        companies_body = routes["companies"].calls.last.request.content.decode()
        assert "where id = (70,71);" in companies_body

    @respx.mock
    @pytest.mark.asyncio
    async def test_missing_game(self, resolver: MetadataResolver) -> None:
        respx.post(f"{BASE_URL}/games").mock(return_value=httpx.Response(200, json=[]))

        async with resolver:
            assert await resolver.resolve_entity_graph(999999) is None

    @pytest.mark.asyncio
    async def test_base_fetch_failure(self, resolver: MetadataResolver) -> None:
        with respx.mock(assert_all_called=False) as router:
            router.post(f"{BASE_URL}/games").mock(return_value=httpx.Response(500))
            async with resolver:
                with pytest.raises(ResolutionError) as exc_info:
                    await resolver.resolve_entity_graph(1234)

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_any_relation_failure_fails_resolution(
        self, resolver: MetadataResolver, igdb_fixture: dict[str, Any]
    ) -> None:
        with respx.mock(assert_all_called=False) as router:
            mock_igdb(
                router,
                igdb_fixture,
                failures={"themes": httpx.Response(500, text="Internal Server Error")},
            )
            async with resolver:
                with pytest.raises(ResolutionError) as exc_info:
                    await resolver.resolve_entity_graph(1234)

        assert isinstance(exc_info.value.original_error, TransportError)
        assert exc_info.value.original_error.status_code == 500

    @pytest.mark.asyncio
    async def test_company_failure_fails_resolution(
        self, resolver: MetadataResolver, igdb_fixture: dict[str, Any]
    ) -> None:
        with respx.mock(assert_all_called=False) as router:
            mock_igdb(
                router,
                igdb_fixture,
                failures={"companies": httpx.ConnectError("connection reset")},
            )
            async with resolver:
                with pytest.raises(ResolutionError):
                    await resolver.resolve_entity_graph(1234)


class TestLookups:
    """Tests for single-resource lookups."""

    @pytest.mark.asyncio
    async def test_empty_ids_skip_request(self, resolver: MetadataResolver) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.post(f"{BASE_URL}/genres").mock(
                return_value=httpx.Response(200, json=[])
            )
            async with resolver:
                assert await resolver.get_genres([]) == []

        assert route.call_count == 0

    @respx.mock
    @pytest.mark.asyncio
    async def test_platform_lookup(
        self, resolver: MetadataResolver, igdb_fixture: dict[str, Any]
    ) -> None:
        respx.post(f"{BASE_URL}/platforms").mock(
            return_value=httpx.Response(200, json=igdb_fixture["platforms"])
        )

        async with resolver:
            platforms = await resolver.get_platforms([19, 6])

        assert [p.abbreviation for p in platforms] == ["SNES", "PC"]

    @respx.mock
    @pytest.mark.asyncio
    async def test_large_id_lists_are_paged(self, resolver: MetadataResolver) -> None:
        route = respx.post(f"{BASE_URL}/companies").mock(
            return_value=httpx.Response(200, json=[])
        )

        async with resolver:
            await resolver.get_companies(list(range(1, 1201)))

        assert route.call_count == 3
        last_body = route.calls.last.request.content.decode()
        assert "limit 200;" in last_body
