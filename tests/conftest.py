"""Shared test fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest

from game_catalog.auth import AuthClient, Credential, InMemoryCredentialStore
from game_catalog.config import IGDBConfig, TwitchConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"

NOW = 1_700_000_000_000


class RecordingSleep:
    """Collects requested sleep durations instead of sleeping."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def igdb_fixture() -> dict[str, Any]:
    """Recorded IGDB responses for Chrono Trigger, keyed by resource."""
    with open(FIXTURES_DIR / "igdb_chrono_trigger.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def igdb_config() -> IGDBConfig:
    return IGDBConfig(base_url="https://api.igdb.com/v4", search_limit=5)


@pytest.fixture
def auth_client() -> AuthClient:
    """Auth client holding a long-lived cached token."""
    store = InMemoryCredentialStore(
        Credential(access_token="test_token", expires_at=NOW + 24 * 3600 * 1000)
    )
    return AuthClient(
        config=TwitchConfig(client_id="test_client_id", client_secret="test_client_secret"),
        store=store,
        clock=lambda: NOW,
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
