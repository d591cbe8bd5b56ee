"""
Cached bearer credential and its persistence.

The credential is a singleton record: created on the first successful
token exchange and overwritten on every refresh. A file-backed store is
used in normal runs; the in-memory store lets tests skip the filesystem.

Two processes must not share one credential file at the same time:
loading and saving are not coordinated across processes.
"""

import time
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, Field

from game_catalog.exceptions import CredentialStoreError
from game_catalog.logger import get_logger

# Tokens this close to expiry are treated as already expired
EXPIRY_BUFFER_MS = 5 * 60 * 1000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class Credential(BaseModel):
    """Persisted bearer token record."""

    access_token: str = Field(..., min_length=1, description="Bearer token")
    expires_at: int = Field(..., description="Expiry time in epoch milliseconds")
    token_type: str = Field(default="bearer", description="Token type reported by Twitch")

    def expires_in_minutes(self, now: int) -> int:
        """Whole minutes left before the token expires."""
        return round((self.expires_at - now) / 1000 / 60)


class CredentialStore(ABC):
    """Load/save abstraction for the cached credential."""

    @abstractmethod
    def load(self) -> Credential | None:
        """Return the persisted credential, or None if absent or unreadable."""
        ...

    @abstractmethod
    def save(self, credential: Credential) -> None:
        """Persist the credential, raising CredentialStoreError on failure."""
        ...

    @staticmethod
    def is_valid(credential: Credential, now: int) -> bool:
        """Check the credential is usable at ``now`` (epoch ms), with safety buffer."""
        return now < credential.expires_at - EXPIRY_BUFFER_MS


class FileCredentialStore(CredentialStore):
    """Stores the credential as a JSON document on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._logger = get_logger(__name__, component="credential_store")

    @property
    def path(self) -> Path:
        """Location of the credential file."""
        return self._path

    def load(self) -> Credential | None:
        if not self._path.exists():
            self._logger.info("No token file found", path=str(self._path))
            return None

        try:
            return Credential.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            # pydantic.ValidationError is a ValueError
            self._logger.warning(
                "Token file unreadable, ignoring",
                path=str(self._path),
                error=str(e),
            )
            return None

    def save(self, credential: Credential) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(credential.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            self._logger.error("Failed to save token", path=str(self._path), error=str(e))
            raise CredentialStoreError(
                f"Failed to save token to {self._path}: {e}",
                original_error=e,
            ) from e

        self._logger.info("Token saved", path=str(self._path))


class InMemoryCredentialStore(CredentialStore):
    """Keeps the credential in process memory."""

    def __init__(self, credential: Credential | None = None) -> None:
        self._credential = credential
        self.save_count = 0

    def load(self) -> Credential | None:
        return self._credential

    def save(self, credential: Credential) -> None:
        self._credential = credential
        self.save_count += 1
