"""
Twitch authentication for IGDB requests.

Provides the token exchange client and the credential cache it
reads from and writes to.
"""

from game_catalog.auth.credentials import (
    EXPIRY_BUFFER_MS,
    Credential,
    CredentialStore,
    FileCredentialStore,
    InMemoryCredentialStore,
    now_ms,
)
from game_catalog.auth.token_manager import AuthClient, TokenResponse

__all__ = [
    "EXPIRY_BUFFER_MS",
    "AuthClient",
    "Credential",
    "CredentialStore",
    "FileCredentialStore",
    "InMemoryCredentialStore",
    "TokenResponse",
    "now_ms",
]
