"""
Twitch OAuth2 client-credentials exchange.

IGDB authorizes requests with a Twitch app access token. Tokens are
cached through a CredentialStore and only re-requested once the cached
one is missing or within five minutes of expiry.
"""

from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from game_catalog.auth.credentials import (
    Credential,
    CredentialStore,
    FileCredentialStore,
    now_ms,
)
from game_catalog.base_client import BaseAPIClient
from game_catalog.config import TwitchConfig, get_settings
from game_catalog.exceptions import AuthError, ConfigurationError, TransportError


class TokenResponse(BaseModel):
    """Successful response from the Twitch token endpoint."""

    access_token: str
    expires_in: int
    token_type: str = "bearer"


class AuthClient(BaseAPIClient):
    """
    Obtains and caches IGDB access tokens.

    Example:
        >>> async with AuthClient() as auth:
        ...     token = await auth.get_valid_token()
    """

    def __init__(
        self,
        *,
        config: TwitchConfig | None = None,
        store: CredentialStore | None = None,
        clock: Callable[[], int] = now_ms,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the auth client.

        Args:
            config: Twitch credentials (uses cached settings if None)
            store: Credential store (file store at the configured path if None)
            clock: Returns the current time in epoch milliseconds
            http_client: Preconfigured HTTP client
        """
        settings = get_settings()
        self._config = config or settings.twitch
        self._store = store or FileCredentialStore(settings.paths.token_path)
        self._clock = clock
        super().__init__(timeout=self._config.timeout_seconds, http_client=http_client)

    @property
    def source_name(self) -> str:
        """Return source identifier."""
        return "twitch_oauth"

    @property
    def client_id(self) -> str:
        """Configured Twitch client ID."""
        client_id, _ = self._require_credentials()
        return client_id

    def _require_credentials(self) -> tuple[str, str]:
        """Return (client_id, client_secret), or raise if either is missing."""
        client_id = self._config.client_id
        client_secret = self._config.client_secret
        if (
            client_id is None
            or client_secret is None
            or not client_id.get_secret_value()
            or not client_secret.get_secret_value()
        ):
            raise ConfigurationError(
                "TWITCH_CLIENT_ID and TWITCH_CLIENT_SECRET must be set "
                "in the environment or .env file"
            )
        return client_id.get_secret_value(), client_secret.get_secret_value()

    async def get_valid_token(self) -> str:
        """
        Get a valid access token, from the cache when possible.

        Returns:
            str: Bearer token

        Raises:
            ConfigurationError: If a new token is needed and credentials are missing
            AuthError: If the token exchange is rejected
            CredentialStoreError: If the new token cannot be persisted
        """
        credential = self._store.load()
        now = self._clock()

        if credential is not None:
            if self._store.is_valid(credential, now):
                self._logger.debug(
                    "Valid cached token found",
                    expires_in_minutes=credential.expires_in_minutes(now),
                )
                return credential.access_token
            self._logger.warning("Cached token has expired")

        return await self._exchange_and_store()

    async def refresh_token(self) -> str:
        """Force a new token exchange regardless of the cached token."""
        self._logger.info("Forcing token refresh")
        return await self._exchange_and_store()

    async def auth_headers(self) -> dict[str, str]:
        """Headers authorizing a single IGDB request."""
        token = await self.get_valid_token()
        return {
            "Client-ID": self.client_id,
            "Authorization": f"Bearer {token}",
        }

    async def _exchange_and_store(self) -> str:
        token_response = await self._request_access_token()
        credential = Credential(
            access_token=token_response.access_token,
            expires_at=self._clock() + token_response.expires_in * 1000,
            token_type=token_response.token_type,
        )
        self._store.save(credential)
        return credential.access_token

    async def _request_access_token(self) -> TokenResponse:
        """
        POST the client-credentials grant to the token endpoint.

        Returns:
            TokenResponse: Parsed token payload

        Raises:
            ConfigurationError: If client id or secret is missing
            AuthError: If the exchange fails or returns an unexpected payload
        """
        client_id, client_secret = self._require_credentials()

        form: dict[str, Any] = {
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": self._config.grant_type,
        }

        self._logger.info(
            "Requesting new access token",
            url=self._config.token_url,
            grant_type=self._config.grant_type,
            client_id=f"{client_id[:8]}...",
        )

        try:
            response = await self._make_request("POST", self._config.token_url, data=form)
        except TransportError as e:
            raise AuthError(
                f"Token request failed: {e.status_code or 'no response'}",
                endpoint=self._config.token_url,
                status_code=e.status_code,
                body=e.body,
                original_error=e,
            ) from e

        try:
            token_response = TokenResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise AuthError(
                "Token endpoint returned an unexpected payload",
                endpoint=self._config.token_url,
                status_code=response.status_code,
                body=response.text,
                original_error=e,
            ) from e

        self._logger.info(
            "Access token obtained",
            expires_in_seconds=token_response.expires_in,
        )
        return token_response
