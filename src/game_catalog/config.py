"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (and an optional
``.env`` file) with validation, type coercion, and sensible defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TwitchConfig(BaseSettings):
    """Twitch OAuth2 credentials used to obtain IGDB access tokens."""

    model_config = SettingsConfigDict(
        env_prefix="TWITCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    client_id: SecretStr | None = Field(
        default=None,
        description="Twitch application client ID",
    )
    client_secret: SecretStr | None = Field(
        default=None,
        description="Twitch application client secret",
    )
    grant_type: str = Field(
        default="client_credentials",
        description="OAuth2 grant type sent to the token endpoint",
    )
    token_url: str = Field(
        default="https://id.twitch.tv/oauth2/token",
        description="Twitch identity provider token endpoint",
    )
    timeout_seconds: int = Field(
        default=30,
        ge=5,
        le=120,
        description="HTTP request timeout in seconds",
    )

    @property
    def is_configured(self) -> bool:
        """Check that both client id and secret are present."""
        return bool(
            self.client_id
            and self.client_id.get_secret_value()
            and self.client_secret
            and self.client_secret.get_secret_value()
        )


class IGDBConfig(BaseSettings):
    """IGDB API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="IGDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default="https://api.igdb.com/v4",
        description="Base URL for the IGDB v4 API",
    )
    timeout_seconds: int = Field(
        default=30,
        ge=5,
        le=120,
        description="HTTP request timeout in seconds",
    )
    search_limit: int = Field(
        default=5,
        ge=1,
        le=500,
        description="Maximum number of search candidates per catalog entry",
    )


class PacingConfig(BaseSettings):
    """Delay between catalog entries."""

    model_config = SettingsConfigDict(
        env_prefix="PACING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    min_delay_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Lower bound of the random pause between entries",
    )
    max_delay_seconds: float = Field(
        default=30.0,
        ge=0.0,
        description="Upper bound of the random pause between entries",
    )

    @model_validator(mode="after")
    def validate_bounds(self) -> "PacingConfig":
        """Reject an inverted delay range."""
        if self.min_delay_seconds > self.max_delay_seconds:
            raise ValueError(
                f"min_delay_seconds ({self.min_delay_seconds}) must not exceed "
                f"max_delay_seconds ({self.max_delay_seconds})"
            )
        return self


class PathsConfig(BaseSettings):
    """Input and output locations."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    csv_path: Path = Field(default=Path("games.csv"), description="Catalog CSV file")
    output_dir: Path = Field(
        default=Path("generated-games"),
        description="Directory for generated markdown documents",
    )
    report_path: Path = Field(
        default=Path("unprocessed-games.csv"),
        description="Follow-up report of unmatched and failed entries",
    )
    token_path: Path = Field(
        default=Path(".token.json"),
        description="Cached access token file",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    include_timestamp: bool = Field(
        default=True,
        description="Include timestamp in log entries",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    Aggregates all configuration sections and provides
    a single entry point for configuration access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sub-configurations
    twitch: TwitchConfig = Field(default_factory=TwitchConfig)
    igdb: IGDBConfig = Field(default_factory=IGDBConfig)
    pacing: PacingConfig = Field(default_factory=PacingConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
