"""Relay configuration"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

NOTIFY_ENDPOINT = "notify"


class RelaySettings(BaseSettings):
    """Relay settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=Path.cwd() / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host_url: str = Field(
        default="http://localhost", description="Public base URL used to build the callback"
    )
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=3001, description="Listen port")

    # Twitch
    twitch_client_id: str = Field(..., description="Twitch App Client ID")
    twitch_users: str = Field(default="", description="Comma delimited Twitch channel names")
    twitch_url: str = Field(default="http://twitch.tv", description="Base url for stream links")
    unsubscribe_on_shutdown: bool = Field(
        default=False, description="Send unsubscribe requests when the relay stops"
    )

    # Discord
    discord_webhook_id: str = Field(..., description="Discord webhook id")
    discord_webhook_token: str = Field(..., description="Discord webhook token")
    discord_webhook_url: str = Field(
        default="https://discordapp.com/api/webhooks", description="Discord webhook base url"
    )

    # Database (empty selects the in-memory store)
    database_url: str = Field(default="", description="PostgreSQL database URL")

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL is a postgres DSN when set"""
        v = v.strip()
        if v and not v.startswith(("postgres://", "postgresql://")):
            raise ValueError("DATABASE_URL must start with 'postgres://' or 'postgresql://'")
        return v

    @field_validator("host_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @property
    def channel_names(self) -> list[str]:
        """Configured channel names, blanks removed, order preserved."""
        return [name.strip() for name in self.twitch_users.split(",") if name.strip()]

    @property
    def callback_url(self) -> str:
        return f"{self.host_url}/{NOTIFY_ENDPOINT}"

    @property
    def discord_hook_url(self) -> str:
        return "/".join(
            [
                self.discord_webhook_url.rstrip("/"),
                self.discord_webhook_id,
                self.discord_webhook_token,
            ]
        )

    @property
    def uses_database(self) -> bool:
        return bool(self.database_url)


@lru_cache
def get_settings() -> RelaySettings:
    """Get cached settings instance"""
    return RelaySettings()  # type: ignore[call-arg]
