"""Configuration settings for the Royale gateway."""

from __future__ import annotations

from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Default credential used when the caller sends no Authorization header
    clash_default_token: Optional[str] = Field(
        default=None,
        description="Server-held Clash Royale API token, restricted to one clan",
    )
    clash_scope_clan_tag: Optional[str] = Field(
        default=None,
        description="Clan tag the default token is allowed to read",
    )

    # Upstream Configuration
    clash_api_base_url: str = Field(default="https://proxy.royaleapi.dev/v1")
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)

    # Projection cache
    projection_cache_ttl_seconds: int = Field(default=300, gt=0)
    projection_cache_maxsize: int = Field(default=5000, gt=0)
    projection_cache_url: Optional[str] = Field(
        default=None,
        description="redis:// URL for a shared cache; in-memory when unset",
    )

    # Batch limits
    max_batch_size: int = Field(default=50, gt=0)

    # Inbound rate limiting
    rate_limit: str = Field(default="120/minute")
    rate_limit_enabled: bool = Field(default=True)

    # Application Configuration
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    @field_validator("clash_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Keep the base URL joinable with absolute upstream paths."""
        return v.rstrip("/")

    @field_validator("clash_default_token", "clash_scope_clan_tag", "projection_cache_url")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank environment values as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix for environment variables
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()


# Create a global settings instance lazily
settings: Settings | None = None


def get_global_settings() -> Settings:
    """Get or create the global settings instance."""
    global settings
    if settings is None:
        settings = get_settings()
    return settings
