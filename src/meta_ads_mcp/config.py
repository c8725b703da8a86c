"""Application configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MetaAdsSettings(BaseSettings):
    """Configuration for the Meta Ads MCP server."""

    model_config = SettingsConfigDict(env_prefix="META_", extra="ignore", populate_by_name=True)

    graph_api_base_url: str = Field(
        default="https://graph.facebook.com",
        description="Base URL of the Meta Graph API",
    )
    api_version: str = Field(
        default="v22.0",
        description="Graph/Marketing API version to target",
    )
    access_token: SecretStr | None = Field(
        default=None,
        description="Single fallback access token (legacy single-tenant mode)",
    )
    tokens: SecretStr | None = Field(
        default=None,
        description="JSON object mapping friendly names to access tokens",
    )
    request_timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP request timeout")
    max_retries: int = Field(default=3, ge=0, le=10, description="Retries after the first attempt")
    retry_base_delay_seconds: float = Field(default=1.0, ge=0, description="Base exponential backoff delay")
    retry_backoff_max: float = Field(default=60.0, ge=0, description="Upper bound for a single backoff sleep")
    default_max_items: int = Field(default=1000, ge=1, description="Item cap for paginated reads")
    mcp_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("META_MCP_API_KEY", "MCP_API_KEY"),
        description="Shared key required from HTTP clients when set",
    )
    token_header: str = Field(
        default="X-Meta-Token",
        description="Request header carrying a per-call access token override",
    )
    log_level: str = Field(default="INFO", description="Root log level")
    server_name: str = Field(default="meta-ads-mcp", description="Name advertised to MCP clients")

    @field_validator("api_version")
    def _validate_version(cls, value: str) -> str:
        if not value.startswith("v"):
            msg = "Graph API version must be prefixed with 'v'"
            raise ValueError(msg)
        return value


@lru_cache(maxsize=1)
def get_settings() -> MetaAdsSettings:
    """Return cached settings instance."""

    return MetaAdsSettings()


__all__ = ["MetaAdsSettings", "get_settings"]
