"""
Configuration module for Obsidian GitHub MCP Server.

Uses pydantic-settings for configuration management with environment variable support.
The repository coordinates use the plain GITHUB_TOKEN, REPO_OWNER, REPO_NAME and
VAULT_PATH variables; tuning knobs use the VAULT_MCP_ prefix (e.g., VAULT_MCP_CACHE_TTL).
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_CACHE_TTL = 5 * 60  # seconds
REQUIRED_ENV_VARS = ("GITHUB_TOKEN", "REPO_OWNER", "REPO_NAME")


class Settings(BaseSettings):
    """Application settings with environment variable support.

    Environment variables:
    - GITHUB_TOKEN: GitHub access token (required)
    - REPO_OWNER: Owner of the repository holding the vault (required)
    - REPO_NAME: Name of the repository holding the vault (required)
    - VAULT_PATH: Folder inside the repository where the vault lives
    - VAULT_MCP_GITHUB_REF: Branch, tag or commit to read (default branch if unset)
    - VAULT_MCP_GITHUB_API_URL: API base URL (GitHub Enterprise support)
    - VAULT_MCP_CACHE_TTL: Cache TTL in seconds
    - VAULT_MCP_CACHE_MAX_ENTRIES: Optional LRU capacity of the content cache
    - VAULT_MCP_MAX_CONCURRENT_FETCHES: Maximum in-flight GitHub requests
    - VAULT_MCP_REQUEST_TIMEOUT: Per-request HTTP timeout in seconds
    - VAULT_MCP_SEARCH_TIMEOUT: Overall deadline for one search in seconds
    - VAULT_MCP_STRICT_WALK: Fail a search when any folder cannot be listed
    - VAULT_MCP_LOG_LEVEL: Logging level
    """

    github_token: SecretStr = Field(validation_alias=AliasChoices("github_token", "GITHUB_TOKEN"))
    repo_owner: str = Field(validation_alias=AliasChoices("repo_owner", "REPO_OWNER"))
    repo_name: str = Field(validation_alias=AliasChoices("repo_name", "REPO_NAME"))
    vault_path: str = Field(default="", validation_alias=AliasChoices("vault_path", "VAULT_PATH"))

    github_ref: str | None = None
    github_api_url: str = DEFAULT_GITHUB_API_URL
    cache_ttl: float = Field(default=DEFAULT_CACHE_TTL, gt=0)
    cache_max_entries: int | None = Field(default=None, gt=0)
    max_concurrent_fetches: int = Field(default=8, ge=1)
    request_timeout: float = Field(default=30.0, gt=0)
    search_timeout: float = Field(default=60.0, gt=0)
    strict_walk: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="VAULT_MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("repo_owner", "repo_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty repository coordinates."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("vault_path")
    @classmethod
    def validate_vault_path(cls, v: str) -> str:
        """Strip surrounding slashes so the path can be joined safely."""
        return v.strip().strip("/")

    @field_validator("github_api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Drop the trailing slash from the API base URL."""
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Load settings from environment."""
    return Settings()
