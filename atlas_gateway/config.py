"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Gateway settings loaded from environment variables.

    Resolved once at process start and never mutated; adapters receive the
    instance explicitly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application Configuration
    app_title: str = Field(default="Voter Atlas Gateway", description="Application title")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(default=True, description="Use JSON log format")
    log_file: str | None = Field(default=None, description="Optional log file path")

    # HTTP surface
    user_agent: str = Field(
        default="iavoteratlas-gateway/1.0", description="User-Agent sent to every upstream"
    )
    cors_allow_origins: str = Field(
        default="*", description="Comma separated list of allowed origins, or *"
    )
    excerpt_limit: int = Field(
        default=800, ge=1, description="Max characters of upstream text surfaced in errors"
    )
    cache_max_age: int = Field(
        default=0, ge=0, description="Cache-Control max-age for successful responses (0 = off)"
    )

    # GDELT (no credentials)
    gdelt_base_url: str = Field(default="https://api.gdeltproject.org/api/v2")
    gdelt_timeout: float = Field(default=15.0, gt=0, description="Upstream timeout in seconds")

    # GovInfo
    govinfo_base_url: str = Field(default="https://api.govinfo.gov")
    govinfo_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("govinfo_api_key", "govinfo_key"),
        description="Fallback key when the caller does not send api_key",
    )
    govinfo_timeout: float = Field(default=20.0, gt=0)
    govinfo_snippet_limit: int = Field(default=10, ge=0, description="Results enriched with snippets")
    govinfo_enrich_concurrency: int = Field(default=3, ge=1)
    govinfo_snippet_width: int = Field(default=240, ge=1)

    # Census
    census_base_url: str = Field(default="https://api.census.gov/data")
    census_api_key: str = Field(
        default="", validation_alias=AliasChoices("census_api_key", "census_key")
    )
    census_timeout: float = Field(default=25.0, gt=0)

    # Congress.gov
    congress_base_url: str = Field(default="https://api.congress.gov/v3")
    congress_api_key: str = Field(
        default="", validation_alias=AliasChoices("congress_api_key", "congress_key")
    )
    congress_timeout: float = Field(default=20.0, gt=0)

    # YouTube Data API
    youtube_base_url: str = Field(default="https://www.googleapis.com/youtube/v3")
    youtube_api_key: str = Field(
        default="", validation_alias=AliasChoices("youtube_api_key", "youtube_key")
    )
    youtube_timeout: float = Field(default=15.0, gt=0)

    @property
    def allowed_origins(self) -> list[str]:
        """Parsed CORS allow-list."""
        origins = [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]
        return origins or ["*"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
