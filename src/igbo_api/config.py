"""Centralized configuration for igbo-api using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every value can be overridden through the environment (case-insensitive)
    or a local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Storage
    database_path: Path = Field(
        default=Path("data/igbo_api.sqlite"),
        description="SQLite database file holding words and examples",
    )

    # Cache
    redis_url: str = Field(
        default="",
        description="Redis connection URL; an in-process TTL cache is used when empty",
    )
    cache_expiration_seconds: int = Field(
        default=3600,
        ge=1,
        description="Time-to-live applied to every cached search result",
    )
    cache_timeout_seconds: float = Field(
        default=0.5,
        gt=0.0,
        le=30.0,
        description="Upper bound on a single cache get/set before it is treated as a miss",
    )
    cache_max_entries: int = Field(
        default=10_000,
        ge=1,
        description="Most search results the in-process cache holds before evicting the oldest",
    )

    # Search
    main_key: str = Field(default="", description="API key that restricts Igbo search to the headword")
    default_page_limit: int = Field(default=10, ge=1, description="Words returned per page when unspecified")
    max_page_limit: int = Field(default=25, ge=1, description="Largest page size a caller may request")

    # Server settings
    host: str = Field(default="127.0.0.1", description="HTTP bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP bind port")
    uvicorn_workers: int = Field(default=1, ge=1, description="Number of Uvicorn workers")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    json_logs: bool = Field(default=True, description="Emit structured JSON logs")
    service_name: str = Field(default="igbo-api", description="Service name reported in traces")

    # Security
    mask_error_details: bool = Field(
        default=True, description="Mask internal error details in responses"
    )

    @model_validator(mode="after")
    def _check_page_limits(self) -> "Settings":
        if self.default_page_limit > self.max_page_limit:
            raise ValueError(
                f"DEFAULT_PAGE_LIMIT ({self.default_page_limit}) cannot exceed MAX_PAGE_LIMIT ({self.max_page_limit})"
            )
        return self

    def is_cache_remote(self) -> bool:
        """Check if search results are cached in Redis.

        Returns:
            True when REDIS_URL is configured, False for the in-process cache
        """
        return bool(self.redis_url.strip())

    def is_main_key(self, api_key: str | None) -> bool:
        """Return True when ``api_key`` matches the configured main key."""
        if not self.main_key or not api_key:
            return False
        return api_key == self.main_key
