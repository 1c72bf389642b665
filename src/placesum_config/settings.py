"""Application settings loaded from environment variables.

Configuration file discovery (in priority order):
1. OS environment variables (always highest priority)
2. PLACESUM_ENV_FILE environment variable (absolute path to .env file)
3. config/.env.dev - local development
4. config/.env - production/Docker

Uses pydantic-settings for automatic type coercion and validation.
"""

from __future__ import annotations

import os
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CRAWL_BUDGET_MARGIN_SECONDS = 30.0
SUMMARIZER_FIXED_TIMEOUTS_SECONDS = 20.0


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve().parent

    for parent in [current, *current.parents]:
        if (parent / "config").is_dir():
            return parent
        if (parent / ".git").is_dir():
            return parent
        if parent == Path("/app"):
            return parent

    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Get the config directory path."""
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """Resolve the .env file path.

    Priority:
    1. PLACESUM_ENV_FILE env var (full path)
    2. config/.env.dev (local development)
    3. config/.env (production)
    """
    env_file_path = os.environ.get("PLACESUM_ENV_FILE")
    if env_file_path:
        path = Path(env_file_path)
        if not path.is_absolute():
            path = _find_project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()

    dev_env = config_dir / ".env.dev"
    if dev_env.exists():
        return dev_env

    prod_env = config_dir / ".env"
    if prod_env.exists():
        return prod_env

    return None


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Values are loaded from:
    1. OS environment variables (highest priority)
    2. .env file (config/.env.dev or config/.env)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "placesum"
    debug: bool = False

    # Database (POSTGRES_ prefix)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: SecretStr = SecretStr("")
    postgres_db: str = "placesum"
    database_url_override: str | None = None  # e.g. sqlite+aiosqlite:///data/x.db

    # API (API_ prefix)
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    # Cache freshness window
    cache_ttl_days: int = 7

    # Background revalidation claim; derived from the crawl budget when unset
    revalidation_lease_seconds: float | None = None

    # Crawl lock (distributed, stored in cache_locks). The TTL must outlast a
    # live crawl; it is derived from the crawl budget when unset.
    lock_ttl_seconds: float | None = None
    lock_wait_timeout_seconds: float = 30.0
    lock_initial_wait_seconds: float = 0.5
    lock_max_wait_seconds: float = 3.0
    lock_cleanup_probability: float = 0.1

    # Performance metrics
    metrics_enabled: bool = True
    metrics_sampling_rate: float = 0.1
    metrics_slow_request_threshold_ms: int = 5000

    # Summarizer (ANTHROPIC_ prefix)
    anthropic_api_key: SecretStr | None = None
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    anthropic_max_tokens: int = 1024
    anthropic_temperature: float = 0.3
    anthropic_timeout: float = 60.0

    # Crawler (CRAWLER_ prefix)
    crawler_headless: bool = True
    crawler_navigation_timeout_ms: int = 30000
    crawler_settle_ms: int = 5000
    crawler_search_url_template: str = "https://map.naver.com/v5/search/{query}"

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @field_validator("lock_ttl_seconds", "revalidation_lease_seconds")
    @classmethod
    def _validate_positive_duration(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            msg = f"Duration must be positive, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("lock_cleanup_probability", "metrics_sampling_rate")
    @classmethod
    def _validate_probability(cls, v: float) -> float:
        """Probabilities must lie within [0, 1]."""
        if not 0.0 <= v <= 1.0:
            msg = f"Probability must be between 0.0 and 1.0, got {v}"
            raise ValueError(msg)
        return v

    # Computed properties
    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Construct the database URL from components."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:"
            f"{self.postgres_password.get_secret_value()}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(days=self.cache_ttl_days)

    @property
    def crawl_budget_seconds(self) -> float:
        """Worst-case duration of one crawl, summarize and save run.

        The crawler spends up to one navigation timeout each on browser
        launch, page load and two clicks, plus three settle waits. The
        summarizer adds its read timeout on top of its fixed connect, write
        and pool timeouts.
        """
        crawler_ms = 4 * self.crawler_navigation_timeout_ms + 3 * self.crawler_settle_ms
        summarizer_s = self.anthropic_timeout + SUMMARIZER_FIXED_TIMEOUTS_SECONDS
        return crawler_ms / 1000 + summarizer_s

    @property
    def crawl_lock_ttl_seconds(self) -> float:
        if self.lock_ttl_seconds is not None:
            return self.lock_ttl_seconds
        return self.crawl_budget_seconds + CRAWL_BUDGET_MARGIN_SECONDS

    @property
    def revalidation_lease(self) -> timedelta:
        """How long a background revalidation claim blocks other claimants."""
        if self.revalidation_lease_seconds is not None:
            return timedelta(seconds=self.revalidation_lease_seconds)
        # A revalidation either waits for another crawler or crawls itself
        seconds = max(self.crawl_lock_ttl_seconds, self.lock_wait_timeout_seconds)
        return timedelta(seconds=seconds + CRAWL_BUDGET_MARGIN_SECONDS)


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
