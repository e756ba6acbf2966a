"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for jwt-tutorial happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. security_ignored_paths -> SECURITY_IGNORED_PATHS). List fields are
      read as JSON arrays.

  @field_validator: Rejects malformed ignore-list patterns and unknown log
      levels at startup, so a bad environment fails the process before the
      first request instead of silently widening or narrowing the ignore list.

Layer rule: core/ is the kernel. This module may not import from api/ or
security/.
"""

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("jwttutorial.config")

# Paths that bypass every security filter. The console serves its own assets
# below the prefix, so the whole subtree is exempt.
DEFAULT_IGNORED_PATHS = ["/h2-console/**", "/favicon.ico"]

APP_NAME = "jwt-tutorial"
APP_VERSION = "0.1.0"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Security policy
    # ------------------------------------------------------------------

    security_ignored_paths: list[str] = DEFAULT_IGNORED_PATHS
    console_enabled: bool = True

    # ------------------------------------------------------------------
    # HTTP front door
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:8080", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    echo_rate_limit: str = "30/minute"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}.")
        return level

    @field_validator("security_ignored_paths")
    @classmethod
    def validate_ignored_paths(cls, values: list[str]) -> list[str]:
        """Reject ignore-list entries that could never match a request path.

        Request paths always start with '/', so a relative pattern is a typo
        rather than a policy. The bare '**' wildcard is accepted but logged:
        it switches security off for the whole application.
        """
        result: list[str] = []
        for raw in values:
            pattern = raw.strip()
            if pattern in ("**", "/**"):
                logger.warning("SECURITY_IGNORED_PATHS contains '%s' -- every request bypasses security.", pattern)
            elif not pattern.startswith("/"):
                raise ValueError(f"SECURITY_IGNORED_PATHS entry {raw!r} must start with '/'.")
            result.append(pattern)
        return result


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings() directly.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
