# harness/config.py
"""
Environment-driven configuration for the harness.

Values come from environment variables or a .env file at the repo root
(pydantic-settings). Field names match the variable names, e.g. BASE_URL ->
base_url. All timeouts are in milliseconds, matching Playwright's units.

ConfigManager wraps a validated Settings instance with the accessors used by
page objects, the API client and the pytest plugin. One instance is built per
test session and handed to consumers; get_settings() is a cached shortcut for
scripts.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from harness.exceptions import ConfigurationError


BrowserName = Literal["chromium", "firefox", "webkit"]

REQUIRED_KEYS = ("environment", "base_url", "api_base_url")


class Settings(BaseSettings):
    """
    Centralized, env-driven configuration.
    Override via environment variables or a .env file at repo root.
    """
    environment: str = Field(default="dev")
    base_url: str = Field(default="https://example.com")
    api_base_url: str = Field(default="https://api.example.com")

    # Timeouts (ms)
    default_timeout: int = Field(default=30000)
    navigation_timeout: int = Field(default=60000)
    action_timeout: int = Field(default=15000)

    # Browser
    headless: bool = Field(default=False)
    browser: BrowserName = Field(default="chromium")
    viewport_width: int = Field(default=1920)
    viewport_height: int = Field(default=1080)
    slow_mo: int = Field(default=0)

    # Execution
    parallel_workers: int = Field(default=4)
    retries: int = Field(default=0)

    # Logging / artifacts
    log_level: str = Field(default="info")
    log_to_file: bool = Field(default=False)
    log_dir: str = Field(default="reports/logs")
    screenshot_on_failure: bool = Field(default=True)
    screenshot_on_success: bool = Field(default=False)
    screenshot_dir: str = Field(default="screenshots")
    video_on_failure: str = Field(default="retain-on-failure")
    test_data_dir: str = Field(default="test-data")
    run_global_teardown: bool = Field(default=True)

    # API
    api_timeout: int = Field(default=30000)
    api_max_retries: int = Field(default=3)

    # Pydantic v2 config: ignore unknown envs, load .env in UTF-8
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ConfigManager:
    """Validated, read-mostly view over Settings."""

    def __init__(self, settings: Optional[Settings] = None):
        if settings is None:
            try:
                settings = Settings()
            except ValidationError as e:
                raise ConfigurationError(f"Invalid configuration: {e}") from e
        self._settings = settings
        self.validate()

    @classmethod
    def from_overrides(cls, **overrides: Any) -> "ConfigManager":
        """Build from explicit values (env and .env still fill the rest)."""
        try:
            return cls(Settings(**overrides))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def validate(self) -> None:
        missing = [k for k in REQUIRED_KEYS if not str(getattr(self._settings, k) or "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_config(self) -> Dict[str, Any]:
        """Return a copy of every configuration value."""
        return self._settings.model_dump()

    def get(self, key: str) -> Any:
        if key not in Settings.model_fields:
            raise KeyError(f"Unknown configuration key: {key}")
        return getattr(self._settings, key)

    def get_environment(self) -> str:
        return self._settings.environment

    def get_base_url(self) -> str:
        return self._settings.base_url

    def get_api_base_url(self) -> str:
        return self._settings.api_base_url

    def is_production(self) -> bool:
        return self._settings.environment == "prod"

    def is_headless(self) -> bool:
        return self._settings.headless

    def get_browser(self) -> str:
        return self._settings.browser

    def get_viewport(self) -> Dict[str, int]:
        return {
            "width": self._settings.viewport_width,
            "height": self._settings.viewport_height,
        }

    def get_timeouts(self) -> Dict[str, int]:
        return {
            "default": self._settings.default_timeout,
            "navigation": self._settings.navigation_timeout,
            "action": self._settings.action_timeout,
            "api": self._settings.api_timeout,
        }

    def __repr__(self) -> str:
        return (
            f"ConfigManager(environment={self.get_environment()!r}, "
            f"base_url={self.get_base_url()!r}, browser={self.get_browser()!r})"
        )


@lru_cache(maxsize=1)
def get_settings() -> ConfigManager:
    """Cached ConfigManager for scripts; tests get theirs from the plugin."""
    return ConfigManager()
