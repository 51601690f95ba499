"""Configuration management for TorchTime.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files, and runtime overrides.

Example:
    >>> from torchtime.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.app_name)
    'TorchTime'

Environment Variables:
    TORCHTIME_DATABASE_PATH: Path to the local storage database
    TORCHTIME_STORAGE_KEY: Key the state document is stored under
    TORCHTIME_API_BASE_URL: Base URL of the D&D 5e reference API
    TORCHTIME_GAME_DEFAULT_HIT_DIE: Hit die used when a class has none
    TORCHTIME_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from torchtime.core.constants import DEFAULT_HIT_DIE, HIT_DIE_SIZES
from torchtime.core.exceptions import ConfigurationError


class StorageSettings(BaseSettings):
    """Configuration for the local state store.

    Attributes:
        database_path: Path to the SQLite file backing local storage.
        storage_key: Key under which the whole state document is stored.
    """

    model_config = SettingsConfigDict(
        env_prefix="TORCHTIME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/torchtime.db"),
        description="Path to the local storage database",
    )
    storage_key: str = Field(
        default="torchtimeData",
        min_length=1,
        description="Storage key of the state document",
    )


class ReferenceApiSettings(BaseSettings):
    """Configuration for the public D&D 5e reference API.

    Attributes:
        base_url: API root, without trailing slash.
        timeout_seconds: Per-request timeout.
        enable_cache: Keep successful responses in memory.
    """

    model_config = SettingsConfigDict(
        env_prefix="TORCHTIME_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default="https://www.dnd5eapi.co/api",
        description="Reference API base URL",
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Request timeout",
    )
    enable_cache: bool = Field(
        default=True,
        description="Cache successful responses in memory",
    )

    @field_validator("base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalise the base URL so paths can be appended with '/'."""
        if not value.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"base_url must be an http(s) URL, got {value!r}",
                config_key="base_url",
            )
        return value.rstrip("/")


class GameSettings(BaseSettings):
    """Configuration for game rules and tools.

    Attributes:
        default_hit_die: Hit die used when the class payload has none.
        dice_log_limit: Maximum number of dice-roll log entries kept.
        timer_max_minutes: Longest countdown the timer accepts.
    """

    model_config = SettingsConfigDict(
        env_prefix="TORCHTIME_GAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_hit_die: int = Field(
        default=DEFAULT_HIT_DIE,
        description="Default hit die size",
    )
    dice_log_limit: int = Field(
        default=200,
        ge=1,
        le=10000,
        description="Dice roll log entries kept",
    )
    timer_max_minutes: int = Field(
        default=720,
        ge=1,
        description="Longest countdown in minutes",
    )

    @field_validator("default_hit_die", mode="after")
    @classmethod
    def validate_hit_die(cls, value: int) -> int:
        """Only class hit dice are allowed."""
        if value not in HIT_DIE_SIZES:
            raise ConfigurationError(
                f"default_hit_die must be one of {HIT_DIE_SIZES}, got {value}",
                config_key="default_hit_die",
            )
        return value


class UISettings(BaseSettings):
    """Configuration for the Streamlit UI.

    Attributes:
        page_title: Browser page title.
        default_route: Route rendered when the fragment is empty.
    """

    model_config = SettingsConfigDict(
        env_prefix="TORCHTIME_UI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    page_title: str = Field(
        default="TorchTime",
        description="Browser page title",
    )
    default_route: str = Field(
        default="dashboard",
        description="Route used for an empty fragment",
    )

    @model_validator(mode="after")
    def validate_default_route(self) -> "UISettings":
        """Ensure the default route is not an authentication screen.

        Raises:
            ConfigurationError: If the default route is login, register or logout.
        """
        if self.default_route.lstrip("#") in {"login", "register", "logout"}:
            raise ConfigurationError(
                f"default_route cannot be {self.default_route!r}",
                config_key="default_route",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        storage: Local state store settings.
        api: Reference API settings.
        game: Game rules settings.
        ui: UI settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="TORCHTIME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="TorchTime", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: ReferenceApiSettings = Field(default_factory=ReferenceApiSettings)
    game: GameSettings = Field(default_factory=GameSettings)
    ui: UISettings = Field(default_factory=UISettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "StorageSettings",
    "ReferenceApiSettings",
    "GameSettings",
    "UISettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
