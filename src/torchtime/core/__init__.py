"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        TorchTimeError: Base exception for all application errors.
        ValidationError: User input errors shown back in forms.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from torchtime.core.config import (
    GameSettings,
    ReferenceApiSettings,
    Settings,
    StorageSettings,
    UISettings,
    clear_settings_cache,
    get_settings,
)
from torchtime.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DiceRollError,
    EntityNotFoundError,
    LevelingError,
    PermissionDeniedError,
    ProposalFinalizedError,
    ReferenceDataError,
    SchedulingError,
    StorageError,
    TorchTimeError,
    ValidationError,
)
from torchtime.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Exceptions
    "TorchTimeError",
    "ConfigurationError",
    "ValidationError",
    "AuthenticationError",
    "PermissionDeniedError",
    "EntityNotFoundError",
    "SchedulingError",
    "ProposalFinalizedError",
    "LevelingError",
    "DiceRollError",
    "StorageError",
    "ReferenceDataError",
    # Configuration
    "Settings",
    "StorageSettings",
    "ReferenceApiSettings",
    "GameSettings",
    "UISettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
