"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        DmCompanionError: Base exception for all application errors.
        ConfigurationError: Configuration-related errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
        log_context: Bind logging context for one block.
"""

from __future__ import annotations

from dm_companion.core.config import (
    AIProviderSettings,
    GameSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from dm_companion.core.exceptions import (
    AIConnectionError,
    AIControlError,
    AIResponseError,
    CombatError,
    ConfigurationError,
    DiceRollError,
    DmCompanionError,
    GameEngineError,
    ModuleError,
    ModuleLoadError,
    ModuleValidationError,
)
from dm_companion.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    log_context,
)


__all__ = [
    # Config
    "AIProviderSettings",
    "GameSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Exceptions
    "DmCompanionError",
    "GameEngineError",
    "CombatError",
    "DiceRollError",
    "ModuleError",
    "ModuleLoadError",
    "ModuleValidationError",
    "AIControlError",
    "AIConnectionError",
    "AIResponseError",
    "ConfigurationError",
    # Logging
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
    "log_context",
]
