"""Configuration management for the DM Companion.

This module provides centralized configuration management using
pydantic-settings, supporting environment variables, .env files, and
runtime overrides. The Claude API key is handled as a SecretStr.

Example:
    >>> from dm_companion.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.app_name)
    'DM Companion'

Environment Variables:
    DM_COMPANION_DEFAULT_PROVIDER: LLM backend to use ('ollama' or 'claude')
    DM_COMPANION_OLLAMA_URL: Base URL of the local Ollama server
    DM_COMPANION_CLAUDE_API_KEY: Anthropic API key
    DM_COMPANION_GAME_ENEMY_TURN_DELAY_SECONDS: Delay before enemies strike back
    DM_COMPANION_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dm_companion.core.constants import (
    DEFAULT_CLAUDE_MODEL,
    DEFAULT_MODULE_ID,
    DEFAULT_OLLAMA_MODEL,
    DEFAULT_OLLAMA_URL,
)
from dm_companion.core.exceptions import ConfigurationError


class AIProviderSettings(BaseSettings):
    """Configuration for LLM provider connections.

    Attributes:
        default_provider: The backend selected at startup.
        ollama_url: Base URL of the local Ollama server.
        ollama_model: Ollama model tag used for chat.
        claude_api_key: Anthropic API key for the hosted backend.
        claude_model: Claude model identifier.
        max_tokens: Maximum tokens requested per response.
        temperature: Sampling temperature.
        max_retries: Maximum number of connection retry attempts.
        timeout_seconds: Request timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="DM_COMPANION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_provider: Literal["ollama", "claude"] = Field(
        default="ollama",
        description="LLM backend selected at startup",
    )
    ollama_url: str = Field(
        default=DEFAULT_OLLAMA_URL,
        description="Ollama server base URL",
    )
    ollama_model: str = Field(
        default=DEFAULT_OLLAMA_MODEL,
        description="Ollama model tag",
    )
    claude_api_key: SecretStr | None = Field(
        default=None,
        description="Anthropic API key",
    )
    claude_model: str = Field(
        default=DEFAULT_CLAUDE_MODEL,
        description="Claude model identifier",
    )
    max_tokens: int = Field(
        default=4096,
        ge=1,
        le=32000,
        description="Maximum tokens per response",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Sampling temperature",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum connection retry attempts",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=300,
        description="API request timeout",
    )

    @field_validator("ollama_url", mode="after")
    @classmethod
    def validate_ollama_url(cls, value: str) -> str:
        """Ensure the Ollama URL is an http(s) URL without a trailing slash.

        Raises:
            ConfigurationError: If the URL scheme is not http or https.
        """
        if not value.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"ollama_url must start with http:// or https:// (got {value!r})",
                config_key="ollama_url",
            )
        return value.rstrip("/")


class GameSettings(BaseSettings):
    """Configuration for the combat and exploration rules.

    Attributes:
        default_module: Bundled adventure loaded at startup.
        enemy_turn_delay_seconds: Delay between a player attack and the
            enemy response.
        fallback_attack_bonus: Attack bonus used when no character is selected.
        fallback_armor_class: Armor class enemies roll against when no
            character is selected.
        player_damage_die: Die rolled for player weapon damage.
        enemy_damage_mode: 'fixed' applies enemy_fixed_damage on every enemy
            hit, 'dice' rolls the attack's damage notation.
        enemy_fixed_damage: Damage dealt by an enemy hit in 'fixed' mode.
        strict_module_validation: Refuse to load modules with validator errors.
    """

    model_config = SettingsConfigDict(
        env_prefix="DM_COMPANION_GAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_module: str = Field(
        default=DEFAULT_MODULE_ID,
        description="Bundled adventure loaded at startup",
    )
    enemy_turn_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        le=30,
        description="Delay before the enemy turn resolves",
    )
    fallback_attack_bonus: int = Field(
        default=2,
        ge=-5,
        le=20,
        description="Attack bonus without a selected character",
    )
    fallback_armor_class: int = Field(
        default=10,
        ge=1,
        le=30,
        description="Armor class without a selected character",
    )
    player_damage_die: int = Field(
        default=8,
        ge=2,
        le=20,
        description="Player weapon damage die",
    )
    enemy_damage_mode: Literal["fixed", "dice"] = Field(
        default="fixed",
        description="How enemy hit damage is determined",
    )
    enemy_fixed_damage: int = Field(
        default=4,
        ge=0,
        le=100,
        description="Damage per enemy hit in fixed mode",
    )
    strict_module_validation: bool = Field(
        default=False,
        description="Treat module validator errors as fatal",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        log_json: Emit diagnostic logs as JSON lines.
        log_file: Optional file that also receives diagnostic logs.
        ai: LLM provider settings.
        game: Combat and exploration settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DM_COMPANION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    # Application metadata
    app_name: str = Field(
        default="DM Companion",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Render diagnostic logs as JSON",
    )
    log_file: str | None = Field(
        default=None,
        description="Also write diagnostic logs to this file",
    )

    ai: AIProviderSettings = Field(default_factory=AIProviderSettings)
    game: GameSettings = Field(default_factory=GameSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The cached Settings instance.

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
    """Clear the settings cache, forcing a reload on next access.

    Primarily useful for testing or when environment variables have
    changed at runtime.
    """
    get_settings.cache_clear()


__all__ = [
    "AIProviderSettings",
    "GameSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
