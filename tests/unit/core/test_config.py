"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from dm_companion.core.config import (
    AIProviderSettings,
    GameSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from dm_companion.core.exceptions import ConfigurationError


class TestAIProviderSettings:
    """Tests for AIProviderSettings configuration."""

    def test_default_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default provider settings."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("DM_COMPANION_CLAUDE_API_KEY", raising=False)

        settings = AIProviderSettings()

        assert settings.default_provider == "ollama"
        assert settings.ollama_url == "http://localhost:11434"
        assert settings.ollama_model == "mistral:latest"
        assert settings.claude_api_key is None
        assert settings.max_tokens == 4096
        assert settings.temperature == 0.7

    def test_api_key_is_secret(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the Claude key is loaded from the environment and masked."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DM_COMPANION_CLAUDE_API_KEY", "sk-test-key")

        settings = AIProviderSettings()

        assert settings.claude_api_key is not None
        assert settings.claude_api_key.get_secret_value() == "sk-test-key"
        assert "sk-test-key" not in repr(settings)

    def test_ollama_url_trailing_slash_stripped(self) -> None:
        """Test the Ollama URL is normalized."""
        settings = AIProviderSettings(ollama_url="http://gpu-box:11434/")

        assert settings.ollama_url == "http://gpu-box:11434"

    def test_ollama_url_scheme_validation(self) -> None:
        """Test that a non-HTTP Ollama URL is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            AIProviderSettings(ollama_url="localhost:11434")

        assert exc_info.value.details["config_key"] == "ollama_url"


class TestGameSettings:
    """Tests for GameSettings configuration."""

    def test_default_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default combat rules."""
        monkeypatch.chdir(tmp_path)

        settings = GameSettings()

        assert settings.default_module == "goblin-cave"
        assert settings.enemy_turn_delay_seconds == 1.0
        assert settings.fallback_attack_bonus == 2
        assert settings.fallback_armor_class == 10
        assert settings.player_damage_die == 8
        assert settings.enemy_damage_mode == "fixed"
        assert settings.enemy_fixed_damage == 4
        assert settings.strict_module_validation is False

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test game settings read their own prefix."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DM_COMPANION_GAME_ENEMY_DAMAGE_MODE", "dice")
        monkeypatch.setenv("DM_COMPANION_GAME_ENEMY_TURN_DELAY_SECONDS", "0.25")

        settings = GameSettings()

        assert settings.enemy_damage_mode == "dice"
        assert settings.enemy_turn_delay_seconds == 0.25


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default settings initialization."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.app_name == "DM Companion"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert isinstance(settings.ai, AIProviderSettings)
        assert isinstance(settings.game, GameSettings)

    def test_debug_mode(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test debug mode setting."""
        monkeypatch.setenv("DM_COMPANION_DEBUG", "true")
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.debug is True


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_returns_cached_instance(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that get_settings returns the same instance."""
        monkeypatch.chdir(tmp_path)

        assert get_settings() is get_settings()

    def test_clear_cache_reloads(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that clearing the cache picks up new environment values."""
        monkeypatch.chdir(tmp_path)
        first = get_settings()

        monkeypatch.setenv("DM_COMPANION_LOG_LEVEL", "DEBUG")
        clear_settings_cache()
        second = get_settings()

        assert second is not first
        assert second.log_level == "DEBUG"

    def test_invalid_configuration_raises(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that load failures surface as ConfigurationError."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DM_COMPANION_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            get_settings()
