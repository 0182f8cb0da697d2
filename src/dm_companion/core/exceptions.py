"""Custom exception hierarchy for the DM Companion.

All exceptions inherit from DmCompanionError, enabling unified error
handling at the application boundary while preserving domain-specific
context.

Invalid player commands (moving through a missing exit, attacking outside
of combat) are never raised; the game session answers them with a system
log entry. The exceptions below cover programmer errors, configuration
problems and transport failures.

Example:
    >>> from dm_companion.core.exceptions import DiceRollError
    >>> raise DiceRollError("Die must have at least one side", expression="d0")
"""

from __future__ import annotations

from typing import Any


class DmCompanionError(Exception):
    """Base exception for all DM Companion errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(DmCompanionError):
    """Base exception for game session, combat and dice errors."""


class CombatError(GameEngineError):
    """Raised when combat resolution encounters an internal error."""

    def __init__(
        self,
        message: str,
        *,
        combatant_id: str | None = None,
        encounter_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            combatant_id: Instance id of the enemy involved.
            encounter_id: Id of the encounter template in play.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant_id:
            combined_details["combatant_id"] = combatant_id
        if encounter_id:
            combined_details["encounter_id"] = encounter_id
        super().__init__(message, details=combined_details)


class DiceRollError(GameEngineError):
    """Raised when a roll request breaks the dice contract.

    This covers dice with fewer than one side and unparseable die
    notation strings.
    """

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


# =============================================================================
# Adventure Module Exceptions
# =============================================================================


class ModuleError(DmCompanionError):
    """Base exception for adventure module loading problems."""


class ModuleLoadError(ModuleError):
    """Raised when a requested adventure module cannot be found or built."""

    def __init__(
        self,
        message: str,
        *,
        module_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if module_id:
            combined_details["module_id"] = module_id
        super().__init__(message, details=combined_details)


class ModuleValidationError(ModuleError):
    """Raised by a strict load when the validator reports problems.

    Attributes:
        errors: The human-readable validator messages.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: list[str] | None = None,
        module_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.errors = list(errors or [])
        combined_details = details or {}
        if module_id:
            combined_details["module_id"] = module_id
        if self.errors:
            combined_details["error_count"] = len(self.errors)
        super().__init__(message, details=combined_details)


# =============================================================================
# AI Control Domain Exceptions
# =============================================================================


class AIControlError(DmCompanionError):
    """Base exception for all LLM-related errors.

    Raised when there are issues with model interactions, including
    API calls, streaming or response parsing.
    """

    def __init__(
        self,
        message: str,
        *,
        model: str | None = None,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize AI control error with model context.

        Args:
            message: Human-readable error description.
            model: Name of the model involved.
            provider: Name of the provider (e.g., 'ollama', 'claude').
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if model:
            combined_details["model"] = model
        if provider:
            combined_details["provider"] = provider
        super().__init__(message, details=combined_details)


class AIConnectionError(AIControlError):
    """Raised when a model backend cannot be reached or is not configured."""


class AIResponseError(AIControlError):
    """Raised when a model backend returns an error or unusable response."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(DmCompanionError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "DmCompanionError",
    # Game engine exceptions
    "GameEngineError",
    "CombatError",
    "DiceRollError",
    # Module exceptions
    "ModuleError",
    "ModuleLoadError",
    "ModuleValidationError",
    # AI control exceptions
    "AIControlError",
    "AIConnectionError",
    "AIResponseError",
    # Configuration exceptions
    "ConfigurationError",
]
