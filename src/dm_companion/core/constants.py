"""Application-wide constants for the DM Companion.

This module defines rules constants, LLM defaults, and the fixed
player-facing strings the session log relies on.
"""

from __future__ import annotations

# =============================================================================
# Rules Constants
# =============================================================================

D20 = 20
"""Sides on the die used for attack rolls and checks."""

MIN_CHARACTER_LEVEL = 1
"""Lowest character level."""

MAX_CHARACTER_LEVEL = 20
"""Highest character level."""

MIN_ABILITY_SCORE = 1
"""Lowest ability score accepted by the character model."""

MAX_ABILITY_SCORE = 30
"""Highest ability score accepted by the character model."""

LOOSE_CURRENCY_SUFFIX = "gp"
"""Treasure strings ending with this suffix are coin, not item ids."""

# =============================================================================
# LLM Defaults
# =============================================================================

DEFAULT_OLLAMA_URL = "http://localhost:11434"
"""Local Ollama server address."""

DEFAULT_OLLAMA_MODEL = "mistral:latest"
"""Ollama model used until the user picks another."""

DEFAULT_CLAUDE_MODEL = "claude-3-5-sonnet-20241022"
"""Claude model used until the user picks another."""

CLAUDE_MODELS = (
    "claude-3-5-sonnet-20241022",
    "claude-3-5-haiku-20241022",
    "claude-3-opus-20240229",
)
"""Claude models offered in the model selector."""

# =============================================================================
# Session Strings
# =============================================================================

DEFAULT_MODULE_ID = "goblin-cave"
"""Bundled adventure loaded when nothing else is requested."""

WELCOME_MESSAGE = "Welcome, adventurer! Create or select a character to begin your quest."
"""First system entry of a fresh session log."""

FALLBACK_DM_RESPONSE = "The cavern air chills as you act. (No language model connected.)"
"""Narration used when no LLM backend is available."""
