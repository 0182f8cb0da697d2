"""DM Companion - a tabletop RPG companion with an AI Dungeon Master.

Python owns the game state: module progress, encounters, hit points and
dice. The language model only narrates, from a prompt rebuilt out of that
state before every request.

Example:
    >>> from dm_companion import GameSession, load_module
    >>> session = GameSession()
    >>> session.load_module(load_module("goblin-cave"))
    >>> session.current_room.name
    'Cave Mouth'

Modules:
    core: Configuration, logging, constants and base exceptions.
    models: Module data model, character sheet and session records.
    engine: Dice, scheduling, module validation and the game session.
    dm: Prompt building, LLM providers and the DM chat.
    data: Bundled adventure modules.
"""

from __future__ import annotations

# Core
from dm_companion.core.config import Settings, get_settings
from dm_companion.core.exceptions import DmCompanionError
from dm_companion.core.logging import configure_logging, get_logger

# Bundled modules
from dm_companion.data import available_modules, load_module

# AI Dungeon Master
from dm_companion.dm.chat import DungeonMasterChat
from dm_companion.dm.llm import ClaudeProvider, LLMBridge, OllamaProvider, create_bridge
from dm_companion.dm.prompts import build_dm_prompt

# Engine
from dm_companion.engine.dice import DiceRoller
from dm_companion.engine.scheduler import AsyncioScheduler, ManualScheduler
from dm_companion.engine.session import GameSession
from dm_companion.engine.validator import traverse_rooms, validate_module

# Models
from dm_companion.models.character import AbilityScores, Character, SkillProficiencies
from dm_companion.models.enums import Ability, MessageRole, Skill
from dm_companion.models.module import AdventureModule


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "DmCompanionError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Ability",
    "Skill",
    "MessageRole",
    "AbilityScores",
    "SkillProficiencies",
    "Character",
    "AdventureModule",
    # Engine
    "DiceRoller",
    "AsyncioScheduler",
    "ManualScheduler",
    "GameSession",
    "validate_module",
    "traverse_rooms",
    # DM
    "build_dm_prompt",
    "OllamaProvider",
    "ClaudeProvider",
    "LLMBridge",
    "create_bridge",
    "DungeonMasterChat",
    # Data
    "available_modules",
    "load_module",
]
