"""Data models for modules, characters and session state."""

from __future__ import annotations

from dm_companion.models.character import (
    AbilityScores,
    Character,
    InventoryItem,
    SkillProficiencies,
    ability_modifier,
    proficiency_bonus,
)
from dm_companion.models.enums import (
    SKILL_ABILITIES,
    AIProvider,
    Ability,
    DamageType,
    Disposition,
    EncounterPhase,
    LightLevel,
    MessageRole,
    Skill,
)
from dm_companion.models.module import (
    NPC,
    AdventureModule,
    AttackBlock,
    Check,
    Container,
    DialogueLine,
    Encounter,
    EncounterEnemyRef,
    EncounterScaling,
    Item,
    Lock,
    ModuleRules,
    Objective,
    Room,
    Secret,
    StatBlock,
)
from dm_companion.models.session import (
    ActionOption,
    ActiveEncounterState,
    AttackOutcome,
    DieRoll,
    EnemyInstance,
    LogEntry,
    ModuleProgress,
    SkillCheckResult,
)


__all__ = [
    # Enums
    "Ability",
    "Skill",
    "SKILL_ABILITIES",
    "DamageType",
    "LightLevel",
    "Disposition",
    "MessageRole",
    "EncounterPhase",
    "AIProvider",
    # Module
    "AdventureModule",
    "Room",
    "Secret",
    "Check",
    "Encounter",
    "EncounterEnemyRef",
    "EncounterScaling",
    "StatBlock",
    "AttackBlock",
    "Container",
    "Lock",
    "Item",
    "NPC",
    "DialogueLine",
    "Objective",
    "ModuleRules",
    # Character
    "Character",
    "AbilityScores",
    "SkillProficiencies",
    "InventoryItem",
    "ability_modifier",
    "proficiency_bonus",
    # Session
    "ModuleProgress",
    "EnemyInstance",
    "ActiveEncounterState",
    "LogEntry",
    "DieRoll",
    "ActionOption",
    "AttackOutcome",
    "SkillCheckResult",
]
