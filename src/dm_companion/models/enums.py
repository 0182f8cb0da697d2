"""Enumeration types for the DM Companion.

This module defines the enumeration types used throughout the
application: ability scores, skills and their governing abilities,
damage types, room lighting, NPC dispositions and log roles.
"""

from __future__ import annotations

from enum import StrEnum


class Ability(StrEnum):
    """The six ability scores."""

    STR = "strength"
    DEX = "dexterity"
    CON = "constitution"
    INT = "intelligence"
    WIS = "wisdom"
    CHA = "charisma"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability (e.g., 'Strength' for STR)."""
        return self.value.capitalize()

    @property
    def abbreviation(self) -> str:
        """Get the three-letter abbreviation (e.g., 'STR')."""
        return self.name

    @classmethod
    def from_label(cls, label: str) -> Ability:
        """Resolve an ability from its abbreviation or full name.

        Module data keys abilities as ``"DEX"`` while character sheets use
        ``"dexterity"``; both resolve to the same member.

        Raises:
            ValueError: If the label names no ability.
        """
        text = label.strip()
        if text.upper() in cls.__members__:
            return cls[text.upper()]
        return cls(text.lower())


class Skill(StrEnum):
    """The eighteen skills and their governing abilities.

    Values are the display names used in module data (``"Sleight of Hand"``),
    so module stat blocks can key skills exactly as written.
    """

    # Strength skills
    ATHLETICS = "Athletics"

    # Dexterity skills
    ACROBATICS = "Acrobatics"
    SLEIGHT_OF_HAND = "Sleight of Hand"
    STEALTH = "Stealth"

    # Intelligence skills
    ARCANA = "Arcana"
    HISTORY = "History"
    INVESTIGATION = "Investigation"
    NATURE = "Nature"
    RELIGION = "Religion"

    # Wisdom skills
    ANIMAL_HANDLING = "Animal Handling"
    INSIGHT = "Insight"
    MEDICINE = "Medicine"
    PERCEPTION = "Perception"
    SURVIVAL = "Survival"

    # Charisma skills
    DECEPTION = "Deception"
    INTIMIDATION = "Intimidation"
    PERFORMANCE = "Performance"
    PERSUASION = "Persuasion"

    @property
    def ability(self) -> Ability:
        """Get the governing ability for this skill.

        Returns:
            The Ability enum value associated with this skill.
        """
        return SKILL_ABILITIES[self]

    @property
    def field_name(self) -> str:
        """Get the snake_case attribute name used on SkillProficiencies."""
        return self.name.lower()


SKILL_ABILITIES: dict[Skill, Ability] = {
    # Strength
    Skill.ATHLETICS: Ability.STR,
    # Dexterity
    Skill.ACROBATICS: Ability.DEX,
    Skill.SLEIGHT_OF_HAND: Ability.DEX,
    Skill.STEALTH: Ability.DEX,
    # Intelligence
    Skill.ARCANA: Ability.INT,
    Skill.HISTORY: Ability.INT,
    Skill.INVESTIGATION: Ability.INT,
    Skill.NATURE: Ability.INT,
    Skill.RELIGION: Ability.INT,
    # Wisdom
    Skill.ANIMAL_HANDLING: Ability.WIS,
    Skill.INSIGHT: Ability.WIS,
    Skill.MEDICINE: Ability.WIS,
    Skill.PERCEPTION: Ability.WIS,
    Skill.SURVIVAL: Ability.WIS,
    # Charisma
    Skill.DECEPTION: Ability.CHA,
    Skill.INTIMIDATION: Ability.CHA,
    Skill.PERFORMANCE: Ability.CHA,
    Skill.PERSUASION: Ability.CHA,
}
"""Governing ability for every skill."""


class DamageType(StrEnum):
    """Damage types used by attack blocks."""

    SLASHING = "slashing"
    PIERCING = "piercing"
    BLUDGEONING = "bludgeoning"
    FIRE = "fire"
    COLD = "cold"
    ACID = "acid"
    LIGHTNING = "lightning"
    THUNDER = "thunder"
    NECROTIC = "necrotic"
    RADIANT = "radiant"
    POISON = "poison"
    PSYCHIC = "psychic"


class LightLevel(StrEnum):
    """Lighting in a room."""

    BRIGHT = "bright"
    DIM = "dim"
    DARK = "dark"


class Disposition(StrEnum):
    """How an NPC feels about the party."""

    HOSTILE = "hostile"
    WARY = "wary"
    NEUTRAL = "neutral"
    FRIENDLY = "friendly"


class MessageRole(StrEnum):
    """Author of a session log entry."""

    DM = "dm"
    PLAYER = "player"
    SYSTEM = "system"


class EncounterPhase(StrEnum):
    """Top-level state of the encounter state machine."""

    NO_ENCOUNTER = "no_encounter"
    ACTIVE_ENCOUNTER = "active_encounter"


class AIProvider(StrEnum):
    """LLM backends the DM chat can stream from."""

    OLLAMA = "ollama"
    CLAUDE = "claude"


__all__ = [
    "Ability",
    "Skill",
    "SKILL_ABILITIES",
    "DamageType",
    "LightLevel",
    "Disposition",
    "MessageRole",
    "EncounterPhase",
    "AIProvider",
]
