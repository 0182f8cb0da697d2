"""Pydantic V2 schemas for player characters.

This module defines the character sheet: ability scores, skill
proficiencies, inventory and hit points, plus the derived statistics the
combat resolver and prompt builder read (modifiers, proficiency bonus,
attack and damage bonuses).
"""

from __future__ import annotations

import math
from typing import Annotated
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from dm_companion.core.constants import (
    MAX_ABILITY_SCORE,
    MAX_CHARACTER_LEVEL,
    MIN_ABILITY_SCORE,
    MIN_CHARACTER_LEVEL,
)
from dm_companion.models.enums import Ability, Skill


def ability_modifier(score: int) -> int:
    """Calculate the ability modifier for a score.

    Args:
        score: Ability score.

    Returns:
        ``(score - 10) // 2``, rounded toward negative infinity.
    """
    return (score - 10) // 2


def proficiency_bonus(level: int) -> int:
    """Calculate the proficiency bonus for a character level.

    Args:
        level: Character level (1-20).

    Returns:
        Proficiency bonus (2 at level 1, 6 at level 17+).
    """
    return math.ceil(level / 4) + 1


def _new_id() -> str:
    return uuid4().hex


AbilityScoreValue = Annotated[int, Field(ge=MIN_ABILITY_SCORE, le=MAX_ABILITY_SCORE)]


class AbilityScores(BaseModel):
    """The six ability scores of a character.

    Attributes:
        strength: Strength score.
        dexterity: Dexterity score.
        constitution: Constitution score.
        intelligence: Intelligence score.
        wisdom: Wisdom score.
        charisma: Charisma score.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    strength: AbilityScoreValue = Field(default=10, description="Strength score")
    dexterity: AbilityScoreValue = Field(default=10, description="Dexterity score")
    constitution: AbilityScoreValue = Field(default=10, description="Constitution score")
    intelligence: AbilityScoreValue = Field(default=10, description="Intelligence score")
    wisdom: AbilityScoreValue = Field(default=10, description="Wisdom score")
    charisma: AbilityScoreValue = Field(default=10, description="Charisma score")

    def score(self, ability: Ability) -> int:
        return getattr(self, ability.value)

    def get_modifier(self, ability: Ability) -> int:
        """Calculate the ability modifier for a given ability.

        Args:
            ability: The ability to get the modifier for.

        Returns:
            The ability modifier.
        """
        return ability_modifier(self.score(ability))


class SkillProficiencies(BaseModel):
    """Proficiency flags for the eighteen skills."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    acrobatics: bool = False
    animal_handling: bool = False
    arcana: bool = False
    athletics: bool = False
    deception: bool = False
    history: bool = False
    insight: bool = False
    intimidation: bool = False
    investigation: bool = False
    medicine: bool = False
    nature: bool = False
    perception: bool = False
    performance: bool = False
    persuasion: bool = False
    religion: bool = False
    sleight_of_hand: bool = False
    stealth: bool = False
    survival: bool = False

    def has(self, skill: Skill) -> bool:
        return getattr(self, skill.field_name)

    @classmethod
    def of(cls, *skills: Skill) -> SkillProficiencies:
        """Build a proficiency set trained in the given skills."""
        return cls(**{skill.field_name: True for skill in skills})


class InventoryItem(BaseModel):
    """An item carried by a character."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    id: str = Field(default_factory=_new_id, description="Item identifier")
    name: str = Field(min_length=1, description="Item name")
    description: str = ""
    quantity: int = Field(default=1, ge=0)
    weight: float = Field(default=0.0, ge=0)
    equipped: bool = False


class Character(BaseModel):
    """A player character sheet.

    Hit points are kept within ``0..max_hp`` whenever they are set,
    whether on construction, on assignment or through ``apply_damage`` and
    ``apply_healing``.

    Attributes:
        id: Unique character identifier.
        name: Character name.
        race: Character race.
        character_class: Class name (``class`` in stored sheets).
        level: Character level (1-20).
        background: Background name.
        abilities: Ability scores.
        max_hp: Maximum hit points.
        hp: Current hit points.
        temp_hp: Temporary hit points, lost before current HP.
        armor_class: Armor class.
        speed: Speed in feet.
        skills: Skill proficiency flags.
        inventory: Carried items.
        gold: Gold pieces.
    """

    # Stored sheets carry derived fields such as proficiencyBonus.
    model_config = ConfigDict(
        extra="ignore",
        validate_assignment=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str = Field(default_factory=_new_id, description="Unique identifier")
    name: str = Field(min_length=1, max_length=100, description="Character name")
    race: str = Field(min_length=1, max_length=50, description="Character race")
    character_class: str = Field(alias="class", min_length=1, max_length=50, description="Class name")
    level: int = Field(default=1, ge=MIN_CHARACTER_LEVEL, le=MAX_CHARACTER_LEVEL)
    background: str = ""
    abilities: AbilityScores = Field(default_factory=AbilityScores)
    max_hp: int = Field(ge=1, description="Maximum HP")
    hp: int = Field(description="Current HP")
    temp_hp: int = Field(default=0, ge=0, description="Temporary HP")
    armor_class: int = Field(default=10, ge=1, le=30, description="Armor class")
    speed: int = Field(default=30, ge=0, description="Speed in feet")
    skills: SkillProficiencies = Field(default_factory=SkillProficiencies)
    inventory: list[InventoryItem] = Field(default_factory=list)
    gold: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def clamp_hp(self) -> Character:
        """Keep current HP within ``0..max_hp`` after any field changes."""
        clamped = max(0, min(self.hp, self.max_hp))
        if clamped != self.hp:
            # Plain setattr would re-enter assignment validation
            object.__setattr__(self, "hp", clamped)
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def proficiency_bonus(self) -> int:
        """Proficiency bonus derived from level."""
        return proficiency_bonus(self.level)

    @property
    def is_conscious(self) -> bool:
        return self.hp > 0

    def modifier(self, ability: Ability) -> int:
        return self.abilities.get_modifier(ability)

    def is_proficient(self, skill: Skill) -> bool:
        return self.skills.has(skill)

    def skill_modifier(self, skill: Skill) -> int:
        """Calculate the total modifier for a skill check.

        Args:
            skill: The skill being checked.

        Returns:
            Governing ability modifier plus proficiency bonus when trained.
        """
        bonus = self.modifier(skill.ability)
        if self.is_proficient(skill):
            bonus += self.proficiency_bonus
        return bonus

    @property
    def proficient_skills(self) -> list[Skill]:
        """Trained skills in alphabetical order."""
        return sorted((skill for skill in Skill if self.is_proficient(skill)), key=str)

    @property
    def equipped_items(self) -> list[InventoryItem]:
        return [item for item in self.inventory if item.equipped]

    @property
    def damage_bonus(self) -> int:
        """Better of the Strength and Dexterity modifiers."""
        return max(self.modifier(Ability.STR), self.modifier(Ability.DEX))

    @property
    def attack_bonus(self) -> int:
        """Weapon attack bonus: proficiency plus the better physical modifier."""
        return self.proficiency_bonus + self.damage_bonus

    def apply_damage(self, amount: int) -> int:
        """Apply damage and return the HP actually lost.

        Temp HP absorbs damage first.
        """
        if amount <= 0:
            return 0

        if self.temp_hp > 0:
            absorbed = min(self.temp_hp, amount)
            self.temp_hp -= absorbed
            amount -= absorbed

        before = self.hp
        self.hp = before - amount
        return before - self.hp

    def apply_healing(self, amount: int) -> int:
        """Apply healing and return the HP actually restored."""
        if amount <= 0:
            return 0
        before = self.hp
        self.hp = before + amount
        return self.hp - before


__all__ = [
    "ability_modifier",
    "proficiency_bonus",
    "AbilityScores",
    "SkillProficiencies",
    "InventoryItem",
    "Character",
]
