"""Mutable session records.

These models hold what changes while a module is played: progress
through the room graph, live enemy instances of the active encounter,
the player-visible session log and dice results. The static module data
they point into lives in ``dm_companion.models.module``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from dm_companion.models.enums import MessageRole, Skill
from dm_companion.models.module import StatBlock


def _new_id() -> str:
    return uuid4().hex


def _now() -> datetime:
    return datetime.now(UTC)


class ModuleProgress(BaseModel):
    """Where the party is in a module and what it has accomplished.

    Attributes:
        module_id: Module being played.
        current_room: Id of the room the party is in.
        defeated_encounters: Encounter ids cleared, in order, each at most once.
        visited_rooms: Room ids entered, in first-visit order.
        completed_objectives: Objective ids completed, each at most once.
    """

    model_config = ConfigDict(validate_assignment=True)

    module_id: str
    current_room: str
    defeated_encounters: list[str] = Field(default_factory=list)
    visited_rooms: list[str] = Field(default_factory=list)
    completed_objectives: list[str] = Field(default_factory=list)

    def is_defeated(self, encounter_id: str) -> bool:
        return encounter_id in self.defeated_encounters

    def mark_defeated(self, encounter_id: str) -> bool:
        """Record a cleared encounter. Returns False if it was already recorded."""
        if encounter_id in self.defeated_encounters:
            return False
        self.defeated_encounters.append(encounter_id)
        return True

    def mark_visited(self, room_id: str) -> None:
        if room_id not in self.visited_rooms:
            self.visited_rooms.append(room_id)

    def complete_objective(self, objective_id: str) -> bool:
        if objective_id in self.completed_objectives:
            return False
        self.completed_objectives.append(objective_id)
        return True


class EnemyInstance(BaseModel):
    """A live enemy spawned from an encounter template.

    ``stats`` is the template stat block itself, shared between every
    instance of the same enemy entry.
    """

    model_config = ConfigDict(validate_assignment=True)

    instance_id: str = Field(default_factory=_new_id)
    name: str
    hp: int
    max_hp: int
    ac: int
    stats: StatBlock

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0

    @property
    def hp_display(self) -> str:
        return f"{self.hp}/{self.max_hp}"


class ActiveEncounterState(BaseModel):
    """The encounter currently being fought."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(description="Source encounter id")
    name: str
    enemies: list[EnemyInstance] = Field(default_factory=list)
    tactics: str | None = None

    @property
    def is_cleared(self) -> bool:
        return not self.enemies

    def find_enemy(self, instance_id: str) -> EnemyInstance | None:
        return next((e for e in self.enemies if e.instance_id == instance_id), None)

    def remove_enemy(self, instance_id: str) -> EnemyInstance | None:
        enemy = self.find_enemy(instance_id)
        if enemy is not None:
            self.enemies.remove(enemy)
        return enemy


class LogEntry(BaseModel):
    """One line of the player-visible session log."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    role: MessageRole
    text: str
    timestamp: datetime = Field(default_factory=_now)


class DieRoll(BaseModel):
    """Result of a single die roll.

    Attributes:
        sides: Number of sides on the die.
        result: Natural roll, between 1 and ``sides``.
        modifier: Modifier added to the roll.
        total: ``result + modifier``.
        timestamp: When the roll was made.
    """

    model_config = ConfigDict(frozen=True)

    sides: int
    result: int
    modifier: int = 0
    total: int
    timestamp: datetime = Field(default_factory=_now)

    def __str__(self) -> str:
        if not self.modifier:
            return f"d{self.sides}: {self.result}"
        sign = "+" if self.modifier > 0 else "-"
        return f"d{self.sides}{sign}{abs(self.modifier)}: {self.result} {sign} {abs(self.modifier)} = {self.total}"


class ActionOption(BaseModel):
    """An action the player can take from the current state."""

    model_config = ConfigDict(frozen=True)

    label: str
    kind: Literal["move", "combat"]
    target: str | None = Field(default=None, description="Exit direction or enemy instance id")


class AttackOutcome(BaseModel):
    """Result of a player attack against an enemy instance."""

    model_config = ConfigDict(frozen=True)

    target_id: str
    target_name: str
    roll: int
    total: int
    hit: bool
    damage: int = 0
    defeated: bool = False
    victory: bool = False


class SkillCheckResult(BaseModel):
    """Result of a skill roll made from the DM chat."""

    model_config = ConfigDict(frozen=True)

    skill: Skill
    roll: int
    ability_modifier: int
    proficiency: int
    total: int
    dc: int | None = None

    @property
    def success(self) -> bool | None:
        """Whether the check beat the DC, or None when no DC was named."""
        if self.dc is None:
            return None
        return self.total >= self.dc


__all__ = [
    "ModuleProgress",
    "EnemyInstance",
    "ActiveEncounterState",
    "LogEntry",
    "DieRoll",
    "ActionOption",
    "AttackOutcome",
    "SkillCheckResult",
]
