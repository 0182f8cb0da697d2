"""Pydantic V2 schemas for adventure modules.

An adventure module is the static description of a dungeon crawl: rooms
linked by free-form exits, encounter templates with enemy stat blocks,
NPCs, containers, items and objectives. Modules are built once and never
mutated; session progress lives in ``dm_companion.models.session``.

Field names are snake_case. Hand-authored module data written with
camelCase keys (``encounterId``, ``damageDice``, ``stealthAvoidDC``) is
accepted through aliases, so ``AdventureModule.model_validate(data)``
works on either spelling.

Referential integrity (exits, encounter and NPC references, treasure) is
not enforced here; ``dm_companion.engine.validator`` reports it as a list
of messages.
"""

from __future__ import annotations

import re
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from dm_companion.models.enums import Ability, DamageType, Disposition, LightLevel, Skill


def _module_alias(name: str) -> str:
    """camelCase alias that keeps the ``DC`` suffix upper-case."""
    return re.sub(r"Dc$", "DC", to_camel(name))


def _coerce_ability(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, Ability):
        return Ability.from_label(value)
    return value


AbilityKey = Annotated[Ability, BeforeValidator(_coerce_ability)]
"""Ability accepted as 'DEX', 'dex' or 'dexterity'."""


class ModuleRecord(BaseModel):
    """Base for immutable module records."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=_module_alias,
    )


# =============================================================================
# Stat Blocks
# =============================================================================


class AttackBlock(ModuleRecord):
    """A single attack an enemy can make.

    Attributes:
        name: Attack name (e.g., 'Scimitar').
        bonus: Attack roll bonus.
        damage_dice: Damage in die notation (e.g., '1d6+2').
        damage_type: Type of damage dealt.
        reach: Melee reach text.
        range: Ranged increment text.
        formatted: Pre-rendered summary for display.
    """

    name: str = Field(min_length=1, description="Attack name")
    bonus: int = Field(description="Attack bonus to hit")
    damage_dice: str = Field(description="Damage die notation")
    damage_type: DamageType = Field(description="Damage type")
    reach: str | None = Field(default=None, description="Melee reach")
    range: str | None = Field(default=None, description="Ranged increments")
    formatted: str | None = Field(default=None, description="Display summary")


class StatBlock(ModuleRecord):
    """Read-only combat template for an enemy or NPC.

    ``hp`` is both the maximum and the starting value of every instance
    spawned from this block. AC and HP are stored as written; the module
    validator reports non-positive values.
    """

    cr: float | None = Field(default=None, description="Challenge rating")
    ac: int = Field(description="Armor class")
    hp: int = Field(description="Hit points")
    speed: str | None = None
    initiative_mod: int | None = None
    abilities: dict[AbilityKey, int] = Field(default_factory=dict, description="Ability modifiers")
    saves: dict[AbilityKey, int] = Field(default_factory=dict, description="Saving throw bonuses")
    skills: dict[Skill, int] = Field(default_factory=dict, description="Skill bonuses")
    passive_perception: int | None = None
    senses: str | None = None
    languages: str | None = None
    attacks: list[AttackBlock] = Field(default_factory=list, description="Available attacks")
    traits: list[str] = Field(default_factory=list, description="Textual traits")

    @property
    def primary_attack(self) -> AttackBlock | None:
        """The first listed attack, used for enemy turns."""
        return self.attacks[0] if self.attacks else None


# =============================================================================
# Room Features
# =============================================================================


class Check(ModuleRecord):
    """A skill or ability check gating a secret."""

    ability: AbilityKey | None = None
    skill: Skill | None = None
    dc: int = Field(description="Difficulty class")
    on_success: str = Field(description="Outcome on success")
    on_failure: str | None = Field(default=None, description="Outcome on failure")


class Secret(ModuleRecord):
    """Hidden room detail, optionally revealed by a check."""

    text: str
    check: Check | None = None


class Lock(ModuleRecord):
    """Lock on a container."""

    is_locked: bool
    key_item_id: str | None = None
    pick_dc: int | None = None
    force_dc: int | None = None


class Container(ModuleRecord):
    """A lootable container.

    ``contents`` holds item ids or loose currency strings such as ``"50 gp"``.
    """

    id: str = Field(min_length=1)
    name: str
    description: str | None = None
    lock: Lock | None = None
    contents: list[str] = Field(default_factory=list)


class Item(ModuleRecord):
    """A named item that rooms, containers and treasure can reference."""

    id: str = Field(min_length=1)
    name: str
    description: str | None = None
    type: str | None = None


class DialogueLine(ModuleRecord):
    """A canned NPC line keyed by a conversational cue."""

    cue: str
    line: str
    intent: str | None = None


class NPC(ModuleRecord):
    """A non-player character placed in rooms by id."""

    id: str = Field(min_length=1)
    name: str
    role: str
    disposition: Disposition
    stats: StatBlock | None = None
    motivations: list[str] = Field(default_factory=list)
    dialogue: list[DialogueLine] = Field(default_factory=list)


# =============================================================================
# Encounters and Rooms
# =============================================================================


class EncounterEnemyRef(ModuleRecord):
    """One enemy entry of an encounter, spawning ``count`` instances."""

    id: str | None = Field(default=None, description="Optional NPC template reference")
    name: str = Field(min_length=1, description="Label in the encounter")
    stats: StatBlock
    count: int = Field(default=1, ge=1, description="Number of instances to spawn")


class EncounterScaling(ModuleRecord):
    """Difficulty adjustment notes for the DM."""

    easy: str | None = None
    medium: str | None = None
    hard: str | None = None
    deadly: str | None = None


class Encounter(ModuleRecord):
    """Template for a combat scenario.

    Encounters are never mutated; starting one creates fresh enemy
    instances with independent hit points.
    """

    id: str = Field(min_length=1)
    name: str
    description: str
    enemies: list[EncounterEnemyRef] = Field(default_factory=list)
    tactics: str | None = None
    stealth_avoid_dc: int | None = None
    scaling: EncounterScaling | None = None
    treasure: list[str] = Field(default_factory=list)

    @property
    def total_enemies(self) -> int:
        """Number of enemy instances this encounter spawns."""
        return sum(ref.count for ref in self.enemies)


class Room(ModuleRecord):
    """A location in the module's room graph.

    ``exits`` maps a free-form direction label to a destination room id.
    The graph may contain cycles.
    """

    id: str = Field(min_length=1)
    name: str
    description: str
    light: LightLevel
    ambient: str | None = None
    exits: dict[str, str] = Field(default_factory=dict)
    items: list[str] = Field(default_factory=list)
    npcs: list[str] = Field(default_factory=list)
    encounter_id: str | None = None
    secrets: list[Secret] = Field(default_factory=list)
    stealth_dc: int | None = None


class Objective(ModuleRecord):
    """A module goal with a natural-language completion condition."""

    id: str = Field(min_length=1)
    text: str
    done_if: str = ""


class ModuleRules(ModuleRecord):
    """Free-text rulings the DM applies in this module."""

    stealth: str | None = None
    negotiation: str | None = None


class AdventureModule(ModuleRecord):
    """A complete adventure definition.

    Attributes:
        id: Module identifier.
        title: Display title.
        summary: One-paragraph pitch.
        level_range: Lowest and highest intended character level.
        tags: Free-form tags.
        rooms: Rooms in authoring order; the first room is the start.
        encounters: Encounter templates.
        npcs: NPCs referenced by rooms.
        containers: Containers referenced by rooms.
        items: Items referenced by rooms, containers and treasure.
        objectives: Module goals.
        rules: Optional module-specific rulings.
    """

    id: str = Field(min_length=1)
    title: str
    summary: str = ""
    level_range: tuple[int, int] = (1, 1)
    tags: list[str] = Field(default_factory=list)
    rooms: list[Room] = Field(min_length=1)
    encounters: list[Encounter] = Field(default_factory=list)
    npcs: list[NPC] = Field(default_factory=list)
    containers: list[Container] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    objectives: list[Objective] = Field(default_factory=list)
    rules: ModuleRules | None = None

    @property
    def start_room(self) -> Room:
        """The room a freshly loaded session starts in."""
        return self.rooms[0]

    @property
    def room_ids(self) -> set[str]:
        return {room.id for room in self.rooms}

    def get_room(self, room_id: str) -> Room | None:
        return next((room for room in self.rooms if room.id == room_id), None)

    def get_encounter(self, encounter_id: str) -> Encounter | None:
        return next((enc for enc in self.encounters if enc.id == encounter_id), None)

    def get_npc(self, npc_id: str) -> NPC | None:
        return next((npc for npc in self.npcs if npc.id == npc_id), None)

    def get_item(self, item_id: str) -> Item | None:
        return next((item for item in self.items if item.id == item_id), None)

    def get_container(self, container_id: str) -> Container | None:
        return next((c for c in self.containers if c.id == container_id), None)

    def describe_item(self, reference: str) -> str:
        """Display name for an item, container or loose-currency reference."""
        item = self.get_item(reference)
        if item is not None:
            return item.name
        container = self.get_container(reference)
        if container is not None:
            return container.name
        return reference


__all__ = [
    "AbilityKey",
    "AttackBlock",
    "StatBlock",
    "Check",
    "Secret",
    "Lock",
    "Container",
    "Item",
    "DialogueLine",
    "NPC",
    "EncounterEnemyRef",
    "EncounterScaling",
    "Encounter",
    "Room",
    "Objective",
    "ModuleRules",
    "AdventureModule",
]
