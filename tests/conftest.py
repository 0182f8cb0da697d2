"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the DM Companion test suite.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

import pytest

from dm_companion.core.config import GameSettings
from dm_companion.engine.dice import DiceRoller
from dm_companion.engine.scheduler import ManualScheduler
from dm_companion.engine.session import GameSession
from dm_companion.models.character import AbilityScores, Character, InventoryItem, SkillProficiencies
from dm_companion.models.enums import DamageType, LightLevel, Skill
from dm_companion.models.module import (
    AdventureModule,
    AttackBlock,
    Encounter,
    EncounterEnemyRef,
    Room,
    StatBlock,
)


if TYPE_CHECKING:
    from collections.abc import Generator


T = TypeVar("T")


class ScriptedRandom(random.Random):
    """Random source that returns scripted ``randint`` values first.

    Scripted values are clamped to the requested range. Once the script
    runs out, rolls fall back to a fixed-seed generator. ``choice``
    always picks the first option.
    """

    def __init__(self, rolls: Iterable[int] = ()) -> None:
        super().__init__(0)
        self.rolls = list(rolls)

    def randint(self, a: int, b: int) -> int:
        if self.rolls:
            return min(max(self.rolls.pop(0), a), b)
        return super().randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        return seq[0]


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def configure_test_logging() -> None:
    """Route diagnostic logs to stderr as ``main()`` does, keeping stdout for the console."""
    from dm_companion.core.logging import configure_logging

    configure_logging(level="WARNING")


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dm_companion.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def game_settings() -> GameSettings:
    """Provide game rules with the documented defaults."""
    return GameSettings(
        enemy_turn_delay_seconds=1.0,
        fallback_attack_bonus=2,
        fallback_armor_class=10,
        player_damage_die=8,
        enemy_damage_mode="fixed",
        enemy_fixed_damage=4,
    )


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sample_character_data() -> dict[str, Any]:
    """Provide a stored character sheet in camelCase form.

    Returns:
        Dictionary of character data.
    """
    return {
        "id": "char-1",
        "name": "Test Fighter",
        "race": "Human",
        "class": "Fighter",
        "level": 1,
        "background": "Soldier",
        "abilities": {
            "strength": 16,
            "dexterity": 14,
            "constitution": 15,
            "intelligence": 10,
            "wisdom": 12,
            "charisma": 8,
        },
        "maxHp": 12,
        "hp": 12,
        "armorClass": 16,
        "speed": 30,
        "skills": {"athletics": True, "perception": True},
        "inventory": [],
        "gold": 15,
        "proficiencyBonus": 2,
    }


@pytest.fixture
def sample_character() -> Character:
    """Create a level 1 fighter: attack +5, damage +3, AC 16, 12 HP."""
    return Character(
        id="char-1",
        name="Test Fighter",
        race="Human",
        character_class="Fighter",
        abilities=AbilityScores(
            strength=16,
            dexterity=14,
            constitution=15,
            intelligence=10,
            wisdom=12,
            charisma=8,
        ),
        max_hp=12,
        hp=12,
        armor_class=16,
        skills=SkillProficiencies.of(Skill.ATHLETICS, Skill.PERCEPTION),
        inventory=[InventoryItem(name="Longsword", equipped=True), InventoryItem(name="Rope")],
        gold=15,
    )


@pytest.fixture
def goblin_stats() -> StatBlock:
    """A weak goblin: AC 10, 5 HP, one +4 scimitar."""
    return StatBlock(
        ac=10,
        hp=5,
        attacks=[
            AttackBlock(
                name="Scimitar",
                bonus=4,
                damage_dice="1d6+2",
                damage_type=DamageType.SLASHING,
            ),
        ],
    )


@pytest.fixture
def small_module(goblin_stats: StatBlock) -> AdventureModule:
    """Two rooms, A and B, with a single-goblin encounter in B."""
    return AdventureModule(
        id="test-module",
        title="Test Module",
        summary="A two-room test crawl.",
        rooms=[
            Room(
                id="A",
                name="Room A",
                description="An empty hall.",
                light=LightLevel.BRIGHT,
                exits={"east": "B"},
            ),
            Room(
                id="B",
                name="Room B",
                description="A goblin den.",
                light=LightLevel.DIM,
                exits={"west": "A"},
                encounter_id="e1",
            ),
        ],
        encounters=[
            Encounter(
                id="e1",
                name="Lone Goblin",
                description="A goblin leaps up from its bedroll.",
                enemies=[EncounterEnemyRef(name="Goblin", stats=goblin_stats)],
            ),
        ],
    )


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Provide a manual-clock scheduler."""
    return ManualScheduler()


@pytest.fixture
def dice_roller() -> DiceRoller:
    """Provide a seeded dice roller for reproducible tests."""
    return DiceRoller(seed=42)


@pytest.fixture
def make_roller() -> Callable[[Iterable[int]], DiceRoller]:
    """Factory for rollers whose ``randint`` results follow a script."""

    def _make(rolls: Iterable[int]) -> DiceRoller:
        return DiceRoller(rng=ScriptedRandom(rolls))

    return _make


@pytest.fixture
def make_session(
    game_settings: GameSettings,
    scheduler: ManualScheduler,
) -> Callable[..., GameSession]:
    """Factory for sessions whose d20 and damage rolls follow a script.

    Example:
        >>> session = make_session(rolls=[20, 8])  # hit, then 8 damage
    """

    def _make(rolls: Iterable[int] = (), **overrides: Any) -> GameSession:
        settings = game_settings.model_copy(update=overrides) if overrides else game_settings
        return GameSession(
            settings=settings,
            roller=DiceRoller(rng=ScriptedRandom(rolls)),
            scheduler=scheduler,
        )

    return _make


@pytest.fixture
def session(make_session: Callable[..., GameSession]) -> GameSession:
    """Provide a session with unscripted (seeded) dice."""
    return make_session()
