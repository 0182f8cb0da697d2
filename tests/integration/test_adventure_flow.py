"""End-to-end play through bundled and hand-built modules."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

import dm_companion.data as module_registry
from dm_companion.core.config import GameSettings
from dm_companion.core.exceptions import ModuleLoadError, ModuleValidationError
from dm_companion.data import GOBLIN_CAVE, available_modules, load_module
from dm_companion.dm.chat import DungeonMasterChat
from dm_companion.engine.dice import DiceRoller
from dm_companion.engine.scheduler import AsyncioScheduler, ManualScheduler
from dm_companion.engine.session import GameSession
from dm_companion.engine.validator import traverse_rooms, unreachable_rooms, validate_module
from dm_companion.models.character import Character
from dm_companion.models.enums import EncounterPhase, MessageRole, Skill
from dm_companion.models.module import AdventureModule, Room


SessionFactory = Callable[..., GameSession]


class TestTwoRoomScenario:
    """The A -east-> B walkthrough with a single 5 HP, AC 10 enemy."""

    def test_clear_and_revisit(self, make_session: SessionFactory, small_module: AdventureModule) -> None:
        """Test entering, winning, leaving and returning without a rematch."""
        session = make_session(rolls=[15, 5])
        session.load_module(small_module)
        assert session.progress is not None
        assert session.progress.current_room == "A"
        assert session.progress.defeated_encounters == []

        session.move("east")
        assert session.phase == EncounterPhase.ACTIVE_ENCOUNTER
        assert session.active_encounter is not None
        target = session.active_encounter.enemies[0].instance_id

        outcome = session.attack_enemy(target)

        assert outcome is not None
        assert outcome.victory is True
        assert session.active_encounter is None
        assert session.progress.defeated_encounters == ["e1"]

        assert session.move("west") is True
        assert session.move("east") is True
        assert session.active_encounter is None
        assert session.progress.current_room == "B"
        assert session.progress.defeated_encounters == ["e1"]

    def test_flee_then_fight(
        self,
        make_session: SessionFactory,
        small_module: AdventureModule,
        scheduler: ManualScheduler,
    ) -> None:
        """Test fleeing keeps the encounter live for the next visit."""
        session = make_session(rolls=[1, 18, 7])
        session.load_module(small_module)
        session.move("east")
        assert session.active_encounter is not None
        session.attack_enemy(session.active_encounter.enemies[0].instance_id)

        session.flee_encounter()
        assert scheduler.run_due() == 0
        session.move("west")
        session.move("east")

        assert session.active_encounter is not None
        outcome = session.attack_enemy(session.active_encounter.enemies[0].instance_id)
        assert outcome is not None
        assert outcome.victory is True
        assert session.progress is not None
        assert session.progress.defeated_encounters == ["e1"]


class TestModuleRegistry:
    """Tests for the bundled module registry."""

    def test_goblin_cave_available(self) -> None:
        """Test the default module is registered."""
        assert "goblin-cave" in available_modules()
        assert load_module("goblin-cave") is GOBLIN_CAVE

    def test_unknown_module(self) -> None:
        """Test an unknown id raises ModuleLoadError."""
        with pytest.raises(ModuleLoadError) as exc_info:
            load_module("tomb-of-horrors")

        assert exc_info.value.details["module_id"] == "tomb-of-horrors"

    def test_strict_load_rejects_invalid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test strict loading raises on validator errors and lenient loading does not."""
        broken = AdventureModule(
            id="broken",
            title="Broken",
            rooms=[Room(id="A", name="A", description="A.", light="dark", exits={"down": "nowhere"})],
        )
        monkeypatch.setitem(module_registry._MODULES, "broken", broken)

        assert load_module("broken") is broken
        with pytest.raises(ModuleValidationError) as exc_info:
            load_module("broken", strict=True)
        assert len(exc_info.value.errors) == 1


class TestGoblinCave:
    """Play through the bundled Goblin Cave module."""

    def test_module_is_valid(self) -> None:
        """Test the bundled module passes validation and is fully connected."""
        assert validate_module(GOBLIN_CAVE) == []
        assert unreachable_rooms(GOBLIN_CAVE) == []
        assert traverse_rooms(GOBLIN_CAVE) == [
            "entrance",
            "antechamber",
            "main-chamber",
            "kennel",
            "treasure-hall",
        ]

    def test_walkthrough(self, make_session: SessionFactory, sample_character: Character) -> None:
        """Test fighting through the ambush and guard post to the hoard."""
        # Every attack rolls 20 to hit and 8 damage (+3): one hit kills any goblin
        session = make_session(rolls=[20, 8] * 6)
        session.add_character(sample_character, select=True)
        session.load_module(GOBLIN_CAVE)
        assert session.current_room is not None
        assert session.current_room.name == "Cave Mouth"

        session.move("east")
        encounter = session.active_encounter
        assert encounter is not None
        assert [enemy.name for enemy in encounter.enemies] == ["Goblin Guard 1", "Goblin Guard 2", "Goblin Lookout"]
        assert [enemy.hp_display for enemy in encounter.enemies] == ["7/7", "7/7", "5/5"]
        while session.active_encounter is not None:
            session.attack_enemy(session.active_encounter.enemies[0].instance_id)

        session.move("southeast")
        assert session.active_encounter is not None
        assert session.active_encounter.name == "Main Chamber Guard Post"
        while session.active_encounter is not None:
            session.attack_enemy(session.active_encounter.enemies[0].instance_id)
        assert session.log[-1].text == "Victory! Main Chamber Guard Post is over. Treasure: Notched Stone Key."

        assert session.move("south") is True
        assert session.active_encounter is None
        assert session.progress is not None
        assert session.progress.current_room == "treasure-hall"
        assert session.progress.defeated_encounters == ["ambush-antechamber", "guard-post"]
        assert session.progress.visited_rooms == ["entrance", "antechamber", "main-chamber", "treasure-hall"]
        assert sample_character.hp == sample_character.max_hp

        prompt = session.build_prompt()
        assert "Boss's Hoard Niche" in prompt
        assert "Items: Sturdy Wooden Chest" in prompt
        assert "[Perception DC 11:" in prompt

    def test_dm_chat_skill_roll(self, make_session: SessionFactory, sample_character: Character) -> None:
        """Test a skill roll against the DC the DM just named."""
        session = make_session(rolls=[9])
        session.add_character(sample_character, select=True)
        session.load_module(GOBLIN_CAVE)
        DungeonMasterChat(session).send("I search the tracks.")
        session.add_message(MessageRole.DM, "Roll d20 for Wisdom (Survival), DC 10.")

        result = session.roll_skill(Skill.SURVIVAL)

        assert result.total == 10
        assert result.success is True


class TestAsyncioEnemyTurns:
    """Enemy turns driven by a real event loop."""

    def test_enemy_turn_fires_after_delay(self, sample_character: Character, small_module: AdventureModule) -> None:
        """Test the enemy strikes back after the configured delay."""
        settings = GameSettings(enemy_turn_delay_seconds=0.01, enemy_fixed_damage=4)

        async def scenario() -> GameSession:
            session = GameSession(settings=settings, roller=DiceRoller(seed=3), scheduler=AsyncioScheduler())
            session.add_character(sample_character, select=True)
            session.load_module(small_module)
            session.move("east")
            assert session.active_encounter is not None
            enemy = session.active_encounter.enemies[0]
            enemy.hp = 100
            session.attack_enemy(enemy.instance_id)
            await asyncio.sleep(0.1)
            return session

        session = asyncio.run(scenario())

        assert session.log[-1].role == MessageRole.DM
        assert session.log[-1].text.startswith("Goblin attacks with Scimitar")

    def test_flee_cancels_timer(self, sample_character: Character, small_module: AdventureModule) -> None:
        """Test a timer pending when the party flees never fires."""
        settings = GameSettings(enemy_turn_delay_seconds=0.05)

        async def scenario() -> GameSession:
            session = GameSession(settings=settings, roller=DiceRoller(seed=3), scheduler=AsyncioScheduler())
            session.add_character(sample_character, select=True)
            session.load_module(small_module)
            session.move("east")
            assert session.active_encounter is not None
            enemy = session.active_encounter.enemies[0]
            enemy.hp = 100
            session.attack_enemy(enemy.instance_id)
            session.flee_encounter()
            await asyncio.sleep(0.1)
            return session

        session = asyncio.run(scenario())

        assert sample_character.hp == sample_character.max_hp
        assert session.log[-1].role == MessageRole.PLAYER
