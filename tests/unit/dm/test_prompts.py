"""Tests for DM prompt building."""

from __future__ import annotations

from dm_companion.dm.prompts import (
    DM_SYSTEM_PROMPT,
    NO_CHARACTER_CONTEXT,
    NO_MODULE_CONTEXT,
    UNKNOWN_LOCATION_CONTEXT,
    build_character_context,
    build_dm_prompt,
    build_module_context,
)
from dm_companion.engine.session import GameSession
from dm_companion.models.character import Character
from dm_companion.models.enums import Disposition, LightLevel, Skill
from dm_companion.models.module import NPC, AdventureModule, Check, Item, Room, Secret
from dm_companion.models.session import ModuleProgress


class TestCharacterContext:
    """Tests for build_character_context."""

    def test_sheet_block(self, sample_character: Character) -> None:
        """Test the character block lists stats, skills, gear and gold."""
        block = build_character_context(sample_character)

        assert block.startswith("=== PLAYER CHARACTER ===")
        assert "Name: Test Fighter" in block
        assert "Class: Fighter" in block
        assert "HP: 12/12" in block
        assert "AC: 16" in block
        assert "Attack: +5" in block
        assert "Damage: +3" in block
        assert "STR: 16 (+3), DEX: 14 (+2), CON: 15 (+2), INT: 10 (+0), WIS: 12 (+1), CHA: 8 (-1)" in block
        assert "=== PROFICIENT SKILLS ===\nAthletics, Perception" in block
        assert "EQUIPPED: Longsword" in block
        assert "GOLD: 15 gp" in block

    def test_untrained_character(self) -> None:
        """Test a character without skills or gear."""
        character = Character(name="Pip", race="Halfling", character_class="Rogue", max_hp=8, hp=8)

        block = build_character_context(character)

        assert "=== PROFICIENT SKILLS ===\nNone" in block
        assert "EQUIPPED: None" in block


class TestModuleContext:
    """Tests for build_module_context."""

    def test_no_module(self) -> None:
        """Test the placeholder when nothing is loaded."""
        assert build_module_context(None, None) == NO_MODULE_CONTEXT

    def test_unknown_room(self, small_module: AdventureModule) -> None:
        """Test the placeholder when progress points at a missing room."""
        progress = ModuleProgress(module_id=small_module.id, current_room="Z")

        assert build_module_context(small_module, progress) == UNKNOWN_LOCATION_CONTEXT

    def test_location_block(self, small_module: AdventureModule) -> None:
        """Test room name, description and exits."""
        progress = ModuleProgress(module_id=small_module.id, current_room="A")

        block = build_module_context(small_module, progress)

        assert "=== CURRENT LOCATION ===\nRoom A\n\nAn empty hall." in block
        assert "Exits: east" in block
        assert "Items: None" in block
        assert "ACTIVE COMBAT" not in block
        assert block.endswith("Do not invent new enemies, NPCs, or locations.")

    def test_npcs_items_and_secrets(self) -> None:
        """Test NPCs present, item names and secrets with their checks."""
        module = AdventureModule(
            id="m",
            title="M",
            rooms=[
                Room(
                    id="hall",
                    name="Hall",
                    description="A long hall.",
                    light=LightLevel.DIM,
                    items=["key", "10 gp"],
                    npcs=["snikk"],
                    secrets=[
                        Secret(text="A loose brick.", check=Check(skill=Skill.INVESTIGATION, dc=12, on_success="Coins!")),
                        Secret(text="Scratches on the floor."),
                    ],
                ),
            ],
            npcs=[NPC(id="snikk", name="Snikk", role="lookout", disposition=Disposition.WARY)],
            items=[Item(id="key", name="Iron Key")],
        )
        progress = ModuleProgress(module_id="m", current_room="hall")

        block = build_module_context(module, progress)

        assert "Items: Iron Key, 10 gp" in block
        assert "=== NPCs HERE ===\nSnikk (lookout, wary)" in block
        assert "- A loose brick. [Investigation DC 12: Coins!]" in block
        assert "- Scratches on the floor." in block

    def test_active_encounter_roster(self, session: GameSession, small_module: AdventureModule) -> None:
        """Test live enemy HP and AC are included during combat."""
        session.load_module(small_module)
        session.move("east")
        assert session.active_encounter is not None
        session.active_encounter.enemies[0].hp = 3

        block = build_module_context(session.module, session.progress, session.active_encounter)

        assert "=== ACTIVE COMBAT ENCOUNTER ===\nLone Goblin" in block
        assert "Goblin: 3/5 HP, AC 10" in block
        assert "  Attack: Scimitar +4 to hit, 1d6+2 slashing" in block


class TestDmPrompt:
    """Tests for build_dm_prompt."""

    def test_without_character_or_module(self) -> None:
        """Test placeholders for missing character and module."""
        prompt = build_dm_prompt(None)

        assert prompt == f"{DM_SYSTEM_PROMPT}\n\n{NO_CHARACTER_CONTEXT}\n\n{NO_MODULE_CONTEXT}"

    def test_session_snapshot(
        self,
        session: GameSession,
        sample_character: Character,
        small_module: AdventureModule,
    ) -> None:
        """Test the session builds its prompt from current state."""
        session.add_character(sample_character, select=True)
        session.load_module(small_module)

        prompt = session.build_prompt()

        assert prompt.startswith(DM_SYSTEM_PROMPT)
        assert "Name: Test Fighter" in prompt
        assert "Room A" in prompt
