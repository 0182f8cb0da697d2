"""Tests for the character sheet model."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from dm_companion.models.character import (
    AbilityScores,
    Character,
    SkillProficiencies,
    ability_modifier,
    proficiency_bonus,
)
from dm_companion.models.enums import Ability, Skill


class TestAbilityModifier:
    """Tests for ability_modifier."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [(1, -5), (8, -1), (9, -1), (10, 0), (11, 0), (16, 3), (19, 4), (20, 5), (30, 10)],
    )
    def test_modifier_table(self, score: int, expected: int) -> None:
        """Test the modifier floors toward negative infinity."""
        assert ability_modifier(score) == expected


class TestProficiencyBonus:
    """Tests for proficiency_bonus."""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [(1, 2), (4, 2), (5, 3), (8, 3), (9, 4), (13, 5), (16, 5), (17, 6), (20, 6)],
    )
    def test_level_table(self, level: int, expected: int) -> None:
        """Test the bonus grows every four levels."""
        assert proficiency_bonus(level) == expected


class TestAbilityScores:
    """Tests for AbilityScores."""

    def test_defaults_to_ten(self) -> None:
        """Test every score defaults to 10."""
        scores = AbilityScores()
        assert all(scores.score(ability) == 10 for ability in Ability)

    def test_out_of_range_rejected(self) -> None:
        """Test scores outside 1-30 are rejected."""
        with pytest.raises(ValidationError):
            AbilityScores(strength=31)

    def test_get_modifier(self) -> None:
        """Test modifiers per ability."""
        scores = AbilityScores(dexterity=14, charisma=7)
        assert scores.get_modifier(Ability.DEX) == 2
        assert scores.get_modifier(Ability.CHA) == -2


class TestSkillProficiencies:
    """Tests for SkillProficiencies."""

    def test_of_sets_flags(self) -> None:
        """Test building a proficiency set from skills."""
        skills = SkillProficiencies.of(Skill.SLEIGHT_OF_HAND, Skill.STEALTH)
        assert skills.has(Skill.SLEIGHT_OF_HAND)
        assert skills.has(Skill.STEALTH)
        assert not skills.has(Skill.ARCANA)

    def test_camel_case_keys(self) -> None:
        """Test stored sheets with camelCase keys load."""
        skills = SkillProficiencies.model_validate({"animalHandling": True})
        assert skills.animal_handling is True


class TestCharacter:
    """Tests for the Character model."""

    def test_derived_stats(self, sample_character: Character) -> None:
        """Test modifiers, proficiency and combat bonuses."""
        assert sample_character.proficiency_bonus == 2
        assert sample_character.modifier(Ability.STR) == 3
        assert sample_character.damage_bonus == 3
        assert sample_character.attack_bonus == 5

    def test_skill_modifier(self, sample_character: Character) -> None:
        """Test skill modifiers add proficiency only when trained."""
        assert sample_character.skill_modifier(Skill.PERCEPTION) == 1 + 2
        assert sample_character.skill_modifier(Skill.STEALTH) == 2

    def test_proficient_skills_sorted(self, sample_character: Character) -> None:
        """Test trained skills are listed alphabetically."""
        assert sample_character.proficient_skills == [Skill.ATHLETICS, Skill.PERCEPTION]

    def test_equipped_items(self, sample_character: Character) -> None:
        """Test only equipped items are listed."""
        assert [item.name for item in sample_character.equipped_items] == ["Longsword"]

    def test_load_stored_sheet(self, sample_character_data: dict[str, Any]) -> None:
        """Test a camelCase sheet with derived fields loads."""
        character = Character.model_validate(sample_character_data)

        assert character.character_class == "Fighter"
        assert character.max_hp == 12
        assert character.armor_class == 16
        assert character.is_proficient(Skill.ATHLETICS)

    def test_dump_by_alias(self, sample_character: Character) -> None:
        """Test serialized sheets use camelCase keys."""
        data = sample_character.model_dump(by_alias=True)

        assert data["class"] == "Fighter"
        assert data["maxHp"] == 12
        assert data["armorClass"] == 16

    def test_dump_includes_proficiency_bonus(self, sample_character: Character) -> None:
        """Test the derived proficiency bonus is serialized."""
        assert sample_character.model_dump()["proficiency_bonus"] == 2

    def test_hp_clamped_on_construction(self) -> None:
        """Test HP above max is clamped."""
        character = Character(name="Ola", race="Elf", character_class="Wizard", max_hp=8, hp=50)
        assert character.hp == 8

    def test_hp_clamped_on_assignment(self, sample_character: Character) -> None:
        """Test HP assignment stays within 0..max_hp."""
        sample_character.hp = -4
        assert sample_character.hp == 0
        sample_character.hp = 99
        assert sample_character.hp == sample_character.max_hp

    def test_lowering_max_hp_clamps_hp(self, sample_character: Character) -> None:
        """Test reducing max HP below current HP pulls HP down with it."""
        assert sample_character.hp == 12

        sample_character.max_hp = 5

        assert sample_character.max_hp == 5
        assert sample_character.hp == 5

    def test_raising_max_hp_keeps_hp(self, sample_character: Character) -> None:
        """Test raising max HP does not heal."""
        sample_character.hp = 7

        sample_character.max_hp = 20

        assert sample_character.hp == 7

    def test_invalid_level_rejected(self) -> None:
        """Test levels outside 1-20 are rejected."""
        with pytest.raises(ValidationError):
            Character(name="Ola", race="Elf", character_class="Wizard", level=21, max_hp=8, hp=8)


class TestDamageAndHealing:
    """Tests for apply_damage and apply_healing."""

    def test_damage_reduces_hp(self, sample_character: Character) -> None:
        """Test damage lowers HP and reports the loss."""
        assert sample_character.apply_damage(5) == 5
        assert sample_character.hp == 7

    def test_temp_hp_absorbs_first(self, sample_character: Character) -> None:
        """Test temporary HP is lost before current HP."""
        sample_character.temp_hp = 3

        lost = sample_character.apply_damage(5)

        assert sample_character.temp_hp == 0
        assert lost == 2
        assert sample_character.hp == 10

    def test_damage_floors_at_zero(self, sample_character: Character) -> None:
        """Test overkill damage leaves the character at 0 HP."""
        lost = sample_character.apply_damage(100)

        assert lost == 12
        assert sample_character.hp == 0
        assert not sample_character.is_conscious

    def test_healing_capped_at_max(self, sample_character: Character) -> None:
        """Test healing never exceeds max HP."""
        sample_character.apply_damage(4)

        restored = sample_character.apply_healing(10)

        assert restored == 4
        assert sample_character.hp == 12

    def test_non_positive_amounts_ignored(self, sample_character: Character) -> None:
        """Test zero and negative amounts change nothing."""
        assert sample_character.apply_damage(0) == 0
        assert sample_character.apply_healing(-3) == 0
        assert sample_character.hp == 12
