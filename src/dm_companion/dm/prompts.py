"""System prompt and context rendering for the AI Dungeon Master.

The prompt is the only place where module, character and progress state
turns into unstructured text. It is rebuilt from a fresh snapshot of the
session before every request.
"""

from __future__ import annotations

from dm_companion.models.character import Character
from dm_companion.models.enums import Ability
from dm_companion.models.module import AdventureModule
from dm_companion.models.session import ActiveEncounterState, ModuleProgress


# =============================================================================
# System Prompt
# =============================================================================

DM_SYSTEM_PROMPT = """You are the Dungeon Master. You describe what happens in the game world.

=== CORE RULES ===
1. You are ONLY the DM. Never speak or act for the player.
2. The player's rolls ALREADY include their bonuses. Use the final number.
3. When an action needs a roll, ask for it and STOP. Wait for the result.
4. Keep responses to one or two sentences.

=== COMBAT ===
- When the player attacks, ask for a d20 attack roll and name the target with
  its current HP and AC, e.g. "Roll d20 to attack Goblin 1 (7/7 HP, AC 15)."
- Roll total >= AC is a HIT: ask for the damage roll. Do not narrate the kill yet.
- Roll total < AC is a MISS: describe the miss briefly and ask what they do.
- After damage, subtract it from the enemy's current HP and always show
  "(current/max HP)". At 0 HP or less the enemy is dead and stays dead.

=== ABILITY CHECKS ===
- Name the check and its DC, e.g. "Roll d20 for Wisdom (Perception), DC 12."
- DC 10 is easy, DC 15 is medium, DC 20 is hard.
- Roll total >= DC succeeds. Otherwise it fails. Describe the outcome.

=== MODULE CONTENT ===
You are running a pre-written adventure module. Only use the locations,
NPCs, items and encounters listed below. Do not invent new content."""

NO_CHARACTER_CONTEXT = "No character selected. Ask them to create one."
NO_MODULE_CONTEXT = "No adventure module loaded."
UNKNOWN_LOCATION_CONTEXT = "Module loaded but current location unknown."


def _signed(value: int) -> str:
    return f"{value:+d}"


def build_character_context(character: Character) -> str:
    """Render the player character block.

    Args:
        character: The selected character.

    Returns:
        Name, race, class, level, HP, AC, combat bonuses, ability scores
        with modifiers, proficient skills, equipped items and gold.
    """
    abilities = ", ".join(
        f"{ability.abbreviation}: {character.abilities.score(ability)} "
        f"({_signed(character.modifier(ability))})"
        for ability in Ability
    )
    skills = ", ".join(str(skill) for skill in character.proficient_skills) or "None"
    equipped = ", ".join(item.name for item in character.equipped_items) or "None"

    return "\n".join([
        "=== PLAYER CHARACTER ===",
        f"Name: {character.name}",
        f"Race: {character.race}",
        f"Class: {character.character_class}",
        f"Level: {character.level}",
        "",
        f"HP: {character.hp}/{character.max_hp}",
        f"AC: {character.armor_class}",
        "",
        "=== COMBAT STATS ===",
        f"Attack: {_signed(character.attack_bonus)} (already added to the player's rolls)",
        f"Damage: {_signed(character.damage_bonus)} (already added to the player's rolls)",
        f"Proficiency Bonus: {_signed(character.proficiency_bonus)}",
        "",
        "=== ABILITIES ===",
        abilities,
        "",
        "=== PROFICIENT SKILLS ===",
        skills,
        "",
        f"EQUIPPED: {equipped}",
        f"GOLD: {character.gold} gp",
    ])


def _encounter_block(active_encounter: ActiveEncounterState) -> list[str]:
    lines = [
        "=== ACTIVE COMBAT ENCOUNTER ===",
        active_encounter.name,
        "",
        "ENEMIES (TRACK HP EVERY TURN):",
    ]
    for enemy in active_encounter.enemies:
        lines.append(f"{enemy.name}: {enemy.hp_display} HP, AC {enemy.ac}")
        attack = enemy.stats.primary_attack
        if attack is not None:
            lines.append(
                f"  Attack: {attack.name} {_signed(attack.bonus)} to hit, "
                f"{attack.damage_dice} {attack.damage_type}"
            )
    if active_encounter.tactics:
        lines += ["", f"Tactics: {active_encounter.tactics}"]
    return lines


def build_module_context(
    module: AdventureModule | None,
    progress: ModuleProgress | None,
    active_encounter: ActiveEncounterState | None = None,
) -> str:
    """Render the current location block.

    Args:
        module: The loaded module, if any.
        progress: Progress through the module.
        active_encounter: The encounter being fought, with live HP.

    Returns:
        Room name, description, exits, items, NPCs present, secrets and
        the active encounter roster.
    """
    if module is None or progress is None:
        return NO_MODULE_CONTEXT

    room = module.get_room(progress.current_room)
    if room is None:
        return UNKNOWN_LOCATION_CONTEXT

    items = ", ".join(module.describe_item(ref) for ref in room.items) or "None"
    lines = [
        "=== CURRENT LOCATION ===",
        room.name,
        "",
        room.description,
        "",
        f"Exits: {', '.join(room.exits) or 'None'}",
        f"Items: {items}",
    ]

    npcs = [npc for npc_id in room.npcs if (npc := module.get_npc(npc_id)) is not None]
    if npcs:
        lines += ["", "=== NPCs HERE ==="]
        lines += [f"{npc.name} ({npc.role}, {npc.disposition})" for npc in npcs]

    if room.secrets:
        lines += ["", "=== SECRETS (reveal only when earned) ==="]
        for secret in room.secrets:
            check = secret.check
            if check is None:
                lines.append(f"- {secret.text}")
                continue
            label = check.skill or (check.ability.full_name if check.ability else "Check")
            lines.append(f"- {secret.text} [{label} DC {check.dc}: {check.on_success}]")

    if active_encounter is not None:
        lines += ["", *_encounter_block(active_encounter)]

    lines += ["", "IMPORTANT: Only use content above. Do not invent new enemies, NPCs, or locations."]
    return "\n".join(lines)


def build_dm_prompt(
    character: Character | None,
    module: AdventureModule | None = None,
    progress: ModuleProgress | None = None,
    active_encounter: ActiveEncounterState | None = None,
) -> str:
    """Assemble the full system prompt from the template and context blocks."""
    character_block = build_character_context(character) if character else NO_CHARACTER_CONTEXT
    module_block = build_module_context(module, progress, active_encounter)
    return f"{DM_SYSTEM_PROMPT}\n\n{character_block}\n\n{module_block}"


__all__ = [
    "DM_SYSTEM_PROMPT",
    "NO_CHARACTER_CONTEXT",
    "NO_MODULE_CONTEXT",
    "UNKNOWN_LOCATION_CONTEXT",
    "build_character_context",
    "build_module_context",
    "build_dm_prompt",
]
