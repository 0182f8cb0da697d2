"""Text console: ``python -m dm_companion``.

Plays the default module against a ``ManualScheduler``; pending enemy
turns resolve after every command. Anything that is not a command is
sent to the Dungeon Master.
"""

from __future__ import annotations

import sys

from dm_companion.core.config import get_settings
from dm_companion.core.exceptions import DiceRollError, DmCompanionError
from dm_companion.core.logging import bind_context, configure_logging_from_settings, get_logger
from dm_companion.data import load_module
from dm_companion.dm.chat import DungeonMasterChat
from dm_companion.dm.llm import create_bridge
from dm_companion.engine.scheduler import ManualScheduler
from dm_companion.engine.session import GameSession
from dm_companion.engine.validator import traverse_rooms, validate_module
from dm_companion.models.character import AbilityScores, Character, SkillProficiencies
from dm_companion.models.enums import Skill
from dm_companion.models.session import LogEntry


logger = get_logger(__name__)

HELP = "Commands: go <dir>, attack <n>, flee, roll <sides> [mod], look, validate, quit"
ROLL_USAGE = "Usage: roll <sides> [mod], with at least one side"


def _default_character() -> Character:
    return Character(
        name="Adventurer",
        race="Human",
        character_class="Fighter",
        abilities=AbilityScores(strength=16, dexterity=14, constitution=14, wisdom=12),
        max_hp=12,
        hp=12,
        armor_class=16,
        skills=SkillProficiencies.of(Skill.ATHLETICS, Skill.PERCEPTION),
    )


def _print_entry(entry: LogEntry) -> None:
    print(f"[{entry.role}] {entry.text}")


def _print_actions(session: GameSession) -> None:
    actions = session.available_actions()
    if actions:
        print("  " + " | ".join(action.label for action in actions))


def _handle(session: GameSession, chat: DungeonMasterChat, line: str) -> bool:
    """Run one console line. Returns False when the player quits."""
    command, _, rest = line.partition(" ")
    command = command.lower()
    rest = rest.strip()

    if command in ("quit", "exit"):
        return False
    if command == "help":
        print(HELP)
    elif command == "go":
        session.move(rest)
    elif command == "attack":
        encounter = session.active_encounter
        if encounter is None:
            session.attack_enemy("")
        elif not rest.isdigit() or not 1 <= int(rest) <= len(encounter.enemies):
            print(f"Choose an enemy between 1 and {len(encounter.enemies)}.")
        else:
            session.attack_enemy(encounter.enemies[int(rest) - 1].instance_id)
    elif command == "flee":
        session.flee_encounter()
    elif command == "roll":
        parts = rest.split()
        try:
            sides = int(parts[0]) if parts else 20
            modifier = int(parts[1]) if len(parts) > 1 else 0
        except ValueError:
            print(ROLL_USAGE)
            return True
        try:
            print(session.roll_dice(sides, modifier))
        except DiceRollError:
            print(ROLL_USAGE)
    elif command == "look":
        room = session.current_room
        if room is not None:
            print(f"{room.name}\n{room.description}")
    elif command == "validate":
        if session.module is not None:
            errors = validate_module(session.module)
            print("\n".join(errors) or "Module is valid.")
            print("Rooms reachable: " + ", ".join(traverse_rooms(session.module)))
    else:
        chat.send(line)
    return True


def main() -> int:
    settings = get_settings()
    configure_logging_from_settings(settings)
    bind_context(module_id=settings.game.default_module)

    session = GameSession(settings=settings.game, scheduler=ManualScheduler())
    session.subscribe(_print_entry)
    session.add_character(_default_character(), select=True)

    bridge = create_bridge(settings.ai)
    provider = bridge.active_provider
    if provider is None or not provider.is_configured or not provider.check_connection():
        logger.warning("LLM backend unavailable, DM uses canned replies", provider=str(bridge.active))
        chat = DungeonMasterChat(session)
    else:
        chat = DungeonMasterChat(session, bridge)

    try:
        session.load_module(
            load_module(settings.game.default_module, strict=settings.game.strict_module_validation)
        )
    except DmCompanionError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    print(HELP)

    scheduler = session.scheduler
    while True:
        _print_actions(session)
        try:
            line = input("> ").strip()
        except EOFError:
            break
        if not line:
            continue
        if not _handle(session, chat, line):
            break
        if isinstance(scheduler, ManualScheduler):
            scheduler.run_due()
    return 0


if __name__ == "__main__":
    sys.exit(main())
