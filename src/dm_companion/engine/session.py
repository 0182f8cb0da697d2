"""The game session: the single owner of mutable play state.

A ``GameSession`` holds the character roster, the loaded module and the
party's progress through it, the active encounter, the dice state and
the player-visible session log. Every player command is a method on the
session. Invalid commands never raise; they append one system log entry
and leave state unchanged.

Combat is a two-state machine::

    NO_ENCOUNTER --start_encounter--> ACTIVE_ENCOUNTER
    ACTIVE_ENCOUNTER --victory | flee--> NO_ENCOUNTER

After each player attack that leaves enemies standing, an enemy turn is
handed to the injected ``Scheduler``. Pending enemy turns are cancelled
when the encounter ends or a module is reloaded, and a turn that fires
anyway checks that its encounter is still the active one.

Example:
    >>> from dm_companion.data import load_module
    >>> from dm_companion.engine.scheduler import ManualScheduler
    >>> session = GameSession(scheduler=ManualScheduler())
    >>> session.load_module(load_module("goblin-cave"))
    >>> session.move("east")
    True
"""

from __future__ import annotations

from collections.abc import Callable

from dm_companion.core.config import GameSettings, get_settings
from dm_companion.core.constants import D20, WELCOME_MESSAGE
from dm_companion.core.exceptions import DiceRollError
from dm_companion.core.logging import get_logger
from dm_companion.dm.chat import extract_dc
from dm_companion.dm.prompts import build_dm_prompt
from dm_companion.engine.dice import DiceRoller
from dm_companion.engine.scheduler import ManualScheduler, ScheduledTask, Scheduler
from dm_companion.models.character import Character
from dm_companion.models.enums import EncounterPhase, MessageRole, Skill
from dm_companion.models.module import AdventureModule, AttackBlock, Room
from dm_companion.models.session import (
    ActionOption,
    ActiveEncounterState,
    AttackOutcome,
    DieRoll,
    EnemyInstance,
    LogEntry,
    ModuleProgress,
    SkillCheckResult,
)


logger = get_logger(__name__)

LogListener = Callable[[LogEntry], None]


class GameSession:
    """Mutable state of one play session.

    Args:
        settings: Rules configuration. Defaults to the application settings.
        roller: Dice roller. Defaults to an unseeded roller.
        scheduler: Scheduler for delayed enemy turns. Defaults to a
            ``ManualScheduler`` that only fires when driven explicitly.
    """

    def __init__(
        self,
        *,
        settings: GameSettings | None = None,
        roller: DiceRoller | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.settings = settings or get_settings().game
        self.roller = roller or DiceRoller()
        self.scheduler: Scheduler = scheduler or ManualScheduler()

        self.characters: list[Character] = []
        self.current_character_id: str | None = None

        self.log: list[LogEntry] = []
        self.last_roll: DieRoll | None = None
        self.pending_roll_request: str | None = None

        self.module: AdventureModule | None = None
        self.progress: ModuleProgress | None = None
        self.active_encounter: ActiveEncounterState | None = None

        self._enemy_turns: list[ScheduledTask] = []
        self._listeners: list[LogListener] = []

        self.clear_log()

    # =========================================================================
    # Session log
    # =========================================================================

    def add_message(self, role: MessageRole, text: str) -> LogEntry:
        """Append an entry to the session log and notify listeners."""
        entry = LogEntry(role=role, text=text)
        self.log.append(entry)
        for listener in self._listeners:
            listener(entry)
        return entry

    def clear_log(self) -> None:
        """Reset the log to the welcome entry."""
        self.log = []
        self.add_message(MessageRole.SYSTEM, WELCOME_MESSAGE)

    def subscribe(self, listener: LogListener) -> None:
        """Call ``listener`` with every entry appended from now on."""
        self._listeners.append(listener)

    def last_message(self, role: MessageRole) -> LogEntry | None:
        return next((entry for entry in reversed(self.log) if entry.role == role), None)

    def _system(self, text: str) -> None:
        self.add_message(MessageRole.SYSTEM, text)

    def _dm(self, text: str) -> None:
        self.add_message(MessageRole.DM, text)

    def _player(self, text: str) -> None:
        self.add_message(MessageRole.PLAYER, text)

    # =========================================================================
    # Character roster
    # =========================================================================

    def add_character(self, character: Character, *, select: bool = False) -> None:
        self.characters.append(character)
        logger.info("Character added", character_id=character.id, name=character.name)
        if select:
            self.select_character(character.id)

    def update_character(self, character: Character) -> bool:
        """Replace the roster entry with the same id. Returns False if absent."""
        for index, existing in enumerate(self.characters):
            if existing.id == character.id:
                self.characters[index] = character
                return True
        return False

    def delete_character(self, character_id: str) -> bool:
        """Remove a character, clearing the selection if it was selected."""
        before = len(self.characters)
        self.characters = [c for c in self.characters if c.id != character_id]
        if self.current_character_id == character_id:
            self.current_character_id = None
        return len(self.characters) < before

    def select_character(self, character_id: str | None) -> bool:
        if character_id is not None and self.get_character(character_id) is None:
            self._system(f"No character with id {character_id}.")
            return False
        self.current_character_id = character_id
        return True

    def get_character(self, character_id: str) -> Character | None:
        return next((c for c in self.characters if c.id == character_id), None)

    @property
    def current_character(self) -> Character | None:
        if self.current_character_id is None:
            return None
        return self.get_character(self.current_character_id)

    # =========================================================================
    # Dice
    # =========================================================================

    def roll_dice(self, sides: int, modifier: int = 0) -> DieRoll:
        """Roll one die, record it as the last roll and clear any roll request.

        Raises:
            DiceRollError: If ``sides`` is not a positive integer.
        """
        die_roll = self.roller.roll(sides, modifier)
        self.last_roll = die_roll
        self.pending_roll_request = None
        return die_roll

    def request_roll(self, kind: str) -> None:
        self.pending_roll_request = kind

    def clear_roll_request(self) -> None:
        self.pending_roll_request = None

    def roll_skill(self, skill: Skill, note: str | None = None) -> SkillCheckResult:
        """Roll a skill check for the current character and log it.

        The check is compared against the DC named in the most recent DM
        message, if any.
        """
        character = self.current_character
        ability = skill.ability
        ability_mod = character.modifier(ability) if character else 0
        proficiency = character.proficiency_bonus if character and character.is_proficient(skill) else 0

        die_roll = self.roll_dice(D20, ability_mod + proficiency)
        last_dm = self.last_message(MessageRole.DM)
        dc = extract_dc(last_dm.text) if last_dm else None

        label = f"{skill.value} ({note})" if note else skill.value
        text = (
            f"Rolling {label}: d20={die_roll.result} + {ability.abbreviation} {ability_mod:+d}"
            f" + prof {proficiency:+d} = {die_roll.total}"
        )
        if dc is not None:
            text += f" vs DC {dc}"
        self._player(text + ".")

        return SkillCheckResult(
            skill=skill,
            roll=die_roll.result,
            ability_modifier=ability_mod,
            proficiency=proficiency,
            total=die_roll.total,
            dc=dc,
        )

    # =========================================================================
    # Module and movement
    # =========================================================================

    def load_module(self, module: AdventureModule) -> None:
        """Start a module from its first room, discarding all prior progress."""
        self._cancel_enemy_turns()
        self.active_encounter = None

        start = module.start_room
        self.module = module
        self.progress = ModuleProgress(
            module_id=module.id,
            current_room=start.id,
            visited_rooms=[start.id],
        )

        self.log = []
        self._system(f"Module loaded: {module.title}")
        self._dm(f"{module.title}\n{module.summary}".strip())
        self._dm(self._describe_room(start))

        logger.info("Module loaded", module_id=module.id, start_room=start.id)

    @property
    def current_room(self) -> Room | None:
        if self.module is None or self.progress is None:
            return None
        return self.module.get_room(self.progress.current_room)

    def move(self, direction: str) -> bool:
        """Move through an exit of the current room.

        Entering a room whose encounter has not been defeated starts it.

        Returns:
            True if the party moved.
        """
        if self.active_encounter is not None:
            self._system("You cannot leave while enemies remain. Attack or flee!")
            return False

        room = self.current_room
        if self.module is None or self.progress is None or room is None:
            self._system("No adventure module loaded.")
            return False

        label = self._resolve_exit(room, direction)
        if label is None:
            self._system(f"You cannot go {direction}.")
            return False

        destination = self.module.get_room(room.exits[label])
        if destination is None:
            self._system(f"Error: the way {label} leads to unknown room '{room.exits[label]}'.")
            logger.warning("Exit to unknown room", room_id=room.id, direction=label, target=room.exits[label])
            return False

        self.progress.current_room = destination.id
        self.progress.mark_visited(destination.id)
        self._player(f"You go {label}.")
        self._dm(self._describe_room(destination))
        logger.debug("Party moved", from_room=room.id, to_room=destination.id)

        if destination.encounter_id and not self.progress.is_defeated(destination.encounter_id):
            self.start_encounter(destination.encounter_id)
        return True

    @staticmethod
    def _resolve_exit(room: Room, direction: str) -> str | None:
        wanted = direction.strip()
        if wanted in room.exits:
            return wanted
        return next((label for label in room.exits if label.lower() == wanted.lower()), None)

    @staticmethod
    def _describe_room(room: Room) -> str:
        return f"{room.name}\n{room.description}"

    def complete_objective(self, objective_id: str) -> bool:
        if self.module is None or self.progress is None:
            self._system("No adventure module loaded.")
            return False
        objective = next((o for o in self.module.objectives if o.id == objective_id), None)
        if objective is None:
            self._system(f"Unknown objective: {objective_id}")
            return False
        if self.progress.complete_objective(objective_id):
            self._system(f"Objective complete: {objective.text}")
            logger.info("Objective completed", objective_id=objective_id)
        return True

    def available_actions(self) -> list[ActionOption]:
        """Actions offered to the player: combat options in combat, exits otherwise."""
        if self.active_encounter is not None:
            actions = [
                ActionOption(
                    label=f"Attack {enemy.name} ({enemy.hp_display})",
                    kind="combat",
                    target=enemy.instance_id,
                )
                for enemy in self.active_encounter.enemies
            ]
            actions.append(ActionOption(label="Flee", kind="combat"))
            return actions

        room = self.current_room
        if room is None:
            return []
        return [ActionOption(label=f"Go {label}", kind="move", target=label) for label in room.exits]

    # =========================================================================
    # Encounters
    # =========================================================================

    @property
    def phase(self) -> EncounterPhase:
        if self.active_encounter is None:
            return EncounterPhase.NO_ENCOUNTER
        return EncounterPhase.ACTIVE_ENCOUNTER

    def start_encounter(self, encounter_id: str) -> bool:
        """Spawn fresh enemy instances from an encounter template."""
        encounter = self.module.get_encounter(encounter_id) if self.module else None
        if encounter is None:
            self._system(f"Unknown encounter: {encounter_id}")
            return False

        self._cancel_enemy_turns()
        enemies = [
            EnemyInstance(
                name=ref.name if ref.count == 1 else f"{ref.name} {n}",
                hp=ref.stats.hp,
                max_hp=ref.stats.hp,
                ac=ref.stats.ac,
                stats=ref.stats,
            )
            for ref in encounter.enemies
            for n in range(1, ref.count + 1)
        ]
        self.active_encounter = ActiveEncounterState(
            id=encounter.id,
            name=encounter.name,
            enemies=enemies,
            tactics=encounter.tactics,
        )
        self._dm(encounter.description)
        logger.info("Encounter started", encounter_id=encounter.id, enemies=len(enemies))
        return True

    def attack_enemy(self, instance_id: str) -> AttackOutcome | None:
        """Resolve one player attack against an enemy instance.

        Returns:
            The attack outcome, or None if the attack was not legal.
        """
        encounter = self.active_encounter
        if encounter is None:
            self._system("There is nothing to attack.")
            return None
        enemy = encounter.find_enemy(instance_id)
        if enemy is None:
            self._system("That enemy is not here.")
            return None

        character = self.current_character
        if character is not None:
            bonus = character.attack_bonus
            damage_bonus = character.damage_bonus
        else:
            bonus = self.settings.fallback_attack_bonus
            damage_bonus = 0

        attack_roll = self.roller.roll(D20, bonus)
        hit = attack_roll.total >= enemy.ac
        self._player(
            f"You attack {enemy.name} (AC {enemy.ac}): d20 {attack_roll.result} {bonus:+d}"
            f" = {attack_roll.total}. {'Hit!' if hit else 'Miss.'}"
        )

        damage = 0
        defeated = False
        victory = False
        if hit:
            damage = max(0, self.roller.roll(self.settings.player_damage_die, damage_bonus).total)
            enemy.hp -= damage
            if enemy.hp <= 0:
                defeated = True
                encounter.remove_enemy(enemy.instance_id)
                self._dm(f"You deal {damage} damage. {enemy.name} is defeated!")
                logger.debug("Enemy defeated", encounter_id=encounter.id, enemy=enemy.name)
            else:
                self._dm(f"You deal {damage} damage. {enemy.name} has {enemy.hp_display} HP.")

        if encounter.is_cleared:
            victory = True
            self._win_encounter(encounter)
        else:
            self._schedule_enemy_turn(encounter)

        return AttackOutcome(
            target_id=enemy.instance_id,
            target_name=enemy.name,
            roll=attack_roll.result,
            total=attack_roll.total,
            hit=hit,
            damage=damage,
            defeated=defeated,
            victory=victory,
        )

    def _win_encounter(self, encounter: ActiveEncounterState) -> None:
        self._cancel_enemy_turns()
        self.active_encounter = None

        text = f"Victory! {encounter.name} is over."
        module = self.module
        template = module.get_encounter(encounter.id) if module else None
        if module is not None and template is not None and template.treasure:
            loot = ", ".join(module.describe_item(ref) for ref in template.treasure)
            text += f" Treasure: {loot}."
        self._dm(text)

        if self.progress is not None:
            self.progress.mark_defeated(encounter.id)
        logger.info("Encounter won", encounter_id=encounter.id)

    def flee_encounter(self) -> bool:
        """Leave combat without clearing the encounter."""
        encounter = self.active_encounter
        if encounter is None:
            self._system("There is nothing to flee from.")
            return False
        self._player(f"You flee from {encounter.name}!")
        self._cancel_enemy_turns()
        self.active_encounter = None
        logger.info("Encounter fled", encounter_id=encounter.id)
        return True

    # =========================================================================
    # Enemy turns
    # =========================================================================

    @property
    def pending_enemy_turns(self) -> int:
        """Enemy turns scheduled but not yet fired or cancelled."""
        return len(self._enemy_turns)

    def _schedule_enemy_turn(self, encounter: ActiveEncounterState) -> None:
        def fire() -> None:
            if task in self._enemy_turns:
                self._enemy_turns.remove(task)
            self._run_enemy_turn(encounter)

        task = self.scheduler.call_later(self.settings.enemy_turn_delay_seconds, fire)
        self._enemy_turns.append(task)

    def _cancel_enemy_turns(self) -> None:
        if self._enemy_turns:
            logger.debug("Cancelling pending enemy turns", count=len(self._enemy_turns))
        for task in self._enemy_turns:
            task.cancel()
        self._enemy_turns = []

    def _run_enemy_turn(self, encounter: ActiveEncounterState) -> None:
        if self.active_encounter is not encounter or encounter.is_cleared:
            logger.debug("Stale enemy turn skipped", encounter_id=encounter.id)
            return

        enemy: EnemyInstance = self.roller.choice(encounter.enemies)
        attack = enemy.stats.primary_attack
        if attack is None:
            self._dm(f"{enemy.name} hesitates.")
            return

        character = self.current_character
        target_ac = character.armor_class if character else self.settings.fallback_armor_class
        attack_roll = self.roller.roll(D20, attack.bonus)
        head = (
            f"{enemy.name} attacks with {attack.name}: d20 {attack_roll.result} {attack.bonus:+d}"
            f" = {attack_roll.total} vs AC {target_ac}."
        )
        if attack_roll.total < target_ac:
            self._dm(f"{head} Miss!")
            return

        damage = self._enemy_damage(attack)
        text = f"{head} Hit for {damage} {attack.damage_type} damage!"
        if character is not None:
            character.apply_damage(damage)
            text += f" {character.name} has {character.hp}/{character.max_hp} HP."
            if not character.is_conscious:
                text += f" {character.name} falls unconscious!"
        self._dm(text)
        logger.debug("Enemy hit", enemy=enemy.name, damage=damage)

    def _enemy_damage(self, attack: AttackBlock) -> int:
        if self.settings.enemy_damage_mode == "dice":
            try:
                return max(0, self.roller.roll_expression(attack.damage_dice).total)
            except DiceRollError as exc:
                logger.warning("Unparseable enemy damage, using fixed damage", error=str(exc))
        return self.settings.enemy_fixed_damage

    # =========================================================================
    # Prompt context
    # =========================================================================

    def build_prompt(self) -> str:
        """Snapshot the session into the DM system prompt."""
        return build_dm_prompt(
            self.current_character,
            self.module,
            self.progress,
            self.active_encounter,
        )


__all__ = [
    "GameSession",
]
