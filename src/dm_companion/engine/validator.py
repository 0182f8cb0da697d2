"""Referential-integrity checks for adventure modules.

``validate_module`` never raises. Every check runs and each problem is
reported as one human-readable message, so an author sees the whole list
at once. An empty list means the module is valid.
"""

from __future__ import annotations

from dm_companion.core.constants import LOOSE_CURRENCY_SUFFIX
from dm_companion.core.logging import get_logger
from dm_companion.models.module import AdventureModule


logger = get_logger(__name__)


def _is_loose_currency(reference: str) -> bool:
    return reference.endswith(LOOSE_CURRENCY_SUFFIX)


def validate_module(module: AdventureModule) -> list[str]:
    """Check a module's internal references and basic sanity.

    Args:
        module: The module to check.

    Returns:
        One message per problem found, in module order.
    """
    errors: list[str] = []
    room_ids = module.room_ids
    encounter_ids = {enc.id for enc in module.encounters}
    npc_ids = {npc.id for npc in module.npcs}
    item_ids = {item.id for item in module.items}
    container_ids = {container.id for container in module.containers}

    for room in module.rooms:
        for direction, destination in room.exits.items():
            if destination not in room_ids:
                errors.append(f"Room {room.id} exit '{direction}' leads to missing room: {destination}")
        if room.encounter_id and room.encounter_id not in encounter_ids:
            errors.append(f"Room {room.id} references missing encounter: {room.encounter_id}")
        for npc_id in room.npcs:
            if npc_id not in npc_ids:
                errors.append(f"Room {room.id} references missing NPC: {npc_id}")
        for item_id in room.items:
            if item_id not in item_ids and item_id not in container_ids:
                errors.append(f"Room {room.id} references missing item or container: {item_id}")
        for secret in room.secrets:
            if secret.check is not None and secret.check.dc <= 0:
                errors.append(f"Room {room.id} has a secret with invalid DC: {secret.check.dc}")

    for encounter in module.encounters:
        if not encounter.enemies:
            errors.append(f"Encounter {encounter.id} has no enemies.")
        for enemy in encounter.enemies:
            if enemy.stats.ac <= 0 or enemy.stats.hp <= 0:
                errors.append(
                    f"Encounter {encounter.id} enemy {enemy.name} has invalid stats "
                    f"(AC {enemy.stats.ac}, HP {enemy.stats.hp})."
                )
        for reference in encounter.treasure:
            if not _is_loose_currency(reference) and reference not in item_ids:
                errors.append(f"Encounter {encounter.id} treasure references missing item: {reference}")

    for container in module.containers:
        for reference in container.contents:
            if not _is_loose_currency(reference) and reference not in item_ids:
                errors.append(f"Container {container.id} contents reference missing item: {reference}")

    for objective in module.objectives:
        if not objective.text.strip():
            errors.append(f"Objective {objective.id} has no text.")

    logger.debug("Module validated", module_id=module.id, errors=len(errors))
    return errors


def traverse_rooms(module: AdventureModule, start_room_id: str | None = None) -> list[str]:
    """Walk the room graph depth-first in exit order.

    Args:
        module: The module to walk.
        start_room_id: Room to start from. Defaults to the first room.

    Returns:
        Room ids in first-visit order. Cycles are followed once; exits to
        unknown rooms are skipped.
    """
    start = (start_room_id or module.start_room.id).strip()
    order: list[str] = []
    visited: set[str] = set()

    def step(room_id: str) -> None:
        if room_id in visited:
            return
        room = module.get_room(room_id)
        if room is None:
            return
        visited.add(room_id)
        order.append(room_id)
        for destination in room.exits.values():
            step(destination)

    step(start)
    return order


def unreachable_rooms(module: AdventureModule) -> list[str]:
    """Room ids that cannot be reached from the starting room."""
    reachable = set(traverse_rooms(module))
    return [room.id for room in module.rooms if room.id not in reachable]


__all__ = [
    "validate_module",
    "traverse_rooms",
    "unreachable_rooms",
]
