"""Game engine: dice, scheduling, module validation and the game session.

Submodules:
    dice: Single-die and die-notation rolls from an injectable random source
    scheduler: Delayed callbacks for enemy turns (asyncio or manual clock)
    validator: Referential-integrity checks and room-graph traversal
    session: The GameSession store with movement and combat

Example:
    >>> from dm_companion.engine import GameSession, ManualScheduler
    >>> scheduler = ManualScheduler()
    >>> session = GameSession(scheduler=scheduler)
"""

from __future__ import annotations

from dm_companion.engine.dice import DiceExpression, DiceRoller
from dm_companion.engine.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    ScheduledTask,
    Scheduler,
)
from dm_companion.engine.session import GameSession
from dm_companion.engine.validator import traverse_rooms, unreachable_rooms, validate_module


__all__ = [
    # Dice
    "DiceExpression",
    "DiceRoller",
    # Scheduling
    "Scheduler",
    "ScheduledTask",
    "AsyncioScheduler",
    "ManualScheduler",
    # Validation
    "validate_module",
    "traverse_rooms",
    "unreachable_rooms",
    # Session
    "GameSession",
]
