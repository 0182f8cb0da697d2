"""Bundled adventure modules.

Modules are Python data, validated once when loaded::

    >>> from dm_companion.data import load_module
    >>> module = load_module("goblin-cave")
    >>> module.start_room.name
    'Cave Mouth'
"""

from __future__ import annotations

from dm_companion.core.exceptions import ModuleLoadError, ModuleValidationError
from dm_companion.core.logging import get_logger
from dm_companion.data.goblin_cave import GOBLIN_CAVE
from dm_companion.engine.validator import unreachable_rooms, validate_module
from dm_companion.models.module import AdventureModule


logger = get_logger(__name__)

_MODULES: dict[str, AdventureModule] = {
    GOBLIN_CAVE.id: GOBLIN_CAVE,
}


def available_modules() -> list[str]:
    """Ids of the bundled modules."""
    return sorted(_MODULES)


def load_module(module_id: str, *, strict: bool = False) -> AdventureModule:
    """Return a bundled module after validating it.

    Validator errors are logged. With ``strict`` they are raised instead.

    Args:
        module_id: Id of a bundled module.
        strict: Raise if the module has validator errors.

    Returns:
        The module.

    Raises:
        ModuleLoadError: If no bundled module has that id.
        ModuleValidationError: If ``strict`` and the module is invalid.
    """
    module = _MODULES.get(module_id)
    if module is None:
        raise ModuleLoadError(
            f"Unknown module '{module_id}'. Available: {', '.join(available_modules())}",
            module_id=module_id,
        )

    errors = validate_module(module)
    for error in errors:
        logger.warning("Module validation error", module_id=module_id, error=error)
    if errors and strict:
        raise ModuleValidationError(
            f"Module '{module_id}' failed validation",
            errors=errors,
            module_id=module_id,
        )

    unreachable = unreachable_rooms(module)
    if unreachable:
        logger.warning("Unreachable rooms", module_id=module_id, rooms=unreachable)

    logger.info("Module ready", module_id=module_id, rooms=len(module.rooms), errors=len(errors))
    return module


__all__ = [
    "GOBLIN_CAVE",
    "available_modules",
    "load_module",
]
