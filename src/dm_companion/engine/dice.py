"""Dice rolling for the game session.

Single-die rolls (``d20 + modifier``) draw from an injectable
``random.Random`` so sessions can be seeded or driven by a stub in tests.
Die-notation expressions such as ``"1d6+2"`` or ``"2d20kh1+5"`` from enemy
stat blocks are parsed and rolled by the d20 library.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

import d20

from dm_companion.core.exceptions import DiceRollError
from dm_companion.core.logging import get_logger
from dm_companion.models.session import DieRoll


logger = get_logger(__name__)


@dataclass(frozen=True)
class DiceExpression:
    """A rolled die-notation expression.

    Attributes:
        expression: The original dice expression string.
        total: The total result of the roll.
        dice: Individual dice results.
        modifier: Static modifier applied.
    """

    expression: str
    total: int
    dice: list[int]
    modifier: int

    def __str__(self) -> str:
        rolls = ", ".join(str(d) for d in self.dice)
        if not self.modifier:
            return f"{self.expression}: [{rolls}] = {self.total}"
        return f"{self.expression}: [{rolls}]{self.modifier:+d} = {self.total}"


class DiceRoller:
    """Dice rolling with an injectable random source.

    Example:
        >>> roller = DiceRoller(seed=42)
        >>> roll = roller.roll(20, modifier=3)
        >>> roll.total == roll.result + 3
        True
    """

    def __init__(self, *, seed: int | None = None, rng: random.Random | None = None) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional random seed for reproducible rolls.
            rng: Random source to draw from; overrides ``seed``.
        """
        self._rng = rng if rng is not None else random.Random(seed)
        logger.debug("DiceRoller initialized", seed=seed, injected=rng is not None)

    @property
    def rng(self) -> random.Random:
        return self._rng

    def roll(self, sides: int, modifier: int = 0) -> DieRoll:
        """Roll one die and add a modifier.

        Args:
            sides: Number of sides; must be a positive integer.
            modifier: Flat modifier added to the natural roll.

        Returns:
            DieRoll with ``result`` in ``[1, sides]`` and ``total = result + modifier``.

        Raises:
            DiceRollError: If ``sides`` is not a positive integer.
        """
        if isinstance(sides, bool) or not isinstance(sides, int) or sides <= 0:
            raise DiceRollError(
                f"Die must have a positive number of sides, got {sides!r}",
                expression=f"d{sides}",
            )

        result = self._rng.randint(1, sides)
        die_roll = DieRoll(sides=sides, result=result, modifier=modifier, total=result + modifier)
        logger.debug("Die rolled", sides=sides, result=result, modifier=modifier, total=die_roll.total)
        return die_roll

    def choice(self, options: list[Any]) -> Any:
        """Pick one option uniformly at random."""
        return self._rng.choice(options)

    def roll_expression(self, expression: str) -> DiceExpression:
        """Roll dice according to a die-notation expression.

        Anything the d20 library accepts is supported, including
        ``XdY+Z``, mixed dice such as ``1d8+1d6`` and keep-highest
        ``2d20kh1+5``. These rolls use the d20 library's own random source,
        not the injected one.

        Args:
            expression: Dice expression (e.g., '1d6+2', '2d4').

        Returns:
            DiceExpression containing roll results.

        Raises:
            DiceRollError: If the expression is empty or invalid.
        """
        if not expression or not expression.strip():
            raise DiceRollError("Empty dice expression", expression=expression)

        formula = expression.strip()
        try:
            result: d20.RollResult = d20.roll(formula.lower())
        except d20.RollError as exc:
            raise DiceRollError(
                f"Invalid dice expression: {exc}",
                expression=expression,
            ) from exc

        dice_values = self._extract_dice_values(result.expr)
        rolled = DiceExpression(
            expression=formula,
            total=result.total,
            dice=dice_values,
            modifier=result.total - sum(dice_values),
        )
        logger.debug("Dice expression rolled", expression=formula, total=rolled.total, dice=dice_values)
        return rolled

    @staticmethod
    def _extract_dice_values(expr: Any) -> list[int]:
        """Collect the kept die results from a d20 expression tree."""
        values: list[int] = []

        def traverse(node: Any) -> None:
            if isinstance(node, d20.Dice):
                for die in node.values:
                    if die.kept:
                        values.append(die.number)
            elif hasattr(node, "children"):
                for child in node.children:
                    traverse(child)

        traverse(expr)
        return values


__all__ = [
    "DiceExpression",
    "DiceRoller",
]
