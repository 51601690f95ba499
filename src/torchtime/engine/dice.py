"""Dice rolling for the dice roller view.

Rolls are parsed and evaluated by the d20 library. Every roll made from
the UI is appended to the shared dice log in the application state.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

import d20

from torchtime.core.constants import DICE_TYPES
from torchtime.core.exceptions import DiceRollError
from torchtime.core.logging import get_logger
from torchtime.models.state import AppState, DiceRollLogEntry


logger = get_logger(__name__)


@dataclass(frozen=True)
class DiceRoll:
    """The result of one dice expression.

    Attributes:
        expression: The expression as entered.
        total: The total result of the roll.
        dice: Kept die faces, in roll order.
        is_critical: A d20 came up 20.
        is_fumble: A d20 came up 1.
        detail: d20's annotated breakdown, e.g. '1d20 (17) + 5 = `22`'.
    """

    expression: str
    total: int
    dice: list[int]
    is_critical: bool
    is_fumble: bool
    detail: str = ""


class DiceRoller:
    """Dice rolling backed by the d20 library.

    Example:
        >>> roller = DiceRoller()
        >>> result = roller.roll("2d6+3")
        >>> print(f"Total: {result.total}")
    """

    def __init__(self, *, seed: int | None = None) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional random seed for reproducible rolls.
        """
        if seed is not None:
            random.seed(seed)
        logger.debug("DiceRoller initialized", seed=seed)

    def roll(self, expression: str) -> DiceRoll:
        """Roll dice according to the given expression.

        Args:
            expression: Dice expression (e.g., '1d20+5', '2d6+3').

        Returns:
            DiceRoll containing the results.

        Raises:
            DiceRollError: If the expression is empty or invalid.
        """
        if not expression or not expression.strip():
            raise DiceRollError("Empty dice expression", expression=expression)

        expression = expression.strip()
        try:
            result = d20.roll(expression)
        except d20.RollError as exc:
            raise DiceRollError(
                f"Invalid dice expression: {exc}",
                expression=expression,
            ) from exc

        d20_faces = self._collect_faces(result.expr, sides=20)
        roll = DiceRoll(
            expression=expression,
            total=result.total,
            dice=self._collect_faces(result.expr),
            is_critical=20 in d20_faces,
            is_fumble=1 in d20_faces,
            detail=str(result),
        )

        logger.info(
            "Dice rolled",
            expression=expression,
            total=roll.total,
            is_critical=roll.is_critical,
        )
        return roll

    def roll_die(self, sides: int) -> DiceRoll:
        """Roll a single die from the quick-roll set (d4 ... d100).

        Raises:
            DiceRollError: If the die size is not offered.
        """
        if sides not in DICE_TYPES:
            raise DiceRollError(
                f"Unsupported die: d{sides}",
                expression=f"1d{sides}",
            )
        return self.roll(f"1d{sides}")

    def _collect_faces(self, expr: Any, sides: int | None = None) -> list[int]:
        """Collect kept die faces from a d20 expression tree."""
        values: list[int] = []

        def traverse(node: Any) -> None:
            if isinstance(node, d20.Dice):
                if sides is None or node.size == sides:
                    for die in node.values:
                        if die.kept:
                            values.append(die.number)
            elif hasattr(node, "children"):
                for child in node.children:
                    traverse(child)

        traverse(expr)
        return values


def record_roll(
    state: AppState,
    user_id: str | None,
    roll: DiceRoll,
    *,
    limit: int | None = None,
) -> DiceRollLogEntry:
    """Append a roll to the dice log, keeping only the newest ``limit`` entries."""
    entry = DiceRollLogEntry(
        user_id=user_id,
        expression=roll.expression,
        total=roll.total,
        is_critical=roll.is_critical,
    )
    log = [*state.dice_log, entry]
    if limit is not None and len(log) > limit:
        log = log[-limit:]
    state.dice_log = log
    return entry


__all__ = [
    "DiceRoll",
    "DiceRoller",
    "record_roll",
]
