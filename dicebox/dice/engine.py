"""Public entry points: roll, repeat, and roll against character attributes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from dicebox.config import settings
from dicebox.dice.errors import LimitExceededError
from dicebox.dice.evaluator import Number, RandomSource, evaluate
from dicebox.dice.results import RollResult
from dicebox.dice.validator import check_expression

logger = logging.getLogger(__name__)


def roll(
    expression: str,
    variables: Mapping[str, Number] | None = None,
    *,
    rng: RandomSource | None = None,
) -> RollResult:
    """Validate, parse and evaluate a dice expression.

    Args:
        expression: Dice expression, e.g. "2d6+3", "4d6kh3", "d20+@strength".
        variables: Values for ``@name`` references.
        rng: Optional random source with a ``randint(a, b)`` method.

    Returns:
        The evaluated RollResult.

    Raises:
        DiceError: If the expression is empty, malformed, over the caps, or
            references an unbound variable.
    """
    node = check_expression(expression)
    result = evaluate(node, variables, rng=rng, expression=expression)
    logger.debug("Rolled %r = %s", expression, result.total)
    return result


def roll_multiple(
    expression: str,
    count: int,
    variables: Mapping[str, Number] | None = None,
    *,
    rng: RandomSource | None = None,
) -> list[RollResult]:
    """Roll the same expression ``count`` independent times.

    The expression is parsed once; every repetition gets a fresh evaluation.

    Raises:
        LimitExceededError: If ``count`` is outside 1..settings.max_repeat.
        DiceError: If the expression is invalid.
    """
    if count < 1:
        raise LimitExceededError("Roll count must be at least 1")
    if count > settings.max_repeat:
        raise LimitExceededError(f"Too many rolls: {count} (max {settings.max_repeat})")
    node = check_expression(expression)
    return [evaluate(node, variables, rng=rng, expression=expression) for _ in range(count)]


def roll_with_attributes(
    expression: str,
    attributes: Mapping[str, Any],
    *,
    rng: RandomSource | None = None,
) -> RollResult:
    """Roll with a character's attributes bound as variables.

    Attribute names are lowercased; non-numeric values count as 0.
    """
    variables: dict[str, Number] = {}
    for key, value in attributes.items():
        numeric = isinstance(value, (int, float)) and not isinstance(value, bool)
        variables[key.lower()] = value if numeric else 0
    return roll(expression, variables, rng=rng)
