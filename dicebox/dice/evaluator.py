"""Tree-walking evaluator.

Dice are drawn exactly once per die, in left-to-right tree order, from an
injectable random source. Given the same sequence of draws the result is
fully reproducible.
"""

from __future__ import annotations

import logging
import math
import operator
import random
from collections.abc import Callable, Mapping
from fractions import Fraction
from typing import Protocol

from dicebox.config import settings
from dicebox.dice.errors import DiceSyntaxError, DivisionByZeroError, UnknownVariableError
from dicebox.dice.nodes import (
    BinaryOp,
    DiceTerm,
    Group,
    Node,
    NumberLiteral,
    SuccessCount,
    UnaryMinus,
    VariableRef,
)
from dicebox.dice.results import RollGroup, RollResult

logger = logging.getLogger(__name__)

Number = int | float

_COMPARATORS: dict[str, Callable[[int, int], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
}


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def divide(left: Number, right: Number) -> int:
    """Divide and round to the nearest integer, halves away from zero.

    Raises:
        DivisionByZeroError: If ``right`` is zero.
    """
    if right == 0:
        raise DivisionByZeroError()
    quotient = Fraction(left) / Fraction(right)
    rounded = math.floor(abs(quotient) + Fraction(1, 2))
    return rounded if quotient >= 0 else -rounded


def _fmt(value: Number) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def select_kept(results: list[int], term: DiceTerm) -> set[int]:
    """Return the indices of results retained by the term's keep/drop rule.

    Selection is by value; on a tie at the boundary the earlier roll is kept.
    """
    mods = term.modifiers
    indices = range(len(results))
    if mods.keep_highest is not None:
        ranked = sorted(indices, key=lambda i: (-results[i], i))
        return set(ranked[: mods.keep_highest])
    if mods.keep_lowest is not None:
        ranked = sorted(indices, key=lambda i: (results[i], i))
        return set(ranked[: mods.keep_lowest])
    if mods.drop_highest is not None:
        ranked = sorted(indices, key=lambda i: (-results[i], -i))
        return set(indices) - set(ranked[: mods.drop_highest])
    if mods.drop_lowest is not None:
        ranked = sorted(indices, key=lambda i: (results[i], -i))
        return set(indices) - set(ranked[: mods.drop_lowest])
    return set(indices)


class _Evaluation:
    """State for a single evaluation pass."""

    def __init__(self, variables: Mapping[str, Number], rng: RandomSource) -> None:
        self.variables = variables
        self.rng = rng
        self.rolls: list[RollGroup] = []

    def _draw(self, term: DiceTerm) -> int:
        mods = term.modifiers
        value = self.rng.randint(1, term.sides)
        if mods.reroll_below is None:
            return value
        limit = 1 if mods.reroll_once else settings.max_rerolls
        rerolls = 0
        while value <= mods.reroll_below and rerolls < limit:
            value = self.rng.randint(1, term.sides)
            rerolls += 1
        if value <= mods.reroll_below and not mods.reroll_once:
            logger.debug("Reroll cap reached for %s", term.notation())
        return value

    def roll_dice(self, node: DiceTerm | SuccessCount) -> tuple[int, str, RollGroup]:
        """Roll a dice term and return (subtotal, breakdown text, group)."""
        term = node.dice if isinstance(node, SuccessCount) else node
        results = [self._draw(term) for _ in range(term.count)]

        exploded: set[int] = set()
        if term.modifiers.exploding:
            i = 0
            while i < len(results):
                if results[i] == term.sides:
                    if len(exploded) >= settings.max_explosions:
                        logger.debug("Explosion cap reached for %s", term.notation())
                        break
                    exploded.add(i)
                    results.append(self._draw(term))
                i += 1

        kept_indices = select_kept(results, term)
        kept = [v for i, v in enumerate(results) if i in kept_indices]

        check: Callable[[int, int], bool] | None = None
        modifier = term.modifiers.notation()
        if isinstance(node, SuccessCount):
            check = _COMPARATORS[node.comparator]
            subtotal = sum(1 for v in kept if check(v, node.threshold))
            modifier += f"{node.comparator}{node.threshold}"
            notation = node.notation()
        else:
            subtotal = sum(kept)
            notation = term.notation()

        parts: list[str] = []
        for i, value in enumerate(results):
            text = f"{value}!" if i in exploded else str(value)
            if i not in kept_indices:
                text = f"~~{text}~~"
            elif check is not None and check(value, node.threshold):
                text = f"**{text}**"
            parts.append(text)

        group = RollGroup(
            count=term.count,
            sides=term.sides,
            modifier=modifier,
            results=results,
            kept=kept,
            subtotal=subtotal,
        )
        self.rolls.append(group)
        logger.debug("Rolled %s: %s -> %d", notation, results, subtotal)
        return subtotal, f"{notation} [{', '.join(parts)}]", group

    def visit(self, node: Node) -> tuple[Number, str]:
        if isinstance(node, NumberLiteral):
            return node.value, str(node.value)

        if isinstance(node, (DiceTerm, SuccessCount)):
            subtotal, text, group = self.roll_dice(node)
            plain_single = (
                isinstance(node, DiceTerm) and len(group.results) == 1 and node.modifiers.is_plain
            )
            if plain_single:
                return subtotal, text
            return subtotal, f"({text} = {subtotal})"

        if isinstance(node, VariableRef):
            if node.name in self.variables:
                value = self.variables[node.name]
            elif node.name.lower() in self.variables:
                value = self.variables[node.name.lower()]
            else:
                raise UnknownVariableError(node.name)
            return value, f"@{node.name}={_fmt(value)}"

        if isinstance(node, UnaryMinus):
            value, text = self.visit(node.operand)
            return -value, f"-{text}"

        if isinstance(node, Group):
            value, text = self.visit(node.expr)
            return value, f"({text})"

        if isinstance(node, BinaryOp):
            left, left_text = self.visit(node.left)
            right, right_text = self.visit(node.right)
            if node.op == "+":
                value = left + right
            elif node.op == "-":
                value = left - right
            elif node.op == "*":
                value = left * right
            elif node.op == "/":
                value = divide(left, right)
            else:
                raise DiceSyntaxError(f"Unknown operator: {node.op!r}")
            return value, f"{left_text} {node.op} {right_text}"

        raise TypeError(f"Unhandled node type: {type(node).__name__}")


def _critical(node: Node, rolls: list[RollGroup]) -> str | None:
    while isinstance(node, Group):
        node = node.expr
    if not isinstance(node, DiceTerm):
        return None
    if node.count != 1 or node.sides != 20 or not node.modifiers.is_plain:
        return None
    value = rolls[0].results[0]
    if value == 20:
        return "success"
    if value == 1:
        return "failure"
    return None


def evaluate(
    node: Node,
    variables: Mapping[str, Number] | None = None,
    *,
    rng: RandomSource | None = None,
    expression: str = "",
) -> RollResult:
    """Evaluate a syntax tree into a RollResult.

    Args:
        node: Root of the parsed expression.
        variables: Values for ``@name`` references.
        rng: Object with a ``randint(a, b)`` method. Defaults to the
            process-wide ``random`` module.
        expression: Source text recorded on the result.

    Raises:
        UnknownVariableError: If a referenced variable is not bound.
        DivisionByZeroError: On division by zero.
    """
    evaluation = _Evaluation(variables or {}, rng if rng is not None else random)

    if isinstance(node, (DiceTerm, SuccessCount)):
        total, text, _ = evaluation.roll_dice(node)
    else:
        total, text = evaluation.visit(node)

    return RollResult(
        expression=expression,
        rolls=evaluation.rolls,
        total=total,
        details=f"{text} = **{_fmt(total)}**",
        critical=_critical(node, evaluation.rolls),
    )
