"""Syntax tree for dice expressions.

Nodes are immutable and built bottom-up by the parser. One tree may be
evaluated any number of times.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class DiceModifiers:
    """Modifiers attached to a single dice term.

    At most one of the keep/drop fields is set.
    """

    keep_highest: int | None = None
    keep_lowest: int | None = None
    drop_highest: int | None = None
    drop_lowest: int | None = None
    exploding: bool = False
    reroll_below: int | None = None
    reroll_once: bool = False

    @property
    def has_selection(self) -> bool:
        """Return True if a keep/drop rule is set."""
        return any(
            v is not None
            for v in (self.keep_highest, self.keep_lowest, self.drop_highest, self.drop_lowest)
        )

    @property
    def is_plain(self) -> bool:
        """Return True if no modifier is set."""
        return not (self.has_selection or self.exploding or self.reroll_below is not None)

    def notation(self) -> str:
        """Render the modifiers back to normalized suffix notation."""
        parts: list[str] = []
        if self.reroll_below is not None:
            parts.append(f"{'ro' if self.reroll_once else 'r'}{self.reroll_below}")
        if self.exploding:
            parts.append("!")
        for prefix, value in (
            ("kh", self.keep_highest),
            ("kl", self.keep_lowest),
            ("dh", self.drop_highest),
            ("dl", self.drop_lowest),
        ):
            if value is not None:
                parts.append(f"{prefix}{value}")
        return "".join(parts)


@dataclass(frozen=True)
class NumberLiteral:
    value: int


@dataclass(frozen=True)
class DiceTerm:
    count: int
    sides: int
    modifiers: DiceModifiers = DiceModifiers()

    def notation(self) -> str:
        count = str(self.count) if self.count != 1 else ""
        return f"{count}d{self.sides}{self.modifiers.notation()}"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class UnaryMinus:
    operand: Node


@dataclass(frozen=True)
class Group:
    expr: Node


@dataclass(frozen=True)
class VariableRef:
    name: str


@dataclass(frozen=True)
class SuccessCount:
    """A dice term whose value is the number of results meeting a threshold."""

    dice: DiceTerm
    comparator: str
    threshold: int

    def notation(self) -> str:
        return f"{self.dice.notation()}{self.comparator}{self.threshold}"


Node = Union[NumberLiteral, DiceTerm, BinaryOp, UnaryMinus, Group, VariableRef, SuccessCount]
