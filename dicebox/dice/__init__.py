"""Dice notation engine.

Supports:
- Basic: 3d6, d20+5, 2d6+1d4+3
- Keep/drop highest/lowest: 4d6kh3, 2d20kl1, 4d6dl1
- Exploding: d6!
- Reroll: d20r1 (repeat), d20ro2 (once)
- Success counting: 8d6>=5
- Math: + - * / and parentheses
- Variables: @strength
- Natural 20/1 detection for a lone d20
"""

from dicebox.dice.engine import roll, roll_multiple, roll_with_attributes
from dicebox.dice.errors import (
    DiceError,
    DiceSyntaxError,
    DivisionByZeroError,
    EmptyExpressionError,
    LimitExceededError,
    UnknownVariableError,
)
from dicebox.dice.formatter import format_multiple_rolls, format_roll_for_display
from dicebox.dice.results import RollGroup, RollResult, ValidationResult
from dicebox.dice.validator import validate_expression

__all__ = [
    "DiceError",
    "DiceSyntaxError",
    "DivisionByZeroError",
    "EmptyExpressionError",
    "LimitExceededError",
    "RollGroup",
    "RollResult",
    "UnknownVariableError",
    "ValidationResult",
    "format_multiple_rolls",
    "format_roll_for_display",
    "roll",
    "roll_multiple",
    "roll_with_attributes",
    "validate_expression",
]
