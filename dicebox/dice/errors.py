"""Exceptions raised by the dice engine.

Every error is an expected, input-dependent condition. Callers catch
``DiceError`` and show ``str(exc)`` to the user.
"""

from __future__ import annotations


class DiceError(ValueError):
    """Base class for all dice expression errors."""


class DiceSyntaxError(DiceError):
    """Raised when an expression does not match the grammar."""


class LimitExceededError(DiceError):
    """Raised when a dice term or batch falls outside the configured caps."""


class UnknownVariableError(DiceError):
    """Raised when an ``@name`` reference has no binding."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown variable: @{name}")
        self.name = name


class EmptyExpressionError(DiceError):
    """Raised when the expression is blank."""

    def __init__(self) -> None:
        super().__init__("Empty expression")


class DivisionByZeroError(DiceError):
    """Raised when an expression divides by zero."""

    def __init__(self) -> None:
        super().__init__("Division by zero")
