"""Static checks run before any die is rolled."""

from __future__ import annotations

from dicebox.config import settings
from dicebox.dice.errors import (
    DiceError,
    DiceSyntaxError,
    EmptyExpressionError,
    LimitExceededError,
)
from dicebox.dice.lexer import Token, TokenKind, tokenize
from dicebox.dice.nodes import Node
from dicebox.dice.parser import parse
from dicebox.dice.results import ValidationResult


def _check_parentheses(tokens: list[Token]) -> None:
    depth = 0
    for token in tokens:
        if token.kind == TokenKind.lparen:
            depth += 1
        elif token.kind == TokenKind.rparen:
            depth -= 1
            if depth < 0:
                raise DiceSyntaxError("Unbalanced parentheses")
    if depth != 0:
        raise DiceSyntaxError("Unbalanced parentheses")


def _check_limits(tokens: list[Token]) -> None:
    if len(tokens) > settings.max_tokens:
        raise LimitExceededError(
            f"Expression is too long: {len(tokens)} tokens (max {settings.max_tokens})"
        )
    for token in tokens:
        if token.kind != TokenKind.dice:
            continue
        if token.count > settings.max_dice:
            raise LimitExceededError(f"Too many dice: {token.count} (max {settings.max_dice})")
        if token.count < 1:
            raise LimitExceededError("Dice count must be at least 1")
        if token.sides > settings.max_sides:
            raise LimitExceededError(f"Too many sides: {token.sides} (max {settings.max_sides})")
        if token.sides < 1:
            raise LimitExceededError("Dice must have at least 1 side")


def check_expression(expression: str) -> Node:
    """Run every static check and return the parsed tree.

    Checks run in order and stop at the first failure: blank input,
    over-long numbers, parenthesis balance, expression length and dice
    caps, then the grammar.

    Raises:
        EmptyExpressionError: If the expression is blank.
        DiceSyntaxError: If parentheses are unbalanced or the grammar rejects it.
        LimitExceededError: If a number, the token count or a dice term
            exceeds the configured caps.
    """
    if not expression.strip():
        raise EmptyExpressionError()
    tokens = tokenize(expression)
    _check_parentheses(tokens)
    _check_limits(tokens)
    try:
        return parse(tokens)
    except DiceSyntaxError as exc:
        raise DiceSyntaxError(f"Invalid expression: {exc}") from exc


def validate_expression(expression: str) -> ValidationResult:
    """Check an expression without rolling it.

    Safe to call repeatedly; performs no random draws.
    """
    try:
        check_expression(expression)
    except DiceError as exc:
        return ValidationResult(valid=False, error=str(exc))
    return ValidationResult(valid=True)
