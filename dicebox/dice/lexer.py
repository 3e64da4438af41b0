"""Tokenizer for dice notation.

Turns a raw expression such as ``4d6kh3 + @strength`` into a flat list of
tokens. Whitespace is skipped; a character that starts no known token becomes
an ``unknown`` token so the parser can report it with its position.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from dicebox.config import settings
from dicebox.dice.errors import LimitExceededError


class TokenKind(str, enum.Enum):
    """Kinds of token produced by the lexer."""

    number = "number"
    dice = "dice"
    op = "op"
    comparator = "comparator"
    keep = "keep"
    explode = "explode"
    reroll = "reroll"
    variable = "variable"
    lparen = "lparen"
    rparen = "rparen"
    unknown = "unknown"


@dataclass(frozen=True)
class Token:
    """A single lexed token.

    ``text`` is the normalized (lowercase) source text. ``value`` holds the
    integer of a number literal or the magnitude of a keep/drop or reroll
    modifier (``None`` when the modifier was written without one). Dice
    tokens carry ``count`` and ``sides``; variable tokens carry ``name``.
    """

    kind: TokenKind
    text: str
    position: int
    value: int | None = None
    count: int = 0
    sides: int = 0
    name: str = ""


# Ordered by greediness: multi-character modifiers and comparators are tried
# before dice terms, numbers and single characters.
_TOKEN_PATTERNS: list[tuple[TokenKind, re.Pattern[str]]] = [
    (TokenKind.keep, re.compile(r"(kh|kl|dh|dl)(\d*)", re.IGNORECASE)),
    (TokenKind.reroll, re.compile(r"(ro|r)(?:<(?=\d))?(\d*)", re.IGNORECASE)),
    (TokenKind.comparator, re.compile(r">=|<=|==|>|<")),
    (TokenKind.dice, re.compile(r"(\d*)d(\d+)", re.IGNORECASE)),
    (TokenKind.number, re.compile(r"\d+")),
    (TokenKind.variable, re.compile(r"@([A-Za-z_][A-Za-z0-9_]*)")),
    (TokenKind.explode, re.compile(r"!")),
    (TokenKind.op, re.compile(r"[-+*/]")),
    (TokenKind.lparen, re.compile(r"\(")),
    (TokenKind.rparen, re.compile(r"\)")),
]

_WHITESPACE_RE = re.compile(r"\s+")


def _to_int(digits: str, position: int) -> int:
    if len(digits) > settings.max_digits:
        raise LimitExceededError(
            f"Number too long at position {position} (max {settings.max_digits} digits)"
        )
    return int(digits)


def _make_token(kind: TokenKind, m: re.Match[str], position: int) -> Token:
    text = m.group(0).lower()
    if kind == TokenKind.dice:
        count = _to_int(m.group(1), position) if m.group(1) else 1
        return Token(kind, text, position, count=count, sides=_to_int(m.group(2), position))
    if kind in (TokenKind.keep, TokenKind.reroll):
        magnitude = _to_int(m.group(2), position) if m.group(2) else None
        return Token(kind, m.group(1).lower(), position, value=magnitude)
    if kind == TokenKind.number:
        return Token(kind, text, position, value=_to_int(text, position))
    if kind == TokenKind.variable:
        return Token(kind, m.group(0), position, name=m.group(1))
    return Token(kind, text, position)


def tokenize(expr: str) -> list[Token]:
    """Split an expression into tokens.

    Args:
        expr: Raw dice expression, e.g. "2d6+3" or "d20 + @strength".

    Returns:
        Tokens in source order, each tagged with its offset into ``expr``.

    Raises:
        LimitExceededError: If a digit run is longer than ``settings.max_digits``.
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(expr):
        ws = _WHITESPACE_RE.match(expr, pos)
        if ws:
            pos = ws.end()
            continue
        for kind, pattern in _TOKEN_PATTERNS:
            m = pattern.match(expr, pos)
            if m:
                tokens.append(_make_token(kind, m, pos))
                pos = m.end()
                break
        else:
            tokens.append(Token(TokenKind.unknown, expr[pos], pos))
            pos += 1
    return tokens
