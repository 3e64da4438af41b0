"""Recursive-descent parser for dice expressions.

Grammar, lowest to highest precedence::

    expr      := term (("+" | "-") term)*
    term      := factor (("*" | "/") factor)*
    factor    := ("-" | "+") factor | primary
    primary   := number | dice | "(" expr ")" | variable
    dice      := DICE modifier* [comparator number]
    modifier  := ("kh" | "kl" | "dh" | "dl") number | "!" | ("r" | "ro") [number]

Nesting of parentheses and unary signs is bounded by ``settings.max_depth``.
"""

from __future__ import annotations

from dicebox.config import settings
from dicebox.dice.errors import DiceSyntaxError
from dicebox.dice.lexer import Token, TokenKind
from dicebox.dice.nodes import (
    BinaryOp,
    DiceModifiers,
    DiceTerm,
    Group,
    Node,
    NumberLiteral,
    SuccessCount,
    UnaryMinus,
    VariableRef,
)

_KEEP_FIELDS = {
    "kh": "keep_highest",
    "kl": "keep_lowest",
    "dh": "drop_highest",
    "dl": "drop_lowest",
}


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._depth = 0

    # -- token helpers -----------------------------------------------------

    def _peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _at_op(self, *ops: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == TokenKind.op and token.text in ops

    def _unexpected(self, token: Token | None) -> DiceSyntaxError:
        if token is None:
            return DiceSyntaxError("Unexpected end of expression")
        if token.kind == TokenKind.unknown:
            return DiceSyntaxError(
                f"Unexpected character {token.text!r} at position {token.position}"
            )
        return DiceSyntaxError(f"Unexpected token {token.text!r} at position {token.position}")

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > settings.max_depth:
            raise DiceSyntaxError(f"Expression is nested too deeply (max {settings.max_depth})")

    # -- grammar -----------------------------------------------------------

    def parse(self) -> Node:
        node = self._expr()
        token = self._peek()
        if token is not None:
            raise self._unexpected(token)
        return node

    def _expr(self) -> Node:
        node = self._term()
        while self._at_op("+", "-"):
            op = self._advance().text
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._factor()
        while self._at_op("*", "/"):
            op = self._advance().text
            node = BinaryOp(op, node, self._factor())
        return node

    def _factor(self) -> Node:
        if self._at_op("-", "+"):
            op = self._advance().text
            self._enter()
            operand = self._factor()
            self._depth -= 1
            return UnaryMinus(operand) if op == "-" else operand
        return self._primary()

    def _primary(self) -> Node:
        token = self._peek()
        if token is None:
            raise self._unexpected(None)

        if token.kind == TokenKind.number:
            self._advance()
            return NumberLiteral(token.value)

        if token.kind == TokenKind.dice:
            return self._dice()

        if token.kind == TokenKind.variable:
            self._advance()
            return VariableRef(token.name)

        if token.kind == TokenKind.lparen:
            self._advance()
            self._enter()
            inner = self._expr()
            closing = self._peek()
            if closing is None or closing.kind != TokenKind.rparen:
                if closing is None:
                    raise DiceSyntaxError(f"Missing ')' for '(' at position {token.position}")
                raise self._unexpected(closing)
            self._advance()
            self._depth -= 1
            return Group(inner)

        raise self._unexpected(token)

    def _dice(self) -> Node:
        dice_token = self._advance()
        fields: dict[str, int | bool | None] = {}

        while True:
            token = self._peek()
            if token is None:
                break
            if token.kind == TokenKind.keep:
                self._advance()
                if any(name in fields for name in _KEEP_FIELDS.values()):
                    raise DiceSyntaxError(
                        f"Only one keep/drop modifier is allowed per dice term "
                        f"(position {token.position})"
                    )
                if token.value is None:
                    raise DiceSyntaxError(
                        f"Modifier {token.text!r} at position {token.position} needs a number"
                    )
                fields[_KEEP_FIELDS[token.text]] = token.value
            elif token.kind == TokenKind.explode:
                self._advance()
                if "exploding" in fields:
                    raise DiceSyntaxError(f"Duplicate '!' at position {token.position}")
                fields["exploding"] = True
            elif token.kind == TokenKind.reroll:
                self._advance()
                if "reroll_below" in fields:
                    raise DiceSyntaxError(
                        f"Duplicate reroll modifier at position {token.position}"
                    )
                threshold = token.value if token.value is not None else 1
                if threshold >= dice_token.sides:
                    raise DiceSyntaxError(
                        f"Reroll threshold {threshold} must be less than the number of sides "
                        f"({dice_token.sides})"
                    )
                fields["reroll_below"] = threshold
                fields["reroll_once"] = token.text == "ro"
            else:
                break

        term = DiceTerm(dice_token.count, dice_token.sides, DiceModifiers(**fields))

        token = self._peek()
        if token is not None and token.kind == TokenKind.comparator:
            self._advance()
            threshold = self._peek()
            if threshold is None or threshold.kind != TokenKind.number:
                raise self._unexpected(threshold)
            self._advance()
            return SuccessCount(term, token.text, threshold.value)
        return term


def parse(tokens: list[Token]) -> Node:
    """Build a syntax tree from a token list.

    Args:
        tokens: Output of ``tokenize``.

    Returns:
        The root node of the expression.

    Raises:
        DiceSyntaxError: If the tokens do not form a valid expression.
    """
    return _Parser(tokens).parse()
