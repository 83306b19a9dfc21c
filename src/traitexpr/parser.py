"""
Expression Parser (Raw Text -> Expression Tree).

Turns expression text into the tree the evaluator consumes.

Syntax Notes:
    - Go-style boolean operators: && (AND), || (OR), ! (NOT)
    - Function calls: name(arg, arg, ...) with an optional trailing comma
    - Identifiers: external, external.groups
    - Index access: external["groups"]
    - Strings: "double quoted" with escapes, or `raw backtick`

Example:
    transform(filter(external.groups, matches("^env-")), replace("^env-", ""))
"""

import re
from dataclasses import dataclass
from typing import List, Tuple

from traitexpr.config import DEFAULT_MAX_DEPTH
from traitexpr.errors import LimitExceeded, ParseError
from traitexpr.expressions import (
    BinaryExpression,
    BinaryOperator,
    Expression,
    FunctionCall,
    Identifier,
    Literal,
    PropertyAccess,
    UnaryExpression,
    UnaryOperator,
)

_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<string>"(?:[^"\\\n]|\\.)*")
  | (?P<raw>`[^`]*`)
  | (?P<op>&&|\|\||[!(),.\[\]])
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE,
)

_SIMPLE_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "t": "\t",
    "r": "\r",
}


@dataclass(frozen=True)
class Token:
    """A lexical token with its offset in the source text."""
    kind: str
    text: str
    pos: int


def _unescape(body: str) -> str:
    """
    Resolve escapes inside a double-quoted string.

    Unknown escapes are kept verbatim so regex escapes such as \\w and \\d
    survive whether or not the author doubled the backslash.
    """
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(_SIMPLE_ESCAPES.get(nxt, "\\" + nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def tokenize(text: str) -> List[Token]:
    """Tokenize expression text."""
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            if text[pos] in "\"`":
                raise ParseError("Unterminated string literal", pos)
            raise ParseError(f"Unexpected character {text[pos]!r}", pos)
        kind = m.lastgroup
        if kind == "string":
            tokens.append(Token("string", _unescape(m.group()[1:-1]), pos))
        elif kind == "raw":
            tokens.append(Token("string", m.group()[1:-1], pos))
        elif kind != "space":
            tokens.append(Token(kind, m.group(), pos))
        pos = m.end()
    return tokens


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, text: str, max_depth: int = DEFAULT_MAX_DEPTH):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0
        self.max_depth = max_depth
        self.depth = 0

    def _peek(self, offset: int = 0):
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def _at_op(self, symbol: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "op" and token.text == symbol

    def _expect_op(self, symbol: str) -> Token:
        token = self._peek()
        if token is None:
            raise ParseError(f"Expected {symbol!r} but reached end of expression", len(self.text))
        if token.kind != "op" or token.text != symbol:
            raise ParseError(f"Expected {symbol!r}, got {token.text!r}", token.pos)
        self.pos += 1
        return token

    def parse(self) -> Expression:
        if not self.tokens:
            raise ParseError("Empty expression", 0)
        expr = self._parse_or()
        token = self._peek()
        if token is not None:
            raise ParseError(f"Unexpected token {token.text!r} after expression", token.pos)
        return expr

    def _parse_or(self) -> Expression:
        """Parse || (lowest precedence)."""
        left = self._parse_and()
        while self._at_op("||"):
            self.pos += 1
            right = self._parse_and()
            left = BinaryExpression(BinaryOperator.OR, left, right)
        return left

    def _parse_and(self) -> Expression:
        """Parse &&."""
        left = self._parse_unary()
        while self._at_op("&&"):
            self.pos += 1
            right = self._parse_unary()
            left = BinaryExpression(BinaryOperator.AND, left, right)
        return left

    def _parse_unary(self) -> Expression:
        """Parse ! (NOT). Every nested operand, argument and group passes here."""
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                token = self._peek()
                where = token.pos if token is not None else len(self.text)
                raise LimitExceeded(
                    f"expression nests deeper than {self.max_depth} levels (at offset {where})"
                )
            if self._at_op("!"):
                self.pos += 1
                return UnaryExpression(UnaryOperator.NOT, self._parse_unary())
            return self._parse_postfix()
        finally:
            self.depth -= 1

    def _parse_postfix(self) -> Expression:
        """Parse index access: primary["key"]."""
        expr = self._parse_primary()
        while self._at_op("["):
            self.pos += 1
            key = self._parse_or()
            self._expect_op("]")
            expr = PropertyAccess(expr, key)
        return expr

    def _parse_primary(self) -> Expression:
        """Parse a string, a parenthesized expression, an identifier or a call."""
        token = self._peek()
        if token is None:
            raise ParseError("Unexpected end of expression", len(self.text))

        if token.kind == "string":
            self.pos += 1
            return Literal(token.text)

        if self._at_op("("):
            self.pos += 1
            expr = self._parse_or()
            self._expect_op(")")
            return expr

        if token.kind == "ident":
            path = self._parse_path()
            if self._at_op("("):
                if len(path) != 1:
                    raise ParseError(f"Cannot call {'.'.join(path)!r}: only plain function names are callable", token.pos)
                return FunctionCall(path[0], self._parse_arguments())
            return Identifier(path)

        raise ParseError(f"Unexpected token {token.text!r}", token.pos)

    def _parse_path(self) -> Tuple[str, ...]:
        segments = [self.tokens[self.pos].text]
        self.pos += 1
        while self._at_op("."):
            self.pos += 1
            token = self._peek()
            if token is None or token.kind != "ident":
                where = token.pos if token is not None else len(self.text)
                raise ParseError("Expected identifier after '.'", where)
            segments.append(token.text)
            self.pos += 1
        return tuple(segments)

    def _parse_arguments(self) -> Tuple[Expression, ...]:
        """Parse comma-separated call arguments; a trailing comma is allowed."""
        self._expect_op("(")
        arguments: List[Expression] = []
        while not self._at_op(")"):
            arguments.append(self._parse_or())
            if self._at_op(","):
                self.pos += 1
                continue
            token = self._peek()
            if token is None:
                raise ParseError("Missing closing parenthesis in function call", len(self.text))
            if not self._at_op(")"):
                raise ParseError(f"Expected ',' or ')' in function call, got {token.text!r}", token.pos)
        self._expect_op(")")
        return tuple(arguments)


def parse_expression(text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Expression:
    """
    Parse expression text into an Expression tree.

    Args:
        text: Expression source, e.g. 'contains(external.groups, "devs")'
        max_depth: Deepest nesting of calls, groups, indexes and ! accepted

    Returns:
        Expression tree

    Raises:
        ParseError: If the text is not a valid expression
        LimitExceeded: If the text nests deeper than max_depth
    """
    if not isinstance(text, str):
        raise ParseError(f"Expression must be a string, got {type(text).__name__}")
    try:
        return _Parser(text, max_depth).parse()
    except RecursionError:
        raise LimitExceeded("expression nests too deeply to parse") from None


__all__ = ["parse_expression", "tokenize", "Token"]
