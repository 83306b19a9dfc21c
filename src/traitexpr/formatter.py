"""
Canonical text rendering of expression trees.

The output is accepted by traitexpr.parser and parses back to an equal
tree. Used for log lines and error messages, and for storing expressions
written as trees in their textual form.
"""

from typing import Dict

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

_BINARY_SYMBOLS: Dict[BinaryOperator, str] = {
    BinaryOperator.OR: "||",
    BinaryOperator.AND: "&&",
}

_UNARY_SYMBOLS: Dict[UnaryOperator, str] = {
    UnaryOperator.NOT: "!",
}

# Binding strength; higher binds tighter
_PRECEDENCE_OR = 1
_PRECEDENCE_AND = 2
_PRECEDENCE_UNARY = 3
_PRECEDENCE_ATOM = 4

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


def quote_string(value: str) -> str:
    """Render a string literal with the escapes the parser understands."""
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in value) + '"'


def _precedence(expr: Expression) -> int:
    if isinstance(expr, BinaryExpression):
        return _PRECEDENCE_OR if expr.operator == BinaryOperator.OR else _PRECEDENCE_AND
    if isinstance(expr, UnaryExpression):
        return _PRECEDENCE_UNARY
    return _PRECEDENCE_ATOM


def _wrap(expr: Expression, parenthesize: bool) -> str:
    text = format_expression(expr)
    return f"({text})" if parenthesize else text


def format_expression(expr: Expression) -> str:
    """
    Render an expression tree as canonical text.

    Examples:
        FunctionCall("matches", (Literal("^env-"),))  ->  matches("^env-")
        BinaryExpression(OR, a, BinaryExpression(OR, b, c))  ->  a || (b || c)

    Raises:
        TypeError: If the tree contains a node type this module does not know
    """
    if isinstance(expr, Literal):
        return quote_string(expr.value)

    if isinstance(expr, Identifier):
        return expr.name

    if isinstance(expr, PropertyAccess):
        target = _wrap(expr.target, _precedence(expr.target) < _PRECEDENCE_ATOM)
        return f"{target}[{format_expression(expr.key)}]"

    if isinstance(expr, FunctionCall):
        args = ", ".join(format_expression(arg) for arg in expr.arguments)
        return f"{expr.name}({args})"

    if isinstance(expr, BinaryExpression):
        own = _precedence(expr)
        # Trees are left-associative, so an equal-precedence right child keeps its parens
        left = _wrap(expr.left, _precedence(expr.left) < own)
        right = _wrap(expr.right, _precedence(expr.right) <= own)
        return f"{left} {_BINARY_SYMBOLS[expr.operator]} {right}"

    if isinstance(expr, UnaryExpression):
        operand = _wrap(expr.operand, _precedence(expr.operand) < _PRECEDENCE_UNARY)
        return f"{_UNARY_SYMBOLS[expr.operator]}{operand}"

    raise TypeError(f"Unsupported Expression type: {type(expr)}")


__all__ = ["format_expression", "quote_string"]
