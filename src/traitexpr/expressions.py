"""
Expression Tree for trait expressions

Every trait expression is represented as an Abstract Syntax Tree before it
is evaluated. The tree comes from the parser or from a serialized document;
the evaluator never sees raw text.

Node kinds:
    - Literal           "env-staging"
    - Identifier        external, external.groups
    - PropertyAccess    external["groups"]
    - FunctionCall      filter(external.groups, matches("^env-"))
    - BinaryExpression  a && b, a || b
    - UnaryExpression   !a

ARCHITECTURAL RULE:
    Nodes are structure only. They do not evaluate, print, or validate
    themselves. Those concerns live in evaluator, formatter and analyzer.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Expression(ABC):
    """
    Base class for all AST expressions.

    It exists to provide type-safety for the expression hierarchy.

    DO NOT:
        - Add evaluation logic here (belongs in evaluator)
        - Add string representations (belongs in formatter)
    """
    pass


class BinaryOperator(Enum):
    """
    Boolean connectives.

    Both short-circuit: the right operand is evaluated only when the left
    one does not already decide the result.
    """

    AND = "AND"
    OR = "OR"


class UnaryOperator(Enum):
    """Unary operators."""
    NOT = "NOT"


@dataclass(frozen=True)
class Literal(Expression):
    """
    A string literal.

    Examples:
        - "ubuntu"
        - "^env-(\\w+)$"

    There are no numeric or boolean literals.
    """

    value: str


@dataclass(frozen=True)
class Identifier(Expression):
    """
    A dotted identifier path.

    Examples:
        - external          -> the whole trait store
        - external.groups   -> the list bound to "groups"

    Properties:
        path: Tuple of segments, e.g. ("external", "groups")

    IMPORTANT:
        This node does NOT check that the root is "external".
        The evaluator rejects other roots at evaluation time.
    """

    path: Tuple[str, ...]

    @property
    def name(self) -> str:
        return ".".join(self.path)


@dataclass(frozen=True)
class PropertyAccess(Expression):
    """
    Index access into the trait store.

    Example:
        external["groups"]

    Becomes:
        PropertyAccess(
            target=Identifier(("external",)),
            key=Literal("groups")
        )
    """

    target: Expression
    key: Expression


@dataclass(frozen=True)
class FunctionCall(Expression):
    """
    Call of a registered builtin.

    Example:
        transform(external.username, replace("-", "_"))

    Becomes:
        FunctionCall(
            name="transform",
            arguments=(
                Identifier(("external", "username")),
                FunctionCall("replace", (Literal("-"), Literal("_"))),
            )
        )

    Properties:
        name: Registry key (e.g. "filter", "match")
        arguments: Argument expressions in call order
    """

    name: str
    arguments: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Boolean AND / OR of two predicate expressions.

    Example:
        contains(external.groups, "devs") && !contains(external.groups, "contractors")
    """

    operator: BinaryOperator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """
    Boolean negation.

    Example:
        !equals(external.team, "ops")
    """

    operator: UnaryOperator
    operand: Expression


__all__ = [
    "Expression",
    "BinaryOperator",
    "UnaryOperator",
    "Literal",
    "Identifier",
    "PropertyAccess",
    "FunctionCall",
    "BinaryExpression",
    "UnaryExpression",
]
