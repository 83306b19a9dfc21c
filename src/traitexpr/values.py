"""
Runtime Value Model

Defines the closed set of values an expression can produce:
    - Scalar (a single string)
    - StringList (an ordered sequence of strings)
    - Bool (result of predicate-typed operators)

ARCHITECTURAL RULE:
    There are no numeric types. The engine is string/list/bool only.
    Operators never inspect Python types directly; they go through the
    extraction helpers below, which enforce the coercion rule:

        - a Scalar is accepted wherever a list is expected (list of one)
        - a list of exactly one element is accepted wherever a scalar is expected

    Anything else is a TypeMismatch.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, List, Optional, Tuple, Union

from traitexpr.errors import TypeMismatch


class Value(ABC):
    """
    Base class for the three runtime value variants.

    Structure only. Behavior lives in the operator modules.
    """

    kind: ClassVar[str] = "value"


@dataclass(frozen=True)
class Scalar(Value):
    """
    A single string.

    Example:
        The literal "ubuntu" in concat("ubuntu", external.logins)
    """

    kind: ClassVar[str] = "string"

    value: str


@dataclass(frozen=True)
class StringList(Value):
    """
    An ordered sequence of strings.

    Order is significant and preserved. Elements need not be unique.
    Trait values are always StringLists.

    IMPORTANT:
        Items are stored as a tuple so the value stays hashable and immutable.
    """

    kind: ClassVar[str] = "list"

    items: Tuple[str, ...] = ()

    @classmethod
    def of(cls, items: Iterable[str]) -> "StringList":
        return cls(tuple(items))

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Bool(Value):
    """
    A boolean produced by predicate-typed operators (equals, contains, AND, OR, NOT).

    Never stored in traits.
    """

    kind: ClassVar[str] = "bool"

    value: bool


TRUE = Bool(True)
FALSE = Bool(False)


def describe(operand: Any) -> str:
    """Name the kind of any runtime operand for error messages."""
    kind = getattr(operand, "kind", None)
    if isinstance(kind, str):
        return kind
    return type(operand).__name__


def as_list(operand: Any, context: Optional[str] = None) -> Tuple[str, ...]:
    """
    Extract the elements of a list-typed operand.

    A Scalar is accepted as a list of one.

    Raises:
        TypeMismatch: If the operand is neither a StringList nor a Scalar
    """
    if isinstance(operand, StringList):
        return operand.items
    if isinstance(operand, Scalar):
        return (operand.value,)
    raise TypeMismatch("list", describe(operand), context)


def as_scalar(operand: Any, context: Optional[str] = None) -> str:
    """
    Extract the string of a scalar-typed operand.

    A StringList with exactly one element is accepted as its element.

    Raises:
        TypeMismatch: If the operand is not a Scalar or a list of one
    """
    if isinstance(operand, Scalar):
        return operand.value
    if isinstance(operand, StringList):
        if len(operand.items) == 1:
            return operand.items[0]
        raise TypeMismatch("string", f"list of {len(operand.items)} elements", context)
    raise TypeMismatch("string", describe(operand), context)


def as_bool(operand: Any, context: Optional[str] = None) -> bool:
    """Extract the boolean of a Bool operand. No coercion from strings or lists."""
    if isinstance(operand, Bool):
        return operand.value
    raise TypeMismatch("bool", describe(operand), context)


def is_template_value(operand: Any) -> bool:
    """True for values usable as templated output (string or list)."""
    return isinstance(operand, (Scalar, StringList))


def to_python(value: Value) -> Union[str, List[str], bool]:
    """Convert a Value into a plain Python str, list of str, or bool."""
    if isinstance(value, Scalar):
        return value.value
    if isinstance(value, StringList):
        return list(value.items)
    if isinstance(value, Bool):
        return value.value
    raise TypeMismatch("string, list or bool", describe(value))


def from_python(obj: Any) -> Value:
    """
    Convert a plain Python object into a Value.

    Accepts str, bool, and lists/tuples of str.
    """
    if isinstance(obj, Value):
        return obj
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, str):
        return Scalar(obj)
    if isinstance(obj, (list, tuple)):
        for item in obj:
            if not isinstance(item, str):
                raise TypeMismatch("list of strings", f"list containing {type(item).__name__}")
        return StringList(tuple(obj))
    raise TypeMismatch("str, bool or list of str", type(obj).__name__)


__all__ = [
    "Value",
    "Scalar",
    "StringList",
    "Bool",
    "TRUE",
    "FALSE",
    "describe",
    "as_list",
    "as_scalar",
    "as_bool",
    "is_template_value",
    "to_python",
    "from_python",
]
