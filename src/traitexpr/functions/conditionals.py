"""
Conditional operators: ifelse, option, default_option, match.

match() walks its options strictly in declaration order and returns the
value of the first option whose matcher accepts the input.

IMPORTANT:
    A default_option placed before other options makes them unreachable.
    That is the caller's responsibility; the engine does not reorder or
    validate option lists.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Union

from traitexpr.errors import NoMatch, TypeMismatch, UnsupportedMatcher
from traitexpr.values import Scalar, Value, as_bool, as_scalar, describe, is_template_value


@dataclass(frozen=True)
class ExactMatcher:
    """Accepts exactly one string."""

    expected: str

    def accepts(self, value: str) -> bool:
        return value == self.expected


@dataclass(frozen=True)
class DefaultMatcher:
    """Accepts everything. Built only by default_option()."""

    def accepts(self, value: str) -> bool:
        return True


Matcher = Union[ExactMatcher, DefaultMatcher]


@dataclass(frozen=True)
class Option:
    """
    One branch of a match().

    Properties:
        matcher: Decides whether this option applies to the input
        value: Result returned by match() when it does
    """

    kind: ClassVar[str] = "option"

    matcher: Matcher
    value: Value

    @property
    def is_default(self) -> bool:
        return isinstance(self.matcher, DefaultMatcher)


def _template_value(operand: Any, context: str) -> Value:
    if not is_template_value(operand):
        raise TypeMismatch("string or list", describe(operand), context)
    return operand


def ifelse(predicate: Any, then_value: Any, else_value: Any) -> Value:
    """
    ifelse(predicate, then, else)

    Both branches are already evaluated; only the choice is made here.
    The branches may be of different kinds (a string and a list).
    """
    condition = as_bool(predicate, "ifelse() argument 1")
    chosen = _template_value(then_value, "ifelse() argument 2")
    other = _template_value(else_value, "ifelse() argument 3")
    return chosen if condition else other


def option(matcher: Any, value: Any) -> Option:
    """option(matcher, value): only exact-string matchers are supported."""
    if not isinstance(matcher, Scalar):
        raise UnsupportedMatcher(
            f"option() matcher must be a string, got {describe(matcher)}"
        )
    return Option(ExactMatcher(matcher.value), _template_value(value, "option() argument 2"))


def default_option(value: Any) -> Option:
    """default_option(value): an option that accepts every input."""
    return Option(DefaultMatcher(), _template_value(value, "default_option() argument 1"))


def match(subject: Any, *options: Any) -> Value:
    """
    match(input, options...)

    Raises:
        NoMatch: If no option accepts the input
    """
    text = as_scalar(subject, "match() argument 1")
    for position, candidate in enumerate(options, start=2):
        if not isinstance(candidate, Option):
            raise TypeMismatch("option", describe(candidate), f"match() argument {position}")
    for candidate in options:
        if candidate.matcher.accepts(text):
            return candidate.value
    raise NoMatch(text)


__all__ = [
    "ExactMatcher",
    "DefaultMatcher",
    "Option",
    "ifelse",
    "option",
    "default_option",
    "match",
]
