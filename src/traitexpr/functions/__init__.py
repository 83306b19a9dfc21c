"""
Builtin function registry.

Maps the function names usable in expressions to their implementations and
argument counts. The evaluator checks the count before calling; the
implementation checks the argument kinds.

Boolean AND / OR / NOT are tree-level operators, not registry entries.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from traitexpr.functions.conditionals import (
    DefaultMatcher,
    ExactMatcher,
    Option,
    default_option,
    ifelse,
    match,
    option,
)
from traitexpr.functions.lists import concat, filter_list, transform_list
from traitexpr.functions.strings import RegexPredicate, RegexTransform, contains, equals, matches, replace


@dataclass(frozen=True)
class Builtin:
    """
    A registered function.

    Properties:
        name: Name used in expressions
        impl: Callable receiving the evaluated arguments positionally
        min_args: Fewest arguments accepted
        max_args: Most arguments accepted, or None for variadic
    """

    name: str
    impl: Callable[..., Any]
    min_args: int
    max_args: Optional[int]

    def accepts(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

    def arity(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.max_args == self.min_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"


BUILTIN_FUNCTIONS: Mapping[str, Builtin] = MappingProxyType({
    b.name: b
    for b in (
        Builtin("equals", equals, 2, 2),
        Builtin("contains", contains, 2, 2),
        Builtin("matches", matches, 1, 1),
        Builtin("replace", replace, 2, 2),
        Builtin("filter", filter_list, 2, 2),
        Builtin("transform", transform_list, 2, 2),
        Builtin("list", concat, 0, None),
        Builtin("concat", concat, 0, None),
        Builtin("ifelse", ifelse, 3, 3),
        Builtin("option", option, 2, 2),
        Builtin("default_option", default_option, 1, 1),
        Builtin("match", match, 1, None),
    )
})


__all__ = [
    "Builtin",
    "BUILTIN_FUNCTIONS",
    "RegexPredicate",
    "RegexTransform",
    "Option",
    "ExactMatcher",
    "DefaultMatcher",
]
