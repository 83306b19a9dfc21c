"""
List operators: filter, transform, list/concat.

All three return a new StringList; inputs are never modified. A Scalar
passed where a list is expected counts as a list of one.
"""

from typing import Any

from traitexpr.errors import InvalidArgument, TypeMismatch
from traitexpr.functions.strings import RegexPredicate, RegexTransform
from traitexpr.values import Scalar, StringList, as_list, describe


def filter_list(values: Any, predicate: Any) -> StringList:
    """
    filter(list, predicate)

    Keep the elements for which the predicate holds, in their original order.
    """
    items = as_list(values, "filter() argument 1")
    if not isinstance(predicate, RegexPredicate):
        raise TypeMismatch("predicate", describe(predicate), "filter() argument 2")
    return StringList(tuple(item for item in items if predicate.test(item)))


def transform_list(values: Any, transform: Any) -> StringList:
    """
    transform(list, transform)

    Apply the transform to every element. The result has the same length
    as the input and keeps positions.
    """
    items = as_list(values, "transform() argument 1")
    if not isinstance(transform, RegexTransform):
        raise TypeMismatch("transform", describe(transform), "transform() argument 2")
    return StringList(tuple(transform.apply(item) for item in items))


def concat(*args: Any) -> StringList:
    """
    list(args...) / concat(args...)

    Strings are appended, lists are spliced in. Flattening goes exactly one
    level deep per call:

        list(list("a", "b"), "c")  ->  ["a", "b", "c"]
    """
    out = []
    for position, arg in enumerate(args, start=1):
        if isinstance(arg, Scalar):
            out.append(arg.value)
        elif isinstance(arg, StringList):
            out.extend(arg.items)
        else:
            raise InvalidArgument(
                f"list() argument {position} must be a string or a list, got {describe(arg)}"
            )
    return StringList(tuple(out))


__all__ = ["filter_list", "transform_list", "concat"]
