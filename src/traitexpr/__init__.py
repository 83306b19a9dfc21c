"""
Trait Expression Engine

Evaluates trait expressions against a user's external identity attributes
to produce policy values: a boolean decision, a string, or a list of strings.

    >>> from traitexpr import evaluate_string
    >>> evaluate_string('transform(external.username, replace("-", "_"))',
    ...                 {"username": ["alice-smith"]})
    StringList(items=('alice_smith',))

ARCHITECTURAL GUARANTEE:
------------------------
Evaluation is pure: no I/O, no shared mutable state, no partial results.
Any failure raises a TraitExpressionError and the caller decides whether to
deny access or fall back to a default policy.
"""

from traitexpr.config import EngineConfig
from traitexpr.errors import (
    ConfigurationError,
    InvalidArgument,
    InvalidPattern,
    LimitExceeded,
    NoMatch,
    ParseError,
    SerializationError,
    TraitExpressionError,
    TypeMismatch,
    UnboundIdentifier,
    UnknownFunction,
    UnsupportedMatcher,
)
from traitexpr.evaluator import Evaluator, evaluate, evaluate_string
from traitexpr.parser import parse_expression
from traitexpr.traits import TraitStore
from traitexpr.values import Bool, Scalar, StringList, Value, to_python

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "Evaluator",
    "evaluate",
    "evaluate_string",
    "parse_expression",
    "TraitStore",
    "Value",
    "Scalar",
    "StringList",
    "Bool",
    "to_python",
    "TraitExpressionError",
    "InvalidPattern",
    "TypeMismatch",
    "InvalidArgument",
    "UnsupportedMatcher",
    "NoMatch",
    "UnboundIdentifier",
    "UnknownFunction",
    "LimitExceeded",
    "ParseError",
    "SerializationError",
    "ConfigurationError",
]
