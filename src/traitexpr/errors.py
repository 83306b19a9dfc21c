"""
Error hierarchy for trait expression evaluation.

Every failure raised by the engine derives from TraitExpressionError so that
policy consumers can catch one type and decide whether to fail closed.

IMPORTANT:
    The engine never recovers internally. An error aborts the whole
    evaluation; there is no partial result.
"""

from typing import Optional


class TraitExpressionError(Exception):
    """Base class for all trait expression errors."""
    pass


class InvalidPattern(TraitExpressionError):
    """Raised when a regular expression given to matches/replace does not compile."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid regular expression {pattern!r}: {reason}")


class TypeMismatch(TraitExpressionError):
    """
    Raised when an operator receives an operand of a kind it does not accept.

    Attributes:
        expected: Human-readable description of the accepted kind(s)
        actual: Kind of the operand that was received
        context: Where the operand was used (e.g. "filter() argument 2")
    """

    def __init__(self, expected: str, actual: str, context: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.context = context
        prefix = f"{context}: " if context else ""
        super().__init__(f"{prefix}expected {expected}, got {actual}")


class InvalidArgument(TraitExpressionError):
    """Raised for wrong argument kinds to flattening operators or wrong argument counts."""
    pass


class UnsupportedMatcher(TraitExpressionError):
    """Raised when option() is given a matcher other than an exact string."""
    pass


class NoMatch(TraitExpressionError):
    """Raised when match() exhausts its options without a match and without a default."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"no option matched {value!r} and no default_option was given")


class UnboundIdentifier(TraitExpressionError):
    """Raised for identifiers whose root is not 'external'."""
    pass


class UnknownFunction(TraitExpressionError):
    """Raised when an expression calls a function missing from the registry."""
    pass


class LimitExceeded(TraitExpressionError):
    """Raised when an expression or its inputs exceed the configured limits."""
    pass


class ParseError(TraitExpressionError):
    """Raised when expression text cannot be parsed."""

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)


class SerializationError(TraitExpressionError):
    """Raised when a serialized expression or trait document is malformed."""
    pass


class ConfigurationError(TraitExpressionError):
    """Raised for invalid engine configuration or an invalid function registry."""
    pass


__all__ = [
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
