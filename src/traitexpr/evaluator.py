"""
Evaluator: walks an expression tree against a trait store.

Evaluation is stateless and single-pass:
    1. check_limits() rejects oversized trees and inputs
    2. nodes are evaluated depth-first, arguments left to right
    3. every argument is evaluated eagerly before its function runs,
       except the right operand of && and ||, which is skipped once the
       left operand decides the result

The top-level result is a Value: a Bool for authorization decisions, a
Scalar or StringList for templated output.

No state is kept between calls, so one Evaluator may serve many threads.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from traitexpr.analyzer import TRAIT_ROOT, check_limits
from traitexpr.config import EngineConfig
from traitexpr.errors import (
    ConfigurationError,
    InvalidArgument,
    LimitExceeded,
    TraitExpressionError,
    TypeMismatch,
    UnboundIdentifier,
    UnknownFunction,
)
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
from traitexpr.formatter import format_expression
from traitexpr.functions import BUILTIN_FUNCTIONS, Builtin
from traitexpr.parser import parse_expression
from traitexpr.traits import TraitInput, TraitStore, ensure_store
from traitexpr.values import FALSE, TRUE, Bool, Scalar, Value, as_bool, as_scalar, describe

logger = logging.getLogger(__name__)


class Evaluator:
    """
    Applies the builtin functions to an expression tree.

    Args:
        functions: Function registry (defaults to BUILTIN_FUNCTIONS)
        config: Evaluation limits (defaults to EngineConfig())

    Raises:
        ConfigurationError: If the registry is malformed. Setup problems are
            reported to the caller, never by terminating the process.
    """

    def __init__(
        self,
        functions: Optional[Mapping[str, Builtin]] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.functions = dict(BUILTIN_FUNCTIONS if functions is None else functions)
        self.config = config if config is not None else EngineConfig()
        self._validate_registry()

    def _validate_registry(self) -> None:
        if not isinstance(self.config, EngineConfig):
            raise ConfigurationError(f"config must be an EngineConfig, got {type(self.config).__name__}")
        for name, builtin in self.functions.items():
            if not isinstance(builtin, Builtin):
                raise ConfigurationError(f"registry entry {name!r} is not a Builtin")
            if not name.isidentifier():
                raise ConfigurationError(f"registry key {name!r} is not a valid function name")
            if not callable(builtin.impl):
                raise ConfigurationError(f"registry entry {name!r} has a non-callable implementation")
            if builtin.min_args < 0 or (
                builtin.max_args is not None and builtin.max_args < builtin.min_args
            ):
                raise ConfigurationError(f"registry entry {name!r} has an invalid arity")

    def evaluate(self, expression: Expression, traits: Union[TraitStore, TraitInput, None]) -> Value:
        """
        Evaluate a tree and return its Value.

        Raises:
            TraitExpressionError: Any evaluation failure; nothing is partially returned
        """
        store = ensure_store(traits)
        check_limits(expression, self.config)
        self._check_inputs(store)

        debug = logger.isEnabledFor(logging.DEBUG)
        text = format_expression(expression) if debug else ""
        if debug:
            logger.debug("Evaluating %s", text)
        try:
            result = self._walk(expression, store)
        except TraitExpressionError as e:
            if debug:
                logger.debug("Evaluation of %s failed: %s", text, e)
            raise
        if debug:
            logger.debug("Result of %s: %r", text, result)
        return result

    def _walk(self, expression: Expression, store: TraitStore) -> Value:
        try:
            result = self._eval(expression, store)
        except RecursionError:
            raise LimitExceeded("expression nests too deeply to evaluate") from None
        if not isinstance(result, Value):
            raise TypeMismatch("string, list or bool", describe(result), "expression result")
        return result

    def _check_inputs(self, store: TraitStore) -> None:
        limit = self.config.max_input_length
        if limit is not None and store.longest_value() > limit:
            raise LimitExceeded(
                f"trait value of length {store.longest_value()} exceeds the limit of {limit}"
            )

    # =========================================================================
    # NODE EVALUATION
    # =========================================================================

    def _eval(self, expr: Expression, store: TraitStore) -> Any:
        if isinstance(expr, Literal):
            return Scalar(expr.value)

        if isinstance(expr, Identifier):
            return self._resolve_identifier(expr, store)

        if isinstance(expr, PropertyAccess):
            target = self._eval(expr.target, store)
            if not isinstance(target, TraitStore):
                raise TypeMismatch("traits", describe(target), "property access target")
            key = as_scalar(self._eval(expr.key, store), "property access key")
            return target.resolve(key)

        if isinstance(expr, FunctionCall):
            return self._call(expr, store)

        if isinstance(expr, BinaryExpression):
            context = f"{expr.operator.value} operand"
            left = as_bool(self._eval(expr.left, store), context)
            if expr.operator == BinaryOperator.AND and not left:
                return FALSE
            if expr.operator == BinaryOperator.OR and left:
                return TRUE
            return Bool(as_bool(self._eval(expr.right, store), context))

        if isinstance(expr, UnaryExpression):
            if expr.operator == UnaryOperator.NOT:
                operand = as_bool(self._eval(expr.operand, store), "NOT operand")
                return FALSE if operand else TRUE
            raise TypeError(f"Unsupported unary operator: {expr.operator}")

        raise TypeError(f"Unsupported Expression type: {type(expr)}")

    def _resolve_identifier(self, expr: Identifier, store: TraitStore) -> Any:
        root = expr.path[0] if expr.path else ""
        if root != TRAIT_ROOT:
            raise UnboundIdentifier(f"identifier {expr.name!r} not found")
        if len(expr.path) == 1:
            return store
        if len(expr.path) == 2:
            return store.resolve(expr.path[1])
        raise UnboundIdentifier(
            f"identifier {expr.name!r} has {len(expr.path)} segments, at most 2 are supported"
        )

    def _call(self, expr: FunctionCall, store: TraitStore) -> Any:
        builtin = self.functions.get(expr.name)
        if builtin is None:
            raise UnknownFunction(f"unknown function {expr.name!r}")
        count = len(expr.arguments)
        if not builtin.accepts(count):
            raise InvalidArgument(
                f"{expr.name}() takes {builtin.arity()} arguments, got {count}"
            )
        args = [self._eval(arg, store) for arg in expr.arguments]
        return builtin.impl(*args)


_DEFAULT_EVALUATOR = Evaluator()


def _evaluator_for(config: Optional[EngineConfig]) -> Evaluator:
    if config is None:
        return _DEFAULT_EVALUATOR
    return Evaluator(config=config)


def evaluate(
    expression: Expression,
    traits: Union[TraitStore, TraitInput, None],
    config: Optional[EngineConfig] = None,
) -> Value:
    """Evaluate an already-parsed expression with the builtin functions."""
    return _evaluator_for(config).evaluate(expression, traits)


def evaluate_string(
    text: str,
    traits: Union[TraitStore, TraitInput, None],
    config: Optional[EngineConfig] = None,
) -> Value:
    """Parse expression text and evaluate it; nesting is bounded by config.max_depth."""
    evaluator = _evaluator_for(config)
    return evaluator.evaluate(parse_expression(text, evaluator.config.max_depth), traits)


__all__ = ["Evaluator", "evaluate", "evaluate_string"]
