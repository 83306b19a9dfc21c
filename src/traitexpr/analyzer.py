"""
Expression Analyzer: complexity metrics and limit checks.

Provides read-only inspection of expression trees:
    - Tree depth and node count
    - Traits the expression reads (external.<name>, external["<name>"])
    - Function usage counts
    - Longest string literal

The evaluator runs check_limits() before walking a tree, so oversized or
over-deep expressions are rejected before any regex is compiled.

IMPORTANT: This module does NOT modify or evaluate expressions.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from traitexpr.config import EngineConfig
from traitexpr.errors import LimitExceeded
from traitexpr.expressions import (
    BinaryExpression,
    Expression,
    FunctionCall,
    Identifier,
    Literal,
    PropertyAccess,
    UnaryExpression,
)

TRAIT_ROOT = "external"


@dataclass
class ExpressionMetrics:
    """Metrics about a single expression tree."""
    depth: int = 0
    node_count: int = 0
    trait_references: Set[str] = field(default_factory=set)
    uses_full_store: bool = False
    function_calls: Dict[str, int] = field(default_factory=Counter)
    longest_literal: int = 0

    def add(self, other: ExpressionMetrics) -> None:
        """Fold a child's metrics into this one (depth is handled by the caller)."""
        self.node_count += other.node_count
        self.trait_references.update(other.trait_references)
        self.uses_full_store = self.uses_full_store or other.uses_full_store
        for name, count in other.function_calls.items():
            self.function_calls[name] += count
        self.longest_literal = max(self.longest_literal, other.longest_literal)


def _is_trait_root(expr: Expression) -> bool:
    return isinstance(expr, Identifier) and expr.path == (TRAIT_ROOT,)


def _is_trait_lookup(expr: Expression) -> bool:
    """external["name"] reads a single trait, not the whole store."""
    return isinstance(expr, PropertyAccess) and _is_trait_root(expr.target) and isinstance(expr.key, Literal)


def _children(expr: Expression) -> Tuple[Expression, ...]:
    if isinstance(expr, (Literal, Identifier)):
        return ()
    if isinstance(expr, PropertyAccess):
        if _is_trait_lookup(expr):
            return (expr.key,)
        return (expr.target, expr.key)
    if isinstance(expr, FunctionCall):
        return expr.arguments
    if isinstance(expr, BinaryExpression):
        return (expr.left, expr.right)
    if isinstance(expr, UnaryExpression):
        return (expr.operand,)
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def _own_metrics(expr: Expression) -> ExpressionMetrics:
    """Metrics of a node on its own, before its children are folded in."""
    metrics = ExpressionMetrics(depth=1, node_count=1)
    if isinstance(expr, Literal):
        metrics.longest_literal = len(expr.value)
    elif isinstance(expr, Identifier):
        if expr.path == (TRAIT_ROOT,):
            metrics.uses_full_store = True
        elif len(expr.path) == 2 and expr.path[0] == TRAIT_ROOT:
            metrics.trait_references.add(expr.path[1])
    elif isinstance(expr, FunctionCall):
        metrics.function_calls[expr.name] += 1
    elif _is_trait_lookup(expr):
        # the external root counts as a node but not as a store reference
        metrics.node_count += 1
        metrics.trait_references.add(expr.key.value)
    return metrics


def _analyze(root: Expression, max_depth: Optional[int] = None) -> ExpressionMetrics:
    """
    Walk the tree without recursion, children before parents.

    With max_depth set, the walk stops at the first node nested deeper than
    the limit, so arbitrarily deep trees are rejected without being visited.
    """
    stack: List[Tuple[Expression, int, bool]] = [(root, 1, False)]
    done: List[ExpressionMetrics] = []
    while stack:
        expr, level, expanded = stack.pop()
        if max_depth is not None and level > max_depth:
            raise LimitExceeded(f"expression depth exceeds the limit of {max_depth}")
        children = _children(expr)
        if not expanded:
            stack.append((expr, level, True))
            stack.extend((child, level + 1, False) for child in reversed(children))
            continue
        metrics = _own_metrics(expr)
        if children:
            results = done[-len(children):]
            del done[-len(children):]
            for child in results:
                metrics.add(child)
            metrics.depth = 1 + max(child.depth for child in results)
        done.append(metrics)
    return done[0]


def analyze_expression(expr: Expression) -> ExpressionMetrics:
    """
    Compute complexity metrics for an expression tree.

    A single leaf has depth 1 and node count 1.
    """
    return _analyze(expr)


def check_limits(expr: Expression, config: EngineConfig) -> ExpressionMetrics:
    """
    Reject expressions larger than the configured limits.

    Returns:
        The computed metrics, so callers need not analyze twice

    Raises:
        LimitExceeded: If depth, node count or a literal is over its limit
    """
    metrics = _analyze(expr, config.max_depth)
    if metrics.node_count > config.max_nodes:
        raise LimitExceeded(
            f"expression has {metrics.node_count} nodes, the limit is {config.max_nodes}"
        )
    limit = config.max_input_length
    if limit is not None and metrics.longest_literal > limit:
        raise LimitExceeded(
            f"string literal of length {metrics.longest_literal} exceeds the limit of {limit}"
        )
    return metrics


__all__ = ["ExpressionMetrics", "analyze_expression", "check_limits", "TRAIT_ROOT"]
