"""
Serialization helpers for expression trees, trait stores and results.

Expression trees travel as tagged dicts, e.g.

    {"type": "call", "name": "matches", "arguments": [{"type": "lit", "value": "^env-"}]}

with lossless JSON/YAML round-trip. Trait documents are plain mappings of
trait name to a list of strings (a bare string is accepted as a list of one).
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Union

import yaml

from traitexpr.config import DEFAULT_MAX_DEPTH
from traitexpr.errors import InvalidArgument, SerializationError
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
from traitexpr.traits import TraitStore
from traitexpr.values import Value, to_python


def expr_to_dict(expr: Expression) -> Dict[str, Any]:
    if isinstance(expr, Literal):
        return {"type": "lit", "value": expr.value}
    if isinstance(expr, Identifier):
        return {"type": "ident", "path": list(expr.path)}
    if isinstance(expr, PropertyAccess):
        return {
            "type": "index",
            "target": expr_to_dict(expr.target),
            "key": expr_to_dict(expr.key),
        }
    if isinstance(expr, FunctionCall):
        return {
            "type": "call",
            "name": expr.name,
            "arguments": [expr_to_dict(arg) for arg in expr.arguments],
        }
    if isinstance(expr, BinaryExpression):
        return {
            "type": "binary",
            "operator": expr.operator.value,
            "left": expr_to_dict(expr.left),
            "right": expr_to_dict(expr.right),
        }
    if isinstance(expr, UnaryExpression):
        return {
            "type": "unary",
            "operator": expr.operator.value,
            "operand": expr_to_dict(expr.operand),
        }
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def _field(d: Dict[str, Any], key: str, expected: type) -> Any:
    if key not in d:
        raise SerializationError(f"expression of type {d.get('type')!r} is missing {key!r}")
    value = d[key]
    if not isinstance(value, expected):
        raise SerializationError(
            f"{key!r} must be of type {expected.__name__}, got {type(value).__name__}"
        )
    return value


def expr_from_dict(d: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Expression:
    """
    Rebuild an expression tree from its tagged-dict form.

    Raises:
        SerializationError: If the document is malformed or nests deeper
            than max_depth
    """
    return _from_dict(d, 1, max_depth)


def _from_dict(d: Any, level: int, max_depth: int) -> Expression:
    if level > max_depth:
        raise SerializationError(f"expression document nests deeper than {max_depth} levels")
    if not isinstance(d, dict):
        raise SerializationError(f"expression must be a mapping, got {type(d).__name__}")

    def child(value: Any) -> Expression:
        return _from_dict(value, level + 1, max_depth)

    t = d.get("type")
    if t == "lit":
        return Literal(_field(d, "value", str))
    if t == "ident":
        path = _field(d, "path", list)
        if not path or not all(isinstance(segment, str) for segment in path):
            raise SerializationError("identifier path must be a non-empty list of strings")
        return Identifier(tuple(path))
    if t == "index":
        return PropertyAccess(child(d.get("target")), child(d.get("key")))
    if t == "call":
        name = _field(d, "name", str)
        arguments = d.get("arguments", [])
        if not isinstance(arguments, list):
            raise SerializationError("call arguments must be a list")
        return FunctionCall(name, tuple(child(arg) for arg in arguments))
    if t == "binary":
        try:
            op = BinaryOperator(d.get("operator"))
        except ValueError as e:
            raise SerializationError(f"unknown binary operator: {d.get('operator')!r}") from e
        return BinaryExpression(op, child(d.get("left")), child(d.get("right")))
    if t == "unary":
        try:
            op = UnaryOperator(d.get("operator"))
        except ValueError as e:
            raise SerializationError(f"unknown unary operator: {d.get('operator')!r}") from e
        return UnaryExpression(op, child(d.get("operand")))
    raise SerializationError(f"Unsupported expression dict type: {t!r}")


def expression_to_json(expr: Expression) -> str:
    return json.dumps(expr_to_dict(expr), sort_keys=True)


def expression_from_json(s: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Expression:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise SerializationError(f"invalid JSON: {e}") from e
    except RecursionError:
        raise SerializationError("JSON document nests too deeply") from None
    return expr_from_dict(d, max_depth)


def expression_to_yaml(expr: Expression) -> str:
    return yaml.safe_dump(expr_to_dict(expr))


def expression_from_yaml(s: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Expression:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise SerializationError(f"invalid YAML: {e}") from e
    except RecursionError:
        raise SerializationError("YAML document nests too deeply") from None
    return expr_from_dict(d, max_depth)


def traits_from_dict(d: Any) -> TraitStore:
    if d is None:
        return TraitStore()
    if not isinstance(d, dict):
        raise SerializationError(f"traits document must be a mapping, got {type(d).__name__}")
    try:
        return TraitStore(d)
    except InvalidArgument as e:
        raise SerializationError(str(e)) from e


def traits_from_json(s: str) -> TraitStore:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise SerializationError(f"invalid JSON: {e}") from e
    return traits_from_dict(d)


def traits_from_yaml(s: str) -> TraitStore:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise SerializationError(f"invalid YAML: {e}") from e
    return traits_from_dict(d)


def traits_to_dict(store: TraitStore) -> Dict[str, List[str]]:
    return {name: list(values) for name, values in store.items()}


def value_to_python(value: Value) -> Union[str, List[str], bool]:
    return to_python(value)


def value_to_json(value: Value) -> str:
    return json.dumps(to_python(value))


__all__ = [
    "expr_to_dict",
    "expr_from_dict",
    "expression_to_json",
    "expression_from_json",
    "expression_to_yaml",
    "expression_from_yaml",
    "traits_from_dict",
    "traits_from_json",
    "traits_from_yaml",
    "traits_to_dict",
    "value_to_python",
    "value_to_json",
]
