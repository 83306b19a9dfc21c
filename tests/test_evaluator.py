"""
Tests for the Evaluator.

These tests verify:
    - Identifier resolution through the trait store
    - Function dispatch and argument-count checks
    - Short-circuit AND / OR and NOT
    - Error propagation (no partial results)
    - Limit enforcement
    - The reference scenarios
"""

import logging

import pytest

from traitexpr.config import EngineConfig
from traitexpr.errors import (
    ConfigurationError,
    InvalidArgument,
    InvalidPattern,
    LimitExceeded,
    NoMatch,
    TypeMismatch,
    UnboundIdentifier,
    UnknownFunction,
)
from traitexpr.evaluator import Evaluator, evaluate, evaluate_string
from traitexpr.expressions import (
    BinaryExpression,
    BinaryOperator,
    FunctionCall,
    Identifier,
    Literal,
    PropertyAccess,
    UnaryExpression,
    UnaryOperator,
)
from traitexpr.functions import BUILTIN_FUNCTIONS, Builtin
from traitexpr.traits import TraitStore
from traitexpr.values import Bool, Scalar, StringList

TRAITS = {"groups": ["env-staging", "env-qa", "devs"], "username": ["my-username"]}


def call(name, *args):
    return FunctionCall(name, tuple(args))


def ext(name=None):
    return Identifier(("external",) if name is None else ("external", name))


class TestScenarios:
    """End-to-end scenarios on hand-built trees."""

    def test_environment_names_from_groups(self):
        tree = call(
            "transform",
            call("filter", ext("groups"), call("matches", Literal(r"^env-\w+$"))),
            call("replace", Literal(r"^env-(\w+)$"), Literal("$1")),
        )
        assert evaluate(tree, TRAITS) == StringList(("staging", "qa"))

    def test_username_to_login(self):
        tree = call("transform", ext("username"), call("replace", Literal("-"), Literal("_")))
        assert evaluate(tree, {"username": ["my-username"]}) == StringList(("my_username",))

    def test_ifelse_on_membership(self):
        tree = call(
            "ifelse",
            call("contains", ext("groups"), Literal("contractors")),
            Literal("first"),
            Literal("second"),
        )
        assert evaluate(tree, {"groups": ["devs"]}) == Scalar("second")

    def test_match_default(self):
        tree = call(
            "match",
            Literal("z"),
            call("option", Literal("a"), call("list", Literal("x"))),
            call("default_option", call("list", Literal("default"))),
        )
        assert evaluate(tree, {}) == StringList(("default",))


class TestIdentifiers:
    def test_unbound_trait_is_empty(self):
        assert evaluate(ext("missing"), TRAITS) == StringList(())

    def test_bare_external_cannot_be_the_result(self):
        """The whole store is only usable as an argument."""
        with pytest.raises(TypeMismatch):
            evaluate(ext(), TRAITS)

    def test_property_access(self):
        tree = PropertyAccess(ext(), Literal("groups"))
        assert evaluate(tree, TRAITS) == StringList(("env-staging", "env-qa", "devs"))

    def test_property_access_requires_trait_store(self):
        with pytest.raises(TypeMismatch):
            evaluate(PropertyAccess(ext("groups"), Literal("x")), TRAITS)

    def test_other_root_is_unbound(self):
        with pytest.raises(UnboundIdentifier):
            evaluate(Identifier(("internal", "groups")), TRAITS)
        with pytest.raises(UnboundIdentifier):
            evaluate(Identifier(("internal",)), TRAITS)

    def test_three_segments_unbound(self):
        with pytest.raises(UnboundIdentifier):
            evaluate(Identifier(("external", "groups", "x")), TRAITS)

    def test_accepts_trait_store_instance(self):
        store = TraitStore(TRAITS)
        assert evaluate(ext("username"), store) == StringList(("my-username",))


class TestBooleanOperators:
    def test_and_or_not(self):
        is_dev = call("contains", ext("groups"), Literal("devs"))
        is_contractor = call("contains", ext("groups"), Literal("contractors"))
        tree = BinaryExpression(
            BinaryOperator.AND,
            is_dev,
            UnaryExpression(UnaryOperator.NOT, is_contractor),
        )
        assert evaluate(tree, TRAITS) == Bool(True)
        assert evaluate(BinaryExpression(BinaryOperator.OR, is_contractor, is_contractor), TRAITS) == Bool(False)

    def test_and_skips_right_operand(self):
        """The right operand would fail if it were evaluated."""
        false = call("equals", Literal("a"), Literal("b"))
        tree = BinaryExpression(BinaryOperator.AND, false, call("no_such_function"))
        assert evaluate(tree, {}) == Bool(False)

    def test_or_skips_right_operand(self):
        true = call("equals", Literal("a"), Literal("a"))
        tree = BinaryExpression(BinaryOperator.OR, true, call("matches", Literal("(")))
        assert evaluate(tree, {}) == Bool(True)

    def test_right_operand_evaluated_when_needed(self):
        true = call("equals", Literal("a"), Literal("a"))
        tree = BinaryExpression(BinaryOperator.AND, true, call("no_such_function"))
        with pytest.raises(UnknownFunction):
            evaluate(tree, {})

    def test_operands_must_be_bool(self):
        with pytest.raises(TypeMismatch):
            evaluate(BinaryExpression(BinaryOperator.OR, Literal("a"), Literal("b")), {})
        with pytest.raises(TypeMismatch):
            evaluate(UnaryExpression(UnaryOperator.NOT, ext("groups")), TRAITS)


class TestFunctionCalls:
    def test_unknown_function(self):
        with pytest.raises(UnknownFunction):
            evaluate(call("lower", Literal("A")), {})

    def test_wrong_argument_count(self):
        with pytest.raises(InvalidArgument) as exc_info:
            evaluate(call("ifelse", Literal("a")), {})
        assert "takes 3 arguments" in str(exc_info.value)

    def test_list_and_concat_are_aliases(self):
        args = (Literal("a"), call("list", Literal("b"), Literal("c")))
        assert evaluate(call("list", *args), {}) == evaluate(call("concat", *args), {})

    def test_predicate_cannot_be_the_result(self):
        with pytest.raises(TypeMismatch):
            evaluate(call("matches", Literal("a")), {})

    def test_errors_abort_evaluation(self):
        """A failure deep in the tree propagates unchanged."""
        tree = call("list", Literal("a"), call("transform", ext("groups"), call("replace", Literal("("), Literal(""))))
        with pytest.raises(InvalidPattern):
            evaluate(tree, TRAITS)

    def test_no_match_propagates(self):
        tree = call("match", Literal("z"), call("option", Literal("a"), Literal("x")))
        with pytest.raises(NoMatch):
            evaluate(tree, {})

    def test_arguments_evaluated_left_to_right(self):
        """The first failing argument determines the error."""
        tree = call("list", call("matches", Literal("(")), Identifier(("nope",)))
        with pytest.raises(InvalidPattern):
            evaluate(tree, {})


class TestCustomRegistry:
    def test_custom_function(self):
        upper = Builtin("upper", lambda v: Scalar(v.value.upper()), 1, 1)
        evaluator = Evaluator(functions={**BUILTIN_FUNCTIONS, "upper": upper})
        assert evaluator.evaluate(call("upper", Literal("ab")), {}) == Scalar("AB")

    def test_restricted_registry(self):
        evaluator = Evaluator(functions={"list": BUILTIN_FUNCTIONS["list"]})
        with pytest.raises(UnknownFunction):
            evaluator.evaluate(call("matches", Literal("a")), {})

    def test_malformed_registry_raises(self):
        """Setup errors are reported, not fatal to the process."""
        with pytest.raises(ConfigurationError):
            Evaluator(functions={"bad": lambda: None})
        with pytest.raises(ConfigurationError):
            Evaluator(functions={"bad name": BUILTIN_FUNCTIONS["list"]})
        with pytest.raises(ConfigurationError):
            Evaluator(functions={"f": Builtin("f", len, 2, 1)})

    def test_bad_config_type(self):
        with pytest.raises(ConfigurationError):
            Evaluator(config={"max_depth": 3})


class TestLimits:
    def test_depth_limit(self):
        tree = Literal("a")
        for _ in range(10):
            tree = call("list", tree)
        with pytest.raises(LimitExceeded):
            evaluate(tree, {}, EngineConfig(max_depth=5))
        assert evaluate(tree, {}, EngineConfig(max_depth=11)) == StringList(("a",))

    def test_node_limit(self):
        tree = call("list", *[Literal(str(i)) for i in range(20)])
        with pytest.raises(LimitExceeded):
            evaluate(tree, {}, EngineConfig(max_nodes=10))

    def test_trait_value_length_limit(self):
        traits = {"groups": ["x" * 100]}
        with pytest.raises(LimitExceeded):
            evaluate(ext("groups"), traits, EngineConfig(max_input_length=50))
        assert len(evaluate(ext("groups"), traits, EngineConfig(max_input_length=None))) == 1

    def test_very_deep_tree_is_a_limit_error(self):
        tree = Literal("a")
        for _ in range(5000):
            tree = call("list", tree)
        with pytest.raises(LimitExceeded):
            evaluate(tree, {})

    @pytest.mark.parametrize(
        "text",
        ["!" * 5000 + 'equals("a", "a")', "(" * 3000 + '"a"' + ")" * 3000],
        ids=["not", "group"],
    )
    def test_very_deep_text_is_a_limit_error(self, text):
        with pytest.raises(LimitExceeded):
            evaluate_string(text, {})

    def test_text_nesting_follows_config(self):
        text = "list(" * 6 + '"a"' + ")" * 6
        assert evaluate_string(text, {}, EngineConfig(max_depth=7)) == StringList(("a",))
        with pytest.raises(LimitExceeded):
            evaluate_string(text, {}, EngineConfig(max_depth=6))

    def test_literal_length_limit(self):
        with pytest.raises(LimitExceeded):
            evaluate(Literal("y" * 100), {}, EngineConfig(max_input_length=10))


class TestEvaluateString:
    def test_parses_then_evaluates(self):
        result = evaluate_string('filter(external.groups, matches("env"))', TRAITS)
        assert result == StringList(("env-staging", "env-qa"))

    def test_anchored_filter_rejects_trailing_newline(self):
        text = 'filter(external.groups, matches("^admins$"))'
        assert evaluate_string(text, {"groups": ["admins\n", "admins"]}) == StringList(("admins",))

    def test_is_repeatable(self):
        """Evaluation is pure: same input, same output."""
        text = 'transform(external.username, replace("-", "_"))'
        assert evaluate_string(text, TRAITS) == evaluate_string(text, TRAITS)


def test_debug_log_uses_canonical_text(caplog):
    with caplog.at_level(logging.DEBUG, logger="traitexpr.evaluator"):
        evaluate_string('list(  "a" )', {})
    assert 'Evaluating list("a")' in caplog.text
    assert "Result of" in caplog.text


def test_failures_logged_at_debug_only(caplog):
    with caplog.at_level(logging.DEBUG, logger="traitexpr.evaluator"):
        with pytest.raises(UnknownFunction):
            evaluate_string('nope("a")', {})
    assert all(record.levelno == logging.DEBUG for record in caplog.records)
