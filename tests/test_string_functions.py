"""
Tests for string operators: matches, equals, contains, replace.
"""

import pytest

from traitexpr.errors import InvalidPattern, TypeMismatch
from traitexpr.functions.strings import (
    GroupRef,
    compile_template,
    contains,
    equals,
    matches,
    replace,
)
from traitexpr.values import Bool, Scalar, StringList


class TestMatches:
    """matches() builds a search predicate."""

    def test_matches_anywhere_in_string(self):
        """Search semantics: no implicit anchoring."""
        pred = matches(Scalar("env"))
        assert pred.test("env-staging")
        assert pred.test("my-env")
        assert not pred.test("devs")

    def test_anchors_are_honoured(self):
        pred = matches(Scalar(r"^env-\w+$"))
        assert pred.test("env-qa")
        assert not pred.test("xenv-qa")

    def test_invalid_pattern_fails_at_construction(self):
        with pytest.raises(InvalidPattern) as exc_info:
            matches(Scalar("(unclosed"))
        assert exc_info.value.pattern == "(unclosed"

    def test_pattern_must_be_string(self):
        with pytest.raises(TypeMismatch):
            matches(Bool(True))

    def test_pattern_from_single_element_list(self):
        """A trait holding one pattern can be used directly."""
        assert matches(StringList(("^a",))).test("abc")

    def test_predicate_is_immutable_value(self):
        pred = matches(Scalar("a"))
        with pytest.raises(AttributeError):
            pred.pattern = None

    def test_dollar_does_not_match_before_trailing_newline(self):
        """The dollar anchor means end of input, even before a trailing newline."""
        pred = matches(Scalar("^admins$"))
        assert pred.test("admins")
        assert not pred.test("admins\n")

    def test_escaped_and_bracketed_dollar_stay_literal(self):
        assert matches(Scalar(r"^cost\$$")).test("cost$")
        assert matches(Scalar("^[$]+$")).test("$$")
        assert not matches(Scalar("^[$]+$")).test("$$\n")

    def test_lowercase_z_anchor(self):
        pred = matches(Scalar(r"admins\z"))
        assert pred.test("admins")
        assert not pred.test("admins\n")

    def test_multiline_mode_keeps_line_ends(self):
        pred = matches(Scalar("(?m)^admins$"))
        assert pred.test("devs\nadmins\nqa")


class TestEquals:
    def test_equal_strings(self):
        assert equals(Scalar("a"), Scalar("a")) == Bool(True)

    def test_different_strings(self):
        assert equals(Scalar("a"), Scalar("A")) == Bool(False)

    def test_trait_list_of_one(self):
        assert equals(StringList(("ops",)), Scalar("ops")) == Bool(True)

    def test_rejects_multi_element_list(self):
        with pytest.raises(TypeMismatch):
            equals(StringList(("a", "b")), Scalar("a"))


class TestContains:
    """contains() dispatches on the variant of its first argument."""

    def test_list_membership(self):
        groups = StringList(("devs", "env-qa"))
        assert contains(groups, Scalar("devs")) == Bool(True)

    def test_list_membership_is_exact(self):
        """With a list, partial strings do not count."""
        groups = StringList(("env-qa",))
        assert contains(groups, Scalar("qa")) == Bool(False)

    def test_substring_for_two_strings(self):
        assert contains(Scalar("alice@example.com"), Scalar("@example")) == Bool(True)
        assert contains(Scalar("alice"), Scalar("bob")) == Bool(False)

    def test_empty_list_contains_nothing(self):
        assert contains(StringList(()), Scalar("")) == Bool(False)

    def test_rejects_bool_container(self):
        with pytest.raises(TypeMismatch):
            contains(Bool(True), Scalar("a"))

    def test_rejects_list_needle(self):
        with pytest.raises(TypeMismatch):
            contains(StringList(("a", "b")), StringList(("a", "b")))


class TestReplace:
    """replace() builds a substitution transform."""

    def test_replaces_every_match(self):
        t = replace(Scalar("-"), Scalar("_"))
        assert t.apply("a-b-c") == "a_b_c"

    def test_non_matching_input_becomes_empty(self):
        """Inputs the pattern does not match collapse to the empty string."""
        t = replace(Scalar("^devs$"), Scalar("dev"))
        assert t.apply("env-qa") == ""
        assert t.apply("devs") == "dev"

    def test_capture_group_reference(self):
        t = replace(Scalar(r"^env-(\w+)$"), Scalar("$1"))
        assert t.apply("env-staging") == "staging"

    def test_braced_and_named_references(self):
        t = replace(Scalar(r"^(?P<user>[^@]+)@(.*)$"), Scalar("${user}-at-${2}"))
        assert t.apply("alice@example.com") == "alice-at-example.com"

    def test_dollar_dollar_is_literal(self):
        t = replace(Scalar("a"), Scalar("$$"))
        assert t.apply("cat") == "c$t"

    def test_lone_dollar_is_literal(self):
        t = replace(Scalar("a"), Scalar("$-"))
        assert t.apply("a") == "$-"

    def test_missing_group_expands_to_empty(self):
        t = replace(Scalar("(a)"), Scalar("[$2][$missing]"))
        assert t.apply("a") == "[][]"

    def test_unmatched_optional_group_expands_to_empty(self):
        t = replace(Scalar("(a)|(b)"), Scalar("<$1>"))
        assert t.apply("b") == "<>"

    def test_whole_match_reference(self):
        t = replace(Scalar("[0-9]+"), Scalar("#$0"))
        assert t.apply("id 42") == "id #42"

    def test_invalid_pattern(self):
        with pytest.raises(InvalidPattern):
            replace(Scalar("[z-a]"), Scalar(""))

    def test_result_has_no_remaining_matches(self):
        t = replace(Scalar("-"), Scalar("_"))
        once = t.apply("a-b-")
        assert once == "a_b_"
        assert not matches(Scalar("-")).test(once)
        # a second pass finds nothing to match, so it collapses to ""
        assert t.apply(once) == ""

    def test_empty_match_after_match_is_not_replaced(self):
        """An empty match right after another match is skipped."""
        assert replace(Scalar("x*"), Scalar("-")).apply("xab") == "-a-b-"
        assert replace(Scalar("x*"), Scalar("-")).apply("abxd") == "-a-b-d-"

    def test_trailing_newline_input_does_not_match_anchor(self):
        t = replace(Scalar(r"^env-(\w+)$"), Scalar("$1"))
        assert t.apply("env-qa\n") == ""


class TestTemplateCompilation:
    def test_plain_text(self):
        assert compile_template("abc") == ("abc",)

    def test_mixed_parts(self):
        assert compile_template("x${1}y${name}$$") == ("x", GroupRef(1), "y", GroupRef("name"), "$")

    def test_unbraced_name_takes_longest_run(self):
        """An unbraced reference reads the longest name: $1y is group "1y"."""
        assert compile_template("$1y") == (GroupRef("1y"),)
        t = replace(Scalar("(a)"), Scalar("$1y"))
        assert t.apply("a") == ""
        assert replace(Scalar("(a)"), Scalar("${1}y")).apply("a") == "ay"

    def test_empty_template(self):
        assert compile_template("") == ()
