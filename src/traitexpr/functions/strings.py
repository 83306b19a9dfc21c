"""
String operators: matches, equals, contains, replace.

matches() and replace() compile their pattern once, when the builtin is
called, and return frozen value objects (RegexPredicate / RegexTransform)
that filter() and transform() apply element by element.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar, Pattern, Tuple, Union

from traitexpr.errors import InvalidPattern, TypeMismatch
from traitexpr.values import FALSE, TRUE, Bool, Scalar, StringList, as_scalar, describe

# $$, ${name}, $name  (name = letters, digits, underscore; digits only = index)
_TEMPLATE_REF = re.compile(r"\$(?:(\$)|\{([A-Za-z0-9_]+)\}|([A-Za-z0-9_]+))")


# an inline flag group that turns on multi-line mode, e.g. (?m) or (?im:
_MULTILINE_FLAG = re.compile(r"\(\?[A-Za-z]*m")


def _anchor_end(pattern: str) -> str:
    r"""
    Make "$" match only at the very end of the input.

    Python's "$" also matches just before a trailing newline, so "^admins$"
    would accept "admins\n". Outside multi-line mode every unescaped "$"
    outside a character class becomes "\Z", and "\z" is accepted as its alias.
    """
    if _MULTILINE_FLAG.search(pattern):
        return pattern
    out = []
    in_class = False
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            nxt = pattern[i + 1]
            out.append(r"\Z" if nxt == "z" and not in_class else ch + nxt)
            i += 2
            continue
        if in_class:
            in_class = ch != "]"
        elif ch == "[":
            # "]" right after "[" or "[^" is a literal member
            end = i + 1
            if pattern.startswith("^", end):
                end += 1
            if pattern.startswith("]", end):
                end += 1
            out.append(pattern[i:end])
            in_class = True
            i = end
            continue
        elif ch == "$":
            out.append(r"\Z")
            i += 1
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _compile(pattern: str) -> Pattern[str]:
    try:
        return re.compile(_anchor_end(pattern))
    except re.error as e:
        raise InvalidPattern(pattern, str(e)) from e


@dataclass(frozen=True)
class GroupRef:
    """Reference to a capture group inside a replacement template."""
    group: Union[int, str]


TemplatePart = Union[str, GroupRef]


def compile_template(replacement: str) -> Tuple[TemplatePart, ...]:
    """
    Split a replacement template into literal text and group references.

    "$1", "${1}", "$name" and "${name}" reference groups; "$$" is a literal
    dollar sign; a "$" that starts no valid reference is kept as-is.
    """
    parts = []
    literal = ""
    pos = 0
    for m in _TEMPLATE_REF.finditer(replacement):
        literal += replacement[pos:m.start()]
        pos = m.end()
        if m.group(1):
            literal += "$"
            continue
        if literal:
            parts.append(literal)
            literal = ""
        name = m.group(2) or m.group(3)
        parts.append(GroupRef(int(name) if name.isdigit() else name))
    literal += replacement[pos:]
    if literal:
        parts.append(literal)
    return tuple(parts)


def _expand(template: Tuple[TemplatePart, ...], match: "re.Match[str]") -> str:
    out = []
    for part in template:
        if isinstance(part, str):
            out.append(part)
            continue
        group = part.group
        if isinstance(group, int):
            if group > match.re.groups:
                continue
        elif group not in match.re.groupindex:
            continue
        # unmatched optional groups expand to nothing
        out.append(match.group(group) or "")
    return "".join(out)


@dataclass(frozen=True)
class RegexPredicate:
    """
    Unary string predicate produced by matches().

    Reports whether the pattern matches anywhere in the input (search, not
    full-match).
    """

    kind: ClassVar[str] = "predicate"

    pattern: Pattern[str]

    def test(self, value: str) -> bool:
        return self.pattern.search(value) is not None


@dataclass(frozen=True)
class RegexTransform:
    """
    Unary string transform produced by replace().

    Inputs the pattern does not match collapse to the empty string; matching
    inputs get every non-overlapping match substituted. An empty match that
    directly follows another match is not replaced, so "x*" turns "xab" into
    "-a-b-" rather than re.sub's "--a-b-".
    """

    kind: ClassVar[str] = "transform"

    pattern: Pattern[str]
    replacement: str
    template: Tuple[TemplatePart, ...] = field(default=(), repr=False, compare=False)

    def apply(self, value: str) -> str:
        if self.pattern.search(value) is None:
            return ""
        out = []
        last_end = 0
        search_pos = 0
        while search_pos <= len(value):
            m = self.pattern.search(value, search_pos)
            if m is None:
                break
            out.append(value[last_end:m.start()])
            if m.end() > last_end or m.start() == 0:
                out.append(_expand(self.template, m))
            last_end = m.end()
            search_pos = max(search_pos + 1, m.end())
        out.append(value[last_end:])
        return "".join(out)


def matches(pattern: Any) -> RegexPredicate:
    """matches(pattern): build a search predicate from a regular expression."""
    source = as_scalar(pattern, "matches() argument 1")
    return RegexPredicate(_compile(source))


def replace(pattern: Any, replacement: Any) -> RegexTransform:
    """replace(pattern, replacement): build a substitution transform."""
    source = as_scalar(pattern, "replace() argument 1")
    repl = as_scalar(replacement, "replace() argument 2")
    return RegexTransform(_compile(source), repl, compile_template(repl))


def equals(a: Any, b: Any) -> Bool:
    """equals(a, b): true iff both scalars are the same string."""
    left = as_scalar(a, "equals() argument 1")
    right = as_scalar(b, "equals() argument 2")
    return TRUE if left == right else FALSE


def contains(container: Any, value: Any) -> Bool:
    """
    contains(container, value)

    List membership when container is a list, substring containment when
    both arguments are strings. The variant of the first argument decides.
    """
    needle = as_scalar(value, "contains() argument 2")
    if isinstance(container, StringList):
        return TRUE if needle in container.items else FALSE
    if isinstance(container, Scalar):
        return TRUE if needle in container.value else FALSE
    raise TypeMismatch("list or string", describe(container), "contains() argument 1")


__all__ = [
    "GroupRef",
    "RegexPredicate",
    "RegexTransform",
    "compile_template",
    "matches",
    "replace",
    "equals",
    "contains",
]
