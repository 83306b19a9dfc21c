#!/usr/bin/env python3
"""
Demo: Evaluate the example trait expressions.

Shows how login names, environments and roles are derived from a user's
external traits, and how evaluation errors surface.
"""

import json

from traitexpr import TraitExpressionError, evaluate_string, to_python
from traitexpr.examples import EXAMPLE_EXPRESSIONS, build_example_traits


def main():
    traits = build_example_traits()

    print("=" * 80)
    print("TRAIT EXPRESSION DEMO")
    print("=" * 80)
    print("\nTraits:")
    print(json.dumps({name: list(values) for name, values in traits.items()}, indent=2))

    for description, expression in EXAMPLE_EXPRESSIONS:
        print(f"\n{description.upper()}:")
        print("-" * 80)
        print(expression.strip())
        result = evaluate_string(expression, traits)
        print(f"\n=> {json.dumps(to_python(result))}")

    print("\nERROR HANDLING:")
    print("-" * 80)
    for expression in ('match(external.department, option("sales", "crm"))',
                       'filter(external.groups, matches("(unclosed"))',
                       "internal.groups"):
        try:
            evaluate_string(expression, traits)
        except TraitExpressionError as e:
            print(f"{expression}\n  => {type(e).__name__}: {e}")

    print("\n" + "=" * 80)


if __name__ == "__main__":
    main()
