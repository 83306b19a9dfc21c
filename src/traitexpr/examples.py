"""
Example trait set and expressions for proof-of-concept and demos.

Models a typical login-mapping setup: an identity provider supplies a user's
username, email, groups and department, and expressions derive the logins
and roles that user receives.
"""
from typing import List, Tuple

from traitexpr.traits import TraitStore


def build_example_traits() -> TraitStore:
    return TraitStore({
        "username": ["alice-smith"],
        "email": ["alice@example.com"],
        "groups": ["env-staging", "env-qa", "devs"],
        "department": ["engineering"],
    })


# (description, expression) pairs evaluated against build_example_traits()
EXAMPLE_EXPRESSIONS: List[Tuple[str, str]] = [
    ("all groups", "external.groups"),
    ("environment groups", 'filter(external.groups, matches("env"))'),
    (
        "contractor check",
        'ifelse(contains(external.groups, "contractors"), "first", "second")',
    ),
    ("username as login", 'transform(external.username, replace("-", "_"))'),
    (
        "logins",
        """
concat(
    "ubuntu",
    transform(external.username, replace("-", "_")),
    ifelse(contains(external.email, "alice@example.com"), "root", concat()),
    transform(filter(external.email, matches("@example.com")), replace("^(.*)@example.com", "$1")),
)
""",
    ),
    (
        "environments",
        r"""
concat(
    transform(
        filter(external.groups, matches("^env-\\w+$")),
        replace("^env-(\\w+)$", "$1")),
    ifelse(
        contains(external.groups, "contractors"),
        concat(),
        transform(external.groups, replace("^devs$", "dev"))),
)
""",
    ),
    (
        "roles",
        """
concat(
    ifelse(
        contains(external.groups, "devs"),
        concat("dev", "staging"),
        concat()),
    ifelse(
        contains(external.groups, "qa"),
        "qa",
        concat()),
)
""",
    ),
    (
        "department roles",
        """
match(external.department,
    option("engineering", list("dev", "staging")),
    option("finance", list("billing")),
    default_option(list("guest")))
""",
    ),
    (
        "developer without contractor status",
        'contains(external.groups, "devs") && !contains(external.groups, "contractors")',
    ),
]
