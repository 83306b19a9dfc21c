"""
Trait Store and Resolver

A TraitStore holds the external identity attributes of one subject, e.g.

    {"groups": ["env-staging", "devs"], "username": ["alice-smith"]}

It is built once before evaluation and never mutated afterwards, so a single
store may be shared read-only between concurrent evaluations.

Lookups never fail: an unbound trait resolves to an empty list.
"""

import logging
from types import MappingProxyType
from typing import ClassVar, Iterator, Mapping, Tuple, Union

from traitexpr.errors import InvalidArgument
from traitexpr.values import StringList

logger = logging.getLogger(__name__)

TraitInput = Mapping[str, Union[str, list, tuple]]


def _normalize_values(name: str, raw: object) -> Tuple[str, ...]:
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, (list, tuple)):
        for item in raw:
            if not isinstance(item, str):
                raise InvalidArgument(
                    f"trait {name!r} must contain only strings, found {type(item).__name__}"
                )
        return tuple(raw)
    raise InvalidArgument(
        f"trait {name!r} must be a string or a list of strings, got {type(raw).__name__}"
    )


class TraitStore(Mapping[str, Tuple[str, ...]]):
    """
    Immutable mapping from trait name to an ordered tuple of strings.

    Single-string values are accepted on construction and wrapped into a
    list of one.

    Also serves as the runtime operand for the bare `external` identifier,
    hence the `kind` attribute.
    """

    kind: ClassVar[str] = "traits"

    def __init__(self, traits: TraitInput = None):
        data = {}
        for name, raw in (traits or {}).items():
            if not isinstance(name, str):
                raise InvalidArgument(f"trait names must be strings, got {type(name).__name__}")
            data[name] = _normalize_values(name, raw)
        self._data = MappingProxyType(data)
        logger.debug("Trait store built with %d traits", len(data))

    def resolve(self, name: str) -> StringList:
        """Return the list bound to name, or an empty list when unbound."""
        return StringList(self._data.get(name, ()))

    def resolve_all(self) -> Mapping[str, Tuple[str, ...]]:
        """Return a read-only view of the whole store."""
        return self._data

    def longest_value(self) -> int:
        """Length of the longest single trait value (0 for an empty store)."""
        return max((len(v) for values in self._data.values() for v in values), default=0)

    def __getitem__(self, name: str) -> Tuple[str, ...]:
        return self._data[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"TraitStore({dict(self._data)!r})"


def ensure_store(traits: Union[TraitStore, TraitInput, None]) -> TraitStore:
    """Accept either a TraitStore or a plain mapping."""
    if isinstance(traits, TraitStore):
        return traits
    if traits is not None and not isinstance(traits, Mapping):
        raise InvalidArgument(f"traits must be a mapping, got {type(traits).__name__}")
    return TraitStore(traits)


__all__ = ["TraitStore", "ensure_store"]
