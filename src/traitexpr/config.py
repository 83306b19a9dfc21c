"""
Engine configuration.

Trait expressions are security-sensitive: they run against attacker-influenced
trait values. EngineConfig bounds the work a single evaluation may do:

    - max_depth: deepest allowed expression tree
    - max_nodes: largest allowed expression tree
    - max_input_length: longest trait value or string literal (None disables)

Values come from code, a YAML document, or TRAITEXPR_* environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

import yaml

from traitexpr.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "TRAITEXPR_"

DEFAULT_MAX_DEPTH = 32
DEFAULT_MAX_NODES = 512
DEFAULT_MAX_INPUT_LENGTH = 4096


@dataclass(frozen=True)
class EngineConfig:
    """Evaluation limits. Immutable, safe to share between evaluators."""

    max_depth: int = DEFAULT_MAX_DEPTH
    max_nodes: int = DEFAULT_MAX_NODES
    max_input_length: Optional[int] = DEFAULT_MAX_INPUT_LENGTH

    def __post_init__(self) -> None:
        for name in ("max_depth", "max_nodes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        limit = self.max_input_length
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
            raise ConfigurationError(
                f"max_input_length must be a positive integer or None, got {limit!r}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> EngineConfig:
        """Build a config from a mapping; unknown keys are rejected."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"config must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"unknown config keys: {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, text: str) -> EngineConfig:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid YAML config: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """
        Read limits from TRAITEXPR_MAX_DEPTH, TRAITEXPR_MAX_NODES and
        TRAITEXPR_MAX_INPUT_LENGTH. Unset variables keep their defaults.
        An empty or zero TRAITEXPR_MAX_INPUT_LENGTH disables the input check.
        """
        if environ is None:
            environ = os.environ
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            raw = raw.strip()
            if f.name == "max_input_length" and raw in ("", "0"):
                values[f.name] = None
                continue
            try:
                values[f.name] = int(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"{ENV_PREFIX}{f.name.upper()} must be an integer, got {raw!r}"
                ) from e
        if values:
            logger.debug("Engine limits from environment: %s", values)
        return cls(**values)


__all__ = ["EngineConfig", "ENV_PREFIX"]
