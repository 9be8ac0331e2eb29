"""
PathMatcher - public entry point for selector matching.

Combines the pattern compiler, the segment matcher and the specificity
calculator under one instance configuration.

Usage:
    matcher = PathMatcher(case_sensitive=False)

    if matcher.match("body.*[light]", "Body.Lamp", {"light"}):
        weight = matcher.get_specificity("body.*[light]")  # 160
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from . import NodeInfo, Pattern
from .capabilities import capability_test
from .compiler import CompiledPattern, SEPARATOR, compile_pattern, split_path
from .matcher import match_compiled, specificity

logger = logging.getLogger(__name__)

_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class MatcherOptions:
    """
    Attributes:
        case_sensitive: compare path segments case sensitively (default: True)
    """
    case_sensitive: bool = True

    @classmethod
    def from_env(cls) -> "MatcherOptions":
        """Create options from environment variables."""
        raw = os.getenv("PATH_SELECTOR_CASE_SENSITIVE", "true")
        return cls(case_sensitive=raw.strip().lower() not in _FALSY)


class PathMatcher:
    """
    Matches dotted node paths against selector patterns.

    Compiled patterns are cached by raw text. The cache is a plain dict:
    compilation is pure, so a concurrent recompute only overwrites an equal value.
    """

    def __init__(self, options: Optional[MatcherOptions] = None, *, case_sensitive: Optional[bool] = None):
        options = options or MatcherOptions()
        if case_sensitive is not None:
            options = MatcherOptions(case_sensitive=case_sensitive)
        self.options = options
        self._compiled: Dict[str, CompiledPattern] = {}

    @property
    def case_sensitive(self) -> bool:
        return self.options.case_sensitive

    def compile(self, raw: str) -> CompiledPattern:
        """Compile (or fetch from cache) a string pattern. Raises PatternSyntaxError."""
        compiled = self._compiled.get(raw)
        if compiled is None:
            compiled = compile_pattern(raw)
            self._compiled[raw] = compiled
            logger.debug(f"Compiled pattern {raw!r}: {len(compiled.segments)} segments, filter={compiled.capability}")
        return compiled

    def match(self, pattern: Pattern, path: Union[str, Sequence[str]], entity: Any = None) -> bool:
        """
        Check whether pattern selects the node at path.

        Args:
            pattern: dotted pattern text, or a predicate called as pattern(path, entity)
            path: dotted node path ("" for the root) or its segment sequence
            entity: capability source for '[name]' filters (see capability_test)

        Returns:
            True if the pattern applies to the node
        """
        if callable(pattern):
            return bool(pattern(path, entity))

        compiled = self.compile(pattern)
        segments = split_path(path, self.case_sensitive)
        return match_compiled(compiled, segments, _lazy_capabilities(entity), self.case_sensitive)

    def get_specificity(self, pattern: Pattern) -> int:
        return specificity(pattern)

    def matches(self, pattern: Pattern, node: NodeInfo) -> bool:
        return self.match(pattern, node.path, node.entity)

    def find_matching(self, pattern: Pattern, nodes: Iterable[NodeInfo]) -> List[NodeInfo]:
        """All nodes from a caller-built listing that the pattern selects, in input order."""
        return [node for node in nodes if self.matches(pattern, node)]

    @staticmethod
    def resolve_path(parent_path: str, name: str) -> str:
        if not parent_path:
            return name
        return f"{parent_path}{SEPARATOR}{name}"

    def clear_cache(self) -> None:
        self._compiled.clear()

    def __repr__(self) -> str:
        return f"PathMatcher(case_sensitive={self.case_sensitive}, cached={len(self._compiled)})"


def _lazy_capabilities(entity: Any):
    """Defer adapting the entity until a filter actually asks."""
    def has_capability(name: str) -> bool:
        return capability_test(entity)(name)
    return has_capability


default_matcher = PathMatcher()

__all__ = [
    "MatcherOptions",
    "PathMatcher",
    "default_matcher",
]
