from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Literal, Union

# A raw selector: dotted pattern text or a predicate called as fn(path, entity)
Pattern = Union[str, Callable[[str, Any], bool]]


class PathSelectorError(Exception):
    """Base class for errors raised by path_selector."""


class PatternSyntaxError(PathSelectorError, ValueError):
    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")


@dataclass(frozen=True)
class Rule:
    pattern: Pattern
    payload: Any
    source: str = "inline"
    order: int = 0


@dataclass(frozen=True)
class NodeInfo:
    path: str
    entity: Any = None
    name: str = ""


@dataclass(frozen=True)
class Finding:
    severity: Literal["high", "risky", "low"]
    code: str
    message: str
    pattern: str | None = None
    source: str | None = None
    order: int | None = None


@dataclass(frozen=True)
class Stats:
    rules: int = 0
    syntax: int = 0
    duplicates: int = 0
    high: int = 0
    low: int = 0
    risky: int = 0


# Public API; imported last since the submodules import the types above
from .compiler import CompiledPattern, Segment, compile_pattern, split_path  # noqa: E402
from .matcher import match_compiled, specificity  # noqa: E402
from .capabilities import CapabilitySet, capability_test  # noqa: E402
from .selector import MatcherOptions, PathMatcher, default_matcher  # noqa: E402
