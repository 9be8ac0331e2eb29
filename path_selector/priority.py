from __future__ import annotations
import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from . import Rule
from .selector import PathMatcher, default_matcher

logger = logging.getLogger(__name__)

PathLike = Union[str, Sequence[str]]


def _precedence(matcher: PathMatcher, rule: Rule, index: int) -> Tuple[int, int, int]:
    # specificity first, then registration order: last registered wins ties
    return (matcher.get_specificity(rule.pattern), rule.order, index)


def rank(rules: Sequence[Rule], matcher: Optional[PathMatcher] = None) -> List[Rule]:
    """Pre-sort rules by precedence, strongest first. Specificity needs no path, so this can run once."""
    matcher = matcher or default_matcher
    indexed = sorted(enumerate(rules), key=lambda p: _precedence(matcher, p[1], p[0]), reverse=True)
    return [r for _, r in indexed]


def _matching(rules: Sequence[Rule], path: PathLike, entity: Any, matcher: PathMatcher) -> List[Tuple[int, Rule]]:
    return [(i, r) for i, r in enumerate(rules) if matcher.match(r.pattern, path, entity)]


def cohort(rules: Sequence[Rule], path: PathLike, entity: Any = None,
           matcher: Optional[PathMatcher] = None) -> List[Rule]:
    """Matching rules sharing the highest specificity, in registration order."""
    matcher = matcher or default_matcher
    matches = _matching(rules, path, entity, matcher)
    if not matches:
        return []
    best = max(matcher.get_specificity(r.pattern) for _, r in matches)
    return [r for _, r in matches if matcher.get_specificity(r.pattern) == best]


def select(rules: Sequence[Rule], path: PathLike, entity: Any = None,
           matcher: Optional[PathMatcher] = None) -> Optional[Rule]:
    matcher = matcher or default_matcher
    matches = _matching(rules, path, entity, matcher)
    if not matches:
        logger.debug(f"No rule matches {path!r}")
        return None
    index, winner = max(matches, key=lambda p: _precedence(matcher, p[1], p[0]))
    logger.debug(f"Rule {index} ({winner.pattern!r}) wins for {path!r} out of {len(matches)} matches")
    return winner


def resolve(rules: Sequence[Rule], path: PathLike, entity: Any = None,
            default: Any = None, matcher: Optional[PathMatcher] = None) -> Any:
    winner = select(rules, path, entity, matcher)
    return default if winner is None else winner.payload


def merge(rules: Sequence[Rule], path: PathLike, entity: Any = None,
          matcher: Optional[PathMatcher] = None) -> Dict[str, Any]:
    """
    Cascade mapping payloads key by key: each key takes its value from the
    strongest matching rule that defines it.
    """
    matcher = matcher or default_matcher
    matches = _matching(rules, path, entity, matcher)
    ordered = sorted(matches, key=lambda p: _precedence(matcher, p[1], p[0]), reverse=True)
    merged: Dict[str, Any] = {}
    for _, r in ordered:
        if not isinstance(r.payload, Mapping):
            raise TypeError(f"merge() needs mapping payloads, rule {r.pattern!r} has {type(r.payload).__name__}")
        for key, value in r.payload.items():
            merged.setdefault(key, value)
    return merged


# Convenience: return cohort + payloads (used by the CLI for display)
def cohort_and_payloads(rules: Sequence[Rule], path: PathLike, entity: Any = None,
                        matcher: Optional[PathMatcher] = None) -> Tuple[List[Rule], List[Any]]:
    best = cohort(rules, path, entity, matcher)
    return best, [r.payload for r in best]
