from __future__ import annotations
import re
from typing import Callable, List, Sequence

from . import Pattern
from .compiler import CompiledPattern, Segment, MULTI_WILDCARD, SINGLE_WILDCARD, SEPARATOR

# First "[name]" token; specificity only needs to know one is present
_FILTER_TOKEN = re.compile(r"\[[^\]]*\]")

EXACT_WEIGHT = 100
SINGLE_WEIGHT = 10
MULTI_WEIGHT = 1
FILTER_WEIGHT = 50


def _seg_matches(pseg: Segment, seg: str, case_sensitive: bool) -> bool:
    """Match one non-'**' pattern segment against one path segment."""
    if pseg.kind == "single":
        return True
    if case_sensitive:
        return pseg.value == seg
    return pseg.folded == seg.lower()


def _run_at(run: Sequence[Segment], path: Sequence[str], start: int, case_sensitive: bool) -> bool:
    for i, pseg in enumerate(run):
        if not _seg_matches(pseg, path[start + i], case_sensitive):
            return False
    return True


def _split_runs(segments: Sequence[Segment]) -> List[List[Segment]]:
    """Fixed runs of exact/'*' segments, split on '**'. len(runs) == number of '**' + 1."""
    runs: List[List[Segment]] = [[]]
    for s in segments:
        if s.kind == "multi":
            runs.append([])
        else:
            runs[-1].append(s)
    return runs


def match_segments(segments: Sequence[Segment], path: Sequence[str], case_sensitive: bool = True) -> bool:
    """
    Match compiled segments against path segments.
      - the first run is anchored at the start, the last run at the end
      - each middle run is placed at its leftmost position after the previous one;
        leftmost placement never rules out a later run, so no backtracking is needed
    """
    runs = _split_runs(segments)
    n = len(path)

    if len(runs) == 1:  # no '**': lengths must match exactly
        return n == len(runs[0]) and _run_at(runs[0], path, 0, case_sensitive)

    first, middle, last = runs[0], runs[1:-1], runs[-1]
    if len(first) + len(last) > n:
        return False
    if not _run_at(first, path, 0, case_sensitive):
        return False
    tail = n - len(last)
    if not _run_at(last, path, tail, case_sensitive):
        return False

    pos = len(first)
    for run in middle:
        size = len(run)
        for start in range(pos, tail - size + 1):
            if _run_at(run, path, start, case_sensitive):
                pos = start + size
                break
        else:
            return False
    return True


def match_compiled(
    compiled: CompiledPattern,
    segments: Sequence[str],
    has_capability: Callable[[str], bool],
    case_sensitive: bool = True,
) -> bool:
    """
    Full match: capability filter first (whole-pattern qualifier), then path segments.
    Malformed paths (any empty segment) never match.
    """
    if compiled.capability is not None and not has_capability(compiled.capability):
        return False
    if any(seg == "" for seg in segments):
        return False
    if compiled.filter_only:
        return True
    return match_segments(compiled.segments, segments, case_sensitive)


def specificity(pattern: Pattern) -> int:
    """
    Cascade weight from pattern text alone:
      exact segment 100, '*' 10, '**' 1 (per token), capability filter 50 (once).
    Callable patterns weigh 0. Never compiles, never raises on odd text.
    """
    if callable(pattern):
        return 0

    score = 0
    path_part = _FILTER_TOKEN.sub("", pattern, count=1)
    for part in path_part.split(SEPARATOR):
        if part == MULTI_WILDCARD:
            score += MULTI_WEIGHT
        elif part == SINGLE_WILDCARD:
            score += SINGLE_WEIGHT
        elif part:
            score += EXACT_WEIGHT
    if "[" in pattern:
        score += FILTER_WEIGHT
    return score
