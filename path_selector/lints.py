from __future__ import annotations
from collections import defaultdict
from typing import Dict, Hashable, Iterable, List

from . import Rule, Finding, Stats
from .compiler import compile_pattern, pattern_syntax_check


def _label(rule: Rule) -> str:
    if callable(rule.pattern):
        return getattr(rule.pattern, "__name__", repr(rule.pattern))
    return rule.pattern


def lint_syntax(rules: Iterable[Rule]) -> List[Finding]:
    """String patterns that fail to compile; they can never match."""
    findings: List[Finding] = []
    for r in rules:
        if callable(r.pattern):
            continue
        for msg in pattern_syntax_check(r.pattern):
            findings.append(
                Finding(
                    severity="high",
                    code="PATTERN_SYNTAX",
                    message=msg,
                    pattern=r.pattern,
                    source=r.source,
                    order=r.order,
                )
            )
    return findings


def lint_duplicates(rules: Iterable[Rule]) -> List[Finding]:
    """Patterns selecting the same nodes (same compiled form) in multiple rules: only the last registered one ever wins."""
    by_form: Dict[Hashable, List[Rule]] = defaultdict(list)
    for r in rules:
        if callable(r.pattern):
            continue
        if pattern_syntax_check(r.pattern):
            by_form[r.pattern].append(r)
            continue
        compiled = compile_pattern(r.pattern)
        # filter position does not matter: "x.*[light]" == "[light].x.*"
        by_form[(compiled.segments, compiled.capability)].append(r)
    findings: List[Finding] = []
    for rs in by_form.values():
        if len(rs) > 1:
            pattern = rs[0].pattern
            spellings = sorted({r.pattern for r in rs})
            same = "" if len(spellings) == 1 else f" (written as {', '.join(spellings)})"
            findings.append(
                Finding(
                    severity="low",
                    code="DUPLICATE",
                    message=f"{pattern} appears in {len(rs)} rules{same}. Only the last one can win. Suggestion: merge them.",
                    pattern=pattern,
                )
            )
    return findings


def lint_catch_all(rules: Iterable[Rule]) -> List[Finding]:
    """Patterns selecting every node (optionally gated by a capability), and opaque predicates."""
    findings: List[Finding] = []
    for r in rules:
        if callable(r.pattern):
            findings.append(
                Finding(
                    severity="low",
                    code="PREDICATE",
                    message=f"Predicate '{_label(r)}' has specificity 0 and loses to any matching pattern.",
                    source=r.source,
                    order=r.order,
                )
            )
            continue
        if pattern_syntax_check(r.pattern):
            continue
        compiled = compile_pattern(r.pattern)
        if compiled.filter_only or all(s.kind == "multi" for s in compiled.segments):
            gate = f" with capability '{compiled.capability}'" if compiled.capability else ""
            findings.append(
                Finding(
                    severity="risky",
                    code="CATCH_ALL",
                    message=f"Pattern '{r.pattern}' selects every node{gate}.",
                    pattern=r.pattern,
                    source=r.source,
                    order=r.order,
                )
            )
    return findings


def aggregate_stats(findings: Iterable[Finding], rules: int, syntax_errors: int) -> Stats:
    high = low = risky = duplicates = 0
    for f in findings:
        if f.code == "DUPLICATE":
            duplicates += 1
        if f.severity == "high":
            high += 1
        elif f.severity == "low":
            low += 1
        else:
            risky += 1
    return Stats(
        rules=rules,
        syntax=syntax_errors,
        duplicates=duplicates, high=high, low=low, risky=risky,
    )
