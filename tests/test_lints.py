from __future__ import annotations

from path_selector import Rule
from path_selector.lints import aggregate_stats, lint_catch_all, lint_duplicates, lint_syntax


def _codes(findings):
    return sorted(f.code for f in findings)


def test_syntax_findings():
    rules = [
        Rule(pattern="body.[light", payload=1, order=0),
        Rule(pattern="body.*", payload=2, order=1),
        Rule(pattern="a[x][y]", payload=3, order=2),
    ]
    findings = lint_syntax(rules)
    assert _codes(findings) == ["PATTERN_SYNTAX", "PATTERN_SYNTAX"]
    assert {f.order for f in findings} == {0, 2}
    assert all(f.severity == "high" for f in findings)


def test_duplicate_patterns():
    rules = [
        Rule(pattern="body.lamp", payload="a"),
        Rule(pattern="body.lamp", payload="b"),
        Rule(pattern="body.*", payload="c"),
    ]
    findings = lint_duplicates(rules)
    assert _codes(findings) == ["DUPLICATE"]
    assert "2 rules" in findings[0].message


def test_catch_all_and_predicates():
    def anything(path, entity):
        return True

    rules = [
        Rule(pattern="**", payload=1),
        Rule(pattern="[light]", payload=2),
        Rule(pattern="**[light]", payload=3),
        Rule(pattern="body.**", payload=4),
        Rule(pattern=anything, payload=5),
        Rule(pattern="bad[", payload=6),
    ]
    findings = lint_catch_all(rules)
    assert _codes(findings) == ["CATCH_ALL", "CATCH_ALL", "CATCH_ALL", "PREDICATE"]
    assert any("capability 'light'" in f.message for f in findings)


def test_stats_summary():
    rules = [
        Rule(pattern="**", payload=1),
        Rule(pattern="body.lamp", payload=2),
        Rule(pattern="body.lamp", payload=3),
        Rule(pattern="body..lamp", payload=4),
    ]
    findings = lint_syntax(rules) + lint_duplicates(rules) + lint_catch_all(rules)
    syntax = [f for f in findings if f.code == "PATTERN_SYNTAX"]
    stats = aggregate_stats(findings, rules=len(rules), syntax_errors=len(syntax))
    assert stats.rules == 4
    assert stats.syntax == 1
    assert stats.duplicates == 1
    assert stats.high == 1
    assert stats.low == 1
    assert stats.risky == 1


def test_duplicates_ignore_filter_position():
    rules = [
        Rule(pattern="x.*[light]", payload="a"),
        Rule(pattern="[light].x.*", payload="b"),
        Rule(pattern="x.*", payload="c"),
    ]
    findings = lint_duplicates(rules)
    assert _codes(findings) == ["DUPLICATE"]
    assert findings[0].pattern == "x.*[light]"
    assert "[light].x.*" in findings[0].message


def test_stats_take_syntax_count_as_given():
    stats = aggregate_stats([], rules=2, syntax_errors=3)
    assert stats.syntax == 3
    assert stats.rules == 2
