from __future__ import annotations
import pytest

from path_selector import Rule
from path_selector.priority import cohort, cohort_and_payloads, merge, rank, resolve, select
from path_selector.selector import PathMatcher


def test_end_to_end_scenario(body_rules, lamp):
    # "*" spans one segment only, so the filtered rule loses its grip one level deeper
    assert resolve(body_rules, "body.lamp", lamp) == "dim"
    assert resolve(body_rules, "body.arm.lamp", lamp) == "default"


def test_capability_decides_between_rules(body_rules, plain):
    assert resolve(body_rules, "body.lamp", plain) == "default"


def test_no_match_returns_default(body_rules, lamp):
    assert select(body_rules, "legs.knee", lamp) is None
    assert resolve(body_rules, "legs.knee", lamp, default="none") == "none"
    assert cohort(body_rules, "legs.knee", lamp) == []


def test_explicit_path_beats_wildcards():
    rules = [
        Rule(pattern="RootNode.Body.Head", payload="exact"),
        Rule(pattern="**", payload="catch-all"),
        Rule(pattern="RootNode.*.Head", payload="single"),
        Rule(pattern="RootNode.**.Head", payload="multi"),
    ]
    assert resolve(rules, "RootNode.Body.Head") == "exact"
    assert resolve(rules, "RootNode.Arm.Head") == "single"
    assert resolve(rules, "RootNode.Head") == "multi"
    assert resolve(rules, "Elsewhere") == "catch-all"


def test_predicate_only_wins_alone():
    def is_lamp(path, entity):
        return path.endswith("lamp")

    rules = [Rule(pattern=is_lamp, payload="pred"), Rule(pattern="**", payload="any")]
    assert resolve(rules, "body.lamp") == "any"
    assert resolve([rules[0]], "body.lamp") == "pred"


def test_ties_go_to_last_registered():
    rules = [
        Rule(pattern="body.*", payload="first"),
        Rule(pattern="*.lamp", payload="second"),
    ]
    assert resolve(rules, "body.lamp") == "second"
    both, payloads = cohort_and_payloads(rules, "body.lamp")
    assert both == rules
    assert payloads == ["first", "second"]


def test_explicit_order_overrides_list_position():
    rules = [
        Rule(pattern="body.*", payload="late", order=5),
        Rule(pattern="*.lamp", payload="early", order=1),
    ]
    assert resolve(rules, "body.lamp") == "late"


def test_rank_presorts_by_specificity():
    rules = [
        Rule(pattern="**", payload=1),
        Rule(pattern="head.*.hand", payload=2),
        Rule(pattern="head.arm.hand", payload=3),
        Rule(pattern="head.**.hand", payload=4),
    ]
    assert [r.payload for r in rank(rules)] == [3, 2, 4, 1]


def test_case_insensitive_cascade():
    rules = [Rule(pattern="body.lamp", payload="hit")]
    assert resolve(rules, "BODY.LAMP") is None
    assert resolve(rules, "BODY.LAMP", matcher=PathMatcher(case_sensitive=False)) == "hit"


def test_merge_takes_each_key_from_strongest_rule(lamp):
    rules = [
        Rule(pattern="**", payload={"light": {"remove": True}, "render": "base"}),
        Rule(pattern="RootNode.Body.Head", payload={"light": {"intensity": 2}}),
        Rule(pattern="**[light]", payload={"shadow": True, "render": "lit"}),
    ]
    merged = merge(rules, "RootNode.Body.Head", lamp)
    assert merged == {"light": {"intensity": 2}, "render": "lit", "shadow": True}


def test_merge_rejects_non_mapping_payloads():
    with pytest.raises(TypeError):
        merge([Rule(pattern="**", payload="flat")], "a")
