"""Tests for pattern and instance selection."""

import pytest

from causal_bootstrap.config import BootstrapConfig
from causal_bootstrap.instances import ExtractedInstance, ExtractedPattern, Instance
from causal_bootstrap.path_pattern import PathPattern
from causal_bootstrap.selection import (
    InstanceSelector,
    PatternSelectionRules,
    PatternSelector,
    is_noise,
)

from conftest import CAUSED_PATTERN

REVERSED_CAUSED = "[[effect]]/N\t-dobj\tcaused/VBD\t+nsubj\t[[cause]]/N"
AND_PATTERN = "[[cause]]/N\t-conj\tand/CC\t+conj\t[[effect]]/N"


def verb_pattern(verb: str) -> str:
    return f"[[cause]]/N\t-nsubj\t{verb}/VBD\t+dobj\t[[effect]]/N"


def pattern_records(pattern: str, *seeds):
    return [ExtractedPattern(pattern, Instance.of(*seed.split(","))) for seed in seeds]


def instance_records(cause: str, effect: str, *patterns):
    return [ExtractedInstance.of(cause, effect, PathPattern(p)) for p in patterns]


@pytest.mark.parametrize(
    "pattern",
    [
        "[[cause]]/N\t-nsubj\t[[effect]]/N",
        "[[cause]]/N\t-nsubj\tcause/NN\t+dobj\tsomething/NN",
        "[[cause]]/N\t-nsubj\t[[cause]]/N\t+dobj\t[[effect]]/N",
        "[[cause]]/N\t-punct\t,/,\t+conj\t[[effect]]/N",
        "[[cause]]/N\t-neg\tnot/RB\t+dobj\t[[effect]]/N",
        "[[cause]]/N\t-nsubj\tdidn't/VBD\t+dobj\t[[effect]]/N",
        "[[cause]]/N\t-nsubj\t(/-LRB-\t+dobj\t[[effect]]/N",
        "[[cause]]/N\t-nummod\t2/CD\t+dobj\t[[effect]]/N",
        "[[cause]]/N\t-nsubj\tcaused/VBD\t+dobj\tback\\slash/NN\t+x\t[[effect]]/N",
        "\t".join(["[[cause]]/N"] + ["+x", "a/NN"] * 10 + ["+x", "[[effect]]/N"]),
    ],
)
def test_rules_reject(pattern):
    assert PatternSelectionRules.can_delete(pattern)


@pytest.mark.parametrize(
    "pattern",
    [
        CAUSED_PATTERN,
        REVERSED_CAUSED,
        "[[cause]]/N\t-nsubj\tled/VBD\t+nmod:to\tincrease/NN\t+nmod:in\t[[effect]]/N",
    ],
)
def test_rules_accept(pattern):
    assert not PatternSelectionRules.can_delete(pattern)


def test_pattern_needs_two_seeds():
    records = pattern_records(CAUSED_PATTERN, "rain,flood", "rain,flood")
    records += pattern_records(verb_pattern("triggered"), "rain,flood", "fire,smoke")

    selected = PatternSelector(budget=10).select(records)
    assert [p.pattern for p in selected] == [verb_pattern("triggered")]


def test_palindromes_are_skipped():
    records = pattern_records(AND_PATTERN, "rain,flood", "fire,smoke")
    assert PatternSelector(budget=10).select(records) == []


def test_reverse_of_selected_pattern_is_skipped():
    records = pattern_records(CAUSED_PATTERN, "rain,flood", "fire,smoke", "virus,fever")
    records += pattern_records(REVERSED_CAUSED, "flood,rain", "smoke,fire")

    selected = PatternSelector(budget=10).select(records)
    assert [p.pattern for p in selected] == [CAUSED_PATTERN]


def test_patterns_ranked_by_support():
    records = pattern_records(verb_pattern("made"), "a,b", "c,d")
    records += pattern_records(verb_pattern("caused"), "a,b", "c,d", "e,f", "g,h")
    records += pattern_records(verb_pattern("led"), "a,b", "c,d", "e,f")

    selector = PatternSelector(budget=10)
    selected = selector.select(records)

    assert [p.pattern for p in selected] == [
        verb_pattern("caused"),
        verb_pattern("led"),
        verb_pattern("made"),
    ]
    assert [s.support for s in selector.statistics] == [4, 3, 2]


def test_pattern_budget_grows_with_previous_round():
    verbs = ["caused", "triggered", "produced", "induced", "created"]
    records = []
    for verb in verbs:
        records += pattern_records(verb_pattern(verb), "a,b", "c,d")

    selector = PatternSelector(budget=2)
    assert len(selector.select(records)) == 2
    assert selector.limit == 4
    assert len(selector.select(records)) == 4
    assert len(selector.select(records)) == 5


def test_pattern_selector_from_config():
    selector = PatternSelector.from_config(
        BootstrapConfig(pattern_budget=7, min_pattern_support=3)
    )
    assert selector.budget == 7
    assert selector.min_support == 3
    assert selector.limit == 7


@pytest.mark.parametrize(
    "cause, effect",
    [("fire", "fire"), ("and/or", "flood"), ("rain", "50%"), ("a\\b", "flood")],
)
def test_noise(cause, effect):
    assert is_noise(cause, effect)


def test_clean_pair_is_not_noise():
    assert not is_noise("rain", "flood")


def test_instance_selection():
    other = verb_pattern("triggered")
    records = []
    records += instance_records("earthquake", "tsunami", CAUSED_PATTERN, other)
    records += instance_records("rain", "flood", CAUSED_PATTERN, CAUSED_PATTERN)
    records += instance_records("and/or", "flood", CAUSED_PATTERN, other)
    records += instance_records("fire", "fire", CAUSED_PATTERN, other)
    records += instance_records("smoking", "cancer", CAUSED_PATTERN, other, CAUSED_PATTERN)
    records += instance_records("virus", "fever", CAUSED_PATTERN)

    selector = InstanceSelector(budget=10)
    selected = selector.select(records)

    assert selected == [Instance("smoking", "cancer"), Instance("earthquake", "tsunami")]
    # noisy pairs are ranked but never selected
    assert len(selector.statistics) == 4


def test_instance_budget():
    other = verb_pattern("triggered")
    records = instance_records("earthquake", "tsunami", CAUSED_PATTERN, other)
    records += instance_records("smoking", "cancer", CAUSED_PATTERN, other)

    selector = InstanceSelector(budget=1, initial_count=0)
    assert selector.select(records) == [Instance("earthquake", "tsunami")]
    assert selector.selected_last_round == 1


def test_instance_selector_initial_count_from_config():
    default = InstanceSelector.from_config(BootstrapConfig(), seed_count=3)
    assert default.limit == 3 + 10

    fixed = InstanceSelector.from_config(BootstrapConfig(initial_seed_budget=8), seed_count=3)
    assert fixed.limit == 8 + 10
