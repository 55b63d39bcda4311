"""Tests for the parallel extraction stages."""

import logging

from causal_bootstrap.extraction_steps import (
    InstanceExtractionStep,
    ParallelExtractor,
    PatternExtractionStep,
)
from causal_bootstrap.instances import Instance
from causal_bootstrap.path_pattern import PathPattern

from conftest import CAUSED_PATTERN


class FailingSource:
    """Source whose queries fail for one cause word."""

    def __init__(self, index, broken: str):
        self.index = index
        self.broken = broken

    def query_by_instance(self, cause, effect):
        if cause == self.broken:
            raise RuntimeError("backend unavailable")
        return self.index.query_by_instance(cause, effect)

    def query_by_pattern(self, terms):
        raise RuntimeError("backend unavailable")


def test_join_merges_in_submission_order():
    with ParallelExtractor(max_workers=4, progress=False) as runner:
        for i in range(10):
            runner.submit(f"task-{i}", lambda n: [n, n], i)
        results = runner.join()

    assert results == [n for i in range(10) for n in (i, i)]


def test_failing_task_is_logged_and_absorbed(caplog):
    def fail():
        raise ValueError("boom")

    with ParallelExtractor(max_workers=2, progress=False) as runner:
        runner.submit("ok", lambda: ["a"])
        runner.submit("broken", fail)
        runner.submit("empty", lambda: None)
        with caplog.at_level(logging.ERROR):
            results = runner.join()

    assert results == ["a"]
    assert "broken" in caplog.text


def test_pattern_step(causal_index):
    visited = set()
    with PatternExtractionStep(causal_index, max_workers=2, progress=False) as step:
        found = step.extract([Instance("earthquake", "tsunami")], visited)

    assert [r.pattern for r in found] == [
        CAUSED_PATTERN,
        "[[cause]]/N\t-nsubj\ttriggered/VBD\t+dobj\t[[effect]]/N",
    ]
    assert all(r.instance == Instance("earthquake", "tsunami") for r in found)
    assert found[0].sentence == "earthquake caused tsunami"
    assert visited == {"[earthquake,tsunami]"}


def test_pattern_step_skips_visited_seeds(causal_index):
    visited = {"[earthquake,tsunami]"}
    with PatternExtractionStep(causal_index, max_workers=2, progress=False) as step:
        found = step.extract(
            [Instance("earthquake", "tsunami"), Instance("rain", "flood")], visited
        )

    assert {r.instance for r in found} == {Instance("rain", "flood")}
    assert visited == {"[earthquake,tsunami]", "[rain,flood]"}


def test_pattern_step_absorbs_backend_errors(causal_index):
    source = FailingSource(causal_index, broken="smoking")
    with PatternExtractionStep(source, max_workers=2, progress=False) as step:
        found = step.extract(
            [Instance("smoking", "cancer"), Instance("rain", "flood")], set()
        )

    assert len(found) == 2
    assert {r.instance for r in found} == {Instance("rain", "flood")}


def test_instance_step(causal_index):
    visited = set()
    pattern = PathPattern(CAUSED_PATTERN)
    with InstanceExtractionStep(causal_index, max_workers=2, progress=False) as step:
        found = step.extract([pattern], visited)
        again = step.extract([pattern], visited)

    assert [(r.cause, r.effect) for r in found] == [
        ("earthquake", "tsunami"),
        ("smoking", "cancer"),
        ("rain", "flood"),
        ("virus", "fever"),
    ]
    assert all(r.pattern == pattern for r in found)
    assert again == []
    assert visited == {CAUSED_PATTERN}


def test_instance_step_absorbs_backend_errors(causal_index):
    source = FailingSource(causal_index, broken="")
    with InstanceExtractionStep(source, max_workers=2, progress=False) as step:
        assert step.extract([PathPattern(CAUSED_PATTERN)], set()) == []
