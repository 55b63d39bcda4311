"""Candidate statistics aggregated from extraction records."""

from collections import Counter
from typing import Dict, Iterable, Tuple

from .instances import ExtractedInstance, ExtractedPattern, Instance
from .path_pattern import PathPattern


class PatternStatistic:
    """Seeds supporting one pattern string.

    Parameters
    ----------
    representative : ExtractedPattern
        First record seen for the pattern
    """

    def __init__(self, representative: ExtractedPattern):
        self.representative = representative
        self.seeds: Counter = Counter()
        self.update(representative)

    @property
    def pattern(self) -> str:
        return self.representative.pattern

    @property
    def support(self) -> int:
        """Number of distinct seeds the pattern was found for."""
        return len(self.seeds)

    @property
    def frequency(self) -> int:
        return sum(self.seeds.values())

    def update(self, record: ExtractedPattern) -> None:
        self.seeds[record.instance] += 1

    def __repr__(self) -> str:
        return f"PatternStatistic({self.pattern!r}, support={self.support})"


class InstanceStatistic:
    """Patterns and sentences supporting one cause/effect pair."""

    def __init__(self, representative: ExtractedInstance):
        self.cause = representative.cause
        self.effect = representative.effect
        self.patterns: Counter = Counter()
        self.sample_sentences: Dict[PathPattern, str] = {}
        self.frequency = 0
        self.update(representative)

    @property
    def instance(self) -> Instance:
        return Instance(self.cause, self.effect)

    @property
    def support(self) -> int:
        """Number of distinct patterns that extracted the pair."""
        return len(self.patterns)

    def update(self, record: ExtractedInstance) -> None:
        if record.pattern not in self.patterns:
            self.sample_sentences[record.pattern] = record.sentence
        self.patterns[record.pattern] += 1
        self.frequency += 1

    def __repr__(self) -> str:
        return (
            f"InstanceStatistic([{self.cause},{self.effect}], "
            f"frequency={self.frequency}, support={self.support})"
        )


def aggregate_patterns(
    records: Iterable[ExtractedPattern],
) -> Dict[str, PatternStatistic]:
    """Fold pattern records into statistics keyed by pattern string.

    Records are folded shortest pattern first; the resulting dict keeps
    first-sighting order.
    """
    statistics: Dict[str, PatternStatistic] = {}

    for record in sorted(records, key=lambda r: len(r.pattern)):
        stat = statistics.get(record.pattern)
        if stat is None:
            statistics[record.pattern] = PatternStatistic(record)
        else:
            stat.update(record)

    return statistics


def aggregate_instances(
    records: Iterable[ExtractedInstance],
) -> Dict[Tuple[str, str], InstanceStatistic]:
    """Fold instance records into statistics keyed by (cause, effect)."""
    statistics: Dict[Tuple[str, str], InstanceStatistic] = {}

    for record in records:
        key = (record.cause, record.effect)
        stat = statistics.get(key)
        if stat is None:
            statistics[key] = InstanceStatistic(record)
        else:
            stat.update(record)

    return statistics
