"""Selection of patterns and instances from one round's extractions.

Both selectors rank candidates by their statistics and accept them until a
per-round budget is exhausted. The budget grows with the previous round's
selection, so the pools expand by a bounded amount each round.
"""

import logging
import re
from typing import Iterable, List

from .config import (
    CAUSE_PLACEHOLDER,
    EFFECT_PLACEHOLDER,
    INSTANCE_BUDGET,
    MAX_PATTERN_TOKENS,
    MIN_INSTANCE_FREQUENCY,
    MIN_INSTANCE_SUPPORT,
    MIN_PATTERN_SUPPORT,
    MIN_PATTERN_TOKENS,
    NEGATION_WORDS,
    PATTERN_BUDGET,
    VALID_NUMBER_OF_BRACKETS,
    BootstrapConfig,
)
from .instances import ExtractedInstance, ExtractedPattern, Instance
from .path_pattern import PathPattern, PatternError
from .statistics import (
    InstanceStatistic,
    PatternStatistic,
    aggregate_instances,
    aggregate_patterns,
)

logger = logging.getLogger(__name__)

DIGIT = re.compile(r"\d")
NOISE_CHARACTERS = ("/", "%", "\\")


class PatternSelectionRules:
    """Structural rules that rule out a pattern regardless of its support."""

    @staticmethod
    def can_delete(pattern: str) -> bool:
        """Return True if ``pattern`` must not be selected.

        A pattern is rejected when it does not hold exactly one cause and one
        effect placeholder, is too short or too long, passes through a comma
        or a negation, or contains parentheses, backslashes or digits.
        """
        if pattern.count("[") != VALID_NUMBER_OF_BRACKETS:
            return True
        if pattern.count(CAUSE_PLACEHOLDER) != 1 or pattern.count(EFFECT_PLACEHOLDER) != 1:
            return True

        tokens = pattern.split("\t")
        if not MIN_PATTERN_TOKENS <= len(tokens) <= MAX_PATTERN_TOKENS:
            return True

        for token in tokens[0::2]:
            surface = token.rsplit("/", 1)[0]
            if token == ",/," or surface in NEGATION_WORDS:
                return True

        if "(" in pattern or ")" in pattern or "\\" in pattern:
            return True

        return DIGIT.search(pattern) is not None


class PatternSelector:
    """Select the best-supported patterns of a round.

    Parameters
    ----------
    budget : int
        Patterns that may be selected on top of the previous round's count
    min_support : int
        Minimum number of distinct seeds a pattern must be found for
    """

    def __init__(
        self, budget: int = PATTERN_BUDGET, min_support: int = MIN_PATTERN_SUPPORT
    ):
        self.budget = budget
        self.min_support = min_support
        self.selected_last_round = 0
        self.statistics: List[PatternStatistic] = []
        self.selected: List[PathPattern] = []

    @classmethod
    def from_config(cls, config: BootstrapConfig) -> "PatternSelector":
        return cls(budget=config.pattern_budget, min_support=config.min_pattern_support)

    @property
    def limit(self) -> int:
        return self.selected_last_round + self.budget

    def rank(self, records: Iterable[ExtractedPattern]) -> List[PatternStatistic]:
        """Aggregate, filter and sort candidates by descending support."""
        statistics = list(aggregate_patterns(records).values())
        statistics = [s for s in statistics if not PatternSelectionRules.can_delete(s.pattern)]
        statistics = [s for s in statistics if s.support >= self.min_support]
        statistics.sort(key=lambda s: s.support, reverse=True)
        return statistics

    def select(self, records: Iterable[ExtractedPattern]) -> List[PathPattern]:
        """Select this round's patterns.

        Palindromes and patterns that reverse an already selected one are
        skipped. Selection stops once ``limit`` patterns are accepted.

        Parameters
        ----------
        records : Iterable[ExtractedPattern]
            All pattern extractions to consider

        Returns
        -------
        List[PathPattern]
            Selected patterns in rank order
        """
        self.clear()
        self.statistics = self.rank(records)
        logger.info("Total patterns found: %d", len(self.statistics))

        for stat in self.statistics:
            if len(self.selected) >= self.limit:
                break

            try:
                candidate = PathPattern(stat.pattern)
            except PatternError as e:
                logger.debug("Skipping invalid pattern: %s", e)
                continue

            if candidate.is_palindrome():
                continue
            if any(candidate.is_reverse_of(p) for p in self.selected):
                continue

            self.selected.append(candidate)

        logger.info("Selected patterns: %d", len(self.selected))
        self.selected_last_round = len(self.selected)
        return list(self.selected)

    def clear(self) -> None:
        self.statistics = []
        self.selected = []


def is_noise(cause: str, effect: str) -> bool:
    """Pairs with special characters or identical words are not instances."""
    if cause == effect:
        return True
    return any(c in cause or c in effect for c in NOISE_CHARACTERS)


class InstanceSelector:
    """Select the most frequent, best-supported instances of a round.

    Parameters
    ----------
    budget : int
        Instances that may be selected on top of the previous round's count
    initial_count : int
        Selection count assumed for the round before the first one
    min_support : int
        Minimum number of distinct patterns that extracted the pair
    min_frequency : int
        Minimum number of extractions of the pair
    """

    def __init__(
        self,
        budget: int = INSTANCE_BUDGET,
        initial_count: int = 0,
        min_support: int = MIN_INSTANCE_SUPPORT,
        min_frequency: int = MIN_INSTANCE_FREQUENCY,
    ):
        self.budget = budget
        self.min_support = min_support
        self.min_frequency = min_frequency
        self.selected_last_round = initial_count
        self.statistics: List[InstanceStatistic] = []
        self.selected: List[Instance] = []

    @classmethod
    def from_config(
        cls, config: BootstrapConfig, seed_count: int = 0
    ) -> "InstanceSelector":
        """Build from config; ``seed_count`` is used unless the config fixes it."""
        initial_count = config.initial_seed_budget
        if initial_count is None:
            initial_count = seed_count
        return cls(
            budget=config.instance_budget,
            initial_count=initial_count,
            min_support=config.min_instance_support,
            min_frequency=config.min_instance_frequency,
        )

    @property
    def limit(self) -> int:
        return self.selected_last_round + self.budget

    def rank(self, records: Iterable[ExtractedInstance]) -> List[InstanceStatistic]:
        """Aggregate, filter and sort by frequency, then (stably) by support."""
        statistics = list(aggregate_instances(records).values())
        statistics.sort(key=lambda s: s.frequency, reverse=True)
        statistics = [s for s in statistics if s.frequency >= self.min_frequency]
        statistics = [s for s in statistics if s.support >= self.min_support]
        statistics.sort(key=lambda s: s.support, reverse=True)
        return statistics

    def select(self, records: Iterable[ExtractedInstance]) -> List[Instance]:
        """Select this round's instances, skipping noisy pairs."""
        self.clear()
        self.statistics = self.rank(records)
        logger.info("Total instances found: %d", len(self.statistics))

        for stat in self.statistics:
            if len(self.selected) >= self.limit:
                break
            if is_noise(stat.cause, stat.effect):
                continue
            self.selected.append(stat.instance)

        logger.info("Selected instances: %d", len(self.selected))
        self.selected_last_round = len(self.selected)
        return list(self.selected)

    def clear(self) -> None:
        self.statistics = []
        self.selected = []
