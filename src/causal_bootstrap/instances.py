"""Cause/effect instances and the records produced by extraction."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Union

from .path_pattern import PathPattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Instance:
    """A cause/effect noun pair. ``(a, b)`` and ``(b, a)`` are different."""

    cause: str
    effect: str

    @classmethod
    def of(cls, cause: str, effect: str) -> "Instance":
        """Create a normalized (trimmed, lowercase) instance."""
        return cls(cause.strip().lower(), effect.strip().lower())

    def __str__(self) -> str:
        return f"[{self.cause},{self.effect}]"


@dataclass(frozen=True)
class ExtractedPattern:
    """A generalized path found between the words of a seed instance.

    Attributes
    ----------
    pattern : str
        Generalized, tab-separated path pattern
    instance : Instance
        Seed the pattern was extracted for
    sentence : str
        Source sentence, kept for traceability
    """

    pattern: str
    instance: Instance
    sentence: str = ""


@dataclass(frozen=True)
class ExtractedInstance:
    """A cause/effect pair a pattern matched in one sentence."""

    cause: str
    effect: str
    pattern: PathPattern
    sentence: str = ""

    @classmethod
    def of(
        cls, cause: str, effect: str, pattern: PathPattern, sentence: str = ""
    ) -> "ExtractedInstance":
        return cls(cause.strip().lower(), effect.strip().lower(), pattern, sentence)

    @property
    def key(self) -> Instance:
        return Instance(self.cause, self.effect)

    def __str__(self) -> str:
        return f"[{self.cause},{self.effect}]"


def parse_seeds(lines: Iterable[str]) -> List[Instance]:
    """Parse ``cause,effect`` lines; blank and malformed lines are skipped."""
    seeds = []
    for line_no, line in enumerate(lines, 1):
        if not line.strip():
            continue

        parts = line.rstrip("\n").split(",")
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            logger.warning("Skipping malformed seed on line %d: %r", line_no, line)
            continue

        seeds.append(Instance.of(parts[0], parts[1]))
    return seeds


def load_seeds(path: Union[str, Path]) -> List[Instance]:
    """Load seed instances from a ``cause,effect`` file."""
    with open(path, "r", encoding="utf-8") as f:
        seeds = parse_seeds(f)

    logger.info("Loaded %d seed instances from %s", len(seeds), path)
    return seeds
