"""Bootstrapping loop alternating pattern and instance extraction.

Each round:
1. Extract path patterns for every seed not queried yet
2. Select the best-supported patterns and merge them into the pattern pool
3. Extract instances with every pattern not queried yet (skipped in the
   last round)
4. Select the most frequent instances and merge them into the seed pool
5. Write a snapshot of both pools
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Union

from .config import BootstrapConfig, ConfigError, load_config
from .extraction_steps import InstanceExtractionStep, PatternExtractionStep
from .instances import ExtractedInstance, ExtractedPattern, Instance, load_seeds
from .path_pattern import PathPattern
from .selection import InstanceSelector, PatternSelector
from .sentence_source import CORPUS_FORMATS, SentenceSource, load_corpus

logger = logging.getLogger(__name__)


@dataclass
class RoundSummary:
    """Counts describing one bootstrapping round."""

    iteration: int
    pattern_candidates: int = 0
    patterns_selected: int = 0
    patterns_added: int = 0
    instance_candidates: int = 0
    instances_selected: int = 0
    instances_added: int = 0


@dataclass
class BootstrapResult:
    """Final pools of a bootstrapping run.

    Attributes
    ----------
    instances : List[Instance]
        Seeds followed by every instance accepted in later rounds
    patterns : List[PathPattern]
        Every pattern accepted, in acceptance order
    rounds : List[RoundSummary]
        Per-round counts
    """

    instances: List[Instance]
    patterns: List[PathPattern]
    rounds: List[RoundSummary] = field(default_factory=list)


def merge_patterns(pool: List[PathPattern], new_patterns: Iterable[PathPattern]) -> int:
    """Append patterns that neither equal nor reverse a pooled pattern.

    Returns
    -------
    int
        Number of patterns added
    """
    added = 0
    for pattern in new_patterns:
        duplicate = any(
            p.pattern == pattern.pattern or pattern.is_reverse_of(p) for p in pool
        )
        if not duplicate:
            pool.append(pattern)
            added += 1
    return added


def merge_instances(pool: List[Instance], new_instances: Iterable[Instance]) -> int:
    """Append instances not already in the pool; returns the number added."""
    known = set(pool)
    added = 0
    for instance in new_instances:
        if instance in known:
            continue
        pool.append(instance)
        known.add(instance)
        added += 1
    return added


def store(items: Sequence, path: Union[str, Path], previous_size: int) -> None:
    """Write one entry per line, with a blank line after carried-over entries."""
    with open(path, "w", encoding="utf-8") as f:
        for i, item in enumerate(items, 1):
            f.write(f"{item}\n")
            if i == previous_size:
                f.write("\n")


class Bootstrapper:
    """Grow seed instances and path patterns over a fixed number of rounds.

    Parameters
    ----------
    source : SentenceSource
        Backend answering instance and pattern queries
    seeds : Iterable[Instance]
        Initial cause/effect pairs
    output_dir : Optional[str]
        Directory for per-round snapshots; None disables snapshots
    config : Optional[BootstrapConfig]
        Loop configuration (defaults from ``config.py``)
    """

    def __init__(
        self,
        source: SentenceSource,
        seeds: Iterable[Instance],
        output_dir: Optional[Union[str, Path]] = None,
        config: Optional[BootstrapConfig] = None,
    ):
        self.source = source
        self.config = config or BootstrapConfig()
        self.output_dir = Path(output_dir) if output_dir is not None else None

        self.instances: List[Instance] = []
        merge_instances(self.instances, seeds)
        self.patterns: List[PathPattern] = []

        # Raw extractions accumulate across rounds; statistics are rebuilt
        # from them in every selection.
        self.pattern_records: List[ExtractedPattern] = []
        self.instance_records: List[ExtractedInstance] = []

        self.queried_instances: Set[str] = set()
        self.queried_patterns: Set[str] = set()

        self.pattern_selector = PatternSelector.from_config(self.config)
        self.instance_selector = InstanceSelector.from_config(
            self.config, seed_count=len(self.instances)
        )

        self._previous_instances = 0
        self._previous_patterns = 0

    def run(self) -> BootstrapResult:
        """Run all rounds and return the final pools."""
        rounds: List[RoundSummary] = []
        self.save(0)

        pattern_step = PatternExtractionStep(
            self.source, max_workers=self.config.max_workers, progress=self.config.progress
        )
        instance_step = InstanceExtractionStep(
            self.source, max_workers=self.config.max_workers, progress=self.config.progress
        )

        with pattern_step, instance_step:
            for iteration in range(1, self.config.iterations + 1):
                logger.info("----- Iteration: %d -----", iteration)
                summary = RoundSummary(iteration)
                self._previous_instances = len(self.instances)
                self._previous_patterns = len(self.patterns)

                selected_patterns = self.pattern_round(pattern_step, summary)
                summary.patterns_added = merge_patterns(self.patterns, selected_patterns)

                if iteration == self.config.iterations:
                    self.save_patterns(iteration)
                    rounds.append(summary)
                    break

                selected_instances = self.instance_round(instance_step, summary)
                summary.instances_added = merge_instances(self.instances, selected_instances)

                self.save(iteration)
                rounds.append(summary)

        logger.info(
            "Done: %d instances, %d patterns", len(self.instances), len(self.patterns)
        )
        return BootstrapResult(list(self.instances), list(self.patterns), rounds)

    def pattern_round(
        self, step: PatternExtractionStep, summary: RoundSummary
    ) -> List[PathPattern]:
        self.pattern_records.extend(step.extract(self.instances, self.queried_instances))
        selected = self.pattern_selector.select(self.pattern_records)
        summary.pattern_candidates = len(self.pattern_selector.statistics)
        summary.patterns_selected = len(selected)
        return selected

    def instance_round(
        self, step: InstanceExtractionStep, summary: RoundSummary
    ) -> List[Instance]:
        self.instance_records.extend(step.extract(self.patterns, self.queried_patterns))
        selected = self.instance_selector.select(self.instance_records)
        summary.instance_candidates = len(self.instance_selector.statistics)
        summary.instances_selected = len(selected)
        return selected

    def save(self, iteration: int) -> None:
        """Snapshot both pools as ``<iteration>-instances`` and ``<iteration>-patterns``."""
        if self.output_dir is None:
            return
        self.output_dir.mkdir(parents=True, exist_ok=True)
        store(self.instances, self.output_dir / f"{iteration}-instances", self._previous_instances)
        self.save_patterns(iteration)

    def save_patterns(self, iteration: int) -> None:
        if self.output_dir is None:
            return
        self.output_dir.mkdir(parents=True, exist_ok=True)
        store(self.patterns, self.output_dir / f"{iteration}-patterns", self._previous_patterns)


def run_bootstrapping(
    seeds_path: str,
    corpus_path: str,
    output_dir: str,
    corpus_format: str = "jsonl",
    config: Optional[BootstrapConfig] = None,
    model_name: Optional[str] = None,
) -> BootstrapResult:
    """Load seeds and corpus, run the loop and print a summary."""
    seeds = load_seeds(seeds_path)
    source = load_corpus(corpus_path, corpus_format, model_name=model_name)

    bootstrapper = Bootstrapper(source, seeds, output_dir=output_dir, config=config)
    result = bootstrapper.run()

    print("\n" + "=" * 70)
    print("BOOTSTRAPPING SUMMARY")
    print("=" * 70)
    for r in result.rounds:
        print(
            f"  Iteration {r.iteration}: "
            f"patterns +{r.patterns_added} ({r.patterns_selected}/{r.pattern_candidates} selected), "
            f"instances +{r.instances_added} ({r.instances_selected}/{r.instance_candidates} selected)"
        )
    print(f"\nInstances: {len(result.instances)}")
    print(f"Patterns: {len(result.patterns)}")
    print(f"Snapshots saved to: {output_dir}")

    return result


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bootstrap causal patterns and instances from a parsed corpus"
    )
    parser.add_argument("--seeds", "-s", required=True, help="Seed file with cause,effect lines")
    parser.add_argument("--corpus", "-c", required=True, help="Corpus file")
    parser.add_argument(
        "--corpus-format",
        choices=CORPUS_FORMATS,
        default="jsonl",
        help="Corpus format (text is parsed with spaCy)",
    )
    parser.add_argument("--output", "-o", default="outputs/bootstrapping", help="Snapshot directory")
    parser.add_argument("--config", type=str, default=None, help="YAML configuration file")
    parser.add_argument("--iterations", "-n", type=int, default=None, help="Number of rounds")
    parser.add_argument("--workers", "-w", type=int, default=None, help="Worker threads per stage")
    parser.add_argument("--model", "-m", type=str, default=None, help="spaCy model for text corpora")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    try:
        config = load_config(
            args.config,
            iterations=args.iterations,
            max_workers=args.workers,
            progress=False if args.no_progress else None,
        )
        run_bootstrapping(
            seeds_path=args.seeds,
            corpus_path=args.corpus,
            output_dir=args.output,
            corpus_format=args.corpus_format,
            config=config,
            model_name=args.model,
        )
    except (ConfigError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
