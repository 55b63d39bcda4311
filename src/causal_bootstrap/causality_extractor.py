"""Apply a learned pattern set to a parsed corpus.

This is the deployment side of bootstrapping: the final pattern snapshot is
matched against every sentence of a corpus and the sentences with at least
one cause/effect match are exported as JSON Lines.
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from .config import MAX_WORKERS, NEGATION_WORDS, ConfigError
from .dep_graph import DepGraph
from .extraction_steps import ParallelExtractor
from .path_pattern import PathPattern, PatternError
from .sentence_source import CORPUS_FORMATS, Sentence, load_corpus

logger = logging.getLogger(__name__)

STRIP_CHARS = ".,;:!?\"'()[]"


@dataclass
class Match:
    """One cause/effect pair found by a pattern."""

    cause: str
    effect: str
    pattern: str


@dataclass
class CausalSentence:
    """A corpus sentence with the causal matches found in it."""

    sentence: str
    graph: str
    matches: List[Match] = field(default_factory=list)

    def has_match(self, cause: str, effect: str) -> bool:
        return any(m.cause == cause and m.effect == effect for m in self.matches)

    def to_dict(self) -> dict:
        return asdict(self)


def load_patterns(path: Union[str, Path]) -> List[PathPattern]:
    """Load one pattern per line; blank lines (snapshot markers) are ignored."""
    patterns = []
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            try:
                patterns.append(PathPattern(line))
            except PatternError as e:
                logger.warning("Skipping pattern on line %d: %s", line_no, e)

    logger.info("Loaded %d patterns from %s", len(patterns), path)
    return patterns


class CausalityExtractor:
    """Match a fixed set of path patterns against sentences.

    Parameters
    ----------
    patterns : List[PathPattern]
        Patterns to apply
    max_workers : int
        Worker threads used by :meth:`extract_corpus`

    Raises
    ------
    ConfigError
        If ``max_workers`` is smaller than 1
    """

    def __init__(self, patterns: List[PathPattern], max_workers: int = MAX_WORKERS):
        if max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {max_workers}")
        self.patterns = patterns
        self.max_workers = max_workers

        # A pattern without an indicator word can match any sentence
        self.indicators: Optional[Set[str]] = None
        if patterns and all(p.indicator for p in patterns):
            self.indicators = {p.indicator for p in patterns}

    def is_candidate(self, text: str) -> bool:
        """Cheap filters applied before any graph is built.

        Questions and negated sentences are skipped. When every pattern has an
        indicator word, sentences containing none of them are skipped too.
        """
        if "?" in text:
            return False

        lowered = text.lower()
        words = {w.strip(STRIP_CHARS) for w in lowered.split()}
        if words & set(NEGATION_WORDS) or any(w.endswith("n't") for w in words):
            return False

        if self.indicators is not None and not any(i in lowered for i in self.indicators):
            return False

        return True

    def extract_sentence(self, sentence: Sentence) -> Optional[CausalSentence]:
        """Match every pattern against one sentence.

        Returns
        -------
        Optional[CausalSentence]
            The sentence with its de-duplicated matches, or None if nothing
            matched
        """
        if not self.is_candidate(sentence.text):
            return None

        graph = DepGraph(sentence.graph)
        result = CausalSentence(sentence.text, sentence.graph)

        for pattern in self.patterns:
            for cause, effect in pattern.match(graph):
                if not result.has_match(cause, effect):
                    result.matches.append(Match(cause, effect, pattern.pattern))

        return result if result.matches else None

    def extract_batch(self, sentences: List[Sentence]) -> List[CausalSentence]:
        results = (self.extract_sentence(s) for s in sentences)
        return [r for r in results if r is not None]

    def extract_corpus(
        self, sentences: Iterable[Sentence], progress: bool = True
    ) -> List[CausalSentence]:
        """Split the corpus into one contiguous batch per worker and join.

        Batches are joined in submission order, so results keep corpus order.
        """
        sentences = list(sentences)
        size = max(1, -(-len(sentences) // self.max_workers))
        batches = [sentences[i:i + size] for i in range(0, len(sentences), size)]

        with ParallelExtractor(
            max_workers=self.max_workers, progress=progress, desc="Extracting causality"
        ) as runner:
            for i, batch in enumerate(batches):
                runner.submit(f"batch-{i}", self.extract_batch, batch)
            return runner.join()


def save_causal_sentences(results: Iterable[CausalSentence], path: Union[str, Path]) -> int:
    count = 0
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for result in results:
            f.write(json.dumps(result.to_dict(), ensure_ascii=False) + "\n")
            count += 1
    return count


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Extract causal relations from a corpus with learned path patterns"
    )
    parser.add_argument("--patterns", "-p", required=True, help="Pattern file (one per line)")
    parser.add_argument("--corpus", "-c", required=True, help="Corpus file")
    parser.add_argument("--corpus-format", choices=CORPUS_FORMATS, default="jsonl")
    parser.add_argument("--output", "-o", default="outputs/causal_sentences.jsonl")
    parser.add_argument("--workers", "-w", type=int, default=MAX_WORKERS)
    parser.add_argument("--model", "-m", type=str, default=None, help="spaCy model for text corpora")
    parser.add_argument("--no-progress", action="store_true")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    try:
        patterns = load_patterns(args.patterns)
        corpus = load_corpus(args.corpus, args.corpus_format, model_name=args.model)
        extractor = CausalityExtractor(patterns, max_workers=args.workers)
    except (ConfigError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1

    results = extractor.extract_corpus(corpus, progress=not args.no_progress)
    count = save_causal_sentences(results, args.output)

    print(f"\nFound {count} causal sentences in {len(corpus)} sentences")
    print(f"Saved to: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
