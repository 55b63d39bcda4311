"""Sentence sources queried by the bootstrapping loop.

The loop only needs two queries: sentences mentioning a seed instance, and
sentences whose dependency graph plausibly contains a pattern's tokens. Both
are recall-oriented prefilters; the caller re-checks every returned graph.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Set, Union

from .dep_graph import DepGraph

logger = logging.getLogger(__name__)

WORD = re.compile(r"\w+", re.UNICODE)


class Sentence(NamedTuple):
    """A sentence and its dependency graph in DOT text form."""

    text: str
    graph: str


def tokenize(text: str) -> List[str]:
    return [w.lower() for w in WORD.findall(text)]


class SentenceSource(ABC):
    """Search interface over a parsed sentence corpus."""

    @abstractmethod
    def query_by_instance(self, cause: str, effect: str) -> List[Sentence]:
        """Return sentences mentioning both the cause and the effect."""

    @abstractmethod
    def query_by_pattern(self, terms: List[str]) -> List[Sentence]:
        """Return sentences whose graph contains all ``terms``.

        ``terms`` is the pattern's edge-label query (see
        :meth:`PathPattern.edge_label_query`).
        """


class InMemorySentenceIndex(SentenceSource):
    """Inverted index over sentence words and dependency graph terms.

    Parameters
    ----------
    sentences : Optional[Iterable[Sentence]]
        Sentences to index right away
    """

    def __init__(self, sentences: Optional[Iterable[Sentence]] = None):
        self._sentences: List[Sentence] = []
        self._tokens: List[List[str]] = []
        self._word_index: Dict[str, Set[int]] = defaultdict(set)
        self._graph_index: Dict[str, Set[int]] = defaultdict(set)

        if sentences is not None:
            self.add_all(sentences)

    def add(self, sentence: Sentence) -> None:
        doc_id = len(self._sentences)
        tokens = tokenize(sentence.text)

        self._sentences.append(sentence)
        self._tokens.append(tokens)
        for token in tokens:
            self._word_index[token].add(doc_id)
        for term in DepGraph(sentence.graph).terms():
            self._graph_index[term].add(doc_id)

    def add_all(self, sentences: Iterable[Sentence]) -> int:
        count = 0
        for sentence in sentences:
            self.add(sentence)
            count += 1
        return count

    def __len__(self) -> int:
        return len(self._sentences)

    def __iter__(self) -> Iterator[Sentence]:
        return iter(self._sentences)

    def _contains_phrase(self, doc_id: int, phrase: List[str]) -> bool:
        tokens = self._tokens[doc_id]
        n = len(phrase)
        return any(tokens[i:i + n] == phrase for i in range(len(tokens) - n + 1))

    @staticmethod
    def _intersect(index: Dict[str, Set[int]], terms: Iterable[str]) -> Set[int]:
        result: Optional[Set[int]] = None
        for term in terms:
            postings = index.get(term, set())
            result = set(postings) if result is None else result & postings
            if not result:
                return set()
        return result or set()

    def query_by_instance(self, cause: str, effect: str) -> List[Sentence]:
        cause_words = tokenize(cause)
        effect_words = tokenize(effect)
        if not cause_words or not effect_words:
            return []

        candidates = self._intersect(self._word_index, cause_words + effect_words)
        return [
            self._sentences[doc_id]
            for doc_id in sorted(candidates)
            if self._contains_phrase(doc_id, cause_words)
            and self._contains_phrase(doc_id, effect_words)
        ]

    def query_by_pattern(self, terms: List[str]) -> List[Sentence]:
        if not terms:
            return []
        candidates = self._intersect(self._graph_index, terms)
        return [self._sentences[doc_id] for doc_id in sorted(candidates)]

    @classmethod
    def from_jsonl(cls, path: Union[str, Path]) -> "InMemorySentenceIndex":
        """Load ``{"text": ..., "graph": ...}`` records, one per line."""
        index = cls()
        with open(path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                    index.add(Sentence(record["text"], record["graph"]))
                except (ValueError, KeyError, TypeError, AttributeError) as e:
                    logger.warning("Skipping corpus line %d of %s: %s", line_no, path, e)

        logger.info("Indexed %d sentences from %s", len(index), path)
        return index

    @classmethod
    def from_conllu(cls, path: Union[str, Path]) -> "InMemorySentenceIndex":
        """Index a CoNLL-U file (requires the ``conllu`` package)."""
        from .preprocessing.conllu_converter import load_conllu_sentences

        index = cls(load_conllu_sentences(path))
        logger.info("Indexed %d sentences from %s", len(index), path)
        return index

    @classmethod
    def from_texts(
        cls, texts: Iterable[str], parser=None
    ) -> "InMemorySentenceIndex":
        """Parse raw sentences with spaCy and index them."""
        from .preprocessing.spacy_parser import SpacyGraphParser

        parser = parser or SpacyGraphParser()
        return cls(parser.parse_all(texts))


def save_jsonl(sentences: Iterable[Sentence], path: Union[str, Path]) -> int:
    """Write sentences in the format read by :meth:`InMemorySentenceIndex.from_jsonl`."""
    count = 0
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for sentence in sentences:
            f.write(json.dumps(sentence._asdict(), ensure_ascii=False) + "\n")
            count += 1
    return count


CORPUS_FORMATS = ("jsonl", "conllu", "text")


def load_corpus(
    path: Union[str, Path], corpus_format: str = "jsonl", model_name: Optional[str] = None
) -> InMemorySentenceIndex:
    """Build an index from a corpus file in one of ``CORPUS_FORMATS``."""
    if not Path(path).exists():
        raise FileNotFoundError(f"Corpus not found: {path}")

    if corpus_format == "jsonl":
        return InMemorySentenceIndex.from_jsonl(path)
    if corpus_format == "conllu":
        return InMemorySentenceIndex.from_conllu(path)
    if corpus_format == "text":
        from .preprocessing.spacy_parser import SpacyGraphParser

        parser = SpacyGraphParser(model_name) if model_name else SpacyGraphParser()
        with open(path, "r", encoding="utf-8") as f:
            texts = [line.strip() for line in f if line.strip()]
        return InMemorySentenceIndex.from_texts(texts, parser=parser)

    raise ValueError(f"Unknown corpus format {corpus_format!r}; expected one of {CORPUS_FORMATS}")
