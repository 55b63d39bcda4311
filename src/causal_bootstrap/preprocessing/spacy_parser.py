"""Dependency-parse raw sentences with spaCy into graph text."""

import argparse
import logging
import warnings
from typing import Iterable, Iterator, List, Union

import spacy
from spacy.tokens import Doc, Span
from tqdm import tqdm

from ..config import SPACY_MODEL
from ..sentence_source import Sentence, save_jsonl

logger = logging.getLogger(__name__)


class SpacyGraphParser:
    """Parse text with spaCy and emit DOT dependency graphs.

    Parameters
    ----------
    model_name : str
        spaCy pipeline with a tagger and dependency parser
    nlp : optional
        Already loaded pipeline; takes precedence over ``model_name``
    """

    def __init__(self, model_name: str = SPACY_MODEL, nlp=None):
        if nlp is not None:
            self.nlp = nlp
            return
        try:
            self.nlp = spacy.load(model_name)
        except OSError:
            warnings.warn(f"Model {model_name} not found. Run: python -m spacy download {model_name}")
            raise

    @staticmethod
    def to_graph(sent: Union[Doc, Span]) -> str:
        """Render one parsed sentence as a DOT digraph with PTB tags."""
        offset = sent[0].i if len(sent) else 0
        lines: List[str] = ["digraph  {"]
        edges: List[str] = []

        for token in sent:
            node = token.i - offset + 1
            lines.append(f'  N_{node} [label="{token.text}/{token.tag_}-{node}"];')
            if token.head.i != token.i:
                head = token.head.i - offset + 1
                edges.append(f'  N_{head} -> N_{node} [label="{token.dep_}"];')

        lines.extend(edges)
        lines.append("}")
        return "\n".join(lines)

    def parse(self, text: str) -> Sentence:
        """Parse ``text`` and return its first sentence."""
        doc = self.nlp(text)
        sent = next(iter(doc.sents), doc[:])
        return Sentence(sent.text, self.to_graph(sent))

    def parse_all(self, texts: Iterable[str], batch_size: int = 64) -> Iterator[Sentence]:
        """Parse many texts, yielding one record per detected sentence."""
        for doc in self.nlp.pipe(texts, batch_size=batch_size):
            for sent in doc.sents:
                if len(sent) == 0:
                    continue
                yield Sentence(sent.text, self.to_graph(sent))


def main():
    """CLI entry point: parse a text file into a JSON Lines corpus."""
    parser = argparse.ArgumentParser(
        description="Parse raw sentences into a dependency graph corpus"
    )
    parser.add_argument("--input", "-i", required=True, help="Text file, one document per line")
    parser.add_argument("--output", "-o", required=True, help="Output JSON Lines corpus")
    parser.add_argument("--model", "-m", default=SPACY_MODEL, help="spaCy model name")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    with open(args.input, "r", encoding="utf-8") as f:
        texts = [line.strip() for line in f if line.strip()]

    graph_parser = SpacyGraphParser(model_name=args.model)
    sentences = graph_parser.parse_all(tqdm(texts, desc="Parsing"))
    count = save_jsonl(sentences, args.output)
    print(f"Saved {count} parsed sentences to: {args.output}")


if __name__ == "__main__":
    main()
