"""Convert CoNLL-U sentences into dependency graph text."""

import logging
from pathlib import Path
from typing import Iterator, List, Union

import conllu
from conllu import TokenList

from ..sentence_source import Sentence

logger = logging.getLogger(__name__)


def _tag(token: dict) -> str:
    # Penn Treebank tags in XPOS are what the patterns expect
    return token.get("xpos") or token.get("upos") or "_"


def tokenlist_to_graph(sent: TokenList) -> str:
    """Render a CoNLL-U sentence as a DOT digraph.

    Multi-word and empty tokens are skipped; the root relation is dropped.

    Parameters
    ----------
    sent : TokenList
        Parsed CoNLL-U sentence

    Returns
    -------
    str
        Graph text with ``N_<id>`` node ids and ``form/TAG-id`` labels
    """
    lines: List[str] = ["digraph  {"]
    edges: List[str] = []

    for token in sent:
        if not isinstance(token["id"], int):
            continue

        token_id = token["id"]
        form = token["form"]
        lines.append(f'  N_{token_id} [label="{form}/{_tag(token)}-{token_id}"];')

        head = token["head"]
        if head:
            edges.append(f'  N_{head} -> N_{token_id} [label="{token["deprel"]}"];')

    lines.extend(edges)
    lines.append("}")
    return "\n".join(lines)


def tokenlist_to_sentence(sent: TokenList) -> Sentence:
    text = sent.metadata.get("text")
    if not text:
        text = " ".join(t["form"] for t in sent if isinstance(t["id"], int))
    return Sentence(text, tokenlist_to_graph(sent))


def load_conllu_sentences(filepath: Union[str, Path]) -> Iterator[Sentence]:
    """Yield graph sentences from a CoNLL-U file."""
    with open(filepath, "r", encoding="utf-8") as f:
        for sent in conllu.parse_incr(f):
            try:
                yield tokenlist_to_sentence(sent)
            except (KeyError, TypeError) as e:
                logger.warning("Skipping malformed CoNLL-U sentence: %s", e)
