"""Shared fixtures for the causal_bootstrap tests."""

from typing import List

import pytest

from causal_bootstrap.config import BootstrapConfig
from causal_bootstrap.sentence_source import InMemorySentenceIndex, Sentence


# "An earthquake in 1882 caused a regional tsunami."
EARTHQUAKE_GRAPH = """digraph  {
  N_1 [label="An/DT-1"];
  N_2 [label="earthquake/NN-2"];
  N_3 [label="in/IN-3"];
  N_4 [label="1882/CD-4"];
  N_5 [label="caused/VBD-5"];
  N_6 [label="a/DT-6"];
  N_7 [label="regional/JJ-7"];
  N_8 [label="tsunami/NN-8"];
  N_9 [label="./.-9"];
  N_2 -> N_1 [label="det"];
  N_2 -> N_4 [label="nmod:in"];
  N_4 -> N_3 [label="case"];
  N_5 -> N_2 [label="nsubj"];
  N_5 -> N_8 [label="dobj"];
  N_5 -> N_9 [label="punct"];
  N_8 -> N_6 [label="det"];
  N_8 -> N_7 [label="amod"];
}"""

CAUSED_PATTERN = "[[cause]]/N\t-nsubj\tcaused/VBD\t+dobj\t[[effect]]/N"


def svo_graph(subject: str, verb: str, obj: str, verb_tag: str = "VBD") -> str:
    """Graph text for a three-word "subject verb object" sentence."""
    return "\n".join(
        [
            "digraph  {",
            f'  N_1 [label="{subject}/NN-1"];',
            f'  N_2 [label="{verb}/{verb_tag}-2"];',
            f'  N_3 [label="{obj}/NN-3"];',
            '  N_2 -> N_1 [label="nsubj"];',
            '  N_2 -> N_3 [label="dobj"];',
            "}",
        ]
    )


def svo_sentence(subject: str, verb: str, obj: str) -> Sentence:
    return Sentence(f"{subject} {verb} {obj}", svo_graph(subject, verb, obj))


@pytest.fixture
def earthquake_graph() -> str:
    return EARTHQUAKE_GRAPH


@pytest.fixture
def causal_corpus() -> List[Sentence]:
    return [
        svo_sentence("earthquake", "caused", "tsunami"),
        svo_sentence("smoking", "caused", "cancer"),
        svo_sentence("earthquake", "triggered", "tsunami"),
        svo_sentence("smoking", "triggered", "cancer"),
        svo_sentence("rain", "caused", "flood"),
        svo_sentence("rain", "triggered", "flood"),
        svo_sentence("virus", "caused", "fever"),
    ]


@pytest.fixture
def causal_index(causal_corpus) -> InMemorySentenceIndex:
    return InMemorySentenceIndex(causal_corpus)


@pytest.fixture
def quiet_config() -> BootstrapConfig:
    return BootstrapConfig(iterations=2, max_workers=2, progress=False)
