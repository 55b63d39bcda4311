"""Tests for the in-memory sentence index and corpus loading."""

import json

import pytest

from causal_bootstrap.sentence_source import (
    InMemorySentenceIndex,
    Sentence,
    load_corpus,
    save_jsonl,
    tokenize,
)

from conftest import svo_graph, svo_sentence


def test_tokenize():
    assert tokenize("Heavy rain caused the flood.") == ["heavy", "rain", "caused", "the", "flood"]


def test_query_by_instance_requires_both_words(causal_index):
    texts = [s.text for s in causal_index.query_by_instance("rain", "flood")]
    assert texts == ["rain caused flood", "rain triggered flood"]
    assert causal_index.query_by_instance("rain", "cancer") == []


def test_query_by_instance_is_case_insensitive(causal_index):
    assert len(causal_index.query_by_instance("Earthquake", "TSUNAMI")) == 2


def test_query_by_instance_matches_phrases():
    index = InMemorySentenceIndex(
        [
            Sentence("air pollution caused asthma", svo_graph("pollution", "caused", "asthma")),
            Sentence("pollution in the air caused asthma", svo_graph("pollution", "caused", "asthma")),
        ]
    )
    texts = [s.text for s in index.query_by_instance("air pollution", "asthma")]
    assert texts == ["air pollution caused asthma"]


def test_query_by_pattern(causal_index):
    results = causal_index.query_by_pattern(["nsubj", "triggered/VBD", "dobj"])
    assert [s.text for s in results] == [
        "earthquake triggered tsunami",
        "smoking triggered cancer",
        "rain triggered flood",
    ]
    assert causal_index.query_by_pattern(["nsubj", "led/VBD"]) == []
    assert causal_index.query_by_pattern([]) == []


def test_jsonl_roundtrip(causal_corpus, tmp_path):
    path = tmp_path / "corpus" / "sentences.jsonl"
    assert save_jsonl(causal_corpus, path) == len(causal_corpus)

    index = InMemorySentenceIndex.from_jsonl(path)
    assert list(index) == causal_corpus


def test_jsonl_skips_bad_lines(tmp_path):
    good = svo_sentence("rain", "caused", "flood")
    path = tmp_path / "corpus.jsonl"
    path.write_text(
        "\n".join(
            [
                json.dumps(good._asdict()),
                "not json",
                json.dumps({"text": "missing graph"}),
                json.dumps({"text": "numeric graph", "graph": 123}),
                "",
            ]
        ),
        encoding="utf-8",
    )

    index = InMemorySentenceIndex.from_jsonl(path)
    assert len(index) == 1


def test_load_corpus_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_corpus(tmp_path / "missing.jsonl")

    path = tmp_path / "corpus.xml"
    path.write_text("<corpus/>", encoding="utf-8")
    with pytest.raises(ValueError):
        load_corpus(path, corpus_format="xml")
