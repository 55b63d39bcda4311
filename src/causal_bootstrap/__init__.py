"""Bootstrapped extraction of causal relations from dependency graphs.

This package grows a set of cause/effect noun pairs and a set of
dependency-path patterns by mutual bootstrapping.

The pipeline:
1. Find sentences mentioning each seed pair and extract the shortest
   dependency path between cause and effect
2. Generalize the paths into patterns and select the best-supported ones
3. Match the selected patterns against other sentences to find new pairs
4. Select the most frequent new pairs and add them to the seeds
5. Repeat for a fixed number of rounds
"""

__version__ = "1.0.0"

from .bootstrapper import BootstrapResult, Bootstrapper, RoundSummary
from .config import BootstrapConfig, ConfigError, load_config
from .dep_graph import DepGraph, DepNode
from .instances import ExtractedInstance, ExtractedPattern, Instance, load_seeds
from .path_extractor import PathExtractor, generalize, shortest_path
from .path_pattern import PathPattern, PatternError
from .selection import InstanceSelector, PatternSelectionRules, PatternSelector
from .sentence_source import InMemorySentenceIndex, Sentence, SentenceSource
from .statistics import InstanceStatistic, PatternStatistic

__all__ = [
    # Graph model & patterns
    "DepGraph",
    "DepNode",
    "PathPattern",
    "PatternError",
    "PathExtractor",
    "generalize",
    "shortest_path",
    # Records & statistics
    "Instance",
    "ExtractedPattern",
    "ExtractedInstance",
    "load_seeds",
    "PatternStatistic",
    "InstanceStatistic",
    # Selection
    "PatternSelectionRules",
    "PatternSelector",
    "InstanceSelector",
    # Bootstrapping
    "Bootstrapper",
    "BootstrapResult",
    "RoundSummary",
    "BootstrapConfig",
    "ConfigError",
    "load_config",
    # Sentence sources
    "Sentence",
    "SentenceSource",
    "InMemorySentenceIndex",
]
