"""Shortest dependency path extraction and generalization.

Given a sentence graph and a seed instance, this module finds the shortest
path between the cause and effect tokens and turns it into a path pattern
by replacing the seed nouns with ``[[cause]]/N`` and ``[[effect]]/N``.
"""

import re
from collections import deque
from typing import Dict, List, Optional

from .config import CAUSE_PLACEHOLDER, EFFECT_PLACEHOLDER, NOUN_TAGS
from .dep_graph import DepGraph
from .instances import Instance

NOUN_TAG_GROUP = "|".join(sorted(NOUN_TAGS, key=len, reverse=True))


def shortest_path(
    graph: DepGraph, start_id: str, end_id: str
) -> Optional[List[str]]:
    """Breadth-first search between two nodes, ignoring edge direction.

    Neighbors are expanded in adjacency insertion order, so among several
    shortest paths the one found first in that order is returned.

    Parameters
    ----------
    graph : DepGraph
        Sentence graph
    start_id : str
        Node id of the path start
    end_id : str
        Node id of the path end

    Returns
    -------
    Optional[List[str]]
        Node ids from start to end, or None if the nodes are not connected
    """
    if start_id not in graph or end_id not in graph:
        return None

    predecessors: Dict[str, Optional[str]] = {start_id: None}
    queue = deque([start_id])

    while queue:
        node_id = queue.popleft()
        if node_id == end_id:
            break

        for neighbor_id in graph.adjacency(node_id):
            if neighbor_id in predecessors or neighbor_id not in graph:
                continue
            predecessors[neighbor_id] = node_id
            queue.append(neighbor_id)

    if end_id not in predecessors:
        return None

    path = []
    current: Optional[str] = end_id
    while current is not None:
        path.append(current)
        current = predecessors[current]
    path.reverse()
    return path


def serialize_path(graph: DepGraph, path: List[str]) -> str:
    """Render a node path as alternating ``surface/POS`` and label tokens."""
    parts = []
    for current, following in zip(path, path[1:]):
        parts.append(str(graph.get(current)))
        parts.append(graph.incident_label(current, following))
    parts.append(str(graph.get(path[-1])))
    return "\t".join(parts)


def _noun_token(word: str) -> "re.Pattern":
    return re.compile(
        r"(?<![^\t])" + re.escape(word) + r"/(?:" + NOUN_TAG_GROUP + r")(?![^\t])",
        re.IGNORECASE,
    )


def generalize(path: str, instance: Instance) -> str:
    """Replace the instance's noun tokens with cause/effect placeholders.

    Substitution is textual: every token of the path spelling the cause (or
    effect) with a noun tag is replaced, not only the path endpoints. Paths
    repeating a seed word thus end up with extra placeholders and are later
    rejected by the selection rules.

    Only whole tokens are replaced: ``rain`` turns ``rain/NN`` into a
    placeholder but leaves ``acidrain/NN`` and ``rainfall/NN`` untouched, where
    a plain substring replacement would produce ``acid[[cause]]/N``.
    """
    path = _noun_token(instance.cause).sub(CAUSE_PLACEHOLDER + "/N", path)
    return _noun_token(instance.effect).sub(EFFECT_PLACEHOLDER + "/N", path)


class PathExtractor:
    """Extract generalized path patterns for seed instances."""

    def find_path(self, graph: DepGraph, instance: Instance) -> Optional[List[str]]:
        """Locate the seed words in the graph and connect them.

        Returns None when either word is missing from the sentence, both
        resolve to the same token, or no path connects them.
        """
        cause_node = graph.node_by_surface(instance.cause)
        effect_node = graph.node_by_surface(instance.effect)

        if cause_node is None or effect_node is None or cause_node is effect_node:
            return None

        return shortest_path(graph, cause_node.node_id, effect_node.node_id)

    def extract(self, graph: DepGraph, instance: Instance) -> Optional[str]:
        """Extract the generalized pattern string for one sentence.

        Parameters
        ----------
        graph : DepGraph
            Parsed sentence
        instance : Instance
            Seed whose cause and effect should occur in the sentence

        Returns
        -------
        Optional[str]
            Generalized pattern, or None if no path was found
        """
        path = self.find_path(graph, instance)
        if path is None:
            return None

        return generalize(serialize_path(graph, path), instance)
