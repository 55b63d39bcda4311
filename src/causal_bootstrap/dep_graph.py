"""Dependency graph model for parsed sentences.

A sentence's dependency parse arrives as a DOT digraph, e.g. for
"An earthquake in 1882 caused a regional tsunami.":

    digraph  {
      N_1 [label="An/DT-1"];
      N_2 [label="earthquake/NN-2"];
      N_5 [label="caused/VBD-5"];
      N_8 [label="tsunami/NN-8"];
      N_5 -> N_2 [label="nsubj"];
      N_5 -> N_8 [label="dobj"];
    }

Each node keeps a single adjacency map whose values carry the edge
direction as a sign prefix ("+nsubj" outgoing, "-nsubj" incoming), so the
graph can be walked in both directions.
"""

import logging
import re
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

NODE_LINE = re.compile(r'^\s*([^\s\[\]]+)\s*\[\s*label\s*=\s*"(.*)"\s*\]\s*;?\s*$')
EDGE_LINE = re.compile(
    r'^\s*([^\s\[\]]+)\s*->\s*([^\s\[\]]+)\s*\[\s*label\s*=\s*"(.*)"\s*\]\s*;?\s*$'
)


class DepNode:
    """A token in a dependency graph.

    Parameters
    ----------
    node_id : str
        Identifier used by edge lines (e.g. "N_2")
    surface : str
        Token text; stored lowercased
    pos : str
        Part-of-speech tag (e.g. "NN")
    index : Optional[int]
        Token position in the sentence, when the label carries one
    """

    __slots__ = ("node_id", "surface", "pos", "index", "edges")

    def __init__(
        self, node_id: str, surface: str, pos: str, index: Optional[int] = None
    ):
        self.node_id = node_id
        self.surface = surface.lower()
        self.pos = pos
        self.index = index
        self.edges: Dict[str, str] = {}

    @classmethod
    def from_label(cls, node_id: str, label: str) -> "DepNode":
        """Build a node from a ``surface/POS-index`` label."""
        if "/" not in label:
            raise ValueError(f"Node label without POS tag: {label!r}")

        surface, tag = label.rsplit("/", 1)
        index = None
        if "-" in tag:
            pos, suffix = tag.rsplit("-", 1)
            if suffix.isdigit() and pos:
                tag, index = pos, int(suffix)

        if not surface or not tag:
            raise ValueError(f"Incomplete node label: {label!r}")

        return cls(node_id, surface, tag, index)

    def add_outgoing_edge(self, to: str, label: str) -> None:
        self.edges[to] = "+" + label

    def add_incoming_edge(self, source: str, label: str) -> None:
        self.edges[source] = "-" + label

    def __str__(self) -> str:
        return f"{self.surface}/{self.pos}"

    def __repr__(self) -> str:
        return f"DepNode({self.node_id!r}, {str(self)!r})"


class DepGraph:
    """Directed, labeled dependency graph of one sentence.

    Malformed lines are skipped one at a time; the rest of the graph stays
    usable. Nodes are kept in the order they were parsed.
    """

    def __init__(self, text: str = ""):
        self._nodes: Dict[str, DepNode] = {}
        self.skipped_lines = 0
        if text:
            self._parse(text)

    @classmethod
    def parse(cls, text: str) -> "DepGraph":
        return cls(text)

    def _parse(self, text: str) -> None:
        edge_lines = []

        for line in text.splitlines():
            stripped = line.strip()
            if not stripped or stripped in ("{", "}") or stripped.startswith("digraph"):
                continue

            edge = EDGE_LINE.match(stripped)
            if edge:
                edge_lines.append((stripped, edge))
                continue

            node = NODE_LINE.match(stripped)
            if node:
                self._add_node(stripped, node)
            else:
                self._skip(stripped)

        # Edges may reference nodes declared further down
        for line, edge in edge_lines:
            self._add_edge(line, edge)

    def _add_node(self, line: str, match: "re.Match") -> None:
        node_id, label = match.groups()
        try:
            node = DepNode.from_label(node_id, label)
        except ValueError:
            self._skip(line)
            return

        self._nodes[node_id] = node

    def _add_edge(self, line: str, match: "re.Match") -> None:
        source_id, target_id, label = match.groups()
        source = self._nodes.get(source_id)
        target = self._nodes.get(target_id)
        if source is None or target is None or not label:
            self._skip(line)
            return

        source.add_outgoing_edge(target_id, label)
        target.add_incoming_edge(source_id, label)

    def _skip(self, line: str) -> None:
        self.skipped_lines += 1
        logger.debug("Skipping malformed graph line: %s", line)

    def get(self, node_id: str) -> Optional[DepNode]:
        return self._nodes.get(node_id)

    def nodes(self) -> List[DepNode]:
        return list(self._nodes.values())

    def __iter__(self) -> Iterator[DepNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def node_by_surface(self, name: str) -> Optional[DepNode]:
        """Find a node by its surface text (case-insensitive).

        When a word occurs several times in the sentence, the occurrence with
        the lowest token index wins; nodes without an index rank after indexed
        ones, in parse order.
        """
        wanted = name.strip().lower()
        best = None
        best_key = None

        for order, node in enumerate(self._nodes.values()):
            if node.surface != wanted:
                continue
            key = (node.index is None, node.index or 0, order)
            if best_key is None or key < best_key:
                best, best_key = node, key

        return best

    def adjacency(self, node_id: str) -> List[str]:
        """Neighbor ids of a node in first-seen order (both directions)."""
        node = self._nodes.get(node_id)
        if node is None:
            return []
        return list(node.edges)

    def incident_label(self, from_id: str, to_id: str) -> Optional[str]:
        """Directed label of the edge between two nodes, seen from ``from_id``."""
        node = self._nodes.get(from_id)
        if node is None:
            return None
        return node.edges.get(to_id)

    def terms(self) -> List[str]:
        """Node tokens and plain edge labels, used for search indexing."""
        result = []
        for node in self._nodes.values():
            result.append(str(node))
            result.extend(label[1:] for label in node.edges.values() if label[0] == "+")
        return result
