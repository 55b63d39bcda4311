"""Generalized dependency-path patterns and their matching against graphs.

A pattern is a tab-separated sequence alternating node templates and edge
templates::

    [[cause]]/N    -nsubj    caused/VBD    +dobj    [[effect]]/N

Node templates are either an exact ``surface/POS`` token or a placeholder
(``[[cause]]/N``, ``[[effect]]/N``) that accepts any noun. Edge templates are
directed labels as stored in :class:`~causal_bootstrap.dep_graph.DepNode`.
"""

import re
from typing import List, Optional, Tuple

from .config import (
    CAUSE_PLACEHOLDER,
    EFFECT_PLACEHOLDER,
    MAX_PATTERN_TOKENS,
    NOUN_TAGS,
)
from .dep_graph import DepGraph, DepNode

INDICATOR_TOKEN = re.compile(r"^([a-z]+)/[A-Z]+$")


class PatternError(ValueError):
    """Raised when a string is not a well-formed path pattern."""


def is_placeholder(token: str) -> bool:
    return CAUSE_PLACEHOLDER in token or EFFECT_PLACEHOLDER in token


def is_noun(pos: str) -> bool:
    return pos in NOUN_TAGS


class PathPattern:
    """Immutable path pattern.

    Parameters
    ----------
    pattern : str
        Tab-separated pattern string

    Raises
    ------
    PatternError
        If the pattern is empty, does not alternate node and edge tokens,
        or is longer than ``MAX_PATTERN_TOKENS``
    """

    __slots__ = ("_pattern", "_tokens")

    def __init__(self, pattern: str):
        tokens = tuple(pattern.split("\t"))

        if not pattern or any(not t for t in tokens):
            raise PatternError(f"Empty token in pattern: {pattern!r}")
        if len(tokens) % 2 == 0:
            raise PatternError(f"Pattern must start and end with a node: {pattern!r}")
        if len(tokens) > MAX_PATTERN_TOKENS:
            raise PatternError(
                f"Pattern has {len(tokens)} tokens (max {MAX_PATTERN_TOKENS})"
            )
        for token in tokens[0::2]:
            if "/" not in token:
                raise PatternError(f"Node template without POS tag: {token!r}")
        for token in tokens[1::2]:
            if token[0] not in "+-" or len(token) < 2:
                raise PatternError(f"Edge template without direction: {token!r}")

        self._pattern = pattern
        self._tokens = tokens

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def tokens(self) -> Tuple[str, ...]:
        return self._tokens

    @property
    def node_count(self) -> int:
        return (len(self._tokens) + 1) // 2

    def __len__(self) -> int:
        return len(self._tokens)

    def __str__(self) -> str:
        return self._pattern

    def __repr__(self) -> str:
        return f"PathPattern({self._pattern!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathPattern):
            return NotImplemented
        return self._pattern == other._pattern

    def __hash__(self) -> int:
        return hash(self._pattern)

    def _position_of(self, placeholder: str) -> Optional[int]:
        for i, token in enumerate(self._tokens[0::2]):
            if placeholder in token:
                return i * 2
        return None

    @property
    def cause_position(self) -> Optional[int]:
        return self._position_of(CAUSE_PLACEHOLDER)

    @property
    def effect_position(self) -> Optional[int]:
        return self._position_of(EFFECT_PLACEHOLDER)

    @property
    def cause_first(self) -> bool:
        """Whether ``[[cause]]`` occurs before ``[[effect]]`` in the tokens."""
        cause = self.cause_position
        effect = self.effect_position
        if cause is None:
            return False
        return effect is None or cause < effect

    @property
    def indicator(self) -> Optional[str]:
        """Last plain lowercase word of the pattern (e.g. "caused")."""
        result = None
        for token in self._tokens[0::2]:
            match = INDICATOR_TOKEN.match(token)
            if match:
                result = match.group(1)
        return result

    def edge_label_query(self) -> List[str]:
        """Inner tokens with edge directions removed, for backend prefiltering."""
        terms = []
        for i in range(1, len(self._tokens) - 1):
            token = self._tokens[i]
            terms.append(token[1:] if i % 2 == 1 else token)
        return terms

    def node_matches(self, position: int, node: DepNode) -> bool:
        """Check a graph node against the node template at ``position``."""
        template = self._tokens[position]
        name, pos = template.rsplit("/", 1)

        if is_placeholder(name):
            return is_noun(node.pos)

        return pos == node.pos and name == node.surface

    def match(self, graph: DepGraph) -> List[Tuple[str, str]]:
        """Find all (cause, effect) surface pairs this pattern connects.

        Every node is tried as the start of a walk. A walk advances over an
        edge only when the node's directed incident label equals the edge
        template and the neighbor satisfies the next node template. Nodes are
        not revisited within one walk, so cyclic graphs terminate.

        Parameters
        ----------
        graph : DepGraph
            Parsed sentence graph

        Returns
        -------
        List[Tuple[str, str]]
            One pair per complete walk, ordered cause-first
        """
        matches = []
        last = len(self._tokens) - 1
        cause_first = self.cause_first

        for start in graph:
            if not self.node_matches(0, start):
                continue

            stack = [(start, 0, (start.node_id,))]
            while stack:
                node, position, visited = stack.pop()

                if position == last:
                    if node is start:
                        continue
                    if cause_first:
                        matches.append((start.surface, node.surface))
                    else:
                        matches.append((node.surface, start.surface))
                    continue

                edge = self._tokens[position + 1]
                branches = []
                for neighbor_id, label in node.edges.items():
                    if label != edge or neighbor_id in visited:
                        continue
                    neighbor = graph.get(neighbor_id)
                    if neighbor is None or not self.node_matches(position + 2, neighbor):
                        continue
                    branches.append(
                        (neighbor, position + 2, visited + (neighbor_id,))
                    )

                # Reversed so branches are explored in adjacency order
                stack.extend(reversed(branches))

        return matches

    def is_reverse_of(self, other: "PathPattern") -> bool:
        """Check whether ``other`` is this pattern read backwards.

        Node templates must be identical (any two placeholders correspond to
        each other), edge templates must carry the same label regardless of
        direction.
        """
        if len(self._tokens) != len(other._tokens):
            return False

        for i, token in enumerate(self._tokens):
            compare_to = other._tokens[-1 - i]

            if is_placeholder(token) and is_placeholder(compare_to):
                continue

            if i % 2 == 0:
                if token != compare_to:
                    return False
            elif token[1:] != compare_to[1:]:
                return False

        return True

    def is_palindrome(self) -> bool:
        return self.is_reverse_of(self)
